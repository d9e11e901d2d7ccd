"""End-to-end support workflow: sign up, chat, escalate, clean up."""

import pytest


@pytest.mark.asyncio
async def test_full_support_workflow(client, fake_gateway, fake_notifier):
    # Sign up and log in
    register = await client.post(
        "/api/auth/register", json={"name": "Ana", "email": "ana@x.com", "password": "secret1"}
    )
    assert register.status_code == 201

    login = await client.post("/api/auth/login", json={"email": "ANA@x.com", "password": "secret1"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}

    # Start a conversation and describe the problem
    created = await client.post("/api/conversations", headers=headers)
    conversation_id = created.json()["data"]["conversation_id"]

    first = await client.post(
        "/api/chat/message",
        headers=headers,
        json={"conversation_id": conversation_id, "message": "My order #55 never arrived"},
    )
    assert first.json()["data"]["generation_succeeded"] is True
    assert first.json()["data"]["suggest_escalation"] is False

    # The model starts recommending a human on the second turn
    fake_gateway.escalation = "YES"
    second = await client.post(
        "/api/chat/message",
        headers=headers,
        json={"conversation_id": conversation_id, "message": "This is the third time I'm asking!"},
    )
    assert second.json()["data"]["suggest_escalation"] is True

    # The second reply prompt carries the first exchange
    reply_prompt = fake_gateway.prompts_of("reply")[-1]
    assert "Customer: My order #55 never arrived" in reply_prompt
    assert f"Assistant: {fake_gateway.reply}" in reply_prompt

    listing = await client.get("/api/conversations", headers=headers)
    conversation = listing.json()["data"]["conversations"][0]
    assert conversation["title"] == "My order #55 never arrived"
    assert conversation["preview"] == "This is the third time I'm asking!"

    # Hand off to a human
    escalation = await client.post(
        "/api/support/escalate",
        headers=headers,
        json={"conversation_id": conversation_id, "email": "ana@x.com", "notes": "angry customer"},
    )
    assert escalation.status_code == 200
    assert escalation.json()["data"]["status"] == "escalated"
    assert fake_notifier.kinds() == ["escalation_alert", "summary_copy"]
    summary_prompt = fake_gateway.prompts_of("summary")[0]
    assert "My order #55 never arrived" in summary_prompt

    messages = await client.get(f"/api/conversations/{conversation_id}/messages", headers=headers)
    assert [m["role"] for m in messages.json()["data"]] == ["user", "assistant", "user", "assistant"]

    # Clean up
    deleted = await client.delete(f"/api/conversations/{conversation_id}", headers=headers)
    assert deleted.status_code == 200

    gone = await client.get(f"/api/conversations/{conversation_id}/messages", headers=headers)
    assert gone.status_code == 404
    listing = await client.get("/api/conversations", headers=headers)
    assert listing.json()["data"]["conversations"] == []
