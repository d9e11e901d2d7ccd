"""Unit tests for ChatService, the per-turn orchestration."""

import uuid

import pytest
from sqlalchemy.future import select

from app.domains.chat import prompts
from app.domains.chat.advisor import REPLY_FALLBACK
from app.domains.chat.service import ChatService
from app.exceptions.conversation import ConversationNotFoundError
from models.conversation import DEFAULT_CONVERSATION_TITLE
from models.message import Message, MessageRole


async def _messages(db, conversation_id):
    result = await db.execute(
        select(Message).where(Message.conversation_id == conversation_id).order_by(Message.created_at)
    )
    return list(result.scalars().all())


@pytest.fixture
def chat_service(test_db, fake_gateway):
    return ChatService(test_db, fake_gateway)


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_fresh_conversation_persists_one_turn(
        self, chat_service, test_db, test_user, test_conversation, fake_gateway
    ):
        response = await chat_service.send_message(
            test_conversation.id, test_user.id, "My order #55 never arrived"
        )

        stored = await _messages(test_db, test_conversation.id)
        assert [m.role for m in stored] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert stored[0].text == "My order #55 never arrived"
        assert stored[1].text == fake_gateway.reply
        assert response.user_message.id == stored[0].id
        assert response.assistant_message.text == fake_gateway.reply
        assert response.generation_succeeded is True
        assert response.suggest_escalation is False

    @pytest.mark.asyncio
    async def test_first_message_prompt_uses_placeholder(
        self, chat_service, test_user, test_conversation, fake_gateway
    ):
        await chat_service.send_message(test_conversation.id, test_user.id, "Hello there")

        reply_prompt = fake_gateway.prompts_of("reply")[0]
        assert prompts.NO_HISTORY_PLACEHOLDER in reply_prompt
        # The new message appears once, after the history block
        assert reply_prompt.count("Hello there") == 1

    @pytest.mark.asyncio
    async def test_two_messages_do_not_consult_escalation(
        self, chat_service, test_user, test_conversation, fake_gateway
    ):
        fake_gateway.escalation = "YES"

        response = await chat_service.send_message(test_conversation.id, test_user.id, "Help!")

        assert response.suggest_escalation is False
        assert fake_gateway.prompts_of("escalation") == []

    @pytest.mark.asyncio
    async def test_history_window_uses_most_recent_twenty(
        self, chat_service, test_user, test_conversation, fake_gateway, add_messages
    ):
        await add_messages(test_conversation, 25)

        await chat_service.send_message(test_conversation.id, test_user.id, "newest question")

        reply_prompt = fake_gateway.prompts_of("reply")[0]
        for i in range(5):
            assert f"history-{i:02d}" not in reply_prompt
        positions = [reply_prompt.index(f"history-{i:02d}") for i in range(5, 25)]
        assert positions == sorted(positions)
        assert reply_prompt.count("newest question") == 1

    @pytest.mark.asyncio
    async def test_title_is_set_once_and_preview_follows_latest(
        self, chat_service, test_db, test_user, test_conversation
    ):
        first = "A" * 60 + " my parcel is lost"
        second = "B" * 150

        await chat_service.send_message(test_conversation.id, test_user.id, first)
        await test_db.refresh(test_conversation)
        assert test_conversation.title == first[:50]
        assert test_conversation.preview == first[:100]

        await chat_service.send_message(test_conversation.id, test_user.id, second)
        await test_db.refresh(test_conversation)
        assert test_conversation.title == first[:50]
        assert test_conversation.preview == second[:100]
        assert len(test_conversation.preview) == 100

    @pytest.mark.asyncio
    async def test_custom_title_is_never_overwritten(
        self, chat_service, test_db, test_user, test_conversation
    ):
        test_conversation.title = "Billing question"
        await test_db.commit()

        await chat_service.send_message(test_conversation.id, test_user.id, "Why was I charged twice?")

        await test_db.refresh(test_conversation)
        assert test_conversation.title == "Billing question"
        assert test_conversation.title != DEFAULT_CONVERSATION_TITLE

    @pytest.mark.asyncio
    async def test_updated_at_is_refreshed(self, chat_service, test_db, test_user, test_conversation):
        before = test_conversation.updated_at

        await chat_service.send_message(test_conversation.id, test_user.id, "ping")

        await test_db.refresh(test_conversation)
        assert test_conversation.updated_at > before

    @pytest.mark.asyncio
    async def test_gateway_failure_returns_fallback_and_keeps_user_message(
        self, chat_service, test_db, test_user, test_conversation, fake_gateway
    ):
        fake_gateway.fail_on = {"all"}

        response = await chat_service.send_message(test_conversation.id, test_user.id, "Anyone there?")

        assert response.generation_succeeded is False
        assert response.assistant_message.text == REPLY_FALLBACK
        assert response.suggest_escalation is False
        stored = await _messages(test_db, test_conversation.id)
        assert [m.text for m in stored] == ["Anyone there?", REPLY_FALLBACK]
        assert stored[1].meta == {"fallback": True}
        assert stored[0].meta == {}

    @pytest.mark.asyncio
    async def test_blank_model_answer_stores_fallback(
        self, chat_service, test_db, test_user, test_conversation, fake_gateway
    ):
        fake_gateway.reply = "   \n "

        response = await chat_service.send_message(test_conversation.id, test_user.id, "Hello?")

        assert response.generation_succeeded is False
        stored = await _messages(test_db, test_conversation.id)
        assert stored[1].text == REPLY_FALLBACK
        assert stored[1].meta == {"fallback": True}

    @pytest.mark.asyncio
    async def test_third_turn_escalates_when_model_says_yes(
        self, chat_service, test_user, test_conversation, fake_gateway
    ):
        await chat_service.send_message(test_conversation.id, test_user.id, "My package is late.")
        await chat_service.send_message(test_conversation.id, test_user.id, "It's been two weeks!")
        fake_gateway.prompts.clear()
        fake_gateway.escalation = "YES"

        response = await chat_service.send_message(
            test_conversation.id, test_user.id, "This is ridiculous, I want a human NOW."
        )

        assert response.suggest_escalation is True
        escalation_prompt = fake_gateway.prompts_of("escalation")[0]
        assert escalation_prompt.index("My package is late.") < escalation_prompt.index(
            "This is ridiculous, I want a human NOW."
        )

    @pytest.mark.asyncio
    async def test_escalation_check_sees_only_last_ten(
        self, chat_service, test_user, test_conversation, fake_gateway, add_messages
    ):
        await add_messages(test_conversation, 12)

        await chat_service.send_message(test_conversation.id, test_user.id, "latest")

        escalation_prompt = fake_gateway.prompts_of("escalation")[0]
        # 14 messages exist; the window keeps history-04 .. history-11 plus the new turn
        assert "history-03" not in escalation_prompt
        assert "history-04" in escalation_prompt
        assert "Customer: latest" in escalation_prompt

    @pytest.mark.asyncio
    async def test_escalation_failure_is_not_suggested(
        self, chat_service, test_user, test_conversation, fake_gateway, add_messages
    ):
        await add_messages(test_conversation, 4)
        fake_gateway.fail_on = {"escalation"}

        response = await chat_service.send_message(test_conversation.id, test_user.id, "still broken")

        assert response.generation_succeeded is True
        assert response.suggest_escalation is False

    @pytest.mark.asyncio
    async def test_other_users_conversation_is_not_found(
        self, chat_service, test_db, test_user_2, test_conversation, fake_gateway
    ):
        with pytest.raises(ConversationNotFoundError):
            await chat_service.send_message(test_conversation.id, test_user_2.id, "sneaky")

        assert await _messages(test_db, test_conversation.id) == []
        assert fake_gateway.prompts == []

    @pytest.mark.asyncio
    async def test_unknown_conversation_is_not_found(self, chat_service, test_user):
        with pytest.raises(ConversationNotFoundError):
            await chat_service.send_message(uuid.uuid4(), test_user.id, "hello")
