"""Unit tests for EmailService with a mocked SMTP client."""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from app.services.email_service import EmailService


def _service(**overrides):
    config = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "mailer@example.com",
        "smtp_password": "secret",
        "from_email": "support-bot@example.com",
        "support_team_email": "team@example.com",
    }
    config.update(overrides)
    return EmailService(**config)


def _html_part(message) -> str:
    for part in message.get_payload():
        if part.get_content_type() == "text/html":
            return part.get_payload(decode=True).decode("utf-8")
    raise AssertionError("no html part")


@pytest.fixture
def smtp_server():
    with patch("app.services.email_service.aiosmtplib.SMTP") as mock_smtp:
        server = AsyncMock()
        mock_smtp.return_value.__aenter__.return_value = server
        yield mock_smtp, server


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_send_email_success(self, smtp_server):
        mock_smtp, server = smtp_server

        result = await _service().send_email("ana@x.com", "Hello", "<p>Hi</p>", "Hi", kind="test")

        assert result.success is True
        assert result.recipient == "ana@x.com"
        assert result.kind == "test"
        mock_smtp.assert_called_once_with(hostname="smtp.example.com", port=587, start_tls=True)
        server.login.assert_awaited_once_with("mailer@example.com", "secret")
        sent = server.send_message.call_args[0][0]
        assert sent["To"] == "ana@x.com"
        assert sent["From"] == "support-bot@example.com"

    @pytest.mark.asyncio
    async def test_unconfigured_service_reports_failure(self, smtp_server):
        mock_smtp, _ = smtp_server

        result = await _service(smtp_host="").send_email("ana@x.com", "Hello", "<p>Hi</p>")

        assert result.success is False
        assert result.error == "Email service not configured"
        mock_smtp.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_recipient_reports_failure(self, smtp_server):
        result = await _service().send_email(None, "Hello", "<p>Hi</p>")

        assert result.success is False
        assert result.recipient is None

    @pytest.mark.asyncio
    async def test_smtp_error_is_reported_not_raised(self, smtp_server):
        _, server = smtp_server
        server.send_message.side_effect = aiosmtplib.SMTPException("relay refused")

        result = await _service().send_email("ana@x.com", "Hello", "<p>Hi</p>")

        assert result.success is False
        assert "relay refused" in result.error


class TestNotifications:
    @pytest.mark.asyncio
    async def test_escalation_alert_goes_to_support_team(self, smtp_server):
        _, server = smtp_server

        result = await _service().send_escalation_alert(
            "ana@x.com", "Order #55 <missing>", notes="angry customer"
        )

        assert result.success is True
        assert result.kind == "escalation_alert"
        assert result.recipient == "team@example.com"
        sent = server.send_message.call_args[0][0]
        assert sent["Subject"] == "Escalated Support Request from ana@x.com"
        body = _html_part(sent)
        assert "Order #55 &lt;missing&gt;" in body
        assert "angry customer" in body

    @pytest.mark.asyncio
    async def test_escalation_alert_explicit_address(self, smtp_server):
        result = await _service().send_escalation_alert(
            "ana@x.com", "summary", internal_address="oncall@example.com"
        )

        assert result.recipient == "oncall@example.com"

    @pytest.mark.asyncio
    async def test_escalation_alert_without_team_address_fails(self, smtp_server):
        mock_smtp, _ = smtp_server
        service = _service()
        service.support_team_email = None

        result = await service.send_escalation_alert("ana@x.com", "summary")

        assert result.success is False
        mock_smtp.assert_not_called()

    @pytest.mark.asyncio
    async def test_summary_copy_goes_to_customer(self, smtp_server):
        _, server = smtp_server

        result = await _service().send_summary_copy("ana@x.com", "Line one\nLine two")

        assert result.kind == "summary_copy"
        assert result.recipient == "ana@x.com"
        assert "Line one<br>Line two" in _html_part(server.send_message.call_args[0][0])

    @pytest.mark.asyncio
    async def test_password_reset_contains_link(self, smtp_server):
        _, server = smtp_server

        result = await _service().send_password_reset("ana@x.com", "abc.def.ghi")

        assert result.kind == "password_reset"
        assert "/reset-password?token=abc.def.ghi" in _html_part(server.send_message.call_args[0][0])
