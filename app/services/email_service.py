"""Email service for password reset and escalation notifications."""

import html
import logging
from datetime import UTC, datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from app.core.config import settings
from app.schemas.support import NotificationResult

logger = logging.getLogger(__name__)

_STYLE = """
    body { font-family: 'Georgia', serif; color: #2B2B2B; }
    .container { max-width: 640px; margin: 0 auto; padding: 40px 20px; }
    .header { border-bottom: 2px solid #8B7355; padding-bottom: 20px; margin-bottom: 30px; }
    .title { font-size: 28px; margin: 0; }
    .section-title { font-size: 18px; color: #8B7355; margin-bottom: 10px; }
    .summary { background-color: #F7F4EF; padding: 20px; border-left: 3px solid #8B7355; line-height: 1.6; }
    .button { display: inline-block; background-color: #8B7355; color: white; padding: 12px 30px;
              text-decoration: none; border-radius: 4px; margin: 20px 0; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #D4CFC5; color: #4A4A4A; font-size: 14px; }
"""


def _as_html(text: str) -> str:
    """Escape free text and keep its line breaks."""
    return html.escape(text).replace("\n", "<br>")


def _wrap(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><style>{_STYLE}</style></head>
<body>
  <div class="container">
    <div class="header"><h1 class="title">{title}</h1></div>
    {body}
    <div class="footer"><p>Best regards,<br>The AI Support Team</p></div>
  </div>
</body>
</html>"""


class EmailService:
    """Service for sending emails via SMTP.

    Every public send returns a ``NotificationResult`` instead of raising so
    callers can report delivery problems without aborting their own work.
    """

    def __init__(
        self,
        smtp_host: str | None = None,
        smtp_port: int | None = None,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        from_email: str | None = None,
        support_team_email: str | None = None,
    ):
        """Initialize email service with SMTP configuration."""
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.email_from or self.smtp_user
        self.support_team_email = support_team_email or settings.support_team_email

    def _validate_config(self) -> bool:
        """Validate email configuration."""
        if not all([self.smtp_host, self.smtp_user, self.smtp_password]):
            logger.warning("Email service not configured properly")
            return False
        return True

    async def send_email(
        self,
        to_email: str | None,
        subject: str,
        html_content: str,
        text_content: str | None = None,
        kind: str = "generic",
    ) -> NotificationResult:
        """Send an email via SMTP.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            text_content: Plain text content (fallback)
            kind: Label for the notification, echoed in the result

        Returns:
            NotificationResult describing whether the email went out
        """
        if not to_email:
            logger.error(f"❌ No recipient for {kind} email")
            return NotificationResult(
                kind=kind, recipient=None, success=False, error="No recipient address"
            )

        if not self._validate_config():
            logger.error(f"Cannot send {kind} email - configuration invalid")
            return NotificationResult(
                kind=kind, recipient=to_email, success=False, error="Email service not configured"
            )

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email

        if text_content:
            msg.attach(MIMEText(text_content, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        try:
            logger.info(f"Sending {kind} email to {to_email} with subject: {subject}")

            async with aiosmtplib.SMTP(
                hostname=self.smtp_host, port=self.smtp_port, start_tls=True
            ) as server:
                await server.login(self.smtp_user, self.smtp_password)
                await server.send_message(msg)

            logger.info(f"✅ Email sent successfully to {to_email}")
            return NotificationResult(kind=kind, recipient=to_email, success=True)

        except aiosmtplib.SMTPAuthenticationError as e:
            logger.error(f"❌ SMTP authentication failed: {str(e)}")
            error = f"SMTP authentication failed: {str(e)}"
        except aiosmtplib.SMTPException as e:
            logger.error(f"❌ SMTP error sending email: {str(e)}")
            error = f"SMTP error: {str(e)}"
        except Exception as e:
            logger.error(f"❌ Unexpected error sending email: {str(e)}")
            error = str(e)

        return NotificationResult(kind=kind, recipient=to_email, success=False, error=error)

    async def send_password_reset(self, email: str, token: str) -> NotificationResult:
        """Send the password reset link for ``token`` to ``email``."""
        reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
        body = f"""
    <p>Hello,</p>
    <p>We received a request to reset your password. Click the button below to create a new password:</p>
    <a href="{html.escape(reset_url, quote=True)}" class="button">Reset Password</a>
    <p>If you didn't request this, please ignore this email. Your password will remain unchanged.</p>
    <p>This link will expire in {settings.password_reset_expire_minutes} minutes for security reasons.</p>"""
        text = (
            "We received a request to reset your password.\n\n"
            f"Reset it here: {reset_url}\n\n"
            "If you didn't request this, please ignore this email.\n"
        )
        return await self.send_email(
            email,
            "Password Reset Request - AI Support",
            _wrap("Password Reset", body),
            text,
            kind="password_reset",
        )

    async def send_escalation_alert(
        self,
        customer_email: str,
        summary: str,
        notes: str | None = None,
        internal_address: str | None = None,
    ) -> NotificationResult:
        """Alert the support team that ``customer_email`` needs a human."""
        sent_at = datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC")
        notes_html = (
            f'<div class="section-title">Additional Notes</div><p>{_as_html(notes)}</p>'
            if notes
            else ""
        )
        body = f"""
    <div class="section-title">Customer Information</div>
    <p><strong>Email:</strong> {html.escape(customer_email)}</p>
    <p><strong>Time:</strong> {sent_at}</p>
    <div class="section-title">Conversation Summary</div>
    <div class="summary">{_as_html(summary)}</div>
    {notes_html}
    <p><strong>Action Required:</strong> Please reach out to the customer at {html.escape(customer_email)} to resolve their issue.</p>"""
        text = f"Customer: {customer_email}\nTime: {sent_at}\n\nSummary:\n{summary}\n"
        if notes:
            text += f"\nNotes:\n{notes}\n"
        return await self.send_email(
            internal_address or self.support_team_email,
            f"Escalated Support Request from {customer_email}",
            _wrap("🚨 Escalated Support Request", body),
            text,
            kind="escalation_alert",
        )

    async def send_summary_copy(self, customer_email: str, summary: str) -> NotificationResult:
        """Send the customer a copy of their conversation summary."""
        body = f"""
    <p>Hello,</p>
    <p>Thank you for contacting our support team. Here's a summary of your recent conversation:</p>
    <div class="summary">{_as_html(summary)}</div>
    <p>Our support team will reach out to you shortly to assist with your request.</p>"""
        text = (
            "Thank you for contacting our support team. Here's a summary of your recent "
            f"conversation:\n\n{summary}\n\nOur support team will reach out to you shortly.\n"
        )
        return await self.send_email(
            customer_email,
            "Your Support Conversation Summary",
            _wrap("Conversation Summary", body),
            text,
            kind="summary_copy",
        )
