"""邮件通知服务测试（mock SMTP）。"""
import pytest
from unittest.mock import AsyncMock, patch

from app.core.config import Settings
from app.services.notification import (
    RESET_SUBJECT,
    VERIFICATION_SUBJECT,
    Mailer,
    reset_email_html,
    verification_email_html,
)


class TestMailer:
    async def test_send_ssl(self):
        mailer = Mailer("smtp.test.com", 465, username="bot@test.com", password="pw")
        with patch("app.services.notification.aiosmtplib.send", new_callable=AsyncMock) as send:
            await mailer.send_mail("a@test.com", VERIFICATION_SUBJECT, "<p>hi</p>")
        msg = send.call_args.args[0]
        kwargs = send.call_args.kwargs
        assert msg["To"] == "a@test.com"
        assert msg["From"] == "bot@test.com"
        assert msg["Subject"] == VERIFICATION_SUBJECT
        assert kwargs["use_tls"] is True
        assert kwargs["username"] == "bot@test.com"

    async def test_send_starttls_without_auth(self):
        mailer = Mailer("localhost", 587, use_ssl=False, sender="noreply@test.com")
        with patch("app.services.notification.aiosmtplib.send", new_callable=AsyncMock) as send:
            await mailer.send_mail("a@test.com", RESET_SUBJECT, "<p>hi</p>")
        kwargs = send.call_args.kwargs
        assert kwargs["start_tls"] is True
        assert "username" not in kwargs
        assert send.call_args.args[0]["From"] == "noreply@test.com"

    async def test_transport_error_propagates(self):
        mailer = Mailer("localhost", 25)
        with patch("app.services.notification.aiosmtplib.send",
                   new=AsyncMock(side_effect=ConnectionRefusedError())):
            with pytest.raises(ConnectionRefusedError):
                await mailer.send_mail("a@test.com", "x", "y")

    def test_from_settings(self):
        settings = Settings(smtp_host="mail.test.com", smtp_port=2525, smtp_user="u", smtp_ssl=False)
        mailer = Mailer.from_settings(settings)
        assert (mailer.host, mailer.port, mailer.use_ssl) == ("mail.test.com", 2525, False)


class TestTemplates:
    def test_verification_contains_token(self):
        html = verification_email_html("abc123")
        assert "abc123" in html
        assert "verify" in html.lower()

    def test_reset_contains_token(self):
        html = reset_email_html("def456")
        assert "def456" in html
        assert "reset" in html.lower()
