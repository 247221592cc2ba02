"""Unit tests for EmailService delivery modes."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from accounts.config import Settings
from accounts.dependencies import build_email_service
from accounts.services.email_service import EmailService, VERIFICATION_SUBJECT


class TestModeSelection:
    def test_console_default(self):
        assert EmailService().mode == "console"

    def test_smtp_without_host_falls_back_to_console(self):
        assert EmailService(mode="smtp").mode == "console"

    def test_resend_without_key_falls_back_to_console(self):
        assert EmailService(mode="resend").mode == "console"

    def test_smtp_with_host(self):
        assert EmailService(mode="smtp", smtp_host="smtp.example.com").mode == "smtp"

    def test_built_from_settings(self):
        settings = Settings(
            JWT_SECRET="x",
            EMAIL_MODE="smtp",
            SMTP_HOST="smtp.gmail.com",
            SMTP_USER="sender@example.com",
            SMTP_PASSWORD="app-password",
        )
        service = build_email_service(settings)
        assert service.mode == "smtp"
        assert service._from_email == "sender@example.com"


class TestConsoleMode:
    @pytest.mark.asyncio
    async def test_logs_code(self, caplog):
        service = EmailService()

        with caplog.at_level("INFO", logger="accounts.services.email_service"):
            result = await service.send_verification_code("ana@example.com", 123456, "Ana")

        assert result["success"] is True
        assert result["mode"] == "console"
        assert "Your verification code is 123456" in caplog.text
        assert VERIFICATION_SUBJECT in caplog.text


class TestSmtpMode:
    @pytest.fixture
    def smtp_service(self):
        return EmailService(
            mode="smtp",
            from_email="noreply@example.com",
            smtp_host="smtp.example.com",
            smtp_port=587,
            smtp_user="user",
            smtp_password="secret",
            timeout=5.0,
        )

    @pytest.mark.asyncio
    async def test_sends_via_aiosmtplib(self, smtp_service):
        with patch("accounts.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            result = await smtp_service.send_verification_code("ana@example.com", 654321)

        assert result["success"] is True
        message = send.call_args[0][0]
        assert message["To"] == "ana@example.com"
        assert message["Subject"] == "Confirm Your Registration"
        kwargs = send.call_args[1]
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["start_tls"] is True
        assert kwargs["use_tls"] is False
        assert kwargs["timeout"] == 5.0

    @pytest.mark.asyncio
    async def test_implicit_tls_on_465(self):
        service = EmailService(mode="smtp", smtp_host="smtp.example.com", smtp_port=465)
        with patch("accounts.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            await service.send_verification_code("ana@example.com", 654321)

        assert send.call_args[1]["use_tls"] is True
        assert send.call_args[1]["start_tls"] is False

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, smtp_service):
        failing = AsyncMock(side_effect=ConnectionRefusedError("connection refused"))
        with patch("accounts.services.email_service.aiosmtplib.send", new=failing):
            result = await smtp_service.send_verification_code("ana@example.com", 654321)

        assert result["success"] is False
        assert "connection refused" in result["error"]


class TestResendMode:
    @pytest.mark.asyncio
    async def test_posts_to_resend(self):
        service = EmailService(mode="resend", resend_api_key="re_test")
        response = MagicMock(status_code=200)
        response.json.return_value = {"id": "email_123"}

        client = AsyncMock()
        client.post.return_value = response
        client.__aenter__.return_value = client

        with patch("accounts.services.email_service.httpx.AsyncClient", return_value=client):
            result = await service.send_verification_code("ana@example.com", 654321)

        assert result == {"success": True, "mode": "resend", "messageId": "email_123"}
        payload = client.post.call_args[1]["json"]
        assert payload["to"] == ["ana@example.com"]
        assert "654321" in payload["text"]
