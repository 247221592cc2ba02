"""
Email service for delivering verification codes.

Supports SMTP, Resend API, and console logging modes. Sending never
raises: failures are logged and reported in the returned dict.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
import httpx

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"

VERIFICATION_SUBJECT = "Confirm Your Registration"


class EmailService:
    """
    Email service with multi-mode support.

    Modes:
        - console: Log emails (development)
        - smtp: Send via SMTP
        - resend: Send via Resend HTTP API
    """

    def __init__(
        self,
        mode: str = "console",
        from_email: str = "noreply@example.com",
        from_name: str = "Account Service",
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        resend_api_key: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize email service.

        Args:
            mode: "console", "smtp", or "resend"
            from_email: Sender email address
            from_name: Sender display name
            smtp_host: SMTP server host
            smtp_port: SMTP server port (465 = implicit TLS, otherwise STARTTLS)
            smtp_user: SMTP username
            smtp_password: SMTP password
            resend_api_key: Resend API key
            timeout: Seconds to wait on the mail provider
        """
        self._mode = mode
        self._from_email = from_email
        self._from_name = from_name
        self._smtp_host = smtp_host
        self._smtp_port = smtp_port
        self._smtp_user = smtp_user
        self._smtp_password = smtp_password
        self._resend_api_key = resend_api_key
        self._timeout = timeout

        if self._mode == "resend" and not self._resend_api_key:
            logger.warning("Resend API key not configured, falling back to console mode")
            self._mode = "console"
        elif self._mode == "smtp" and not self._smtp_host:
            logger.warning("SMTP host not configured, falling back to console mode")
            self._mode = "console"

        logger.info(f"Email service initialized in {self._mode} mode")

    @property
    def mode(self) -> str:
        return self._mode

    async def send_verification_code(
        self,
        to_email: str,
        code: int,
        first_name: Optional[str] = None,
    ) -> dict:
        """
        Send the registration verification code.

        Args:
            to_email: Recipient email address
            code: Six-digit verification code
            first_name: Recipient's first name (optional)

        Returns:
            dict with success status and message
        """
        name = first_name or "there"

        text_content = (
            f"Hi {name},\n\n"
            f"Your verification code is {code}\n\n"
            "Enter this code to confirm your registration. "
            "If you didn't create an account, you can safely ignore this email.\n"
        )

        html_content = f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="margin: 0; padding: 20px; font-family: Arial, Helvetica, sans-serif; color: #333333;">
    <p style="font-size: 16px;">Hi {name},</p>
    <p style="font-size: 16px;">Your verification code is</p>
    <p style="font-size: 28px; font-weight: 600; letter-spacing: 4px;">{code}</p>
    <p style="font-size: 14px; color: #666666;">If you didn't create an account, you can safely ignore this email.</p>
</body>
</html>
"""

        return await self._send(
            to=to_email,
            subject=VERIFICATION_SUBJECT,
            html=html_content,
            text=text_content,
        )

    async def _send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """
        Send email via configured provider.

        Returns:
            dict with success status and details
        """
        if self._mode == "console":
            return self._send_console(to, subject, text)
        elif self._mode == "smtp":
            return await self._send_smtp(to, subject, html, text)
        elif self._mode == "resend":
            return await self._send_resend(to, subject, html, text)
        else:
            logger.error(f"Unknown email mode: {self._mode}")
            return {"success": False, "error": f"Unknown email mode: {self._mode}"}

    def _send_console(self, to: str, subject: str, text: str) -> dict:
        """Log email (development mode)."""
        logger.info("=" * 60)
        logger.info("EMAIL (console mode)")
        logger.info(f"To: {to}")
        logger.info(f"Subject: {subject}")
        logger.info("-" * 60)
        logger.info(text)
        logger.info("=" * 60)

        return {
            "success": True,
            "mode": "console",
            "message": "Email logged to console",
        }

    async def _send_smtp(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Send email via SMTP."""
        try:
            message = MIMEMultipart("alternative")
            message["Subject"] = subject
            message["From"] = f"{self._from_name} <{self._from_email}>"
            message["To"] = to
            message.attach(MIMEText(text, "plain"))
            message.attach(MIMEText(html, "html"))

            use_tls = self._smtp_port == 465

            await aiosmtplib.send(
                message,
                hostname=self._smtp_host,
                port=self._smtp_port,
                username=self._smtp_user,
                password=self._smtp_password,
                use_tls=use_tls,
                start_tls=not use_tls,
                timeout=self._timeout,
            )

            logger.info(f"Email sent via SMTP to {to}")
            return {
                "success": True,
                "mode": "smtp",
                "message": "Email sent via SMTP",
            }

        except Exception as e:
            logger.error(f"Failed to send email via SMTP: {e}")
            return {
                "success": False,
                "error": str(e),
            }

    async def _send_resend(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Send email via Resend API."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(
                    RESEND_API_URL,
                    headers={
                        "Authorization": f"Bearer {self._resend_api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": f"{self._from_name} <{self._from_email}>",
                        "to": [to],
                        "subject": subject,
                        "html": html,
                        "text": text,
                    },
                )

                if response.status_code == 200:
                    data = response.json()
                    logger.info(f"Email sent via Resend to {to}")
                    return {
                        "success": True,
                        "mode": "resend",
                        "messageId": data.get("id"),
                    }

                error_msg = response.json().get("message", "Unknown error")
                logger.error(f"Resend API error: {error_msg}")
                return {
                    "success": False,
                    "error": error_msg,
                }

            except Exception as e:
                logger.error(f"Failed to send email via Resend: {e}")
                return {
                    "success": False,
                    "error": str(e),
                }
