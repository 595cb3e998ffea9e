import logging

import httpx

from ..config import Config
from ..exceptions import ServerError

logger = logging.getLogger(__name__)


ACTIVATION_TEMPLATE = """
<p>
 Hi {name},<br>
 Welcome to Authors Haven. Please confirm your email address to activate your account.<br>
 <a href='{link}' target='_blank'>Activate account</a>
</p>
"""

RESET_TEMPLATE = """
<p>
 You are receiving this email because you requested a password reset for your authorhaven account,<br>
 Click on the reset link below to reset or ignore this message, if you didn't make password reset request<br>
 <a href='{link}' target='_blank'>Reset Password</a>
</p>
"""


class Mailer:
    """SendGrid v3 mail/send API로 HTML 메일을 보냅니다."""

    def __init__(self, config: Config):
        self.api_key = config.SENDGRID_API_KEY
        self.api_url = config.SENDGRID_API_URL
        self.sender = config.MAIL_FROM
        self.base_url = config.APP_BASE_URL.rstrip("/")
        self.timeout = config.MAIL_TIMEOUT_SECONDS

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            raise ServerError("Mail delivery is not configured")

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.sender},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"SendGrid timeout after {self.timeout} seconds (to={to})")
            raise ServerError("Failed to send email")
        except httpx.HTTPStatusError as e:
            logger.error(f"SendGrid HTTP error: {e.response.status_code} - {e.response.text}")
            raise ServerError("Failed to send email")
        except httpx.HTTPError as e:
            logger.error(f"SendGrid error: {e}")
            raise ServerError("Failed to send email")
        logger.info(f"Mail sent to {to}: {subject}")

    async def send_activation(self, *, name: str, user_id: int, email: str) -> None:
        link = f"{self.base_url}/activate/{user_id}"
        await self.send(email, "Activate your Authors Haven account", ACTIVATION_TEMPLATE.format(name=name, link=link))

    async def send_password_reset(self, *, email: str, token: str) -> None:
        link = f"{self.base_url}/update_password/{token}"
        await self.send(email, "Reset your Authors Haven password", RESET_TEMPLATE.format(link=link))
