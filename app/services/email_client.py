"""
Email provider client.
Sends HTML email through a SendGrid-compatible ``/mail/send`` HTTP API.
"""

from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import SecretStr

from app.infrastructure.observability.logging import get_logger
from app.models.domain.subscriber_domain import SubscriberEmail

logger = get_logger(__name__)

REQUEST_TIMEOUT = 10.0  # seconds
SEND_PATH = "/mail/send"


class EmailClientError(Exception):
    """Raised when the provider call fails or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def build_send_body(
    sender: SubscriberEmail,
    recipients: Sequence[SubscriberEmail],
    subject: str,
    html_body: str,
) -> dict[str, Any]:
    """Provider payload; one personalization per recipient keeps addresses private."""
    return {
        "personalizations": [{"to": [{"email": str(recipient)}]} for recipient in recipients],
        "from": {"email": str(sender)},
        "subject": subject,
        "content": [{"content_type": "text/html", "value": html_body}],
    }


class EmailClient:
    """
    Async client for the outbound email provider.

    A single POST per send, fixed timeout, no retries. Any transport error or
    non-2xx answer raises EmailClientError.
    """

    def __init__(
        self,
        base_url: str,
        sender: SubscriberEmail,
        api_key: SecretStr,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or REQUEST_TIMEOUT),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _get_auth_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def send(
        self, recipients: Sequence[SubscriberEmail], subject: str, html_body: str
    ) -> None:
        """
        Send one message to every recipient in a single provider call.

        Args:
            recipients: Validated recipient addresses
            subject: Message subject
            html_body: HTML content, sent as-is

        Raises:
            EmailClientError: On timeout, connection failure or non-2xx status
        """
        url = f"{self.base_url}{SEND_PATH}"
        body = build_send_body(self.sender, recipients, subject, html_body)

        try:
            response = await self._client.post(url, json=body, headers=self._get_auth_headers())
        except httpx.TimeoutException as e:
            logger.error("Email provider request timed out", recipients=len(recipients))
            raise EmailClientError(f"Email provider timed out: {e}") from e
        except httpx.RequestError as e:
            logger.error(
                "Email provider request failed",
                recipients=len(recipients),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmailClientError(f"Email provider request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Email provider rejected request",
                status_code=response.status_code,
                recipients=len(recipients),
            )
            raise EmailClientError(
                f"Email provider answered {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("Email accepted by provider", recipients=len(recipients))

    async def send_email(self, recipient: SubscriberEmail, subject: str, html_body: str) -> None:
        """Send to a single recipient."""
        await self.send([recipient], subject, html_body)
