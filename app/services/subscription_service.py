"""
Subscription creation workflow.

validate -> insert pending subscriber -> issue token -> store token mapping
-> send confirmation email.

Steps commit independently. A failure after the insert leaves a pending
subscriber behind; it is logged with the subscriber id and not rolled back.
"""

from app.infrastructure.observability.logging import get_logger
from app.models.domain.errors import EmailDeliveryError, TokenStoreError
from app.models.domain.subscriber_domain import NewSubscriber, Subscriber
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.email_client import EmailClient, EmailClientError
from app.services.token_store import TokenStore, generate_subscription_token

logger = get_logger(__name__)

CONFIRMATION_SUBJECT = "Welcome to our newsletter"
CONFIRMATION_PATH = "/subscriptions/confirm"

CONFIRMATION_TEMPLATE = """
<div>
    <h1>Welcome to our newsletter!</h1>
    <p>Click <a href="{link}">here</a> to confirm your subscription!</p>
</div>
"""


def build_confirmation_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}{CONFIRMATION_PATH}?token={token}"


def render_confirmation_email(confirmation_link: str) -> str:
    return CONFIRMATION_TEMPLATE.format(link=confirmation_link)


class SubscriptionService:
    """Creates pending subscribers and sends their confirmation email."""

    def __init__(
        self,
        repository: SubscriptionRepository,
        token_store: TokenStore,
        email_client: EmailClient,
        base_url: str,
    ):
        self.repository = repository
        self.token_store = token_store
        self.email_client = email_client
        self.base_url = base_url

    async def create_subscription(self, name: str, email: str) -> Subscriber:
        """
        Register a new pending subscriber.

        Raises:
            ValidationError: name or email rejected, nothing was written
            PersistenceError: subscriber row could not be inserted
            TokenStoreError: token mapping could not be stored
            EmailDeliveryError: confirmation email could not be sent
        """
        new_subscriber = NewSubscriber.parse(name, email)

        subscriber = await self.repository.insert_subscriber(new_subscriber)

        token = generate_subscription_token()
        try:
            await self.token_store.store_subscriber_id(token, subscriber.id)
        except TokenStoreError:
            logger.error(
                "Pending subscriber left without a token",
                subscriber_id=str(subscriber.id),
            )
            raise

        await self._send_confirmation_email(subscriber, token)

        logger.info("Subscription created", subscriber_id=str(subscriber.id))
        return subscriber

    async def _send_confirmation_email(self, subscriber: Subscriber, token: str) -> None:
        confirmation_link = build_confirmation_link(self.base_url, token)
        html_body = render_confirmation_email(confirmation_link)

        try:
            await self.email_client.send_email(subscriber.email, CONFIRMATION_SUBJECT, html_body)
        except EmailClientError as e:
            logger.error(
                "Failed to send confirmation email",
                subscriber_id=str(subscriber.id),
                error=str(e),
            )
            raise EmailDeliveryError(
                "Failed to send a confirmation email to a new subscriber", cause=e
            ) from e
