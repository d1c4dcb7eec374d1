"""
Newsletter broadcast workflow.

Sends one issue to every confirmed subscriber. Recipients go out in batches of
at most ``max_recipients_per_request``; each batch is a single provider call and
the first failing batch aborts the broadcast.
"""

from app.infrastructure.observability.logging import get_logger
from app.models.domain.errors import EmailDeliveryError
from app.models.domain.subscriber_domain import NewsletterIssue, SubscriberEmail
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.email_client import EmailClient, EmailClientError

logger = get_logger(__name__)

DEFAULT_MAX_RECIPIENTS_PER_REQUEST = 1000


def chunk_recipients(
    recipients: list[SubscriberEmail], size: int
) -> list[list[SubscriberEmail]]:
    if size < 1:
        raise ValueError("Batch size must be positive")
    return [recipients[i : i + size] for i in range(0, len(recipients), size)]


class NewsletterService:
    def __init__(
        self,
        repository: SubscriptionRepository,
        email_client: EmailClient,
        max_recipients_per_request: int = DEFAULT_MAX_RECIPIENTS_PER_REQUEST,
    ):
        self.repository = repository
        self.email_client = email_client
        self.max_recipients_per_request = max_recipients_per_request

    async def broadcast(self, issue: NewsletterIssue) -> None:
        """
        Deliver an issue to all confirmed subscribers.

        Raises:
            ValidationError: empty title or html
            PersistenceError: confirmed subscribers could not be read
            EmailDeliveryError: a batch was rejected by the provider
        """
        issue.validate()

        recipients = await self.repository.select_confirmed_emails()
        if not recipients:
            logger.info("No confirmed subscribers, nothing to send", title=issue.title)
            return

        batches = chunk_recipients(recipients, self.max_recipients_per_request)
        for index, batch in enumerate(batches):
            try:
                await self.email_client.send(batch, issue.title, issue.html)
            except EmailClientError as e:
                logger.error(
                    "Newsletter batch failed, aborting broadcast",
                    title=issue.title,
                    batches_delivered=index,
                    batches_total=len(batches),
                    error=str(e),
                )
                raise EmailDeliveryError("Failed to send newsletter", cause=e) from e

        logger.info(
            "Newsletter broadcast",
            title=issue.title,
            recipients=len(recipients),
            batches=len(batches),
        )
