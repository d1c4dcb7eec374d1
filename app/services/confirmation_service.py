"""
Confirmation workflow: resolve a token and mark its subscriber confirmed.
"""

from app.infrastructure.observability.logging import get_logger
from app.models.domain.errors import NotFoundError
from app.models.domain.subscriber_domain import Subscriber, SubscriberStatus
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.token_store import TokenStore

logger = get_logger(__name__)


class ConfirmationService:
    def __init__(self, repository: SubscriptionRepository, token_store: TokenStore):
        self.repository = repository
        self.token_store = token_store

    async def confirm(self, token: str) -> Subscriber:
        """
        Confirm the subscriber a token was issued to.

        The status update is unconditional, so confirming twice succeeds both
        times and leaves the subscriber confirmed.

        Raises:
            NotFoundError: unknown token, malformed mapping or vanished subscriber
            TokenStoreError: token lookup failed
            PersistenceError: status update failed
        """
        subscriber_id = await self.token_store.get_subscriber_id(token)
        if subscriber_id is None:
            logger.info("Unknown confirmation token", token_preview=token[:6] + "...")
            raise NotFoundError("Unknown subscription token")

        subscriber = await self.repository.update_status(subscriber_id, SubscriberStatus.CONFIRMED)
        if subscriber is None:
            logger.warning(
                "Token points to a missing subscriber", subscriber_id=str(subscriber_id)
            )
            raise NotFoundError("Subscriber for token no longer exists")

        logger.info("Subscription confirmed", subscriber_id=str(subscriber.id))
        return subscriber
