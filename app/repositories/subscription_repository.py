"""
Persistence layer for subscribers (table ``subscriptions``).

Translates psycopg failures into PersistenceError so the workflows never see
driver exceptions.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from app.db.helpers import DatabaseError, fetch_all, fetch_one
from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger
from app.models.domain.errors import PersistenceError, ValidationError
from app.models.domain.subscriber_domain import (
    NewSubscriber,
    Subscriber,
    SubscriberEmail,
    SubscriberName,
    SubscriberStatus,
)

logger = get_logger(__name__)


class SubscriptionRepository:
    """CRUD helpers backing the subscription workflows."""

    SELECT_COLUMNS = "id, email, name, subscribed_at, status"

    def __init__(self, db_pool: DatabasePoolManager):
        self._db_pool = db_pool

    @staticmethod
    def _row_to_subscriber(row: dict | None) -> Subscriber | None:
        if not row:
            return None

        try:
            return Subscriber(
                id=row["id"],
                email=SubscriberEmail.parse(row["email"]),
                name=SubscriberName.parse(row["name"]),
                subscribed_at=row["subscribed_at"],
                status=SubscriberStatus.parse(row["status"]),
            )
        except ValidationError as e:
            # Stored data, not caller input: surfaces as a server error
            logger.error("Stored subscriber row is invalid", subscriber_id=str(row["id"]), error=e.message)
            raise PersistenceError("Stored subscriber row is invalid", cause=e) from e

    async def insert_subscriber(self, new_subscriber: NewSubscriber) -> Subscriber:
        """Insert a pending subscriber with a fresh id and return the stored row."""
        query = f"""
            INSERT INTO subscriptions (id, email, name, subscribed_at, status)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {self.SELECT_COLUMNS}
        """
        params = (
            uuid4(),
            str(new_subscriber.email),
            str(new_subscriber.name),
            datetime.now(UTC),
            SubscriberStatus.PENDING.encode(),
        )

        try:
            row = await fetch_one(self._db_pool, query, params)
        except DatabaseError as e:
            raise PersistenceError("Failed to insert new subscriber", cause=e) from e

        if not row:
            raise PersistenceError("Insert returned no row")

        subscriber = self._row_to_subscriber(row)
        logger.info("Subscriber inserted", subscriber_id=str(subscriber.id))
        return subscriber

    async def update_status(self, subscriber_id: UUID, status: SubscriberStatus) -> Subscriber | None:
        """
        Set the status unconditionally.

        Returns the updated subscriber, or None when no row has that id.
        """
        query = f"""
            UPDATE subscriptions
            SET status = %s
            WHERE id = %s
            RETURNING {self.SELECT_COLUMNS}
        """

        try:
            row = await fetch_one(self._db_pool, query, (status.encode(), subscriber_id))
        except DatabaseError as e:
            raise PersistenceError("Failed to update subscriber status", cause=e) from e

        return self._row_to_subscriber(row)

    async def get_subscriber(self, subscriber_id: UUID) -> Subscriber | None:
        query = f"SELECT {self.SELECT_COLUMNS} FROM subscriptions WHERE id = %s"

        try:
            row = await fetch_one(self._db_pool, query, (subscriber_id,))
        except DatabaseError as e:
            raise PersistenceError("Failed to load subscriber", cause=e) from e

        return self._row_to_subscriber(row)

    async def select_confirmed_emails(self) -> list[SubscriberEmail]:
        """Emails of every confirmed subscriber. Rows with an invalid stored email are skipped."""
        query = "SELECT email FROM subscriptions WHERE status = %s"

        try:
            rows = await fetch_all(self._db_pool, query, (SubscriberStatus.CONFIRMED.encode(),))
        except DatabaseError as e:
            raise PersistenceError("Failed to get confirmed subscribers", cause=e) from e

        emails = []
        for row in rows:
            try:
                emails.append(SubscriberEmail.parse(row["email"]))
            except ValidationError as e:
                logger.warning("Skipping confirmed subscriber with invalid email", error=e.message)
        return emails
