from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.domain.errors import PersistenceError
from app.models.domain.subscriber_domain import (
    NewSubscriber,
    Subscriber,
    SubscriberEmail,
    SubscriberStatus,
)
from app.routes.dependencies import get_email_client, get_repository, get_token_store
from app.services.email_client import EmailClientError
from app.services.infrastructure.redis_client import RedisClientError
from app.services.token_store import TokenStore


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.fail = False

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> bool:
        if self.fail:
            raise RedisClientError("connection refused")
        self.store[key] = value
        return True

    async def get(self, key: str) -> str | None:
        if self.fail:
            raise RedisClientError("connection refused")
        return self.store.get(key)


class FakeSubscriptionRepository:
    """In-memory stand-in for SubscriptionRepository."""

    def __init__(self):
        self.rows: dict[UUID, Subscriber] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise PersistenceError("Database unavailable")

    async def insert_subscriber(self, new_subscriber: NewSubscriber) -> Subscriber:
        self._check()
        subscriber = Subscriber(
            id=uuid4(),
            email=new_subscriber.email,
            name=new_subscriber.name,
            status=SubscriberStatus.PENDING,
            subscribed_at=datetime.now(UTC),
        )
        self.rows[subscriber.id] = subscriber
        return subscriber

    async def update_status(self, subscriber_id: UUID, status: SubscriberStatus):
        self._check()
        current = self.rows.get(subscriber_id)
        if current is None:
            return None
        updated = current.model_copy(update={"status": status})
        self.rows[subscriber_id] = updated
        return updated

    async def get_subscriber(self, subscriber_id: UUID):
        self._check()
        return self.rows.get(subscriber_id)

    async def select_confirmed_emails(self) -> list[SubscriberEmail]:
        self._check()
        return [row.email for row in self.rows.values() if row.status.is_confirmed()]


class FakeEmailClient:
    """Records every send instead of calling the provider."""

    def __init__(self):
        self.sent: list[tuple[list[SubscriberEmail], str, str]] = []
        self.fail = False

    async def send(self, recipients, subject: str, html_body: str) -> None:
        if self.fail:
            raise EmailClientError("Email provider answered 500", status_code=500)
        self.sent.append((list(recipients), subject, html_body))

    async def send_email(self, recipient, subject: str, html_body: str) -> None:
        await self.send([recipient], subject, html_body)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def token_store(fake_redis):
    return TokenStore(fake_redis)


@pytest.fixture
def repository():
    return FakeSubscriptionRepository()


@pytest.fixture
def email_client():
    return FakeEmailClient()


@pytest.fixture
def client(repository, token_store, email_client):
    """TestClient wired to in-memory adapters; lifespan is not run."""
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_token_store] = lambda: token_store
    app.dependency_overrides[get_email_client] = lambda: email_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
