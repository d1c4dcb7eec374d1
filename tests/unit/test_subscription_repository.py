from datetime import UTC, datetime
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from app.db.helpers import DatabaseError
from app.models.domain.errors import PersistenceError, ValidationError, status_code_for
from app.models.domain.subscriber_domain import NewSubscriber, SubscriberStatus
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.confirmation_service import ConfirmationService

MODULE = "app.repositories.subscription_repository"


def _row(status: str = "pending_confirmation", subscriber_id: UUID | None = None) -> dict:
    return {
        "id": subscriber_id or uuid4(),
        "email": "frank@test.com",
        "name": "Frank",
        "subscribed_at": datetime(2026, 1, 1, tzinfo=UTC),
        "status": status,
    }


@pytest.fixture
def db_repository():
    return SubscriptionRepository(db_pool=object())


@pytest.mark.asyncio
async def test_insert_subscriber_writes_pending_row(monkeypatch, db_repository):
    fetch_one_mock = AsyncMock(side_effect=lambda pool, query, params: _row(subscriber_id=params[0]))
    monkeypatch.setattr(f"{MODULE}.fetch_one", fetch_one_mock)

    subscriber = await db_repository.insert_subscriber(
        NewSubscriber.parse("Frank", "frank@test.com")
    )

    _, query, params = fetch_one_mock.await_args.args
    assert "INSERT INTO subscriptions" in query
    new_id, email, name, subscribed_at, status = params
    assert isinstance(new_id, UUID)
    assert (email, name, status) == ("frank@test.com", "Frank", "pending_confirmation")
    assert subscribed_at.tzinfo is not None
    assert subscriber.id == new_id
    assert subscriber.status is SubscriberStatus.PENDING


@pytest.mark.asyncio
async def test_insert_failure_is_persistence_error(monkeypatch, db_repository):
    monkeypatch.setattr(
        f"{MODULE}.fetch_one",
        AsyncMock(side_effect=DatabaseError("Query failed: boom", operation="fetch_one")),
    )

    with pytest.raises(PersistenceError) as exc_info:
        await db_repository.insert_subscriber(NewSubscriber.parse("Frank", "frank@test.com"))

    assert isinstance(exc_info.value.cause, DatabaseError)


@pytest.mark.asyncio
async def test_update_status_returns_updated_subscriber(monkeypatch, db_repository):
    subscriber_id = uuid4()
    fetch_one_mock = AsyncMock(return_value=_row("confirmed", subscriber_id))
    monkeypatch.setattr(f"{MODULE}.fetch_one", fetch_one_mock)

    subscriber = await db_repository.update_status(subscriber_id, SubscriberStatus.CONFIRMED)

    assert subscriber.status is SubscriberStatus.CONFIRMED
    assert fetch_one_mock.await_args.args[2] == ("confirmed", subscriber_id)


@pytest.mark.asyncio
async def test_update_status_of_missing_row_returns_none(monkeypatch, db_repository):
    monkeypatch.setattr(f"{MODULE}.fetch_one", AsyncMock(return_value=None))

    assert await db_repository.update_status(uuid4(), SubscriberStatus.CONFIRMED) is None


@pytest.mark.asyncio
async def test_select_confirmed_emails_skips_invalid_rows(monkeypatch, db_repository):
    fetch_all_mock = AsyncMock(return_value=[{"email": "anna@test.com"}, {"email": "broken"}])
    monkeypatch.setattr(f"{MODULE}.fetch_all", fetch_all_mock)

    emails = await db_repository.select_confirmed_emails()

    assert [str(e) for e in emails] == ["anna@test.com"]
    assert fetch_all_mock.await_args.args[2] == ("confirmed",)


@pytest.mark.asyncio
async def test_select_failure_is_persistence_error(monkeypatch, db_repository):
    monkeypatch.setattr(
        f"{MODULE}.fetch_all",
        AsyncMock(side_effect=DatabaseError("Query failed: boom", operation="fetch_all")),
    )

    with pytest.raises(PersistenceError):
        await db_repository.select_confirmed_emails()


@pytest.mark.asyncio
async def test_get_subscriber_returns_row(monkeypatch, db_repository):
    subscriber_id = uuid4()
    fetch_one_mock = AsyncMock(return_value=_row("confirmed", subscriber_id))
    monkeypatch.setattr(f"{MODULE}.fetch_one", fetch_one_mock)

    subscriber = await db_repository.get_subscriber(subscriber_id)

    assert subscriber.id == subscriber_id
    assert str(subscriber.email) == "frank@test.com"
    assert subscriber.status is SubscriberStatus.CONFIRMED
    _, query, params = fetch_one_mock.await_args.args
    assert "FROM subscriptions WHERE id = %s" in query
    assert params == (subscriber_id,)


@pytest.mark.asyncio
async def test_get_missing_subscriber_returns_none(monkeypatch, db_repository):
    monkeypatch.setattr(f"{MODULE}.fetch_one", AsyncMock(return_value=None))

    assert await db_repository.get_subscriber(uuid4()) is None


@pytest.mark.asyncio
async def test_get_subscriber_failure_is_persistence_error(monkeypatch, db_repository):
    monkeypatch.setattr(
        f"{MODULE}.fetch_one",
        AsyncMock(side_effect=DatabaseError("Query failed: boom", operation="fetch_one")),
    )

    with pytest.raises(PersistenceError):
        await db_repository.get_subscriber(uuid4())


@pytest.mark.asyncio
async def test_update_status_with_invalid_stored_name_is_persistence_error(
    monkeypatch, db_repository
):
    row = _row("confirmed") | {"name": "Frank (old)"}
    monkeypatch.setattr(f"{MODULE}.fetch_one", AsyncMock(return_value=row))

    with pytest.raises(PersistenceError) as exc_info:
        await db_repository.update_status(row["id"], SubscriberStatus.CONFIRMED)

    assert isinstance(exc_info.value.cause, ValidationError)


@pytest.mark.asyncio
async def test_get_subscriber_with_unknown_stored_status_is_persistence_error(
    monkeypatch, db_repository
):
    monkeypatch.setattr(f"{MODULE}.fetch_one", AsyncMock(return_value=_row("archived")))

    with pytest.raises(PersistenceError):
        await db_repository.get_subscriber(uuid4())


@pytest.mark.asyncio
async def test_confirm_with_invalid_stored_row_is_a_server_error(monkeypatch, db_repository, token_store):
    row = _row("confirmed") | {"name": "Frank (old)"}
    monkeypatch.setattr(f"{MODULE}.fetch_one", AsyncMock(return_value=row))
    await token_store.store_subscriber_id("tok", row["id"])
    service = ConfirmationService(repository=db_repository, token_store=token_store)

    with pytest.raises(PersistenceError) as exc_info:
        await service.confirm("tok")

    assert status_code_for(exc_info.value) == 500
