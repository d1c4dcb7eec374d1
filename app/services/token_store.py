"""
Confirmation token generation and the Redis-backed token -> subscriber mapping.

Tokens have no TTL and are never deleted: a confirmation link stays valid and
confirming twice is harmless.
"""

import secrets
import string
from typing import Protocol
from uuid import UUID

from app.infrastructure.observability.logging import get_logger
from app.models.domain.errors import TokenStoreError
from app.services.infrastructure.redis_client import RedisClientError

logger = get_logger(__name__)

TOKEN_LENGTH = 30
TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_KEY_TEMPLATE = "subscription_token:{token}:subscriber_id"


def generate_subscription_token(length: int = TOKEN_LENGTH) -> str:
    """Random alphanumeric token drawn uniformly from a CSPRNG."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def token_key(token: str) -> str:
    return TOKEN_KEY_TEMPLATE.format(token=token)


class KeyValueClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> bool: ...


class TokenStore:
    """Stores which subscriber a confirmation token was issued to."""

    def __init__(self, client: KeyValueClient):
        self._client = client

    async def put(self, key: str, value: str) -> None:
        try:
            stored = await self._client.set(key, value)
        except RedisClientError as e:
            raise TokenStoreError("Failed to store subscription token", cause=e) from e
        if not stored:
            raise TokenStoreError("Token store rejected the write")

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except RedisClientError as e:
            raise TokenStoreError("Failed to read subscription token", cause=e) from e

    async def store_subscriber_id(self, token: str, subscriber_id: UUID) -> None:
        await self.put(token_key(token), str(subscriber_id))
        logger.debug("Subscription token stored", subscriber_id=str(subscriber_id))

    async def get_subscriber_id(self, token: str) -> UUID | None:
        """
        Resolve a token to its subscriber id.

        Returns None both for unknown tokens and for mappings whose value is not
        a UUID; callers treat the two the same way.
        """
        raw = await self.get(token_key(token))
        if raw is None:
            return None
        try:
            return UUID(raw)
        except ValueError:
            logger.warning("Token mapping holds a malformed subscriber id", value=raw[:40])
            return None
