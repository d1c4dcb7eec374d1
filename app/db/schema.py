"""
Schema bootstrap for the subscriptions table.
"""

from app.db.helpers import execute_query
from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SUBSCRIPTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS subscriptions (
    id uuid PRIMARY KEY,
    email text NOT NULL,
    name text NOT NULL,
    subscribed_at timestamptz NOT NULL,
    status text NOT NULL
)
"""

# Broadcasts filter on status
SUBSCRIPTIONS_STATUS_INDEX = """
CREATE INDEX IF NOT EXISTS subscriptions_status_idx ON subscriptions (status)
"""


async def create_schema(db_pool: DatabasePoolManager) -> None:
    """Create the subscriptions table if it does not exist yet."""
    await execute_query(db_pool, SUBSCRIPTIONS_TABLE)
    await execute_query(db_pool, SUBSCRIPTIONS_STATUS_INDEX)
    logger.info("Database schema ensured", table="subscriptions")
