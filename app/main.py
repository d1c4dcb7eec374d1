# app/main.py
"""
Application entry point: logging, adapter lifecycle and route wiring.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.pool import DatabasePoolManager
from app.db.schema import create_schema
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.middleware import RequestContextMiddleware
from app.models.domain.subscriber_domain import SubscriberEmail
from app.repositories.subscription_repository import SubscriptionRepository
from app.routes import health, newsletters, subscriptions
from app.routes.error_handlers import register_exception_handlers
from app.services.email_client import EmailClient
from app.services.infrastructure.redis_client import FastRedisClient
from app.services.token_store import TokenStore

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the store and transport adapters on startup and close them on shutdown."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    db_pool = DatabasePoolManager(settings)
    redis_client = FastRedisClient(settings)
    email_client = EmailClient(
        base_url=settings.EMAIL_BASE_URL,
        sender=SubscriberEmail.parse(settings.EMAIL_SENDER),
        api_key=settings.EMAIL_API_KEY,
        timeout=settings.EMAIL_TIMEOUT_SECONDS,
    )

    startup_tasks = []

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()
        startup_tasks.append("database_pool")

        if settings.DB_AUTO_MIGRATE:
            await create_schema(db_pool)

        logger.info("Initializing Redis connection")
        await redis_client.initialize()
        startup_tasks.append("redis")

        logger.info("All services initialized successfully", services=startup_tasks)

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), completed_tasks=startup_tasks)

        # Clean up any successfully initialized services in reverse order
        if "redis" in startup_tasks:
            await redis_client.close()
        if "database_pool" in startup_tasks:
            await db_pool.close()
        await email_client.close()

        raise

    app.state.db_pool = db_pool
    app.state.redis_client = redis_client
    app.state.email_client = email_client
    app.state.subscription_repository = SubscriptionRepository(db_pool)
    app.state.token_store = TokenStore(redis_client)

    yield

    logger.info("Application shutting down")

    await email_client.close()
    await redis_client.close()
    await db_pool.close()

    logger.info("All services closed")


app = FastAPI(
    title="Newsletter",
    description="Newsletter subscriptions with double opt-in and broadcast delivery",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(subscriptions.router)
app.include_router(newsletters.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


# Added last so it runs first and the request id is bound for every other middleware
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
