"""
FastAPI dependency providers.

Workflows are built per request from the adapters created at startup and kept
on ``app.state``; tests swap them through ``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from app.config import settings
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.confirmation_service import ConfirmationService
from app.services.email_client import EmailClient
from app.services.newsletter_service import NewsletterService
from app.services.subscription_service import SubscriptionService
from app.services.token_store import TokenStore


def get_repository(request: Request) -> SubscriptionRepository:
    return request.app.state.subscription_repository


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_email_client(request: Request) -> EmailClient:
    return request.app.state.email_client


def get_subscription_service(
    repository: SubscriptionRepository = Depends(get_repository),
    token_store: TokenStore = Depends(get_token_store),
    email_client: EmailClient = Depends(get_email_client),
) -> SubscriptionService:
    return SubscriptionService(
        repository=repository,
        token_store=token_store,
        email_client=email_client,
        base_url=settings.confirmation_base_url(),
    )


def get_confirmation_service(
    repository: SubscriptionRepository = Depends(get_repository),
    token_store: TokenStore = Depends(get_token_store),
) -> ConfirmationService:
    return ConfirmationService(repository=repository, token_store=token_store)


def get_newsletter_service(
    repository: SubscriptionRepository = Depends(get_repository),
    email_client: EmailClient = Depends(get_email_client),
) -> NewsletterService:
    return NewsletterService(
        repository=repository,
        email_client=email_client,
        max_recipients_per_request=settings.EMAIL_MAX_RECIPIENTS_PER_REQUEST,
    )
