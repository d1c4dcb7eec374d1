"""
Subscription API Routes
Intake of new subscribers and double opt-in confirmation.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from app.infrastructure.observability.logging import get_logger
from app.models.api.newsletter_request import SubscriptionRequest
from app.models.domain.errors import ValidationError
from app.routes.dependencies import get_confirmation_service, get_subscription_service
from app.services.confirmation_service import ConfirmationService
from app.services.subscription_service import SubscriptionService

logger = get_logger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subscription(
    body: SubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Register a new subscriber and send the confirmation email.

    Raises:
        400: Invalid name or email
        500: Persistence, token store or email delivery failure
    """
    await service.create_subscription(body.name, body.email)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/confirm")
async def confirm_subscription(
    token: str = Query(..., description="Token from the confirmation link"),
    service: ConfirmationService = Depends(get_confirmation_service),
):
    """
    Confirm a pending subscription.

    Raises:
        400: Missing or empty token
        404: Unknown token
        500: Persistence or token store failure
    """
    if not token.strip():
        raise ValidationError("Subscription token must not be empty")

    await service.confirm(token)
    return Response(status_code=status.HTTP_200_OK)
