"""
Newsletter API Routes
"""

from fastapi import APIRouter, Depends, Response, status

from app.models.api.newsletter_request import NewsletterRequest
from app.routes.dependencies import get_newsletter_service
from app.services.newsletter_service import NewsletterService

router = APIRouter(prefix="/newsletters", tags=["newsletters"])


@router.post("")
async def publish_newsletter(
    body: NewsletterRequest,
    service: NewsletterService = Depends(get_newsletter_service),
):
    """Send an issue to every confirmed subscriber."""
    await service.broadcast(body.to_issue())
    return Response(status_code=status.HTTP_200_OK)
