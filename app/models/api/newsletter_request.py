# app/models/api/newsletter_request.py
from pydantic import BaseModel, Field

from app.models.domain.subscriber_domain import NewsletterIssue


class SubscriptionRequest(BaseModel):
    """Request body for POST /subscriptions."""

    name: str = Field(..., description="Subscriber display name")
    email: str = Field(..., description="Subscriber email address")


class NewsletterContent(BaseModel):
    html: str = Field(..., description="HTML body sent as-is")


class NewsletterRequest(BaseModel):
    """Request body for POST /newsletters."""

    title: str = Field(..., description="Email subject")
    content: NewsletterContent

    def to_issue(self) -> NewsletterIssue:
        return NewsletterIssue(title=self.title, html=self.content.html)
