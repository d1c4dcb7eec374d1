"""
Subscriber domain models.

Value objects validate raw strings once at construction (``parse``) and are
immutable afterwards, so any SubscriberEmail / SubscriberName found in the
system is known to be valid.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

import regex
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict

from app.models.domain.errors import ValidationError

MAX_NAME_GRAPHEMES = 256
FORBIDDEN_NAME_CHARS = frozenset('/{}"><\\()')

_GRAPHEME = regex.compile(r"\X")


@dataclass(frozen=True)
class SubscriberEmail:
    """Syntactically valid email address."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> "SubscriberEmail":
        try:
            # Syntax only, no DNS lookup. Dotless and special-use domains
            # (localhost, .test, .local) are still rejected.
            validate_email(raw, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError(f"{raw} email is not valid", cause=e) from e
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberName:
    """Display name: non-blank, at most 256 graphemes, no markup characters."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> "SubscriberName":
        is_empty_or_whitespace = not raw.strip()
        is_too_long = len(_GRAPHEME.findall(raw)) > MAX_NAME_GRAPHEMES
        contains_forbidden_chars = any(char in FORBIDDEN_NAME_CHARS for char in raw)

        if is_empty_or_whitespace or is_too_long or contains_forbidden_chars:
            raise ValidationError(f"{raw} is not a valid subscriber name")
        return cls(raw)

    def __str__(self) -> str:
        return self.value


class SubscriberStatus(Enum):
    PENDING = "pending_confirmation"
    CONFIRMED = "confirmed"
    UNSUBSCRIBED = "unsubscribed"

    @classmethod
    def parse(cls, raw: str) -> "SubscriberStatus":
        try:
            return cls(raw)
        except ValueError as e:
            raise ValidationError(f"{raw} is not a valid subscriber status") from e

    def encode(self) -> str:
        return self.value

    def is_pending(self) -> bool:
        return self is SubscriberStatus.PENDING

    def is_confirmed(self) -> bool:
        return self is SubscriberStatus.CONFIRMED

    def is_unsubscribed(self) -> bool:
        return self is SubscriberStatus.UNSUBSCRIBED


@dataclass(frozen=True)
class NewSubscriber:
    """Validated intake data, not yet persisted."""

    name: SubscriberName
    email: SubscriberEmail

    @classmethod
    def parse(cls, name: str, email: str) -> "NewSubscriber":
        return cls(name=SubscriberName.parse(name), email=SubscriberEmail.parse(email))


class Subscriber(BaseModel):
    """Persisted subscriber row."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    id: UUID
    email: SubscriberEmail
    name: SubscriberName
    status: SubscriberStatus
    subscribed_at: datetime


@dataclass(frozen=True)
class NewsletterIssue:
    """One newsletter issue to broadcast. Never persisted."""

    title: str
    html: str

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Newsletter title must not be empty")
        if not self.html or not self.html.strip():
            raise ValidationError("Newsletter content.html must not be empty")
