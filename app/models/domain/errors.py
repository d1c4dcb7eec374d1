"""
Error taxonomy for the subscriber lifecycle workflows.

Every workflow raises one of the classes below. Each carries a human readable
message and, for infrastructure failures, the lower-level exception that caused
it (also chained through ``raise ... from``). The HTTP layer maps them to status
codes through ``STATUS_CODES`` and never exposes ``cause`` to callers.
"""


class NewsletterServiceError(Exception):
    """Base class for all workflow errors."""

    public_message: str = "Internal server error"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by {type(self.cause).__name__}: {self.cause})"
        return self.message


class ValidationError(NewsletterServiceError):
    """Malformed client input."""

    public_message = "Invalid request"


class NotFoundError(NewsletterServiceError):
    """Unknown confirmation token."""

    public_message = "Not found"


class PersistenceError(NewsletterServiceError):
    """Relational store failure."""


class TokenStoreError(NewsletterServiceError):
    """Ephemeral key-value store failure."""


class EmailDeliveryError(NewsletterServiceError):
    """Outbound email transport failure."""


# Closed set of errors each workflow can raise
SubscriptionError = (ValidationError, PersistenceError, TokenStoreError, EmailDeliveryError)
ConfirmationError = (NotFoundError, PersistenceError, TokenStoreError)
BroadcastError = (ValidationError, PersistenceError, EmailDeliveryError)

STATUS_CODES: dict[type[NewsletterServiceError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    PersistenceError: 500,
    TokenStoreError: 500,
    EmailDeliveryError: 500,
}


def status_code_for(error: NewsletterServiceError) -> int:
    """Resolve the HTTP status for an error, falling back to 500 for unmapped subclasses."""
    for error_type in type(error).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500
