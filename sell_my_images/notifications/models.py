"""Data models and exceptions for download notifications."""

from dataclasses import dataclass
from typing import Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class MissingFieldError(NotificationError):
    """A required notification field is absent or empty.

    Attributes:
        field: Name of the missing field (e.g. "download_url")
    """

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required notification field: {field}")


class InvalidFieldError(NotificationError):
    """A notification field is present but has an unusable value."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid notification field '{field}': {reason}")


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when SMTP delivery fails."""

    pass


@dataclass(frozen=True)
class ComposedNotification:
    """Subject and plain-text body of a download email."""

    subject: str
    message: str

    def as_dict(self) -> dict:
        return {"subject": self.subject, "message": self.message}


@dataclass
class NotificationResult:
    """Outcome of delivering a download email for one job.

    Attributes:
        job_id: Job identifier (may be None for ad-hoc sends)
        status: "sent", "skipped" or "failed"
        attempts: SMTP attempts made for the customer message
        customer_notified: Whether the customer copy was delivered
        admin_notified: Whether the admin copy was delivered
        error: Error message when delivery failed or was skipped
    """

    job_id: Optional[str]
    status: str  # "sent", "skipped", "failed"
    attempts: int = 0
    customer_notified: bool = False
    admin_notified: bool = False
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"
