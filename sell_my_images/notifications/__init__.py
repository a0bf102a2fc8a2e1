"""Download-ready email notifications.

- compose_notification / NotificationComposer: pure subject + body composition
- build_notification_context / load_notification_context: validated contexts
- DownloadNotificationService: delivery with retry and admin copy
- SMTPClient: SMTP transport
"""

from .composer import NotificationComposer, compose_notification
from .models import (
    ComposedNotification,
    InvalidFieldError,
    MissingFieldError,
    NotificationError,
    NotificationResult,
    NotificationTemplateError,
    SMTPDeliveryError,
)
from .payloads import build_notification_context, load_notification_context
from .service import DownloadNotificationService, build_email_message
from .smtp_client import SMTPClient, build_sender_address, normalize_recipient

__all__ = [
    # Composition
    "compose_notification",
    "NotificationComposer",
    "ComposedNotification",
    "build_notification_context",
    "load_notification_context",
    # Delivery
    "DownloadNotificationService",
    "NotificationResult",
    "SMTPClient",
    "build_email_message",
    "build_sender_address",
    "normalize_recipient",
    # Exceptions
    "NotificationError",
    "MissingFieldError",
    "InvalidFieldError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
]
