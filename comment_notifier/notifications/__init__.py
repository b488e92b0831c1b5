"""Notification pipeline building blocks.

- IdentityResolver: user reference -> notification email
- CommentExtractor: event -> changed comment object
- RecipientSetBuilder: document author plus reply-target author
- NotificationComposer: subject and plain-text body
- MailSender: asynchronous SMTP delivery reporting to a MailListener
"""

from .composer import (
    NotificationComposer,
    build_email_message,
    normalize_address,
    validate_recipients,
)
from .extractor import CommentExtractor
from .identity import IdentityResolver
from .mail_listeners import DatabaseMailListener, LoggingMailListener, MailListener
from .models import (
    DeliveryOutcome,
    DeliveryStatus,
    DispatchResult,
    InvalidRecipientError,
    MailSessionError,
    NotificationError,
    NotificationMessage,
    NotificationTemplateError,
    SMTPDeliveryError,
)
from .recipients import RecipientSetBuilder
from .sender import MailSender
from .session import MailSession, SMTPAuthenticator, create_session
from .smtp_client import SMTPClient
from .templates import TemplateRenderer

__all__ = [
    "IdentityResolver",
    "CommentExtractor",
    "RecipientSetBuilder",
    "NotificationComposer",
    "TemplateRenderer",
    "build_email_message",
    "normalize_address",
    "validate_recipients",
    "MailSender",
    "MailSession",
    "SMTPAuthenticator",
    "create_session",
    "SMTPClient",
    "MailListener",
    "LoggingMailListener",
    "DatabaseMailListener",
    "NotificationMessage",
    "DeliveryOutcome",
    "DeliveryStatus",
    "DispatchResult",
    "NotificationError",
    "InvalidRecipientError",
    "MailSessionError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
]
