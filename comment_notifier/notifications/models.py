"""Data models and exceptions for the notification pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class InvalidRecipientError(NotificationError):
    """Raised when a message would have no recipient or a malformed address."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when subject template rendering fails."""

    pass


class MailSessionError(NotificationError):
    """Raised when a mail session cannot be built from the transport properties."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when SMTP delivery of a message fails."""

    pass


class NotificationMessage(BaseModel):
    """A composed plain-text notification.

    Recipients keep their insertion order (document author first) and each
    address appears once.
    """

    subject: str
    recipients: List[str] = Field(..., min_length=1)
    body: str = ""
    message_id: Optional[str] = Field(None, description="Assigned when the message is submitted")

    @field_validator("recipients")
    @classmethod
    def unique_recipients(cls, v: List[str]) -> List[str]:
        seen = set()
        unique = []
        for address in v:
            key = address.lower()
            if key not in seen:
                seen.add(key)
                unique.append(address)
        return unique


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


@dataclass
class DeliveryOutcome:
    """Outcome of one message delivery, reported to mail listeners."""

    status: DeliveryStatus
    reason: Optional[str] = None

    @classmethod
    def sent(cls) -> "DeliveryOutcome":
        return cls(status=DeliveryStatus.SENT)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryOutcome":
        return cls(status=DeliveryStatus.FAILED, reason=reason)


@dataclass
class DispatchResult:
    """Result of one listener invocation.

    Attributes:
        listener: Name of the listener that handled the event
        status: Outcome (submitted, skipped, failed)
        reason: Why the event was skipped or failed
        recipients: Addresses the message was submitted to
        batch_id: Mail batch identifier returned by the sender
    """

    listener: str
    status: str  # "submitted", "skipped", "failed"
    reason: Optional[str] = None
    recipients: List[str] = field(default_factory=list)
    batch_id: Optional[str] = None

    def is_submitted(self) -> bool:
        return self.status == "submitted"
