"""Compose comment notifications and turn them into email messages."""

from email.message import EmailMessage
from email.utils import make_msgid
from typing import Iterable, List, Optional

import email_validator
from email_validator import EmailNotValidError, validate_email

from comment_notifier.domain.events import EventKind
from comment_notifier.domain.models import DocumentSnapshot

from .models import InvalidRecipientError, NotificationMessage
from .templates import TemplateRenderer

# Special-use names that intranet mail servers deliver to
PRIVATE_DOMAIN_NAMES = ("local", "localhost")

email_validator.SPECIAL_USE_DOMAIN_NAMES[:] = [
    name for name in email_validator.SPECIAL_USE_DOMAIN_NAMES if name not in PRIVATE_DOMAIN_NAMES
]


class NotificationComposer:
    """Build the plain-text notification for a comment event.

    The subject depends on the event kind; the body is the comment text,
    unmodified.
    """

    def __init__(self, wiki_name: str = "XWiki", renderer: Optional[TemplateRenderer] = None):
        self.wiki_name = wiki_name
        self.renderer = renderer or TemplateRenderer()

    def subject_for(self, document: DocumentSnapshot, kind: EventKind) -> str:
        return self.renderer.render_subject(
            kind,
            {"wiki_name": self.wiki_name, "document_name": document.display_name},
        )

    def compose(
        self,
        document: DocumentSnapshot,
        kind: EventKind,
        comment_text: str,
        recipients: Iterable[str],
    ) -> NotificationMessage:
        """Compose a notification.

        Raises:
            InvalidRecipientError: If there is no recipient or an address is malformed
            NotificationTemplateError: If the subject cannot be rendered
        """
        addresses = validate_recipients(recipients)

        return NotificationMessage(
            subject=self.subject_for(document, kind),
            recipients=addresses,
            body=comment_text or "",
        )


def normalize_address(address: str) -> str:
    """Check one address with email-validator and return its normalized form.

    Addresses only need to be deliverable by the configured SMTP server, so
    intranet domains such as ``localhost`` or ``corp.local`` are accepted.

    Raises:
        InvalidRecipientError: If the address is malformed
    """
    try:
        return validate_email(
            address, check_deliverability=False, globally_deliverable=False
        ).normalized
    except EmailNotValidError as e:
        raise InvalidRecipientError(f"Invalid recipient address '{address}': {e}") from e


def validate_recipients(recipients: Iterable[str]) -> List[str]:
    """Validate addresses with email-validator and return their normalized forms.

    Raises:
        InvalidRecipientError: If the list is empty or any address is invalid
    """
    validated = [normalize_address(address) for address in recipients]

    if not validated:
        raise InvalidRecipientError("A notification needs at least one recipient")

    return validated


def build_email_message(message: NotificationMessage, sender: str) -> EmailMessage:
    """Render a notification as a multipart/mixed email with one text/plain part."""
    email_message = EmailMessage()
    email_message["Subject"] = message.subject
    email_message["From"] = sender
    email_message["To"] = ", ".join(message.recipients)
    email_message["Message-ID"] = make_msgid(domain=sender.rsplit("@", 1)[-1].rstrip(">"))

    email_message.set_content(message.body, subtype="plain")
    email_message.make_mixed()

    return email_message
