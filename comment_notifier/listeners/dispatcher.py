"""Shared body of the comment listeners.

Each invocation walks the same steps:
1. Extract the changed comment (stop silently if it is gone)
2. Resolve recipients (stop silently if the document author has no email)
3. Compose the notification
4. Hand it to the asynchronous mail sender with the delivery-tracking listener

The dispatcher keeps no state between invocations.
"""

import logging
from typing import Callable, Optional

from comment_notifier.domain.events import EventKind
from comment_notifier.domain.models import DocumentSnapshot
from comment_notifier.domain.references import ObjectReference
from comment_notifier.logging import get_logger
from comment_notifier.notifications.composer import NotificationComposer
from comment_notifier.notifications.extractor import CommentExtractor
from comment_notifier.notifications.identity import IdentityResolver
from comment_notifier.notifications.mail_listeners import MailListener
from comment_notifier.notifications.models import DispatchResult
from comment_notifier.notifications.recipients import RecipientSetBuilder
from comment_notifier.notifications.sender import MailSender
from comment_notifier.notifications.session import MailSession
from comment_notifier.store.ports import DocumentStore

logger = get_logger(__name__, component="listener")


class CommentDispatcher:
    """Turn one comment change into at most one submitted notification."""

    def __init__(
        self,
        store: DocumentStore,
        composer: NotificationComposer,
        mail_sender: MailSender,
        session_factory: Callable[[], MailSession],
        mail_listener: MailListener,
        extractor: Optional[CommentExtractor] = None,
        recipient_builder: Optional[RecipientSetBuilder] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize the dispatcher.

        Args:
            store: Document store used to look up user profiles
            composer: Builds subject and body
            mail_sender: Asynchronous mail sender
            session_factory: Builds an authenticated mail session per submission
            mail_listener: Delivery-tracking collaborator passed to the sender
            extractor: Comment extractor (creates default if None)
            recipient_builder: Recipient builder (creates one over store if None)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.store = store
        self.composer = composer
        self.mail_sender = mail_sender
        self.session_factory = session_factory
        self.mail_listener = mail_listener
        self.extractor = extractor or CommentExtractor()
        self.recipient_builder = recipient_builder or RecipientSetBuilder(IdentityResolver(store))
        self.logger = logger_instance or logger

    def dispatch(
        self,
        listener_name: str,
        kind: EventKind,
        document: DocumentSnapshot,
        reference: Optional[ObjectReference] = None,
        resolve_replies: bool = False,
    ) -> DispatchResult:
        """Run the pipeline for one event.

        Exceptions are not caught here; the calling listener is the boundary.
        """
        # Step 1: Extract comment
        comment = self.extractor.extract(document, reference)
        if comment is None:
            self.logger.debug(
                f"No comment found on {document.reference}",
                extra={"event": "notification.skip", "reason": "comment_missing"},
            )
            return DispatchResult(listener=listener_name, status="skipped", reason="comment_missing")

        # Step 2: Resolve recipients
        recipients = self.recipient_builder.build(document, comment, resolve_replies)
        self.logger.debug(f"Recipients for {document.reference}: {recipients}")
        if not recipients:
            self.logger.debug(
                f"Author of {document.reference} has no notification email",
                extra={"event": "notification.skip", "reason": "no_recipient"},
            )
            return DispatchResult(listener=listener_name, status="skipped", reason="no_recipient")

        # Step 3: Compose
        message = self.composer.compose(document, kind, comment.text, recipients)

        # Step 4: Submit
        session = self.session_factory()
        batch_id = self.mail_sender.send_async([message], session, self.mail_listener)

        self.logger.info(
            f"Comment notification for {document.reference} submitted to {', '.join(message.recipients)}",
            extra={
                "event": "notification.submitted",
                "batch_id": batch_id,
                "recipients": message.recipients,
                "kind": EventKind(kind).value,
            },
        )
        return DispatchResult(
            listener=listener_name,
            status="submitted",
            recipients=list(message.recipients),
            batch_id=batch_id,
        )
