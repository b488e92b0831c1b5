"""Delivery tracking collaborators notified by the mail sender.

The notification pipeline hands a listener to the sender without looking at
it; the sender reports each message's outcome to it from the delivery thread.
"""

from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Callable, List, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from comment_notifier.domain.models import MailState, MailStatusRecord
from comment_notifier.logging import get_logger
from comment_notifier.persistence import MailStatusRepository, PersistenceError, get_session

from .models import DeliveryOutcome, DeliveryStatus, NotificationMessage

logger = get_logger(__name__, component="mail")


class MailListener(Protocol):
    """Receives the lifecycle of a submitted batch."""

    def on_prepare(self, batch_id: str, messages: List[NotificationMessage]) -> None:
        ...

    def on_delivery(
        self, batch_id: str, message: NotificationMessage, outcome: DeliveryOutcome
    ) -> None:
        ...

    def on_finished(self, batch_id: str) -> None:
        ...


class LoggingMailListener:
    """Report delivery outcomes through logging only."""

    def on_prepare(self, batch_id: str, messages: List[NotificationMessage]) -> None:
        logger.debug(
            f"Prepared mail batch {batch_id} with {len(messages)} message(s)",
            extra={"event": "mail.batch.prepared", "batch_id": batch_id},
        )

    def on_delivery(
        self, batch_id: str, message: NotificationMessage, outcome: DeliveryOutcome
    ) -> None:
        if outcome.status == DeliveryStatus.SENT:
            logger.info(
                f"Mail {message.message_id} sent to {', '.join(message.recipients)}",
                extra={"event": "mail.send.success", "batch_id": batch_id},
            )
        else:
            logger.error(
                f"Mail {message.message_id} to {', '.join(message.recipients)} failed: {outcome.reason}",
                extra={"event": "mail.send.failure", "batch_id": batch_id},
            )

    def on_finished(self, batch_id: str) -> None:
        logger.debug(
            f"Mail batch {batch_id} finished",
            extra={"event": "mail.batch.finished", "batch_id": batch_id},
        )


class DatabaseMailListener(LoggingMailListener):
    """Record the state of every message in the mail_status table.

    Tracking problems are logged and swallowed: a failing database must not
    interfere with delivery.
    """

    def __init__(
        self,
        session_scope: Callable[[], AbstractContextManager[Session]] = get_session,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.session_scope = session_scope
        self.clock = clock

    def on_prepare(self, batch_id: str, messages: List[NotificationMessage]) -> None:
        super().on_prepare(batch_id, messages)
        try:
            with self.session_scope() as session:
                repo = MailStatusRepository(session)
                for message in messages:
                    repo.record(
                        MailStatusRecord(
                            message_id=message.message_id,
                            batch_id=batch_id,
                            recipients=message.recipients,
                            subject=message.subject,
                            state=MailState.PREPARED,
                            updated_at=self.clock(),
                        )
                    )
        except (PersistenceError, SQLAlchemyError) as e:
            self._tracking_failed(batch_id, e)

    def on_delivery(
        self, batch_id: str, message: NotificationMessage, outcome: DeliveryOutcome
    ) -> None:
        super().on_delivery(batch_id, message, outcome)
        state = MailState.SENT if outcome.status == DeliveryStatus.SENT else MailState.FAILED
        try:
            with self.session_scope() as session:
                MailStatusRepository(session).update_state(
                    message.message_id, state, self.clock(), error=outcome.reason
                )
        except (PersistenceError, SQLAlchemyError) as e:
            self._tracking_failed(batch_id, e)

    def _tracking_failed(self, batch_id: str, error: Exception) -> None:
        logger.warning(
            f"Could not record delivery status for batch {batch_id}: {error}",
            extra={
                "event": "mail.tracking.failure",
                "batch_id": batch_id,
                "error_type": type(error).__name__,
            },
        )
