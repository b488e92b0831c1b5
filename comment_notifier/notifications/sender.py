"""Asynchronous mail sender.

Submitted batches become one-shot jobs on an APScheduler background
scheduler whose thread pool performs the SMTP work, so callers return as
soon as the batch is queued. There is no retry: a failing message is
reported once to the batch's mail listener and dropped.
"""

import threading
from datetime import timezone
from typing import List, Optional
from uuid import uuid4

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

from comment_notifier.logging import get_logger
from comment_notifier.logging.context import log_context

from .composer import build_email_message
from .mail_listeners import MailListener
from .models import DeliveryOutcome, NotificationMessage
from .session import MailSession
from .smtp_client import SMTPClient

logger = get_logger(__name__, component="mail")


class MailSender:
    """Fire-and-forget delivery of notification batches."""

    def __init__(
        self,
        smtp_client: Optional[SMTPClient] = None,
        scheduler: Optional[BackgroundScheduler] = None,
        max_workers: int = 2,
        sender_name: str = "Wiki Comment Notifier",
    ):
        """Initialize the sender.

        Args:
            smtp_client: SMTP client (creates default if None)
            scheduler: Scheduler running delivery jobs (creates a background
                scheduler with a thread pool of max_workers if None)
            max_workers: Delivery threads of the default scheduler
            sender_name: Display name used in the From header
        """
        self.smtp_client = smtp_client or SMTPClient()
        self.scheduler = scheduler or BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers)},
            job_defaults={"coalesce": False, "max_instances": 1},
            timezone=timezone.utc,
        )
        self.sender_name = sender_name
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of queued or running batches."""
        with self._lock:
            return self._pending

    def send_async(
        self,
        messages: List[NotificationMessage],
        session: MailSession,
        listener: MailListener,
    ) -> str:
        """Queue messages for delivery and return the batch id immediately.

        Raises:
            Exception: Whatever the scheduler raises when the job cannot be
                queued (e.g. the sender was shut down)
        """
        batch_id = uuid4().hex
        batch = [
            message.model_copy(update={"message_id": f"{batch_id}:{index}"})
            for index, message in enumerate(messages)
        ]

        listener.on_prepare(batch_id, batch)

        with self._lock:
            if not self.scheduler.running:
                self.scheduler.start()
                logger.info("Mail sender started", extra={"event": "mail.sender.started"})
            self._pending += 1

        try:
            self.scheduler.add_job(
                self._deliver,
                args=[batch_id, batch, session, listener],
                id=batch_id,
                name=f"mail-batch-{batch_id}",
                misfire_grace_time=None,
            )
        except Exception:
            self._batch_done()
            raise

        logger.debug(
            f"Queued mail batch {batch_id} with {len(batch)} message(s)",
            extra={"event": "mail.batch.queued", "batch_id": batch_id},
        )
        return batch_id

    def _deliver(
        self,
        batch_id: str,
        messages: List[NotificationMessage],
        session: MailSession,
        listener: MailListener,
    ) -> None:
        try:
            with log_context(batch_id=batch_id):
                for message in messages:
                    try:
                        sender = session.sender_address(self.sender_name)
                        self.smtp_client.send(build_email_message(message, sender), session)
                        outcome = DeliveryOutcome.sent()
                    except Exception as e:
                        outcome = DeliveryOutcome.failed(str(e))
                    self._report(listener.on_delivery, batch_id, message, outcome)

                self._report(listener.on_finished, batch_id)
        finally:
            self._batch_done()

    def _report(self, callback, *args) -> None:
        try:
            callback(*args)
        except Exception as e:
            logger.error(
                f"Mail listener failed: {e}",
                exc_info=True,
                extra={"event": "mail.listener.failure", "error_type": type(e).__name__},
            )

    def _batch_done(self) -> None:
        with self._lock:
            self._pending -= 1
            if self._pending <= 0:
                self._idle.notify_all()

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """Block until every queued batch has been delivered.

        Returns:
            False if the timeout expired first
        """
        with self._lock:
            return self._idle.wait_for(lambda: self._pending <= 0, timeout=timeout)

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Stop the scheduler.

        Args:
            wait: Drain queued deliveries before stopping
            timeout: Upper bound in seconds for draining
        """
        if wait and not self.wait_for_pending(timeout):
            logger.warning(
                f"Stopping mail sender with {self.pending} undelivered batch(es)",
                extra={"event": "mail.sender.pending_dropped"},
            )

        # Delivery jobs take the lock when they finish, so it must not be held here
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Mail sender stopped", extra={"event": "mail.sender.stopped"})
