"""Common event handling for the comment listeners."""

from typing import Any, List, Optional

from comment_notifier.domain.events import DocumentChangeEvent
from comment_notifier.domain.models import DocumentSnapshot
from comment_notifier.domain.references import ObjectReference
from comment_notifier.logging.context import log_context
from comment_notifier.notifications.models import DispatchResult

from .dispatcher import CommentDispatcher


class CommentListener:
    """Base listener: the error boundary around CommentDispatcher.

    Subclasses declare the events they react to, whether reply authors are
    notified too, and which comment object an event designates.
    """

    name: str = "CommentListener"
    resolve_replies: bool = False

    def __init__(self, dispatcher: CommentDispatcher):
        self.dispatcher = dispatcher
        self.logger = dispatcher.logger

    @property
    def events(self) -> List[DocumentChangeEvent]:
        raise NotImplementedError

    def comment_reference(self, event: DocumentChangeEvent) -> Optional[ObjectReference]:
        return None

    def on_event(
        self, event: DocumentChangeEvent, source: DocumentSnapshot, data: Any = None
    ) -> DispatchResult:
        """Handle one event. Never raises: failures are logged once and reported as "failed"."""
        context = {
            "listener": self.name,
            "event_type": type(event).__name__,
            "document": str(getattr(source, "reference", source)),
        }
        if event.reference is not None:
            context["object_reference"] = str(event.reference)

        with log_context(**context):
            self.logger.debug(f"{self.name} received {event!r}")
            try:
                return self.dispatcher.dispatch(
                    self.name,
                    event.kind,
                    source,
                    reference=self.comment_reference(event),
                    resolve_replies=self.resolve_replies,
                )
            except Exception as e:
                self.logger.error(
                    f"Failure in comment listener: {e}",
                    exc_info=True,
                    extra={"event": "notification.failed", "error_type": type(e).__name__},
                )
                return DispatchResult(listener=self.name, status="failed", reason=str(e))
