"""Narrow trigger: reacts to comment objects being added or updated."""

from typing import List, Optional

from comment_notifier.domain.events import DocumentChangeEvent, ObjectAddedEvent, ObjectUpdatedEvent
from comment_notifier.domain.matchers import comment_object_matcher
from comment_notifier.domain.references import ObjectReference

from .base import CommentListener


class CommentNotificationEventListener(CommentListener):
    """Notify the document author, and the author of the comment replied to.

    Only object events whose reference designates a comment object are
    received; the referenced comment is the one reported on.
    """

    name = "CommentNotificationEventListener"
    resolve_replies = True

    def __init__(self, dispatcher):
        super().__init__(dispatcher)
        matcher = comment_object_matcher()
        self._events = [ObjectAddedEvent(matcher), ObjectUpdatedEvent(matcher)]

    @property
    def events(self) -> List[DocumentChangeEvent]:
        return list(self._events)

    def comment_reference(self, event: DocumentChangeEvent) -> Optional[ObjectReference]:
        return event.reference
