"""Broad trigger: reacts to coarse comment events on a document."""

from typing import List

from comment_notifier.domain.events import CommentAddedEvent, CommentUpdatedEvent, DocumentChangeEvent

from .base import CommentListener


class CommentEventListener(CommentListener):
    """Notify the document author when any comment is added or updated.

    Comment events do not say which comment changed, so the first comment
    of the document is used. Reply authors are not notified.
    """

    name = "CommentEventListener"
    resolve_replies = False

    @property
    def events(self) -> List[DocumentChangeEvent]:
        return [CommentAddedEvent(), CommentUpdatedEvent()]
