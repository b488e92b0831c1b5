"""Comment listeners and the dispatch pipeline they share."""

from typing import List

from .base import CommentListener
from .comment_event import CommentEventListener
from .comment_notification import CommentNotificationEventListener
from .dispatcher import CommentDispatcher


def build_listeners(dispatcher: CommentDispatcher) -> List[CommentListener]:
    """Create both comment listeners over one dispatcher."""
    return [CommentEventListener(dispatcher), CommentNotificationEventListener(dispatcher)]


__all__ = [
    "CommentDispatcher",
    "CommentListener",
    "CommentEventListener",
    "CommentNotificationEventListener",
    "build_listeners",
]
