"""Domain models for the comment notifier."""

from .events import (
    CommentAddedEvent,
    CommentUpdatedEvent,
    DocumentChangeEvent,
    EventKind,
    ObjectAddedEvent,
    ObjectEvent,
    ObjectUpdatedEvent,
)
from .matchers import RegexReferenceMatcher, comment_object_matcher
from .models import (
    CommentEntity,
    DocumentSnapshot,
    MailState,
    MailStatusRecord,
    UserProfile,
)
from .references import (
    COMMENT_CLASS,
    USER_CLASS,
    DocumentReference,
    InvalidReferenceError,
    ObjectReference,
    comment_reference,
)

__all__ = [
    "CommentAddedEvent",
    "CommentUpdatedEvent",
    "DocumentChangeEvent",
    "EventKind",
    "ObjectAddedEvent",
    "ObjectEvent",
    "ObjectUpdatedEvent",
    "RegexReferenceMatcher",
    "comment_object_matcher",
    "CommentEntity",
    "DocumentSnapshot",
    "UserProfile",
    "MailState",
    "MailStatusRecord",
    "COMMENT_CLASS",
    "USER_CLASS",
    "DocumentReference",
    "InvalidReferenceError",
    "ObjectReference",
    "comment_reference",
]
