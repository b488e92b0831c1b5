"""Document change events raised by the wiki.

Two families exist:
- comment events (CommentAddedEvent, CommentUpdatedEvent) are coarse: they
  only say that some comment of the source document changed
- object events (ObjectAddedEvent, ObjectUpdatedEvent) carry the reference of
  the exact object that changed

An event instance doubles as a registration template: a listener registers
``ObjectAddedEvent(matcher)`` and the observation manager asks each template
whether it ``matches`` the concrete event being raised.
"""

from enum import Enum
from typing import Optional, Union

from .matchers import ReferenceMatcher
from .references import ObjectReference


class EventKind(str, Enum):
    """Whether the comment was created or modified."""

    ADDED = "added"
    UPDATED = "updated"


class DocumentChangeEvent:
    """Base class for all document change events."""

    kind: EventKind

    def matches(self, event: "DocumentChangeEvent") -> bool:
        return type(event) is type(self)

    @property
    def reference(self) -> Optional[ObjectReference]:
        return None

    def __eq__(self, other) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CommentAddedEvent(DocumentChangeEvent):
    kind = EventKind.ADDED


class CommentUpdatedEvent(DocumentChangeEvent):
    kind = EventKind.UPDATED


class ObjectEvent(DocumentChangeEvent):
    """Event about one object of a document.

    As a raised event the reference is an ObjectReference. As a template it
    may also be a ReferenceMatcher, or None to match every object.
    """

    def __init__(self, reference: Union[ObjectReference, ReferenceMatcher, None] = None):
        self._reference = reference

    @property
    def reference(self):
        return self._reference

    def matches(self, event: DocumentChangeEvent) -> bool:
        if type(event) is not type(self):
            return False
        if self._reference is None:
            return True
        if isinstance(self._reference, ObjectReference):
            return self._reference == event.reference
        return self._reference.matches(event.reference)

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and other.reference == self._reference

    def __hash__(self) -> int:
        return hash((type(self), str(self._reference)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._reference!r})"


class ObjectAddedEvent(ObjectEvent):
    kind = EventKind.ADDED


class ObjectUpdatedEvent(ObjectEvent):
    kind = EventKind.UPDATED
