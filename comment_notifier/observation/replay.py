"""Replay a YAML script of document change events through an ObservationManager.

Example script::

    events:
      - kind: comment_added
        document: Main.Page1
      - kind: object_added
        document: Main.Page1
        object: 1
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from comment_notifier.domain.events import (
    CommentAddedEvent,
    CommentUpdatedEvent,
    DocumentChangeEvent,
    ObjectAddedEvent,
    ObjectUpdatedEvent,
)
from comment_notifier.domain.references import (
    COMMENT_CLASS,
    CONTENT_SPACE,
    DocumentReference,
    InvalidReferenceError,
    ObjectReference,
)
from comment_notifier.logging import get_logger
from comment_notifier.store.exceptions import DocumentNotFoundError, StoreError
from comment_notifier.store.ports import DocumentStore

from .manager import ObservationManager

logger = get_logger(__name__, component="observation")


class ScriptedKind(str, Enum):
    COMMENT_ADDED = "comment_added"
    COMMENT_UPDATED = "comment_updated"
    OBJECT_ADDED = "object_added"
    OBJECT_UPDATED = "object_updated"


class ScriptedEvent(BaseModel):
    """One entry of an event script."""

    kind: ScriptedKind
    document: str = Field(..., min_length=1)
    object: Optional[int] = Field(None, ge=0, description="Comment number, object events only")
    class_name: str = Field(COMMENT_CLASS, description="Class of the changed object")

    def to_event(self, document: DocumentReference) -> DocumentChangeEvent:
        if self.kind == ScriptedKind.COMMENT_ADDED:
            return CommentAddedEvent()
        if self.kind == ScriptedKind.COMMENT_UPDATED:
            return CommentUpdatedEvent()

        reference = ObjectReference(document, self.class_name, self.object)
        if self.kind == ScriptedKind.OBJECT_ADDED:
            return ObjectAddedEvent(reference)
        return ObjectUpdatedEvent(reference)


class EventScript(BaseModel):
    events: List[ScriptedEvent] = Field(default_factory=list)


def load_event_script(path: Path) -> EventScript:
    """Read and validate an event script.

    Raises:
        StoreError: If the file is missing or malformed
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise StoreError(f"Event script not found: {path}")
    except yaml.YAMLError as e:
        raise StoreError(f"Failed to parse event script {path}: {e}") from e

    try:
        return EventScript.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{' -> '.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise StoreError("Invalid event script: " + "; ".join(errors)) from e


def replay_events(script: EventScript, store: DocumentStore, manager: ObservationManager) -> int:
    """Raise every scripted event with its source document.

    Entries naming an unknown or malformed document are logged and skipped.

    Returns:
        Number of events raised
    """
    raised = 0
    for index, entry in enumerate(script.events):
        try:
            document = store.get_document_by_name(entry.document, default_space=CONTENT_SPACE)
        except (DocumentNotFoundError, InvalidReferenceError) as e:
            logger.warning(
                f"Skipping event #{index}: {e}",
                extra={"event": "replay.document_missing", "document": entry.document},
            )
            continue

        event = entry.to_event(document.reference)
        delivered = manager.notify(event, document)
        raised += 1
        logger.debug(
            f"Raised {event!r} on {document.reference} to {delivered} listener(s)",
            extra={"event": "replay.event_raised"},
        )

    return raised
