"""In-process event source for document change events."""

from .manager import EventListener, ObservationManager
from .replay import EventScript, ScriptedEvent, load_event_script, replay_events

__all__ = [
    "EventListener",
    "ObservationManager",
    "EventScript",
    "ScriptedEvent",
    "load_event_script",
    "replay_events",
]
