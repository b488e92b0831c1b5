"""Unit tests for the observation manager and event script replay."""

from unittest.mock import Mock

import pytest

from comment_notifier.domain.events import (
    CommentAddedEvent,
    CommentUpdatedEvent,
    ObjectAddedEvent,
    ObjectUpdatedEvent,
)
from comment_notifier.domain.matchers import comment_object_matcher
from comment_notifier.domain.references import (
    USER_CLASS,
    DocumentReference,
    ObjectReference,
    comment_reference,
)
from comment_notifier.observation import (
    EventScript,
    ObservationManager,
    load_event_script,
    replay_events,
)
from comment_notifier.store import StoreError, build_store
from tests.helpers import sample_wiki

PAGE = DocumentReference("xwiki", "Main", "Page1")


def make_listener(name, events):
    listener = Mock()
    listener.name = name
    listener.events = events
    return listener


class TestObservationManager:
    """Test suite for ObservationManager."""

    def test_notify_matching_listeners_only(self):
        """Test that events reach only listeners whose templates match."""
        manager = ObservationManager()
        coarse = make_listener("coarse", [CommentAddedEvent(), CommentUpdatedEvent()])
        narrow = make_listener("narrow", [ObjectAddedEvent(comment_object_matcher())])
        manager.add_listener(coarse)
        manager.add_listener(narrow)

        source = object()
        assert manager.notify(CommentAddedEvent(), source) == 1
        coarse.on_event.assert_called_once_with(CommentAddedEvent(), source, None)
        narrow.on_event.assert_not_called()

        event = ObjectAddedEvent(comment_reference(PAGE, 0))
        assert manager.notify(event, source, {"k": "v"}) == 1
        narrow.on_event.assert_called_once_with(event, source, {"k": "v"})

    def test_non_matching_reference_not_delivered(self):
        """Test that objects of other classes are filtered out."""
        manager = ObservationManager()
        narrow = make_listener("narrow", [ObjectUpdatedEvent(comment_object_matcher())])
        manager.add_listener(narrow)

        assert manager.notify(ObjectUpdatedEvent(ObjectReference(PAGE, USER_CLASS, 0)), None) == 0
        narrow.on_event.assert_not_called()

    def test_duplicate_name_rejected(self):
        """Test that two listeners cannot share a name."""
        manager = ObservationManager()
        manager.add_listener(make_listener("same", [CommentAddedEvent()]))

        with pytest.raises(ValueError, match="already registered"):
            manager.add_listener(make_listener("same", [CommentUpdatedEvent()]))

    def test_remove_and_get_listener(self):
        """Test listener lookup and removal."""
        manager = ObservationManager()
        listener = make_listener("one", [CommentAddedEvent()])
        manager.add_listener(listener)

        assert manager.get_listener("one") is listener
        assert manager.listeners == [listener]
        assert manager.remove_listener("one") is listener
        assert manager.remove_listener("one") is None
        assert manager.notify(CommentAddedEvent(), None) == 0

    def test_failing_listener_does_not_block_others(self, caplog):
        """Test that an exception escaping a listener is logged and isolated."""
        manager = ObservationManager()
        broken = make_listener("broken", [CommentAddedEvent()])
        broken.on_event.side_effect = RuntimeError("boom")
        healthy = make_listener("healthy", [CommentAddedEvent()])
        manager.add_listener(broken)
        manager.add_listener(healthy)

        assert manager.notify(CommentAddedEvent(), None) == 2

        healthy.on_event.assert_called_once()
        failures = [r for r in caplog.records if getattr(r, "event", None) == "observation.listener.failure"]
        assert len(failures) == 1
        assert failures[0].listener == "broken"


class TestEventScript:
    """Test suite for loading and replaying event scripts."""

    def test_load_event_script(self, tmp_path):
        """Test parsing a YAML event script."""
        script_file = tmp_path / "events.yaml"
        script_file.write_text(
            """
events:
  - kind: comment_added
    document: Main.Page1
  - kind: object_updated
    document: Main.Page1
    object: 0
"""
        )

        script = load_event_script(script_file)

        assert [e.kind.value for e in script.events] == ["comment_added", "object_updated"]
        assert script.events[1].object == 0

    def test_to_event(self):
        """Test turning script entries into events."""
        script = EventScript.model_validate(
            {
                "events": [
                    {"kind": "comment_added", "document": "Main.Page1"},
                    {"kind": "comment_updated", "document": "Main.Page1"},
                    {"kind": "object_added", "document": "Main.Page1", "object": 1},
                    {"kind": "object_updated", "document": "Main.Page1", "object": 2},
                ]
            }
        )

        events = [entry.to_event(PAGE) for entry in script.events]

        assert events == [
            CommentAddedEvent(),
            CommentUpdatedEvent(),
            ObjectAddedEvent(comment_reference(PAGE, 1)),
            ObjectUpdatedEvent(comment_reference(PAGE, 2)),
        ]

    def test_invalid_kind(self, tmp_path):
        """Test that unknown event kinds are rejected."""
        script_file = tmp_path / "events.yaml"
        script_file.write_text("events:\n  - kind: comment_deleted\n    document: Main.Page1\n")

        with pytest.raises(StoreError, match="Invalid event script"):
            load_event_script(script_file)

    def test_missing_script(self, tmp_path):
        """Test that a missing file raises StoreError."""
        with pytest.raises(StoreError, match="not found"):
            load_event_script(tmp_path / "missing.yaml")

    def test_replay_raises_events_with_source_document(self):
        """Test that each entry is raised with the stored document as source."""
        store = build_store(sample_wiki())
        manager = Mock()
        manager.notify.return_value = 1
        script = EventScript.model_validate(
            {"events": [{"kind": "object_added", "document": "Main.Page1", "object": 0}]}
        )

        assert replay_events(script, store, manager) == 1

        event, source = manager.notify.call_args[0]
        assert event == ObjectAddedEvent(comment_reference(PAGE, 0))
        assert source is store.get_document(PAGE)

    def test_replay_resolves_bare_names_like_the_fixture(self):
        """Test that a document named without a space is found in Main, as the fixture stores it."""
        data = sample_wiki()
        data["documents"][0]["reference"] = "Page1"
        store = build_store(data)
        manager = Mock()
        script = EventScript.model_validate({"events": [{"kind": "comment_added", "document": "Page1"}]})

        assert replay_events(script, store, manager) == 1

        _, source = manager.notify.call_args[0]
        assert source is store.get_document(PAGE)

    def test_replay_skips_unknown_documents(self, caplog):
        """Test that entries naming unknown or malformed documents are skipped."""
        store = build_store(sample_wiki())
        manager = Mock()
        script = EventScript.model_validate(
            {
                "events": [
                    {"kind": "comment_added", "document": "Main.Missing"},
                    {"kind": "comment_added", "document": "Main."},
                ]
            }
        )

        assert replay_events(script, store, manager) == 0
        manager.notify.assert_not_called()
        assert "Skipping event #0" in caplog.text
