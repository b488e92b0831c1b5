"""Unit tests for the comment listeners and the dispatch pipeline.

Tests CommentDispatcher, CommentEventListener and
CommentNotificationEventListener for:
- Registered event templates
- Which comment each trigger reports on
- Early exits (missing comment, no author email)
- The error boundary: every failure logged once, nothing propagates
"""

import logging
from unittest.mock import Mock

import pytest

from comment_notifier.domain.events import (
    CommentAddedEvent,
    CommentUpdatedEvent,
    EventKind,
    ObjectAddedEvent,
    ObjectUpdatedEvent,
)
from comment_notifier.domain.matchers import comment_object_matcher
from comment_notifier.domain.references import DocumentReference, comment_reference
from comment_notifier.listeners import (
    CommentDispatcher,
    CommentEventListener,
    CommentNotificationEventListener,
    build_listeners,
)
from comment_notifier.logging.config import ContextualFilter
from comment_notifier.notifications.composer import NotificationComposer
from comment_notifier.notifications.models import MailSessionError
from comment_notifier.store import StoreError, build_store
from tests.helpers import sample_wiki

PAGE = DocumentReference("xwiki", "Main", "Page1")

REPLY_THREAD = [
    {"author": "XWiki.bob", "text": "Nice page"},
    {"author": "XWiki.carol", "text": "Thanks for the feedback", "reply_to": 0},
]


@pytest.fixture
def mail_sender():
    sender = Mock()
    sender.send_async.return_value = "batch-1"
    return sender


@pytest.fixture
def mail_listener():
    return Mock()


@pytest.fixture
def session():
    return Mock()


def make_dispatcher(data, mail_sender, mail_listener, session_factory):
    store = build_store(data)
    dispatcher = CommentDispatcher(
        store=store,
        composer=NotificationComposer(),
        mail_sender=mail_sender,
        session_factory=session_factory,
        mail_listener=mail_listener,
    )
    return dispatcher, store


@pytest.fixture
def setup(mail_sender, mail_listener, session):
    """Dispatcher over a wiki whose Page1 has a top-level comment and a reply."""
    dispatcher, store = make_dispatcher(
        sample_wiki(comments=REPLY_THREAD), mail_sender, mail_listener, lambda: session
    )
    return dispatcher, store.get_document(PAGE)


def sent_message(mail_sender):
    messages, _, _ = mail_sender.send_async.call_args[0]
    assert len(messages) == 1
    return messages[0]


class TestListenerRegistration:
    """Test suite for the event templates each listener registers."""

    def test_comment_event_listener_events(self, setup):
        """Test that the broad trigger listens to coarse comment events."""
        listener = CommentEventListener(setup[0])
        assert listener.name == "CommentEventListener"
        assert listener.events == [CommentAddedEvent(), CommentUpdatedEvent()]

    def test_comment_notification_listener_events(self, setup):
        """Test that the narrow trigger listens to comment object events."""
        listener = CommentNotificationEventListener(setup[0])
        matcher = comment_object_matcher()
        assert listener.name == "CommentNotificationEventListener"
        assert listener.events == [ObjectAddedEvent(matcher), ObjectUpdatedEvent(matcher)]

    def test_build_listeners(self, setup):
        """Test that both listeners share one dispatcher."""
        listeners = build_listeners(setup[0])
        assert [type(l) for l in listeners] == [CommentEventListener, CommentNotificationEventListener]
        assert all(l.dispatcher is setup[0] for l in listeners)


class TestCommentEventListener:
    """Test suite for the broad trigger."""

    def test_added_notifies_author(self, setup, mail_sender, mail_listener, session):
        """Test the happy path for an added comment."""
        dispatcher, page = setup

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), page)

        assert result.is_submitted()
        assert result.batch_id == "batch-1"
        assert result.recipients == ["alice@x.com"]
        message = sent_message(mail_sender)
        assert message.subject == "[XWiki] Comment added to Page1"
        assert message.body == "Nice page"
        _, used_session, used_listener = mail_sender.send_async.call_args[0]
        assert used_session is session
        assert used_listener is mail_listener

    def test_updated_subject(self, setup, mail_sender):
        """Test the subject for an updated comment."""
        dispatcher, page = setup

        CommentEventListener(dispatcher).on_event(CommentUpdatedEvent(), page)

        assert sent_message(mail_sender).subject == "[XWiki] Comment updated on Page1"

    def test_uses_first_comment_and_ignores_replies(self, mail_sender, mail_listener, session):
        """Test that the broad trigger reports the first comment to the author only."""
        comments = [None, REPLY_THREAD[0], {"author": "XWiki.carol", "text": "Reply", "reply_to": 1}]
        dispatcher, store = make_dispatcher(
            sample_wiki(comments=comments), mail_sender, mail_listener, lambda: session
        )

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), store.get_document(PAGE))

        assert result.recipients == ["alice@x.com"]
        assert sent_message(mail_sender).body == "Nice page"

    def test_document_without_comments_is_skipped(self, mail_sender, mail_listener, session):
        """Test that nothing is sent when the document has no comment."""
        dispatcher, store = make_dispatcher(
            sample_wiki(comments=[]), mail_sender, mail_listener, lambda: session
        )

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), store.get_document(PAGE))

        assert result.status == "skipped"
        assert result.reason == "comment_missing"
        mail_sender.send_async.assert_not_called()

    def test_author_without_email_is_skipped(self, mail_sender, mail_listener, session):
        """Test that nothing is sent when the document author has no email."""
        dispatcher, store = make_dispatcher(
            sample_wiki(alice_email="  "), mail_sender, mail_listener, lambda: session
        )

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), store.get_document(PAGE))

        assert result.status == "skipped"
        assert result.reason == "no_recipient"
        mail_sender.send_async.assert_not_called()

    def test_localhost_author_is_notified(self, mail_sender, mail_listener, session):
        """Test that an author address without a dotted domain is accepted."""
        dispatcher, store = make_dispatcher(
            sample_wiki(alice_email="alice@localhost"), mail_sender, mail_listener, lambda: session
        )

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), store.get_document(PAGE))

        assert result.status == "submitted"
        assert sent_message(mail_sender).recipients == ["alice@localhost"]


class TestCommentNotificationEventListener:
    """Test suite for the narrow trigger."""

    def test_reply_notifies_parent_author(self, setup, mail_sender):
        """Test that a reply goes to the document author and the parent's author."""
        dispatcher, page = setup
        event = ObjectAddedEvent(comment_reference(PAGE, 1))

        result = CommentNotificationEventListener(dispatcher).on_event(event, page)

        assert result.recipients == ["alice@x.com", "bob@x.com"]
        message = sent_message(mail_sender)
        assert message.recipients == ["alice@x.com", "bob@x.com"]
        assert message.body == "Thanks for the feedback"
        assert message.subject == "[XWiki] Comment added to Page1"

    def test_object_updated_subject(self, setup, mail_sender):
        """Test that object updates use the updated subject."""
        dispatcher, page = setup

        CommentNotificationEventListener(dispatcher).on_event(
            ObjectUpdatedEvent(comment_reference(PAGE, 0)), page
        )

        assert sent_message(mail_sender).subject == "[XWiki] Comment updated on Page1"

    def test_referenced_comment_is_reported(self, setup, mail_sender):
        """Test that the referenced object, not the first comment, is used."""
        dispatcher, page = setup

        CommentNotificationEventListener(dispatcher).on_event(
            ObjectUpdatedEvent(comment_reference(PAGE, 1)), page
        )

        assert sent_message(mail_sender).body == "Thanks for the feedback"

    def test_deleted_object_is_skipped(self, setup, mail_sender):
        """Test that an object gone before handling yields no notification."""
        dispatcher, page = setup

        result = CommentNotificationEventListener(dispatcher).on_event(
            ObjectAddedEvent(comment_reference(PAGE, 9)), page
        )

        assert result.status == "skipped"
        assert result.reason == "comment_missing"
        mail_sender.send_async.assert_not_called()

    def test_non_reply_matches_broad_trigger(self, setup, mail_sender):
        """Test that both triggers agree on recipients for a top-level comment."""
        dispatcher, page = setup

        narrow = CommentNotificationEventListener(dispatcher).on_event(
            ObjectAddedEvent(comment_reference(PAGE, 0)), page
        )
        broad = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), page)

        assert narrow.recipients == broad.recipients == ["alice@x.com"]

    def test_reply_to_intranet_address(self, mail_sender, mail_listener, session):
        """Test that a parent author on a .local domain is notified with the author."""
        data = sample_wiki(comments=REPLY_THREAD)
        data["users"][1]["email"] = "bob@corp.local"
        dispatcher, store = make_dispatcher(data, mail_sender, mail_listener, lambda: session)

        result = CommentNotificationEventListener(dispatcher).on_event(
            ObjectAddedEvent(comment_reference(PAGE, 1)), store.get_document(PAGE)
        )

        assert result.status == "submitted"
        assert sent_message(mail_sender).recipients == ["alice@x.com", "bob@corp.local"]

    def test_malformed_parent_address_still_notifies_author(
        self, mail_sender, mail_listener, session
    ):
        """Test that a bad reply target address only removes that recipient."""
        data = sample_wiki(comments=REPLY_THREAD)
        data["users"][1]["email"] = "bob@@corp"
        dispatcher, store = make_dispatcher(data, mail_sender, mail_listener, lambda: session)

        result = CommentNotificationEventListener(dispatcher).on_event(
            ObjectAddedEvent(comment_reference(PAGE, 1)), store.get_document(PAGE)
        )

        assert result.status == "submitted"
        assert sent_message(mail_sender).recipients == ["alice@x.com"]


class TestErrorBoundary:
    """Test suite for failure handling at the listener boundary."""

    def test_send_async_failure_logged_once(self, setup, mail_sender, caplog):
        """Test that a failing submission is logged once and does not propagate."""
        dispatcher, page = setup
        mail_sender.send_async.side_effect = RuntimeError("queue closed")

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), page)

        assert result.status == "failed"
        assert "queue closed" in result.reason
        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert "Failure in comment listener" in errors[0].getMessage()
        assert errors[0].exc_info is not None
        assert errors[0].event == "notification.failed"

    def test_session_factory_failure_logged(self, mail_sender, mail_listener, caplog):
        """Test that a mail session that cannot be built is handled at the boundary."""

        def broken_session():
            raise MailSessionError("Mail transport property 'host' is not set")

        dispatcher, store = make_dispatcher(sample_wiki(), mail_sender, mail_listener, broken_session)

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), store.get_document(PAGE))

        assert result.status == "failed"
        mail_sender.send_async.assert_not_called()
        assert "host" in caplog.text

    def test_store_failure_logged(self, mail_sender, mail_listener, session, caplog):
        """Test that unexpected store errors are caught at the boundary."""
        store = Mock()
        store.get_document_by_name.side_effect = StoreError("backend down")
        dispatcher = CommentDispatcher(
            store=store,
            composer=NotificationComposer(),
            mail_sender=mail_sender,
            session_factory=lambda: session,
            mail_listener=mail_listener,
        )
        page = build_store(sample_wiki()).get_document(PAGE)

        result = CommentNotificationEventListener(dispatcher).on_event(
            ObjectAddedEvent(comment_reference(PAGE, 0)), page
        )

        assert result.status == "failed"
        assert "backend down" in caplog.text

    def test_invalid_address_logged(self, mail_sender, mail_listener, session):
        """Test that a malformed stored email fails the event without raising."""
        dispatcher, store = make_dispatcher(
            sample_wiki(alice_email="not-an-address"), mail_sender, mail_listener, lambda: session
        )

        result = CommentEventListener(dispatcher).on_event(CommentAddedEvent(), store.get_document(PAGE))

        assert result.status == "failed"
        mail_sender.send_async.assert_not_called()

    def test_failure_log_carries_context(self, setup, mail_sender, caplog):
        """Test that the failure record carries listener, document and object reference."""
        dispatcher, page = setup
        mail_sender.send_async.side_effect = RuntimeError("queue closed")
        captured = []

        class Capture(logging.Handler):
            def emit(self, record):
                captured.append(record)

        handler = Capture(level=logging.ERROR)
        handler.addFilter(ContextualFilter())
        root = logging.getLogger()
        root.addHandler(handler)
        try:
            CommentNotificationEventListener(dispatcher).on_event(
                ObjectAddedEvent(comment_reference(PAGE, 0)), page
            )
        finally:
            root.removeHandler(handler)

        assert len(captured) == 1
        record = captured[0]
        assert record.listener == "CommentNotificationEventListener"
        assert record.event_type == "ObjectAddedEvent"
        assert record.document == "xwiki:Main.Page1"
        assert record.object_reference == "xwiki:Main.Page1^XWiki.XWikiComments[0]"

    def test_dispatch_kind_passed_through(self, setup, mail_sender):
        """Test that the dispatcher can be driven directly with an event kind."""
        dispatcher, page = setup

        result = dispatcher.dispatch("direct", EventKind.UPDATED, page)

        assert result.listener == "direct"
        assert sent_message(mail_sender).subject == "[XWiki] Comment updated on Page1"
