"""Unit tests for the identity resolver."""

from unittest.mock import Mock

import pytest

from comment_notifier.domain.models import DocumentSnapshot
from comment_notifier.domain.references import DocumentReference
from comment_notifier.notifications.identity import IdentityResolver
from comment_notifier.store import StoreError, build_store
from tests.helpers import sample_wiki


@pytest.fixture
def store():
    return build_store(sample_wiki())


class TestIdentityResolver:
    """Test suite for IdentityResolver.resolve_email."""

    def test_resolves_profile_email(self, store):
        """Test that the email on the user's profile is returned."""
        assert IdentityResolver(store).resolve_email("XWiki.alice") == "alice@x.com"

    def test_resolves_bare_and_qualified_names(self, store):
        """Test that all reference spellings resolve to the same profile."""
        resolver = IdentityResolver(store)
        assert resolver.resolve_email("bob") == "bob@x.com"
        assert resolver.resolve_email("xwiki:XWiki.bob") == "bob@x.com"
        assert resolver.resolve_email("  XWiki.bob  ") == "bob@x.com"

    @pytest.mark.parametrize("identity", [None, "", "   "])
    def test_blank_identity(self, store, identity):
        """Test that a blank identity resolves to None."""
        assert IdentityResolver(store).resolve_email(identity) is None

    def test_unknown_user(self, store):
        """Test that a user without profile page resolves to None."""
        assert IdentityResolver(store).resolve_email("XWiki.nobody") is None

    def test_page_without_user_object(self, store):
        """Test that a page carrying no user object resolves to None."""
        assert IdentityResolver(store).resolve_email("Main.Page1") is None

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_blank_email(self, email):
        """Test that a profile with blank email resolves to None."""
        store = build_store(sample_wiki(alice_email=email))
        assert IdentityResolver(store).resolve_email("XWiki.alice") is None

    def test_other_store_errors_propagate(self):
        """Test that unexpected store failures are not swallowed."""
        store = Mock()
        store.get_document_by_name.side_effect = StoreError("backend down")

        with pytest.raises(StoreError, match="backend down"):
            IdentityResolver(store).resolve_email("XWiki.alice")

    def test_uses_store_port_only(self):
        """Test that any DocumentStore implementation can back the resolver."""
        profile_page = DocumentSnapshot(reference=DocumentReference("xwiki", "XWiki", "dave"))
        store = Mock()
        store.get_document_by_name.return_value = profile_page

        assert IdentityResolver(store).resolve_email("XWiki.dave") is None
        store.get_document_by_name.assert_called_once_with("XWiki.dave")
