"""Resolve user references to notification email addresses."""

from typing import Optional

from comment_notifier.logging import get_logger
from comment_notifier.store.exceptions import DocumentNotFoundError
from comment_notifier.store.ports import DocumentStore

logger = get_logger(__name__, component="identity")


class IdentityResolver:
    """Look up the email address stored on a user's profile page."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def resolve_email(self, identity: Optional[str]) -> Optional[str]:
        """Return the email of the user behind ``identity``, or None.

        None covers every expected absence: blank identity, no profile page,
        no user object on the page, blank email. Store failures other than a
        missing document propagate.
        """
        if identity is None or not str(identity).strip():
            return None

        try:
            user_document = self.store.get_document_by_name(str(identity).strip())
        except DocumentNotFoundError:
            logger.debug(
                f"No profile page for user {identity}",
                extra={"event": "identity.missing_profile", "identity": str(identity)},
            )
            return None

        profile = user_document.get_user_profile()
        if profile is None or not profile.email:
            logger.debug(
                f"User {identity} has no notification email",
                extra={"event": "identity.no_email", "identity": str(identity)},
            )
            return None

        return profile.email
