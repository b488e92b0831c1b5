"""Build the recipient list of a comment notification."""

from typing import List

from comment_notifier.domain.models import CommentEntity, DocumentSnapshot
from comment_notifier.logging import get_logger

from .composer import normalize_address
from .identity import IdentityResolver
from .models import InvalidRecipientError

logger = get_logger(__name__, component="recipients")


class RecipientSetBuilder:
    """Combine the document author and, for replies, the parent comment's author.

    The document author is mandatory: without an address for them the result
    is empty and nothing gets sent. A reply target whose address is malformed is
    dropped so the author is still notified. Reply chains are followed one hop only;
    self-references and cycles are not detected.
    """

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    def build(
        self,
        document: DocumentSnapshot,
        comment: CommentEntity,
        resolve_replies: bool = False,
    ) -> List[str]:
        """Return unique recipient addresses, document author first."""
        author_email = self.resolver.resolve_email(document.author)
        if not author_email:
            return []

        recipients = [author_email]

        if resolve_replies and comment.reply_to is not None:
            parent = document.get_comment(comment.reply_to)
            if parent is None:
                logger.debug(
                    f"Comment {comment.number} replies to missing comment {comment.reply_to}",
                    extra={"event": "recipients.reply_target_missing", "reply_to": comment.reply_to},
                )
            else:
                parent_email = self.resolver.resolve_email(parent.author)
                if parent_email and _is_deliverable(parent_email):
                    recipients.append(parent_email)

        return _unique(recipients)


def _is_deliverable(address: str) -> bool:
    try:
        normalize_address(address)
    except InvalidRecipientError as e:
        logger.debug(
            f"Dropping reply target address: {e}",
            extra={"event": "recipients.reply_target_invalid"},
        )
        return False
    return True


def _unique(addresses: List[str]) -> List[str]:
    """Drop repeated addresses (case-insensitive), keeping the first spelling."""
    seen = set()
    unique = []
    for address in addresses:
        key = address.lower()
        if key not in seen:
            seen.add(key)
            unique.append(address)
    return unique
