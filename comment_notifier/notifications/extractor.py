"""Extract the changed comment from a document snapshot."""

from typing import Optional

from comment_notifier.domain.models import CommentEntity, DocumentSnapshot
from comment_notifier.domain.references import ObjectReference


class CommentExtractor:
    """Find the comment object an event is about.

    Without a reference the document's first comment is used (coarse comment
    events carry no object reference). With a reference, exactly that object
    is returned. A missing comment yields None, e.g. when the object was
    deleted before the event was handled.
    """

    def extract(
        self, document: DocumentSnapshot, reference: Optional[ObjectReference] = None
    ) -> Optional[CommentEntity]:
        if reference is None:
            return document.get_comment()
        return document.get_comment_by_reference(reference)
