"""In-memory document store."""

import threading
from typing import Dict, Iterator, Union

from comment_notifier.domain.models import DocumentSnapshot
from comment_notifier.domain.references import DEFAULT_WIKI, USER_SPACE, DocumentReference
from comment_notifier.logging import get_logger

from .exceptions import DocumentNotFoundError

logger = get_logger(__name__, component="store")


class InMemoryDocumentStore:
    """Dictionary-backed DocumentStore.

    Reads are lock-free lookups; writes take a lock so that a store shared by
    several event threads never observes a half-applied save.
    """

    def __init__(self, default_wiki: str = DEFAULT_WIKI):
        self.default_wiki = default_wiki
        self._documents: Dict[DocumentReference, DocumentSnapshot] = {}
        self._lock = threading.Lock()

    def save(self, document: DocumentSnapshot) -> DocumentSnapshot:
        with self._lock:
            self._documents[document.reference] = document
        logger.debug(f"Stored document {document.reference}")
        return document

    def delete(self, reference: DocumentReference) -> None:
        with self._lock:
            if self._documents.pop(reference, None) is None:
                raise DocumentNotFoundError(reference)

    def get_document(self, reference: DocumentReference) -> DocumentSnapshot:
        try:
            return self._documents[reference]
        except KeyError:
            raise DocumentNotFoundError(reference) from None

    def get_document_by_name(
        self, name: Union[str, DocumentReference], default_space: str = USER_SPACE
    ) -> DocumentSnapshot:
        """Look a document up by reference string (``alice``, ``XWiki.alice``, ``xwiki:XWiki.alice``).

        A name without a space resolves to default_space, the user space unless told otherwise.
        """
        if isinstance(name, DocumentReference):
            return self.get_document(name)
        return self.get_document(
            DocumentReference.parse(name, default_wiki=self.default_wiki, default_space=default_space)
        )

    def exists(self, reference: DocumentReference) -> bool:
        return reference in self._documents

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(list(self._documents.values()))

    def __len__(self) -> int:
        return len(self._documents)
