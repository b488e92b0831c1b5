"""Document store port.

The notification pipeline only reads documents, so the contract is limited
to lookups. Implementations raise DocumentNotFoundError for missing
documents and StoreError for any other failure.
"""

from typing import Protocol, Union

from comment_notifier.domain.models import DocumentSnapshot
from comment_notifier.domain.references import USER_SPACE, DocumentReference


class DocumentStore(Protocol):
    """Read access to wiki documents."""

    def get_document(self, reference: DocumentReference) -> DocumentSnapshot:
        ...

    def get_document_by_name(
        self, name: Union[str, DocumentReference], default_space: str = USER_SPACE
    ) -> DocumentSnapshot:
        ...

    def exists(self, reference: DocumentReference) -> bool:
        ...
