"""Document store exceptions."""


class StoreError(Exception):
    """Base exception for document store failures."""

    pass


class DocumentNotFoundError(StoreError):
    """Raised when a requested document does not exist.

    Callers treating absence as a normal state (e.g. a user without a profile
    page) catch this explicitly; every other StoreError is unexpected.
    """

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Document not found: {reference}")
