"""Document store port and implementations."""

from .exceptions import DocumentNotFoundError, StoreError
from .loader import build_store, load_wiki_fixture
from .memory import InMemoryDocumentStore
from .ports import DocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "DocumentNotFoundError",
    "StoreError",
    "build_store",
    "load_wiki_fixture",
]
