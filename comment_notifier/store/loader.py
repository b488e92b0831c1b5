"""Load a wiki fixture (users, documents and their comments) from YAML.

Example fixture::

    wiki: xwiki
    users:
      - name: alice
        email: alice@example.com
    documents:
      - reference: Main.Page1
        author: XWiki.alice
        comments:
          - author: XWiki.bob
            text: Nice page
          - author: XWiki.carol
            text: Thanks!
            reply_to: 0
"""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from comment_notifier.domain.models import CommentEntity, DocumentSnapshot, UserProfile
from comment_notifier.domain.references import (
    CONTENT_SPACE,
    DEFAULT_WIKI,
    DocumentReference,
    InvalidReferenceError,
)
from comment_notifier.logging import get_logger

from .exceptions import StoreError
from .memory import InMemoryDocumentStore

logger = get_logger(__name__, component="store")


class UserFixture(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class CommentFixture(BaseModel):
    author: Optional[str] = None
    text: Optional[str] = None
    reply_to: Optional[Union[int, str]] = None


class DocumentFixture(BaseModel):
    reference: str = Field(..., min_length=1)
    author: Optional[str] = None
    title: Optional[str] = None
    # None entries keep the numbering of deleted comments
    comments: List[Optional[CommentFixture]] = Field(default_factory=list)


class WikiFixture(BaseModel):
    wiki: str = DEFAULT_WIKI
    users: List[UserFixture] = Field(default_factory=list)
    documents: List[DocumentFixture] = Field(default_factory=list)


def load_wiki_fixture(
    path: Path, store: Optional[InMemoryDocumentStore] = None
) -> InMemoryDocumentStore:
    """Read a YAML fixture into an in-memory document store.

    Args:
        path: YAML file to read
        store: Existing store to populate (a new one is created if None)

    Returns:
        The populated store

    Raises:
        StoreError: If the file is missing, unreadable or malformed
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise StoreError(f"Wiki fixture not found: {path}")
    except yaml.YAMLError as e:
        raise StoreError(f"Failed to parse wiki fixture {path}: {e}") from e

    return build_store(data, store)


def build_store(data: dict, store: Optional[InMemoryDocumentStore] = None) -> InMemoryDocumentStore:
    """Populate a store from an already parsed fixture mapping."""
    try:
        fixture = WikiFixture.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            errors.append(f"{field_path}: {error['msg']}")
        raise StoreError("Invalid wiki fixture: " + "; ".join(errors)) from e

    if store is None:
        store = InMemoryDocumentStore(default_wiki=fixture.wiki)

    try:
        for user in fixture.users:
            reference = DocumentReference.parse(user.name, default_wiki=fixture.wiki)
            store.save(
                DocumentSnapshot(
                    reference=reference,
                    author=str(reference),
                    title=user.name,
                    user_profile=UserProfile(
                        email=user.email,
                        first_name=user.first_name,
                        last_name=user.last_name,
                    ),
                )
            )

        for document in fixture.documents:
            comments = [
                None
                if comment is None
                else CommentEntity(
                    number=number,
                    author=comment.author,
                    text=comment.text,
                    reply_to=comment.reply_to,
                )
                for number, comment in enumerate(document.comments)
            ]
            store.save(
                DocumentSnapshot(
                    reference=DocumentReference.parse(
                        document.reference, default_wiki=fixture.wiki, default_space=CONTENT_SPACE
                    ),
                    author=document.author or "",
                    title=document.title,
                    comments=comments,
                )
            )
    except (InvalidReferenceError, ValidationError) as e:
        raise StoreError(f"Invalid wiki fixture: {e}") from e

    logger.info(
        f"Loaded wiki fixture with {len(fixture.users)} users and {len(fixture.documents)} documents",
        extra={"event": "store.fixture.loaded", "wiki": fixture.wiki},
    )
    return store
