"""Entity references for wiki documents and the objects attached to them.

Serialized forms:
- document: ``wiki:Space.Page``
- object:   ``wiki:Space.Page^Space.ClassName[number]``
"""

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_WIKI = "xwiki"
USER_SPACE = "XWiki"
# Space of wiki pages named without one
CONTENT_SPACE = "Main"

COMMENT_CLASS = "XWiki.XWikiComments"
USER_CLASS = "XWiki.XWikiUsers"

_DOCUMENT_PATTERN = re.compile(r"^(?:(?P<wiki>[^:]+):)?(?:(?P<space>.+)\.)?(?P<name>[^.]+)$")
_OBJECT_PATTERN = re.compile(r"^(?P<document>[^^]+)\^(?P<class_name>[^\[]+)\[(?P<number>\d*)\]$")


class InvalidReferenceError(ValueError):
    """Raised when a reference string cannot be parsed."""

    pass


@dataclass(frozen=True)
class DocumentReference:
    """Reference to a wiki document."""

    wiki: str
    space: str
    name: str

    @property
    def local_name(self) -> str:
        """Reference without the wiki prefix (``Space.Page``)."""
        return f"{self.space}.{self.name}"

    def __str__(self) -> str:
        return f"{self.wiki}:{self.local_name}"

    @classmethod
    def parse(
        cls,
        text: str,
        default_wiki: str = DEFAULT_WIKI,
        default_space: str = USER_SPACE,
    ) -> "DocumentReference":
        """Parse ``wiki:Space.Page``, ``Space.Page`` or a bare ``Page``.

        Bare names resolve to the default space, which is where user profile
        pages live, so an author name such as ``alice`` maps to ``XWiki.alice``.

        Raises:
            InvalidReferenceError: If text is blank or malformed
        """
        if text is None or not str(text).strip():
            raise InvalidReferenceError("Document reference cannot be blank")

        match = _DOCUMENT_PATTERN.match(str(text).strip())
        if match is None:
            raise InvalidReferenceError(f"Malformed document reference: '{text}'")

        return cls(
            wiki=match.group("wiki") or default_wiki,
            space=match.group("space") or default_space,
            name=match.group("name"),
        )


@dataclass(frozen=True)
class ObjectReference:
    """Reference to one object (class instance) attached to a document."""

    document: DocumentReference
    class_name: str
    number: Optional[int] = None

    @property
    def name(self) -> str:
        """Object name as it appears after the ``^`` separator."""
        number = "" if self.number is None else str(self.number)
        return f"{self.class_name}[{number}]"

    def __str__(self) -> str:
        return f"{self.document}^{self.name}"

    @classmethod
    def parse(cls, text: str, default_wiki: str = DEFAULT_WIKI) -> "ObjectReference":
        """Parse ``wiki:Space.Page^Space.Class[number]``.

        Raises:
            InvalidReferenceError: If text is malformed
        """
        match = _OBJECT_PATTERN.match(str(text or "").strip())
        if match is None:
            raise InvalidReferenceError(f"Malformed object reference: '{text}'")

        number = match.group("number")
        return cls(
            document=DocumentReference.parse(match.group("document"), default_wiki=default_wiki),
            class_name=match.group("class_name"),
            number=int(number) if number else None,
        )


def comment_reference(document: DocumentReference, number: int) -> ObjectReference:
    """Build the reference of comment object ``number`` on ``document``."""
    return ObjectReference(document=document, class_name=COMMENT_CLASS, number=number)
