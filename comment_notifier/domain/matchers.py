"""Reference matchers used to register interest in families of objects."""

import re
from typing import Optional, Pattern, Protocol, Union

from .references import ObjectReference

# Any comment object, on any document of any wiki
COMMENT_OBJECT_PATTERN = re.compile(r"^[^:]+:.+\^XWiki\.XWikiComments\[\d*\]$")


class ReferenceMatcher(Protocol):
    """Predicate over object references."""

    def matches(self, reference: Optional[ObjectReference]) -> bool:
        ...


class RegexReferenceMatcher:
    """Match object references whose serialized form matches a pattern."""

    def __init__(self, pattern: Union[str, Pattern[str]]):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def matches(self, reference: Optional[ObjectReference]) -> bool:
        if reference is None:
            return False
        return self.pattern.match(str(reference)) is not None

    def __eq__(self, other) -> bool:
        return isinstance(other, RegexReferenceMatcher) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"RegexReferenceMatcher({self.pattern.pattern!r})"


def comment_object_matcher() -> RegexReferenceMatcher:
    """Matcher accepting comment objects on any wiki."""
    return RegexReferenceMatcher(COMMENT_OBJECT_PATTERN)
