"""Core domain models for wiki documents, comments and user profiles.

This module defines the read-only views the notification pipeline works on:
- CommentEntity: one comment object attached to a document
- UserProfile: the user object carried by a user's profile page
- DocumentSnapshot: a document as seen at event time
- MailStatusRecord: delivery state of one outgoing notification
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .references import COMMENT_CLASS, DocumentReference, ObjectReference


class CommentEntity(BaseModel):
    """A comment object (``XWiki.XWikiComments``) attached to a document.

    ``reply_to`` is the number of the comment this one answers. ``None`` means
    a top-level comment; ``0`` is a real reply to the first comment.
    """

    number: int = Field(..., ge=0, description="Position of the object on its document")
    author: str = Field("", description="Reference of the user who wrote the comment")
    text: str = Field("", description="Comment text, transmitted verbatim")
    reply_to: Optional[int] = Field(None, ge=0, description="Number of the parent comment")
    date: Optional[datetime] = Field(None, description="When the comment was written")

    @field_validator("reply_to", mode="before")
    @classmethod
    def blank_reply_to_is_none(cls, v):
        """Blank reply-to values mean "not a reply"."""
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("author", "text", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @property
    def is_reply(self) -> bool:
        return self.reply_to is not None


class UserProfile(BaseModel):
    """User object (``XWiki.XWikiUsers``) stored on a user's profile page."""

    email: Optional[str] = Field(None, description="Notification email address")
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; blank addresses become None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None


@dataclass
class DocumentSnapshot:
    """Read-only view of a document at event time.

    Attributes:
        reference: Reference of the document
        author: Reference of the user who last saved the document
        title: Optional display title
        comments: Comment objects indexed by number (None marks a deleted slot)
        user_profile: User object, present only on user profile pages
    """

    reference: DocumentReference
    author: str = ""
    title: Optional[str] = None
    comments: List[Optional[CommentEntity]] = field(default_factory=list)
    user_profile: Optional[UserProfile] = None

    @property
    def display_name(self) -> str:
        """Name used in notification subjects (title, else page name)."""
        if self.title and self.title.strip():
            return self.title.strip()
        return self.reference.name

    def get_comment(self, number: Optional[int] = None) -> Optional[CommentEntity]:
        """Return comment ``number``, or the first existing comment when number is None."""
        if number is None:
            for comment in self.comments:
                if comment is not None:
                    return comment
            return None

        if number < 0 or number >= len(self.comments):
            return None
        return self.comments[number]

    def get_comment_by_reference(self, reference: ObjectReference) -> Optional[CommentEntity]:
        """Return the comment object designated by an object reference.

        References pointing at another document or another class resolve to None.
        """
        if reference.class_name != COMMENT_CLASS or reference.document != self.reference:
            return None
        if reference.number is None:
            return self.get_comment()
        return self.get_comment(reference.number)

    def get_user_profile(self) -> Optional[UserProfile]:
        return self.user_profile

    def __str__(self) -> str:
        return str(self.reference)


class MailState(str, Enum):
    """Lifecycle of one outgoing message as seen by delivery tracking."""

    PREPARED = "prepared"
    SENT = "sent"
    FAILED = "failed"


class MailStatusRecord(BaseModel):
    """Tracked delivery state of one outgoing message."""

    message_id: str = Field(..., min_length=1)
    batch_id: str = Field(..., min_length=1)
    recipients: List[str] = Field(default_factory=list)
    subject: str = ""
    state: MailState = MailState.PREPARED
    error: Optional[str] = None
    updated_at: datetime
