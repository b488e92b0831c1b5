"""Database schema for the mail delivery log."""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from comment_notifier.domain.models import MailState, MailStatusRecord

logger = logging.getLogger(__name__)

Base = declarative_base()


class MailStatusModel(Base):
    """ORM model for the mail_status table.

    One row per outgoing message; the row is inserted when the batch is
    prepared and updated once delivery succeeds or fails.
    """

    __tablename__ = "mail_status"

    message_id = Column(String(80), primary_key=True, nullable=False)
    batch_id = Column(String(64), nullable=False)

    # JSON encoded list of addresses
    recipients = Column(Text, nullable=False)
    subject = Column(Text, nullable=False)

    state = Column(String(16), nullable=False)
    error = Column(Text, nullable=True)

    # ISO 8601 string
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_mail_status_batch", "batch_id"),
        Index("idx_mail_status_state", "state"),
    )

    def to_domain(self) -> MailStatusRecord:
        return MailStatusRecord(
            message_id=self.message_id,
            batch_id=self.batch_id,
            recipients=json.loads(self.recipients),
            subject=self.subject,
            state=MailState(self.state),
            error=self.error,
            updated_at=_parse_datetime(self.updated_at),
        )

    @classmethod
    def from_domain(cls, record: MailStatusRecord) -> "MailStatusModel":
        return cls(
            message_id=record.message_id,
            batch_id=record.batch_id,
            recipients=json.dumps(list(record.recipients)),
            subject=record.subject,
            state=MailState(record.state).value,
            error=record.error,
            updated_at=_format_datetime(record.updated_at),
        )


def _format_datetime(dt: datetime) -> str:
    """Format a datetime as an ISO 8601 UTC string with a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    if not dt_str:
        return None

    dt_str = dt_str.rstrip("Z")
    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
