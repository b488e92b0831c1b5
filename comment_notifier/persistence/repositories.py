"""Repository for mail delivery records."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from comment_notifier.domain.models import MailState, MailStatusRecord

from .exceptions import PersistenceError, RecordNotFoundError
from .schema import MailStatusModel, _format_datetime

logger = logging.getLogger(__name__)


class MailStatusRepository:
    """CRUD operations on the mail_status table, returning domain records."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, message_id: str) -> Optional[MailStatusRecord]:
        """Fetch the record of one message, or None if unknown.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(MailStatusModel, message_id)
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving mail status {message_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve mail status: {e}") from e

    def record(self, record: MailStatusRecord) -> MailStatusRecord:
        """Insert a record, or overwrite the existing row with the same message id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            existing = self.session.get(MailStatusModel, record.message_id)
            model = MailStatusModel.from_domain(record)
            if existing is not None:
                existing.batch_id = model.batch_id
                existing.recipients = model.recipients
                existing.subject = model.subject
                existing.state = model.state
                existing.error = model.error
                existing.updated_at = model.updated_at
                model = existing
            else:
                self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error recording mail status {record.message_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to record mail status: {e}") from e

    def update_state(
        self,
        message_id: str,
        state: MailState,
        updated_at: datetime,
        error: Optional[str] = None,
    ) -> MailStatusRecord:
        """Move a tracked message to a new state.

        Raises:
            RecordNotFoundError: If the message was never recorded
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(MailStatusModel, message_id)
            if model is None:
                raise RecordNotFoundError(f"No mail status recorded for {message_id}")

            model.state = MailState(state).value
            model.error = error
            model.updated_at = _format_datetime(updated_at)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error updating mail status {message_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update mail status: {e}") from e

    def list_batch(self, batch_id: str) -> List[MailStatusRecord]:
        """All records of one batch, ordered by message id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(MailStatusModel)
                .where(MailStatusModel.batch_id == batch_id)
                .order_by(MailStatusModel.message_id)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing mail batch {batch_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list mail batch: {e}") from e

    def count_by_state(self) -> Dict[str, int]:
        """Number of tracked messages per state.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(MailStatusModel.state, func.count()).group_by(MailStatusModel.state)
            return {state: count for state, count in self.session.execute(stmt).all()}
        except SQLAlchemyError as e:
            logger.error(f"Error counting mail status: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count mail status: {e}") from e
