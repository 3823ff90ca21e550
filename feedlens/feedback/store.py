"""
Feedback Store for reading and updating feedback rows.

Every write is a single statement; there are no multi-statement
transactions.
"""

import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlmodel import select

from feedlens.feedback.models import FeedbackAnalysis, FeedbackItem
from feedlens.utils.database import session_scope
from feedlens.utils.error_handling import StorageError, catch_and_log


logger = logging.getLogger(__name__)


class FeedbackStore:
    """
    CRUD access to the feedback table.
    """

    def __init__(self, engine: Engine):
        """
        Initialize the store.

        Args:
            engine: SQLAlchemy engine for the feedback database
        """
        self.engine = engine

    @catch_and_log(component="feedback_store", error_class=StorageError)
    def list_feedback(self) -> List[FeedbackItem]:
        """Return all feedback, most recent first."""
        with session_scope(self.engine) as session:
            statement = select(FeedbackItem).order_by(
                FeedbackItem.created_at.desc(), FeedbackItem.id.desc()
            )
            return list(session.exec(statement).all())

    @catch_and_log(component="feedback_store", error_class=StorageError)
    def list_analyzed(self, limit: Optional[int] = None) -> List[FeedbackItem]:
        """
        Return analyzed feedback, most recent first.

        Args:
            limit: Maximum number of rows, or None for all
        """
        with session_scope(self.engine) as session:
            statement = (
                select(FeedbackItem)
                .where(FeedbackItem.theme.is_not(None))
                .order_by(FeedbackItem.created_at.desc(), FeedbackItem.id.desc())
            )
            if limit is not None:
                statement = statement.limit(limit)
            return list(session.exec(statement).all())

    @catch_and_log(component="feedback_store", error_class=StorageError)
    def list_unanalyzed(self) -> List[FeedbackItem]:
        """Return rows whose theme is still null, most recent first."""
        with session_scope(self.engine) as session:
            statement = (
                select(FeedbackItem)
                .where(FeedbackItem.theme.is_(None))
                .order_by(FeedbackItem.created_at.desc(), FeedbackItem.id.desc())
            )
            return list(session.exec(statement).all())

    @catch_and_log(component="feedback_store", error_class=StorageError)
    def get(self, feedback_id: int) -> Optional[FeedbackItem]:
        """Fetch one row by id, or None if absent."""
        with session_scope(self.engine) as session:
            return session.get(FeedbackItem, feedback_id)

    @catch_and_log(component="feedback_store", error_class=StorageError)
    def create(self, message: str, source: str) -> FeedbackItem:
        """
        Insert a new unanalyzed row.

        Args:
            message: Feedback text
            source: Origin tag such as "email" or "reddit"

        Returns:
            The stored row with its assigned id
        """
        item = FeedbackItem(message=message, source=source)
        with session_scope(self.engine) as session:
            session.add(item)
            session.commit()
            session.refresh(item)

        logger.info(f"Stored feedback {item.id} from {source}")
        return item

    @catch_and_log(component="feedback_store", error_class=StorageError)
    def apply_analysis(self, feedback_id: int, analysis: FeedbackAnalysis) -> bool:
        """
        Write all four analysis fields in one UPDATE.

        Args:
            feedback_id: Row to update
            analysis: Parsed analysis

        Returns:
            True if a row was updated
        """
        statement = (
            update(FeedbackItem)
            .where(FeedbackItem.id == feedback_id)
            .values(
                theme=analysis.theme,
                sentiment=analysis.sentiment,
                urgency=analysis.urgency,
                summary=analysis.summary,
            )
        )
        with session_scope(self.engine) as session:
            result = session.connection().execute(statement)
            session.commit()
            return result.rowcount > 0
