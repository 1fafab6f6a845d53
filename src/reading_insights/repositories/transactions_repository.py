from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reading_insights.domain import UserId
from reading_insights.models import LibraryEntry, Transaction


class TransactionsRepository:
    """Read-only access to the transaction and library tables owned by the main app."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_transactions(self, user_id: UserId) -> Sequence[Transaction]:
        """
        Returns the user's transactions, most recently created first.
        """
        stmt = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc(), Transaction.id)
        )
        return self.session.scalars(stmt).all()

    def list_library(self, user_id: UserId) -> Sequence[LibraryEntry]:
        stmt = (
            select(LibraryEntry)
            .where(LibraryEntry.user_id == user_id)
            .order_by(LibraryEntry.updated_at.desc())
        )
        return self.session.scalars(stmt).all()

    def count_library(self, user_id: UserId) -> int:
        stmt = select(func.count()).select_from(LibraryEntry).where(LibraryEntry.user_id == user_id)
        return self.session.execute(stmt).scalar_one()
