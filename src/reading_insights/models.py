from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reading_insights.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    book_id: Mapped[str] = mapped_column(String(64), nullable=False)
    book_title: Mapped[str] = mapped_column(Text, nullable=False)
    book_author: Mapped[str | None] = mapped_column(Text, nullable=True)
    book_cover: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Each element is one JSON-encoded chat message, appended in order.
    messages: Mapped[list[str]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_transactions_user_book"),
        Index("idx_transactions_user_created", "user_id", "created_at"),
    )


class LibraryEntry(Base):
    __tablename__ = "user_library"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    book_id: Mapped[str] = mapped_column(String(64), nullable=False)
    book_title: Mapped[str] = mapped_column(Text, nullable=False)
    book_author: Mapped[str | None] = mapped_column(Text, nullable=True)
    book_cover: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
