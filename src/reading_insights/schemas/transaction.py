from collections.abc import Iterator
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reading_insights.domain import BookId, TransactionId, UserId
from reading_insights.schemas.message import Message, decode_messages


class Transaction(BaseModel):
    id: TransactionId
    user_id: UserId
    book_id: BookId
    book_title: str
    book_author: str | None = None
    book_cover: str | None = None
    messages: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("messages", mode="before")
    @classmethod
    def _none_as_empty(cls, value: list[str] | None) -> list[str]:
        return value or []

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def decoded_messages(self) -> Iterator[Message]:
        return decode_messages(self.messages)
