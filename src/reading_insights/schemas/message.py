import json
import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime

from pydantic import BaseModel, Field, ValidationError, field_validator

from reading_insights.domain import MessageRole
from reading_insights.errors import MalformedMessageError

logger = logging.getLogger(__name__)


class Message(BaseModel):
    """One chat message as persisted on a transaction.

    Stored messages are JSON strings; this model is the only place that
    knows that format. Core logic works on decoded ``Message`` values.
    """

    role: MessageRole = Field(description="Who wrote the message", examples=["user"])
    content: str = Field(default="", description="Message text")
    timestamp: datetime | None = Field(default=None, description="When the message was written")

    @field_validator("content", mode="before")
    @classmethod
    def _null_content_as_empty(cls, value: str | None) -> str:
        return "" if value is None else value

    @classmethod
    def decode(cls, raw: str) -> "Message":
        try:
            return cls.model_validate_json(raw)
        except (ValidationError, ValueError, TypeError) as exc:
            raise MalformedMessageError(f"Cannot decode stored message: {exc}") from exc

    def encode(self) -> str:
        timestamp = self.timestamp or datetime.now(UTC)
        return json.dumps(
            {"role": self.role, "content": self.content, "timestamp": timestamp.isoformat()}
        )


def decode_messages(raw_messages: Iterable[str]) -> Iterator[Message]:
    """Yield decodable messages, dropping malformed ones."""
    for raw in raw_messages:
        try:
            yield Message.decode(raw)
        except MalformedMessageError as exc:
            logger.debug("stored_message_skipped", extra={"error": str(exc)})
