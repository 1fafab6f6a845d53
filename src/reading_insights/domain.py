import typing
from typing import Annotated, Literal

from pydantic import Field

if typing.TYPE_CHECKING:
    BookId = typing.NewType("BookId", str)
    UserId = typing.NewType("UserId", str)
    TransactionId = typing.NewType("TransactionId", str)
    RelevanceScore = typing.NewType("RelevanceScore", float)
else:
    _BookIdStr = Annotated[str, Field(min_length=1, max_length=64)]
    BookId = typing.NewType("BookId", _BookIdStr)

    _UserIdStr = Annotated[str, Field(min_length=1)]
    UserId = typing.NewType("UserId", _UserIdStr)

    _TransactionIdStr = Annotated[str, Field(min_length=1)]
    TransactionId = typing.NewType("TransactionId", _TransactionIdStr)

    _RelevanceScoreFloat = Annotated[float, Field(ge=0.0)]
    RelevanceScore = typing.NewType("RelevanceScore", _RelevanceScoreFloat)

MessageRole = Literal["user", "bot"]

DEFAULT_LITERARY_SUBJECTS: tuple[str, ...] = (
    "fiction",
    "novel",
    "story",
    "literature",
    "fantasy",
    "adventure",
    "mystery",
    "history",
    "science",
    "philosophy",
    "romance",
)

WEEKDAY_NAMES: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

MONTH_NAMES: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
