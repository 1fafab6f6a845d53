from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from reading_insights.domain import BookId


class CatalogRecord(BaseModel):
    id: BookId = Field(description="Catalog identifier of the book", examples=["1342"])
    title: str = Field(description="Title of the book", examples=["Pride and Prejudice"])
    author: str | None = Field(default=None, description="Primary author, when known")
    cover_url: str | None = Field(default=None, description="Cover image URL, when known")
    subjects: list[str] = Field(default_factory=list, description="Curated subject tags")

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class CatalogPerson(BaseModel):
    name: str

    model_config = ConfigDict(extra="ignore")


class CatalogBook(BaseModel):
    """A single book as returned by the upstream catalog API."""

    id: int | str
    title: str = ""
    authors: list[CatalogPerson] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)
    formats: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


class CatalogPage(BaseModel):
    """A page of search results from the upstream catalog API.

    Results are kept raw so they can be truncated before field mapping.
    """

    count: int | None = None
    next: str | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")
