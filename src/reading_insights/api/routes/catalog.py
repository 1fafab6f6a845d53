from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from reading_insights.dependencies.insights import get_catalog_client
from reading_insights.schemas.catalog import CatalogRecord
from reading_insights.schemas.insights import CatalogSearchResponse
from reading_insights.services.catalog_client import CatalogClient

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/books", response_model=CatalogSearchResponse)
async def search_books(
    client: Annotated[CatalogClient, Depends(get_catalog_client)],
    search: str | None = Query(None, description="Free-text query"),
    topic: str | None = Query(None, description="Subject or bookshelf filter"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=32, description="Items per page"),
) -> CatalogSearchResponse:
    """Browse the public catalog. An unavailable catalog yields an empty page."""
    items = await client.fetch(query=search, page=page, limit=limit, topic=topic)
    return CatalogSearchResponse(items=items, page=page, limit=limit)


@router.get("/books/{book_id}", response_model=CatalogRecord)
async def get_book(
    book_id: str,
    client: Annotated[CatalogClient, Depends(get_catalog_client)],
) -> CatalogRecord:
    """Retrieve a single book's catalog metadata."""
    record = await client.fetch_book(book_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with id {book_id} not found",
        )
    return record
