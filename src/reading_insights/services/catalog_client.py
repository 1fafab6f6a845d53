"""Catalog client: cached, bounded access to the external book catalog."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from reading_insights.config import Settings
from reading_insights.domain import BookId
from reading_insights.errors import CatalogUnavailableError
from reading_insights.schemas.catalog import CatalogBook, CatalogPage, CatalogRecord
from reading_insights.services.cache import TTLCache

logger = logging.getLogger(__name__)

COVER_FORMAT = "image/jpeg"


def normalize_cover_url(url: str | None) -> str | None:
    """Give scheme-less cover URLs an ``https`` scheme."""
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return f"https://{url}"


def to_catalog_record(book: CatalogBook) -> CatalogRecord:
    return CatalogRecord(
        id=BookId(str(book.id)),
        title=book.title,
        author=book.authors[0].name if book.authors else None,
        cover_url=normalize_cover_url(book.formats.get(COVER_FORMAT)),
        subjects=list(book.subjects),
    )


class CatalogClient:
    """Fetches book records from the external catalog.

    Every public method degrades to an empty result instead of raising:
    timeouts, transport errors, non-2xx statuses and malformed pages are
    logged as warnings and turned into ``[]`` (or ``None`` for a detail
    lookup). Only cancellation propagates.

    Successful search results are memoised in a :class:`TTLCache` keyed by
    the full parameter set, so identical requests inside the TTL window hit
    the network once.

    Args:
        http_client: Shared ``httpx.AsyncClient``. Its lifecycle belongs to
            the caller.
        base_url: Search endpoint of the catalog.
        timeout_seconds: Timeout of one HTTP attempt.
        deadline_seconds: Hard bound on one fetch including retries.
        max_attempts: Attempts made on transport errors.
        retry_backoff_seconds: Initial backoff, doubled after each attempt.
        cache: Cache for search pages.
        detail_cache: Cache for single-book lookups.
        max_concurrency: Upper bound on in-flight upstream requests.
        sleep: Injectable sleep used between retries.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        *,
        timeout_seconds: float = 5.0,
        deadline_seconds: float = 8.0,
        max_attempts: int = 3,
        retry_backoff_seconds: float = 0.3,
        cache: TTLCache[list[CatalogRecord]] | None = None,
        detail_cache: TTLCache[CatalogRecord] | None = None,
        max_concurrency: int = 6,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.deadline_seconds = deadline_seconds
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff_seconds = retry_backoff_seconds
        # TTLCache defines __len__, so an empty cache is falsy.
        self.cache: TTLCache[list[CatalogRecord]] = (
            cache if cache is not None else TTLCache(ttl_seconds=3600.0)
        )
        self.detail_cache: TTLCache[CatalogRecord] = (
            detail_cache if detail_cache is not None else TTLCache(ttl_seconds=86400.0)
        )
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._sleep = sleep

    @classmethod
    def from_settings(cls, http_client: httpx.AsyncClient, settings: Settings) -> CatalogClient:
        return cls(
            http_client,
            settings.catalog_base_url,
            timeout_seconds=settings.catalog_timeout_seconds,
            deadline_seconds=settings.catalog_deadline_seconds,
            max_attempts=settings.catalog_max_attempts,
            retry_backoff_seconds=settings.catalog_retry_backoff_seconds,
            cache=TTLCache(
                ttl_seconds=settings.catalog_cache_ttl_seconds,
                max_entries=settings.catalog_cache_max_entries,
            ),
            detail_cache=TTLCache(
                ttl_seconds=settings.catalog_detail_cache_ttl_seconds,
                max_entries=settings.catalog_cache_max_entries,
            ),
            max_concurrency=settings.catalog_max_concurrency,
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @staticmethod
    def cache_key(query: str | None, page: int, limit: int, topic: str | None) -> str:
        return urlencode(
            {"query": query or "", "page": page, "limit": limit, "topic": topic or ""}
        )

    async def fetch(
        self,
        query: str | None = None,
        page: int = 1,
        limit: int = 20,
        topic: str | None = None,
    ) -> list[CatalogRecord]:
        """Search the catalog by free text and/or topic.

        Returns at most *limit* records, or ``[]`` when the catalog fails.
        """
        query = (query or "").strip()
        topic = (topic or "").strip()
        key = self.cache_key(query, page, limit, topic)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("catalog_cache_hit", extra={"cache_key": key})
            return list(cached)

        params: dict[str, str | int] = {}
        if topic:
            params["topic"] = topic
        if query:
            params["search"] = query
        params["page"] = page

        try:
            async with asyncio.timeout(self.deadline_seconds):
                payload = await self._get_json(self.base_url, params)
            records = self._map_page(payload, limit)
        except (CatalogUnavailableError, TimeoutError) as exc:
            logger.warning(
                "catalog_fetch_failed",
                extra={
                    "query": query,
                    "topic": topic,
                    "page": page,
                    "error": str(exc) or type(exc).__name__,
                },
            )
            return []

        self.cache.set(key, records)
        logger.debug(
            "catalog_fetch_complete", extra={"cache_key": key, "returned_count": len(records)}
        )
        return list(records)

    async def fetch_book(self, book_id: str) -> CatalogRecord | None:
        """Look up a single book, or ``None`` when it is unknown or unavailable."""
        cached = self.detail_cache.get(book_id)
        if cached is not None:
            return cached

        url = f"{self.base_url.rstrip('/')}/{quote(book_id, safe='')}"
        try:
            async with asyncio.timeout(self.deadline_seconds):
                payload = await self._get_json(url, {})
            record = to_catalog_record(CatalogBook.model_validate(payload))
        except ValidationError as exc:
            logger.warning("catalog_book_malformed", extra={"book_id": book_id, "error": str(exc)})
            return None
        except (CatalogUnavailableError, TimeoutError) as exc:
            logger.warning(
                "catalog_book_fetch_failed",
                extra={"book_id": book_id, "error": str(exc) or type(exc).__name__},
            )
            return None

        self.detail_cache.set(book_id, record)
        return record

    def clear_cache(self) -> None:
        self.cache.clear()
        self.detail_cache.clear()

    def sweep_cache(self) -> int:
        return self.cache.sweep() + self.detail_cache.sweep()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_json(self, url: str, params: dict[str, str | int]) -> Any:
        last_error: Exception | None = None
        for attempt in range(self.max_attempts):
            try:
                async with self._semaphore:
                    response = await self._http.get(
                        url, params=params, timeout=self.timeout_seconds
                    )
            except httpx.TransportError as exc:
                last_error = exc
                logger.debug(
                    "catalog_attempt_failed",
                    extra={"url": url, "attempt": attempt + 1, "error": repr(exc)},
                )
                if attempt + 1 < self.max_attempts:
                    await self._sleep(self.retry_backoff_seconds * 2**attempt)
                continue
            except httpx.RequestError as exc:
                raise CatalogUnavailableError(f"Catalog request failed: {exc!r}") from exc

            if not response.is_success:
                raise CatalogUnavailableError(
                    f"Catalog responded with status {response.status_code}"
                )
            try:
                return response.json()
            except ValueError as exc:
                raise CatalogUnavailableError("Catalog response is not valid JSON") from exc

        raise CatalogUnavailableError(
            f"Catalog unreachable after {self.max_attempts} attempts"
        ) from last_error

    def _map_page(self, payload: Any, limit: int) -> list[CatalogRecord]:
        try:
            page = CatalogPage.model_validate(payload)
        except ValidationError as exc:
            raise CatalogUnavailableError("Catalog page is malformed") from exc

        records: list[CatalogRecord] = []
        for raw in page.results[: max(limit, 0)]:
            try:
                record = to_catalog_record(CatalogBook.model_validate(raw))
            except ValidationError:
                logger.debug("catalog_record_skipped", extra={"raw_id": raw.get("id")})
                continue
            records.append(record)
        return records
