"""Candidate gathering: escalating, batched catalog queries with shared dedup."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass

from reading_insights.config import Settings
from reading_insights.schemas.catalog import CatalogRecord
from reading_insights.services.catalog_client import CatalogClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatherLimits:
    """Tuned targets for candidate gathering. Targets are best effort, not guarantees."""

    topic_pass_target: int = 25
    keyword_pass_target: int = 20
    popular_fallback_threshold: int = 10
    topic_batch_size: int = 3
    max_keyword_queries: int = 3
    topic_query_limit: int = 12
    keyword_query_limit: int = 8
    popular_query_limit: int = 15

    @classmethod
    def from_settings(cls, settings: Settings) -> GatherLimits:
        return cls(
            topic_pass_target=settings.topic_pass_target,
            keyword_pass_target=settings.keyword_pass_target,
            popular_fallback_threshold=settings.popular_fallback_threshold,
            topic_batch_size=settings.topic_batch_size,
            max_keyword_queries=settings.max_keyword_queries,
            topic_query_limit=settings.topic_query_limit,
            keyword_query_limit=settings.keyword_query_limit,
            popular_query_limit=settings.popular_query_limit,
        )


class RecommendationAggregator:
    """Collects recommendation candidates from the catalog in three passes.

    ========  ===============================================  ==========================
    Pass      Queries                                          Runs when
    ========  ===============================================  ==========================
    Topic     one topic query per topic, in concurrent         always, batch by batch
              batches of ``topic_batch_size``                  until the target is met
    Keyword   topic query per keyword, free-text query when    fewer than
              the topic query is empty                         ``keyword_pass_target``
    Popular   one untargeted query                             fewer than
                                                               ``popular_fallback_threshold``
    ========  ===============================================  ==========================

    Queries inside a pass run concurrently; results are merged in query
    order, not arrival order, so the candidate order is reproducible. All
    passes share one set of used ids seeded with the excluded ids, so a book
    is never returned twice and never returned when already read.

    Args:
        client: The :class:`CatalogClient`; its calls never raise and are
            individually time-bounded.
        limits: Pass targets and per-query limits.
    """

    def __init__(self, client: CatalogClient, limits: GatherLimits | None = None) -> None:
        self._client = client
        self.limits = limits or GatherLimits()

    async def gather(
        self,
        topics: Sequence[str],
        keywords: Sequence[str],
        excluded: Collection[str],
        page: int = 1,
    ) -> list[CatalogRecord]:
        limits = self.limits
        used_ids: set[str] = set(excluded)
        candidates: list[CatalogRecord] = []

        def merge(batches: Iterable[list[CatalogRecord]]) -> int:
            added = 0
            for records in batches:
                for record in records:
                    if record.id not in used_ids:
                        used_ids.add(record.id)
                        candidates.append(record)
                        added += 1
            return added

        # 1. Topic pass
        batch_size = max(limits.topic_batch_size, 1)
        for start in range(0, len(topics), batch_size):
            if len(candidates) >= limits.topic_pass_target:
                break
            batch = topics[start : start + batch_size]
            results = await asyncio.gather(
                *(
                    self._client.fetch(page=page, limit=limits.topic_query_limit, topic=topic)
                    for topic in batch
                )
            )
            added = merge(results)
            logger.debug("topic_batch_merged", extra={"topics": list(batch), "added": added})

        # 2. Keyword pass
        if len(candidates) < limits.keyword_pass_target and keywords:
            selected = keywords[: limits.max_keyword_queries]
            results = await asyncio.gather(
                *(self._fetch_keyword(keyword, page) for keyword in selected)
            )
            added = merge(results)
            logger.debug("keyword_pass_merged", extra={"keywords": list(selected), "added": added})

        # 3. Popularity fallback
        if len(candidates) < limits.popular_fallback_threshold:
            popular = await self._client.fetch(page=page, limit=limits.popular_query_limit)
            added = merge([popular])
            logger.debug("popular_fallback_merged", extra={"added": added})

        logger.info(
            "candidates_gathered",
            extra={
                "topic_count": len(topics),
                "keyword_count": len(keywords),
                "candidate_count": len(candidates),
            },
        )
        return candidates

    async def _fetch_keyword(self, keyword: str, page: int) -> list[CatalogRecord]:
        limit = self.limits.keyword_query_limit
        records = await self._client.fetch(page=page, limit=limit, topic=keyword)
        if not records:
            records = await self._client.fetch(query=keyword, page=page, limit=limit)
        return records
