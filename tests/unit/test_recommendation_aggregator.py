import asyncio

import httpx
import pytest
from factories import FakeCatalog, catalog_book, catalog_page, make_records

from reading_insights.services.recommendation_aggregator import (
    GatherLimits,
    RecommendationAggregator,
)


@pytest.mark.asyncio
async def test_topic_pass_merges_in_query_order_not_arrival_order() -> None:
    catalog = FakeCatalog(
        by_topic={
            "whale": make_records(1, 2),
            "ocean": make_records(2, 3),
            "sailor": make_records(4),
        },
        # the first topic answers last
        delays={"whale": 0.05},
        popular=make_records(*range(100, 120)),
    )
    aggregator = RecommendationAggregator(catalog, GatherLimits(popular_fallback_threshold=0))

    candidates = await aggregator.gather(["whale", "ocean", "sailor"], [], excluded=set())

    assert [c.id for c in candidates] == ["1", "2", "3", "4"]


@pytest.mark.asyncio
async def test_excluded_ids_never_returned() -> None:
    catalog = FakeCatalog(
        by_topic={"whale": make_records(1, 2, 3)},
        popular=make_records(3, 4),
    )
    aggregator = RecommendationAggregator(catalog)

    candidates = await aggregator.gather(["whale"], [], excluded={"2", "4"})

    assert [c.id for c in candidates] == ["1", "3"]


@pytest.mark.asyncio
async def test_topic_pass_uses_topic_limit_and_page() -> None:
    catalog = FakeCatalog()
    aggregator = RecommendationAggregator(catalog)

    await aggregator.gather(["whale"], [], excluded=set(), page=3)

    assert catalog.calls[0] == (None, 3, 12, "whale")


@pytest.mark.asyncio
async def test_topic_pass_stops_between_batches_once_target_reached() -> None:
    catalog = FakeCatalog(
        by_topic={
            "a": make_records(*range(1, 13)),
            "b": make_records(*range(13, 25)),
            "c": make_records(*range(25, 37)),
            "d": make_records(*range(37, 49)),
        }
    )
    aggregator = RecommendationAggregator(catalog, GatherLimits(topic_batch_size=3))

    candidates = await aggregator.gather(["a", "b", "c", "d", "e"], ["kw"], excluded=set())

    queried_topics = [topic for _, _, _, topic in catalog.calls]
    assert queried_topics == ["a", "b", "c"]
    assert len(candidates) == 36


@pytest.mark.asyncio
async def test_keyword_pass_falls_back_to_free_text_when_topic_empty() -> None:
    catalog = FakeCatalog(
        by_topic={"whale": make_records(1), "darcy": make_records(2)},
        by_query={"elizabeth": make_records(3)},
    )
    aggregator = RecommendationAggregator(catalog, GatherLimits(popular_fallback_threshold=0))

    candidates = await aggregator.gather(
        ["whale"], ["darcy", "elizabeth", "bennet", "ignored"], excluded=set()
    )

    assert [c.id for c in candidates] == ["1", "2", "3"]
    keyword_calls = catalog.calls[1:]
    assert (None, 1, 8, "darcy") in keyword_calls
    assert (None, 1, 8, "elizabeth") in keyword_calls
    assert ("elizabeth", 1, 8, None) in keyword_calls
    assert ("bennet", 1, 8, None) in keyword_calls
    assert ("darcy", 1, 8, None) not in keyword_calls
    assert all(call[0] != "ignored" and call[3] != "ignored" for call in catalog.calls)


@pytest.mark.asyncio
async def test_keyword_pass_skipped_when_topic_pass_filled() -> None:
    catalog = FakeCatalog(by_topic={"a": make_records(*range(1, 22))})
    aggregator = RecommendationAggregator(catalog, GatherLimits(topic_query_limit=21))

    await aggregator.gather(["a"], ["darcy"], excluded=set())

    assert [call[3] for call in catalog.calls] == ["a"]


@pytest.mark.asyncio
async def test_popular_fallback_runs_when_under_threshold() -> None:
    catalog = FakeCatalog(
        by_topic={"whale": make_records(1, 2)},
        popular=make_records(2, *range(50, 70)),
    )
    aggregator = RecommendationAggregator(catalog)

    candidates = await aggregator.gather(["whale"], [], excluded=set())

    assert catalog.calls[-1] == (None, 1, 15, None)
    assert [c.id for c in candidates][:3] == ["1", "2", "50"]
    assert len(candidates) == 2 + 14


@pytest.mark.asyncio
async def test_popular_fallback_skipped_with_enough_candidates() -> None:
    catalog = FakeCatalog(by_topic={"whale": make_records(*range(1, 11))})
    aggregator = RecommendationAggregator(catalog)

    await aggregator.gather(["whale"], [], excluded=set())

    assert (None, 1, 15, None) not in catalog.calls


@pytest.mark.asyncio
async def test_empty_signals_use_only_popular_query() -> None:
    catalog = FakeCatalog(popular=make_records(1, 2))
    aggregator = RecommendationAggregator(catalog)

    candidates = await aggregator.gather([], [], excluded=set())

    assert catalog.calls == [(None, 1, 15, None)]
    assert [c.id for c in candidates] == ["1", "2"]


@pytest.mark.asyncio
async def test_timed_out_topic_query_degrades_and_next_pass_runs(make_catalog_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("topic") == "slow":
            await asyncio.sleep(5)
        if "topic" in request.url.params:
            return httpx.Response(200, json=catalog_page(catalog_book(1, "Moby Dick")))
        return httpx.Response(
            200, json=catalog_page(*(catalog_book(i, f"Popular {i}") for i in range(10, 25)))
        )

    client = make_catalog_client(handler, deadline_seconds=0.05)
    aggregator = RecommendationAggregator(client)

    candidates = await aggregator.gather(["slow", "whale"], [], excluded=set())

    ids = [c.id for c in candidates]
    assert ids[0] == "1"
    assert "10" in ids
    assert len(ids) == 16
