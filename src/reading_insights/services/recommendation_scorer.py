from collections.abc import Collection, Iterable, Sequence

from reading_insights.domain import RelevanceScore
from reading_insights.schemas.catalog import CatalogRecord
from reading_insights.schemas.insights import Recommendation

TOPIC_IN_TITLE_WEIGHT = 3
KEYWORD_IN_TITLE_WEIGHT = 2
TOPIC_IN_SUBJECTS_WEIGHT = 8
KEYWORD_IN_SUBJECTS_WEIGHT = 4
BASELINE_SCORE = 1

DEFAULT_MAX_RECOMMENDATIONS = 6


def relevance(record: CatalogRecord, topics: Iterable[str], keywords: Iterable[str]) -> int:
    """Additive substring score; subject tags weigh more than title words."""
    title_text = (record.title or "").lower()
    subjects_text = " ".join(record.subjects).lower()
    topics = [t.lower() for t in topics]
    keywords = [k.lower() for k in keywords]

    score = BASELINE_SCORE
    score += TOPIC_IN_TITLE_WEIGHT * sum(1 for t in topics if t in title_text)
    score += KEYWORD_IN_TITLE_WEIGHT * sum(1 for k in keywords if k in title_text)
    if subjects_text:
        score += TOPIC_IN_SUBJECTS_WEIGHT * sum(1 for t in topics if t in subjects_text)
        score += KEYWORD_IN_SUBJECTS_WEIGHT * sum(1 for k in keywords if k in subjects_text)
    return score


def score(
    candidates: Sequence[CatalogRecord],
    topics: Sequence[str],
    keywords: Sequence[str],
    excluded: Collection[str],
    limit: int = DEFAULT_MAX_RECOMMENDATIONS,
) -> list[Recommendation]:
    """Rank candidates by relevance, dropping already-read books.

    Equal scores keep catalog arrival order.
    """
    scored = [
        Recommendation(
            catalog_record=record,
            relevance_score=RelevanceScore(float(relevance(record, topics, keywords))),
        )
        for record in candidates
        if record.id not in excluded
    ]
    scored.sort(key=lambda r: r.relevance_score, reverse=True)
    return scored[: max(limit, 0)]


def display_subjects(
    recommendations: Iterable[Recommendation], max_subjects: int = 10
) -> list[str]:
    """Collect short, distinct subject tags from the recommended books, in ranking order."""
    subjects: list[str] = []
    for recommendation in recommendations:
        for subject in recommendation.catalog_record.subjects:
            cleaned = subject.strip()
            if 3 < len(cleaned) < 30 and "," not in cleaned and cleaned not in subjects:
                subjects.append(cleaned)
    return subjects[:max_subjects]
