import re
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from reading_insights.domain import DEFAULT_LITERARY_SUBJECTS
from reading_insights.schemas.transaction import Transaction

_NON_WORD = re.compile(r"\W+")

TITLE_TOKEN_MIN_LENGTH = 5
KEYWORD_TOKEN_MIN_LENGTH = 4


class CorpusSignals(NamedTuple):
    topics: list[str]
    keywords: list[str]


def tokenize(text: str, min_length: int) -> list[str]:
    """Lower-case *text*, split on non-word runs, keep tokens of *min_length* or more."""
    return [token for token in _NON_WORD.split(text.lower()) if len(token) >= min_length]


def top_tokens(counts: Counter[str], n: int) -> list[str]:
    # most_common sorts stably, so equal counts keep first-seen order
    return [token for token, _ in counts.most_common(n)]


def analyze(
    transactions: Iterable[Transaction], max_topics: int = 5, max_keywords: int = 10
) -> CorpusSignals:
    """Derive topic signals from book titles and keyword signals from the user's own messages.

    Malformed stored messages are skipped.
    """
    topic_counts: Counter[str] = Counter()
    keyword_counts: Counter[str] = Counter()

    for transaction in transactions:
        if transaction.book_title:
            topic_counts.update(tokenize(transaction.book_title, TITLE_TOKEN_MIN_LENGTH))

        for message in transaction.decoded_messages():
            if message.role == "user" and message.content:
                keyword_counts.update(tokenize(message.content, KEYWORD_TOKEN_MIN_LENGTH))

    return CorpusSignals(
        topics=top_tokens(topic_counts, max_topics),
        keywords=top_tokens(keyword_counts, max_keywords),
    )


def pad_topics(
    topics: Sequence[str],
    min_signals: int = 3,
    size: int = 5,
    defaults: Sequence[str] = DEFAULT_LITERARY_SUBJECTS,
) -> list[str]:
    """Top up a thin topic signal with generic literary subjects.

    Real signals come first. Signals of *min_signals* or more are returned as is.
    """
    padded = list(topics)
    if len(padded) >= min_signals:
        return padded
    for subject in defaults:
        if len(padded) >= size:
            break
        if subject not in padded:
            padded.append(subject)
    return padded
