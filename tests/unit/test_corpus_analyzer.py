from factories import bot_message, make_transaction, user_message

from reading_insights.domain import DEFAULT_LITERARY_SUBJECTS
from reading_insights.services.corpus_analyzer import analyze, pad_topics, tokenize


def test_tokenize_splits_on_non_word_and_applies_length_threshold() -> None:
    assert tokenize("Pride and Prejudice", 5) == ["pride", "prejudice"]
    assert tokenize("Who's the WHALE, really?", 4) == ["whale", "really"]


def test_titles_without_messages_give_topics_and_no_keywords() -> None:
    transactions = [
        make_transaction(book_id="1342", title="Pride and Prejudice"),
        make_transaction(book_id="84", title="Frankenstein"),
    ]

    signals = analyze(transactions)

    assert signals.topics == ["pride", "prejudice", "frankenstein"]
    assert signals.keywords == []


def test_topics_rank_by_frequency_with_first_seen_tie_break() -> None:
    transactions = [
        make_transaction(book_id="1", title="Moby Dick; Or, The Whale"),
        make_transaction(book_id="2", title="The Whale Road"),
        make_transaction(book_id="3", title="Ocean Whale Stories"),
        make_transaction(book_id="4", title="Ocean Tales"),
    ]

    signals = analyze(transactions)

    assert signals.topics == ["whale", "ocean", "stories", "tales"]


def test_topics_capped_at_five() -> None:
    transactions = [
        make_transaction(book_id="1", title="alpha1 bravo2 charlie delta4 echo55 foxtrot golfer")
    ]

    assert len(analyze(transactions).topics) == 5


def test_keywords_come_from_user_messages_only() -> None:
    transaction = make_transaction(
        messages=[
            user_message("Tell me about Darcy, Darcy and Darcy's pride"),
            bot_message("Darcy darcy darcy is proud"),
            user_message("What about Elizabeth?"),
            "not-json",
        ]
    )

    signals = analyze([transaction])

    assert signals.keywords[0] == "darcy"
    assert "proud" not in signals.keywords
    assert set(signals.keywords) == {"tell", "about", "darcy", "pride", "what", "elizabeth"}


def test_keywords_capped_at_ten() -> None:
    words = " ".join(f"word{i:02d}" for i in range(20))
    transaction = make_transaction(messages=[user_message(words)])

    assert len(analyze([transaction]).keywords) == 10


def test_pad_topics_fills_with_defaults_after_real_signals() -> None:
    assert pad_topics(["whale"]) == ["whale", "fiction", "novel", "story", "literature"]
    assert pad_topics([]) == list(DEFAULT_LITERARY_SUBJECTS[:5])


def test_pad_topics_skips_defaults_already_present() -> None:
    assert pad_topics(["novel", "fiction"]) == [
        "novel",
        "fiction",
        "story",
        "literature",
        "fantasy",
    ]


def test_pad_topics_leaves_strong_signal_untouched() -> None:
    topics = ["whale", "ocean", "sailor"]

    assert pad_topics(topics) == topics
