"""Tests for lexical knowledge retrieval."""

from healthyai.knowledge.models import KnowledgeEntry
from healthyai.knowledge.retrieval import find_relevant, score_entry, tokenize
from healthyai.knowledge.seed import default_entries


def make_entry(
    entry_id: str = "e1",
    title: str = "Sleep Hygiene",
    content: str = "Regular sleep schedules help.",
    category: str = "sleep",
) -> KnowledgeEntry:
    return KnowledgeEntry(
        id=entry_id, title=title, content=content, category=category, sources="test"
    )


def test_tokenize_drops_short_words() -> None:
    assert tokenize("What is a healthy BMI range") == ["what", "healthy", "range"]


def test_no_surviving_tokens_returns_empty() -> None:
    entries = default_entries()
    assert find_relevant("is it ok to eat", entries) == []
    assert find_relevant("", entries) == []


def test_title_match_scores_ten() -> None:
    entry = make_entry(title="Hydration Basics", content="", category="")
    assert score_entry(entry, ["hydration"]) == 10


def test_category_match_must_be_exact() -> None:
    entry = make_entry(title="", content="", category="Sleep")
    assert score_entry(entry, ["sleep"]) == 5
    assert score_entry(entry, ["sleeping"]) == 0


def test_content_counts_occurrences() -> None:
    entry = make_entry(title="", category="", content="Water, water, WATER everywhere")
    assert score_entry(entry, ["water"]) == 3


def test_scores_sum_across_tokens() -> None:
    entry = make_entry(title="Sleep Hygiene", content="sleep well, sleep long", category="sleep")
    # "sleep": 10 + 5 + 2, "hygiene": 10
    assert score_entry(entry, ["sleep", "hygiene"]) == 27


def test_score_monotonic_in_content_occurrences() -> None:
    scores = [
        score_entry(make_entry(title="Rest", category="rest", content="protein " * n), ["protein"])
        for n in range(6)
    ]
    assert scores == sorted(scores)
    assert scores[0] < scores[-1]


def test_token_with_regex_characters() -> None:
    entry = make_entry(title="", category="", content="a (c++) b (c++)")
    assert score_entry(entry, ["(c++)"]) == 2


def test_ranked_and_truncated() -> None:
    entries = [
        make_entry("a", title="Other", content="sleep", category="x"),
        make_entry("b", title="Sleep Guide", content="", category="x"),
        make_entry("c", title="Other", content="sleep sleep", category="x"),
        make_entry("d", title="Other", content="nothing", category="x"),
        make_entry("e", title="Sleep Apnea", content="sleep", category="x"),
    ]
    results = find_relevant("sleep", entries, max_results=3)
    assert [r.entry.id for r in results] == ["e", "b", "c"]
    assert [r.score for r in results] == [11, 10, 2]


def test_ties_keep_original_order() -> None:
    entries = [
        make_entry("first", title="Stress One", content="", category=""),
        make_entry("second", title="Stress Two", content="", category=""),
        make_entry("third", title="Stress Three", content="", category=""),
    ]
    results = find_relevant("stress", entries)
    assert [r.entry.id for r in results] == ["first", "second", "third"]


def test_zero_scores_dropped() -> None:
    entries = [make_entry("a", title="Vitamins", content="", category="")]
    assert find_relevant("cholesterol", entries) == []


def test_seed_blood_pressure_query() -> None:
    results = find_relevant("What is a healthy blood pressure range?", default_entries())
    assert results
    assert results[0].entry.title == "Blood Pressure Ranges"
