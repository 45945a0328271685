# tests/test_views.py
import pytest

from dsa_tracker.models import Company, Difficulty, Question, Status
from dsa_tracker.mutations import TopicSelection
from dsa_tracker.views import (
    available_topics, company_aggregates, company_detail, difficulty_progress,
    filter_questions, format_frequency, normalize_company, search_companies,
)


@pytest.fixture
def pair():
    return [
        Question.from_dict({"id": 1, "name": "Two Sum", "topics": ["array"], "difficulty": "EASY", "averageFrequency": 10}),
        Question.from_dict({"id": 2, "name": "LRU Cache", "topics": ["hash map", "design"], "difficulty": "MEDIUM", "averageFrequency": 20}),
    ]


def names(questions):
    return [q.name for q in questions]


def test_normalize_company():
    assert normalize_company("META") == "Meta"
    assert normalize_company("jane street") == "Jane street"
    assert normalize_company("") == ""


def test_company_aggregates(sample_questions):
    companies = {c.name: c for c in company_aggregates(sample_questions)}
    assert companies["Meta"] == Company("Meta", total_questions=3, solved_questions=2)
    assert companies["Amazon"] == Company("Amazon", total_questions=2, solved_questions=0)
    assert companies["Google"] == Company("Google", total_questions=1, solved_questions=1)
    assert set(companies) == {"Meta", "Google", "Amazon"}


def test_company_fully_solved_flag(sample_questions):
    flags = {c.name: c.fully_solved for c in company_aggregates(sample_questions)}
    assert flags == {"Meta": False, "Google": True, "Amazon": False}


def test_company_aggregates_do_not_touch_records(sample_questions):
    company_aggregates(sample_questions)
    assert sample_questions[1].companies == ("META", "amazon")


def test_search_companies(sample_questions):
    companies = company_aggregates(sample_questions)
    assert [c.name for c in search_companies(companies, "AM")] == ["Amazon"]
    assert len(search_companies(companies, "")) == 3


def test_company_detail(sample_questions):
    detail = company_detail(sample_questions, "meta")
    assert [q.id for q in detail.questions] == [1, 2, 3]
    assert (detail.solved, detail.practice, detail.unattempted, detail.total) == (2, 1, 0, 3)


def test_company_detail_sorted_by_frequency(sample_questions):
    detail = company_detail(sample_questions, "AMAZON")
    assert [q.id for q in detail.questions] == [4, 2]
    assert (detail.solved, detail.practice, detail.unattempted) == (0, 1, 1)


def test_company_detail_unknown(sample_questions):
    detail = company_detail(sample_questions, "Initech")
    assert detail.total == 0


def test_difficulty_progress(sample_questions):
    progress = difficulty_progress(sample_questions)
    assert [(p.difficulty, p.total, p.solved) for p in progress] == [
        (Difficulty.EASY, 2, 1), (Difficulty.MEDIUM, 1, 0), (Difficulty.HARD, 1, 1),
    ]


def test_filter_by_topic(pair):
    assert names(filter_questions(pair, topics={"design"})) == ["LRU Cache"]


def test_filter_by_search(pair):
    assert names(filter_questions(pair, search="sum")) == ["Two Sum"]


def test_filter_search_matches_topics(pair):
    assert names(filter_questions(pair, search="HASH")) == ["LRU Cache"]


def test_filter_by_difficulty(pair):
    assert names(filter_questions(pair, difficulties={"MEDIUM"})) == ["LRU Cache"]
    assert names(filter_questions(pair, difficulties=["medium", "easy"])) == ["LRU Cache", "Two Sum"]


def test_filter_empty_matches_all_sorted(pair):
    assert names(filter_questions(pair)) == ["LRU Cache", "Two Sum"]


def test_filter_predicates_are_anded(pair):
    assert filter_questions(pair, search="sum", topics={"design"}) == []
    assert names(filter_questions(pair, search="cache", difficulties={"MEDIUM"}, topics={"design", "array"})) == ["LRU Cache"]


def test_filter_unknown_difficulty(pair):
    with pytest.raises(ValueError):
        filter_questions(pair, difficulties={"IMPOSSIBLE"})


def test_available_topics(sample_questions):
    assert available_topics(sample_questions) == [
        "array", "binary search", "design", "hash map", "stack", "string",
    ]


@pytest.mark.asyncio
async def test_available_topics_follow_the_store(store, mutations):
    palettes = []
    store.subscribe(lambda snapshot: palettes.append(available_topics(snapshot)))
    await mutations.remove_topics(2, TopicSelection(["design"]))
    assert "design" not in palettes[-1]
    assert "hash map" in palettes[-1]


@pytest.mark.asyncio
async def test_company_view_recomputed_on_status_change(store, mutations):
    await mutations.set_status(2, Status.SOLVED)
    meta = next(c for c in company_aggregates(store.snapshot()) if c.name == "Meta")
    assert meta.fully_solved


def test_format_frequency():
    assert format_frequency(None) == "0.0%"
    assert format_frequency(0) == "0.0%"
    assert format_frequency(12.345) == "12.3%"


def test_company_detail_normalizes_title(sample_questions):
    assert company_detail(sample_questions, "META").name == "Meta"
