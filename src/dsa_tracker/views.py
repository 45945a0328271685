"""Company, difficulty and listing views derived from a question snapshot."""
from typing import Iterable

from dsa_tracker.models import (
    Company, CompanyDetail, Difficulty, DifficultyProgress, Question, Status,
)


def normalize_company(name: str) -> str:
    return name[:1].upper() + name[1:].lower()


def sort_by_frequency(questions: Iterable[Question]) -> list[Question]:
    return sorted(questions, key=lambda q: q.average_frequency, reverse=True)


def company_aggregates(questions: Iterable[Question]) -> list[Company]:
    """Total and solved counts per company, in first-seen order."""
    totals: dict[str, list[int]] = {}
    for q in questions:
        for raw in q.companies:
            counts = totals.setdefault(normalize_company(raw), [0, 0])
            counts[0] += 1
            if q.status is Status.SOLVED:
                counts[1] += 1
    return [
        Company(name=name, total_questions=total, solved_questions=solved)
        for name, (total, solved) in totals.items()
    ]


def search_companies(companies: Iterable[Company], text: str) -> list[Company]:
    needle = text.lower()
    return [c for c in companies if needle in c.name.lower()]


def company_detail(questions: Iterable[Question], company: str) -> CompanyDetail:
    """Questions asked by one company plus per-status counts over them."""
    wanted = company.lower()
    matching = sort_by_frequency(
        q for q in questions if any(c.lower() == wanted for c in q.companies)
    )
    counts = {status: 0 for status in Status}
    for q in matching:
        counts[q.status] += 1
    return CompanyDetail(
        name=normalize_company(company),
        questions=tuple(matching),
        solved=counts[Status.SOLVED],
        practice=counts[Status.PRACTICE],
        unattempted=counts[Status.UNATTEMPTED],
    )


def difficulty_progress(questions: Iterable[Question]) -> list[DifficultyProgress]:
    totals = {d: [0, 0] for d in Difficulty}
    for q in questions:
        totals[q.difficulty][0] += 1
        if q.status is Status.SOLVED:
            totals[q.difficulty][1] += 1
    return [
        DifficultyProgress(difficulty=d, total=total, solved=solved)
        for d, (total, solved) in totals.items()
    ]


def _matches_search(question: Question, text: str) -> bool:
    if not text:
        return True
    needle = text.lower()
    return needle in question.name.lower() or any(needle in t.lower() for t in question.topics)


def filter_questions(
    questions: Iterable[Question],
    search: str = "",
    difficulties: Iterable[Difficulty | str] = (),
    topics: Iterable[str] = (),
) -> list[Question]:
    """Apply search, difficulty and topic filters; empty filters match all."""
    wanted_difficulties = {Difficulty.parse(d) for d in difficulties}
    wanted_topics = set(topics)
    return sort_by_frequency(
        q for q in questions
        if _matches_search(q, search)
        and (not wanted_difficulties or q.difficulty in wanted_difficulties)
        and (not wanted_topics or any(t in wanted_topics for t in q.topics))
    )


def available_topics(questions: Iterable[Question]) -> list[str]:
    return sorted({t for q in questions for t in q.topics})


def format_frequency(freq: float | None) -> str:
    if not freq:
        return "0.0%"
    return f"{round(freq, 1)}%"
