"""Data classes for the tracker domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Case-insensitive lookup; raises ValueError for anything else."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class Status(str, Enum):
    UNATTEMPTED = "unattempted"
    PRACTICE = "practice"
    SOLVED = "solved"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Status":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.UNATTEMPTED
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNATTEMPTED


def _unique(items) -> tuple:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return tuple(seen)


@dataclass(frozen=True)
class Question:
    id: int
    name: str
    difficulty: Difficulty
    link: Optional[str] = None
    companies: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    status: Status = Status.UNATTEMPTED
    attempt_count: int = 0
    best_time: Optional[int] = None
    average_frequency: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """Build a Question from the service's JSON representation."""
        companies = []
        for company in data.get("companies") or []:
            name = company.get("name") if isinstance(company, dict) else company
            if name:
                companies.append(name)
        best_time = data.get("bestTime")
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            difficulty=Difficulty.parse(data.get("difficulty", "")),
            link=data.get("link") or None,
            companies=tuple(companies),
            topics=_unique(data.get("topics") or []),
            status=Status.parse(data.get("status")),
            attempt_count=int(data.get("attemptCount") or 0),
            best_time=int(best_time) if best_time else None,
            average_frequency=float(data.get("averageFrequency") or 0.0),
        )


@dataclass(frozen=True)
class Company:
    name: str
    total_questions: int = 0
    solved_questions: int = 0

    @property
    def fully_solved(self) -> bool:
        return self.total_questions > 0 and self.solved_questions == self.total_questions


@dataclass(frozen=True)
class CompanyDetail:
    name: str
    questions: tuple[Question, ...] = ()
    solved: int = 0
    practice: int = 0
    unattempted: int = 0

    @property
    def total(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class DifficultyProgress:
    difficulty: Difficulty
    total: int = 0
    solved: int = 0


@dataclass(frozen=True)
class Stats:
    """Session-wide aggregate as computed by the server."""
    total: int = 0
    by_status: dict = field(default_factory=dict)
    by_difficulty: tuple[DifficultyProgress, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "Stats":
        by_status = data.get("byStatus") or {}
        breakdown = []
        for row in data.get("byDifficulty") or []:
            try:
                difficulty = Difficulty.parse(row.get("difficulty", ""))
            except ValueError:
                continue
            breakdown.append(DifficultyProgress(
                difficulty=difficulty,
                total=int(row.get("total") or 0),
                solved=int(row.get("solved") or 0),
            ))
        return cls(
            total=int(data.get("total") or 0),
            by_status={status.value: int(by_status.get(status.value) or 0) for status in Status},
            by_difficulty=tuple(breakdown),
        )


@dataclass(frozen=True)
class User:
    email: str
    username: str = ""
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(email=data.get("email", ""), username=data.get("username", ""), id=data.get("id"))

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "username": self.username}
