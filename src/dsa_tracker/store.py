"""In-memory cache of question records for the current session."""
import dataclasses
import logging
from typing import Callable, Iterable

from dsa_tracker.errors import FetchError, QuestionNotFound, RemoteError
from dsa_tracker.models import Question
from dsa_tracker.session import SessionGateway

logger = logging.getLogger(__name__)

Listener = Callable[[tuple[Question, ...]], None]

MUTABLE_FIELDS = frozenset({"status", "attempt_count", "best_time", "topics"})


class QuestionStore:
    """Single source of question records for views and mutations.

    Records are frozen; ``patch`` swaps in a new record at the same position,
    so a snapshot taken before a patch never changes underneath its reader.
    """

    def __init__(self, service, session: SessionGateway):
        self.service = service
        self.session = session
        self._questions: dict[int, Question] = {}
        self._listeners: list[Listener] = []
        self.loaded = False

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: int) -> bool:
        return question_id in self._questions

    async def load(self) -> None:
        """Replace the cache with a fresh fetch, sorted by frequency."""
        if not self.session.is_ready() or not self.session.current_token():
            raise FetchError("fetch questions", RemoteError("Not signed in"))
        try:
            fetched = await self.service.fetch_questions()
        except RemoteError as e:
            raise FetchError("fetch questions", e) from e
        self._replace(fetched)
        self.loaded = True
        logger.info("loaded %d questions", len(self._questions))
        self._publish()

    def _replace(self, questions: Iterable[Question]) -> None:
        ordered = sorted(questions, key=lambda q: q.average_frequency, reverse=True)
        fresh: dict[int, Question] = {}
        for q in ordered:
            if q.id in fresh:
                logger.warning("duplicate question id %s in payload, keeping first", q.id)
                continue
            fresh[q.id] = q
        self._questions = fresh

    def get(self, question_id: int) -> Question:
        try:
            return self._questions[question_id]
        except KeyError:
            raise QuestionNotFound(question_id) from None

    def patch(self, question_id: int, changes: dict) -> Question:
        """Shallow-merge ``changes`` into one record and notify listeners."""
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch fields: {', '.join(sorted(unknown))}")
        current = self.get(question_id)
        updated = dataclasses.replace(current, **changes)
        self._questions[question_id] = updated
        self._publish()
        return updated

    def snapshot(self) -> tuple[Question, ...]:
        return tuple(self._questions.values())

    def clear(self) -> None:
        self._questions = {}
        self.loaded = False
        self._publish()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
