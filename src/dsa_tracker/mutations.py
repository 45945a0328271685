"""Optimistic question updates with rollback on remote failure."""
import logging
from typing import Awaitable, Callable, Iterable, Iterator

from dsa_tracker.errors import MutationError, QuestionNotFound, RemoteError
from dsa_tracker.models import Status
from dsa_tracker.notify import Notifier
from dsa_tracker.store import QuestionStore

logger = logging.getLogger(__name__)


class TopicSelection:
    """Topics staged for removal from one question."""

    def __init__(self, topics: Iterable[str] = ()):
        self._topics: list[str] = []
        for topic in topics:
            self.toggle(topic)

    def toggle(self, topic: str) -> bool:
        """Flip a topic in or out of the selection; returns True if now staged."""
        if topic in self._topics:
            self._topics.remove(topic)
            return False
        self._topics.append(topic)
        return True

    def discard(self, topics: Iterable[str]) -> None:
        for topic in topics:
            if topic in self._topics:
                self._topics.remove(topic)

    def clear(self) -> None:
        self._topics = []

    @property
    def topics(self) -> tuple[str, ...]:
        return tuple(self._topics)

    def __contains__(self, topic: str) -> bool:
        return topic in self._topics

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._topics))

    def __len__(self) -> int:
        return len(self._topics)


class QuestionMutations:
    def __init__(self, store: QuestionStore, service, notifier: Notifier):
        self.store = store
        self.service = service
        self.notifier = notifier

    async def apply(
        self,
        question_id: int,
        changes: dict,
        remote_call: Callable[[], Awaitable[None]],
        action: str,
        use_server_message: bool = False,
    ) -> bool:
        """Patch the store now, confirm remotely, undo the same fields on failure.

        Only the fields named in ``changes`` are captured and restored, so a
        rollback never clobbers a field owned by another in-flight mutation.
        Returns True when the service accepted the change.
        """
        current = self.store.get(question_id)
        previous = {name: getattr(current, name) for name in changes}
        self.store.patch(question_id, changes)
        try:
            await remote_call()
        except RemoteError as e:
            self._rollback(question_id, previous, action)
            message = e.detail if use_server_message and e.detail else None
            self.notifier.error(MutationError(action, e, message=message))
            return False
        return True

    def _rollback(self, question_id: int, previous: dict, action: str) -> None:
        try:
            self.store.patch(question_id, previous)
        except QuestionNotFound:
            logger.warning("question %s left the cache before %s could roll back", question_id, action)
            return
        logger.info("rolled back %s on question %s", action, question_id)

    async def set_status(self, question_id: int, status: Status | str) -> bool:
        status = Status(status)
        return await self.apply(
            question_id,
            {"status": status},
            lambda: self.service.update_status(question_id, status),
            "update status",
        )

    async def increment_attempt(self, question_id: int) -> bool:
        count = self.store.get(question_id).attempt_count or 0
        return await self.apply(
            question_id,
            {"attempt_count": count + 1},
            lambda: self.service.increment_attempt(question_id),
            "increment attempt",
        )

    async def record_best_time(self, question_id: int, seconds: int) -> bool:
        """Store ``seconds`` as the best time if it beats the current one."""
        best = self.store.get(question_id).best_time
        if seconds <= 0 or (best is not None and seconds >= best):
            return False
        return await self.apply(
            question_id,
            {"best_time": seconds},
            lambda: self.service.update_best_time(question_id, seconds),
            "update best time",
        )

    async def remove_topics(self, question_id: int, selection: TopicSelection) -> bool:
        if not selection:
            self.notifier.warning("No topics selected for removal")
            return False
        batch = selection.topics
        remaining = tuple(t for t in self.store.get(question_id).topics if t not in batch)
        removed = await self.apply(
            question_id,
            {"topics": remaining},
            lambda: self.service.remove_topics(question_id, list(batch)),
            "remove topics",
            use_server_message=True,
        )
        if removed:
            selection.discard(batch)
        return removed
