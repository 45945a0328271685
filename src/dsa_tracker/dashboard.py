"""Server-side progress statistics and their display helpers."""
import logging
from typing import Optional

from dsa_tracker.errors import FetchError, RemoteError
from dsa_tracker.models import Difficulty, Stats

logger = logging.getLogger(__name__)

DIFFICULTY_COLORS = {
    Difficulty.EASY: "green",
    Difficulty.MEDIUM: "yellow",
    Difficulty.HARD: "red",
}


def difficulty_color(difficulty: Difficulty | str) -> str:
    try:
        return DIFFICULTY_COLORS[Difficulty.parse(difficulty)]
    except ValueError:
        return "white"


def progress_color(solved: int, total: int) -> str:
    if not total:
        return "dim"
    pct = solved / total * 100
    if pct >= 80:
        return "green"
    elif pct >= 50:
        return "yellow"
    elif pct > 0:
        return "dark_orange"
    return "red"


class StatsBoard:
    """Caches the aggregate returned by the service until the next refresh.

    These numbers come from the server, not from the local question cache, so
    they can lag behind optimistic changes that are still in flight.
    """

    def __init__(self, service):
        self.service = service
        self._stats: Optional[Stats] = None

    @property
    def current(self) -> Optional[Stats]:
        return self._stats

    async def refresh(self) -> Stats:
        try:
            stats = await self.service.fetch_stats()
        except RemoteError as e:
            raise FetchError("fetch stats", e) from e
        self._stats = stats
        logger.info("stats refreshed: %d questions", stats.total)
        return stats

    def clear(self) -> None:
        self._stats = None
