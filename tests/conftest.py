import io

import pytest
import pytest_asyncio
from rich.console import Console

from dsa_tracker.errors import RemoteError
from dsa_tracker.models import Question, Stats, User
from dsa_tracker.mutations import QuestionMutations
from dsa_tracker.notify import Notifier
from dsa_tracker.session import SessionGateway
from dsa_tracker.store import QuestionStore

QUESTIONS = [
    {
        "id": 1, "name": "Two Sum", "difficulty": "easy", "link": "https://leetcode.com/problems/two-sum",
        "companies": [{"name": "meta"}, {"name": "Google"}], "topics": ["array", "hash map"],
        "status": "solved", "attemptCount": 2, "bestTime": 120, "averageFrequency": 90.0,
    },
    {
        "id": 2, "name": "LRU Cache", "difficulty": "MEDIUM", "link": "",
        "companies": [{"name": "META"}, {"name": "amazon"}], "topics": ["hash map", "design"],
        "status": "practice", "attemptCount": 1, "averageFrequency": 70.0,
    },
    {
        "id": 3, "name": "Median of Two Sorted Arrays", "difficulty": "Hard",
        "companies": [{"name": "Meta"}], "topics": ["array", "binary search"],
        "status": "solved", "attemptCount": 4, "bestTime": 300, "averageFrequency": 40.0,
    },
    {
        "id": 4, "name": "Valid Parentheses", "difficulty": "EASY",
        "companies": [{"name": "Amazon"}], "topics": ["stack", "string"],
        "status": "unattempted", "averageFrequency": 85.0,
    },
]


class FakeService:
    """In-memory stand-in for the question service."""

    def __init__(self, questions=None, stats=None):
        self.questions = list(questions or [])
        self.stats = stats or Stats()
        self.calls = []
        self.failing = set()
        self.detail = None

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failing:
            raise RemoteError("Request failed with status 500", status_code=500, detail=self.detail)

    async def fetch_questions(self):
        self._call("fetch_questions")
        return list(self.questions)

    async def fetch_stats(self):
        self._call("fetch_stats")
        return self.stats

    async def update_status(self, question_id, status):
        self._call("update_status", question_id, status)

    async def increment_attempt(self, question_id):
        self._call("increment_attempt", question_id)

    async def update_best_time(self, question_id, best_time):
        self._call("update_best_time", question_id, best_time)

    async def remove_topics(self, question_id, topics):
        self._call("remove_topics", question_id, topics)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def sample_questions():
    return [Question.from_dict(q) for q in QUESTIONS]


@pytest.fixture
def service(sample_questions):
    return FakeService(sample_questions)


@pytest.fixture
def session(tmp_db):
    gateway = SessionGateway(tmp_db)
    gateway.restore()
    gateway.establish("secret-token", User(email="ada@example.com", username="ada", id=7))
    return gateway


@pytest.fixture
def notifier():
    return Notifier(Console(file=io.StringIO()))


@pytest_asyncio.fixture
async def store(service, session):
    question_store = QuestionStore(service, session)
    await question_store.load()
    return question_store


@pytest.fixture
def mutations(store, service, notifier):
    return QuestionMutations(store, service, notifier)
