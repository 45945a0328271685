"""HTTP client for the remote question service."""
import logging
from typing import Any

import httpx

from dsa_tracker.errors import RemoteError, Unauthorized
from dsa_tracker.models import Question, Stats, Status, User
from dsa_tracker.session import SessionGateway

logger = logging.getLogger(__name__)


class QuestionService:
    def __init__(
        self,
        base_url: str,
        session: SessionGateway,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.session = session
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "QuestionService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _headers(self) -> dict[str, str]:
        token = self.session.current_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteError(f"Network error: {e}") from e

        if response.status_code == 401:
            self.session.invalidate()
            raise Unauthorized()
        if not response.is_success:
            detail = _error_detail(response)
            message = detail or f"Request failed with status {response.status_code}"
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise RemoteError(message, status_code=response.status_code, detail=detail)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # --- catalog ---

    async def fetch_questions(self) -> list[Question]:
        body = await self._request("GET", "/api/questions")
        try:
            return [Question.from_dict(item) for item in _payload(body) or []]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("malformed question payload: %r", e)
            raise RemoteError("Malformed response") from e

    async def fetch_stats(self) -> Stats:
        body = await self._request("GET", "/api/stats")
        try:
            return Stats.from_dict(_payload(body) or {})
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("malformed stats payload: %r", e)
            raise RemoteError("Malformed response") from e

    # --- mutations ---

    async def update_status(self, question_id: int, status: Status) -> None:
        await self._request("PUT", f"/api/questions/{question_id}/status", json={"status": Status(status).value})

    async def increment_attempt(self, question_id: int) -> None:
        await self._request("POST", f"/api/questions/{question_id}/attempt")

    async def update_best_time(self, question_id: int, best_time: int) -> None:
        await self._request("PUT", f"/api/questions/{question_id}/time", json={"bestTime": best_time})

    async def remove_topics(self, question_id: int, topics: list[str]) -> None:
        await self._request("DELETE", f"/api/questions/{question_id}/topics", json={"topics": list(topics)})

    # --- auth ---

    async def login(self, email: str, password: str) -> tuple[str, User]:
        body = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        return _credential(body)

    async def register(self, email: str, password: str, username: str) -> tuple[str, User]:
        body = await self._request(
            "POST", "/api/auth/register",
            json={"email": email, "password": password, "username": username},
        )
        return _credential(body)


def _payload(body: Any) -> Any:
    if body is None:
        return None
    if not isinstance(body, dict):
        raise TypeError(f"expected an object, got {type(body).__name__}")
    return body.get("data")


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


def _credential(body: Any) -> tuple[str, User]:
    if not isinstance(body, dict) or not body.get("token"):
        raise RemoteError("Malformed authentication response")
    return body["token"], User.from_dict(body.get("user") or {})
