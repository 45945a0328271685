"""Credential lifecycle and the global session-expired signal."""
import json
import logging
from typing import Callable, Optional

from dsa_tracker.db import init_db, get_setting, set_setting, delete_settings
from dsa_tracker.models import User

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class SessionGateway:
    """Owns the signed-in user and their bearer token.

    The session starts in a loading state and becomes ready once ``restore``
    has looked for a persisted credential. Components ask it for the current
    token per request instead of reading global state, and register callbacks
    that run when any remote call answers 401.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.loading = True
        self._unauthorized_callbacks: list[Callable[[], None]] = []

    def restore(self) -> None:
        init_db(self.db_path)
        token = get_setting(self.db_path, TOKEN_KEY)
        raw_user = get_setting(self.db_path, USER_KEY)
        if token and raw_user:
            try:
                self.user = User.from_dict(json.loads(raw_user))
                self.token = token
            except (ValueError, AttributeError):
                logger.warning("stored user profile is unreadable, starting signed out")
                delete_settings(self.db_path, TOKEN_KEY, USER_KEY)
        self.loading = False

    def is_ready(self) -> bool:
        return not self.loading

    def current_token(self) -> Optional[str]:
        return self.token

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def establish(self, token: str, user: User) -> None:
        """Activate and persist a credential issued by login or registration."""
        init_db(self.db_path)
        set_setting(self.db_path, TOKEN_KEY, token)
        set_setting(self.db_path, USER_KEY, json.dumps(user.to_dict()))
        self.token = token
        self.user = user
        self.loading = False
        logger.info("session established for %s", user.email)

    def logout(self) -> None:
        self.token = None
        self.user = None
        init_db(self.db_path)
        delete_settings(self.db_path, TOKEN_KEY, USER_KEY)

    def on_unauthorized(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._unauthorized_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._unauthorized_callbacks:
                self._unauthorized_callbacks.remove(callback)

        return unregister

    def invalidate(self) -> None:
        """Drop the credential after a 401 and tell everyone who cares."""
        logger.warning("session invalidated by unauthorized response")
        self.logout()
        for callback in list(self._unauthorized_callbacks):
            try:
                callback()
            except Exception:
                logger.exception("unauthorized callback failed")
