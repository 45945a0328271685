"""Error types raised by the tracker."""


class TrackerError(Exception):
    """Base class for tracker errors."""


class RemoteError(TrackerError):
    """A call to the question service failed (transport or non-2xx)."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        # error text supplied by the server, if any
        self.detail = detail


class Unauthorized(RemoteError):
    def __init__(self, message: str = "Session Expired: Please log in again."):
        super().__init__(message, status_code=401)


class FetchError(TrackerError):
    """Loading or refreshing cached data failed; the previous cache is kept."""

    def __init__(self, action: str, cause: Exception | None = None):
        super().__init__(f"Failed to {action}")
        self.action = action
        self.cause = cause


class MutationError(TrackerError):
    """An optimistic change was rejected remotely and rolled back."""

    def __init__(self, action: str, cause: Exception | None = None, message: str | None = None):
        super().__init__(message or f"Failed to {action}")
        self.action = action
        self.cause = cause


class QuestionNotFound(TrackerError):
    def __init__(self, question_id: int):
        super().__init__(f"Question not found (id={question_id})")
        self.question_id = question_id
