"""Exception hierarchy for fitsync."""


class FitsyncError(Exception):
    """Base class for all fitsync errors."""


class BackendError(FitsyncError):
    """A live backend call failed (transport error, timeout or non-2xx)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url


class ValidationError(FitsyncError):
    """User input failed validation before submission."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class ChatServiceError(FitsyncError):
    """The chat transport could not reach the conversational service."""


class ChatResponseError(ChatServiceError):
    """The conversational service answered with an unrecognised shape."""


class ConfigError(FitsyncError):
    """Configuration file or environment value is invalid."""


class UnsyncedEntityError(BackendError):
    """The entity only exists locally and has no server id yet."""
