"""Domain error taxonomy.

Every user-visible failure carries a short human-readable message and a
stable machine-readable code. The API renders them as
``{"error": {"message": ..., "code": ...}}``.
"""


class StudioError(Exception):
    """Base class for errors surfaced to callers."""

    code = "INTERNAL_ERROR"
    status_code = 500
    headers: dict[str, str] | None = None

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "code": self.code}


class UnauthorizedError(StudioError):
    """Raised when a request carries no user identity."""

    code = "UNAUTHORIZED"
    status_code = 401


class ProviderError(StudioError):
    """An external provider call failed.

    Wraps the raw error with the identity of the failing capability so it is
    never re-thrown bare.
    """

    code = "PROVIDER_ERROR"
    status_code = 502

    def __init__(self, provider: str, operation: str, message: str) -> None:
        super().__init__(f"{provider} {operation} failed: {message}")
        self.provider = provider
        self.operation = operation
        self.detail = message


class GenerationError(StudioError):
    """Content could not be generated; nothing was persisted."""

    code = "GENERATION_FAILED"
    status_code = 502

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message, code)
        if self.code == "CONTEXT_LOOKUP_FAILED":
            self.status_code = 500


class ContentNotFoundError(StudioError):
    """Content does not exist or is not owned by the caller."""

    code = "NOT_FOUND"
    status_code = 404


class InvalidTransitionError(StudioError):
    """The requested lifecycle action is not legal from the current state."""

    code = "INVALID_STATUS"
    status_code = 400


class InvalidScheduleError(StudioError):
    """A schedule timestamp is missing or not in the future."""

    code = "INVALID_SCHEDULE"
    status_code = 400


class ConcurrentModificationError(StudioError):
    """The record changed state between read and guarded write."""

    code = "CONFLICT"
    status_code = 409


class PublishError(StudioError):
    """Publishing to the platform failed."""

    code = "PUBLISH_FAILED"
    status_code = 502


class RateLimitExceededError(StudioError):
    """The caller exhausted the window for an operation class."""

    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, retry_after: int, headers: dict[str, str] | None = None) -> None:
        super().__init__(f"Rate limit exceeded. Try again in {retry_after} seconds.")
        self.retry_after = retry_after
        self.headers = {**(headers or {}), "Retry-After": str(retry_after)}


class AudioExtractionError(StudioError):
    """The local media tool could not produce an audio track."""

    code = "AUDIO_EXTRACTION_FAILED"
    status_code = 422


class InvalidInputError(StudioError):
    """Request payload is structurally valid but unusable."""

    code = "INVALID_INPUT"
    status_code = 400
