"""Exception taxonomy for the chat engine.

Transport and parsing failures never escape the engine: the client turns
them into ``GenerateFailure`` results. Lookup errors signal programmer
mistakes (unknown ids) and are allowed to propagate.
"""


class HealthyAIError(Exception):
    """Base class for all engine errors."""


class BackendUnreachableError(HealthyAIError):
    """The inference service could not be reached or refused the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(HealthyAIError):
    """The inference service answered with a body we could not interpret."""

    def __init__(self, message: str, raw_body: str = "") -> None:
        super().__init__(message)
        self.raw_body = raw_body


class ValidationError(HealthyAIError, ValueError):
    """User input rejected before any state was touched."""


class SessionNotFoundError(HealthyAIError, LookupError):
    pass


class FolderNotFoundError(HealthyAIError, LookupError):
    pass


class EntryNotFoundError(HealthyAIError, LookupError):
    pass


class SendInProgressError(HealthyAIError):
    """A message is already being sent for this session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"A send is already in progress for session {session_id}")
        self.session_id = session_id
