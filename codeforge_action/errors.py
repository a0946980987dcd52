"""Error classes for the CodeForge action.

Every failure that ends a run is one of these. The orchestrator catches
them once at the top level and turns them into a single failure report.
A remote generation that finishes with status ``failed`` is not an error;
the fail-on-error input decides what happens then.
"""

from typing import Optional


class CodeForgeError(Exception):
    """Base exception for the action."""
    pass


class ConfigurationError(CodeForgeError):
    """Missing or invalid input, or the spec file cannot be read."""
    pass


class AuthenticationError(CodeForgeError):
    """The API token was rejected by the service."""
    pass


class ApiError(CodeForgeError):
    """
    The service answered with a non-2xx status, could not be reached,
    or returned a body that does not match the expected shape.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PollTimeoutError(CodeForgeError):
    """Polling ran out of attempts before the run reached a terminal status."""
    pass


class PollCancelledError(CodeForgeError):
    """Polling was stopped by the caller's cancellation signal."""
    pass
