"""
Error hierarchy.

Every module raises one of these so the API gateway can map failures to
distinct, human-readable responses.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all AdGen errors."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.session_id = session_id

    def __str__(self) -> str:
        return self.message


class ValidationError(PipelineError):
    """Invalid user input (oversized or unreadable upload, bad form values)."""


class ConfigError(PipelineError):
    """Missing or malformed configuration, such as an absent API key."""


class GenerationError(PipelineError):
    """Upstream generation failure or a response that could not be parsed."""


class RetryableError(PipelineError):
    """Transient failure that may succeed when retried."""


class RateLimitError(RetryableError):
    """Upstream provider rejected the request because of rate limiting."""


class VideoTimeoutError(GenerationError):
    """Video job did not finish before the polling ceiling."""


class PersistenceError(PipelineError):
    """Storage upload or table write failed."""
