"""Error taxonomy for the chat analysis pipeline.

Every error carries the HTTP status and machine-readable code that the
exception handler in ``chat_detective.main`` returns, so callers can tell a
bad upload apart from a failing model or an unusable model response.
"""

from __future__ import annotations

from typing import Any


class AnalysisError(RuntimeError):
    """Base class for failures that terminate an analysis request."""

    status_code: int = 500
    error_code: str = "ANALYSIS_FAILED"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context


class InputError(AnalysisError):
    """Raised when required multipart fields are missing or unusable."""

    status_code = 400
    error_code = "INVALID_INPUT"


class RemoteCallError(AnalysisError):
    """Raised when the remote analysis service (model or file store) fails."""

    status_code = 502
    error_code = "REMOTE_CALL_FAILED"


class RemoteTimeoutError(RemoteCallError):
    """Raised when the remote analysis service does not answer in time."""

    status_code = 504
    error_code = "REMOTE_TIMEOUT"


class NormalizationError(AnalysisError):
    """Raised when the model output cannot be coerced into an analysis result."""

    status_code = 422
    error_code = "NORMALIZATION_FAILED"


class NoJsonArrayFound(NormalizationError):
    error_code = "NO_JSON_ARRAY_FOUND"


class InvalidJson(NormalizationError):
    error_code = "INVALID_JSON"

    def __init__(self, message: str, *, sanitized: str, **context: Any) -> None:
        super().__init__(message, **context)
        self.sanitized = sanitized


class MalformedInstance(NormalizationError):
    error_code = "MALFORMED_INSTANCE"

    def __init__(self, message: str, *, index: int, **context: Any) -> None:
        super().__init__(message, index=index, **context)
        self.index = index


class CleanupWarning(UserWarning):
    """Non-fatal failure while releasing a temporary artifact.

    Instances are collected and logged, never raised to the caller.
    """

    def __init__(self, artifact: str, reason: str) -> None:
        super().__init__(f"Failed to release {artifact}: {reason}")
        self.artifact = artifact
        self.reason = reason


__all__ = [
    "AnalysisError",
    "InputError",
    "RemoteCallError",
    "RemoteTimeoutError",
    "NormalizationError",
    "NoJsonArrayFound",
    "InvalidJson",
    "MalformedInstance",
    "CleanupWarning",
]
