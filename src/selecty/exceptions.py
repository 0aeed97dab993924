"""Domain exception hierarchy for the consultation chat."""

from __future__ import annotations


class SelectyError(RuntimeError):
    """Base class for all domain-level consultation errors."""


class CaptureUnavailableError(SelectyError):
    """Raised when the camera cannot be opened (denied, missing, or busy)."""


class CaptureAlreadyActiveError(SelectyError):
    """Raised when a second camera stream is requested while one is bound."""


class NoActiveStreamError(SelectyError):
    """Raised when a frame is requested without a bound camera stream."""


class UnreadableFileError(SelectyError):
    """Raised when an imported file cannot be decoded into an image."""


class EmptyMessageError(SelectyError):
    """Raised when a user message has neither text nor an image."""


class SessionClosedError(SelectyError):
    """Raised when a torn-down chat session or timeline is used."""


class ConfigValidationError(SelectyError):
    """Raised when configuration cannot be validated safely."""
