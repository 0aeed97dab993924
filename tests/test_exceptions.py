"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from selecty.exceptions import (
    CaptureAlreadyActiveError,
    CaptureUnavailableError,
    ConfigValidationError,
    EmptyMessageError,
    NoActiveStreamError,
    SelectyError,
    SessionClosedError,
    UnreadableFileError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        for error_type in (
            CaptureUnavailableError,
            CaptureAlreadyActiveError,
            NoActiveStreamError,
            UnreadableFileError,
            EmptyMessageError,
            SessionClosedError,
            ConfigValidationError,
        ):
            self.assertTrue(issubclass(error_type, SelectyError))
        self.assertTrue(issubclass(SelectyError, RuntimeError))


if __name__ == "__main__":
    unittest.main()
