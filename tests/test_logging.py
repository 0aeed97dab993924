"""Tests for structured logging behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

import structlog

from selecty.logging_utils import configure_logging


class ConfigureLoggingTests(unittest.TestCase):
    """Validate configure_logging() handler setup behavior."""

    def setUp(self) -> None:
        # Preserve root logger state so tests do not pollute each other.
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self._original_handlers:
                handler.close()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)
        structlog.reset_defaults()

    def _stream_handlers(self) -> list[logging.Handler]:
        return [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]

    def test_configure_logging_adds_stderr_handler(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertTrue(len(self._stream_handlers()) >= 1)

    def test_structured_uses_structlog_formatter(self) -> None:
        configure_logging({"level": "DEBUG", "structured": True, "log_to_file": False})
        formatters = [h.formatter for h in logging.getLogger().handlers]
        self.assertTrue(
            any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)
        )

    def test_plain_formatter_when_not_structured(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        formatters = [h.formatter for h in logging.getLogger().handlers]
        self.assertFalse(
            any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)
        )

    def test_configure_logging_sets_root_level(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_structured_file_output_is_json_with_extra_fields(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "app.log"
            configure_logging(
                {
                    "level": "INFO",
                    "structured": True,
                    "log_to_file": True,
                    "log_file_path": str(log_path),
                }
            )
            logging.getLogger("selecty.camera").info(
                "camera.started", extra={"provider_id": 3}
            )
            for handler in logging.getLogger().handlers:
                handler.flush()
            lines = log_path.read_text(encoding="utf-8").strip().splitlines()
            data = json.loads(lines[-1])
            self.assertEqual(data["event"], "camera.started")
            self.assertEqual(data["provider_id"], 3)
            self.assertEqual(data["logger"], "selecty.camera")

    def test_stderr_handler_filters_to_selecty(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        handler = self._stream_handlers()[0]
        app_record = logging.LogRecord(
            name="selecty.session",
            level=logging.WARNING,
            pathname="",
            lineno=0,
            msg="ok",
            args=(),
            exc_info=None,
        )
        other_record = logging.LogRecord(
            name="PIL.Image",
            level=logging.WARNING,
            pathname="",
            lineno=0,
            msg="noise",
            args=(),
            exc_info=None,
        )
        self.assertTrue(handler.filter(app_record))
        self.assertFalse(handler.filter(other_record))


if __name__ == "__main__":
    unittest.main()
