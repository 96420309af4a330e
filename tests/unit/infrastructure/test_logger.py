"""
Unit tests for structured logging.
"""

import json
import logging

from accueil.infrastructure.monitoring.logger import (
    JSONFormatter,
    get_logger,
    identity_id_ctx,
    setup_logging,
)


def _record(message: str, **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="accueil.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Unit tests for JSONFormatter."""

    def test_basic_fields(self):
        """Test the common schema."""
        data = json.loads(JSONFormatter().format(_record("hello")))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == "accueil.test"
        assert "identity_id" not in data

    def test_identity_id_from_context(self):
        """Test the running identity is attached to every line."""
        token = identity_id_ctx.set("user-ada")
        try:
            data = json.loads(JSONFormatter().format(_record("run")))
        finally:
            identity_id_ctx.reset(token)

        assert data["identity_id"] == "user-ada"

    def test_extra_fields_are_merged(self):
        """Test extra={"extra": {...}} fields appear at top level."""
        record = _record("transition", extra={"state": "ready", "run": 3})

        data = json.loads(JSONFormatter().format(record))

        assert data["state"] == "ready"
        assert data["run"] == 3


class TestSetupLogging:
    """Unit tests for setup_logging."""

    def test_configures_root_and_silences_noise(self):
        """Test root level and noisy library loggers."""
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("DEBUG", json_logs=True)

            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert logging.getLogger("httpx").level == logging.WARNING
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_get_logger(self):
        """Test named loggers."""
        assert get_logger("accueil.x").name == "accueil.x"
