"""Tests for logging configuration, formatters and correlation ids."""

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from riffus.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """configure_logging() replaces root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message: str = "hello", exc_info: object = None) -> logging.LogRecord:
    return logging.LogRecord(
        name="riffus.test",
        level=logging.ERROR,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=(),
        exc_info=exc_info,  # type: ignore[arg-type]
    )


class TestCorrelationId:
    """Context-bound correlation ids."""

    def test_set_and_get(self) -> None:
        assert set_correlation_id("abc-123") == "abc-123"
        assert get_correlation_id() == "abc-123"

    @pytest.mark.parametrize("value", [None, ""])
    def test_generates_uuid_when_missing(self, value: str | None) -> None:
        result = set_correlation_id(value)

        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_copies_id_onto_record(self) -> None:
        set_correlation_id("req-1")
        record = make_record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-1"  # type: ignore[attr-defined]


class TestFormatters:
    """JSON and compact console output."""

    def test_json_formatter_includes_standard_fields(self) -> None:
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = make_record("Search done")
        record.correlation_id = "req-2"  # type: ignore[attr-defined]

        data = json.loads(formatter.format(record))

        assert data["message"] == "Search done"
        assert data["level"] == "ERROR"
        assert data["logger"] == "riffus.test"
        assert data["line"] == 42
        assert data["correlation_id"] == "req-2"

    def test_compact_formatter_shows_root_cause_first(self) -> None:
        try:
            try:
                raise ConnectionError("socket closed")
            except ConnectionError as e:
                raise RuntimeError("Failed to search") from e
        except RuntimeError:
            exc_info = sys.exc_info()

        text = CompactExceptionFormatter().formatException(exc_info)

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == [
            "╰─► ConnectionError: socket closed",
            "╰─► RuntimeError: Failed to search",
        ]

    def test_compact_formatter_without_exception(self) -> None:
        assert CompactExceptionFormatter().formatException((None, None, None)) == ""


class TestConfigureLogging:
    """Root logger setup."""

    def test_sets_level_and_single_handler(self) -> None:
        configure_logging(log_level="DEBUG")
        configure_logging(log_level="WARNING")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert any(isinstance(f, CorrelationIdFilter) for f in root.handlers[0].filters)

    def test_json_format_uses_json_formatter(self) -> None:
        configure_logging(json_format=True)

        assert isinstance(logging.getLogger().handlers[0].formatter, CustomJsonFormatter)

    def test_text_format_uses_compact_formatter(self) -> None:
        configure_logging(json_format=False)

        assert isinstance(logging.getLogger().handlers[0].formatter, CompactExceptionFormatter)

    def test_quiets_http_libraries(self) -> None:
        configure_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging(log_level="chatty")

        assert logging.getLogger().level == logging.INFO
