"""Unit tests for sqlinclude logging helpers."""

import io
import logging

import pytest

from sqlinclude._serialization import decode_json
from sqlinclude.compiler import SQLCompiler
from sqlinclude.utils.logging import (
    CorrelationIDFilter,
    StructuredFormatter,
    configure_logging,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("sqlinclude.compiler", logging.INFO, __file__, 10, "Compiled %d statements", (2,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_namespaces_under_sqlinclude() -> None:
    logger = get_logger("compiler")
    assert logger.name == "sqlinclude.compiler"
    assert get_logger("sqlinclude.loader").name == "sqlinclude.loader"
    assert get_logger().name == "sqlinclude"
    assert sum(isinstance(f, CorrelationIDFilter) for f in get_logger("compiler").filters) == 1


class TestStructuredFormatter:
    """Statement fields are top-level keys, everything else is context."""

    def test_statement_fields_are_lifted(self) -> None:
        record = _record(
            extra_fields={"statement": "loan_books", "location": "q.sql:4", "statement_count": 2, "skipped_count": 0}
        )

        payload = decode_json(StructuredFormatter().format(record))

        assert payload["message"] == "Compiled 2 statements"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "sqlinclude.compiler"
        assert payload["statement"] == "loan_books"
        assert payload["location"] == "q.sql:4"
        assert payload["context"] == {"statement_count": 2, "skipped_count": 0}
        assert "correlation_id" not in payload

    def test_missing_statement_fields_are_left_out(self) -> None:
        payload = decode_json(StructuredFormatter().format(_record(extra_fields={"statement": None})))

        assert "statement" not in payload
        assert "context" not in payload

    @pytest.mark.parametrize(("include_sql", "expected"), [(False, None), (True, "SELECT ?1")])
    def test_sql_text_is_opt_in(self, include_sql: bool, expected: object) -> None:
        record = _record(extra_fields={"statement": "a", "operation": "query", "sql": "SELECT ?1", "parameter_count": 1})

        payload = decode_json(StructuredFormatter(include_sql=include_sql).format(record))

        assert payload["operation"] == "query"
        assert payload["context"].get("sql") == expected

    def test_correlation_id_is_attached(self) -> None:
        set_correlation_id("req-42")
        try:
            record = _record()
            assert CorrelationIDFilter().filter(record) is True
            assert record.correlation_id == "req-42"  # type: ignore[attr-defined]
            assert decode_json(StructuredFormatter().format(record))["correlation_id"] == "req-42"
        finally:
            set_correlation_id(None)
        assert get_correlation_id() is None


class TestConfigureLogging:
    def test_compile_logs_name_their_source(self, reset_sqlinclude_logger: logging.Logger) -> None:
        stream = io.StringIO()

        logger = configure_logging("debug", stream=stream)
        SQLCompiler().compile_statements("-- name: a?\nSELECT 1\n/\n", "a.sql")

        lines = [decode_json(line) for line in stream.getvalue().splitlines()]
        assert logger is reset_sqlinclude_logger
        assert reset_sqlinclude_logger.level == logging.DEBUG
        assert reset_sqlinclude_logger.propagate is False
        assert lines[0]["message"] == "sqlinclude logging configured"
        assert lines[-1]["source"] == "a.sql"
        assert lines[-1]["context"]["statement_count"] == 1

    def test_text_format_and_extra_handlers(self, reset_sqlinclude_logger: logging.Logger) -> None:
        stream, extra_stream = io.StringIO(), io.StringIO()
        handler = logging.StreamHandler(extra_stream)
        handler.setFormatter(StructuredFormatter())

        configure_logging(logging.INFO, structured=False, stream=stream, handlers=[handler])
        get_logger("loader").info("Loaded %d files", 3, extra={"extra_fields": {"path": "queries", "files_loaded": 3}})

        assert "INFO sqlinclude.loader: Loaded 3 files" in stream.getvalue()
        assert decode_json(extra_stream.getvalue().splitlines()[-1])["path"] == "queries"
        assert len(reset_sqlinclude_logger.handlers) == 2
