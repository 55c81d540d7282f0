"""Compile annotated SQL text into statement descriptors and operations."""

import time
from typing import TYPE_CHECKING, Optional

from sqlinclude.adapters.sqlite import SqliteAdapter
from sqlinclude.config import CompilerConfig
from sqlinclude.core.directives import parse_directives
from sqlinclude.core.resolver import resolve_statement
from sqlinclude.core.segmenter import iter_statement_sources
from sqlinclude.exceptions import DuplicateNameError, StatementSyntaxError, UnterminatedStatementError
from sqlinclude.operations import SQLOperations
from sqlinclude.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlinclude.core.statement import StatementDescriptor, StatementSource
    from sqlinclude.protocols import DriverAdapterProtocol

__all__ = ("SQLCompiler",)

logger = get_logger("compiler")


class SQLCompiler:
    """Turns annotated SQL text into an :class:`SQLOperations` container.

    Compilation runs in three passes over each text: split it into statement
    blocks, parse each block's directives, then resolve its parameters.
    Statement names must be unique within one text.

    Args:
        config: Compilation settings. Defaults to :class:`CompilerConfig` defaults.
        adapter: Driver adapter the compiled operations execute through.
            Defaults to :class:`~sqlinclude.adapters.SqliteAdapter`.
    """

    __slots__ = ("adapter", "config")

    def __init__(
        self, config: Optional[CompilerConfig] = None, adapter: "Optional[DriverAdapterProtocol]" = None
    ) -> None:
        self.config = config or CompilerConfig()
        self.adapter = adapter if adapter is not None else SqliteAdapter()

    def __repr__(self) -> str:
        return f"SQLCompiler(config={self.config!r}, adapter={self.adapter!r})"

    def _iter_sources(self, text: str, source_name: str) -> "Iterator[StatementSource]":
        try:
            yield from iter_statement_sources(text, self.config.terminator, source_name)
        except UnterminatedStatementError as exc:
            if self.config.on_syntax_error == "abort":
                raise
            self._log_skipped(exc)

    def _log_skipped(self, error: StatementSyntaxError) -> None:
        logger.warning(
            "Skipping malformed statement: %s",
            error,
            extra={
                "extra_fields": {
                    "statement": error.statement,
                    "location": error.location,
                    "error_type": type(error).__name__,
                }
            },
        )

    def compile_statements(self, text: str, source_name: str = "<string>") -> "list[StatementDescriptor]":
        """Compile every statement in ``text``, in source order.

        Args:
            text: Annotated SQL source.
            source_name: Name reported in error locations and tracebacks,
                usually the path of the file ``text`` was read from.

        Raises:
            StatementSyntaxError: A block is malformed and the config says to abort.
            DuplicateNameError: Two statements in ``text`` share a name.
            StatementCompileError: A statement's parameters cannot be resolved.

        Returns:
            One descriptor per compiled statement.
        """
        start_time = time.perf_counter()
        descriptors: list[StatementDescriptor] = []
        seen: dict[str, str] = {}
        skipped = 0

        for source in self._iter_sources(text, source_name):
            try:
                header = parse_directives(source)
            except StatementSyntaxError as exc:
                if self.config.on_syntax_error == "abort":
                    raise
                self._log_skipped(exc)
                skipped += 1
                continue

            if header.name in seen:
                msg = f"Statement name is already used at {seen[header.name]}"
                raise DuplicateNameError(msg, statement=header.name, location=source.location)
            seen[header.name] = source.location
            descriptors.append(resolve_statement(header, self.config.unused_parameters))

        logger.debug(
            "Compiled %d statements from %s",
            len(descriptors),
            source_name,
            extra={
                "extra_fields": {
                    "source": source_name,
                    "statement_count": len(descriptors),
                    "skipped_count": skipped,
                    "duration_ms": (time.perf_counter() - start_time) * 1000,
                }
            },
        )
        return descriptors

    def compile(self, text: str, source_name: str = "<string>") -> SQLOperations:
        """Compile ``text`` into a container holding one operation per statement."""
        operations = SQLOperations(self.adapter, self.config)
        return operations.load_from_list(self.compile_statements(text, source_name))
