"""Protocols for the database collaborators operations run against."""

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from contextlib import AbstractContextManager

    from sqlinclude.typing import PlaceholderStyle

__all__ = ("CursorProtocol", "DriverAdapterProtocol")


@runtime_checkable
class CursorProtocol(Protocol):
    """The part of a DB-API 2.0 cursor that operations rely on."""

    rowcount: int

    def execute(self, sql: str, parameters: "Sequence[Any]" = ...) -> Any: ...  # pragma: no cover

    def fetchone(self) -> Optional[Any]: ...  # pragma: no cover

    def close(self) -> None: ...  # pragma: no cover


@runtime_checkable
class DriverAdapterProtocol(Protocol):
    """Executes assembled SQL on a caller-owned connection.

    Adapters never begin, commit or roll back transactions.
    """

    placeholder_style: "PlaceholderStyle"

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Translate engine exceptions raised inside the block into ``EngineError``."""
        ...  # pragma: no cover

    def execute(self, conn: Any, statement_name: str, sql: str, parameters: "Sequence[Any]") -> int:
        """Run a non-row-returning statement and return the affected row count."""
        ...  # pragma: no cover

    def select(
        self, conn: Any, statement_name: str, sql: str, parameters: "Sequence[Any]"
    ) -> "AbstractContextManager[CursorProtocol]":
        """Run a row-returning statement; the cursor is closed when the block exits."""
        ...  # pragma: no cover

    def execute_script(self, conn: Any, statement_name: str, sql: str) -> None:
        """Run a multi-statement script without parameters."""
        ...  # pragma: no cover
