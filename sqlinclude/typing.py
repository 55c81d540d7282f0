"""Enumerations, aliases and protocols shared across sqlinclude."""

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from typing_extensions import TypeAlias, TypeVar

if TYPE_CHECKING:
    import inspect

    from sqlinclude.core.statement import StatementDescriptor

__all__ = (
    "Multiplicity",
    "OperationFn",
    "OperationKind",
    "PlaceholderStyle",
    "ResultT",
    "ReturningCallback",
    "RowCallback",
)

ResultT = TypeVar("ResultT")


class OperationKind(str, Enum):
    """Shape of the operation generated for a statement, keyed by its selector."""

    QUERY = "?"
    EXECUTE = "!"
    BATCH = "&"
    RETURNING = "->"

    @property
    def selector(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.name.lower()


class Multiplicity(str, Enum):
    """Whether a parameter binds one value (``:name``) or a list of values (``#name``)."""

    SCALAR = ":"
    LIST = "#"

    @property
    def sigil(self) -> str:
        return self.value


class PlaceholderStyle(str, Enum):
    """Numbered positional placeholder styles the assembler can emit.

    - QMARK_NUMERIC: ?1, ?2 placeholders (SQLite)
    - NUMERIC: $1, $2 placeholders (PostgreSQL)
    - POSITIONAL_COLON: :1, :2 placeholders (Oracle)
    """

    QMARK_NUMERIC = "qmark_numeric"
    NUMERIC = "numeric"
    POSITIONAL_COLON = "positional_colon"

    @property
    def prefix(self) -> str:
        return _PLACEHOLDER_PREFIXES[self]

    def render(self, index: int) -> str:
        """Return the placeholder text for a 1-based ``index``."""
        return f"{self.prefix}{index}"


_PLACEHOLDER_PREFIXES = {
    PlaceholderStyle.QMARK_NUMERIC: "?",
    PlaceholderStyle.NUMERIC: "$",
    PlaceholderStyle.POSITIONAL_COLON: ":",
}

RowCallback: TypeAlias = Callable[[Any], None]
"""Called once per row by query (``?``) operations."""

ReturningCallback: TypeAlias = Callable[[Any], ResultT]
"""Called with the single row of a returning (``->``) operation; its result is returned."""


class OperationFn(Protocol):
    """Callable produced for one compiled statement."""

    __name__: str
    __signature__: "inspect.Signature"
    sql: str
    operation: OperationKind
    descriptor: "StatementDescriptor"

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...  # pragma: no cover
