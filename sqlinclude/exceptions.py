from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

__all__ = (
    "DuplicateNameError",
    "EngineError",
    "ImproperConfigurationError",
    "KindMismatchError",
    "MixedMultiplicityError",
    "NoRowsError",
    "ParameterTypeError",
    "RowCallbackError",
    "SQLFileNotFoundError",
    "SQLFileParseError",
    "SQLIncludeError",
    "StatementCompileError",
    "StatementSyntaxError",
    "UnboundParameterError",
    "UnterminatedStatementError",
    "UnusedParameterError",
    "wrap_engine_exceptions",
)


class SQLIncludeError(Exception):
    """Base exception class from which all sqlinclude exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLIncludeError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLIncludeError):
    """Raised when a compiler or adapter setting has an unsupported value."""


# -- Generation-time errors --
class StatementCompileError(SQLIncludeError):
    """Base class for errors raised while turning annotated SQL into operations.

    Carries the offending statement name (when it is known) and a
    ``source:line`` location so messages point back into the SQL file.
    """

    statement: Optional[str]
    location: Optional[str]

    def __init__(self, message: str, statement: Optional[str] = None, location: Optional[str] = None) -> None:
        detail_message = message
        if statement:
            detail_message = f"{detail_message} (statement: {statement})"
        if location:
            detail_message = f"{detail_message} at {location}"
        super().__init__(detail=detail_message)
        self.statement = statement
        self.location = location


class StatementSyntaxError(StatementCompileError):
    """Missing or malformed ``-- name:`` header, bad selector or malformed ``-- param:`` directive."""


class UnterminatedStatementError(StatementSyntaxError):
    """Non-blank text follows the last terminator line."""


class DuplicateNameError(StatementCompileError):
    """Two statements of one compilation unit share a name."""


class UnboundParameterError(StatementCompileError):
    """A body marker names a parameter that the header does not declare."""


class MixedMultiplicityError(StatementCompileError):
    """A parameter is used both as a scalar (``:name``) and as a list (``#name``)."""


class KindMismatchError(StatementCompileError):
    """A batch (``&``) statement declares or references parameters."""


class UnusedParameterError(StatementCompileError):
    """A declared parameter is never referenced in the statement body."""


# -- Runtime errors --
class NoRowsError(SQLIncludeError):
    """A returning (``->``) operation produced no row."""

    def __init__(self, statement: str) -> None:
        super().__init__(f"Statement {statement!r} returned no rows")
        self.statement = statement


class RowCallbackError(SQLIncludeError):
    """A row callback failed; iteration was stopped at that row."""

    def __init__(self, statement: str, row_number: int, error: Optional[BaseException] = None) -> None:
        message = f"Row callback of {statement!r} failed on row {row_number}"
        if error is not None:
            message = f"{message}: {error}"
        super().__init__(message)
        self.statement = statement
        self.row_number = row_number


class ParameterTypeError(SQLIncludeError, TypeError):
    """An argument does not match the declared parameter type or multiplicity."""


class EngineError(SQLIncludeError):
    """Error reported by the underlying database engine.

    The original driver exception is always available as ``__cause__``.
    """


# -- Loader errors --
class SQLFileNotFoundError(SQLIncludeError):
    """Raised when a SQL file or directory does not exist."""

    def __init__(self, name: str, path: Optional[str] = None) -> None:
        message = f"SQL file '{name}' not found at path: {path}" if path else f"SQL file '{name}' not found"
        super().__init__(message)
        self.name = name
        self.path = path


class SQLFileParseError(SQLIncludeError):
    """Raised when a SQL file cannot be read."""

    def __init__(self, name: str, path: str, original_error: Exception) -> None:
        super().__init__(f"Failed to read SQL file '{name}' at {path}: {original_error}")
        self.name = name
        self.path = path
        self.original_error = original_error


@contextmanager
def wrap_engine_exceptions(
    error_types: "tuple[type[BaseException], ...]" = (Exception,),
) -> Generator[None, None, None]:
    """Translate engine exceptions into :class:`EngineError`.

    Exceptions that already belong to this package pass through unchanged.
    """
    try:
        yield
    except SQLIncludeError:
        raise
    except error_types as exc:
        msg = f"Database engine error: {exc}"
        raise EngineError(msg) from exc
