from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from sqlinclude.exceptions import wrap_engine_exceptions
from sqlinclude.typing import PlaceholderStyle

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence
    from contextlib import AbstractContextManager

__all__ = ("GenericAdapter",)


class GenericAdapter:
    """A generic adapter for DB-API 2.0 compliant connections with numbered positional placeholders.

    This class also serves as the base class for other adapters.

    Args:
        placeholder_style: Placeholder style the driver understands.
        error_types: Exception types raised by the driver; they are re-raised as
            :class:`~sqlinclude.exceptions.EngineError`.
    """

    placeholder_style: PlaceholderStyle = PlaceholderStyle.QMARK_NUMERIC
    error_types: "tuple[type[BaseException], ...]" = (Exception,)

    def __init__(
        self,
        placeholder_style: Optional[PlaceholderStyle] = None,
        error_types: "Optional[tuple[type[BaseException], ...]]" = None,
    ) -> None:
        if placeholder_style is not None:
            self.placeholder_style = PlaceholderStyle(placeholder_style)
        if error_types is not None:
            self.error_types = error_types

    def _cursor(self, conn: Any) -> Any:
        """Get a cursor from a connection."""
        return conn.cursor()

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        return wrap_engine_exceptions(self.error_types)

    def execute(self, conn: Any, statement_name: str, sql: str, parameters: "Sequence[Any]") -> int:
        """Handle affected row counts (INSERT UPDATE DELETE) (``!`` selector)."""
        with self.handle_database_exceptions():
            cur = self._cursor(conn)
            try:
                cur.execute(sql, parameters)
                return cur.rowcount if hasattr(cur, "rowcount") else -1
            finally:
                cur.close()

    @contextmanager
    def select(
        self, conn: Any, statement_name: str, sql: str, parameters: "Sequence[Any]"
    ) -> "Generator[Any, None, None]":
        """Yield the cursor after executing a row-returning statement (``?`` and ``->`` selectors)."""
        with self.handle_database_exceptions():
            cur = self._cursor(conn)
            try:
                cur.execute(sql, parameters)
            except BaseException:
                cur.close()
                raise
        try:
            yield cur
        finally:
            cur.close()

    def execute_script(self, conn: Any, statement_name: str, sql: str) -> None:
        """Handle an SQL script (``&`` selector).

        Generic DB-API drivers get the whole script in one ``execute`` call;
        drivers with a dedicated script entry point override this.
        """
        with self.handle_database_exceptions():
            cur = self._cursor(conn)
            try:
                cur.execute(sql)
            finally:
                cur.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(placeholder_style={self.placeholder_style.value!r})"
