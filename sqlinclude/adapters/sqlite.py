import sqlite3
from typing import TYPE_CHECKING, Any, Optional

from sqlinclude.adapters.dbapi import GenericAdapter
from sqlinclude.typing import PlaceholderStyle

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ("SqliteAdapter",)


class SqliteAdapter(GenericAdapter):
    """Adapter for :mod:`sqlite3` connections.

    SQLite understands ``?NNN`` placeholders natively, so the default
    placeholder style needs no translation.
    """

    placeholder_style = PlaceholderStyle.QMARK_NUMERIC
    error_types = (sqlite3.Error,)

    def __init__(self, placeholder_style: Optional[PlaceholderStyle] = None) -> None:
        super().__init__(placeholder_style=placeholder_style)

    def execute(self, conn: "sqlite3.Connection", statement_name: str, sql: str, parameters: "Sequence[Any]") -> int:
        with self.handle_database_exceptions():
            cur = conn.execute(sql, parameters)
            try:
                return cur.rowcount
            finally:
                cur.close()

    def execute_script(self, conn: "sqlite3.Connection", statement_name: str, sql: str) -> None:
        """Run the script with ``executescript``, which accepts several statements."""
        with self.handle_database_exceptions():
            conn.executescript(sql)
