"""Load annotated SQL files and directories into operation containers.

A file compiles to one :class:`~sqlinclude.operations.SQLOperations`
container. A directory compiles every ``*.sql`` file it holds into one
container, and each subdirectory becomes a child container named after it.
"""

import time
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from sqlinclude.compiler import SQLCompiler
from sqlinclude.exceptions import SQLFileNotFoundError, SQLFileParseError
from sqlinclude.operations import SQLOperations
from sqlinclude.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlinclude.config import CompilerConfig
    from sqlinclude.protocols import DriverAdapterProtocol

__all__ = ("SQLFileLoader", "from_path", "from_str")

logger = get_logger("loader")

SQL_SUFFIX = ".sql"


class SQLFileLoader:
    """Reads ``.sql`` files and compiles them with an :class:`SQLCompiler`.

    Args:
        config: Compilation settings passed to the compiler.
        adapter: Driver adapter the loaded operations execute through.
        encoding: Text encoding of the SQL files.
    """

    __slots__ = ("compiler", "encoding")

    def __init__(
        self,
        config: "Optional[CompilerConfig]" = None,
        adapter: "Optional[DriverAdapterProtocol]" = None,
        *,
        encoding: str = "utf-8",
    ) -> None:
        self.compiler = SQLCompiler(config=config, adapter=adapter)
        self.encoding = encoding

    def _read_file_content(self, path: Path) -> str:
        path_str = str(path)
        try:
            return path.read_text(encoding=self.encoding)
        except FileNotFoundError as e:
            raise SQLFileNotFoundError(path.name, path=path_str) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SQLFileParseError(path.name, path_str, e) from e

    def _new_container(self) -> SQLOperations:
        return SQLOperations(self.compiler.adapter, self.compiler.config)

    def _load_into(self, operations: SQLOperations, file_path: Path) -> int:
        descriptors = self.compiler.compile_statements(self._read_file_content(file_path), str(file_path))
        operations.load_from_list(descriptors)
        return len(descriptors)

    def load_file(self, path: Union[str, Path]) -> SQLOperations:
        """Compile a single SQL file.

        Raises:
            SQLFileNotFoundError: ``path`` does not exist or is not a file.
            SQLFileParseError: The file cannot be read or decoded.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise SQLFileNotFoundError(file_path.name, path=str(file_path))
        operations = self._new_container()
        count = self._load_into(operations, file_path)
        logger.info(
            "Loaded %d statements from %s",
            count,
            file_path,
            extra={"extra_fields": {"path": str(file_path), "statement_count": count}},
        )
        return operations

    def _load_directory(self, dir_path: Path) -> "tuple[SQLOperations, int, int]":
        operations = self._new_container()
        file_count = statement_count = 0
        for entry in sorted(dir_path.iterdir()):
            if entry.is_dir():
                child, child_files, child_statements = self._load_directory(entry)
                if child_files:
                    operations.add_child_operations(entry.name, child)
                    file_count += child_files
                    statement_count += child_statements
            elif entry.suffix == SQL_SUFFIX and entry.is_file():
                statement_count += self._load_into(operations, entry)
                file_count += 1
        return operations, file_count, statement_count

    def load_directory(self, path: Union[str, Path]) -> SQLOperations:
        """Compile every ``*.sql`` file under a directory.

        Files directly inside ``path`` share the returned container; every
        subdirectory holding SQL files becomes a child container attribute.

        Raises:
            SQLFileNotFoundError: ``path`` does not exist or is not a directory.
            SQLFileParseError: A file cannot be read or decoded.
        """
        dir_path = Path(path)
        if not dir_path.is_dir():
            raise SQLFileNotFoundError(dir_path.name, path=str(dir_path))

        start_time = time.perf_counter()
        try:
            operations, file_count, statement_count = self._load_directory(dir_path)
        except Exception as e:
            logger.exception(
                "Failed to load SQL directory %s",
                dir_path,
                extra={"extra_fields": {"path": str(dir_path), "error_type": type(e).__name__}},
            )
            raise

        duration = time.perf_counter() - start_time
        logger.info(
            "Loaded %d SQL files with %d statements in %.3fms",
            file_count,
            statement_count,
            duration * 1000,
            extra={
                "extra_fields": {
                    "path": str(dir_path),
                    "files_loaded": file_count,
                    "statement_count": statement_count,
                    "duration_ms": duration * 1000,
                }
            },
        )
        return operations

    def load_path(self, path: Union[str, Path]) -> SQLOperations:
        """Load ``path`` as a directory when it is one, otherwise as a file."""
        if Path(path).is_dir():
            return self.load_directory(path)
        return self.load_file(path)


def from_str(
    sql: str,
    adapter: "Optional[DriverAdapterProtocol]" = None,
    config: "Optional[CompilerConfig]" = None,
) -> SQLOperations:
    """Load operations from a string.

    Args:
        sql: Annotated SQL text.
        adapter: Driver adapter; defaults to the sqlite adapter.
        config: Compilation settings.

    Returns:
        SQLOperations: container with one operation per statement.

    Example:
        Loading operations from a SQL string::

            import sqlite3
            import sqlinclude

            sql_text = '''
            -- name: get_all_greetings?
            -- Get all the greetings in the database
            select greeting_id, greeting from greetings
            /
            '''

            ops = sqlinclude.from_str(sql_text)
            rows = []
            ops.get_all_greetings(sqlite3.connect("greetings.db"), rows.append)
    """
    return SQLCompiler(config=config, adapter=adapter).compile(sql)


def from_path(
    sql_path: Union[str, Path],
    adapter: "Optional[DriverAdapterProtocol]" = None,
    config: "Optional[CompilerConfig]" = None,
    *,
    encoding: str = "utf-8",
) -> SQLOperations:
    """Load operations from a ``.sql`` file, or a directory of ``.sql`` files.

    Raises:
        SQLFileNotFoundError: ``sql_path`` does not exist.
    """
    return SQLFileLoader(config=config, adapter=adapter, encoding=encoding).load_path(sql_path)
