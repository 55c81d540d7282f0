"""Integration tests running compiled operations on in-memory sqlite databases."""

import sqlite3
from typing import Any

import pytest

import sqlinclude
from sqlinclude import (
    CompilerConfig,
    EngineError,
    KindMismatchError,
    NoRowsError,
    RowCallbackError,
    SQLCompiler,
    SqliteAdapter,
    from_str,
)

pytestmark = pytest.mark.integration

QUOTES_SQL = """
-- name: get_quotes_longer_than?
-- Quotes whose text is longer than min_len characters.
-- param: min_len : i32
SELECT author, quote FROM quotes WHERE length(quote) > :min_len
/

-- name: get_quotes_by_authors?
-- param: authors # [&str]
SELECT author FROM quotes WHERE author IN (#authors) ORDER BY author
/

-- name: count_quotes->
SELECT count(*) FROM quotes
/
"""

LIBRARY_SQL = """
-- name: loan_books!
-- param: user_id : &str
-- param: book_ids # [i32]
UPDATE library SET loaned_to = :user_id WHERE book_id IN (#book_ids)
/

-- name: loaned_to?
-- param: user_id : &str
SELECT book_id FROM library WHERE loaned_to = :user_id ORDER BY book_id
/

-- name: add_book!
-- param: title : &str
INSERT INTO library (title) VALUES (:title)
/

-- name: find_book_id->
-- param: title : &str
SELECT book_id FROM library WHERE title = :title
/

-- name: find_book->
-- param: book_id : i64
SELECT book_id, title FROM library WHERE book_id = :book_id
/

-- name: reset_library&
UPDATE library SET loaned_to = NULL;
DELETE FROM library WHERE book_id > 4;
/
"""


def _collect(operation: Any, *args: Any) -> "list[Any]":
    rows: list[Any] = []
    operation(*args, rows.append)
    return rows


class TestQuotes:
    def test_get_quotes_longer_than(self, quotes_connection: sqlite3.Connection) -> None:
        ops = from_str(QUOTES_SQL)

        rows = _collect(ops.get_quotes_longer_than, quotes_connection, 72)

        assert rows == [("Albert Einstein", "Life is like riding a bicycle. To keep your balance, you must keep moving.")]

    def test_all_rows_are_delivered(self, quotes_connection: sqlite3.Connection) -> None:
        rows = _collect(from_str(QUOTES_SQL).get_quotes_longer_than, quotes_connection, 0)

        assert len(rows) == 10

    def test_list_parameter(self, quotes_connection: sqlite3.Connection) -> None:
        ops = from_str(QUOTES_SQL)

        assert _collect(ops.get_quotes_by_authors, quotes_connection, ["Mae West", "Oscar Wilde", "Nobody"]) == [
            ("Mae West",),
            ("Oscar Wilde",),
        ]
        assert _collect(ops.get_quotes_by_authors, quotes_connection, []) == []

    def test_returning_without_parameters(self, quotes_connection: sqlite3.Connection) -> None:
        assert from_str(QUOTES_SQL).count_quotes(quotes_connection, lambda row: row[0]) == 10

    def test_string_literals_are_kept_verbatim(self, connection: sqlite3.Connection) -> None:
        ops = from_str("-- name: literal->\nSELECT 'a\u2028b', 'c\x85d'\n/\n")

        assert ops.literal(connection, tuple) == ("a\u2028b", "c\x85d")


class TestLibrary:
    def test_loan_books(self, library_connection: sqlite3.Connection) -> None:
        ops = from_str(LIBRARY_SQL)

        assert ops.loan_books(library_connection, "Sheldon Cooper", [1, 2]) == 2
        assert _collect(ops.loaned_to, library_connection, "Sheldon Cooper") == [(1,), (2,)]

    def test_loan_nothing(self, library_connection: sqlite3.Connection) -> None:
        assert from_str(LIBRARY_SQL).loan_books(library_connection, "Sheldon Cooper", []) == 0

    def test_returning_row(self, library_connection: sqlite3.Connection) -> None:
        ops = from_str(LIBRARY_SQL)

        assert ops.add_book(library_connection, "Flatterland") == 1
        book_id = ops.find_book_id(library_connection, "Flatterland", lambda row: row[0])

        assert book_id == 5
        assert ops.find_book(library_connection, book_id, tuple) == (5, "Flatterland")

    def test_returning_no_row(self, library_connection: sqlite3.Connection) -> None:
        called: list[Any] = []

        with pytest.raises(NoRowsError):
            from_str(LIBRARY_SQL).find_book(library_connection, 99, called.append)

        assert called == []

    def test_batch(self, library_connection: sqlite3.Connection) -> None:
        ops = from_str(LIBRARY_SQL)
        ops.loan_books(library_connection, "Penny", [3])
        ops.add_book(library_connection, "Flatterland")

        assert ops.reset_library(library_connection) is None

        assert _collect(ops.loaned_to, library_connection, "Penny") == []
        assert library_connection.execute("SELECT count(*) FROM library").fetchone() == (4,)

    def test_row_callback_error(self, library_connection: sqlite3.Connection) -> None:
        ops = from_str(LIBRARY_SQL)
        ops.loan_books(library_connection, "Raj", [1, 2, 3])

        def callback(row: Any) -> None:
            raise LookupError(row)

        with pytest.raises(RowCallbackError) as exc_info:
            ops.loaned_to(library_connection, "Raj", callback)

        assert exc_info.value.row_number == 1

    def test_operations_do_not_commit(self, library_connection: sqlite3.Connection) -> None:
        ops = from_str(LIBRARY_SQL)

        ops.loan_books(library_connection, "Howard", [4])
        library_connection.rollback()

        assert _collect(ops.loaned_to, library_connection, "Howard") == []


class TestEngineErrors:
    def test_missing_table(self, connection: sqlite3.Connection) -> None:
        with pytest.raises(EngineError) as exc_info:
            _collect(from_str(QUOTES_SQL).get_quotes_longer_than, connection, 1)

        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    def test_failing_script(self, connection: sqlite3.Connection) -> None:
        ops = from_str("-- name: broken&\nCREATE TABLE t (id INTEGER);\nCREATE TABLE t (id INTEGER);\n/\n")

        with pytest.raises(EngineError):
            ops.broken(connection)


class TestCompilation:
    def test_batch_with_parameter_fails(self) -> None:
        with pytest.raises(KindMismatchError):
            from_str("-- name: drop_table&\n-- param: table : &str\nDROP TABLE :table\n/\n")

    def test_skip_policy_keeps_good_statements(self, quotes_connection: sqlite3.Connection) -> None:
        text = "-- name: broken*\nSELECT 1\n/\n" + QUOTES_SQL + "-- name: dangling?\nSELECT 2\n"
        compiler = SQLCompiler(CompilerConfig(on_syntax_error="skip"))

        ops = compiler.compile(text)

        assert ops.available_operations == ["count_quotes", "get_quotes_by_authors", "get_quotes_longer_than"]
        assert ops.count_quotes(quotes_connection, lambda row: row[0]) == 10

    def test_public_namespace(self) -> None:
        assert isinstance(SQLCompiler().adapter, SqliteAdapter)
        assert sqlinclude.__version__
