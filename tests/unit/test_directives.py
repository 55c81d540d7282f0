"""Unit tests for parsing statement headers."""

import pytest

from sqlinclude.core.directives import parse_directives, parse_param_declaration
from sqlinclude.core.statement import ParameterDeclaration, StatementSource
from sqlinclude.exceptions import StatementSyntaxError
from sqlinclude.typing import Multiplicity, OperationKind


def _source(text: str, start_line: int = 1) -> StatementSource:
    return StatementSource(text, start_line, start_line + text.count("\n"), "test.sql")


@pytest.mark.parametrize(
    ("selector", "kind"),
    [
        ("?", OperationKind.QUERY),
        ("!", OperationKind.EXECUTE),
        ("&", OperationKind.BATCH),
        ("->", OperationKind.RETURNING),
    ],
)
def test_selector_sets_the_operation_kind(selector: str, kind: OperationKind) -> None:
    header = parse_directives(_source(f"-- name: do_it{selector}\nSELECT 1"))

    assert header.name == "do_it"
    assert header.kind is kind


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("-- param: min_len : i32", ParameterDeclaration("min_len", "i32", Multiplicity.SCALAR)),
        ("-- param: user_id : &str", ParameterDeclaration("user_id", "&str", Multiplicity.SCALAR)),
        ("-- param: anything : _", ParameterDeclaration("anything", "_", Multiplicity.SCALAR)),
        ("-- param: book_ids # [i32]", ParameterDeclaration("book_ids", "i32", Multiplicity.LIST)),
        ("-- param: book_ids # (i32)", ParameterDeclaration("book_ids", "i32", Multiplicity.LIST)),
        ("--param:data:Vec<u8>", ParameterDeclaration("data", "Vec<u8>", Multiplicity.SCALAR)),
    ],
)
def test_parse_param_declaration(line: str, expected: ParameterDeclaration) -> None:
    assert parse_param_declaration(line) == expected


@pytest.mark.parametrize(
    "line",
    ["-- param: ids # []", "-- param: 1st : i32", "-- param: x", "-- param: x : ", "-- param: x # i32"],
)
def test_malformed_param_declaration(line: str) -> None:
    with pytest.raises(StatementSyntaxError):
        parse_param_declaration(line, "test.sql:2")


class TestHeaderRegion:
    """Directives and documentation ahead of the SQL body."""

    def test_declarations_keep_their_order(self) -> None:
        header = parse_directives(
            _source("-- name: loan_books!\n-- param: user_id : &str\n-- param: book_ids # [i32]\nUPDATE library")
        )

        assert [d.name for d in header.declarations] == ["user_id", "book_ids"]

    def test_comment_lines_become_the_doc(self) -> None:
        header = parse_directives(
            _source("-- name: get_all?\n-- Get all the greetings\n-- in the database\nSELECT * FROM greetings")
        )

        assert header.doc == "Get all the greetings\nin the database"
        assert header.body == "SELECT * FROM greetings"

    def test_body_line_points_at_the_first_sql_line(self) -> None:
        header = parse_directives(_source("-- name: a?\n-- param: x : i32\n\nSELECT :x", start_line=10))

        assert header.body_line == 13
        assert header.body_location == "test.sql:13"

    def test_comments_inside_the_body_are_kept(self) -> None:
        header = parse_directives(_source("-- name: a?\nSELECT 1\n-- still the body\nFROM t\n"))

        assert header.body == "SELECT 1\n-- still the body\nFROM t"

    def test_plain_comments_may_precede_the_header(self) -> None:
        header = parse_directives(_source("-- users.sql\n\n-- name: a?\nSELECT 1"))

        assert header.name == "a"
        assert header.doc == ""

    def test_header_keywords_are_case_insensitive(self) -> None:
        header = parse_directives(_source("-- NAME: a?\n-- Param: x : i32\nSELECT :x"))

        assert header.declarations == (ParameterDeclaration("x", "i32", Multiplicity.SCALAR),)


class TestSyntaxErrors:
    """Malformed blocks raise StatementSyntaxError with a location."""

    def test_sql_before_header(self) -> None:
        with pytest.raises(StatementSyntaxError, match="Expected '-- name:' header") as exc_info:
            parse_directives(_source("SELECT 1\n-- name: a?"))

        assert exc_info.value.location == "test.sql:1"

    def test_no_header_at_all(self) -> None:
        with pytest.raises(StatementSyntaxError, match="no '-- name:' header"):
            parse_directives(_source("-- just a comment"))

    def test_param_before_header(self) -> None:
        with pytest.raises(StatementSyntaxError, match="must come before"):
            parse_directives(_source("-- param: x : i32\n-- name: a?\nSELECT :x"))

    @pytest.mark.parametrize("header", ["-- name: a", "-- name: a*", "-- name: a ?? ", "-- name: 9a?", "-- name: ?"])
    def test_malformed_header(self, header: str) -> None:
        with pytest.raises(StatementSyntaxError, match="Malformed name header"):
            parse_directives(_source(f"{header}\nSELECT 1"))

    def test_duplicate_declaration(self) -> None:
        with pytest.raises(StatementSyntaxError, match="declared more than once") as exc_info:
            parse_directives(_source("-- name: a?\n-- param: x : i32\n-- param: x : i64\nSELECT :x"))

        assert exc_info.value.statement == "a"
        assert exc_info.value.location == "test.sql:3"

    def test_second_name_header(self) -> None:
        with pytest.raises(StatementSyntaxError, match="only have one"):
            parse_directives(_source("-- name: a?\n-- name: b?\nSELECT 1"))

    def test_empty_body(self) -> None:
        with pytest.raises(StatementSyntaxError, match="no SQL body"):
            parse_directives(_source("-- name: a?\n-- param: x : i32\n"))
