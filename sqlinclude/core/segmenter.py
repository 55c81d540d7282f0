"""Split annotated SQL text into statement blocks."""

from typing import TYPE_CHECKING

from sqlinclude.config import DEFAULT_TERMINATOR
from sqlinclude.core.statement import StatementSource
from sqlinclude.exceptions import UnterminatedStatementError

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = ("iter_statement_sources", "split_statements")


def iter_statement_sources(
    text: str, terminator: str = DEFAULT_TERMINATOR, source_name: str = "<string>"
) -> "Iterator[StatementSource]":
    """Yield the blocks of ``text`` found between terminator lines, in source order.

    A line is a terminator when it equals ``terminator`` once surrounding
    whitespace is removed. Leading blank lines are not part of a block, and
    blank blocks are dropped. Only ``\\n`` ends a line; any other line break
    character, ``\\r`` included, stays in the block text as written.

    Raises:
        UnterminatedStatementError: Non-blank text follows the last terminator.
    """
    marker = terminator.strip()
    block: list[str] = []
    block_start = 1

    for lineno, line in enumerate(text.split("\n"), start=1):
        if line.strip() != marker:
            if block or line.strip():
                block.append(line)
            else:
                block_start = lineno + 1
            continue
        if any(part.strip() for part in block):
            yield StatementSource("\n".join(block), block_start, lineno - 1, source_name)
        block = []
        block_start = lineno + 1

    if any(part.strip() for part in block):
        msg = f"Statement is not terminated by a {marker!r} line"
        raise UnterminatedStatementError(msg, location=f"{source_name}:{block_start}")


def split_statements(
    text: str, terminator: str = DEFAULT_TERMINATOR, source_name: str = "<string>"
) -> "list[StatementSource]":
    """Return every statement block of ``text``.

    See :func:`iter_statement_sources`.
    """
    return list(iter_statement_sources(text, terminator, source_name))
