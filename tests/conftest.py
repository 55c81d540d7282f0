from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator

import pytest

from sqlinclude.utils.logging import ROOT_LOGGER_NAME

QUOTES = [
    ("Albert Einstein", "Life is like riding a bicycle. To keep your balance, you must keep moving."),
    ("Oscar Wilde", "Be yourself; everyone else is already taken."),
    ("Frank Zappa", "So many books, so little time."),
    ("Marcus Tullius Cicero", "A room without books is like a body without a soul."),
    ("Mae West", "You only live once, but if you do it right, once is enough."),
    ("Friedrich Nietzsche", "Without music, life would be a mistake."),
    ("Stephen Chbosky", "We accept the love we think we deserve."),
    ("George Eliot", "It is never too late to be what you might have been."),
    ("J.R.R. Tolkien", "Not all those who wander are lost."),
    ("Steve Jobs", "The only way to do great work is to love what you do."),
]

BOOKS = [
    (1, "The Hitchhiker's Guide to the Galaxy"),
    (2, "A Brief History of Time"),
    (3, "Flatland"),
    (4, "Godel, Escher, Bach"),
]


@pytest.fixture
def connection() -> Generator[sqlite3.Connection, None, None]:
    """An empty in-memory sqlite database."""
    conn = sqlite3.connect(":memory:")
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def quotes_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """A database with a ``quotes`` table holding ten quotes."""
    connection.execute("CREATE TABLE quotes (quote_id INTEGER PRIMARY KEY, author TEXT NOT NULL, quote TEXT NOT NULL)")
    connection.executemany("INSERT INTO quotes (author, quote) VALUES (?, ?)", QUOTES)
    connection.commit()
    return connection


@pytest.fixture
def library_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """A database with a ``library`` table of four books, none loaned."""
    connection.execute("CREATE TABLE library (book_id INTEGER PRIMARY KEY, title TEXT NOT NULL, loaned_to TEXT)")
    connection.executemany("INSERT INTO library (book_id, title) VALUES (?, ?)", BOOKS)
    connection.commit()
    return connection


@pytest.fixture
def reset_sqlinclude_logger() -> Generator[logging.Logger, None, None]:
    """Restore the ``sqlinclude`` logger after a test reconfigures it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    try:
        yield logger
    finally:
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate
