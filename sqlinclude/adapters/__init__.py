"""Driver adapters that run assembled SQL on a caller-owned connection."""

from sqlinclude.adapters.dbapi import GenericAdapter
from sqlinclude.adapters.sqlite import SqliteAdapter

__all__ = ("GenericAdapter", "SqliteAdapter")
