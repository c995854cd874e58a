"""
Shared SQLite plumbing for the ledger repositories.
"""

import logging
import sqlite3
import time
from abc import ABC
from contextlib import contextmanager

from infrastructure.schema_manager import SchemaManager

logger = logging.getLogger("bolao.repositories")


class BaseRepository(ABC):
    """
    Opens a short-lived connection per operation against one database file.

    Money columns hold integer cents; conversion to Decimal happens in the
    concrete repositories.
    """

    # Paths whose schema/migrations already ran in this process
    _migrated_paths: set[str] = set()

    def __init__(self, db_path: str):
        self.db_path = db_path
        if db_path not in BaseRepository._migrated_paths:
            SchemaManager(db_path).initialize()
            BaseRepository._migrated_paths.add(db_path)

    @staticmethod
    def now() -> int:
        """Current Unix timestamp, as stored in created_at/updated_at columns."""
        return int(time.time())

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        return conn

    @contextmanager
    def connection(self):
        """Yield a connection; commit when the block exits cleanly, roll back otherwise."""
        conn = self._open()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def atomic_transaction(self):
        """
        Like connection(), but takes the write lock before the block runs.

        Use it for read-then-write sequences (guarded bet insert, contest
        open check, pending-withdrawal transition) that must not interleave
        with another writer.
        """
        conn = self._open()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
