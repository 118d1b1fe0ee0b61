"""SQLite connection handling for the tracker database."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from macrotrack.db.schema import get_schema_sql

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Opens short-lived connections to one tracker database file.

    Every unit of work runs inside ``get_connection()``: it is committed
    when the block exits normally and rolled back when it raises.
    """

    def __init__(self, db_path: Path):
        """Initialize the connection manager.

        Args:
            db_path: Path to the SQLite file; parent directories are created
        """
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield a connection with ``sqlite3.Row`` rows.

        Example:
            with db.get_connection() as conn:
                entries = WeightQueries.list_entries(conn, profile_id)
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize_schema(self) -> None:
        """Create missing tables and seed the meal types (idempotent)."""
        with self.get_connection() as conn:
            conn.executescript(get_schema_sql())
        logger.debug("Schema ready at %s", self.db_path)


# Process-wide instance, created from settings on first use
_db: Optional[DatabaseConnection] = None


def get_db() -> DatabaseConnection:
    """Return the process-wide database, opening the configured path lazily."""
    global _db
    if _db is None:
        from macrotrack.config import get_settings

        _db = DatabaseConnection(get_settings().database.path)
    return _db


def set_db(db: Optional[DatabaseConnection]) -> None:
    """Replace the process-wide database (None resets to the configured one)."""
    global _db
    _db = db
