"""
SQLite Database Connection and Schema Management.
"""
import sqlite3
import logging
from pathlib import Path
from threading import Lock
from typing import Optional
from contextlib import contextmanager

logger = logging.getLogger(__name__)

_connection_lock = Lock()
_connection: Optional[sqlite3.Connection] = None


def get_database_path() -> str:
    """Get database path from configuration."""
    from omniforge.config import config
    return config.database_path


def connect(db_path: str) -> sqlite3.Connection:
    """Open a configured connection and make sure the schema exists."""
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        db_path,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")

    logger.info(f"SQLite connection established: {db_path}")

    init_schema(conn)
    return conn


def get_connection() -> sqlite3.Connection:
    """
    Get or create the shared SQLite connection.
    Thread-safe singleton pattern.
    """
    global _connection

    with _connection_lock:
        if _connection is None:
            _connection = connect(get_database_path())
        return _connection


@contextmanager
def transaction(conn: Optional[sqlite3.Connection] = None):
    """
    Context manager for database transactions.
    Auto-commits on success, rolls back on exception.
    """
    conn = conn or get_connection()

    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise


def init_schema(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema.
    Creates tables if they don't exist.
    """
    conn.executescript("""
        -- Finished production assets
        CREATE TABLE IF NOT EXISTS assets (
            id TEXT PRIMARY KEY,
            run_id TEXT NOT NULL,
            type TEXT NOT NULL,
            title TEXT NOT NULL,
            input_prompt TEXT NOT NULL,
            output_data TEXT NOT NULL,
            metadata TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_assets_run_id
            ON assets(run_id);
    """)

    logger.info("Database schema initialized")


def close_connection() -> None:
    """Close the shared database connection."""
    global _connection

    with _connection_lock:
        if _connection is not None:
            _connection.close()
            _connection = None
            logger.info("SQLite connection closed")
