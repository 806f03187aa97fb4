"""
Database schema and connection management for the planner service.

PlannerDatabase is constructed once at process start and handed to the
repositories. Every operation opens its own short-lived sqlite3 connection,
so the object is safe to share across request threads; correctness under
concurrency relies on SQLite's per-statement atomicity.
"""
import os
import time
import sqlite3
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from opentelemetry import trace

from planner.tracing import trace_span, add_span_attribute

logger = logging.getLogger(__name__)

# Queries slower than this (seconds) are logged at WARNING
QUERY_SLOW_THRESHOLD = float(os.getenv("DB_QUERY_SLOW_THRESHOLD", "0.1"))
ENABLE_QUERY_LOGGING = os.getenv("DB_ENABLE_QUERY_LOGGING", "true").lower() == "true"

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        external_id TEXT UNIQUE,
        email TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        picture TEXT,
        verified INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        completed INTEGER NOT NULL DEFAULT 0,
        priority TEXT NOT NULL DEFAULT 'medium'
            CHECK (priority IN ('low', 'medium', 'high')),
        due_date TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_id ON tasks(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date)",
]


def _query_type(query: str) -> str:
    first = query.strip().split(None, 1)[0].lower() if query.strip() else "unknown"
    return first if first in ("select", "insert", "update", "delete") else "other"


def _table_name(query: str) -> str:
    """Best-effort table name for span attributes."""
    tokens = query.replace("(", " ").split()
    upper = [token.upper() for token in tokens]
    for keyword in ("FROM", "INTO", "UPDATE"):
        if keyword in upper:
            index = upper.index(keyword)
            if index + 1 < len(tokens):
                return tokens[index + 1]
    return "unknown"


class PlannerDatabase:
    """SQLite store for users and tasks."""

    def __init__(self, db_path: str):
        """
        Open (and create if needed) the database at db_path.

        Args:
            db_path: Filesystem path of the SQLite database file
        """
        self.db_path = db_path
        self._ensure_db_directory()
        self._init_schema()

    def _ensure_db_directory(self):
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self):
        with self.connection() as conn:
            for statement in SCHEMA + INDEXES:
                conn.execute(statement)
        logger.info(f"Database schema ready at {self.db_path}")

    def _execute_with_logging(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: Optional[Sequence[Any]] = None
    ) -> sqlite3.Cursor:
        """
        Execute a query with performance logging and tracing.

        Returns:
            Cursor after execution
        """
        query_type = _query_type(query)
        start_time = time.time()
        with trace_span(
            f"db.{query_type}",
            attributes={
                "db.system": "sqlite",
                "db.operation": query_type,
                "db.sql.table": _table_name(query),
            },
            kind=trace.SpanKind.CLIENT
        ):
            try:
                cursor = conn.execute(query, tuple(params or ()))
            except sqlite3.Error:
                duration = time.time() - start_time
                logger.error(f"Query failed after {duration:.4f}s: {query.strip()[:200]}", exc_info=True)
                raise

            duration = time.time() - start_time
            add_span_attribute("db.duration_ms", duration * 1000)

            if ENABLE_QUERY_LOGGING:
                query_preview = " ".join(query.split())[:200]
                if duration >= QUERY_SLOW_THRESHOLD:
                    logger.warning(
                        f"Slow query: {duration:.4f}s - {query_preview}",
                        extra={"duration": duration, "params_count": len(params or ())}
                    )
                    add_span_attribute("db.slow_query", True)
                else:
                    logger.debug(f"Query executed in {duration:.4f}s: {query_preview}")
            return cursor

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Run a write statement.

        Returns:
            Number of affected rows

        Raises:
            sqlite3.IntegrityError: On constraint violations (callers translate)
        """
        with self.connection() as conn:
            cursor = self._execute_with_logging(conn, query, params)
            return cursor.rowcount

    def fetch_one(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Run a query and return the first row as a dict, or None."""
        with self.connection() as conn:
            row = self._execute_with_logging(conn, query, params).fetchone()
            return dict(row) if row is not None else None

    def fetch_all(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Run a query and return all rows as dicts."""
        with self.connection() as conn:
            rows = self._execute_with_logging(conn, query, params).fetchall()
            return [dict(row) for row in rows]
