# media_catalog/database/manager.py
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from ..config import DEFAULT_TX_MAX_ATTEMPTS
from ..errors import TransientStoreError
from .init import init_db_if_needed
from .retry import TxOutcome, backoff_delay, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """Manages the SQLite connection and transactional access to it."""

    def __init__(self, db_path: Path, max_attempts: int = DEFAULT_TX_MAX_ATTEMPTS,
                 busy_timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.max_attempts = max_attempts
        init_db_if_needed(self.db_path)
        # Autocommit mode; transactions are opened explicitly in transaction()
        self.conn = sqlite3.connect(str(self.db_path), timeout=busy_timeout,
                                    check_same_thread=False, isolation_level=None)
        self.conn.row_factory = sqlite3.Row
        # Pragmas for performance & integrity
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA synchronous=NORMAL;")
        self._lock = threading.RLock()

    def get_connection(self) -> sqlite3.Connection:
        """Raw connection accessor; callers must not hold it across threads."""
        return self.conn

    def close(self) -> None:
        with self._lock:
            try:
                self.conn.close()
            except sqlite3.Error as e:
                logger.warning("Error closing database %s: %s", self.db_path, e)

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchone()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Run a single autocommitted statement."""
        with self._lock:
            return self.conn.execute(sql, params)

    def transaction(self, fn: Callable[[sqlite3.Connection], T],
                    max_attempts: Optional[int] = None) -> T:
        """
        Run fn(conn) inside one write transaction.

        Transient failures (lock waits, deadlocks) are rolled back and retried
        with exponential backoff; once attempts are exhausted a
        TransientStoreError is raised. Fatal errors propagate unchanged.
        A call made while the current thread already has a transaction open
        joins that transaction instead of starting a new one.
        """
        attempts = max_attempts or self.max_attempts
        attempt = 0
        while True:
            attempt += 1
            with self._lock:
                if self.conn.in_transaction:
                    return fn(self.conn)
                try:
                    self.conn.execute("BEGIN IMMEDIATE")
                    result = fn(self.conn)
                    self.conn.execute("COMMIT")
                    return result
                except Exception as e:
                    if self.conn.in_transaction:
                        self.conn.execute("ROLLBACK")
                    if classify_error(e) is TxOutcome.FATAL:
                        raise
                    delay = backoff_delay(attempt, attempts)
                    if delay is None:
                        raise TransientStoreError(
                            f"Transaction failed after {attempt} attempts: {e}"
                        ) from e
                    logger.warning("Store busy, retry %d/%d after %.0fms: %s",
                                   attempt, attempts, delay * 1000, e)
            time.sleep(delay)
