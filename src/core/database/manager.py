"""
Emote Tracker - Database Manager
================================

Central SQLite database manager for cursors and emote usage.

Author: حَـــــنَّـــــا
"""

import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from src.core.logger import logger
from src.core.constants import DB_CONNECTION_TIMEOUT, LOG_TRUNCATE_LENGTH, SQLITE_BUSY_TIMEOUT
from src.core.errors import TransientStoreError

from src.core.database.schema import SchemaMixin
from src.core.database.channels import ChannelsMixin
from src.core.database.usage import UsageMixin


# =============================================================================
# Constants
# =============================================================================

# Path: src/core/database/manager.py -> go up 4 levels to reach project root
DATA_DIR: Path = Path(__file__).parent.parent.parent.parent / "data"
DB_PATH: Path = DATA_DIR / "emotes.db"


# =============================================================================
# Database Manager (Singleton)
# =============================================================================

class DatabaseManager(
    SchemaMixin,
    ChannelsMixin,
    UsageMixin,
):
    """
    Centralized database manager with thread-safe operations.

    DESIGN: Singleton pattern ensures single database connection.
    Uses WAL mode for better concurrency with multiple readers.
    All operations are thread-safe via internal locking.
    sqlite3.OperationalError (locked, busy, disk I/O) surfaces as
    TransientStoreError so callers can abandon one step and retry later.
    """

    _instance: Optional["DatabaseManager"] = None
    _lock: threading.Lock = threading.Lock()

    def __new__(cls) -> "DatabaseManager":
        """Singleton pattern - only one instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """Initialize database connection and tables."""
        if self._initialized:
            return

        self._db_lock: threading.Lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Path = DB_PATH

        DATA_DIR.mkdir(parents=True, exist_ok=True)
        self._connect()
        self._init_tables()
        self._initialized = True

        logger.tree("Database Manager Initialized", [
            ("Path", str(self._path)),
            ("WAL Mode", "Enabled"),
        ], emoji="🗄️")

    # =========================================================================
    # Connection Management
    # =========================================================================

    def _connect(self) -> None:
        """
        Establish database connection with WAL mode.

        DESIGN: WAL mode lets the health endpoint read while ingest writes.
        """
        try:
            self._conn = sqlite3.connect(
                str(self._path),
                check_same_thread=False,
                timeout=DB_CONNECTION_TIMEOUT,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.execute("PRAGMA temp_store=MEMORY")
            self._conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT}")
            self._conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            logger.error("Database Connection Failed", [("Error", str(e))])
            raise

    def _ensure_connection(self) -> sqlite3.Connection:
        """Ensure connection is valid, reconnect if needed."""
        if self._conn is None:
            self._connect()
        try:
            self._conn.execute("SELECT 1")
        except sqlite3.Error:
            self._connect()
        return self._conn

    def execute(
        self,
        query: str,
        params: Tuple = (),
        commit: bool = True
    ) -> sqlite3.Cursor:
        """
        Execute a query with thread safety.

        Raises:
            TransientStoreError: If SQLite reports an operational failure.
        """
        with self._db_lock:
            conn = self._ensure_connection()
            cursor = conn.cursor()
            try:
                cursor.execute(query, params)
                if commit:
                    conn.commit()
            except sqlite3.OperationalError as e:
                logger.warning("Database Operation Failed", [
                    ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
                ])
                raise TransientStoreError(str(e)) from e
            return cursor

    def fetchone(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        """Execute query and fetch one result."""
        cursor = self.execute(query, params, commit=False)
        return cursor.fetchone()

    def fetchall(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        """Execute query and fetch all results."""
        cursor = self.execute(query, params, commit=False)
        return cursor.fetchall()

    def close(self) -> None:
        """Close database connection."""
        with self._db_lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                logger.info("Database Connection Closed")

    # =========================================================================
    # Transaction Support
    # =========================================================================

    class Transaction:
        """
        Context manager for atomic database transactions.

        Usage:
            with db.transaction() as tx:
                tx.execute("DELETE FROM ...", (...))
                tx.execute("INSERT INTO ...", (...))
            # Commits on success, rolls back on exception
        """

        def __init__(self, db: "DatabaseManager"):
            self._db = db
            self._cursor: Optional[sqlite3.Cursor] = None

        def __enter__(self) -> "DatabaseManager.Transaction":
            self._db._db_lock.acquire()
            try:
                conn = self._db._ensure_connection()
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.OperationalError as e:
                self._db._db_lock.release()
                raise TransientStoreError(str(e)) from e
            except BaseException:
                self._db._db_lock.release()
                raise
            self._cursor = conn.cursor()
            return self

        def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
            conn = self._db._ensure_connection()
            try:
                if exc_type is None:
                    try:
                        conn.commit()
                    except sqlite3.OperationalError as e:
                        conn.rollback()
                        raise TransientStoreError(str(e)) from e
                else:
                    conn.rollback()
                    logger.warning("Database Transaction Rolled Back", [
                        ("Error", str(exc_val)[:LOG_TRUNCATE_LENGTH] if exc_val else "Unknown"),
                    ])
            finally:
                self._db._db_lock.release()
            return False  # Don't suppress exceptions

        def execute(self, query: str, params: Tuple = ()) -> sqlite3.Cursor:
            """Execute a query within this transaction."""
            try:
                self._cursor.execute(query, params)
            except sqlite3.OperationalError as e:
                raise TransientStoreError(str(e)) from e
            return self._cursor

    def transaction(self) -> "DatabaseManager.Transaction":
        """
        Create a new transaction context manager.

        Returns:
            Transaction context manager for atomic operations.
        """
        return self.Transaction(self)


# =============================================================================
# Global Instance
# =============================================================================

def get_db() -> DatabaseManager:
    """Get the global database manager instance."""
    return DatabaseManager()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["DatabaseManager", "get_db", "DB_PATH", "DATA_DIR"]
