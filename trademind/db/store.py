"""SQLite data store for TradeMind."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from trademind.models import Watchlist
from trademind.models.watchlist import DEFAULT_WATCHLIST_ID, DEFAULT_WATCHLIST_NAME


logger = logging.getLogger(__name__)


class DataStore:
    """SQLite-based data store for watchlists and cached analyses."""

    REQUIRED_TABLES = [
        "watchlists",
        "watchlist_symbols",
        "analysis_cache",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS watchlists (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                )
            """)

            # position keeps insertion order
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS watchlist_symbols (
                    list_id TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    UNIQUE(list_id, symbol)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS analysis_cache (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    content TEXT NOT NULL,
                    cached_at TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Watchlists ====================

    def get_watchlist(self, list_id: str = DEFAULT_WATCHLIST_ID) -> Watchlist:
        """Load a watchlist.

        Args:
            list_id: Watchlist ID.

        Returns:
            The stored watchlist, or an empty one if it does not exist.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM watchlists WHERE id = ?", (list_id,))
            row = cursor.fetchone()
            if row:
                name = row["name"]
            elif list_id == DEFAULT_WATCHLIST_ID:
                name = DEFAULT_WATCHLIST_NAME
            else:
                name = list_id

            cursor.execute(
                "SELECT symbol FROM watchlist_symbols WHERE list_id = ? ORDER BY position",
                (list_id,),
            )
            symbols = tuple(r["symbol"] for r in cursor.fetchall())
            return Watchlist(id=list_id, name=name, symbols=symbols)
        finally:
            conn.close()

    def save_watchlist(self, watchlist: Watchlist) -> None:
        """Replace a stored watchlist with the given one.

        Args:
            watchlist: Watchlist to persist.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO watchlists (id, name) VALUES (?, ?)",
                (watchlist.id, watchlist.name),
            )
            cursor.execute("DELETE FROM watchlist_symbols WHERE list_id = ?", (watchlist.id,))
            cursor.executemany(
                "INSERT INTO watchlist_symbols (list_id, symbol, position) VALUES (?, ?, ?)",
                [(watchlist.id, symbol, i) for i, symbol in enumerate(watchlist.symbols)],
            )
            conn.commit()
            logger.debug("Saved watchlist '%s' (%d symbols)", watchlist.id, len(watchlist.symbols))
        finally:
            conn.close()

    def add_to_watchlist(self, symbol: str, list_id: str = DEFAULT_WATCHLIST_ID) -> bool:
        """Add a symbol to a watchlist.

        Returns:
            True if added, False if already present.
        """
        watchlist = self.get_watchlist(list_id)
        if watchlist.contains(symbol):
            return False
        self.save_watchlist(watchlist.toggled(symbol))
        return True

    def remove_from_watchlist(self, symbol: str, list_id: str = DEFAULT_WATCHLIST_ID) -> bool:
        """Remove a symbol from a watchlist.

        Returns:
            True if removed, False if it was not present.
        """
        watchlist = self.get_watchlist(list_id)
        if not watchlist.contains(symbol):
            return False
        self.save_watchlist(watchlist.toggled(symbol))
        return True

    def toggle_watchlist(self, symbol: str, list_id: str = DEFAULT_WATCHLIST_ID) -> bool:
        """Add a symbol if absent, remove it if present.

        Returns:
            True if the symbol is on the list afterwards.
        """
        watchlist = self.get_watchlist(list_id).toggled(symbol)
        self.save_watchlist(watchlist)
        return watchlist.contains(symbol)

    def get_watchlist_ids(self) -> list[str]:
        """Get the IDs of all stored watchlists."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT id FROM watchlists ORDER BY id")
            return [row["id"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def delete_watchlist(self, list_id: str) -> None:
        """Delete a watchlist and its symbols."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM watchlist_symbols WHERE list_id = ?", (list_id,))
            cursor.execute("DELETE FROM watchlists WHERE id = ?", (list_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Analysis Cache ====================

    def cache_analysis(self, symbol: str, kind: str, content: str) -> None:
        """Cache generated analysis text.

        Args:
            symbol: Trading symbol.
            kind: Analysis kind ("technical" or "fundamental").
            content: Generated text.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO analysis_cache (symbol, kind, content, cached_at)
                VALUES (?, ?, ?, ?)
                """,
                (symbol.upper(), kind, content, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_cached_analysis(
        self, symbol: str, kind: str, max_age_minutes: int = 30
    ) -> Optional[str]:
        """Get cached analysis if not expired.

        Args:
            symbol: Trading symbol.
            kind: Analysis kind.
            max_age_minutes: Maximum age of cache in minutes.

        Returns:
            Cached content if found and not expired, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT content, cached_at
                FROM analysis_cache
                WHERE symbol = ? AND kind = ?
                ORDER BY id DESC
                LIMIT 1
                """,
                (symbol.upper(), kind),
            )
            row = cursor.fetchone()
            if row:
                cached_at = datetime.fromisoformat(row["cached_at"])
                age_minutes = (datetime.now() - cached_at).total_seconds() / 60
                if age_minutes <= max_age_minutes:
                    return row["content"]
            return None
        finally:
            conn.close()
