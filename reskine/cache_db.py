import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Tuple, Union

DB_PATH = Path("reskine_cache.db")


class MaxXSecCacheDB:
    """
    Persists max differential cross section estimates between runs.

    One row per fingerprint; a recomputation overwrites the row.
    """

    def __init__(self, db_path: Union[str, Path] = DB_PATH):
        self.db_path = Path(db_path)
        self.create_table()

    @contextmanager
    def get_connection(self):
        """Context manager for safe DB access."""
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def create_table(self):
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS max_xsec (
                    fingerprint TEXT PRIMARY KEY,
                    max_xsec REAL,
                    energy REAL,
                    timestamp TEXT
                )
            """)

    def store_entry(self, fingerprint: str, max_xsec: float, energy: float):
        with self.get_connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO max_xsec (fingerprint, max_xsec, energy, timestamp)
                VALUES (?, ?, ?, ?)
            """, (fingerprint, max_xsec, energy, datetime.now().isoformat(timespec="seconds")))

    def load_entries(self) -> Dict[str, Tuple[float, float]]:
        """fingerprint -> (max_xsec, energy)"""
        with self.get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT fingerprint, max_xsec, energy FROM max_xsec")
            return {row[0]: (row[1], row[2]) for row in cur.fetchall()}

    def list_entries(self, limit: int = 20) -> List[dict]:
        with self.get_connection() as conn:
            conn.row_factory = sqlite3.Row
            cur = conn.cursor()
            cur.execute("SELECT * FROM max_xsec ORDER BY timestamp DESC LIMIT ?", (limit,))
            return [dict(row) for row in cur.fetchall()]

    def clear_entries(self):
        """Delete all entries (use with caution!)."""
        with self.get_connection() as conn:
            conn.execute("DELETE FROM max_xsec")
