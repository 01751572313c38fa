# quranstore/quran_cache.py
import re
import sqlite3
import threading
from typing import List, Optional

# --- Use relative import for utils ---
from .utils import get_cache_db_path


class StoreError(Exception):
    """Raised when the cache database cannot be read or written"""


class CacheMissError(StoreError):
    """Raised when a key is not present in the cache"""


SUMMARY_KEY = "chapters_summary" # Whole summary collection lives under one key


def chapter_key(chapter_id: int) -> str:
    """Per-chapter entries are keyed by the chapter id as a string."""
    return str(chapter_id)


class QuranCache:
    """Handles caching of Quran data in an embedded SQLite key/value table"""
    BUCKET = "chapters"

    def __init__(self, path: Optional[str] = None, bucket: str = BUCKET):
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", bucket):
            raise ValueError(f"Invalid bucket name: {bucket!r}")
        self.path = path or get_cache_db_path()
        self.bucket = bucket
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    # --- Lifecycle ---

    def open(self) -> "QuranCache":
        """Open the database and make sure the bucket exists (safe to repeat)."""
        with self._lock:
            if self._conn is None:
                try:
                    # One shared connection, access serialized by self._lock
                    self._conn = sqlite3.connect(self.path, check_same_thread=False)
                except sqlite3.Error as e:
                    raise StoreError(f"Could not open cache database {self.path}: {e}") from e
            self._init_bucket()
        return self

    def close(self):
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "QuranCache":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _init_bucket(self):
        try:
            with self._conn:
                self._conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {self.bucket} ("
                    "key TEXT PRIMARY KEY, value BLOB NOT NULL)"
                )
        except sqlite3.Error as e:
            raise StoreError(f"create bucket {self.bucket}: {e}") from e

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Cache database is not open")
        return self._conn

    # --- Key/value access, one transaction per call ---

    def get(self, key: str) -> bytes:
        """Return the blob stored under key, or raise CacheMissError."""
        with self._lock:
            conn = self._connection()
            try:
                row = conn.execute(
                    f"SELECT value FROM {self.bucket} WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StoreError(f"read {key!r}: {e}") from e
        if row is None:
            raise CacheMissError(f"{key!r} not in cache")
        return bytes(row[0])

    def put(self, key: str, blob: bytes):
        """Store blob under key, replacing any previous value atomically."""
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(
                        f"INSERT OR REPLACE INTO {self.bucket} (key, value) VALUES (?, ?)",
                        (key, sqlite3.Binary(blob)),
                    )
            except sqlite3.Error as e:
                raise StoreError(f"write {key!r}: {e}") from e

    def delete(self, key: str):
        """Remove key from the cache. Deleting an absent key is not an error."""
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(f"DELETE FROM {self.bucket} WHERE key = ?", (key,))
            except sqlite3.Error as e:
                raise StoreError(f"delete {key!r}: {e}") from e

    def keys(self) -> List[str]:
        """List every key currently stored in the bucket."""
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(f"SELECT key FROM {self.bucket} ORDER BY key").fetchall()
            except sqlite3.Error as e:
                raise StoreError(f"list keys: {e}") from e
        return [row[0] for row in rows]
