"""
SQLite cache of external link check results.

One table, ``link_checks``, keyed by URL. Entries older than the configured
TTL are treated as missing so the link is fetched again.
"""

import datetime
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from .paths import resolve_data_file

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class LinkCache:
    """Stores the latest check result per URL."""

    def __init__(self, path: str, ttl_days: float = 7):
        """Resolve the cache file (relative paths live in the data dir) and ensure the schema."""
        self.path = str(resolve_data_file(path, ensure_parent=True))
        self.ttl = datetime.timedelta(days=ttl_days)
        self._init_db()

    def _init_db(self) -> None:
        with self.get_connection() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS link_checks (
                    url TEXT PRIMARY KEY,
                    status_code INTEGER,
                    ok INTEGER NOT NULL,
                    error TEXT,
                    checked_at TEXT NOT NULL
                )
            ''')
            conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_link_checks_checked_at
                ON link_checks(checked_at)
            ''')

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Connection with ``sqlite3.Row`` rows; commits on success, rolls back on error."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, url: str, now: Optional[datetime.datetime] = None) -> Optional[Dict[str, Any]]:
        """Return the cached result for *url*, or None when absent or expired."""
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT url, status_code, ok, error, checked_at FROM link_checks WHERE url = ?",
                (url,),
            ).fetchone()
        if row is None:
            return None

        checked_at = datetime.datetime.strptime(row['checked_at'], _TIMESTAMP_FORMAT)
        if (now or _utcnow()) - checked_at > self.ttl:
            logger.debug("Cached result for %s expired (checked %s)", url, row['checked_at'])
            return None

        return {
            'url': row['url'],
            'status_code': row['status_code'],
            'ok': bool(row['ok']),
            'error': row['error'],
            'checked_at': row['checked_at'],
        }

    def put(
        self,
        url: str,
        status_code: Optional[int],
        ok: bool,
        error: Optional[str] = None,
        now: Optional[datetime.datetime] = None,
    ) -> None:
        """Insert or replace the result for *url*."""
        checked_at = (now or _utcnow()).strftime(_TIMESTAMP_FORMAT)
        with self.get_connection() as conn:
            conn.execute(
                '''
                INSERT OR REPLACE INTO link_checks (url, status_code, ok, error, checked_at)
                VALUES (?, ?, ?, ?, ?)
                ''',
                (url, status_code, int(ok), error, checked_at),
            )

    def purge_expired(self, now: Optional[datetime.datetime] = None) -> int:
        """Delete expired rows and return how many were removed."""
        cutoff = ((now or _utcnow()) - self.ttl).strftime(_TIMESTAMP_FORMAT)
        with self.get_connection() as conn:
            cursor = conn.execute("DELETE FROM link_checks WHERE checked_at < ?", (cutoff,))
            removed = cursor.rowcount
        if removed:
            logger.info("Purged %d expired link check(s) from %s", removed, self.path)
        return removed

    def clear(self) -> None:
        with self.get_connection() as conn:
            conn.execute("DELETE FROM link_checks")
