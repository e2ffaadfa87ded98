"""SQLite storage — one row per snapshot key, JSON payload.

Table is created automatically on first use.
"""

import json
import sqlite3
import logging
from datetime import datetime, timezone, timedelta
from pathlib import Path

from slipup.config import DB_PATH, TIMEZONE_OFFSET_HOURS
from slipup.record import SnapshotError
from slipup.storage import Storage

logger = logging.getLogger(__name__)

TZ = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))


class SqliteStorage(Storage):

    def __init__(self, db_path: Path | str | None = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else DB_PATH
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        """Return a connection with row_factory set."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        if not self._initialized:
            self._init_db(conn)
        return conn

    def _init_db(self, conn: sqlite3.Connection) -> None:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS snapshots (
                key        TEXT PRIMARY KEY,
                payload    TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
        """)
        self._initialized = True
        logger.info("Database initialized at %s", self.db_path)

    def load(self, key: str) -> dict | None:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT payload FROM snapshots WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        try:
            return json.loads(row["payload"])
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Stored payload for {key} is not JSON: {e}") from e

    def save(self, key: str, snapshot: dict) -> None:
        now = datetime.now(TZ).isoformat()
        payload = json.dumps(snapshot, sort_keys=True)
        conn = self._connect()
        try:
            conn.execute(
                """INSERT INTO snapshots (key, payload, updated_at) VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at""",
                (key, payload, now),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Saved snapshot %s (%d bytes)", key, len(payload))
