import json
import logging
import random
import sqlite3
import string
import time

from rabbitcare.migrations import migrate

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class LocalStore:
    """Key-value persistence on a local sqlite file. Every failure is logged, never raised."""

    def __init__(self, db_path):
        self.db_path = str(db_path)
        self.conn = None
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.create_tables()
        except (sqlite3.Error, OSError) as e:
            logger.warning("Local store '%s' unavailable, playing in memory only: %s", self.db_path, e)
            self.conn = None

    @property
    def available(self) -> bool:
        return self.conn is not None

    def create_tables(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL
            )
        """)
        self.conn.commit()

    def get(self, key):
        if self.conn is None:
            return None
        try:
            row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.warning("Failed to read '%s' from local store: %s", key, e)
            return None
        return row[0] if row else None

    def set(self, key, value) -> bool:
        if self.conn is None:
            return False
        try:
            self.conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, time.time()),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            logger.warning("Failed to write '%s' to local store: %s", key, e)
            return False
        return True

    def delete(self, key) -> bool:
        if self.conn is None:
            return False
        try:
            self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            logger.warning("Failed to delete '%s' from local store: %s", key, e)
            return False
        return True

    def load_state(self, namespace):
        """Return the migrated save blob stored under `namespace`, or None."""
        raw = self.get(namespace)
        if raw is None:
            return None
        try:
            blob = json.loads(raw)
        except ValueError as e:
            logger.warning("Save data under '%s' is corrupt, starting fresh: %s", namespace, e)
            return None
        return migrate(blob)

    def save_state(self, namespace, blob) -> bool:
        try:
            raw = json.dumps(blob)
        except (TypeError, ValueError) as e:
            logger.warning("Could not serialize save data: %s", e)
            return False
        return self.set(namespace, raw)

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None


def generate_player_id(now_ms=None, rng=None) -> str:
    rng = rng or random
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    suffix = ''.join(rng.choice(_ID_ALPHABET) for _ in range(7))
    return f"player-{now_ms}-{suffix}"


def get_player_id(store, key, rng=None) -> str:
    """Stable per-device id: generated once, then reused from the store."""
    player_id = store.get(key)
    if player_id:
        return player_id
    player_id = generate_player_id(rng=rng)
    if not store.set(key, player_id):
        logger.warning("Player id could not be persisted; remote saves will not survive a restart")
    return player_id
