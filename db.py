"""
db.py
SQLite helpers + the single key/value slot holding the whole schedule state.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

DB_FILE = Path(__file__).with_name("tajil.db")
STATE_KEY = "schedule_state"

logger = logging.getLogger(__name__)


@contextmanager
def get_conn():
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def _create_tables() -> None:
    execute(
        """
        CREATE TABLE IF NOT EXISTS app_settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """
    )


def _get_setting(key: str, default: str | None = None) -> str | None:
    row = fetch_one("SELECT value FROM app_settings WHERE key = ?", (key,))
    if row:
        return str(row["value"])
    return default


def _set_setting(key: str, value: str) -> None:
    execute(
        """
        INSERT INTO app_settings(key, value) VALUES(?, ?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value
        """,
        (key, value),
    )


def init_db() -> None:
    _create_tables()


def load_state() -> dict | None:
    """
    Return the persisted state blob, or None when nothing usable is stored.
    Undecodable data is logged and left in place.
    """
    raw = _get_setting(STATE_KEY)
    if raw is None:
        return None
    try:
        blob = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("[DB] Stored state is not valid JSON, using defaults: %s", e)
        return None
    if not isinstance(blob, dict):
        logger.warning("[DB] Stored state is not an object, using defaults")
        return None
    return blob


def save_state(snapshot: dict) -> None:
    _set_setting(STATE_KEY, json.dumps(snapshot, ensure_ascii=False))
