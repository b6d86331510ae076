"""SQLite-backed storage for the persisted queue state blob.

The whole state lives in one row keyed by ``STORAGE_KEY``. Every write
replaces the full JSON document and bumps an integer version so writers
can detect that someone else saved in between.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from watchqueue.core.queue_model import STORAGE_KEY, sanitize_state


def _connect(db_path):
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    return conn


def _create_tables(conn):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS queue_state (
            key TEXT PRIMARY KEY,
            json_text TEXT NOT NULL,
            version INTEGER NOT NULL DEFAULT 1,
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        )
        """
    )


def initialize_state_db(*, db_path, log_exception=None):
    """Create the SQLite schema; return False (and log) on failure."""
    try:
        with _connect(db_path) as conn:
            _create_tables(conn)
            conn.commit()
        return True
    except Exception as exc:
        if callable(log_exception):
            log_exception("initialize_state_db", exc)
        return False


def load_state_blob(db_path, key=STORAGE_KEY):
    """Return ``(payload, version)`` for the stored blob.

    ``payload`` is None when the row is missing, unreadable JSON or not an
    object; ``version`` is None only when no row exists at all.
    """
    with _connect(db_path) as conn:
        _create_tables(conn)
        row = conn.execute(
            "SELECT json_text, version FROM queue_state WHERE key = ? LIMIT 1",
            (key,),
        ).fetchone()
    if row is None:
        return None, None
    version = int(row["version"])
    try:
        payload = json.loads(row["json_text"])
    except (TypeError, ValueError):
        return None, version
    return (payload if isinstance(payload, dict) else None), version


def save_state_blob(db_path, payload, *, expected_version, key=STORAGE_KEY):
    """Replace the stored blob if it is still at ``expected_version``.

    ``expected_version=None`` means "no row yet". Returns True when the write
    landed and False when another writer got there first.
    """
    text = json.dumps(payload, ensure_ascii=False, sort_keys=True)
    with _connect(db_path) as conn:
        _create_tables(conn)
        if expected_version is None:
            cursor = conn.execute(
                """
                INSERT INTO queue_state (key, json_text, version, updated_at)
                VALUES (?, ?, 1, datetime('now'))
                ON CONFLICT(key) DO NOTHING
                """,
                (key, text),
            )
        else:
            cursor = conn.execute(
                """
                UPDATE queue_state
                SET json_text = ?, version = version + 1, updated_at = datetime('now')
                WHERE key = ? AND version = ?
                """,
                (text, key, int(expected_version)),
            )
        conn.commit()
        return cursor.rowcount == 1


def migrate_legacy_state_file(*, db_path, legacy_path, log_exception=None):
    """Seed the database from a legacy JSON state file when it holds no state.

    The legacy file is only read, never moved or deleted.
    """
    source = Path(legacy_path)
    try:
        if not source.is_file():
            return False
        _, version = load_state_blob(db_path)
        if version is not None:
            return False
        payload = json.loads(source.read_text(encoding="utf-8"))
        if isinstance(payload, dict) and isinstance(payload.get(STORAGE_KEY), dict):
            payload = payload[STORAGE_KEY]
        if not isinstance(payload, dict):
            return False
        return save_state_blob(db_path, sanitize_state(payload), expected_version=None)
    except Exception as exc:
        if callable(log_exception):
            log_exception("migrate_legacy_state_file", exc)
        return False
