from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from . import settings as _settings_mod
from .models import ServiceRecord


def utc_now() -> str:
    return datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%SZ")


def _resolve_db_path() -> str:
    """Return a file path usable by sqlite.

    If the configured path is a directory (docker creates one for a missing
    bind-mounted file), the DB file is placed inside it.
    """
    p = os.path.abspath(_settings_mod.settings.db_path)

    if os.path.isdir(p):
        p = os.path.join(p, "dnsreg.db")

    parent = os.path.dirname(p)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)

    return p


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_resolve_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    """Create tables if they do not exist."""
    with connect() as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS registrations (
              uuid TEXT PRIMARY KEY,
              service TEXT NOT NULL,
              instance TEXT NOT NULL,
              environment TEXT NOT NULL,
              host TEXT NOT NULL,
              port INTEGER NOT NULL,
              ttl INTEGER NOT NULL,
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS events (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts TEXT NOT NULL,
              level TEXT NOT NULL,
              service TEXT,
              instance TEXT,
              message TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
            """
        )


def log_event(level: str, message: str, service: str | None = None, instance: str | None = None) -> None:
    with connect() as conn:
        conn.execute(
            "INSERT INTO events (ts, level, service, instance, message) VALUES (?, ?, ?, ?, ?)",
            (utc_now(), level.upper(), service, instance, message),
        )


@dataclass(frozen=True)
class RegistrationRow:
    uuid: str
    service: str
    instance: str
    environment: str
    host: str
    port: int
    ttl: int
    created_at: str
    updated_at: str


def _rows_to_dataclass(rows: Iterable[sqlite3.Row], cls: Any) -> list[Any]:
    out: list[Any] = []
    for r in rows:
        out.append(cls(**dict(r)))
    return out


def upsert_registration(uuid: str, record: ServiceRecord, ttl: int) -> RegistrationRow:
    now = utc_now()
    with connect() as conn:
        conn.execute(
            """
            INSERT INTO registrations (uuid, service, instance, environment, host, port, ttl, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(uuid) DO UPDATE SET
              service=excluded.service,
              instance=excluded.instance,
              environment=excluded.environment,
              host=excluded.host,
              port=excluded.port,
              ttl=excluded.ttl,
              updated_at=excluded.updated_at
            """,
            (uuid, record.service, record.instance, record.environment, record.host, record.port, ttl, now, now),
        )
        row = conn.execute("SELECT * FROM registrations WHERE uuid=?", (uuid,)).fetchone()
        return RegistrationRow(**dict(row))


def touch_registration(uuid: str) -> None:
    with connect() as conn:
        conn.execute("UPDATE registrations SET updated_at=? WHERE uuid=?", (utc_now(), uuid))


def get_registration(uuid: str) -> RegistrationRow | None:
    with connect() as conn:
        row = conn.execute("SELECT * FROM registrations WHERE uuid=?", (uuid,)).fetchone()
        return RegistrationRow(**dict(row)) if row else None


def list_registrations() -> list[RegistrationRow]:
    with connect() as conn:
        rows = conn.execute("SELECT * FROM registrations ORDER BY service, instance").fetchall()
        return _rows_to_dataclass(rows, RegistrationRow)


def delete_registration(uuid: str) -> None:
    with connect() as conn:
        conn.execute("DELETE FROM registrations WHERE uuid=?", (uuid,))


def latest_events(limit: int = 100) -> list[dict[str, Any]]:
    with connect() as conn:
        rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [dict(r) for r in rows]
