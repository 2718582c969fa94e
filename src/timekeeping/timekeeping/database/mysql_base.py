from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    pinned = conn_factory.pinned()
    if pinned is not None:
        # Inside DatabaseConnection.transaction(): commit/rollback belong to the owner.
        cur = pinned.cursor(dictionary=dictionary)
        try:
            yield pinned, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(exc: Exception) -> bool:
    return isinstance(exc, mysql.connector.IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def is_deadlock(exc: Exception) -> bool:
    return isinstance(exc, mysql.connector.Error) and getattr(exc, "errno", None) == errorcode.ER_LOCK_DEADLOCK


def lost_insert_race(exc: Exception) -> bool:
    """True when ``exc`` means another transaction inserted the same unique key.

    Under REPEATABLE READ a locking read of a missing row only takes a gap
    lock, so both writers reach the INSERT: one fails on the unique key or is
    chosen as the deadlock victim.
    """
    return is_duplicate_key(exc) or is_deadlock(exc)


def optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns arrive as ``time``, ``timedelta`` or 'HH:MM[:SS]' depending on the connector build."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid TIME value: {value!r}")
        return time(*parts[:3])
    raise TypeError(f"Unsupported TIME value: {type(value)!r}")
