import sqlite3
import datetime as dt
from pathlib import Path
from typing import Optional

from . import config
from .intervals import Interval, format_time, parse_time
from .logging_setup import get_logger

logger = get_logger("tk.db")


def _ensure_schema(con: sqlite3.Connection):
    con.execute("""CREATE TABLE IF NOT EXISTS time_entries(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        day TEXT NOT NULL,
        start TEXT NOT NULL,
        stop TEXT
    )""")
    con.commit()


def connect(path: Optional[Path] = None, timeout: float = 5.0) -> sqlite3.Connection:
    """Open (and initialize) the SQLite DB and return a connection."""
    db_path = Path(path) if path is not None else config.DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)
    con = sqlite3.connect(str(db_path), timeout=timeout)
    try:
        _ensure_schema(con)
    except Exception:
        con.close()
        raise
    return con


def has_open_entry(con: sqlite3.Connection, day: str) -> bool:
    row = con.execute(
        "SELECT COUNT(*) FROM time_entries WHERE day=? AND stop IS NULL", (day,)
    ).fetchone()
    return row[0] > 0


def append_entry(con: sqlite3.Connection, day: str, start: dt.time) -> int:
    cur = con.execute(
        "INSERT INTO time_entries(day,start) VALUES(?,?)", (day, format_time(start))
    )
    con.commit()
    logger.info("Inserted entry: day=%s start=%s", day, format_time(start))
    return cur.rowcount


def close_entry(con: sqlite3.Connection, day: str, stop: dt.time) -> int:
    cur = con.execute(
        "UPDATE time_entries SET stop=? WHERE day=? AND stop IS NULL",
        (format_time(stop), day),
    )
    con.commit()
    logger.info("Closed %d open entry(ies): day=%s stop=%s", cur.rowcount, day, format_time(stop))
    return cur.rowcount


def reopen_last_entry(con: sqlite3.Connection, day: str) -> int:
    cur = con.execute("""
        UPDATE time_entries SET stop=NULL
        WHERE id = (SELECT MAX(id) FROM time_entries WHERE day=?)
    """, (day,))
    con.commit()
    logger.info("Reopened last entry: day=%s rows=%d", day, cur.rowcount)
    return cur.rowcount


def discard_last_open_entry(con: sqlite3.Connection, day: str) -> int:
    cur = con.execute("""
        DELETE FROM time_entries
        WHERE id = (SELECT MAX(id) FROM time_entries WHERE day=?)
          AND stop IS NULL
    """, (day,))
    con.commit()
    logger.info("Discarded last open entry: day=%s rows=%d", day, cur.rowcount)
    return cur.rowcount


def list_entries(con: sqlite3.Connection, day: str) -> list[Interval]:
    """Return the entries of `day` in insertion order."""
    rows = con.execute(
        "SELECT id, day, start, stop FROM time_entries WHERE day=? ORDER BY id", (day,)
    ).fetchall()
    return [
        Interval(row[0], row[1], parse_time(row[2]), parse_time(row[3]) if row[3] else None)
        for row in rows
    ]


def days_since(con: sqlite3.Connection, since: str) -> list[str]:
    """Days on or after `since` that have entries, newest first."""
    rows = con.execute(
        "SELECT DISTINCT day FROM time_entries WHERE day >= ? ORDER BY day DESC", (since,)
    ).fetchall()
    return [row[0] for row in rows]
