import datetime as dt
import sqlite3
from dataclasses import dataclass
from typing import Optional, Sequence

from .db import days_since, list_entries
from .intervals import Interval, duration, format_time


@dataclass(frozen=True)
class BreakStats:
    count: int
    minutes: int


def fmt_duration(seconds: int) -> str:
    """Render e.g. 3661 as '1h 1m 1s', dropping zero units; zero is '0s'."""
    h, m, s = seconds // 3600, (seconds % 3600) // 60, seconds % 60
    parts = []
    if h:
        parts.append(f"{h}h")
    if m:
        parts.append(f"{m}m")
    if s or not parts:
        parts.append(f"{s}s")
    return " ".join(parts)


def fmt_elapsed(seconds: int) -> str:
    h, m, s = seconds // 3600, (seconds % 3600) // 60, seconds % 60
    if h:
        return f"{h}h {m}m {s}s"
    return f"{m}m {s}s"


def fmt_clock(sec: int) -> str:
    h, m, s = sec // 3600, (sec % 3600) // 60, sec % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def work_seconds(entries: Sequence[Interval], now: Optional[dt.time]) -> int:
    """Worked seconds; an open last entry counts up to `now` (or not at all if `now` is None)."""
    total = 0
    for entry in entries:
        if entry.stop is not None:
            total += duration(entry.start, entry.stop)
        elif now is not None:
            total += duration(entry.start, now)
    return total


def work_minutes(entries: Sequence[Interval], now: Optional[dt.time]) -> int:
    return work_seconds(entries, now) // 60


def break_stats(entries: Sequence[Interval], now: Optional[dt.time] = None) -> BreakStats:
    """Gaps between consecutive entries.

    When `now` is given and the last entry is closed, the running break up to
    `now` is counted as well.
    """
    count = 0
    seconds = 0
    for previous, following in zip(entries, entries[1:]):
        seconds += duration(previous.stop, following.start)
        count += 1
    if now is not None and entries and entries[-1].stop is not None:
        current = duration(entries[-1].stop, now)
        if current > 0:
            seconds += current
            count += 1
    return BreakStats(count, seconds // 60)


def work_line(minutes: int) -> str:
    return f"Work duration: {fmt_duration(minutes * 60)}"


def breaks_line(stats: BreakStats) -> str:
    if stats.count == 0:
        return "No breaks taken yet"
    return f"Breaks: {stats.count} ({stats.minutes} minutes)"


def summary(entries: Sequence[Interval], now: dt.time) -> list[str]:
    return [work_line(work_minutes(entries, now)), breaks_line(break_stats(entries))]


def start_report(entries: Sequence[Interval], now: dt.time) -> list[str]:
    """Standing totals shown right before a new interval is opened."""
    if not entries:
        return []
    return [work_line(work_minutes(entries, now)), breaks_line(break_stats(entries, now))]


def stop_report(entries: Sequence[Interval], now: dt.time) -> list[str]:
    """Standing totals shown right before the open interval is closed at `now`."""
    current = entries[-1]
    return summary(entries, now) + [f"Current interval started at: {format_time(current.start)}"]


def history(con: sqlite3.Connection, days: int, today: str, now: dt.time) -> list[str]:
    """Work time per day for the last `days` days, newest first."""
    since = (dt.date.fromisoformat(today) - dt.timedelta(days=days - 1)).isoformat()
    found = days_since(con, since)
    if not found:
        return ["No entries found."]

    lines = ["Day           Work time", "------------------------"]
    for day in found:
        entries = list_entries(con, day)
        secs = work_seconds(entries, now if day == today else None)
        lines.append(f"{day}    {fmt_clock(secs)}")
    return lines
