"""Interval engine: decides what a tick does to today's entries.

A tick with no open entry starts one, or resumes the last entry when the
break since it stopped is short enough. A tick with an open entry stops it,
or discards it when it has not lasted long enough to be worth keeping.
"""
import datetime as dt
import enum
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

from . import config, report
from .db import (
    append_entry,
    close_entry,
    discard_last_open_entry,
    has_open_entry,
    list_entries,
    reopen_last_entry,
)
from .intervals import duration, format_time
from .logging_setup import get_logger

logger = get_logger("tk.core")


class Outcome(enum.Enum):
    STARTED = "started"
    RESUMED = "resumed"
    STOPPED = "stopped"
    DISCARDED = "discarded"
    STATUS = "status"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


@dataclass
class Result:
    outcome: Outcome
    lines: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome not in (Outcome.NOT_FOUND, Outcome.CONFLICT)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def _thresholds(min_interval: Optional[int], short_break: Optional[int]):
    if min_interval is None:
        min_interval = config.MIN_INTERVAL_SECONDS
    if short_break is None:
        short_break = config.SHORT_BREAK_SECONDS
    return min_interval, short_break


def tick(con: sqlite3.Connection, day: str, now: dt.time,
         min_interval: Optional[int] = None, short_break: Optional[int] = None) -> Result:
    """Start or stop depending on whether `day` has an open entry."""
    if has_open_entry(con, day):
        return _stop_flow(con, day, now, min_interval, short_break)
    return _start_flow(con, day, now, min_interval, short_break)


def start(con: sqlite3.Connection, day: str, now: dt.time,
          min_interval: Optional[int] = None, short_break: Optional[int] = None) -> Result:
    if has_open_entry(con, day):
        logger.info("Refusing to start: day=%s already has an open entry", day)
        return Result(Outcome.CONFLICT, ["Cannot start a new entry when one is already open."])
    return _start_flow(con, day, now, min_interval, short_break)


def stop(con: sqlite3.Connection, day: str, now: dt.time,
         min_interval: Optional[int] = None, short_break: Optional[int] = None) -> Result:
    if not has_open_entry(con, day):
        logger.info("Refusing to stop: day=%s has no open entry", day)
        return Result(Outcome.NOT_FOUND, ["Cannot stop an entry when none is open."])
    return _stop_flow(con, day, now, min_interval, short_break)


def _start_flow(con, day, now, min_interval, short_break) -> Result:
    _, short_break = _thresholds(min_interval, short_break)
    entries = list_entries(con, day)
    last = entries[-1] if entries else None

    if last is not None and last.stop is not None:
        gap = duration(last.stop, now)
        if gap <= short_break:
            logger.info("Resuming entry %s after %ds break (threshold %ds)", last.id, gap, short_break)
            if reopen_last_entry(con, day) != 1:
                return Result(Outcome.NOT_FOUND, [f"No entry to resume for {day}."])
            return Result(Outcome.RESUMED, [
                f"Resumed at [{day} {format_time(now)}] after a break of {report.fmt_duration(gap)}"
            ])

    lines = report.start_report(entries, now)
    if append_entry(con, day, now) != 1:
        return Result(Outcome.CONFLICT, [f"Could not start an entry for {day}."])
    lines.append(f"Started at [{day} {format_time(now)}]")
    return Result(Outcome.STARTED, lines)


def _stop_flow(con, day, now, min_interval, short_break) -> Result:
    min_interval, _ = _thresholds(min_interval, short_break)
    entries = list_entries(con, day)
    current = entries[-1]

    if duration(current.start, now) < min_interval:
        logger.info("Discarding entry %s: shorter than %ds", current.id, min_interval)
        if discard_last_open_entry(con, day) != 1:
            return Result(Outcome.NOT_FOUND, [f"No open entry to discard for {day}."])
        return Result(Outcome.DISCARDED, [
            f"Discarded interval started at {format_time(current.start)}: "
            f"shorter than {min_interval}s"
        ])

    lines = report.stop_report(entries, now)
    if close_entry(con, day, now) != 1:
        return Result(Outcome.NOT_FOUND, [f"No open entry to stop for {day}."])
    lines.append(f"Stopped at [{day} {format_time(now)}]")
    return Result(Outcome.STOPPED, lines)


def status(con: sqlite3.Connection, day: str, now: dt.time) -> Result:
    """Describe today's state without touching the store."""
    entries = list_entries(con, day)
    if not entries:
        return Result(Outcome.STATUS, [f"No entries for today ({day})."])

    last = entries[-1]
    if last.is_open:
        elapsed = duration(last.start, now)
        head = f"Working since: {format_time(last.start)} ({report.fmt_elapsed(elapsed)})"
    else:
        elapsed = duration(last.stop, now)
        head = f"On a break since: {format_time(last.stop)} ({report.fmt_elapsed(elapsed)})"
    return Result(Outcome.STATUS, [head] + report.summary(entries, now))
