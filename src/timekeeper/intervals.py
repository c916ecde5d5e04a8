"""Interval records and time-of-day arithmetic.

Times are wall-clock `datetime.time` values with seconds precision. An
interval never spans midnight, so durations are plain differences between
two times of the same day; there is no wraparound.
"""
import datetime as dt
from dataclasses import dataclass
from typing import Optional

TIME_FORMAT = "%H:%M:%S"


class TimekeeperError(Exception):
    """Base class for errors raised by timekeeper."""


class NegativeDurationError(TimekeeperError):
    """Raised when an interval ends before it starts (clock skew or bad data)."""

    def __init__(self, start: dt.time, stop: dt.time):
        self.start = start
        self.stop = stop
        super().__init__(
            f"Time went backwards: {format_time(stop)} is before {format_time(start)}"
        )


@dataclass(frozen=True)
class Interval:
    id: int
    day: str
    start: dt.time
    stop: Optional[dt.time] = None

    @property
    def is_open(self) -> bool:
        return self.stop is None


def parse_time(text: str) -> dt.time:
    return dt.datetime.strptime(text, TIME_FORMAT).time()


def format_time(value: dt.time) -> str:
    return value.strftime(TIME_FORMAT)


def _seconds_of_day(value: dt.time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def duration(start: dt.time, stop: dt.time) -> int:
    """Seconds from `start` to `stop`; raises NegativeDurationError if stop < start."""
    seconds = _seconds_of_day(stop) - _seconds_of_day(start)
    if seconds < 0:
        raise NegativeDurationError(start, stop)
    return seconds
