import enum
import sqlite3
import sys
from contextlib import closing

from . import config, core, db, report
from .clock import SystemClock
from .intervals import TimekeeperError
from .logging_setup import get_logger

logger = get_logger("tk.main")

COMMANDS = ("tick", "status", "start", "stop", "history", "tray")


class ErrorCode(enum.IntEnum):
    INVALID_ARGUMENTS = 1
    CANNOT_START = 2
    CANNOT_STOP = 3
    GENERAL_ERROR = 4

    @property
    def description(self) -> str:
        return {
            ErrorCode.INVALID_ARGUMENTS: "Expected one of: " + ", ".join(COMMANDS),
            ErrorCode.CANNOT_START: "Cannot start a new entry when one is already open.",
            ErrorCode.CANNOT_STOP: "Cannot stop an entry when none is open.",
            ErrorCode.GENERAL_ERROR: "An unexpected error occurred.",
        }[self]


_OUTCOME_ERRORS = {
    core.Outcome.CONFLICT: ErrorCode.CANNOT_START,
    core.Outcome.NOT_FOUND: ErrorCode.CANNOT_STOP,
}


def _fail(code: ErrorCode, info: str | None = None) -> int:
    print(code.description, file=sys.stderr)
    if info and info != code.description:
        print(info, file=sys.stderr)
    return int(code)


def usage():
    print("Usage:", file=sys.stderr)
    print("  python -m timekeeper tick", file=sys.stderr)
    print("  python -m timekeeper status", file=sys.stderr)
    print("  python -m timekeeper start | stop", file=sys.stderr)
    print("  python -m timekeeper history [days]", file=sys.stderr)
    print("  python -m timekeeper tray", file=sys.stderr)


def _parse(args):
    """Return (command, days) or None when the invocation is invalid."""
    if not args:
        return None
    cmd = args[0].lower()
    if cmd not in COMMANDS:
        return None
    if cmd == "history":
        if len(args) > 2:
            return None
        if len(args) == 2:
            try:
                days = int(args[1])
            except ValueError:
                return None
            if days < 1:
                return None
            return cmd, days
        return cmd, 30
    if len(args) != 1:
        return None
    return cmd, None


def run_command(cmd: str, con: sqlite3.Connection, clock, days: int | None = None) -> core.Result:
    today = clock.current_date()
    now = clock.current_time()
    if cmd == "tick":
        return core.tick(con, today, now)
    if cmd == "start":
        return core.start(con, today, now)
    if cmd == "stop":
        return core.stop(con, today, now)
    if cmd == "status":
        return core.status(con, today, now)
    if cmd == "history":
        return core.Result(core.Outcome.STATUS, report.history(con, days, today, now))
    raise ValueError(f"Unknown command: {cmd}")


def main(argv=None, clock=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    parsed = _parse(args)
    if parsed is None:
        usage()
        return _fail(ErrorCode.INVALID_ARGUMENTS)
    cmd, days = parsed

    clock = clock or SystemClock()
    try:
        if cmd == "tray":
            from . import tray
            tray.run()
            return 0
        with closing(db.connect(config.DB_PATH)) as con:
            result = run_command(cmd, con, clock, days)
    except TimekeeperError as exc:
        logger.error("Command %s failed: %s", cmd, exc)
        return _fail(ErrorCode.GENERAL_ERROR, str(exc))
    except (sqlite3.Error, OSError):
        logger.exception("Store failure while running %s", cmd)
        return _fail(ErrorCode.GENERAL_ERROR)
    except Exception:
        logger.exception("Unexpected failure while running %s", cmd)
        return _fail(ErrorCode.GENERAL_ERROR)

    if not result.ok:
        logger.warning("Command %s ended with %s", cmd, result.outcome.value)
        # the engine's own message says whether this was a refusal or a store mismatch
        print(result.text, file=sys.stderr)
        return int(_OUTCOME_ERRORS[result.outcome])

    if result.lines:
        print(result.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
