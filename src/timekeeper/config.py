import os
import logging
from pathlib import Path
from dotenv import load_dotenv

"""Environment-only configuration loader.

Reads settings from `.env` (if present) or environment variables:
- TIMEKEEPER_HOME
- TIMEKEEPER_DB_PATH
- TIMEKEEPER_LOG_PATH
- TIMEKEEPER_ICON
- TIMEKEEPER_MIN_INTERVAL_SECONDS
- TIMEKEEPER_SHORT_BREAK_SECONDS

If a variable is missing, defaults under `~/.timekeeper` are used.
"""

# Allow overriding the .env location via TIMEKEEPER_ENV_FILE (useful for tests).
_ENV_FILE = os.environ.get("TIMEKEEPER_ENV_FILE")
if _ENV_FILE:
    load_dotenv(Path(_ENV_FILE).expanduser(), override=False)
else:
    load_dotenv()

DEFAULT_HOME = Path.home() / ".timekeeper"
DEFAULT_MIN_INTERVAL = 60
DEFAULT_SHORT_BREAK = 60


def _path_env(key: str, default: Path) -> Path:
    val = os.environ.get(key)
    if not val:
        return default
    expanded = os.path.expandvars(val)
    return Path(expanded).expanduser()


def _seconds_env(key: str, default: int) -> int:
    val = os.environ.get(key)
    if not val:
        return default
    try:
        seconds = int(val)
    except ValueError:
        seconds = -1
    if seconds < 0:
        # logging_setup depends on this module, so use the bare logger here
        logging.getLogger("tk.config").warning(
            "Ignoring %s=%r; expected a non-negative integer, using %d", key, val, default
        )
        return default
    return seconds


HOME_DIR = _path_env("TIMEKEEPER_HOME", DEFAULT_HOME)
DB_PATH = _path_env("TIMEKEEPER_DB_PATH", HOME_DIR / "timekeeper.db")
LOG_PATH = _path_env("TIMEKEEPER_LOG_PATH", HOME_DIR / "timekeeper.log")
ICON_PATH = _path_env("TIMEKEEPER_ICON", HOME_DIR / "icon.png")

MIN_INTERVAL_SECONDS = _seconds_env("TIMEKEEPER_MIN_INTERVAL_SECONDS", DEFAULT_MIN_INTERVAL)
SHORT_BREAK_SECONDS = _seconds_env("TIMEKEEPER_SHORT_BREAK_SECONDS", DEFAULT_SHORT_BREAK)

# Ensure home dir exists
HOME_DIR.mkdir(parents=True, exist_ok=True)
