import datetime as dt
import importlib
import os
import sys
from pathlib import Path

import pytest

# Ensure pytest has a usable temp directory even on restricted setups.
_root_tmp = Path(__file__).resolve().parent / ".tmp"
_root_tmp.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("TMP", str(_root_tmp))
os.environ.setdefault("TEMP", str(_root_tmp))

# Make repo/src importable without an install.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

DAY = "2024-01-01"


class FixedClock:
    """Clock the tests move by hand."""

    def __init__(self, date=DAY, time="09:00:00"):
        self.date = date
        self.time = time

    def current_date(self):
        return self.date

    def current_time(self):
        return dt.time.fromisoformat(self.time)


def t(text):
    return dt.time.fromisoformat(text)


@pytest.fixture
def tk_env(tmp_path, monkeypatch):
    """Point config at a temp home and reload it; returns the home dir."""
    local_env = tmp_path / ".env"
    local_env.write_text("", encoding="utf-8")
    monkeypatch.setenv("TIMEKEEPER_ENV_FILE", str(local_env))
    monkeypatch.chdir(tmp_path)

    home = tmp_path / "tk_home"
    monkeypatch.setenv("TIMEKEEPER_HOME", str(home))
    monkeypatch.setenv("TIMEKEEPER_DB_PATH", str(home / "timekeeper.db"))
    monkeypatch.setenv("TIMEKEEPER_LOG_PATH", str(home / "timekeeper.log"))
    monkeypatch.setenv("TIMEKEEPER_ICON", str(home / "icon.png"))
    for key in ("TIMEKEEPER_MIN_INTERVAL_SECONDS", "TIMEKEEPER_SHORT_BREAK_SECONDS"):
        monkeypatch.delenv(key, raising=False)

    import timekeeper.config as config
    importlib.reload(config)
    return home


@pytest.fixture
def con(tk_env):
    from timekeeper import db
    connection = db.connect()
    yield connection
    connection.close()


@pytest.fixture
def clock():
    return FixedClock()
