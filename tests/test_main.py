from conftest import FixedClock


def test_tick_then_status(tk_env, capsys):
    from timekeeper.main import main

    clock = FixedClock(time="09:00:00")
    assert main(["tick"], clock=clock) == 0
    assert capsys.readouterr().out == "Started at [2024-01-01 09:00:00]\n"

    clock.time = "09:45:00"
    assert main(["status"], clock=clock) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == [
        "Working since: 09:00:00 (45m 0s)",
        "Work duration: 45m",
        "No breaks taken yet",
    ]

    clock.time = "10:00:00"
    assert main(["tick"], clock=clock) == 0
    assert "Stopped at [2024-01-01 10:00:00]" in capsys.readouterr().out


def test_commands_are_case_insensitive(tk_env, capsys):
    from timekeeper.main import main

    assert main(["STATUS"], clock=FixedClock()) == 0
    assert "No entries for today (2024-01-01)." in capsys.readouterr().out


def test_invalid_arguments_do_not_touch_store(tk_env, capsys):
    from timekeeper.main import ErrorCode, main

    assert main([], clock=FixedClock()) == ErrorCode.INVALID_ARGUMENTS
    assert main(["bogus"], clock=FixedClock()) == 1
    assert main(["tick", "now"], clock=FixedClock()) == 1
    assert main(["history", "soon"], clock=FixedClock()) == 1
    assert main(["history", "0"], clock=FixedClock()) == 1

    err = capsys.readouterr().err
    assert "Expected one of: tick, status, start, stop, history, tray" in err
    assert not (tk_env / "timekeeper.db").exists()


def test_start_and_stop_exit_codes(tk_env, capsys):
    from timekeeper.main import ErrorCode, main

    clock = FixedClock(time="09:00:00")
    assert main(["stop"], clock=clock) == ErrorCode.CANNOT_STOP
    assert "Cannot stop an entry when none is open." in capsys.readouterr().err

    assert main(["start"], clock=clock) == 0
    assert main(["start"], clock=clock) == ErrorCode.CANNOT_START
    assert "Cannot start a new entry when one is already open." in capsys.readouterr().err

    clock.time = "17:00:00"
    assert main(["stop"], clock=clock) == 0


def test_clock_skew_is_a_general_error(tk_env, capsys):
    from timekeeper.main import ErrorCode, main

    clock = FixedClock(time="10:00:00")
    main(["tick"], clock=clock)
    capsys.readouterr()

    clock.time = "09:00:00"
    assert main(["tick"], clock=clock) == ErrorCode.GENERAL_ERROR
    err = capsys.readouterr().err
    assert "An unexpected error occurred." in err
    assert "Time went backwards" in err


def test_unusable_store_is_a_general_error(tk_env, monkeypatch, capsys):
    from timekeeper import config
    from timekeeper.main import ErrorCode, main

    # a directory cannot be opened as a database file
    blocked = tk_env / "blocked.db"
    blocked.mkdir(parents=True)
    monkeypatch.setattr(config, "DB_PATH", blocked)

    assert main(["status"], clock=FixedClock()) == ErrorCode.GENERAL_ERROR
    assert "An unexpected error occurred." in capsys.readouterr().err


def test_history_command(tk_env, capsys):
    from timekeeper.main import main

    clock = FixedClock(time="09:00:00")
    main(["tick"], clock=clock)
    clock.time = "10:00:00"
    main(["tick"], clock=clock)
    capsys.readouterr()

    assert main(["history", "7"], clock=clock) == 0
    assert "2024-01-01    01:00:00" in capsys.readouterr().out


def test_tray_command_runs_tray(tk_env, monkeypatch):
    from timekeeper import tray
    from timekeeper.main import main

    calls = []
    monkeypatch.setattr(tray, "run", lambda: calls.append("run"))
    assert main(["tray"]) == 0
    assert calls == ["run"]


def test_corrupt_stored_time_is_a_general_error(tk_env, capsys):
    from timekeeper import db
    from timekeeper.main import ErrorCode, main

    con = db.connect()
    con.execute("INSERT INTO time_entries(day,start) VALUES(?,?)", ("2024-01-01", "garbage"))
    con.commit()
    con.close()

    assert main(["status"], clock=FixedClock()) == ErrorCode.GENERAL_ERROR
    assert "An unexpected error occurred." in capsys.readouterr().err


def test_history_too_far_back_is_a_general_error(tk_env, capsys):
    from timekeeper.main import ErrorCode, main

    assert main(["history", "999999"], clock=FixedClock()) == ErrorCode.GENERAL_ERROR
    assert "An unexpected error occurred." in capsys.readouterr().err


def test_database_file_that_is_not_sqlite(tk_env, capsys):
    from timekeeper.main import ErrorCode, main

    (tk_env / "timekeeper.db").write_bytes(b"this is not a database, just text" * 64)
    assert main(["tick"], clock=FixedClock()) == ErrorCode.GENERAL_ERROR
    assert "An unexpected error occurred." in capsys.readouterr().err


def test_tray_failure_is_a_general_error(tk_env, monkeypatch, capsys):
    from timekeeper import tray
    from timekeeper.main import ErrorCode, main

    def no_backend():
        raise RuntimeError("pystray is required to show a tray icon; install it first")

    monkeypatch.setattr(tray, "run", no_backend)
    assert main(["tray"]) == ErrorCode.GENERAL_ERROR
    assert "An unexpected error occurred." in capsys.readouterr().err


def test_store_mismatch_reports_its_own_message(tk_env, monkeypatch, capsys):
    from timekeeper import core
    from timekeeper.main import ErrorCode, main

    clock = FixedClock(time="09:00:00")
    main(["tick"], clock=clock)
    clock.time = "10:00:00"
    main(["tick"], clock=clock)
    capsys.readouterr()

    monkeypatch.setattr(core, "reopen_last_entry", lambda *args: 0)
    clock.time = "10:00:30"
    assert main(["tick"], clock=clock) == ErrorCode.CANNOT_STOP
    err = capsys.readouterr().err
    assert "No entry to resume for 2024-01-01." in err
    assert "Cannot stop an entry when none is open." not in err
