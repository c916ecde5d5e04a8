import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import Optional

import logging

from PIL import Image, ImageDraw

from . import config

# pystray picks a display backend on import and fails on headless hosts
try:
    import pystray
except Exception:
    pystray = None

logger = logging.getLogger("tk.tray")

TITLE = "Timekeeper"
REFRESH_SECONDS = 30.0


class CliError(RuntimeError):
    """The timekeeper CLI exited with a non-zero code."""

    def __init__(self, command: str, code: int, output: str):
        self.command = command
        self.code = code
        self.output = output
        super().__init__(f"Command 'timekeeper {command}' failed with exit code {code}:\n{output}")


def run_cli(command: str, timeout: float = 30.0) -> str:
    """Run `python -m timekeeper <command>` and return its combined output."""
    env = os.environ.copy()
    env.setdefault("PYTHONPATH", str(Path(__file__).resolve().parents[1]))
    proc = subprocess.run(
        [sys.executable, "-m", "timekeeper", command],
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        timeout=timeout,
    )
    if proc.returncode != 0:
        raise CliError(command, proc.returncode, proc.stdout)
    return proc.stdout


def _placeholder_image(size: int = 22):
    img = Image.new("RGB", (size, size), "white")
    draw = ImageDraw.Draw(img)
    draw.rectangle((2, 2, size - 3, size - 3), outline="black")
    draw.text((8, 5), "T", fill="black")
    return img


def load_icon_image(icon_path: Optional[Path] = None):
    path = icon_path if icon_path is not None else config.ICON_PATH
    try:
        if path and os.path.isfile(path):
            return Image.open(path)
    except Exception:
        logger.exception("Failed to load icon image")
    return _placeholder_image()


class TrayApp:
    """Tray icon that shells out to the CLI for tick and status."""

    def __init__(self, runner=run_cli):
        self.runner = runner
        self.status_line = "Status unknown"
        self.icon = None
        self._stop = threading.Event()

    def refresh(self) -> str:
        try:
            output = self.runner("status")
        except (CliError, OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("Status refresh failed: %s", exc)
            return self.status_line
        lines = output.strip().splitlines()
        self.status_line = lines[0] if lines else "Status unknown"
        if self.icon is not None:
            self.icon.title = f"{TITLE} - {self.status_line}"
            self.icon.update_menu()
        return output

    def notify(self, message: str):
        if self.icon is not None:
            try:
                self.icon.notify(message, TITLE)
            except Exception:
                logger.exception("Notification failed")
        logger.info("Tray message: %s", message)

    def on_tick(self, icon=None, item=None):
        try:
            output = self.runner("tick")
            self.notify(f"Tick executed:\n{output}")
        except (CliError, OSError, subprocess.TimeoutExpired) as exc:
            self.notify(f"Error: {exc}")
        self.refresh()

    def on_status(self, icon=None, item=None):
        try:
            output = self.runner("status")
        except (CliError, OSError, subprocess.TimeoutExpired) as exc:
            self.notify(f"Error: {exc}")
            return
        self.notify(output)

    def on_exit(self, icon=None, item=None):
        self._stop.set()
        if self.icon is not None:
            self.icon.stop()

    def _refresh_loop(self):
        while not self._stop.wait(REFRESH_SECONDS):
            self.refresh()

    def build_menu(self):
        return pystray.Menu(
            pystray.MenuItem(lambda item: self.status_line, None, enabled=False),
            pystray.MenuItem("Tick", self.on_tick, default=True),
            pystray.MenuItem("Status", self.on_status),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Exit", self.on_exit),
        )

    def run(self):
        if pystray is None:
            raise RuntimeError("pystray is required to show a tray icon; install it first")
        self.icon = pystray.Icon("timekeeper", load_icon_image(), TITLE, self.build_menu())
        self.refresh()
        threading.Thread(target=self._refresh_loop, daemon=True).start()
        self.icon.run()


def run():
    TrayApp().run()
