import logging
from logging.handlers import RotatingFileHandler
from . import config

ROOT_NAME = "tk"
FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_root() -> logging.Logger:
    """Attach the file and console handlers to the `tk` logger, once per process."""
    root = logging.getLogger(ROOT_NAME)
    if root.handlers:
        return root
    root.setLevel(logging.INFO)
    fmt = logging.Formatter(FORMAT)

    # stdout carries command output; the console only sees warnings
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(fmt)
    root.addHandler(console)

    try:
        config.LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(config.LOG_PATH, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    except OSError:
        root.warning("Cannot write log file %s; logging to console only", config.LOG_PATH)
    else:
        fh.setFormatter(fmt)
        root.addHandler(fh)
    return root


def get_logger(name=ROOT_NAME):
    """Return `name` under the `tk` hierarchy; records propagate to the shared handlers."""
    root = _configure_root()
    if name == ROOT_NAME:
        return root
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)
