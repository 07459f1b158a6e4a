from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "nethunter-build.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# Marks the handlers installed here so a second call can find them again.
_HANDLER_TAG = "_nethunter_handler"


def _owned_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]


def _open_log_file(log_path: Path) -> tuple[logging.FileHandler, Path]:
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path, encoding="utf-8"), log_path
    except OSError:
        fallback = Path.cwd() / LOG_FILE_NAME
        return logging.FileHandler(fallback, encoding="utf-8"), fallback


def configure_logging(
    log_path: str,
    *,
    verbose: bool = False,
    also_console: bool = True,
) -> str:
    """Send everything to the build log and a summary to the console.

    The log file always records DEBUG, which includes the captured stdout
    and stderr of every external command. The console shows INFO and up,
    or DEBUG as well when *verbose* is set.

    An unwritable *log_path* falls back to ``nethunter-build.log`` in the
    current directory. Calling this again keeps the existing log file and
    only updates console verbosity. Returns the log file actually used.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    console_level = logging.DEBUG if verbose else logging.INFO

    existing = _owned_handlers(root)
    if existing:
        chosen: Optional[str] = None
        for h in existing:
            if isinstance(h, logging.FileHandler):
                chosen = h.baseFilename
            else:
                h.setLevel(console_level)
        return chosen or log_path

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    file_handler, chosen_path = _open_log_file(Path(log_path))
    file_handler.setLevel(logging.DEBUG)
    handlers: list[logging.Handler] = [file_handler]

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        handlers.append(console)

    for h in handlers:
        h.setFormatter(fmt)
        setattr(h, _HANDLER_TAG, True)
        root.addHandler(h)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s, console=%s)",
        log_path,
        chosen_path,
        logging.getLevelName(console_level),
    )
    return str(chosen_path)
