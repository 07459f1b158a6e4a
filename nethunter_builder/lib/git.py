from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def ensure_repo(url: str, destination: Path, *, shallow: bool = True) -> bool:
    """Clone *url* into *destination*, or freshen an existing checkout.

    An existing directory is assumed to be a clone of *url*. Its update is
    best effort: a failed ``git pull`` is logged and ignored. A failed
    initial clone raises.

    Returns True when a clone was performed.
    """

    if not destination.exists():
        destination.parent.mkdir(parents=True, exist_ok=True)
        argv = ["git", "clone"]
        if shallow:
            argv += ["--depth=1"]
        argv += [url, str(destination)]
        logger.info("Cloning %s into %s", url, destination)
        run_cmd(argv)
        return True

    logger.info("%s exists. Pulling latest changes...", destination)
    r = run_cmd(["git", "pull"], cwd=destination, check=False)
    if r.returncode != 0:
        logger.warning("git pull failed in %s (%s); continuing with existing checkout", destination, r.returncode)
    return False


def reset_clean(path: Path) -> None:
    """Discard local modifications and untracked files (best effort)."""

    for argv in (["git", "checkout", "."], ["git", "clean", "-fd"]):
        r = run_cmd(argv, cwd=path, check=False)
        if r.returncode != 0:
            logger.warning("%s failed in %s; continuing", " ".join(argv), path)
