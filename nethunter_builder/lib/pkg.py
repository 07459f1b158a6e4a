from __future__ import annotations

import logging
import os
from typing import List, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def _sudo() -> List[str]:
    return [] if os.geteuid() == 0 else ["sudo"]


def apt_update() -> None:
    run_cmd([*_sudo(), "apt-get", "update"])


def apt_install(packages: Sequence[str]) -> None:
    if not packages:
        return
    run_cmd([*_sudo(), "apt-get", "install", "-y", *packages])
