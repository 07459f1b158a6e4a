from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

TIER_TARGET = "target"
TIER_SIBLING = "sibling"
TIER_VENDOR = "vendor"
TIER_GENERATED = "generated"

_SET_RE = re.compile(r"^CONFIG_([A-Za-z0-9_]+)=(.*)$")
_UNSET_RE = re.compile(r"^# CONFIG_([A-Za-z0-9_]+) is not set$")


@dataclass(frozen=True)
class DefconfigChoice:
    tier: str
    name: str  # as passed to make, relative to arch/<arch>/configs


def configs_dir(kernel_dir: Path, arch: str) -> Path:
    return kernel_dir / "arch" / arch / "configs"


def select_defconfig(
    kernel_dir: Path,
    *,
    device: str,
    arch: str,
    sibling: str,
    generate: Callable[[], None],
) -> DefconfigChoice:
    """Pick the base defconfig; first existing tier wins.

    1. ``<device>_defconfig``
    2. the sibling device's defconfig, copied to ``<device>_defconfig``
    3. ``vendor/<device>_defconfig``
    4. ``generate()`` (make defconfig), its .config saved as ``<device>_defconfig``
    """

    cfg_dir = configs_dir(kernel_dir, arch)
    target_name = f"{device}_defconfig"
    target = cfg_dir / target_name

    if target.is_file():
        return DefconfigChoice(TIER_TARGET, target_name)

    sibling_path = cfg_dir / sibling
    if sibling_path.is_file():
        logger.warning("No %s found. Copying %s to %s", target_name, sibling, target_name)
        shutil.copyfile(sibling_path, target)
        return DefconfigChoice(TIER_SIBLING, target_name)

    vendor_name = f"vendor/{target_name}"
    if (cfg_dir / vendor_name).is_file():
        return DefconfigChoice(TIER_VENDOR, vendor_name)

    logger.warning("No %s or %s found. Creating %s from defconfig", target_name, sibling, target_name)
    generate()
    dot_config = kernel_dir / ".config"
    if not dot_config.is_file():
        raise RuntimeError(f"make defconfig did not produce {dot_config}")
    cfg_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(dot_config, target)
    return DefconfigChoice(TIER_GENERATED, target_name)


class KconfigDocument:
    """Read-only view of a .config file."""

    def __init__(self, lines: Sequence[str]) -> None:
        self.lines: List[str] = list(lines)

    @classmethod
    def load(cls, path: Path) -> "KconfigDocument":
        return cls(path.read_text(encoding="utf-8", errors="replace").splitlines())

    def _find(self, key: str) -> Optional[int]:
        for i, line in enumerate(self.lines):
            m = _SET_RE.match(line) or _UNSET_RE.match(line)
            if m and m.group(1) == key:
                return i
        return None

    def get(self, key: str) -> Optional[str]:
        """Return the raw value, ``"n"`` for '# ... is not set', None if absent."""

        i = self._find(key)
        if i is None:
            return None
        m = _SET_RE.match(self.lines[i])
        return m.group(2) if m else "n"

    def is_enabled(self, key: str) -> bool:
        return self.get(key) in {"y", "m"}


def config_helper(kernel_dir: Path) -> Optional[Path]:
    p = kernel_dir / "scripts" / "config"
    return p if p.is_file() else None


def enable_features(
    kernel_dir: Path,
    features: Iterable[str],
    *,
    helper: Path,
) -> None:
    """Enable each symbol in .config via the kernel's scripts/config helper."""

    for key in features:
        run_cmd(
            [str(helper), "--file", ".config", "--enable", key],
            cwd=kernel_dir,
        )


def missing_features(dot_config: Path, features: Iterable[str]) -> List[str]:
    doc = KconfigDocument.load(dot_config)
    return [k for k in features if not doc.is_enabled(k)]
