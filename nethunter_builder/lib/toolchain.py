from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolchainEnv:
    """Cross-compilation environment handed to every ``make`` call."""

    root: Path
    arch: str
    subarch: str
    clang_triple: str
    cross_compile: str
    cross_compile_compat: str

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    def variables(self) -> Dict[str, str]:
        return {
            "ARCH": self.arch,
            "SUBARCH": self.subarch,
            "CLANG_TRIPLE": self.clang_triple,
            "CROSS_COMPILE": self.cross_compile,
            "CROSS_COMPILE_COMPAT": self.cross_compile_compat,
        }

    def environ(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Return *base* (default: os.environ) extended with the toolchain."""

        env = dict(os.environ if base is None else base)
        path = env.get("PATH", "")
        env["PATH"] = os.pathsep.join(p for p in [str(self.bin_dir), path] if p)
        env.update(self.variables())
        return env


def prune_shared_libs(root: Path) -> int:
    """Delete ``*.so`` files outside any ``bin/`` directory (best effort).

    Returns the number of files removed.
    """

    removed = 0
    for lib in root.rglob("*.so"):
        if not lib.is_file():
            continue
        if "bin" in lib.relative_to(root).parts[:-1]:
            continue
        try:
            lib.unlink()
            removed += 1
        except OSError as e:
            logger.warning("Could not remove %s: %s", lib, e)
    return removed
