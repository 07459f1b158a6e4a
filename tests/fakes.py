"""Fake external collaborators (git, tar, make, build.sh, HTTP)."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import requests


ANYKERNEL_SH = """\
### AnyKernel3 Ramdisk Mod Script
properties() { '
kernel.string=ExampleKernel by osm0sis @ xda-developers
do.devicecheck=1
device.name1=maguro
device.name2=toro
device.name3=toroplus
'; } # end properties
"""


def populate_kernel(path: Path, *, defconfigs=("flame_defconfig",), helper: bool = True) -> None:
    cfg_dir = path / "arch" / "arm64" / "configs"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    for name in defconfigs:
        p = cfg_dir / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(f"# {name}\nCONFIG_HID=y\n# CONFIG_WIREGUARD is not set\n", encoding="utf-8")
    if helper:
        (path / "scripts").mkdir(exist_ok=True)
        (path / "scripts" / "config").write_text("#!/bin/sh\n", encoding="utf-8")


def populate_anykernel(path: Path) -> None:
    (path / ".git").mkdir(parents=True, exist_ok=True)
    (path / ".git" / "HEAD").write_text("ref: refs/heads/master\n", encoding="utf-8")
    (path / ".gitignore").write_text("*.zip\n", encoding="utf-8")
    (path / "README.md").write_text("AnyKernel3\n", encoding="utf-8")
    (path / "anykernel.sh").write_text(ANYKERNEL_SH, encoding="utf-8")
    (path / "tools").mkdir(exist_ok=True)
    (path / "tools" / "ak3-core.sh").write_text("#!/sbin/sh\n", encoding="utf-8")


def populate_installer(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    (path / "build.sh").write_text("#!/bin/bash\n", encoding="utf-8")


def enable_symbol(dot_config: Path, key: str) -> None:
    """What ``scripts/config --enable KEY`` does: rewrite the symbol's line or append it."""

    pattern = re.compile(rf"^(CONFIG_{key}=.*|# CONFIG_{key} is not set)$", re.MULTILINE)
    text = dot_config.read_text(encoding="utf-8")
    line = f"CONFIG_{key}=y"
    if pattern.search(text):
        text = pattern.sub(line, text)
    else:
        text = text + ("" if not text or text.endswith("\n") else "\n") + line + "\n"
    dot_config.write_text(text, encoding="utf-8")


class FakeSystem:
    """Stands in for ``subprocess.run`` inside nethunter_builder.lib.command."""

    def __init__(self, *, produce_image: bool = True, image: str = "arch/arm64/boot/Image.lz4-dtb") -> None:
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []
        self.envs: List[Optional[Dict[str, str]]] = []
        self.produce_image = produce_image
        self.image = image
        self.fail: Dict[str, int] = {}
        self.kernel_populate = populate_kernel

    def commands(self, program: str) -> List[List[str]]:
        return [c for c in self.calls if Path(c[0]).name == program]

    def __call__(self, argv, cwd=None, env=None, **kwargs) -> subprocess.CompletedProcess:
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.cwds.append(None if cwd is None else str(cwd))
        self.envs.append(env)

        key = " ".join(argv[:2])
        if key in self.fail:
            return subprocess.CompletedProcess(argv, self.fail[key], "", "simulated failure")

        here = Path(cwd) if cwd is not None else Path.cwd()
        prog = Path(argv[0]).name

        if argv[:2] == ["git", "clone"]:
            url, dest = argv[-2], Path(argv[-1])
            if "android_kernel" in url:
                self.kernel_populate(dest)
            elif "AnyKernel3" in url:
                populate_anykernel(dest)
            else:
                populate_installer(dest)
        elif prog == "tar":
            dest = Path(argv[argv.index("-C") + 1])
            (dest / "bin").mkdir(parents=True, exist_ok=True)
            (dest / "bin" / "clang").write_text("", encoding="utf-8")
            (dest / "bin" / "libkeep.so").write_text("", encoding="utf-8")
            (dest / "lib64").mkdir(exist_ok=True)
            (dest / "lib64" / "libdrop.so").write_text("", encoding="utf-8")
        elif prog == "make":
            self._make(here, argv[1:])
        elif prog == "config" and "--enable" in argv:
            enable_symbol(here / argv[argv.index("--file") + 1], argv[argv.index("--enable") + 1])
        elif prog == "build.sh":
            name = argv[argv.index("--output") + 1]
            out = here / "output" / name
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(b"PK\x05\x06" + b"\x00" * 18)

        return subprocess.CompletedProcess(argv, 0, "", "")

    def _make(self, kdir: Path, targets: List[str]) -> None:
        goals = [t for t in targets if "=" not in t]
        for goal in goals:
            if goal == "defconfig":
                (kdir / ".config").write_text("CONFIG_GENERATED=y\n", encoding="utf-8")
            elif goal.endswith("_defconfig"):
                src = kdir / "arch" / "arm64" / "configs" / goal
                (kdir / ".config").write_text(src.read_text(encoding="utf-8"), encoding="utf-8")
            elif goal.startswith("-j") and self.produce_image:
                img = kdir / self.image
                img.parent.mkdir(parents=True, exist_ok=True)
                img.write_bytes(b"kernel")


class FakeResponse:
    def __init__(self, payload: bytes = b"data", status: int = 200) -> None:
        self.payload = payload
        self.status_code = status
        self.headers = {"Content-Length": str(len(payload))}

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.payload), chunk_size):
            yield self.payload[i : i + chunk_size]
