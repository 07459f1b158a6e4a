from __future__ import annotations

import datetime
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from .build_config import BuildConfig
from .lib.toolchain import ToolchainEnv


def today_stamp() -> str:
    return datetime.date.today().strftime("%Y%m%d")


@dataclass(frozen=True)
class BuildCtx:
    """Everything a stage needs, passed explicitly.

    Stages talk to each other only through files under ``workspace``;
    every path below is derived from the config, never from earlier stages.
    """

    cfg: BuildConfig
    workspace: Path
    build_date: str = field(default_factory=today_stamp)
    prompt: Callable[[str], str] = input

    @property
    def jobs(self) -> int:
        return os.cpu_count() or 1

    def repo_dir(self, name: str) -> Path:
        return self.workspace / self.cfg.repo(name).dir_name

    @property
    def kernel_dir(self) -> Path:
        return self.repo_dir("kernel")

    @property
    def anykernel_dir(self) -> Path:
        return self.repo_dir("anykernel")

    @property
    def installer_dir(self) -> Path:
        return self.repo_dir("installer")

    @property
    def toolchain_dir(self) -> Path:
        return self.workspace / self.cfg.toolchain_dir

    @property
    def toolchain_archive(self) -> Path:
        return self.workspace / f"{self.cfg.toolchain_version}.tar.gz"

    @property
    def toolchain(self) -> ToolchainEnv:
        return ToolchainEnv(
            root=self.toolchain_dir,
            arch=self.cfg.arch,
            subarch=self.cfg.subarch,
            clang_triple=self.cfg.clang_triple,
            cross_compile=self.cfg.cross_compile,
            cross_compile_compat=self.cfg.cross_compile_compat,
        )

    def make_argv(self, *targets: str) -> List[str]:
        return ["make", *targets, *self.cfg.make_flags]

    @property
    def kernel_image_path(self) -> Path:
        return self.kernel_dir / self.cfg.kernel_image

    @property
    def kernel_image_name(self) -> str:
        return Path(self.cfg.kernel_image).name

    @property
    def kernel_zip_name(self) -> str:
        return f"{self.cfg.kernel_zip_prefix}_{self.build_date}.zip"

    @property
    def kernel_zip_path(self) -> Path:
        return self.anykernel_dir / self.kernel_zip_name

    @property
    def rootfs_path(self) -> Path:
        return self.workspace / self.cfg.rootfs_file

    @property
    def installer_zip_name(self) -> str:
        return f"{self.cfg.installer_zip_prefix}_{self.build_date}.zip"

    def installer_zip_candidates(self) -> List[Path]:
        return [
            self.installer_dir / "output" / self.installer_zip_name,
            self.installer_dir / self.installer_zip_name,
        ]
