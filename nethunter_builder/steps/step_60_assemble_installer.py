from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.command import run_cmd
from ..lib.download import download
from ..pipeline import INSTALLER_ASSEMBLED, BuildError
from ..state_store import record_artifact

logger = logging.getLogger(__name__)

BUILD_SCRIPT = "build.sh"


class AssembleInstallerStep:
    step_id = "60_assemble_installer"
    phase = INSTALLER_ASSEMBLED

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        kernel_zip = ctx.kernel_zip_path
        if not kernel_zip.is_file():
            raise BuildError(f"Kernel zip missing: {kernel_zip}; run the packaging step first")

        # No integrity/version check: an existing file is reused as is.
        rootfs = ctx.rootfs_path
        if rootfs.exists():
            logger.info("Rootfs present: %s", rootfs)
        else:
            logger.info("Downloading full NetHunter rootfs for %s...", ctx.cfg.arch)
            download(ctx.cfg.rootfs_url, rootfs)
        record_artifact(state, "rootfs", rootfs)

        idir = ctx.installer_dir
        if not (idir / BUILD_SCRIPT).is_file():
            raise BuildError(f"{idir / BUILD_SCRIPT} missing; installer checkout looks incomplete")

        logger.info("Building full NetHunter flashable zip for %s...", ctx.cfg.device)
        run_cmd(
            [
                f"./{BUILD_SCRIPT}",
                "--device",
                ctx.cfg.device,
                "--kernel",
                str(kernel_zip),
                "--rootfs-file",
                str(rootfs),
                "--output",
                ctx.installer_zip_name,
                "--force",
            ],
            cwd=idir,
            interactive=True,
        )

        found = next((p for p in ctx.installer_zip_candidates() if p.is_file()), None)
        if found is not None:
            record_artifact(state, "installer_zip", found)
            logger.info("Installer zip: %s", found)
        else:
            logger.warning(
                "%s not found in %s/output or %s; check the installer's own output location",
                ctx.installer_zip_name,
                idir,
                idir,
            )
        return state
