from __future__ import annotations

import logging
from textwrap import dedent
from typing import Any, Dict

from ..context import BuildCtx
from ..pipeline import REPORTED

logger = logging.getLogger(__name__)


def render_report(ctx: BuildCtx, artifacts: Dict[str, str]) -> str:
    idir = ctx.installer_dir
    installer = artifacts.get("installer_zip") or f"{idir / 'output'}/ or {idir}/ for {ctx.installer_zip_name}"
    return dedent(
        f"""
        ========================================================================
          NetHunter Kernel & Full Image Build Complete for Google Pixel 4 ({ctx.cfg.device})
        ========================================================================

        1) Standalone Kernel Zip (AnyKernel3):
           - Location: {ctx.kernel_zip_path}
           - Flash in TWRP or another custom recovery if you only want the kernel.

        2) Full NetHunter Installer Zip (with rootfs + kernel):
           - Location: {installer}
           - Flash in TWRP to get the NetHunter rootfs, apps, and the
             HID/netfilter-enabled kernel.

        3) Flashing Steps (Example):
           a. Transfer the .zip to device (adb push <zip> /sdcard/).
           b. Reboot to recovery: 'adb reboot recovery'
           c. In TWRP, choose 'Install' and select the .zip to flash.
           d. Re-flash Magisk if needed to retain root.
           e. Reboot system.

        For any issues, confirm your defconfig is correct, ensure the correct
        rootfs file, and that your bootloader is unlocked.
        ========================================================================
        """
    ).strip("\n")


class ReportStep:
    step_id = "90_report"
    phase = REPORTED

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        text = render_report(ctx, state.get("artifacts") or {})
        for line in text.splitlines():
            logger.info("%s", line)
        return state
