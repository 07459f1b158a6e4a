from __future__ import annotations

import logging
import re
import shutil
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.archive import zip_directory
from ..lib.git import reset_clean
from ..pipeline import KERNEL_PACKAGED, BuildError
from ..state_store import record_artifact

logger = logging.getLogger(__name__)

ANYKERNEL_SCRIPT = "anykernel.sh"
DEVICE_NAME_KEYS = ("device.name1", "device.name2")
ZIP_EXCLUDES = (".git*", "README.md", "*.zip")


def set_device_names(text: str, device: str) -> tuple[str, list[str]]:
    """Rewrite the device.nameN= lines; returns (text, keys that were missing)."""

    missing = []
    for key in DEVICE_NAME_KEYS:
        text, n = re.subn("^" + re.escape(key) + "=.*$", f"{key}={device}", text, flags=re.M)
        if n == 0:
            missing.append(key)
    return text, missing


class PackageKernelStep:
    step_id = "50_package_kernel"
    phase = KERNEL_PACKAGED

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ak = ctx.anykernel_dir
        image = ctx.kernel_image_path
        if not image.is_file():
            raise BuildError(f"Kernel image missing: {image}; run the build step first")

        reset_clean(ak)

        dst = ak / ctx.kernel_image_name
        logger.info("Copying compiled kernel %s...", ctx.kernel_image_name)
        shutil.copyfile(image, dst)

        script = ak / ANYKERNEL_SCRIPT
        if not script.is_file():
            raise BuildError(f"{script} missing; AnyKernel3 checkout looks incomplete")
        logger.info("Forcibly setting device name to %r in %s", ctx.cfg.device, ANYKERNEL_SCRIPT)
        text, missing = set_device_names(script.read_text(encoding="utf-8"), ctx.cfg.device)
        for key in missing:
            logger.warning("%s has no %s= line", ANYKERNEL_SCRIPT, key)
        script.write_text(text, encoding="utf-8")

        zip_directory(ak, ctx.kernel_zip_path, exclude=ZIP_EXCLUDES)
        record_artifact(state, "kernel_zip", ctx.kernel_zip_path)
        return state
