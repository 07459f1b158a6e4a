from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.command import run_cmd
from ..pipeline import BUILT, BuildError
from ..state_store import record_artifact

logger = logging.getLogger(__name__)


class BuildKernelStep:
    step_id = "40_build_kernel"
    phase = BUILT

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        kdir = ctx.kernel_dir
        logger.info("Building kernel with %d jobs... (this may take a while)", ctx.jobs)
        run_cmd(
            ctx.make_argv(f"-j{ctx.jobs}"),
            cwd=kdir,
            env=ctx.toolchain.environ(),
            interactive=True,
        )

        # make's exit status alone is not trusted.
        image = ctx.kernel_image_path
        if not image.is_file():
            logger.error("Kernel image not found at %s. Searching...", image)
            boot_dir = image.parent
            candidates = sorted(p for p in boot_dir.rglob("Image*") if p.is_file()) if boot_dir.is_dir() else []
            for c in candidates:
                logger.error("  candidate: %s", c.relative_to(kdir))
            if not candidates:
                logger.error("  no Image* files under %s", boot_dir)
            raise BuildError(f"Kernel image not found at {image}; adjust kernel.image in the build config")

        record_artifact(state, "kernel_image", image)
        logger.info("Kernel image: %s", image)
        return state
