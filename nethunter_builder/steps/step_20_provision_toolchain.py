from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.archive import extract_tarball
from ..lib.download import download
from ..lib.toolchain import prune_shared_libs
from ..pipeline import TOOLCHAIN_READY
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ProvisionToolchainStep:
    step_id = "20_provision_toolchain"
    phase = TOOLCHAIN_READY

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        tc_dir = ctx.toolchain_dir
        version = ctx.cfg.toolchain_version

        # Presence of the directory means provisioned, whatever its version.
        if tc_dir.exists():
            logger.info("Toolchain present at %s; skipping download", tc_dir)
            record_decision(state, "toolchain_downloaded", False)
        else:
            logger.info("Downloading Clang toolchain: %s", version)
            download(ctx.cfg.toolchain_url, ctx.toolchain_archive)
            extract_tarball(ctx.toolchain_archive, tc_dir)
            record_decision(state, "toolchain_downloaded", True)

            if ctx.cfg.toolchain_prune:
                logger.info("Minimizing toolchain directory...")
                try:
                    removed = prune_shared_libs(tc_dir)
                    logger.info("Removed %d shared libraries outside bin/", removed)
                except OSError as e:
                    logger.warning("Toolchain pruning failed (%s); continuing", e)

        env = ctx.toolchain
        record_decision(state, "toolchain", {"bin": str(env.bin_dir), **env.variables()})
        logger.info("Toolchain environment: PATH+=%s %s", env.bin_dir, env.variables())
        return state
