from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.pkg import apt_install, apt_update

logger = logging.getLogger(__name__)


class PrepareWorkspaceStep:
    step_id = "00_prepare_workspace"
    phase = None

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if ctx.cfg.install_host_packages:
            logger.info("Updating packages and installing dependencies...")
            apt_update()
            apt_install(ctx.cfg.host_packages)
        else:
            logger.info("Host package installation disabled by config")

        ctx.workspace.mkdir(parents=True, exist_ok=True)
        logger.info("Workspace: %s", ctx.workspace)
        return state
