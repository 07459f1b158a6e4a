from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.command import run_cmd
from ..lib.kconfig import config_helper, enable_features, missing_features, select_defconfig
from ..pipeline import CONFIG_RESOLVED, BuildError
from ..state_store import record_decision

logger = logging.getLogger(__name__)

MENUCONFIG_PROMPT = (
    "scripts/config not found. Enable HID gadget and netfilter manually in "
    "menuconfig, then exit + save. Press Enter to continue..."
)


class ResolveConfigStep:
    step_id = "30_resolve_config"
    phase = CONFIG_RESOLVED

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        kdir = ctx.kernel_dir
        if not kdir.is_dir():
            raise BuildError(f"Kernel source missing: {kdir}")

        env = ctx.toolchain.environ()

        def make(*targets: str, interactive: bool = False) -> None:
            run_cmd(ctx.make_argv(*targets), cwd=kdir, env=env, interactive=interactive)

        if ctx.cfg.mrproper:
            logger.info("Cleaning old build artifacts (mrproper)...")
            make("mrproper")

        choice = select_defconfig(
            kdir,
            device=ctx.cfg.device,
            arch=ctx.cfg.arch,
            sibling=ctx.cfg.sibling_defconfig,
            generate=lambda: make("defconfig"),
        )
        record_decision(state, "defconfig", {"tier": choice.tier, "name": choice.name})
        logger.info("Using defconfig: %s (%s)", choice.name, choice.tier)
        make(choice.name)

        features = ctx.cfg.features
        helper = config_helper(kdir)
        if helper is not None:
            logger.info("Enabling %d NetHunter options in .config", len(features))
            enable_features(kdir, features, helper=helper)
            record_decision(state, "config_mutation", "scripts/config")
        else:
            logger.warning("scripts/config not found; falling back to menuconfig")
            ctx.prompt(MENUCONFIG_PROMPT)
            make("menuconfig", interactive=True)
            record_decision(state, "config_mutation", "menuconfig")

        logger.info("Finalizing .config with olddefconfig...")
        make("olddefconfig")

        dot_config = kdir / ".config"
        if dot_config.is_file():
            dropped = missing_features(dot_config, features)
            for key in dropped:
                logger.warning("CONFIG_%s not enabled after olddefconfig (unmet dependencies?)", key)
            record_decision(state, "dropped_features", dropped)
        return state
