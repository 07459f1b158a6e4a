from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .build_config import load_build_config
from .context import BuildCtx, today_stamp
from .logging_utils import LOG_FILE_NAME, configure_logging
from .pipeline import PipelineResult, Stage, run_pipeline
from .state_store import load_state, new_run_state, save_state
from .steps import (
    AssembleInstallerStep,
    BuildKernelStep,
    FetchSourcesStep,
    PackageKernelStep,
    PrepareWorkspaceStep,
    ProvisionToolchainStep,
    ReportStep,
    ResolveConfigStep,
)

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "build_state.json"


def build_steps() -> List[Stage]:
    return [
        PrepareWorkspaceStep(),
        FetchSourcesStep(),
        ProvisionToolchainStep(),
        ResolveConfigStep(),
        BuildKernelStep(),
        PackageKernelStep(),
        AssembleInstallerStep(),
        ReportStep(),
    ]


def run(
    *,
    config_path: Optional[str] = None,
    workspace: Optional[str] = None,
    log_path: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    verbose: bool = False,
    steps: Optional[List[Stage]] = None,
) -> PipelineResult:
    """Run the build pipeline and persist the run record in the workspace."""

    cfg = load_build_config(config_path)
    ws = Path(workspace or cfg.workspace).expanduser().resolve()

    actual_log_path = configure_logging(log_path=log_path or str(ws / LOG_FILE_NAME), verbose=verbose)

    state_path = ws / STATE_FILE_NAME
    previous = load_state(state_path)
    prev_phase = (previous.get("execution") or {}).get("phase")
    if prev_phase:
        logger.info("Previous run ended in phase %s", prev_phase)

    state = new_run_state()
    state["execution"]["log_path"] = actual_log_path

    ctx = BuildCtx(cfg=cfg, workspace=ws, build_date=today_stamp())
    logger.info("Target device %s, workspace %s, build date %s", cfg.device, ws, ctx.build_date)

    try:
        result = run_pipeline(
            ctx=ctx,
            state=state,
            steps=steps if steps is not None else build_steps(),
            start_at=start_at,
            stop_after=stop_after,
        )
        state = result.state
    finally:
        save_state(state_path, state)

    if result.ok:
        logger.info("Pipeline finished in phase %s", result.phase)
    else:
        logger.error("Pipeline aborted in %s: %s", result.failed_step, result.error)
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="nethunter-flame-build")
    p.add_argument("--config", default=None, help="YAML build config (default: ./build_config.yaml if present)")
    p.add_argument("--workspace", default=None, help="Workspace directory (default from config)")
    p.add_argument("--log", default=None, help="Log file (default: <workspace>/nethunter-build.log)")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_resolve_config)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Echo captured command output to the console"
    )

    args = p.parse_args(argv)

    try:
        result = run(
            config_path=args.config,
            workspace=args.workspace,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            verbose=args.verbose,
        )
    except ValueError as e:
        p.error(str(e))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
