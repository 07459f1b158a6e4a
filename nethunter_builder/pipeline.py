from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import BuildCtx
from .state_store import mark_step_completed, record_error

logger = logging.getLogger(__name__)

INIT = "Init"
DEPS_FETCHED = "DepsFetched"
TOOLCHAIN_READY = "ToolchainReady"
CONFIG_RESOLVED = "ConfigResolved"
BUILT = "Built"
KERNEL_PACKAGED = "KernelPackaged"
INSTALLER_ASSEMBLED = "InstallerAssembled"
REPORTED = "Reported"
ABORTED = "Aborted"

PHASES = [
    INIT,
    DEPS_FETCHED,
    TOOLCHAIN_READY,
    CONFIG_RESOLVED,
    BUILT,
    KERNEL_PACKAGED,
    INSTALLER_ASSEMBLED,
    REPORTED,
]


class BuildError(RuntimeError):
    """A stage postcondition failed."""


class Stage(Protocol):
    """A single idempotent stage.

    ``phase`` is the pipeline phase reached once the stage succeeds
    (None for stages that do not advance it).
    """

    step_id: str
    phase: Optional[str]

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    phase: str
    ran_steps: List[str]
    failed_step: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _advance(current: str, nxt: Optional[str]) -> str:
    if nxt is None:
        return current
    if PHASES.index(nxt) < PHASES.index(current):
        raise RuntimeError(f"Illegal phase transition {current} -> {nxt}")
    return nxt


def run_pipeline(
    *,
    ctx: BuildCtx,
    state: Dict[str, Any],
    steps: Sequence[Stage],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run stages in order; the first failure aborts the run."""

    ran: List[str] = []
    phase = INIT
    exe = state.setdefault("execution", {})
    exe["phase"] = phase

    known = [s.step_id for s in steps]
    for requested in (start_at, stop_after):
        if requested is not None and requested not in known:
            raise ValueError(f"Unknown step {requested!r}")

    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        exe = state.setdefault("execution", {})
        exe["current_step"] = step.step_id
        logger.info("Running step %s", step.step_id)
        try:
            state = step.run(ctx, state)
            next_phase = _advance(phase, getattr(step, "phase", None))
        except Exception as e:
            logger.exception("Step %s failed", step.step_id)
            exe = state.setdefault("execution", {})
            record_error(state, step.step_id, e)
            exe["phase"] = ABORTED
            exe["current_step"] = None
            return PipelineResult(state=state, phase=ABORTED, ran_steps=ran, failed_step=step.step_id, error=e)

        exe = state.setdefault("execution", {})
        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)
        phase = next_phase
        exe["phase"] = phase

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    exe["current_step"] = None
    return PipelineResult(state=state, phase=phase, ran_steps=ran)
