from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BuildCtx
from ..lib.git import ensure_repo
from ..pipeline import DEPS_FETCHED
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class FetchSourcesStep:
    step_id = "10_fetch_sources"
    phase = DEPS_FETCHED

    def run(self, ctx: BuildCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cloned = []
        for repo in ctx.cfg.repos:
            if ensure_repo(repo.url, ctx.repo_dir(repo.name), shallow=repo.shallow):
                cloned.append(repo.name)
        record_decision(state, "cloned_repos", cloned)
        return state
