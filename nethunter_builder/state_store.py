from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("YAML run record requested but PyYAML is not available.") from e
    return yaml


def load_state(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}

    text = path.read_text(encoding="utf-8")
    if _detect_format(path) == "json":
        data = json.loads(text)
    else:
        data = _yaml().safe_load(text) or {}

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")
    return data


def save_state(path: Path, state: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if _detect_format(path) == "json":
        path.write_text(json.dumps(state, indent=2, sort_keys=True, default=str) + "\n", encoding="utf-8")
    else:
        path.write_text(_yaml().safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")


def new_run_state() -> Dict[str, Any]:
    """Start a fresh run record.

    Completion marks are per run; skipping is never driven by them.
    """

    state: Dict[str, Any] = {
        "artifacts": {},
        "decisions": {},
        "execution": {
            "phase": None,
            "current_step": None,
            "completed_steps": [],
            "errors": [],
        },
    }
    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    completed = state.setdefault("execution", {}).setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def record_error(state: Dict[str, Any], step_id: str, error: BaseException) -> None:
    state.setdefault("execution", {}).setdefault("errors", []).append({"step": step_id, "error": str(error)})


def record_artifact(state: Dict[str, Any], name: str, path: Path) -> None:
    state.setdefault("artifacts", {})[name] = str(path)


def record_decision(state: Dict[str, Any], name: str, value: Any) -> None:
    state.setdefault("decisions", {})[name] = value
