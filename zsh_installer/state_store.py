"""Run record: what the last run decided, ran, skipped and where it failed.

The record is informational. Every run re-detects what is installed instead
of trusting completed_steps.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .install_config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path).expanduser()
    if not p.exists():
        return {}

    if _detect_format(p) == "json":
        data = json.loads(p.read_text(encoding="utf-8"))
    else:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "json":
        p.write_text(json.dumps(state, indent=2, sort_keys=True, default=str) + "\n", encoding="utf-8")
    else:
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding stored values)."""

    state.setdefault("version", 1)
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    for key, value in DEFAULT_CONFIG.items():
        cfg.setdefault(key, copy.deepcopy(value))

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])
    exe.setdefault("decisions", {})

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value
