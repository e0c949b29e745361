from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .state_store import mark_step_completed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    step_id: str
    changed: bool
    detail: str = ""


class Step(Protocol):
    """A single idempotent step: a no-op when its target is already present."""

    step_id: str

    def run(self, state: Dict[str, Any]) -> StepResult:
        ...


@dataclass(frozen=True)
class StepFailure:
    step_id: str
    error: str
    returncode: int = 1


@dataclass
class PipelineResult:
    state: Dict[str, Any]
    changed_steps: List[str] = field(default_factory=list)
    unchanged_steps: List[str] = field(default_factory=list)
    failure: Optional[StepFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _select(steps: Sequence[Step], start_at: Optional[str], stop_after: Optional[str]) -> List[Step]:
    ids = [s.step_id for s in steps]
    for wanted in (start_at, stop_after):
        if wanted is not None and wanted not in ids:
            raise ValueError(f"Unknown step id {wanted!r} (known: {', '.join(ids)})")

    selected: List[Step] = []
    started = start_at is None
    for step in steps:
        if not started and step.step_id == start_at:
            started = True
        if started:
            selected.append(step)
        if stop_after is not None and step.step_id == stop_after:
            break
    return selected


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order, stopping at the first failing one.

    Nothing is rolled back: steps that completed before a failure stay
    installed, and a re-run skips them through their own presence checks.
    """

    result = PipelineResult(state=state)

    for step in _select(steps, start_at, stop_after):
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.info("Running step %s", step.step_id)

        try:
            outcome = step.run(state)
        except (RuntimeError, OSError, ValueError) as e:
            rc = getattr(e, "returncode", None)
            result.failure = StepFailure(
                step_id=step.step_id,
                error=str(e),
                returncode=rc if isinstance(rc, int) and rc != 0 else 1,
            )
            logger.error("Step %s failed: %s", step.step_id, e)
            return result

        mark_step_completed(state, step.step_id)
        if outcome.changed:
            result.changed_steps.append(step.step_id)
        else:
            result.unchanged_steps.append(step.step_id)
        if outcome.detail:
            logger.info("%s: %s", step.step_id, outcome.detail)

    state.setdefault("execution", {})["current_step"] = None
    return result
