"""
Progress calculation for project runs.

Every phase counts, including the standard Kickoff / Planning / Ordering / Close Project
phases, so progress is completed steps over all steps in the snapshot.
"""
import math
from typing import Any, Dict, Iterable, List, Optional


def _iter_steps(phases: List[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    for phase in phases or []:
        for operation in phase.get("operations") or []:
            for step in operation.get("steps") or []:
                yield step


def round_progress(value: Optional[float]) -> int:
    """Half-up rounding; None counts as 0."""
    if value is None:
        return 0
    return int(math.floor(float(value) + 0.5))


def workflow_step_counts(phases: List[Dict[str, Any]], completed_steps: List[str]) -> Dict[str, int]:
    completed_ids = set(completed_steps or [])
    total = 0
    completed = 0
    for step in _iter_steps(phases):
        total += 1
        if step.get("id") in completed_ids:
            completed += 1
    return {"total": total, "completed": completed}


def calculate_progress(phases: List[Dict[str, Any]], completed_steps: List[str]) -> int:
    counts = workflow_step_counts(phases, completed_steps)
    if counts["total"] == 0:
        return 0
    return round_progress(counts["completed"] / counts["total"] * 100)
