"""
Standard phase ordering.

Kickoff, Planning and Ordering open every workflow in that order and Close Project
ends it. Custom and linked (incorporated) phases sit in between in whatever order
the admin arranged them.
"""
from typing import Any, Dict, List, Optional, Tuple

KICKOFF = "Kickoff"
PLANNING = "Planning"
ORDERING = "Ordering"
CLOSE_PROJECT = "Close Project"
STANDARD_PHASE_NAMES = [KICKOFF, PLANNING, ORDERING, CLOSE_PROJECT]


def _is_linked(phase: Dict[str, Any]) -> bool:
    return bool(phase.get("isLinked") or phase.get("is_linked"))


def _find_standard(phases: List[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    return next((p for p in phases if p.get("name") == name and not _is_linked(p)), None)


def _index_of_standard(phases: List[Dict[str, Any]], name: str) -> int:
    for i, p in enumerate(phases):
        if p.get("name") == name and not _is_linked(p):
            return i
    return -1


def enforce_standard_phase_ordering(phases: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    opening = [_find_standard(phases, n) for n in (KICKOFF, PLANNING, ORDERING)]
    close_project = _find_standard(phases, CLOSE_PROJECT)
    middle = [p for p in phases if _is_linked(p) or p.get("name") not in STANDARD_PHASE_NAMES]

    ordered = [p for p in opening if p is not None]
    ordered.extend(middle)
    if close_project is not None:
        ordered.append(close_project)
    return ordered


def get_standard_phase_expected_position(phase_name: str, total_phases: int) -> int:
    if phase_name == CLOSE_PROJECT:
        return total_phases - 1
    try:
        return [KICKOFF, PLANNING, ORDERING].index(phase_name)
    except ValueError:
        return -1


def validate_standard_phase_ordering(phases: List[Dict[str, Any]]) -> Tuple[bool, List[str]]:
    errors = []
    messages = {
        KICKOFF: "Kickoff phase must be the first phase",
        PLANNING: "Planning phase must be the second phase",
        ORDERING: "Order phase must be the third phase",
        CLOSE_PROJECT: "Close Project must be the last phase",
    }
    for name in STANDARD_PHASE_NAMES:
        index = _index_of_standard(phases, name)
        if index != -1 and index != get_standard_phase_expected_position(name, len(phases)):
            errors.append(messages[name])

    return len(errors) == 0, errors
