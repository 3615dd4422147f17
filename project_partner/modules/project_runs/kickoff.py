from typing import List

# Steps of the standard Kickoff phase: overview, partner agreement, planning
KICKOFF_STEP_IDS = ["kickoff-step-1", "kickoff-step-2", "kickoff-step-3"]


def is_kickoff_complete(completed_steps: List[str]) -> bool:
    return all(step_id in completed_steps for step_id in KICKOFF_STEP_IDS)
