"""
Tests for run progress calculation and the Kickoff phase helpers.
"""

from conftest import make_phases

from project_partner.modules.project_runs.progress import (
    calculate_progress,
    round_progress,
    workflow_step_counts,
)
from project_partner.modules.project_runs.kickoff import KICKOFF_STEP_IDS, is_kickoff_complete


class TestRoundProgress:

    def test_half_rounds_up(self):
        assert round_progress(12.5) == 13
        assert round_progress(2.5) == 3

    def test_below_half_rounds_down(self):
        assert round_progress(33.33) == 33

    def test_none_is_zero(self):
        assert round_progress(None) == 0


class TestCalculateProgress:

    def test_counts_steps_across_all_phases(self):
        phases = make_phases(2, 1)
        completed = ["phase-0-step-0", "phase-1-step-0"]
        assert workflow_step_counts(phases, completed) == {"total": 3, "completed": 2}
        assert calculate_progress(phases, completed) == 67

    def test_unknown_completed_ids_are_ignored(self):
        phases = make_phases(4)
        assert calculate_progress(phases, ["phase-0-step-0", "not-a-step"]) == 25

    def test_no_phases_or_no_steps(self):
        assert calculate_progress([], ["x"]) == 0
        assert calculate_progress([{"id": "p", "operations": [{"id": "o", "steps": []}]}], []) == 0

    def test_missing_operations_and_steps_keys(self):
        phases = [{"id": "p"}, {"id": "q", "operations": [{"id": "o"}]}]
        assert workflow_step_counts(phases, []) == {"total": 0, "completed": 0}

    def test_all_steps_complete(self):
        phases = make_phases(1, 1)
        assert calculate_progress(phases, ["phase-0-step-0", "phase-1-step-0"]) == 100


class TestKickoff:

    def test_kickoff_completion(self):
        assert is_kickoff_complete(KICKOFF_STEP_IDS + ["other"])
        assert not is_kickoff_complete(KICKOFF_STEP_IDS[:2])
