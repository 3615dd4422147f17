"""
Tests for the DIY profile survey.
"""

import pytest
from fastapi import HTTPException

from project_partner.modules.profiles.schemas import SurveyAnswers
from project_partner.modules.profiles.service import ProfileService, validate_survey


def _answers(**overrides):
    data = {
        "skill_level": "confident",
        "avoid_projects": ["Roofing", " "],
        "physical_capability": "Can lift 50 lbs",
        "space_type": "House",
        "current_goal": "Refresh the kitchen",
    }
    data.update(overrides)
    return SurveyAnswers(**data)


class TestValidateSurvey:

    def test_valid_answers(self):
        validate_survey(_answers())

    def test_unknown_skill_level(self):
        with pytest.raises(HTTPException) as exc:
            validate_survey(_answers(skill_level="expert"))
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("field", ["physical_capability", "space_type", "current_goal"])
    def test_required_fields(self, field):
        with pytest.raises(HTTPException) as exc:
            validate_survey(_answers(**{field: "   "}))
        assert exc.value.detail == f"{field} is required"

    def test_avoid_projects_may_be_empty(self):
        validate_survey(_answers(avoid_projects=[]))


class TestProfileService:

    def test_survey_not_completed(self, supabase):
        supabase.seed("profiles", {"id": "p1", "user_id": "user-1"})
        survey = ProfileService(supabase).get_survey("user-1")
        assert survey.completed is False
        assert survey.avoid_projects == []

    def test_missing_profile_reads_as_not_completed(self, supabase):
        assert ProfileService(supabase).get_survey("user-1").completed is False

    def test_submit_survey(self, supabase):
        supabase.seed("profiles", {"id": "p1", "user_id": "user-1"})
        survey = ProfileService(supabase).submit_survey("user-1", _answers())

        assert survey.completed is True
        assert survey.skill_level == "confident"
        assert survey.avoid_projects == ["Roofing"]
        assert survey.survey_completed_at is not None

    def test_submit_without_profile_is_404(self, supabase):
        with pytest.raises(HTTPException) as exc:
            ProfileService(supabase).submit_survey("user-1", _answers())
        assert exc.value.status_code == 404
