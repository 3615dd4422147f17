from supabase import Client
from project_partner.modules.profiles.schemas import SurveyAnswers, SurveyResponse, SKILL_LEVELS
from project_partner.core.sanitization import sanitize_input
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

SURVEY_COLUMNS = "skill_level, avoid_projects, physical_capability, space_type, current_goal, survey_completed_at"


def validate_survey(answers: SurveyAnswers) -> None:
    if answers.skill_level not in SKILL_LEVELS:
        raise HTTPException(
            status_code=400,
            detail=f"skill_level must be one of: {', '.join(SKILL_LEVELS)}"
        )
    for field in ("physical_capability", "space_type", "current_goal"):
        if not getattr(answers, field).strip():
            raise HTTPException(status_code=400, detail=f"{field} is required")


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_survey(self, user_id: str) -> SurveyResponse:
        try:
            result = self.supabase.table("profiles")\
                .select(SURVEY_COLUMNS)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error loading profile: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        row = (result.data if result else None) or {}
        return SurveyResponse(
            completed=bool(row.get("survey_completed_at")),
            skill_level=row.get("skill_level"),
            avoid_projects=row.get("avoid_projects") or [],
            physical_capability=row.get("physical_capability"),
            space_type=row.get("space_type"),
            current_goal=row.get("current_goal"),
            survey_completed_at=row.get("survey_completed_at"),
        )

    def submit_survey(self, user_id: str, answers: SurveyAnswers) -> SurveyResponse:
        validate_survey(answers)
        try:
            result = self.supabase.table("profiles").update({
                "skill_level": answers.skill_level,
                "avoid_projects": [sanitize_input(p) for p in answers.avoid_projects if p and p.strip()],
                "physical_capability": sanitize_input(answers.physical_capability),
                "space_type": sanitize_input(answers.space_type),
                "current_goal": sanitize_input(answers.current_goal),
                "survey_completed_at": datetime.now(timezone.utc).isoformat(),
            }).eq("user_id", user_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving profile: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return self.get_survey(user_id)
