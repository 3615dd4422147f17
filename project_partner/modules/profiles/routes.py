from fastapi import APIRouter, Depends
from project_partner.database.supabase_client import get_supabase
from project_partner.modules.profiles.schemas import SurveyAnswers, SurveyResponse
from project_partner.modules.profiles.service import ProfileService
from project_partner.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me/survey", response_model=SurveyResponse)
async def get_survey(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
):
    return service.get_survey(user_data["id"])


@router.put("/me/survey", response_model=SurveyResponse)
async def submit_survey(
    answers: SurveyAnswers,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
):
    """Save the DIY survey answers and mark the survey completed"""
    return service.submit_survey(user_data["id"], answers)
