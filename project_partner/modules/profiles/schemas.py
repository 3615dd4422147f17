from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

SKILL_LEVELS = ["newbie", "confident", "hero"]


class SurveyAnswers(BaseModel):
    skill_level: str
    avoid_projects: List[str] = []
    physical_capability: str
    space_type: str
    current_goal: str


class SurveyResponse(BaseModel):
    completed: bool
    skill_level: Optional[str] = None
    avoid_projects: List[str] = []
    physical_capability: Optional[str] = None
    space_type: Optional[str] = None
    current_goal: Optional[str] = None
    survey_completed_at: Optional[datetime] = None
