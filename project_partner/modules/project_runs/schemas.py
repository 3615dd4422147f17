from pydantic import BaseModel
from typing import Optional, Dict, Any, List, Union
from datetime import datetime


class ProjectRunCreate(BaseModel):
    template_id: str
    custom_name: Optional[str] = None
    home_id: Optional[str] = None


class ProjectRunAdd(BaseModel):
    """Full "add project run" payload; metadata fields are only written when supplied."""
    template_id: str
    name: str
    start_date: datetime
    plan_end_date: datetime
    description: Optional[str] = None
    category: Optional[Union[List[str], str]] = None
    effort_level: Optional[str] = None
    skill_level: Optional[str] = None
    estimated_time: Optional[str] = None
    estimated_total_time: Optional[str] = None
    typical_project_size: Optional[str] = None
    scaling_unit: Optional[str] = None
    item_type: Optional[str] = None
    project_challenges: Optional[str] = None


class ProjectRunUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    plan_end_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    project_leader: Optional[str] = None
    accountability_partner: Optional[str] = None
    custom_project_name: Optional[str] = None
    home_id: Optional[str] = None
    current_phase_id: Optional[str] = None
    current_operation_id: Optional[str] = None
    current_step_id: Optional[str] = None
    completed_steps: Optional[List[str]] = None
    step_completion_percentages: Optional[Any] = None
    progress: Optional[float] = None
    phases: Optional[List[Dict[str, Any]]] = None
    category: Optional[Union[List[str], str]] = None
    effort_level: Optional[str] = None
    skill_level: Optional[str] = None
    estimated_time: Optional[str] = None
    customization_decisions: Optional[Any] = None
    instruction_level_preference: Optional[str] = None
    budget_data: Optional[Any] = None
    issue_reports: Optional[Any] = None
    time_tracking: Optional[Any] = None
    project_photos: Optional[Any] = None
    phase_ratings: Optional[Any] = None
    survey_data: Optional[Any] = None
    feedback_data: Optional[Any] = None
    schedule_events: Optional[Any] = None
    shopping_checklist_data: Optional[Any] = None
    progress_reporting_style: Optional[str] = None
    initial_budget: Optional[str] = None
    initial_timeline: Optional[str] = None
    initial_sizing: Optional[str] = None
    schedule_optimization_method: Optional[str] = None


class CompleteStepRequest(BaseModel):
    step_id: str


class ProjectRunResponse(BaseModel):
    id: str
    template_id: Optional[str] = None
    name: str = ""
    description: str = ""
    custom_project_name: Optional[str] = None
    home_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    plan_end_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    project_leader: Optional[str] = None
    accountability_partner: Optional[str] = None
    current_phase_id: Optional[str] = None
    current_operation_id: Optional[str] = None
    current_step_id: Optional[str] = None
    completed_steps: List[str] = []
    progress: int = 0
    phases: List[Dict[str, Any]] = []
    category: Optional[Union[List[str], str]] = None
    effort_level: Optional[str] = None
    skill_level: Optional[str] = None
    estimated_time: Optional[str] = None
    scaling_unit: Optional[str] = None
    project_challenges: Optional[str] = None
    customization_decisions: Optional[Any] = None
    budget_data: Optional[Any] = None
    issue_reports: Optional[Any] = None
    time_tracking: Optional[Any] = None
    instruction_level_preference: str = "detailed"
    progress_reporting_style: str = "linear"
    initial_budget: Optional[str] = None
    initial_timeline: Optional[str] = None
    initial_sizing: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProgressResponse(BaseModel):
    progress: int
    total_steps: int
    completed_steps: int
    kickoff_complete: bool
