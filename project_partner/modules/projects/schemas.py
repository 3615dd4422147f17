from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: List[str] = []
    skill_level: Optional[str] = None
    effort_level: Optional[str] = None
    scaling_unit: Optional[str] = None
    project_challenges: Optional[str] = None
    estimated_time_per_unit: Optional[float] = None
    project_type: Optional[str] = None  # primary | secondary


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[List[str]] = None
    scaling_unit: Optional[str] = None
    estimated_time_per_unit: Optional[float] = None
    skill_level: Optional[str] = None
    effort_level: Optional[str] = None
    estimated_time: Optional[str] = None
    project_challenges: Optional[str] = None
    image: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    category: List[str] = []
    publish_status: Optional[str] = None
    project_type: str = "Primary"
    project_challenges: Optional[str] = None
    image: Optional[str] = None
    skill_level: Optional[str] = None
    effort_level: Optional[str] = None
    estimated_time: Optional[str] = None
    estimated_total_time: Optional[str] = None
    typical_project_size: Optional[str] = None
    scaling_unit: Optional[str] = None
    estimated_time_per_unit: Optional[float] = None
    revision_number: Optional[int] = None
    parent_project_id: Optional[str] = None
    is_current_version: Optional[bool] = None
    phases: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PhaseOrderingResponse(BaseModel):
    is_valid: bool
    errors: List[str]
    phases: List[Dict[str, Any]]


InstructionLevel = Literal["quick", "detailed", "contractor"]


class StepInstructionResponse(BaseModel):
    id: str
    template_step_id: str
    instruction_level: InstructionLevel
    text: str = ""
    sections: List[Any] = []
    photos: List[Any] = []
    videos: List[Dict[str, Any]] = []  # only trusted https YouTube / Vimeo urls
    links: List[Any] = []
