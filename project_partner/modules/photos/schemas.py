from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

PrivacyLevel = Literal["personal", "project_partner", "public"]


class PhotoMetadata(BaseModel):
    project_run_id: str
    step_id: str
    step_name: str = ""
    template_id: Optional[str] = None
    phase_id: Optional[str] = None
    phase_name: Optional[str] = None
    operation_id: Optional[str] = None
    operation_name: Optional[str] = None
    caption: Optional[str] = None
    photo_name: Optional[str] = None
    privacy_level: PrivacyLevel = "project_partner"


class PhotoResponse(BaseModel):
    id: str
    user_id: str
    project_run_id: str
    template_id: Optional[str] = None
    step_id: str
    step_name: Optional[str] = None
    phase_id: Optional[str] = None
    phase_name: Optional[str] = None
    operation_id: Optional[str] = None
    operation_name: Optional[str] = None
    storage_path: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    privacy_level: str
    caption: Optional[str] = None
    photo_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SignedUrlResponse(BaseModel):
    photo_id: str
    url: str
    expires_in: int


class ProjectPhotoStats(BaseModel):
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    photo_count: int = 0
    public_count: int = 0
    project_partner_count: int = 0
    personal_count: int = 0
