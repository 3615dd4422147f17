from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

PublishStatus = Literal["draft", "beta-testing", "published", "archived"]


class RevisionCreate(BaseModel):
    revision_notes: Optional[str] = None


class RevisionCreateResponse(BaseModel):
    revision_id: str
    message: str


class StatusChangeRequest(BaseModel):
    status: PublishStatus
    release_notes: Optional[str] = None


class RevisionResponse(BaseModel):
    id: str
    name: str
    publish_status: str
    revision_number: Optional[int] = None
    parent_project_id: Optional[str] = None
    is_current_version: Optional[bool] = None
    revision_notes: Optional[str] = None
    release_notes: Optional[str] = None
    beta_released_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StatusCountsResponse(BaseModel):
    draft: int = 0
    beta_testing: int = 0
    published: int = 0
    archived: int = 0
