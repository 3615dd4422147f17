from fastapi import APIRouter, Depends
from project_partner.database.supabase_client import get_service_supabase
from project_partner.modules.revisions.schemas import (
    RevisionCreate, RevisionCreateResponse, RevisionResponse, StatusChangeRequest, StatusCountsResponse
)
from project_partner.modules.revisions.service import RevisionService
from project_partner.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/revisions", tags=["revisions"])


def get_revision_service(supabase: Client = Depends(get_service_supabase)) -> RevisionService:
    return RevisionService(supabase)


@router.get("/status-counts", response_model=StatusCountsResponse)
async def status_counts(
    user_data: Dict = Depends(require_admin),
    service: RevisionService = Depends(get_revision_service),
):
    return service.status_counts()


@router.get("/{project_id}", response_model=List[RevisionResponse])
async def list_revisions(
    project_id: str,
    user_data: Dict = Depends(require_admin),
    service: RevisionService = Depends(get_revision_service),
):
    """List every revision in the project's lineage"""
    return service.list_revisions(project_id)


@router.post("/{project_id}", response_model=RevisionCreateResponse, status_code=201)
async def create_revision(
    project_id: str,
    revision_data: RevisionCreate,
    user_data: Dict = Depends(require_admin),
    service: RevisionService = Depends(get_revision_service),
):
    """Copy a template into a new draft revision"""
    return service.create_revision(project_id, revision_data.revision_notes)


@router.put("/{revision_id}/status", response_model=RevisionResponse)
async def change_status(
    revision_id: str,
    change: StatusChangeRequest,
    user_data: Dict = Depends(require_admin),
    service: RevisionService = Depends(get_revision_service),
):
    """Release, publish or archive a revision"""
    return service.change_status(revision_id, change)
