from fastapi import APIRouter, Depends
from project_partner.database.supabase_client import get_supabase
from project_partner.modules.project_runs.schemas import (
    ProjectRunCreate, ProjectRunAdd, ProjectRunUpdate, ProjectRunResponse,
    CompleteStepRequest, ProgressResponse
)
from project_partner.modules.project_runs.service import ProjectRunService
from project_partner.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/project-runs", tags=["project-runs"])


def get_project_run_service(supabase: Client = Depends(get_supabase)) -> ProjectRunService:
    return ProjectRunService(supabase)


@router.get("", response_model=List[ProjectRunResponse])
async def list_runs(
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    """List the current user's project runs, newest first"""
    return service.list_runs(user_data["id"])


@router.post("", response_model=ProjectRunResponse, status_code=201)
async def create_run(
    run_data: ProjectRunCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    """
    Start a project run from a template.
    The run is a snapshot of the template phase tree; runs created without
    a complete copy of the phases are deleted and the request fails with 422.
    """
    return service.create_run(run_data, user_data["id"])


@router.post("/add", response_model=ProjectRunResponse, status_code=201)
async def add_run(
    run_data: ProjectRunAdd,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    """Create a run with explicit dates and metadata, creating a default home when needed"""
    return service.add_run(run_data, user_data["id"])


@router.get("/{run_id}", response_model=ProjectRunResponse)
async def get_run(
    run_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    return service.get_run(run_id, user_data["id"])


@router.put("/{run_id}", response_model=ProjectRunResponse)
async def update_run(
    run_id: str,
    run_data: ProjectRunUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    """Update a project run; repeated identical updates are not written again"""
    updated = service.update_run(run_id, run_data, user_data["id"])
    return updated or service.get_run(run_id, user_data["id"])


@router.post("/{run_id}/complete-step", response_model=ProjectRunResponse)
async def complete_step(
    run_id: str,
    request: CompleteStepRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    return service.complete_step(run_id, request.step_id, user_data["id"])


@router.get("/{run_id}/progress", response_model=ProgressResponse)
async def get_progress(
    run_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    return service.get_progress(run_id, user_data["id"])


@router.post("/{run_id}/refresh", response_model=ProjectRunResponse)
async def refresh_from_template(
    run_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    """Pull the latest template content into the run"""
    return service.refresh_from_template(run_id, user_data["id"])


@router.delete("/{run_id}", status_code=204)
async def delete_run(
    run_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectRunService = Depends(get_project_run_service),
):
    service.delete_run(run_id, user_data["id"])
    return None
