from fastapi import APIRouter, Depends
from project_partner.database.supabase_client import get_supabase
from project_partner.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, PhaseOrderingResponse,
    StepInstructionResponse, InstructionLevel
)
from project_partner.modules.projects.service import ProjectService
from project_partner.modules.projects.phase_ordering import (
    enforce_standard_phase_ordering, validate_standard_phase_ordering
)
from project_partner.core.dependencies import get_current_user_id, require_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.get("/catalog", response_model=List[ProjectResponse])
async def list_catalog(
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectService = Depends(get_project_service),
):
    """Published and beta-testing templates users can start runs from."""
    return service.list_catalog()


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    publish_status: Optional[str] = None,
    search: Optional[str] = None,
    user_data: Dict = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    """List every template row, optionally filtered by status or name/description search."""
    return service.list_projects(publish_status=publish_status, search=search)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    """Create a template with the standard foundation phases"""
    return service.create_project(project_data, user_data["id"])


@router.get("/steps/{template_step_id}/instructions", response_model=List[StepInstructionResponse])
async def get_step_instructions(
    template_step_id: str,
    level: Optional[InstructionLevel] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectService = Depends(get_project_service),
):
    """Quick, detailed and contractor instructions for a template step"""
    return service.get_step_instructions(template_step_id, level)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project(project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    """Update template metadata"""
    return service.update_project(project_id, project_data)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    service.delete_project(project_id)
    return None


@router.post("/{project_id}/rebuild-phases", response_model=ProjectResponse)
async def rebuild_phases(
    project_id: str,
    user_data: Dict = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    """Regenerate the phases JSON from project_phases / template_operations / template_steps"""
    return service.rebuild_phases(project_id)


@router.get("/{project_id}/phase-ordering", response_model=PhaseOrderingResponse)
async def check_phase_ordering(
    project_id: str,
    user_data: Dict = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    """Validate standard phase positions and return the phases in enforced order."""
    phases = service.get_project(project_id).phases
    is_valid, errors = validate_standard_phase_ordering(phases)
    return PhaseOrderingResponse(
        is_valid=is_valid,
        errors=errors,
        phases=enforce_standard_phase_ordering(phases),
    )
