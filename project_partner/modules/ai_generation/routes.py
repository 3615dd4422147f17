from fastapi import APIRouter, Depends
from project_partner.database.supabase_client import get_supabase
from project_partner.modules.ai_generation.schemas import (
    CostEstimateRequest, GenerationRequest, GenerationResponse, ImportRequest, ImportResult
)
from project_partner.modules.ai_generation.service import AIGenerationService
from project_partner.modules.ai_generation.import_pipeline import ProjectImportPipeline
from project_partner.core.dependencies import require_admin
from supabase import Client
from typing import Dict, Any

router = APIRouter(prefix="/ai", tags=["ai-generation"])


def get_ai_service(supabase: Client = Depends(get_supabase)) -> AIGenerationService:
    return AIGenerationService(supabase)


@router.post("/estimate")
async def estimate_cost(
    request: CostEstimateRequest,
    user_data: Dict = Depends(require_admin),
    service: AIGenerationService = Depends(get_ai_service),
) -> Dict[str, Any]:
    """Estimate scraping and token cost before generating (admin only)"""
    return service.estimate_cost(request)


# Sync handlers run in the threadpool; the OpenAI call blocks for up to ai_request_timeout
@router.post("/generate", response_model=GenerationResponse)
def generate_project(
    request: GenerationRequest,
    user_data: Dict = Depends(require_admin),
    service: AIGenerationService = Depends(get_ai_service),
):
    """Generate a project structure with the configured OpenAI model (admin only)"""
    return service.generate(request)


@router.post("/import", response_model=ImportResult)
def import_generated_project(
    request: ImportRequest,
    user_data: Dict = Depends(require_admin),
    supabase: Client = Depends(get_supabase),
):
    """Save a generated structure as a new draft project (admin only)"""
    pipeline = ProjectImportPipeline(supabase)
    return pipeline.run(
        request.project_name,
        request.project_description,
        request.category,
        request.structure,
        user_data["id"],
    )
