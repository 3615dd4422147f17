from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from project_partner.database.supabase_client import get_service_supabase
from project_partner.modules.library.schemas import (
    ToolCreate, ToolUpdate, ToolResponse, MaterialCreate, MaterialUpdate, MaterialResponse,
    VariationCreate, VariationUpdate, VariationResponse, MatchRequest, MatchResult,
    ToolImportResponse, ItemType
)
from project_partner.modules.library.service import LibraryService
from project_partner.core.dependencies import get_current_user_id, require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/library", tags=["library"])


def get_library_service(supabase: Client = Depends(get_service_supabase)) -> LibraryService:
    return LibraryService(supabase)


@router.get("/tools", response_model=List[ToolResponse])
async def list_tools(
    user_data: Dict = Depends(get_current_user_id),
    service: LibraryService = Depends(get_library_service),
):
    return service.list_tools()


@router.post("/tools", response_model=ToolResponse, status_code=201)
async def create_tool(
    tool_data: ToolCreate,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    return service.create_tool(tool_data)


@router.post("/tools/import", response_model=ToolImportResponse)
async def import_tools(
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    """
    Import a tool list from an .xlsx spreadsheet.
    Tools are upserted by name; brand/model/attribute columns become variations.
    """
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Only .xlsx files are accepted")
    content = await file.read()
    return service.import_tools_from_excel(content)


@router.delete("/tools", status_code=204)
async def clear_all_tools(
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    """Remove every tool with its variations, models and pricing"""
    service.clear_all_tools()
    return None


@router.put("/tools/{tool_id}", response_model=ToolResponse)
async def update_tool(
    tool_id: str,
    tool_data: ToolUpdate,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    return service.update_tool(tool_id, tool_data)


@router.delete("/tools/{tool_id}", status_code=204)
async def delete_tool(
    tool_id: str,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    service.delete_tool(tool_id)
    return None


@router.get("/materials", response_model=List[MaterialResponse])
async def list_materials(
    user_data: Dict = Depends(get_current_user_id),
    service: LibraryService = Depends(get_library_service),
):
    return service.list_materials()


@router.post("/materials", response_model=MaterialResponse, status_code=201)
async def create_material(
    material_data: MaterialCreate,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    return service.create_material(material_data)


@router.delete("/materials", status_code=204)
async def clear_all_materials(
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    service.clear_all_materials()
    return None


@router.put("/materials/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: str,
    material_data: MaterialUpdate,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    return service.update_material(material_id, material_data)


@router.delete("/materials/{material_id}", status_code=204)
async def delete_material(
    material_id: str,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    service.delete_material(material_id)
    return None


@router.get("/variations", response_model=List[VariationResponse])
async def list_variations(
    core_item_id: str,
    item_type: ItemType,
    user_data: Dict = Depends(get_current_user_id),
    service: LibraryService = Depends(get_library_service),
):
    return service.list_variations(core_item_id, item_type)


@router.post("/variations", response_model=VariationResponse, status_code=201)
async def create_variation(
    variation_data: VariationCreate,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    return service.create_variation(variation_data)


@router.delete("/variations", status_code=204)
async def clear_variations(
    item_type: ItemType,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    service.clear_variations(item_type)
    return None


@router.put("/variations/{variation_id}", response_model=VariationResponse)
async def update_variation(
    variation_id: str,
    variation_data: VariationUpdate,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    return service.update_variation(variation_id, variation_data)


@router.delete("/variations/{variation_id}", status_code=204)
async def delete_variation(
    variation_id: str,
    user_data: Dict = Depends(require_admin),
    service: LibraryService = Depends(get_library_service),
):
    service.delete_variation(variation_id)
    return None


@router.post("/match", response_model=List[MatchResult])
async def match_items(
    request: MatchRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: LibraryService = Depends(get_library_service),
):
    """Match free-text tool or material names against the library"""
    return service.match_items(request.names, request.kind)
