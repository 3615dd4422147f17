from fastapi import APIRouter, Depends, UploadFile, File, Form
from project_partner.database.supabase_client import get_supabase
from project_partner.modules.photos.schemas import (
    PhotoMetadata, PhotoResponse, SignedUrlResponse, ProjectPhotoStats, PrivacyLevel
)
from project_partner.modules.photos.service import PhotoService
from project_partner.core.dependencies import get_current_user_id, require_admin, is_admin, get_access_cache
from supabase import Client
from typing import List, Optional, Dict, Any

router = APIRouter(prefix="/photos", tags=["photos"])


def get_photo_service(supabase: Client = Depends(get_supabase)) -> PhotoService:
    return PhotoService(supabase)


@router.post("", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    project_run_id: str = Form(...),
    step_id: str = Form(...),
    step_name: str = Form(""),
    template_id: Optional[str] = Form(None),
    phase_id: Optional[str] = Form(None),
    phase_name: Optional[str] = Form(None),
    operation_id: Optional[str] = Form(None),
    operation_name: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    photo_name: Optional[str] = Form(None),
    privacy_level: PrivacyLevel = Form("project_partner"),
    user_data: Dict = Depends(get_current_user_id),
    service: PhotoService = Depends(get_photo_service),
):
    """
    Upload a step photo (JPG, PNG, WEBP or GIF, 5MB max).
    The object is stored under <user>/<run>/ and removed again if the metadata row cannot be saved.
    """
    metadata = PhotoMetadata(
        project_run_id=project_run_id,
        step_id=step_id,
        step_name=step_name,
        template_id=template_id,
        phase_id=phase_id,
        phase_name=phase_name,
        operation_id=operation_id,
        operation_name=operation_name,
        caption=caption,
        photo_name=photo_name,
        privacy_level=privacy_level,
    )
    content = await file.read()
    return service.upload_photo(content, file.filename, file.content_type, metadata, user_data["id"])


@router.get("", response_model=List[PhotoResponse])
async def list_photos(
    project_run_id: Optional[str] = None,
    template_id: Optional[str] = None,
    privacy_level: Optional[PrivacyLevel] = None,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    cache: Dict[str, Any] = Depends(get_access_cache),
    service: PhotoService = Depends(get_photo_service),
):
    """List photos for a run or template; without either, the caller's own photos"""
    return service.list_photos(
        user_data["id"], project_run_id, template_id, privacy_level,
        is_admin=is_admin(user_data, supabase, cache),
    )


@router.get("/stats/by-project-type", response_model=List[ProjectPhotoStats])
async def photos_by_project_type(
    user_data: Dict = Depends(require_admin),
    service: PhotoService = Depends(get_photo_service),
):
    return service.photos_by_project_type()


@router.get("/{photo_id}/url", response_model=SignedUrlResponse)
async def signed_url(
    photo_id: str,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    cache: Dict[str, Any] = Depends(get_access_cache),
    service: PhotoService = Depends(get_photo_service),
):
    """Short-lived URL for viewing a photo; personal photos only for their owner or an admin"""
    return service.signed_url(photo_id, user_data["id"], is_admin=is_admin(user_data, supabase, cache))


@router.delete("/{photo_id}", status_code=204)
async def delete_photo(
    photo_id: str,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    cache: Dict[str, Any] = Depends(get_access_cache),
    service: PhotoService = Depends(get_photo_service),
):
    service.delete_photo(photo_id, user_data["id"], is_admin=is_admin(user_data, supabase, cache))
    return None
