from supabase import Client
from project_partner.modules.photos.schemas import (
    PhotoMetadata, PhotoResponse, SignedUrlResponse, ProjectPhotoStats
)
from project_partner.modules.photos.s3_storage import S3Storage
from project_partner.core.sanitization import sanitize_input
from project_partner.config.settings import settings
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import os
import re
import time
import uuid
import logging

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"]
ALLOWED_EXTENSIONS = ["jpg", "jpeg", "png", "webp", "gif"]


def validate_photo(file_name: Optional[str], content_type: Optional[str], size: int) -> str:
    """Check size, MIME type and extension; returns the lower-cased extension."""
    if size > settings.photo_max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {settings.photo_max_bytes // (1024 * 1024)}MB"
        )
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload JPG, PNG, WEBP, or GIF images."
        )
    extension = os.path.splitext(file_name or "")[1].lstrip(".").lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Invalid file type. Only image files are allowed.")
    return extension


def _path_component(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9-]", "", value)


def build_storage_path(user_id: str, project_run_id: str, extension: str) -> str:
    file_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}.{extension}"
    return f"{_path_component(user_id)}/{_path_component(project_run_id)}/{file_name}"


def sanitize_file_name(file_name: str) -> str:
    return sanitize_input(re.sub(r"[^a-zA-Z0-9._-]", "_", file_name))


class PhotoService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.bucket = settings.photos_bucket

        # S3 when configured, otherwise Supabase Storage
        self.s3_storage = None
        try:
            if settings.s3_configured:
                self.s3_storage = S3Storage()
                logger.info("S3 storage initialized successfully")
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
            self.s3_storage = None

    def _store(self, content: bytes, path: str, content_type: str) -> str:
        if self.s3_storage:
            try:
                return self.s3_storage.upload_photo(content, path, content_type)
            except Exception as e:
                logger.error(f"S3 upload failed: {str(e)}")
                raise HTTPException(status_code=500, detail=f"Failed to upload to S3: {str(e)}")
        try:
            self.supabase.storage.from_(self.bucket).upload(
                path,
                content,
                file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"}
            )
            return path
        except Exception as e:
            logger.error(f"Supabase Storage upload failed: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload to storage: {str(e)}")

    def _remove(self, storage_path: str) -> None:
        if self.s3_storage and self.s3_storage.owns(storage_path):
            self.s3_storage.delete_photo(self.s3_storage.key_for(storage_path))
            return
        try:
            self.supabase.storage.from_(self.bucket).remove([storage_path])
        except Exception as e:
            logger.warning(f"Failed to delete photo object {storage_path}: {e}")

    def upload_photo(self, content: bytes, file_name: Optional[str], content_type: Optional[str],
                     metadata: PhotoMetadata, user_id: str) -> PhotoResponse:
        extension = validate_photo(file_name, content_type, len(content))
        path = build_storage_path(user_id, metadata.project_run_id, extension)
        storage_path = self._store(content, path, content_type)

        row = {
            "user_id": user_id,
            "project_run_id": metadata.project_run_id,
            "template_id": metadata.template_id,
            "step_id": metadata.step_id,
            "step_name": sanitize_input(metadata.step_name),
            "phase_id": metadata.phase_id or None,
            "phase_name": sanitize_input(metadata.phase_name) if metadata.phase_name else None,
            "operation_id": metadata.operation_id or None,
            "operation_name": sanitize_input(metadata.operation_name) if metadata.operation_name else None,
            "storage_path": storage_path,
            "file_name": sanitize_file_name(file_name or ""),
            "file_size": len(content),
            "privacy_level": metadata.privacy_level,
            "caption": sanitize_input(metadata.caption.strip()) if metadata.caption else None,
            "photo_name": sanitize_input(metadata.photo_name.strip()) if metadata.photo_name else None,
        }
        try:
            result = self.supabase.table("project_photos").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save photo")
        except Exception as e:
            logger.error(f"Error saving photo metadata, removing stored object: {e}")
            self._remove(storage_path)
            if isinstance(e, HTTPException):
                raise
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Photo uploaded to {storage_path}")
        return PhotoResponse(**result.data[0])

    def list_photos(self, user_id: str, project_run_id: Optional[str] = None,
                    template_id: Optional[str] = None, privacy_level: Optional[str] = None,
                    is_admin: bool = False) -> List[PhotoResponse]:
        """
        Photos for a run, for a template, or the user's own; newest first.
        Other users' personal photos are only listed for admins.
        """
        try:
            query = self.supabase.table("project_photos").select("*")
            if project_run_id:
                query = query.eq("project_run_id", project_run_id)
            elif template_id:
                query = query.eq("template_id", template_id)
            else:
                query = query.eq("user_id", user_id)
            if (project_run_id or template_id) and not is_admin:
                query = query.or_(f"user_id.eq.{user_id},privacy_level.neq.personal")
            if privacy_level:
                query = query.eq("privacy_level", privacy_level)
            result = query.order("created_at", desc=True).execute()
            return [PhotoResponse(**r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_photo(self, photo_id: str) -> Dict[str, Any]:
        result = self.supabase.table("project_photos").select("*").eq("id", photo_id).maybe_single().execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Photo not found")
        return result.data

    def signed_url(self, photo_id: str, user_id: str, is_admin: bool = False,
                   expires_in: Optional[int] = None) -> SignedUrlResponse:
        expires_in = expires_in or settings.photo_signed_url_ttl
        try:
            photo = self._get_photo(photo_id)
            if photo.get("privacy_level") == "personal" and photo.get("user_id") != user_id and not is_admin:
                raise HTTPException(status_code=404, detail="Photo not found")
            storage_path = photo["storage_path"]
            if self.s3_storage and self.s3_storage.owns(storage_path):
                url = self.s3_storage.signed_url(self.s3_storage.key_for(storage_path), expires_in)
            else:
                signed = self.supabase.storage.from_(self.bucket).create_signed_url(storage_path, expires_in)
                url = signed.get("signedURL") or signed.get("signedUrl")
            if not url:
                raise HTTPException(status_code=500, detail="Failed to create signed URL")
            return SignedUrlResponse(photo_id=photo_id, url=url, expires_in=expires_in)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating signed URL for photo {photo_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_photo(self, photo_id: str, user_id: str, is_admin: bool = False) -> bool:
        """Remove the stored object, then the row. Only the owner or an admin may delete."""
        try:
            photo = self._get_photo(photo_id)
            if photo.get("user_id") != user_id and not is_admin:
                raise HTTPException(status_code=403, detail="You can only delete your own photos")
            self._remove(photo["storage_path"])
            self.supabase.table("project_photos").delete().eq("id", photo_id).execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting photo {photo_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def photos_by_project_type(self) -> List[ProjectPhotoStats]:
        try:
            result = self.supabase.rpc("get_photos_by_project_type", {}).execute()
            return [ProjectPhotoStats(**r) for r in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching photo stats: {e}")
            raise HTTPException(status_code=500, detail=str(e))
