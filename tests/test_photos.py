"""
Tests for step photo validation and PhotoService with Supabase Storage.
"""

import re

import pytest
from fastapi import HTTPException

from project_partner.modules.photos.schemas import PhotoMetadata
from project_partner.modules.photos.service import (
    PhotoService,
    build_storage_path,
    sanitize_file_name,
    validate_photo,
)

JPEG = b"\xff\xd8\xff\xe0" + b"0" * 100


def _metadata(**overrides):
    data = {"project_run_id": "run-1", "step_id": "step-1", "step_name": "Prime walls"}
    data.update(overrides)
    return PhotoMetadata(**data)


class TestValidation:

    def test_accepts_image(self):
        assert validate_photo("Wall.JPG", "image/jpeg", 1024) == "jpg"

    def test_rejects_large_file(self):
        with pytest.raises(HTTPException) as exc:
            validate_photo("wall.jpg", "image/jpeg", 5 * 1024 * 1024 + 1)
        assert exc.value.status_code == 400
        assert "5MB" in exc.value.detail

    def test_rejects_wrong_content_type(self):
        with pytest.raises(HTTPException) as exc:
            validate_photo("doc.pdf", "application/pdf", 10)
        assert exc.value.status_code == 400

    def test_rejects_mismatched_extension(self):
        with pytest.raises(HTTPException) as exc:
            validate_photo("photo.exe", "image/png", 10)
        assert exc.value.status_code == 400

    def test_storage_path_is_sanitized(self):
        path = build_storage_path("user/../1", "run 1!", "png")
        user, run, name = path.split("/")
        assert user == "user1"
        assert run == "run1"
        assert re.fullmatch(r"\d+-[0-9a-f]{9}\.png", name)

    def test_file_name_sanitized(self):
        assert sanitize_file_name("my photo<1>.jpg") == "my_photo_1_.jpg"


class TestPhotoService:

    def test_upload_stores_object_and_row(self, supabase):
        photo = PhotoService(supabase).upload_photo(
            JPEG, "wall.jpg", "image/jpeg",
            _metadata(caption="  <b>Primed</b>  ", privacy_level="public"),
            "user-1",
        )

        assert photo.user_id == "user-1"
        assert photo.caption == "Primed"
        assert photo.privacy_level == "public"
        assert photo.storage_path.startswith("user-1/run-1/")
        assert ("project-photos", photo.storage_path) in supabase.storage.objects

    def test_upload_failure_of_row_removes_object(self, supabase):
        supabase.fail("project_photos", "insert")
        with pytest.raises(HTTPException) as exc:
            PhotoService(supabase).upload_photo(JPEG, "wall.jpg", "image/jpeg", _metadata(), "user-1")
        assert exc.value.status_code == 500
        assert supabase.storage.objects == {}
        assert len(supabase.storage.removed) == 1

    def test_storage_failure_is_500(self, supabase):
        supabase.storage.fail_uploads = True
        with pytest.raises(HTTPException) as exc:
            PhotoService(supabase).upload_photo(JPEG, "wall.jpg", "image/jpeg", _metadata(), "user-1")
        assert exc.value.status_code == 500
        assert supabase.rows("project_photos") == []

    def test_signed_url(self, supabase):
        supabase.seed("project_photos", {
            "id": "photo-1", "user_id": "user-1", "project_run_id": "run-1", "step_id": "s",
            "storage_path": "user-1/run-1/a.jpg", "privacy_level": "personal",
        })
        signed = PhotoService(supabase).signed_url("photo-1", "user-1")
        assert signed.expires_in == 3600
        assert "user-1/run-1/a.jpg" in signed.url

    def test_only_owner_or_admin_can_delete(self, supabase):
        supabase.seed("project_photos", {
            "id": "photo-1", "user_id": "owner", "project_run_id": "run-1", "step_id": "s",
            "storage_path": "owner/run-1/a.jpg", "privacy_level": "personal",
        })
        service = PhotoService(supabase)

        with pytest.raises(HTTPException) as exc:
            service.delete_photo("photo-1", "intruder")
        assert exc.value.status_code == 403

        assert service.delete_photo("photo-1", "admin-1", is_admin=True) is True
        assert supabase.rows("project_photos") == []
        assert supabase.storage.removed == ["owner/run-1/a.jpg"]

    def test_list_photos_scopes(self, supabase):
        supabase.seed(
            "project_photos",
            {"id": "a", "user_id": "user-1", "project_run_id": "run-1", "template_id": "t1", "step_id": "s",
             "storage_path": "p/a", "privacy_level": "public", "created_at": "2026-01-01T00:00:00+00:00"},
            {"id": "b", "user_id": "user-2", "project_run_id": "run-2", "template_id": "t1", "step_id": "s",
             "storage_path": "p/b", "privacy_level": "personal", "created_at": "2026-01-02T00:00:00+00:00"},
        )
        service = PhotoService(supabase)
        assert [p.id for p in service.list_photos("user-1")] == ["a"]
        assert [p.id for p in service.list_photos("user-1", template_id="t1")] == ["a"]
        assert [p.id for p in service.list_photos("admin-1", template_id="t1", is_admin=True)] == ["b", "a"]
        assert [p.id for p in service.list_photos("user-1", template_id="t1", privacy_level="public")] == ["a"]

    def test_other_users_personal_photos_are_hidden(self, supabase):
        supabase.seed(
            "project_photos",
            {"id": "mine", "user_id": "user-1", "project_run_id": "run-9", "step_id": "s",
             "storage_path": "user-1/run-9/a.jpg", "privacy_level": "personal", "created_at": "2026-01-01T00:00:00+00:00"},
            {"id": "theirs", "user_id": "other", "project_run_id": "run-9", "step_id": "s",
             "storage_path": "other/run-9/b.jpg", "privacy_level": "personal", "created_at": "2026-01-02T00:00:00+00:00"},
            {"id": "shared", "user_id": "other", "project_run_id": "run-9", "step_id": "s",
             "storage_path": "other/run-9/c.jpg", "privacy_level": "project_partner", "created_at": "2026-01-03T00:00:00+00:00"},
        )
        photos = PhotoService(supabase).list_photos("user-1", project_run_id="run-9")
        assert [p.id for p in photos] == ["shared", "mine"]

    def test_signed_url_for_other_users_personal_photo_is_404(self, supabase):
        supabase.seed("project_photos", {
            "id": "photo-1", "user_id": "other", "project_run_id": "run-9", "step_id": "s",
            "storage_path": "other/run-9/a.jpg", "privacy_level": "personal",
        })
        service = PhotoService(supabase)

        with pytest.raises(HTTPException) as exc:
            service.signed_url("photo-1", "user-1")
        assert exc.value.status_code == 404

        assert "other/run-9/a.jpg" in service.signed_url("photo-1", "admin-1", is_admin=True).url

    def test_signed_url_for_shared_photo(self, supabase):
        supabase.seed("project_photos", {
            "id": "photo-1", "user_id": "other", "project_run_id": "run-9", "step_id": "s",
            "storage_path": "other/run-9/a.jpg", "privacy_level": "public",
        })
        assert PhotoService(supabase).signed_url("photo-1", "user-1").expires_in == 3600

    def test_photos_by_project_type(self, supabase):
        supabase.rpc_handlers["get_photos_by_project_type"] = lambda params: [
            {"template_id": "t1", "template_name": "Painting", "photo_count": 3, "public_count": 1}
        ]
        stats = PhotoService(supabase).photos_by_project_type()
        assert stats[0].photo_count == 3
        assert stats[0].personal_count == 0
