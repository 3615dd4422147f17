from supabase import Client
from project_partner.modules.revisions.schemas import (
    RevisionResponse, RevisionCreateResponse, StatusChangeRequest, StatusCountsResponse
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    "draft": {"beta-testing", "published", "archived"},
    "beta-testing": {"published", "archived"},
    "published": {"archived"},
    "archived": set(),
}

STATUS_TIMESTAMPS = {
    "beta-testing": "beta_released_at",
    "published": "published_at",
    "archived": "archived_at",
}


def can_transition(current: Optional[str], target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current or "draft", set())


class RevisionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, project_id: str, columns: str = "*") -> Dict[str, Any]:
        result = self.supabase.table("projects").select(columns).eq("id", project_id).maybe_single().execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Project not found")
        return result.data

    def list_revisions(self, project_id: str) -> List[RevisionResponse]:
        """All revisions in the project's lineage, newest first"""
        try:
            project = self._get_row(project_id, "id, parent_project_id")
            root_id = project.get("parent_project_id") or project["id"]
            result = self.supabase.table("projects")\
                .select("*")\
                .or_(f"parent_project_id.eq.{root_id},id.eq.{root_id}")\
                .order("revision_number", desc=True)\
                .execute()
            return [RevisionResponse(**r) for r in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching project revisions: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def create_revision(self, project_id: str, revision_notes: Optional[str] = None) -> RevisionCreateResponse:
        try:
            result = self.supabase.rpc("create_project_revision", {
                "source_project_id": project_id,
                "revision_notes_text": revision_notes or None,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating revision: {e}")
            raise HTTPException(status_code=500, detail="Failed to create new revision")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create new revision")
        logger.info(f"Created draft revision {result.data} from {project_id}")
        return RevisionCreateResponse(revision_id=result.data, message="New draft revision created")

    def change_status(self, revision_id: str, change: StatusChangeRequest) -> RevisionResponse:
        try:
            revision = self._get_row(revision_id, "id, publish_status")
            current = revision.get("publish_status")
            if not can_transition(current, change.status):
                raise HTTPException(
                    status_code=400,
                    detail=f"Cannot change status from {current} to {change.status}"
                )

            now = datetime.now(timezone.utc).isoformat()
            update_data = {
                "publish_status": change.status,
                STATUS_TIMESTAMPS[change.status]: now,
                "updated_at": now,
            }
            if change.release_notes is not None:
                update_data["release_notes"] = change.release_notes

            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", revision_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return RevisionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating project status: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def status_counts(self) -> StatusCountsResponse:
        try:
            result = self.supabase.table("projects").select("publish_status").execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        counts = {"draft": 0, "beta_testing": 0, "published": 0, "archived": 0}
        for row in result.data or []:
            key = (row.get("publish_status") or "").replace("-", "_")
            if key in counts:
                counts[key] += 1
        return StatusCountsResponse(**counts)
