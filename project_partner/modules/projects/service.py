from supabase import Client
from project_partner.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, StepInstructionResponse
)
from project_partner.modules.projects.categories import normalize_categories
from project_partner.core.json_fields import parse_json_field, parse_json_list
from project_partner.core.sanitization import safe_video_url
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

NAME_UNIQUE_INDEX = "idx_projects_name_unique"


def is_duplicate_name_error(error: Exception) -> bool:
    """Postgres unique violation on the case-insensitive project name index"""
    return getattr(error, "code", None) == "23505" and NAME_UNIQUE_INDEX in str(error)


def transform_project(row: Dict[str, Any]) -> ProjectResponse:
    """Build the project view model from a projects / project_templates_live row."""
    project_type = (row.get("project_type") or "").lower()
    return ProjectResponse(
        id=row["id"],
        name=row.get("name") or "",
        description=row.get("description") or "",
        category=normalize_categories(row.get("category")),
        publish_status=row.get("publish_status"),
        project_type="Secondary" if project_type == "secondary" else "Primary",
        project_challenges=row.get("project_challenges"),
        image=row.get("image"),
        skill_level=row.get("skill_level"),
        effort_level=row.get("effort_level"),
        estimated_time=row.get("estimated_time"),
        estimated_total_time=row.get("estimated_total_time"),
        typical_project_size=row.get("typical_project_size"),
        scaling_unit=row.get("scaling_unit"),
        estimated_time_per_unit=row.get("estimated_time_per_unit"),
        revision_number=row.get("revision_number"),
        parent_project_id=row.get("parent_project_id"),
        is_current_version=row.get("is_current_version"),
        phases=parse_json_list(row.get("phases"), f"phases for project {row.get('name')}"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def transform_instruction(row: Dict[str, Any]) -> StepInstructionResponse:
    """Instruction view model; videos without a trusted embed or url are dropped."""
    content = parse_json_field(row.get("content"), {}, "step instruction content")
    if not isinstance(content, dict):
        content = {}
    videos = []
    for video in content.get("videos") or []:
        if not isinstance(video, dict):
            continue
        url = safe_video_url(video)
        if url is None:
            logger.warning(f"Untrusted video blocked in instruction {row.get('id')}")
            continue
        cleaned = {k: v for k, v in video.items() if k != "embed"}
        cleaned["url"] = url
        videos.append(cleaned)
    return StepInstructionResponse(
        id=row["id"],
        template_step_id=row["template_step_id"],
        instruction_level=row["instruction_level"],
        text=content.get("text") or "",
        sections=content.get("sections") or [],
        photos=content.get("photos") or [],
        videos=videos,
        links=content.get("links") or [],
    )


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _ensure_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        normalized = name.strip().lower()
        try:
            query = self.supabase.table("projects").select("id, name")
            if exclude_id:
                query = query.neq("id", exclude_id)
            result = query.ilike("name", name.strip()).execute()
        except Exception as e:
            logger.error(f"Error checking for duplicate project name: {e}")
            raise HTTPException(status_code=500, detail="Failed to validate project name")

        for existing in result.data or []:
            if (existing.get("name") or "").strip().lower() == normalized:
                raise HTTPException(
                    status_code=409,
                    detail=f'A project with the name "{name}" already exists. Please choose a unique name.'
                )

    def list_catalog(self) -> List[ProjectResponse]:
        """Latest published and beta-testing revisions"""
        try:
            result = self.supabase.table("project_templates_live")\
                .select("*")\
                .order("updated_at", desc=True)\
                .execute()
            return [transform_project(r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_projects(self, publish_status: Optional[str] = None, search: Optional[str] = None) -> List[ProjectResponse]:
        """All template rows for the admin console."""
        try:
            query = self.supabase.table("projects").select("*")
            if publish_status:
                query = query.eq("publish_status", publish_status)
            if search and search.strip():
                term = search.strip().replace(",", " ")
                query = query.or_(f"name.ilike.%{term}%,description.ilike.%{term}%")
            result = query.order("updated_at", desc=True).execute()
            return [transform_project(r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_project_row(self, project_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("projects").select("*").eq("id", project_id).maybe_single().execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return result.data
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_project(self, project_id: str) -> ProjectResponse:
        return transform_project(self.get_project_row(project_id))

    def create_project(self, project_data: ProjectCreate, user_id: str) -> ProjectResponse:
        """
        Create a template with the standard foundation phases.

        The RPC creates the row together with Kickoff / Planning / Ordering / Close Project;
        fields it does not accept are written in a follow-up update.
        """
        self._ensure_unique_name(project_data.name)
        try:
            result = self.supabase.rpc("create_project_with_standard_foundation_v2", {
                "p_project_name": project_data.name,
                "p_project_description": project_data.description or "",
                "p_category": project_data.category[0] if project_data.category else "general",
            }).execute()
        except Exception as e:
            if is_duplicate_name_error(e):
                raise HTTPException(
                    status_code=409,
                    detail=f'A project with the name "{project_data.name}" already exists. Please choose a unique name.'
                )
            logger.error(f"Error adding project: {e}")
            raise HTTPException(status_code=500, detail="Failed to create project")

        project_id = result.data
        if not project_id:
            raise HTTPException(status_code=500, detail="Failed to create project")

        try:
            self.supabase.table("projects").update({
                "skill_level": project_data.skill_level or "Intermediate",
                "effort_level": project_data.effort_level or "Medium",
                "scaling_unit": project_data.scaling_unit or None,
                "project_challenges": project_data.project_challenges or None,
                "estimated_time_per_unit": project_data.estimated_time_per_unit or None,
                "project_type": "secondary" if (project_data.project_type or "").lower() == "secondary" else "primary",
                "created_by": user_id,
            }).eq("id", project_id).execute()
        except Exception as e:
            logger.error(f"Error updating additional project fields: {e}")

        logger.info(f"Project created with standard foundation: {project_id}")
        return self.get_project(project_id)

    def update_project(self, project_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        """Update metadata only; the phases JSON is rebuilt by database triggers"""
        if project_data.name is not None and project_data.name.strip():
            self._ensure_unique_name(project_data.name, exclude_id=project_id)

        update_data = project_data.model_dump(exclude_unset=True)
        if "category" in update_data:
            update_data["category"] = update_data["category"] or []
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return transform_project(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            if is_duplicate_name_error(e):
                raise HTTPException(
                    status_code=409,
                    detail=f'A project with the name "{project_data.name}" already exists. Please choose a unique name.'
                )
            raise HTTPException(status_code=500, detail=str(e))

    def delete_project(self, project_id: str) -> bool:
        try:
            result = self.supabase.table("projects").delete().eq("id", project_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def rebuild_phases(self, project_id: str) -> ProjectResponse:
        try:
            self.supabase.rpc("rebuild_phases_json_from_project_phases", {"p_project_id": project_id}).execute()
        except Exception as e:
            logger.error(f"Error rebuilding phases for project {project_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return self.get_project(project_id)

    def get_step_instructions(self, template_step_id: str,
                              level: Optional[str] = None) -> List[StepInstructionResponse]:
        try:
            query = self.supabase.table("step_instructions")\
                .select("*")\
                .eq("template_step_id", template_step_id)
            if level:
                query = query.eq("instruction_level", level)
            result = query.execute()
            return [transform_instruction(r) for r in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching instructions for step {template_step_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
