from supabase import Client
from project_partner.modules.project_runs.schemas import (
    ProjectRunCreate, ProjectRunAdd, ProjectRunUpdate, ProjectRunResponse, ProgressResponse
)
from project_partner.modules.project_runs.progress import calculate_progress, round_progress, workflow_step_counts
from project_partner.modules.project_runs.kickoff import is_kickoff_complete
from project_partner.core.json_fields import parse_json_field, parse_json_list, dump_json_field
from project_partner.config.settings import settings
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
import json
import logging

logger = logging.getLogger(__name__)

# Columns stored as serialized JSON on update
JSON_COLUMNS = [
    "completed_steps", "step_completion_percentages", "phases", "customization_decisions",
    "budget_data", "issue_reports", "time_tracking", "project_photos", "phase_ratings",
    "survey_data", "feedback_data", "schedule_events", "shopping_checklist_data",
]

UPDATE_DEFAULTS = {
    "instruction_level_preference": "intermediate",
    "progress_reporting_style": "linear",
    "schedule_optimization_method": "single-piece-flow",
}

# run id -> key of the last update written for it
_last_update_keys: Dict[str, str] = {}


def build_update_key(run_id: str, data: ProjectRunUpdate) -> str:
    """Key of the fields actually sent; two PUTs with the same payload share a key."""
    sent = data.model_dump(exclude_unset=True, mode="json")
    return f"{run_id}-{json.dumps(sent, sort_keys=True, default=str)}"


def transform_run(row: Dict[str, Any]) -> ProjectRunResponse:
    """Build the project run view model, decoding JSON columns."""
    return ProjectRunResponse(
        id=row["id"],
        template_id=row.get("template_id"),
        name=row.get("name") or "",
        description=row.get("description") or "",
        custom_project_name=row.get("custom_project_name"),
        home_id=row.get("home_id"),
        status=row.get("status"),
        start_date=row.get("start_date"),
        plan_end_date=row.get("plan_end_date"),
        end_date=row.get("end_date"),
        project_leader=row.get("project_leader"),
        accountability_partner=row.get("accountability_partner"),
        current_phase_id=row.get("current_phase_id"),
        current_operation_id=row.get("current_operation_id"),
        current_step_id=row.get("current_step_id"),
        completed_steps=parse_json_list(row.get("completed_steps"), "completed_steps"),
        progress=round_progress(row.get("progress")),
        phases=parse_json_list(row.get("phases"), f"phases for run {row['id']}"),
        category=row.get("category"),
        effort_level=row.get("effort_level"),
        skill_level=row.get("skill_level"),
        estimated_time=row.get("estimated_time"),
        scaling_unit=row.get("scaling_unit"),
        project_challenges=row.get("project_challenges"),
        customization_decisions=parse_json_field(row.get("customization_decisions"), None, "customization_decisions"),
        budget_data=parse_json_field(row.get("budget_data"), None, "budget_data"),
        issue_reports=parse_json_field(row.get("issue_reports"), None, "issue_reports"),
        time_tracking=parse_json_field(row.get("time_tracking"), None, "time_tracking"),
        instruction_level_preference=row.get("instruction_level_preference") or "detailed",
        progress_reporting_style=row.get("progress_reporting_style") or "linear",
        initial_budget=row.get("initial_budget"),
        initial_timeline=row.get("initial_timeline"),
        initial_sizing=row.get("initial_sizing"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class ProjectRunService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_runs(self, user_id: str) -> List[ProjectRunResponse]:
        try:
            result = self.supabase.table("project_runs")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [transform_run(r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_run_row(self, run_id: str, user_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("project_runs")\
                .select("*")\
                .eq("id", run_id)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Project run not found")
            return result.data
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_run(self, run_id: str, user_id: str) -> ProjectRunResponse:
        return transform_run(self._get_run_row(run_id, user_id))

    def _get_template(self, template_id: str) -> Dict[str, Any]:
        result = self.supabase.table("projects")\
            .select("id, name, phases, project_challenges, scaling_unit, estimated_time_per_unit")\
            .eq("id", template_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Project not found")
        return result.data

    def _call_snapshot(self, template_id: str, user_id: str, run_name: str, home_id: Optional[str],
                       start_date: datetime, plan_end_date: datetime) -> str:
        try:
            result = self.supabase.rpc("create_project_run_snapshot", {
                "p_template_id": template_id,
                "p_user_id": user_id,
                "p_run_name": run_name,
                "p_home_id": home_id,
                "p_start_date": start_date.isoformat(),
                "p_plan_end_date": plan_end_date.isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Error calling create_project_run_snapshot: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to create project run: {e}")
        if not result.data:
            logger.error("create_project_run_snapshot returned no ID")
            raise HTTPException(status_code=500, detail="Project run creation returned no ID")
        return result.data

    def _delete_invalid_run(self, run_id: str) -> None:
        try:
            self.supabase.table("project_runs").delete().eq("id", run_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete invalid project run {run_id}: {e}")

    def _verify_snapshot(self, run_id: str, template: Dict[str, Any], template_phase_count: int) -> None:
        """A run must be a complete copy of the template phase tree; incomplete runs are removed."""
        try:
            result = self.supabase.table("project_runs")\
                .select("id, phases, template_id, name")\
                .eq("id", run_id)\
                .single()\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching created project run: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        run_phases = parse_json_list((result.data or {}).get("phases"), f"phases for run {run_id}")
        if not run_phases:
            logger.error(
                f"Project run {run_id} created without phases from template {template['id']} ({template.get('name')})"
            )
            self._delete_invalid_run(run_id)
            raise HTTPException(
                status_code=422,
                detail="Project run was created without phases. The create_project_run_snapshot "
                       "database function failed."
            )
        if len(run_phases) < template_phase_count:
            logger.error(
                f"Project run {run_id} created with {len(run_phases)} of {template_phase_count} phases"
            )
            self._delete_invalid_run(run_id)
            raise HTTPException(
                status_code=422,
                detail=f"Project run was created with only {len(run_phases)} of {template_phase_count} phases. "
                       f"The project run must be a complete snapshot of the template."
            )
        logger.info(f"Project run {run_id} created with {len(run_phases)} phases")

    def _check_spaces(self, run_id: str) -> None:
        try:
            result = self.supabase.table("project_run_spaces")\
                .select("id, space_name")\
                .eq("project_run_id", run_id)\
                .execute()
        except Exception as e:
            logger.warning(f"Error checking spaces for new project run: {e}")
            return
        if not result.data:
            logger.error(f"No spaces created for project run {run_id}; default \"Room 1\" is missing")

    def _load_template(self, template_id: str):
        """Template row and its phases; templates without phases cannot be run"""
        try:
            template = self._get_template(template_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        template_phases = parse_json_list(template.get("phases"), f"phases for project {template.get('name')}")
        if not template_phases:
            logger.error(f"Cannot create project run: template {template['id']} has no phases")
            raise HTTPException(
                status_code=400,
                detail=f'Cannot create project run: Template "{template.get("name")}" has no phases.'
            )
        return template, template_phases

    def create_run(self, run_data: ProjectRunCreate, user_id: str) -> ProjectRunResponse:
        """Snapshot a template into a new run for the user"""
        template, template_phases = self._load_template(run_data.template_id)

        start = datetime.now(timezone.utc)
        run_id = self._call_snapshot(
            template["id"], user_id, run_data.custom_name or template.get("name"), run_data.home_id,
            start, start + timedelta(days=settings.project_run_default_days),
        )
        self._verify_snapshot(run_id, template, len(template_phases))
        self._check_spaces(run_id)

        if (run_data.custom_name or template.get("project_challenges") or template.get("scaling_unit")
                or template.get("estimated_time_per_unit")):
            try:
                self.supabase.table("project_runs").update({
                    "custom_project_name": run_data.custom_name or None,
                    "project_challenges": template.get("project_challenges") or None,
                    "scaling_unit": template.get("scaling_unit") or None,
                    "estimated_time_per_unit": template.get("estimated_time_per_unit") or None,
                }).eq("id", run_id).execute()
            except Exception as e:
                logger.error(f"Error updating project run fields: {e}")

        return self.get_run(run_id, user_id)

    def _ensure_home(self, user_id: str) -> Optional[str]:
        """Create "My Home" for users without any home; returns its id, or None when homes exist"""
        existing = self.supabase.table("homes").select("id").eq("user_id", user_id).limit(1).execute()
        if existing.data:
            return None
        result = self.supabase.table("homes").insert({
            "user_id": user_id,
            "name": "My Home",
            "is_primary": True,
            "home_ownership": "own",
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create default home")
        logger.info(f"Default home created for user {user_id}")
        return result.data[0]["id"]

    def add_run(self, run_data: ProjectRunAdd, user_id: str) -> ProjectRunResponse:
        template, template_phases = self._load_template(run_data.template_id)
        try:
            home_id = self._ensure_home(user_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error checking homes: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        run_id = self._call_snapshot(
            run_data.template_id, user_id, run_data.name, home_id,
            run_data.start_date, run_data.plan_end_date,
        )
        self._verify_snapshot(run_id, template, len(template_phases))

        update_fields: Dict[str, Any] = {"updated_at": datetime.now(timezone.utc).isoformat()}
        supplied = run_data.model_fields_set
        if "description" in supplied:
            update_fields["description"] = run_data.description or None
        if "category" in supplied:
            category = run_data.category
            if isinstance(category, list):
                update_fields["category"] = category
            else:
                update_fields["category"] = [category] if category else None
        for field in ("effort_level", "skill_level", "estimated_time", "estimated_total_time",
                      "typical_project_size", "scaling_unit", "item_type", "project_challenges"):
            if field in supplied:
                update_fields[field] = getattr(run_data, field) or None

        try:
            self.supabase.table("project_runs").update(update_fields).eq("id", run_id).execute()
        except Exception as e:
            logger.error(f"Error updating project run metadata: {e}")

        return self.get_run(run_id, user_id)

    def update_run(self, run_id: str, run_data: ProjectRunUpdate, user_id: str) -> Optional[ProjectRunResponse]:
        """Persist a run update; returns None when it repeats the last update for this run."""
        update_key = build_update_key(run_id, run_data)
        if _last_update_keys.get(run_id) == update_key:
            logger.info(f"Skipping duplicate update for project run {run_id}")
            return None

        update_data = run_data.model_dump(exclude_unset=True, mode="json")
        if "progress" in update_data:
            update_data["progress"] = round_progress(run_data.progress)
        for column in JSON_COLUMNS:
            if column in update_data:
                update_data[column] = dump_json_field(update_data[column])
        if isinstance(update_data.get("category"), list):
            update_data["category"] = ", ".join(update_data["category"])
        for column, default in UPDATE_DEFAULTS.items():
            if column in update_data and not update_data[column]:
                update_data[column] = default
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("project_runs")\
                .update(update_data)\
                .eq("id", run_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project run not found")
            _last_update_keys[run_id] = update_key
            return transform_run(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating project run: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def complete_step(self, run_id: str, step_id: str, user_id: str) -> ProjectRunResponse:
        run = self.get_run(run_id, user_id)
        if step_id in run.completed_steps:
            return run
        completed = run.completed_steps + [step_id]
        progress = calculate_progress(run.phases, completed)
        try:
            result = self.supabase.table("project_runs")\
                .update({
                    "completed_steps": dump_json_field(completed),
                    "progress": progress,
                    "status": "complete" if progress >= 100 else "in-progress",
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })\
                .eq("id", run_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project run not found")
            _last_update_keys.pop(run_id, None)
            return transform_run(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_progress(self, run_id: str, user_id: str) -> ProgressResponse:
        run = self.get_run(run_id, user_id)
        counts = workflow_step_counts(run.phases, run.completed_steps)
        return ProgressResponse(
            progress=calculate_progress(run.phases, run.completed_steps),
            total_steps=counts["total"],
            completed_steps=counts["completed"],
            kickoff_complete=is_kickoff_complete(run.completed_steps),
        )

    def delete_run(self, run_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table("project_runs")\
                .delete()\
                .eq("id", run_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project run not found")
            _last_update_keys.pop(run_id, None)
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def refresh_from_template(self, run_id: str, user_id: str) -> ProjectRunResponse:
        """Re-snapshot the run's phases from its template's current revision"""
        self._get_run_row(run_id, user_id)
        try:
            self.supabase.rpc("refresh_project_run_from_template", {"p_run_id": run_id}).execute()
        except Exception as e:
            logger.error(f"Error refreshing project run {run_id} from template: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        _last_update_keys.pop(run_id, None)
        return self.get_run(run_id, user_id)
