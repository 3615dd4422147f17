"""
Generated project import.

Materializes an AI-generated phase/operation/step structure as a draft template:
projects -> standard_phases -> template_operations -> template_steps, with step
instructions, process variables and outputs linked to each step. Row-level failures
are collected as warnings so one bad step does not abort the import; only a failed
project insert stops it.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from supabase import Client

from project_partner.modules.ai_generation.schemas import ImportResult
from project_partner.modules.library.matching import match_names

logger = logging.getLogger(__name__)

INSTRUCTION_LEVELS = ["quick", "detailed", "contractor"]


def _tool_name(tool: Any) -> str:
    if isinstance(tool, dict):
        return tool.get("name") or ""
    return str(tool or "")


def _estimated_minutes(step: Dict[str, Any]) -> int:
    medium = (step.get("timeEstimates") or {}).get("medium") or 0
    try:
        return int(round(float(medium) * 60))
    except (TypeError, ValueError):
        return 0


class ProjectImportPipeline:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.result = ImportResult()
        self._libraries: Dict[str, List[Dict[str, Any]]] = {}

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.result.warnings.append(message)

    def _insert_returning_id(self, table: str, row: Dict[str, Any]) -> Optional[str]:
        result = self.supabase.table(table).insert(row).execute()
        if not result.data:
            raise ValueError(f"no row returned from {table}")
        return result.data[0]["id"]

    def _find_id(self, table: str, name: str) -> Optional[str]:
        result = self.supabase.table(table).select("id").eq("name", name).limit(1).execute()
        return result.data[0]["id"] if result.data else None

    def _library(self, kind: str) -> List[Dict[str, Any]]:
        if kind not in self._libraries:
            try:
                result = self.supabase.table(kind).select("id, name").execute()
                self._libraries[kind] = result.data or []
            except Exception as e:
                logger.warning(f"Failed to load {kind} library for matching: {e}")
                self._libraries[kind] = []
        return self._libraries[kind]

    def run(self, project_name: str, project_description: str, category: List[str],
            structure: Dict[str, Any], user_id: str) -> ImportResult:
        try:
            project_id = self._insert_returning_id("projects", {
                "name": project_name,
                "description": project_description,
                "category": category,
                "publish_status": "draft",
                "created_by": user_id,
                "phases": [],
            })
        except Exception as e:
            self.result.errors.append(f"Failed to create project: {e}")
            return self.result

        try:
            for phase in structure.get("phases") or []:
                self._import_phase(project_id, phase)
        except Exception as e:
            logger.error(f"Import of project {project_id} failed: {e}")
            self.result.errors.append(f"Import failed: {e}")
            return self.result

        try:
            self.supabase.rpc("rebuild_phases_json_from_templates", {"p_project_id": project_id}).execute()
        except Exception as e:
            self._warn(f"Failed to rebuild phases JSON: {e}")

        self.result.success = True
        self.result.project_id = project_id
        logger.info(f"Imported generated project {project_id}: {self.result.stats.model_dump()}")
        return self.result

    def _resolve_phase(self, phase: Dict[str, Any]) -> Optional[str]:
        name = phase.get("name") or ""
        try:
            existing = self._find_id("standard_phases", name)
            if existing:
                return existing
            return self._insert_returning_id("standard_phases", {
                "name": name,
                "description": phase.get("description"),
                "is_locked": False,
                "position_rule": "nth",
                "position_value": 999,
            })
        except Exception as e:
            self._warn(f'Failed to create phase "{name}": {e}')
            return None

    def _import_phase(self, project_id: str, phase: Dict[str, Any]) -> None:
        phase_id = self._resolve_phase(phase)
        if not phase_id:
            return

        for op_index, operation in enumerate(phase.get("operations") or []):
            try:
                operation_id = self._insert_returning_id("template_operations", {
                    "project_id": project_id,
                    "standard_phase_id": phase_id,
                    "name": operation.get("name"),
                    "description": operation.get("description"),
                    "display_order": op_index,
                })
            except Exception as e:
                self._warn(f'Failed to create operation "{operation.get("name")}": {e}')
                continue
            self.result.stats.operations_created += 1

            for step_index, step in enumerate(operation.get("steps") or []):
                self._import_step(operation_id, step_index, step)

        self.result.stats.phases_created += 1

    def _import_step(self, operation_id: str, step_index: int, step: Dict[str, Any]) -> None:
        stats = self.result.stats
        title = step.get("stepTitle") or ""
        tools = match_names([_tool_name(t) for t in step.get("tools") or []], self._library("tools"))
        materials = match_names([str(m) for m in step.get("materials") or []], self._library("materials"))
        stats.tools_matched += sum(1 for t in tools if t["matched"])
        stats.materials_matched += sum(1 for m in materials if m["matched"])
        outputs = step.get("outputs") or []

        try:
            step_id = self._insert_returning_id("template_steps", {
                "operation_id": operation_id,
                "step_number": step_index + 1,
                "step_title": title,
                "description": step.get("description"),
                "content_sections": [{
                    "id": f"content-{int(time.time() * 1000)}-{step_index}",
                    "type": "text",
                    "content": step.get("description"),
                }],
                "materials": [
                    {"name": m["matched_name"] if m["matched"] else m["name"], "description": "", "category": ""}
                    for m in materials
                ],
                "tools": [
                    {"name": t["matched_name"] if t["matched"] else t["name"], "description": "", "category": ""}
                    for t in tools
                ],
                "outputs": [
                    {"name": o.get("name"), "description": o.get("description"), "type": o.get("type")}
                    for o in outputs
                ],
                "apps": [],
                "estimated_time_minutes": _estimated_minutes(step),
                "display_order": step_index,
            })
        except Exception as e:
            self._warn(f'Failed to create step "{title}": {e}')
            return
        stats.steps_created += 1

        self._import_instructions(step_id, title, step.get("instructions") or {})
        for variable in step.get("processVariables") or []:
            self._import_process_variable(step_id, variable)
        for output in outputs:
            self._import_output(step_id, output)

    def _import_instructions(self, step_id: str, title: str, instructions: Dict[str, Any]) -> None:
        for level in INSTRUCTION_LEVELS:
            try:
                self.supabase.table("step_instructions").insert({
                    "template_step_id": step_id,
                    "instruction_level": level,
                    "content": {
                        "text": instructions.get(level),
                        "sections": [],
                        "photos": [],
                        "videos": [],
                        "links": [],
                    },
                }).execute()
                self.result.stats.instructions_created += 1
            except Exception as e:
                self._warn(f'Failed to create {level} instruction for "{title}": {e}')

    def _import_process_variable(self, step_id: str, variable: Dict[str, Any]) -> None:
        name = variable.get("name") or ""
        try:
            if not self._find_id("process_variables", name):
                self._insert_returning_id("process_variables", {
                    "name": name,
                    "display_name": variable.get("displayName"),
                    "description": variable.get("description"),
                    "variable_type": variable.get("variableType"),
                    "unit": variable.get("unit") or None,
                })
                self.result.stats.process_variables_created += 1
        except Exception as e:
            self._warn(f'Failed to create process variable "{name}": {e}')
            return

        try:
            self.supabase.table("workflow_step_process_variables").insert({
                "step_id": step_id,
                "variable_key": name,
                "label": variable.get("displayName"),
                "description": variable.get("description"),
                "variable_type": variable.get("variableType"),
                "required": True,
                "unit": variable.get("unit") or None,
            }).execute()
        except Exception as e:
            self._warn(f'Failed to link process variable "{name}" to step: {e}')

    def _import_output(self, step_id: str, output: Dict[str, Any]) -> None:
        name = output.get("name") or ""
        try:
            if not self._find_id("outputs", name):
                self._insert_returning_id("outputs", {
                    "name": name,
                    "description": output.get("description"),
                    "type": output.get("type"),
                    "is_required": True,
                })
                self.result.stats.outputs_created += 1
        except Exception as e:
            self._warn(f'Failed to create output "{name}": {e}')
            return

        try:
            self.supabase.table("workflow_step_outputs").insert({
                "step_id": step_id,
                "name": name,
                "description": output.get("description"),
                "output_type": output.get("type"),
                "requirement": output.get("requirement"),
            }).execute()
        except Exception as e:
            self._warn(f'Failed to link output "{name}" to step: {e}')
