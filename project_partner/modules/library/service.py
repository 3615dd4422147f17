from supabase import Client
from project_partner.modules.library.schemas import (
    ToolCreate, ToolUpdate, ToolResponse, MaterialCreate, MaterialUpdate, MaterialResponse,
    VariationCreate, VariationUpdate, VariationResponse, MatchResult, ToolImportResponse
)
from project_partner.modules.library.matching import match_names
from project_partner.modules.library.tool_import import parse_tool_workbook, ToolImportError
from project_partner.core.json_fields import parse_json_field
from project_partner.core.sanitization import sanitize_input
from typing import List, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

# Matches no real row; PostgREST refuses unfiltered deletes
NIL_UUID = "00000000-0000-0000-0000-000000000000"


def transform_tool(row: Dict[str, Any]) -> ToolResponse:
    return ToolResponse(
        id=row["id"],
        name=row.get("name") or "",
        item=row.get("item") or row.get("name") or "",
        description=row.get("description"),
        category=row.get("category"),
        example_models=row.get("example_models"),
        photo_url=row.get("photo_url"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def transform_material(row: Dict[str, Any]) -> MaterialResponse:
    """materials.name is exposed as item and materials.unit as unit_size"""
    return MaterialResponse(
        id=row["id"],
        item=row.get("name") or "",
        description=row.get("description"),
        category=row.get("category"),
        unit_size=row.get("unit"),
        avg_cost_per_unit=row.get("avg_cost_per_unit"),
        photo_url=row.get("photo_url"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def transform_variation(row: Dict[str, Any]) -> VariationResponse:
    data = dict(row)
    data["attributes"] = parse_json_field(row.get("attributes"), {}, "variation attributes") or {}
    return VariationResponse(**data)


def _material_columns(data: Dict[str, Any]) -> Dict[str, Any]:
    columns = dict(data)
    if "item" in columns:
        columns["name"] = sanitize_input(columns.pop("item"))
    if "unit_size" in columns:
        columns["unit"] = columns.pop("unit_size")
    return columns


class LibraryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Tools

    def list_tools(self) -> List[ToolResponse]:
        try:
            result = self.supabase.table("tools").select("*").order("name").execute()
            return [transform_tool(r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_tool(self, tool_data: ToolCreate) -> ToolResponse:
        try:
            data = tool_data.model_dump()
            data["name"] = sanitize_input(data["name"])
            result = self.supabase.table("tools").insert(data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create tool")
            return transform_tool(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            if getattr(e, "code", None) == "23505":
                raise HTTPException(status_code=409, detail=f'Tool "{tool_data.name}" already exists')
            raise HTTPException(status_code=500, detail=str(e))

    def update_tool(self, tool_id: str, tool_data: ToolUpdate) -> ToolResponse:
        update_data = tool_data.model_dump(exclude_unset=True)
        if "name" in update_data:
            update_data["name"] = sanitize_input(update_data["name"])
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("tools").update(update_data).eq("id", tool_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Tool not found")
            return transform_tool(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_tool(self, tool_id: str) -> bool:
        try:
            self.supabase.table("variation_instances")\
                .delete()\
                .eq("core_item_id", tool_id)\
                .eq("item_type", "tools")\
                .execute()
            result = self.supabase.table("tools").delete().eq("id", tool_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Tool not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def clear_all_tools(self) -> bool:
        """Delete every tool and everything hanging off it, children first."""
        try:
            variations = self.supabase.table("variation_instances").select("id").eq("item_type", "tools").execute()
            variation_ids = [v["id"] for v in variations.data or []]
            models = self.supabase.table("tool_models").select("id").execute()
            model_ids = [m["id"] for m in models.data or []]

            logger.info("Deleting pricing data...")
            if model_ids:
                self.supabase.table("pricing_data").delete().in_("model_id", model_ids).execute()

            logger.info("Deleting tool models...")
            self.supabase.table("tool_models").delete().neq("id", NIL_UUID).execute()

            logger.info("Deleting variation warning flags...")
            if variation_ids:
                self.supabase.table("variation_warning_flags")\
                    .delete()\
                    .in_("variation_instance_id", variation_ids)\
                    .execute()

            logger.info("Deleting tool variations...")
            self.supabase.table("variation_instances").delete().eq("item_type", "tools").execute()

            logger.info("Deleting core tools...")
            self.supabase.table("tools").delete().neq("id", NIL_UUID).execute()
            logger.info("All tools cleared successfully")
            return True
        except Exception as e:
            logger.error(f"Error clearing tools: {e}")
            raise HTTPException(status_code=500, detail="Failed to clear tools")

    def import_tools_from_excel(self, content: bytes) -> ToolImportResponse:
        try:
            tools = parse_tool_workbook(content)
        except ToolImportError as e:
            raise HTTPException(status_code=400, detail=str(e))

        success = 0
        variations_created = 0
        errors: List[str] = []
        for tool in tools:
            example_models = None
            if tool["variations"]:
                example_models = ", ".join(f"{v['brand']} {v['model']}" for v in tool["variations"][:3])
            try:
                result = self.supabase.table("tools").upsert({
                    "name": tool["name"],
                    "description": tool["description"],
                    "category": tool["category"],
                    "example_models": example_models,
                }, on_conflict="name").execute()
                if not result.data:
                    errors.append(f'Failed to import "{tool["name"]}": no row returned')
                    continue
                tool_id = result.data[0]["id"]
            except Exception as e:
                logger.error(f"Error importing tool {tool['name']}: {e}")
                errors.append(f'Failed to import "{tool["name"]}": {e}')
                continue

            for variation in tool["variations"]:
                try:
                    created = self.supabase.table("variation_instances").insert({
                        "core_item_id": tool_id,
                        "item_type": "tools",
                        "name": f"{variation['brand']} {variation['model']} {tool['name']}",
                        "description": f"{variation['brand']} {variation['model']} variant",
                        "attributes": variation["attributes"],
                    }).execute()
                    if not created.data:
                        continue
                    self.supabase.table("tool_models").insert({
                        "variation_instance_id": created.data[0]["id"],
                        "model_name": f"{variation['brand']} {variation['model']}",
                        "manufacturer": variation["brand"],
                        "model_number": variation["model"],
                    }).execute()
                    variations_created += 1
                except Exception as e:
                    if getattr(e, "code", None) != "23505":
                        logger.error(f"Error creating variation for {tool['name']}: {e}")
            success += 1

        return ToolImportResponse(
            tools_parsed=len(tools),
            success=success,
            variations_created=variations_created,
            errors=errors,
        )

    # Materials

    def list_materials(self) -> List[MaterialResponse]:
        try:
            result = self.supabase.table("materials").select("*").order("name").execute()
            return [transform_material(r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_material(self, material_data: MaterialCreate) -> MaterialResponse:
        try:
            result = self.supabase.table("materials").insert(_material_columns(material_data.model_dump())).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create material")
            return transform_material(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_material(self, material_id: str, material_data: MaterialUpdate) -> MaterialResponse:
        update_data = _material_columns(material_data.model_dump(exclude_unset=True))
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("materials").update(update_data).eq("id", material_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Material not found")
            return transform_material(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_material(self, material_id: str) -> bool:
        try:
            self.supabase.table("variation_instances")\
                .delete()\
                .eq("core_item_id", material_id)\
                .eq("item_type", "materials")\
                .execute()
            result = self.supabase.table("materials").delete().eq("id", material_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Material not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def clear_all_materials(self) -> bool:
        try:
            self.clear_variations("materials")
            self.supabase.table("materials").delete().neq("id", NIL_UUID).execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error clearing materials: {e}")
            raise HTTPException(status_code=500, detail="Failed to clear materials")

    # Variations

    def list_variations(self, core_item_id: str, item_type: str) -> List[VariationResponse]:
        try:
            result = self.supabase.table("variation_instances")\
                .select("*")\
                .eq("core_item_id", core_item_id)\
                .eq("item_type", item_type)\
                .order("name")\
                .execute()
            return [transform_variation(r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_variation(self, variation_data: VariationCreate) -> VariationResponse:
        try:
            result = self.supabase.table("variation_instances").insert(variation_data.model_dump()).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create variation")
            return transform_variation(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_variation(self, variation_id: str, variation_data: VariationUpdate) -> VariationResponse:
        try:
            result = self.supabase.table("variation_instances")\
                .update(variation_data.model_dump(exclude_unset=True))\
                .eq("id", variation_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Variation not found")
            return transform_variation(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_variation(self, variation_id: str) -> bool:
        try:
            result = self.supabase.table("variation_instances").delete().eq("id", variation_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Variation not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def clear_variations(self, item_type: str) -> bool:
        try:
            self.supabase.table("variation_instances").delete().eq("item_type", item_type).execute()
            return True
        except Exception as e:
            logger.error(f"Error clearing {item_type} variations: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to clear {item_type} variations")

    # Matching

    def match_items(self, names: List[str], kind: str) -> List[MatchResult]:
        """Match names against the tools or materials library; lookup failures leave everything unmatched."""
        try:
            result = self.supabase.table(kind).select("id, name").execute()
            library = result.data or []
        except Exception as e:
            logger.warning(f"Failed to load {kind} library for matching: {e}")
            library = []
        return [MatchResult(**m) for m in match_names(names, library)]
