"""
Tool list spreadsheet parsing.

The first worksheet is read as a header row followed by data rows. Name, description,
brand, model and category columns are recognized by common header aliases; every other
non-empty column becomes a variation attribute. Rows sharing a tool name are grouped
into one tool with one variation per distinct brand + model.
"""
from io import BytesIO
from typing import Any, Dict, List, Optional
import re
import logging

from openpyxl import load_workbook

logger = logging.getLogger(__name__)

COLUMN_ALIASES = {
    "name": ["tool name", "tool", "name", "item"],
    "description": ["description", "desc"],
    "brand": ["brand", "manufacturer", "make"],
    "model": ["model", "model number", "model name"],
    "category": ["category", "type", "category type"],
}

# Brand / model claim their headers first so "Model Name" is never taken as the tool name
_RESOLVE_ORDER = ["brand", "model", "description", "category", "name"]

DEFAULT_TOOL_NAME = "Unknown Tool"
DEFAULT_BRAND = "Generic"
DEFAULT_MODEL = "Standard"


class ToolImportError(ValueError):
    pass


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def attribute_key(header: str) -> str:
    key = re.sub(r"[^a-z0-9\s]", "", header.lower())
    return re.sub(r"\s+", "_", key.strip())


def find_column(headers: List[str], aliases: List[str], claimed: set) -> Optional[str]:
    candidates = [h for h in headers if h and h not in claimed]
    for alias in aliases:
        for header in candidates:
            if header.lower().strip() == alias:
                return header
    for alias in aliases:
        for header in candidates:
            if alias in header.lower():
                return header
    return None


def resolve_columns(headers: List[str]) -> Dict[str, Optional[str]]:
    claimed: set = set()
    columns: Dict[str, Optional[str]] = {}
    for field in _RESOLVE_ORDER:
        column = find_column(headers, COLUMN_ALIASES[field], claimed)
        if column is None and field == "name":
            column = next((h for h in headers if h and h not in claimed), None)
        columns[field] = column
        if column:
            claimed.add(column)
    return columns


def parse_tool_rows(headers: List[str], rows: List[List[Any]]) -> List[Dict[str, Any]]:
    columns = resolve_columns(headers)
    standard = {c for c in columns.values() if c}
    attribute_columns = [h for h in headers if h and h.strip() and h not in standard]

    tools: Dict[str, Dict[str, Any]] = {}
    for raw in rows:
        row = {header: _cell_text(raw[i]) if i < len(raw) else "" for i, header in enumerate(headers) if header}
        if not any(row.values()):
            continue

        def value(field: str) -> str:
            column = columns.get(field)
            return row.get(column, "") if column else ""

        name = value("name") or DEFAULT_TOOL_NAME
        brand = value("brand") or DEFAULT_BRAND
        model = value("model") or DEFAULT_MODEL

        attributes = {}
        for column in attribute_columns:
            text = row.get(column, "")
            key = attribute_key(column)
            if text and key:
                attributes[key] = text

        tool = tools.setdefault(name, {
            "name": name,
            "description": value("description") or None,
            "category": value("category") or None,
            "variations": [],
        })

        if brand == DEFAULT_BRAND and model == DEFAULT_MODEL and not attributes:
            continue
        if any(v["brand"] == brand and v["model"] == model for v in tool["variations"]):
            continue
        tool["variations"].append({"brand": brand, "model": model, "attributes": attributes})

    return list(tools.values())


def parse_tool_workbook(content: bytes) -> List[Dict[str, Any]]:
    """Parse an .xlsx tool list into tools with their variations"""
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ToolImportError(f"Could not read Excel file: {e}")

    try:
        sheet = workbook.worksheets[0]
        rows = [list(r) for r in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if len(rows) < 2:
        raise ToolImportError("Excel file must have at least a header row and one data row")

    headers = [_cell_text(h) for h in rows[0]]
    tools = parse_tool_rows(headers, rows[1:])
    logger.info(f"Parsed {len(tools)} tools from spreadsheet")
    return tools
