import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def parse_json_field(value: Any, default: Any = None, label: str = "json") -> Any:
    """Decode a jsonb column that may arrive as a native value, a JSON string, or a double-encoded JSON string."""
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
        if isinstance(parsed, str):
            logger.warning(f"{label} was double-encoded")
            parsed = json.loads(parsed)
        return parsed
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to parse {label} JSON: {e}")
        return default


def parse_json_list(value: Any, label: str = "json") -> list:
    parsed = parse_json_field(value, [], label)
    return parsed if isinstance(parsed, list) else []


def dump_json_field(value: Any) -> Any:
    """Serialize a JSON field for storage; None stays None."""
    if value is None:
        return None
    return json.dumps(value)
