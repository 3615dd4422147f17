from typing import Any, Dict, List


def match_names(names: List[str], library: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Match free-text item names against library rows ({id, name}).

    Comparison is case-insensitive on trimmed names. An exact match wins; otherwise the
    first library row whose name contains, or is contained in, the requested name.
    """
    entries = [(row, (row.get("name") or "").lower().strip()) for row in library]
    entries = [(row, key) for row, key in entries if key]

    results = []
    for name in names:
        normalized = (name or "").lower().strip()
        match = None
        if normalized:
            match = next((row for row, key in entries if key == normalized), None)
            if match is None:
                match = next((row for row, key in entries if key in normalized or normalized in key), None)
        if match:
            results.append({"name": name, "matched": True, "matched_id": match["id"], "matched_name": match["name"]})
        else:
            results.append({"name": name, "matched": False})
    return results
