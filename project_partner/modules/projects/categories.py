from typing import Any, List

KNOWN_CATEGORIES = [
    "Appliances", "Bathroom", "Ceilings", "Decks & Patios", "Doors & Windows", "Electrical",
    "Exterior Carpentry", "Flooring", "General Repairs & Maintenance", "HVAC & Ventilation",
    "Insulation & Weatherproofing", "Interior Carpentry", "Kitchen", "Landscaping & Outdoor Projects",
    "Lighting & Electrical", "Masonry & Concrete", "Painting & Finishing", "Plumbing", "Roofing",
    "Safety & Security", "Smart Home & Technology", "Storage & Organization", "Tile", "Walls & Drywall",
]

# Longest first so "Decks & Patios" wins over any shorter prefix
_BY_LENGTH = sorted(KNOWN_CATEGORIES, key=len, reverse=True)


def normalize_categories(category: Any) -> List[str]:
    """Turn a stored category value into a list, splitting run-together names like "TileFlooring"."""
    if isinstance(category, list):
        return [c for c in category if c]
    if not category or not isinstance(category, str):
        return []
    trimmed = category.strip()
    if not trimmed:
        return []
    if trimmed in KNOWN_CATEGORIES:
        return [trimmed]

    found: List[str] = []
    remaining = trimmed
    changed = True
    while changed and remaining:
        changed = False
        for known in _BY_LENGTH:
            if known in remaining:
                found.append(known)
                remaining = remaining.replace(known, "", 1)
                changed = True
                break
    return found or [trimmed]
