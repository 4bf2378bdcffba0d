import re
import uuid
from typing import Any, List


def is_valid_uuid(uuid_string: str) -> bool:
    try:
        val = uuid.UUID(uuid_string)
    except (TypeError, ValueError):
        return False
    return str(val) == uuid_string.lower()


def slugify(text: str) -> str:
    """URL slug from a title: lowercase words joined by hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return slug.strip("-")


def normalize_whatsapp_numbers(value: Any) -> List[str]:
    """`whatsapp_number` was once a single string; it is now a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v and str(v).strip()]
    return [str(value)]
