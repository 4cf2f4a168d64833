"""Field rules for task payloads."""
from datetime import datetime, timezone
from typing import List, Optional

from .models import CATEGORIES, PRIORITIES
from .schemas.task import TaskBase

TEXT_MIN_LENGTH = 3
TEXT_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime string into an aware UTC datetime.

    Returns None for empty or unparseable input. Naive values are read as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def validate_task(candidate: TaskBase, require_text: bool = True) -> List[str]:
    """Check a create/update payload and return every rule it breaks.

    With ``require_text=False`` (partial updates) the text rules only apply
    when the payload carries a ``text`` field.
    """
    errors = []
    sent = candidate.model_fields_set

    if require_text or "text" in sent:
        text = (candidate.text or "").strip()
        if not text:
            errors.append("Task text is required")
        elif len(text) < TEXT_MIN_LENGTH:
            errors.append(f"Task text must be at least {TEXT_MIN_LENGTH} characters")
        elif len(text) > TEXT_MAX_LENGTH:
            errors.append(f"Task text must be less than {TEXT_MAX_LENGTH} characters")

    if candidate.description and len(candidate.description) > DESCRIPTION_MAX_LENGTH:
        errors.append(f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters")

    if candidate.priority is not None and candidate.priority not in PRIORITIES:
        errors.append("Priority must be low, medium, or high")

    if candidate.category is not None and candidate.category not in CATEGORIES:
        errors.append("Category must be personal, work, shopping, or health")

    if candidate.deadline and parse_timestamp(candidate.deadline) is None:
        errors.append("Invalid deadline format")

    return errors
