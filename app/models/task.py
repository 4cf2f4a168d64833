from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

PRIORITIES = ("low", "medium", "high")
CATEGORIES = ("personal", "work", "shopping", "health")
PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as ``2024-05-01T12:00:00.000Z``."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class Task(BaseModel):
    """A single to-do record as persisted in the tasks file.

    Attribute names are snake_case; the JSON document uses the camelCase
    aliases. Keys the model doesn't know about are carried through untouched.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str
    description: str = ""
    priority: str = "medium"
    category: str = "personal"
    deadline: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    completed: bool = False
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    completed_at: Optional[str] = Field(default=None, alias="completedAt")
    order: int = 0

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)
