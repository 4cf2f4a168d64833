from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import Task


class TaskBase(BaseModel):
    """Fields a client may send for a task.

    Everything is optional here; field rules are checked by
    ``app.validation.validate_task`` so all problems are reported together.
    """
    text: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    deadline: Optional[str] = None
    tags: Optional[List[str]] = None


class TaskCreate(TaskBase):
    """Schema for creating new tasks."""
    pass


class TaskUpdate(TaskBase):
    """Schema for updating existing tasks. Only fields sent are applied."""
    completed: Optional[bool] = None


class BulkRequest(BaseModel):
    action: Optional[str] = None
    task_ids: Optional[Any] = Field(default=None, alias="taskIds")

    class Config:
        populate_by_name = True


class ReorderRequest(BaseModel):
    task_ids: Optional[Any] = Field(default=None, alias="taskIds")

    class Config:
        populate_by_name = True


class TaskListResponse(BaseModel):
    tasks: List[Task]
    total: int
    filtered: int
    timestamp: str


class TaskMessageResponse(BaseModel):
    message: str
    task: Task


class BulkResponse(BaseModel):
    message: str
    updated_count: int = Field(alias="updatedCount")
    total_tasks: int = Field(alias="totalTasks")

    class Config:
        populate_by_name = True


class ReorderResponse(BaseModel):
    message: str
    total_tasks: int = Field(alias="totalTasks")

    class Config:
        populate_by_name = True


class StatsResponse(BaseModel):
    total: int
    completed: int
    active: int
    overdue: int
    by_priority: Dict[str, int] = Field(alias="byPriority")
    by_category: Dict[str, int] = Field(alias="byCategory")
    recently_completed: int = Field(alias="recentlyCompleted")

    class Config:
        populate_by_name = True


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: str
    version: str
