from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..models import Task
from ..schemas.task import (
    BulkRequest,
    BulkResponse,
    ReorderRequest,
    ReorderResponse,
    StatsResponse,
    TaskCreate,
    TaskListResponse,
    TaskMessageResponse,
    TaskUpdate,
)
from ..services.task_service import TaskService, get_task_service

router = APIRouter()


@router.get("/tasks", response_model=TaskListResponse)
def get_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    service: TaskService = Depends(get_task_service),
):
    """Get all tasks with optional filtering, search and sorting."""
    return service.list_tasks(
        status=status,
        priority=priority,
        category=category,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )


# Declared ahead of /tasks/{task_id} so "bulk" and "reorder" aren't read as ids.

@router.post("/tasks/bulk", response_model=BulkResponse)
def bulk_update_tasks(
    payload: BulkRequest,
    service: TaskService = Depends(get_task_service),
):
    """Complete, reopen or delete a batch of tasks."""
    updated_count, total = service.bulk_update(payload.action, payload.task_ids)
    return BulkResponse(
        message=f"Bulk {payload.action} completed successfully",
        updated_count=updated_count,
        total_tasks=total,
    )


@router.put("/tasks/reorder", response_model=ReorderResponse)
def reorder_tasks(
    payload: ReorderRequest,
    service: TaskService = Depends(get_task_service),
):
    total = service.reorder(payload.task_ids)
    return ReorderResponse(message="Tasks reordered successfully", total_tasks=total)


@router.post("/tasks", response_model=TaskMessageResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    service: TaskService = Depends(get_task_service),
):
    """Create a new task at the end of the list."""
    created = service.create_task(task)
    return TaskMessageResponse(message="Task created successfully", task=created)


@router.get("/tasks/{task_id}", response_model=Task)
def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """Get a specific task by ID."""
    return service.get_task(task_id)


@router.put("/tasks/{task_id}", response_model=TaskMessageResponse)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Update a specific task with the fields sent."""
    updated = service.update_task(task_id, task_update)
    return TaskMessageResponse(message="Task updated successfully", task=updated)


@router.delete("/tasks/{task_id}", response_model=TaskMessageResponse)
def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """Delete a specific task and close the gap in ordering."""
    removed = service.delete_task(task_id)
    return TaskMessageResponse(message="Task deleted successfully", task=removed)


@router.get("/stats", response_model=StatsResponse)
def get_stats(service: TaskService = Depends(get_task_service)):
    """Aggregate counts over the whole collection."""
    return StatsResponse(**service.stats())
