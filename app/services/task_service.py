"""Task operations over the JSON-file store.

Each operation loads the whole collection, works on it in memory and, for
mutations, writes it back in one piece while holding the store lock.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import Depends

from ..errors import BadBulkRequestError, NotFoundError, TaskValidationError
from ..models import CATEGORIES, PRIORITIES, PRIORITY_RANK, Task, format_timestamp
from ..schemas.task import TaskCreate, TaskUpdate
from ..storage import TaskStore, get_store
from ..validation import parse_timestamp, validate_task

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("complete", "incomplete", "delete")

EARLIEST = datetime.min.replace(tzinfo=timezone.utc)
FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _renumber(tasks: List[Task]) -> None:
    for index, task in enumerate(tasks):
        task.order = index


def _matches_search(task: Task, term: str) -> bool:
    if term in task.text.lower():
        return True
    if task.description and term in task.description.lower():
        return True
    return any(term in tag.lower() for tag in task.tags)


def _sort_key(sort_by: str) -> Callable[[Task], object]:
    if sort_by == "date":
        return lambda t: parse_timestamp(t.created_at) or EARLIEST
    if sort_by == "name":
        return lambda t: t.text.lower()
    if sort_by == "priority":
        return lambda t: PRIORITY_RANK.get(t.priority, 0)
    if sort_by == "category":
        return lambda t: t.category
    if sort_by == "deadline":
        return lambda t: parse_timestamp(t.deadline) or FAR_FUTURE
    # Unknown keys compare the raw createdAt strings.
    return lambda t: t.created_at


class TaskService:
    def __init__(self, store: TaskStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self._clock = clock

    def _now(self) -> str:
        return format_timestamp(self._clock())

    def _load(self) -> List[Task]:
        with self.store.locked():
            return self.store.load()

    @staticmethod
    def _find_index(tasks: List[Task], task_id: str) -> int:
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return index
        raise NotFoundError()

    def list_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> dict:
        """Return tasks matching every given filter, optionally sorted.

        ``status`` is ``all``, ``active`` or ``completed``; ``priority`` and
        ``category`` match exactly unless ``all``; ``search`` is a
        case-insensitive substring of text, description or any tag.
        """
        tasks = self._load()
        filtered = list(tasks)

        if status == "active":
            filtered = [t for t in filtered if not t.completed]
        elif status == "completed":
            filtered = [t for t in filtered if t.completed]

        if priority and priority != "all":
            filtered = [t for t in filtered if t.priority == priority]

        if category and category != "all":
            filtered = [t for t in filtered if t.category == category]

        if search:
            term = search.lower()
            filtered = [t for t in filtered if _matches_search(t, term)]

        if sort_by:
            filtered.sort(key=_sort_key(sort_by), reverse=sort_order == "desc")

        return {
            "tasks": filtered,
            "total": len(tasks),
            "filtered": len(filtered),
            "timestamp": self._now(),
        }

    def get_task(self, task_id: str) -> Task:
        tasks = self._load()
        return tasks[self._find_index(tasks, task_id)]

    def create_task(self, data: TaskCreate) -> Task:
        errors = validate_task(data)
        if errors:
            raise TaskValidationError(errors)

        now = self._now()
        with self.store.locked():
            tasks = self.store.load()
            task = Task(
                text=data.text.strip(),
                description=(data.description or "").strip(),
                priority=data.priority or "medium",
                category=data.category or "personal",
                deadline=data.deadline or None,
                tags=list(data.tags) if data.tags is not None else [],
                completed=False,
                created_at=now,
                updated_at=now,
                completed_at=None,
                order=len(tasks),
            )
            tasks.append(task)
            self.store.save(tasks)

        logger.info("Created task %s at position %d", task.id, task.order)
        return task

    def update_task(self, task_id: str, patch: TaskUpdate) -> Task:
        """Merge the fields sent in ``patch`` onto an existing task.

        ``completedAt`` is set when ``completed`` flips to true and cleared
        when it is set false; patches without ``completed`` leave it alone.
        """
        with self.store.locked():
            tasks = self.store.load()
            index = self._find_index(tasks, task_id)

            errors = validate_task(patch, require_text=False)
            if errors:
                raise TaskValidationError(errors)

            existing = tasks[index]
            now = self._now()
            changes = patch.model_dump(exclude_unset=True)

            # Only deadline may be cleared with null.
            for field in ("description", "priority", "category", "tags"):
                if field in changes and changes[field] is None:
                    del changes[field]
            if "text" in changes:
                changes["text"] = changes["text"].strip()
            if "description" in changes:
                changes["description"] = changes["description"].strip()
            if "deadline" in changes:
                changes["deadline"] = changes["deadline"] or None

            if "completed" in changes:
                completed = bool(changes["completed"])
                changes["completed"] = completed
                if completed and not existing.completed:
                    changes["completed_at"] = now
                elif not completed:
                    changes["completed_at"] = None

            changes["updated_at"] = now
            updated = existing.model_copy(update=changes)
            tasks[index] = updated
            self.store.save(tasks)

        logger.info("Updated task %s fields=%s", task_id, sorted(changes))
        return updated

    def delete_task(self, task_id: str) -> Task:
        with self.store.locked():
            tasks = self.store.load()
            removed = tasks.pop(self._find_index(tasks, task_id))
            _renumber(tasks)
            self.store.save(tasks)

        logger.info("Deleted task %s, %d remaining", task_id, len(tasks))
        return removed

    def bulk_update(self, action: Optional[str], task_ids: object) -> Tuple[int, int]:
        """Apply ``action`` to every task in ``task_ids``.

        Returns the number of tasks changed and the collection size afterwards.
        """
        if not action or not isinstance(task_ids, list) or not task_ids:
            raise BadBulkRequestError("Invalid bulk operation request")
        if action not in BULK_ACTIONS:
            raise BadBulkRequestError("Invalid bulk action")

        ids = {task_id for task_id in task_ids if isinstance(task_id, str)}
        updated_count = 0

        with self.store.locked():
            tasks = self.store.load()
            now = self._now()

            if action == "delete":
                survivors = [t for t in tasks if t.id not in ids]
                updated_count = len(tasks) - len(survivors)
                tasks = survivors
                _renumber(tasks)
            else:
                completing = action == "complete"
                for task in tasks:
                    if task.id in ids and task.completed != completing:
                        task.completed = completing
                        task.completed_at = now if completing else None
                        task.updated_at = now
                        updated_count += 1

            self.store.save(tasks)

        logger.info("Bulk %s affected %d of %d requested tasks", action, updated_count, len(ids))
        return updated_count, len(tasks)

    def reorder(self, task_ids: object) -> int:
        """Put the listed tasks first, in the given order, then the rest.

        Unknown and repeated ids are skipped. Returns the collection size.
        """
        if not isinstance(task_ids, list):
            raise BadBulkRequestError("taskIds must be an array")

        with self.store.locked():
            tasks = self.store.load()
            by_id = {task.id: task for task in tasks}
            now = self._now()

            reordered: List[Task] = []
            placed = set()
            for task_id in task_ids:
                if not isinstance(task_id, str) or task_id in placed:
                    continue
                task = by_id.get(task_id)
                if task is None:
                    continue
                task.order = len(reordered)
                task.updated_at = now
                reordered.append(task)
                placed.add(task_id)

            for task in tasks:
                if task.id not in placed:
                    task.order = len(reordered)
                    reordered.append(task)

            self.store.save(reordered)

        logger.info("Reordered %d tasks (%d placed explicitly)", len(reordered), len(placed))
        return len(reordered)

    def stats(self) -> dict:
        tasks = self._load()
        now = self._clock()
        day_ago = now - timedelta(days=1)

        by_priority: Dict[str, int] = {p: 0 for p in reversed(PRIORITIES)}
        by_category: Dict[str, int] = {c: 0 for c in CATEGORIES}
        completed = overdue = recently_completed = 0

        for task in tasks:
            if task.completed:
                completed += 1
            else:
                deadline = parse_timestamp(task.deadline)
                if deadline is not None and deadline < now:
                    overdue += 1
            if task.priority in by_priority:
                by_priority[task.priority] += 1
            if task.category in by_category:
                by_category[task.category] += 1
            completed_at = parse_timestamp(task.completed_at)
            if completed_at is not None and completed_at > day_ago:
                recently_completed += 1

        return {
            "total": len(tasks),
            "completed": completed,
            "active": len(tasks) - completed,
            "overdue": overdue,
            "by_priority": by_priority,
            "by_category": by_category,
            "recently_completed": recently_completed,
        }


def get_task_service(store: TaskStore = Depends(get_store)) -> TaskService:
    """Dependency to get a service bound to the shared store."""
    return TaskService(store)
