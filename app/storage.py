import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from pydantic import ValidationError

from .config import TASKS_FILE
from .errors import StorageError
from .models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """Whole-collection persistence of tasks in a single JSON file.

    Every write replaces the file through a temp file + ``os.replace`` so a
    reader never sees a half-written document. Callers that read, mutate and
    write should hold ``locked()`` for the whole sequence.
    """

    def __init__(self, path: Union[str, Path] = TASKS_FILE):
        self.path = Path(path)
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Serialize load/mutate/save sequences against this file."""
        with self._lock:
            yield

    def load(self) -> List[Task]:
        """Read every task from disk. A missing file is an empty collection."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.debug("Tasks file %s not found, starting empty", self.path)
            return []
        except (OSError, ValueError) as e:
            logger.error("Failed to read tasks file %s: %s", self.path, e)
            raise StorageError(f"Failed to read tasks file: {e}") from e

        if not isinstance(data, list):
            raise StorageError("Tasks file must contain a JSON array")

        try:
            tasks = [Task.model_validate(item) for item in data]
        except ValidationError as e:
            logger.error("Tasks file %s holds an invalid record: %s", self.path, e)
            raise StorageError(f"Invalid task record in tasks file: {e}") from e

        logger.debug("Loaded %d tasks from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        """Overwrite the file with the given collection."""
        payload = [task.to_json() for task in tasks]
        tmp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write tasks file %s: %s", self.path, e)
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write tasks file: {e}") from e

        logger.debug("Saved %d tasks to %s", len(payload), self.path)


store = TaskStore(TASKS_FILE)


def get_store() -> TaskStore:
    """Dependency returning the process-wide store."""
    return store
