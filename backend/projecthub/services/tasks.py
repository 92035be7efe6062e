"""Task store — tasks owned by a project."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlmodel import Session

from projecthub.db.database import fits_integer_key
from projecthub.models.project import Project
from projecthub.models.task import TASK_STATUSES, Task
from projecthub.models.user import User
from projecthub.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255

_UPDATABLE_FIELDS = frozenset({"title", "description", "status"})


class TaskStore:
    """Creates, edits, toggles and deletes tasks inside one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, task_id: int) -> Task:
        task = self.session.get(Task, task_id) if fits_integer_key(task_id) else None
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def create(
        self,
        *,
        title: str | None,
        project_id: int | None,
        description: str | None = None,
        status: str | None = None,
        user_id: int | None = None,
    ) -> Task:
        """Create a task. Project progress is derived, so nothing else changes.

        Raises:
            ValidationError: Missing title, bad status, unknown project or user.
        """
        errors: dict[str, str] = {}
        clean_title = _check_title(title, errors)
        clean_status = _check_status(status if status is not None else "created", errors)
        if project_id is None:
            errors["project_id"] = "project_id is required"
        elif not fits_integer_key(project_id) or self.session.get(Project, project_id) is None:
            errors["project_id"] = f"Unknown project id: {project_id}"
        if user_id is not None and (
            not fits_integer_key(user_id) or self.session.get(User, user_id) is None
        ):
            errors["user_id"] = f"Unknown user id: {user_id}"
        if errors:
            raise ValidationError(errors)

        task = Task(
            title=clean_title,
            description=description,
            project_id=project_id,
            status=clean_status,
            user_id=user_id,
        )
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        logger.info("Task %s created in project %s", task.id, task.project_id)
        return task

    def update(self, task: Task, changes: dict[str, Any]) -> Task:
        """Apply any subset of title, description and status."""
        changes = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}
        errors: dict[str, str] = {}
        values: dict[str, Any] = {}
        if "title" in changes:
            values["title"] = _check_title(changes["title"], errors)
        if "description" in changes:
            values["description"] = changes["description"]
        if "status" in changes:
            values["status"] = _check_status(changes["status"], errors)
        if errors:
            raise ValidationError(errors)

        if not values:
            return task
        for key, value in values.items():
            setattr(task, key, value)
        task.updated_at = datetime.now(timezone.utc)
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def toggle(self, task: Task) -> Task:
        """Flip created ↔ completed.

        Two toggles restore the stored status; updated_at still records each change.
        """
        new_status = "created" if task.status == "completed" else "completed"
        return self.update(task, {"status": new_status})

    def delete(self, task: Task) -> None:
        task_id, project_id = task.id, task.project_id
        self.session.delete(task)
        self.session.commit()
        logger.info("Task %s deleted from project %s", task_id, project_id)


def _check_title(value: Any, errors: dict[str, str]) -> str:
    if value is None or not str(value).strip():
        errors["title"] = "title is required"
        return ""
    title = str(value).strip()
    if len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"title may not be longer than {TITLE_MAX_LENGTH} characters"
    return title


def _check_status(value: Any, errors: dict[str, str]) -> str:
    if value not in TASK_STATUSES:
        errors["status"] = f"status must be one of: {', '.join(TASK_STATUSES)}"
        return "created"
    return value
