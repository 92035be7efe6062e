"""Task model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from sqlmodel import Field as SQLField
from sqlmodel import SQLModel

TaskStatus = Literal["created", "completed"]

TASK_STATUSES: tuple[str, ...] = ("created", "completed")


class Task(SQLModel, table=True):
    """A task belonging to a project, optionally assigned to a user."""

    __tablename__ = "task"

    id: int | None = SQLField(default=None, primary_key=True)
    project_id: int = SQLField(foreign_key="project.id", index=True, ondelete="CASCADE")
    user_id: int | None = SQLField(default=None, foreign_key="user.id", ondelete="SET NULL")
    title: str = SQLField(max_length=255)
    description: str | None = None
    status: str = "created"  # "created" | "completed"
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
