"""Task endpoints.

POST   /api/v1/tasks             — create a task in a project
GET    /api/v1/tasks/{id}        — single task
PUT    /api/v1/tasks/{id}        — update title / description / status
POST   /api/v1/tasks/{id}/toggle — flip created ↔ completed
DELETE /api/v1/tasks/{id}        — delete

Every mutation requires the requester to lead or belong to the task's project
(unless ENFORCE_MEMBERSHIP=false).
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel import Session

from projecthub.api.deps import get_current_user
from projecthub.config import settings
from projecthub.db.database import fits_integer_key, get_session
from projecthub.models.project import Project
from projecthub.models.task import Task
from projecthub.models.user import User
from projecthub.services.access import require_member
from projecthub.services.projects import ProjectStore
from projecthub.services.tasks import TaskStore

router = APIRouter(prefix="/api/v1", tags=["tasks"])


# === Request / Response Models ===


class CreateTaskRequest(BaseModel):
    """Request to create a task. user_id defaults to the requester when omitted."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    project_id: int
    status: Literal["created", "completed"] = "created"
    user_id: int | None = None


class UpdateTaskRequest(BaseModel):
    """Request to update a task. All fields optional."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: Literal["created", "completed"] | None = None


class TaskResponse(BaseModel):
    id: int
    project_id: int
    user_id: int | None = None
    title: str
    description: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


def to_task_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        status=task.status,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _check_task_access(session: Session, task: Task, user: User, action: str) -> None:
    projects = ProjectStore(session)
    project = projects.get(task.project_id)
    require_member(
        project, user.id, projects.member_ids(project.id), action,
        enforce=settings.enforce_membership,
    )


# === Endpoints ===


@router.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task(
    request: CreateTaskRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    """Create a task; an unknown project_id is a validation error."""
    project = session.get(Project, request.project_id) if fits_integer_key(request.project_id) else None
    if project is not None:
        projects = ProjectStore(session)
        require_member(
            project, user.id, projects.member_ids(project.id), "create tasks",
            enforce=settings.enforce_membership,
        )

    assignee = request.user_id if "user_id" in request.model_fields_set else user.id
    task = TaskStore(session).create(
        title=request.title,
        description=request.description,
        project_id=request.project_id,
        status=request.status,
        user_id=assignee,
    )
    return to_task_response(task)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    task = TaskStore(session).get(task_id)
    _check_task_access(session, task, user, "view tasks")
    return to_task_response(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    request: UpdateTaskRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    store = TaskStore(session)
    task = store.get(task_id)
    _check_task_access(session, task, user, "update tasks")
    task = store.update(task, request.model_dump(exclude_unset=True))
    return to_task_response(task)


@router.post("/tasks/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(
    task_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    store = TaskStore(session)
    task = store.get(task_id)
    _check_task_access(session, task, user, "update tasks")
    return to_task_response(store.toggle(task))


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> None:
    store = TaskStore(session)
    task = store.get(task_id)
    _check_task_access(session, task, user, "delete tasks")
    store.delete(task)
