"""Project endpoints.

GET    /api/v1/projects              — projects the requester leads or belongs to (?search=)
GET    /api/v1/projects/stats        — dashboard totals over those projects
GET    /api/v1/projects/create       — creation form data (every other user)
POST   /api/v1/projects              — create; the requester becomes leader
GET    /api/v1/projects/{id}         — project with leader, members, tasks, progress
PUT    /api/v1/projects/{id}         — leader-only partial update, member_ids replaces the set
DELETE /api/v1/projects/{id}         — leader-only, removes tasks and memberships too
GET    /api/v1/projects/{id}/tasks   — tasks in creation order
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlmodel import Session

from projecthub.api.deps import get_current_user
from projecthub.api.v1.tasks import TaskResponse, to_task_response
from projecthub.config import settings
from projecthub.db.database import get_session
from projecthub.models.project import Project
from projecthub.models.user import User, UserSummary
from projecthub.services.access import is_leader, is_member, require_leader, require_member, role_of
from projecthub.services.progress import (
    DashboardStats,
    ProjectProgress,
    dashboard_stats,
    days_remaining,
    project_progress,
)
from projecthub.services.projects import ProjectBundle, ProjectStore

router = APIRouter(prefix="/api/v1", tags=["projects"])


# === Request / Response Models ===


class CreateProjectRequest(BaseModel):
    """Request to create a project. The leader is always the requester."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    start_date: date | None = None
    end_date: date | None = None
    members: list[int] = Field(default_factory=list)


class UpdateProjectRequest(BaseModel):
    """Request to update a project. All fields optional."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    start_date: date | None = None
    end_date: date | None = None
    member_ids: list[int] | None = None


class ProjectSummary(BaseModel):
    """Project as listed: identity summaries for leader and members only."""

    id: int
    name: str
    description: str | None = None
    price: float
    start_date: date | None = None
    end_date: date | None = None
    leader: UserSummary
    members: list[UserSummary] = Field(default_factory=list)
    completed_tasks: int
    total_tasks: int
    progress: float
    days_remaining: int | None = None
    role: str | None = None  # "leader" | "member" | None
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectSummary):
    """Full project view."""

    tasks: list[TaskResponse] = Field(default_factory=list)
    available_users: list[UserSummary] = Field(default_factory=list)
    is_leader: bool = False
    is_member: bool = False


class CreateFormResponse(BaseModel):
    users: list[UserSummary]


def _summary_fields(bundle: ProjectBundle, user: User) -> dict:
    project = bundle.project
    progress: ProjectProgress = project_progress(bundle.tasks)
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "price": float(project.price),
        "start_date": project.start_date,
        "end_date": project.end_date,
        "leader": UserSummary.of(bundle.leader),
        "members": [UserSummary.of(m) for m in bundle.members],
        "completed_tasks": progress.completed_tasks,
        "total_tasks": progress.total_tasks,
        "progress": progress.percentage,
        "days_remaining": days_remaining(project.end_date),
        "role": role_of(project, user.id, bundle.member_ids),
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


def _to_detail(store: ProjectStore, project: Project, user: User) -> ProjectDetail:
    bundle = store.bundle([project], with_tasks=True)[0]
    return ProjectDetail(
        **_summary_fields(bundle, user),
        tasks=[to_task_response(t) for t in bundle.tasks],
        available_users=[UserSummary.of(u) for u in store.available_users(project)],
        is_leader=is_leader(project, user.id),
        is_member=is_member(project, user.id, bundle.member_ids),
    )


def _load_visible(store: ProjectStore, project_id: int, user: User, action: str) -> Project:
    project = store.get(project_id)
    require_member(
        project, user.id, store.member_ids(project.id), action,
        enforce=settings.enforce_membership,
    )
    return project


# === Endpoints ===


@router.get("/projects", response_model=list[ProjectSummary])
def list_projects(
    search: str | None = Query(default=None, max_length=255),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> list[ProjectSummary]:
    """List projects the requester leads or is a member of, newest first."""
    store = ProjectStore(session)
    bundles = store.bundle(store.list_for_user(user.id, search=search), with_tasks=True)
    return [ProjectSummary(**_summary_fields(b, user)) for b in bundles]


@router.get("/projects/stats", response_model=DashboardStats)
def project_stats(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> DashboardStats:
    """Totals over the requester's projects: count, budget, team size, average progress."""
    store = ProjectStore(session)
    bundles = store.bundle(store.list_for_user(user.id), with_tasks=True)
    return dashboard_stats(
        prices=[b.project.price for b in bundles],
        member_counts=[len(b.members) for b in bundles],
        percentages=[project_progress(b.tasks).percentage for b in bundles],
    )


@router.get("/projects/create", response_model=CreateFormResponse)
def project_create_form(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> CreateFormResponse:
    users = ProjectStore(session).form_users(user.id)
    return CreateFormResponse(users=[UserSummary.of(u) for u in users])


@router.post("/projects", response_model=ProjectDetail, status_code=201)
def create_project(
    request: CreateProjectRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> ProjectDetail:
    store = ProjectStore(session)
    project = store.create(
        user,
        name=request.name,
        description=request.description,
        price=request.price,
        start_date=request.start_date,
        end_date=request.end_date,
        members=request.members,
    )
    return _to_detail(store, project, user)


@router.get("/projects/{project_id}", response_model=ProjectDetail)
def get_project(
    project_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> ProjectDetail:
    store = ProjectStore(session)
    project = _load_visible(store, project_id, user, "view this project")
    return _to_detail(store, project, user)


@router.put("/projects/{project_id}", response_model=ProjectDetail)
def update_project(
    project_id: int,
    request: UpdateProjectRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> ProjectDetail:
    """Update project metadata and membership (leader only)."""
    store = ProjectStore(session)
    project = store.get(project_id)
    require_leader(project, user.id, "edit this project")
    project = store.update(project, request.model_dump(exclude_unset=True))
    return _to_detail(store, project, user)


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(
    project_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> None:
    store = ProjectStore(session)
    project = store.get(project_id)
    require_leader(project, user.id, "delete this project")
    store.delete(project)


@router.get("/projects/{project_id}/tasks", response_model=list[TaskResponse])
def list_project_tasks(
    project_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> list[TaskResponse]:
    store = ProjectStore(session)
    project = _load_visible(store, project_id, user, "view this project")
    return [to_task_response(t) for t in store.tasks(project.id)]
