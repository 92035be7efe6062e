"""Project store — projects, their leader and membership set.

All checks run before the first write, so a rejected request leaves the
database untouched. Membership updates reconcile the submitted set against
the stored rows instead of deleting and re-inserting everything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from projecthub.db.database import fits_integer_key
from projecthub.models.project import Project, ProjectMember
from projecthub.models.task import Task
from projecthub.models.user import User
from projecthub.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255
PRICE_MAX = Decimal("9999999999.99")  # NUMERIC(12, 2)

# Fields accepted by update(); anything else is ignored
_UPDATABLE_FIELDS = frozenset({"name", "description", "price", "start_date", "end_date", "member_ids"})


@dataclass
class ProjectBundle:
    """A project with its leader, members and (optionally) tasks loaded."""

    project: Project
    leader: User
    members: list[User] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def member_ids(self) -> set[int]:
        return {m.id for m in self.members}


class ProjectStore:
    """Reads and writes projects inside one request-scoped session.

    Usage:
        store = ProjectStore(session)
        project = store.create(leader, name="Launch", members=[2, 3])
        store.update(project, {"member_ids": [3, 4]})
        store.delete(project)
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # === Reads ===

    def get(self, project_id: int) -> Project:
        project = self.session.get(Project, project_id) if fits_integer_key(project_id) else None
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    def list_for_user(self, user_id: int, search: str | None = None) -> list[Project]:
        """Projects the user leads or belongs to, newest first.

        Args:
            user_id: Requesting user.
            search: Optional case-insensitive substring of the project name.
        """
        memberships = select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)
        stmt = select(Project).where(
            or_(Project.leader_id == user_id, col(Project.id).in_(memberships))
        )
        if search:
            needle = search.strip().lower()
            stmt = stmt.where(func.lower(Project.name).contains(needle, autoescape=True))
        stmt = stmt.order_by(col(Project.id).desc())
        return list(self.session.exec(stmt).all())

    def member_ids(self, project_id: int) -> set[int]:
        stmt = select(ProjectMember.user_id).where(ProjectMember.project_id == project_id)
        return set(self.session.exec(stmt).all())

    def tasks(self, project_id: int) -> list[Task]:
        """Tasks of a project in creation order."""
        stmt = select(Task).where(Task.project_id == project_id).order_by(col(Task.id))
        return list(self.session.exec(stmt).all())

    def bundle(self, projects: Iterable[Project], with_tasks: bool = False) -> list[ProjectBundle]:
        """Attach leaders and members (and tasks) to projects in a fixed number of queries."""
        projects = list(projects)
        if not projects:
            return []
        project_ids = [p.id for p in projects]

        leader_ids = {p.leader_id for p in projects}
        users_by_id = {
            u.id: u for u in self.session.exec(select(User).where(col(User.id).in_(sorted(leader_ids)))).all()
        }

        members_by_project: dict[int, list[User]] = {pid: [] for pid in project_ids}
        rows = self.session.exec(
            select(ProjectMember.project_id, User)
            .select_from(ProjectMember)
            .join(User, col(User.id) == ProjectMember.user_id)
            .where(col(ProjectMember.project_id).in_(project_ids))
            .order_by(col(User.name), col(User.id))
        ).all()
        for project_id, user in rows:
            members_by_project[project_id].append(user)

        tasks_by_project: dict[int, list[Task]] = {pid: [] for pid in project_ids}
        if with_tasks:
            task_rows = self.session.exec(
                select(Task).where(col(Task.project_id).in_(project_ids)).order_by(col(Task.id))
            ).all()
            for task in task_rows:
                tasks_by_project[task.project_id].append(task)

        return [
            ProjectBundle(
                project=p,
                leader=users_by_id[p.leader_id],
                members=members_by_project[p.id],
                tasks=tasks_by_project[p.id],
            )
            for p in projects
        ]

    def form_users(self, user_id: int) -> list[User]:
        """Every user except the requester, for the creation form."""
        stmt = select(User).where(User.id != user_id).order_by(col(User.name), col(User.id))
        return list(self.session.exec(stmt).all())

    def available_users(self, project: Project) -> list[User]:
        """Users who are neither leader nor member of the project."""
        taken = self.member_ids(project.id) | {project.leader_id}
        stmt = select(User).where(col(User.id).not_in(sorted(taken))).order_by(col(User.name), col(User.id))
        return list(self.session.exec(stmt).all())

    # === Writes ===

    def create(
        self,
        leader: User,
        *,
        name: str | None,
        description: str | None = None,
        price: Any = None,
        start_date: Any = None,
        end_date: Any = None,
        members: Iterable[int] | None = None,
    ) -> Project:
        """Create a project led by `leader` and add exactly the given members.

        Raises:
            ValidationError: Missing name, bad price or dates, unknown member id.
        """
        errors: dict[str, str] = {}
        clean_name = _check_name(name, errors)
        clean_price = _check_price(price, errors)
        start = _check_date("start_date", start_date, errors)
        end = _check_date("end_date", end_date, errors)
        _check_date_order(start, end, errors)
        member_set = set(members or [])
        self._check_users_exist("members", member_set, errors)
        if errors:
            raise ValidationError(errors)

        project = Project(
            leader_id=leader.id,
            name=clean_name,
            description=description,
            price=clean_price if clean_price is not None else Decimal("0"),
            start_date=start,
            end_date=end,
        )
        self.session.add(project)
        self.session.flush()
        for user_id in sorted(member_set):
            self.session.add(ProjectMember(project_id=project.id, user_id=user_id))
        self.session.commit()
        self.session.refresh(project)

        logger.info(
            "Project %s '%s' created by user %s with %d member(s)",
            project.id, project.name, leader.id, len(member_set),
        )
        return project

    def update(self, project: Project, changes: dict[str, Any]) -> Project:
        """Apply a partial update; `member_ids` replaces the membership set.

        The leader always remains in the resulting membership set.

        Raises:
            ValidationError: Any submitted value is rejected (nothing is written).
        """
        changes = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}
        errors: dict[str, str] = {}
        values: dict[str, Any] = {}

        if "name" in changes:
            values["name"] = _check_name(changes["name"], errors)
        if "description" in changes:
            values["description"] = changes["description"]
        if "price" in changes:
            price = _check_price(changes["price"], errors)
            values["price"] = price if price is not None else Decimal("0")
        if "start_date" in changes:
            values["start_date"] = _check_date("start_date", changes["start_date"], errors)
        if "end_date" in changes:
            values["end_date"] = _check_date("end_date", changes["end_date"], errors)
        if "start_date" not in errors and "end_date" not in errors:
            _check_date_order(
                values.get("start_date", project.start_date),
                values.get("end_date", project.end_date),
                errors,
            )

        member_set: set[int] | None = None
        if changes.get("member_ids") is not None:
            member_set = set(changes["member_ids"])
            self._check_users_exist("member_ids", member_set - {project.leader_id}, errors)

        if errors:
            raise ValidationError(errors)

        for key, value in values.items():
            setattr(project, key, value)
        project.updated_at = datetime.now(timezone.utc)
        self.session.add(project)

        if member_set is not None:
            added, removed = self._reconcile_members(project, member_set)
            if added or removed:
                logger.info(
                    "Project %s membership: +%s -%s", project.id, sorted(added), sorted(removed)
                )

        self.session.commit()
        self.session.refresh(project)
        logger.info("Project %s updated (%s)", project.id, ", ".join(sorted(changes)) or "no fields")
        return project

    def delete(self, project: Project) -> None:
        """Delete a project together with its tasks and membership rows."""
        project_id = project.id
        tasks = self.session.exec(select(Task).where(Task.project_id == project_id)).all()
        for task in tasks:
            self.session.delete(task)
        memberships = self.session.exec(
            select(ProjectMember).where(ProjectMember.project_id == project_id)
        ).all()
        for membership in memberships:
            self.session.delete(membership)
        # Children must be gone before the parent row when foreign keys are enforced
        self.session.flush()
        self.session.delete(project)
        self.session.commit()
        logger.info(
            "Project %s deleted (%d task(s), %d membership row(s))",
            project_id, len(tasks), len(memberships),
        )

    # === Internals ===

    def _reconcile_members(self, project: Project, submitted: set[int]) -> tuple[set[int], set[int]]:
        """Diff the submitted set against stored rows; unchanged rows are kept as-is."""
        wanted = set(submitted) | {project.leader_id}
        rows = self.session.exec(
            select(ProjectMember).where(ProjectMember.project_id == project.id)
        ).all()
        current = {row.user_id: row for row in rows}

        removed = set(current) - wanted
        added = wanted - set(current)
        for user_id in removed:
            self.session.delete(current[user_id])
        for user_id in sorted(added):
            self.session.add(ProjectMember(project_id=project.id, user_id=user_id))
        return added, removed

    def _check_users_exist(self, field_name: str, user_ids: set[int], errors: dict[str, str]) -> None:
        if not user_ids:
            return
        # Ids outside the INTEGER range cannot exist and cannot be bound either
        storable = sorted(u for u in user_ids if fits_integer_key(u))
        found: set[int] = set()
        if storable:
            found = set(self.session.exec(select(User.id).where(col(User.id).in_(storable))).all())
        missing = sorted(user_ids - found)
        if missing:
            errors[field_name] = f"Unknown user id(s): {', '.join(str(m) for m in missing)}"


# === Field checks ===


def _check_name(value: Any, errors: dict[str, str]) -> str:
    if value is None or not str(value).strip():
        errors["name"] = "name is required"
        return ""
    name = str(value).strip()
    if len(name) > NAME_MAX_LENGTH:
        errors["name"] = f"name may not be longer than {NAME_MAX_LENGTH} characters"
    return name


def _check_price(value: Any, errors: dict[str, str]) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        errors["price"] = "price must be a number"
        return None
    if not price.is_finite():
        errors["price"] = "price must be a number"
        return None
    if price < 0:
        errors["price"] = "price may not be negative"
    elif price > PRICE_MAX:
        errors["price"] = f"price may not exceed {PRICE_MAX}"
    return price


def _check_date(field_name: str, value: Any, errors: dict[str, str]) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        errors[field_name] = f"{field_name} is not a valid date"
        return None


def _check_date_order(start: date | None, end: date | None, errors: dict[str, str]) -> None:
    if start is not None and end is not None and end < start:
        errors["end_date"] = "end_date must be on or after start_date"
