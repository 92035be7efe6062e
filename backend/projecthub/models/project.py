"""Project and membership models."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel


class Project(SQLModel, table=True):
    """A collaboration project with one leader and a set of members."""

    __tablename__ = "project"

    id: int | None = SQLField(default=None, primary_key=True)
    leader_id: int = SQLField(foreign_key="user.id", index=True, ondelete="CASCADE")
    name: str = SQLField(max_length=255)
    description: str | None = None
    price: Decimal = SQLField(default=Decimal("0"), max_digits=12, decimal_places=2)
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))


class ProjectMember(SQLModel, table=True):
    """Membership row: one (project, user) pair."""

    __tablename__ = "project_member"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id: int | None = SQLField(default=None, primary_key=True)
    project_id: int = SQLField(foreign_key="project.id", index=True, ondelete="CASCADE")
    user_id: int = SQLField(foreign_key="user.id", index=True, ondelete="CASCADE")
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
