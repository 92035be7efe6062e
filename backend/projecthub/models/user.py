"""User directory model.

Accounts are owned by the external auth system; this service only reads them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel


class User(SQLModel, table=True):
    """A registered account."""

    __tablename__ = "user"

    id: int | None = SQLField(default=None, primary_key=True)
    name: str
    email: str = SQLField(unique=True, index=True)
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))


class UserSummary(BaseModel):
    """Identity summary exposed alongside projects: id, name, email only."""

    id: int
    name: str
    email: str

    @classmethod
    def of(cls, user: User) -> UserSummary:
        return cls(id=user.id, name=user.name, email=user.email)
