"""User directory endpoints (read-only).

GET /api/v1/users    — all registered users (id, name, email)
GET /api/v1/users/me — the requesting user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session, col, select

from projecthub.api.deps import get_current_user
from projecthub.db.database import get_session
from projecthub.models.user import User, UserSummary

router = APIRouter(prefix="/api/v1", tags=["users"])


@router.get("/users", response_model=list[UserSummary])
def list_users(
    _: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> list[UserSummary]:
    users = session.exec(select(User).order_by(col(User.name), col(User.id))).all()
    return [UserSummary.of(u) for u in users]


@router.get("/users/me", response_model=UserSummary)
def current_user(user: User = Depends(get_current_user)) -> UserSummary:
    return UserSummary.of(user)
