"""Request-scoped dependencies shared by the v1 routers.

The current user is supplied by the fronting auth system in the X-User-ID
header and resolved against the user directory on every request.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from projecthub.db.database import fits_integer_key, get_session
from projecthub.models.user import User


def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-ID"),
    session: Session = Depends(get_session),
) -> User:
    """Resolve the requesting user or fail with 401."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-ID header.")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid X-User-ID header.")
    user = session.get(User, user_id) if fits_integer_key(user_id) else None
    if user is None:
        raise HTTPException(status_code=401, detail=f"Unknown user: {user_id}")
    return user
