"""User directory helpers — seeding local accounts.

Production accounts come from the external auth system; seeding exists for
development databases and demos.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlmodel import Session, select

from projecthub.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    """Result of a seeding run."""

    created: list[User] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # emails already present


def seed_users(session: Session, entries: Iterable[tuple[str, str]]) -> SeedResult:
    """Insert (name, email) pairs whose email is not registered yet."""
    result = SeedResult()
    for name, email in entries:
        email = email.strip().lower()
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing is not None:
            result.skipped.append(email)
            continue
        user = User(name=name.strip(), email=email)
        session.add(user)
        session.commit()
        session.refresh(user)
        result.created.append(user)
    logger.info("Seeded %d user(s), skipped %d", len(result.created), len(result.skipped))
    return result
