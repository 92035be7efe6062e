"""Access policy — who may view and mutate a project and its tasks.

Roles are derived from the project itself:
- leader: the creating user; may edit project metadata and membership
- member: leader OR any user in the membership set; may manage tasks
- everyone else: no access to the project
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from typing import Literal

from projecthub.models.project import Project
from projecthub.services.errors import PermissionDeniedError

logger = logging.getLogger(__name__)

Role = Literal["leader", "member"]


def is_leader(project: Project, user_id: int) -> bool:
    return project.leader_id == user_id


def is_member(project: Project, user_id: int, member_ids: Collection[int]) -> bool:
    """Leader counts as a member for permission purposes."""
    return is_leader(project, user_id) or user_id in member_ids


def role_of(project: Project, user_id: int, member_ids: Collection[int]) -> Role | None:
    if is_leader(project, user_id):
        return "leader"
    if user_id in member_ids:
        return "member"
    return None


def require_leader(project: Project, user_id: int, action: str) -> None:
    """Raise PermissionDeniedError unless user_id leads the project."""
    if not is_leader(project, user_id):
        logger.warning("User %s refused '%s' on project %s (not leader)", user_id, action, project.id)
        raise PermissionDeniedError(action, project.id)


def require_member(
    project: Project,
    user_id: int,
    member_ids: Collection[int],
    action: str,
    *,
    enforce: bool = True,
) -> None:
    """Raise PermissionDeniedError unless user_id is leader or member.

    With enforce=False the check is skipped (legacy permissive mode).
    """
    if not enforce:
        return
    if not is_member(project, user_id, member_ids):
        logger.warning("User %s refused '%s' on project %s (not a member)", user_id, action, project.id)
        raise PermissionDeniedError(action, project.id)
