"""Domain errors raised by the stores and the access policy.

The API layer maps them to HTTP responses (see projecthub.main):
ValidationError → 422, NotFoundError → 404, PermissionDeniedError → 403.
"""

from __future__ import annotations


class ValidationError(Exception):
    """Submitted data was rejected before any write.

    Args:
        errors: Field name → human-readable message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Validation failed: {summary}")


class NotFoundError(Exception):
    """A project or task id did not resolve."""

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class PermissionDeniedError(Exception):
    """The current user may not perform the requested action."""

    def __init__(self, action: str, project_id: int | None = None) -> None:
        self.action = action
        self.project_id = project_id
        super().__init__(f"Not allowed to {action}")
