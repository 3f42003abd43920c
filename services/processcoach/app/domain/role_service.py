"""Job description (role) rules applied before and after repository calls."""
from __future__ import annotations

from typing import Iterable

import structlog

from ..persistence.repositories import RoleRepository
from .errors import ApplicationError, DuplicateRoleError, ValidationError
from .types import Role

logger = structlog.get_logger(__name__)

DUPLICATE_MESSAGE = "A job description with this name already exists."


def _require_fields(name: str, description: str) -> tuple[str, str]:
    name = name.strip()
    description = description.strip()
    if not name and not description:
        raise ValidationError("Name and description are required.")
    if not name:
        raise ValidationError("Name is required.")
    if not description:
        raise ValidationError("Description is required.")
    return name, description


def role_name_taken(name: str, existing: Iterable[Role]) -> bool:
    """Case-insensitive check against the roles already loaded."""
    folded = name.strip().casefold()
    return any(role.role_name.casefold() == folded for role in existing)


class RoleService:
    def __init__(self, roles: RoleRepository) -> None:
        self._roles = roles

    async def list_roles(self) -> list[Role]:
        return await self._roles.list()

    async def create_role(self, name: str, description: str, existing: Iterable[Role]) -> Role:
        name, description = _require_fields(name, description)
        # soft check only; the server's unique constraint decides
        if role_name_taken(name, existing):
            raise DuplicateRoleError(DUPLICATE_MESSAGE)
        try:
            return await self._roles.create(name, description)
        except ApplicationError as exc:
            if exc.mentions("duplicate", "unique"):
                logger.info("roles.duplicate_rejected_by_server", role_name=name)
                raise DuplicateRoleError(DUPLICATE_MESSAGE) from exc
            raise

    async def update_role(self, name: str, description: str) -> Role:
        name, description = _require_fields(name, description)
        return await self._roles.update(name, description)

    async def delete_role(self, name: str) -> int:
        return await self._roles.delete(name)


__all__ = ["DUPLICATE_MESSAGE", "RoleService", "role_name_taken"]
