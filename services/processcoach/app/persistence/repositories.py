"""Owner-scoped repositories layered on the GraphQL gateway."""
from __future__ import annotations

from typing import Any, Protocol

from ..domain.errors import NotFoundError, OwnerTokenUnavailableError
from ..domain.types import OwnerContext, Play, PlayStep, Role, normalize_optional
from . import queries


class Gateway(Protocol):
    async def execute(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        owner: OwnerContext | None = None,
    ) -> dict[str, Any]: ...


class _OwnerScopedRepository:
    def __init__(self, gateway: Gateway, owner: OwnerContext | None) -> None:
        self._gateway = gateway
        self._owner = owner

    def _require_owner(self) -> OwnerContext:
        if self._owner is None:
            raise OwnerTokenUnavailableError("Repository call requires an owner token")
        return self._owner

    async def _run(self, document: str, **variables: Any) -> dict[str, Any]:
        owner = self._require_owner()
        return await self._gateway.execute(document, {**variables, "client_id": owner.token}, owner=owner)


def _field(data: dict[str, Any] | None, name: str) -> dict[str, Any]:
    # the server answers null for a collection the owner cannot see
    return (data or {}).get(name) or {}


def _nodes(data: dict[str, Any], collection: str) -> list[dict[str, Any]]:
    return [edge["node"] for edge in _field(data, collection).get("edges") or [] if edge and edge.get("node")]


def _first_record(data: dict[str, Any], mutation: str, entity: str, key: str) -> dict[str, Any]:
    records = _field(data, mutation).get("records") or []
    if not records:
        raise NotFoundError(entity, key)
    return records[0]


def _affected(data: dict[str, Any], mutation: str) -> int:
    return int(_field(data, mutation).get("affectedCount") or 0)


class PlayRepository(_OwnerScopedRepository):
    async def list(self) -> list[Play]:
        data = await self._run(queries.LIST_PLAYS)
        return [Play.from_node(node) for node in _nodes(data, "playsCollection")]

    async def get(self, play_id: str) -> Play | None:
        data = await self._run(queries.GET_PLAY, play_id=play_id)
        nodes = _nodes(data, "playsCollection")
        return Play.from_node(nodes[0]) if nodes else None

    async def create(self, play_name: str) -> Play:
        data = await self._run(queries.CREATE_PLAY, play_name=play_name)
        return Play.from_node(_first_record(data, "insertIntoplaysCollection", "Play", play_name))

    async def update(self, play_id: str, play_name: str) -> Play:
        data = await self._run(queries.UPDATE_PLAY, play_id=play_id, play_name=play_name)
        return Play.from_node(_first_record(data, "updateplaysCollection", "Play", play_id))

    async def delete(self, play_id: str) -> int:
        data = await self._run(queries.DELETE_PLAY, play_id=play_id)
        return _affected(data, "deleteFromplaysCollection")


class PlayStepRepository(_OwnerScopedRepository):
    """Steps are listed by ``step_num`` ascending, nulls last.

    Description and role go through :func:`normalize_optional` on every write.
    """

    async def list(self, play_id: str) -> list[PlayStep]:
        data = await self._run(queries.LIST_PLAY_STEPS, play_id=play_id)
        return [PlayStep.from_node(node) for node in _nodes(data, "play_stepsCollection")]

    async def create(
        self,
        play_id: str,
        step_name: str,
        step_num: int,
        step_description: str | None = None,
        step_role_name: str | None = None,
    ) -> PlayStep:
        data = await self._run(
            queries.CREATE_PLAY_STEP,
            play_id=play_id,
            step_name=step_name,
            step_description=normalize_optional(step_description),
            step_num=step_num,
            step_role_name=normalize_optional(step_role_name),
        )
        return PlayStep.from_node(_first_record(data, "insertIntoplay_stepsCollection", "PlayStep", step_name))

    async def update(
        self,
        step_id: str,
        step_name: str,
        step_num: int,
        step_description: str | None = None,
        step_role_name: str | None = None,
    ) -> PlayStep:
        data = await self._run(
            queries.UPDATE_PLAY_STEP,
            id=step_id,
            step_name=step_name,
            step_description=normalize_optional(step_description),
            step_num=step_num,
            step_role_name=normalize_optional(step_role_name),
        )
        return PlayStep.from_node(_first_record(data, "updateplay_stepsCollection", "PlayStep", step_id))

    async def delete(self, step_id: str) -> int:
        data = await self._run(queries.DELETE_PLAY_STEP, id=step_id)
        return _affected(data, "deleteFromplay_stepsCollection")


class RoleRepository(_OwnerScopedRepository):
    async def list(self) -> list[Role]:
        data = await self._run(queries.LIST_ROLES)
        return [Role.from_node(node) for node in _nodes(data, "rolesCollection")]

    async def create(self, role_name: str, role_description: str) -> Role:
        data = await self._run(queries.CREATE_ROLE, role_name=role_name, role_description=role_description)
        return Role.from_node(_first_record(data, "insertIntorolesCollection", "Role", role_name))

    async def update(self, role_name: str, role_description: str) -> Role:
        data = await self._run(queries.UPDATE_ROLE, role_name=role_name, role_description=role_description)
        return Role.from_node(_first_record(data, "updaterolesCollection", "Role", role_name))

    async def delete(self, role_name: str) -> int:
        data = await self._run(queries.DELETE_ROLE, role_name=role_name)
        return _affected(data, "deleteFromrolesCollection")


__all__ = ["Gateway", "PlayRepository", "PlayStepRepository", "RoleRepository"]
