import asyncio
import itertools
import json

import httpx
import pytest

from services.processcoach.app.config import GeneratorSettings, GraphQLSettings, ProcessCoachSettings
from services.processcoach.app.domain.errors import NotFoundError, TransportError
from services.processcoach.app.domain.types import PersistedRef, Play, PlayStep, Role


class FakeStepStore:
    """In-memory stand-in for PlayStepRepository that records every call."""

    def __init__(self) -> None:
        self.rows: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.fail_update_ids: set[str] = set()
        self.fail_create_names: set[str] = set()
        self.fail_delete = False
        self.list_gate: asyncio.Event | None = None
        self._ids = itertools.count(1)

    def seed(self, play_id: str, step_name: str, step_num: int, step_id: str | None = None, **extra) -> str:
        step_id = step_id or f"step-{next(self._ids)}"
        self.rows[step_id] = {
            "id": step_id,
            "play_id": play_id,
            "step_name": step_name,
            "step_num": step_num,
            "step_description": extra.get("step_description"),
            "step_role_name": extra.get("step_role_name"),
        }
        return step_id

    def _to_step(self, row: dict) -> PlayStep:
        return PlayStep(
            ref=PersistedRef(row["id"]),
            play_id=row["play_id"],
            step_name=row["step_name"],
            step_num=row["step_num"],
            step_description=row["step_description"],
            step_role_name=row["step_role_name"],
        )

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def list(self, play_id: str) -> list[PlayStep]:
        self.calls.append(("list", play_id))
        if self.list_gate is not None:
            await self.list_gate.wait()
        rows = [row for row in self.rows.values() if row["play_id"] == play_id]
        rows.sort(key=lambda row: (row["step_num"] is None, row["step_num"] or 0))
        return [self._to_step(row) for row in rows]

    async def create(self, play_id, step_name, step_num, step_description=None, step_role_name=None) -> PlayStep:
        self.calls.append(("create", play_id, step_name, step_num, step_description, step_role_name))
        await asyncio.sleep(0)
        if step_name in self.fail_create_names:
            raise TransportError(500, "insert failed")
        step_id = self.seed(play_id, step_name, step_num, step_description=step_description, step_role_name=step_role_name)
        return self._to_step(self.rows[step_id])

    async def update(self, step_id, step_name, step_num, step_description=None, step_role_name=None) -> PlayStep:
        self.calls.append(("update", step_id, step_name, step_num, step_description, step_role_name))
        await asyncio.sleep(0)
        if step_id in self.fail_update_ids:
            raise TransportError(500, "update failed")
        if step_id not in self.rows:
            raise NotFoundError("PlayStep", step_id)
        self.rows[step_id].update(
            step_name=step_name,
            step_num=step_num,
            step_description=step_description,
            step_role_name=step_role_name,
        )
        return self._to_step(self.rows[step_id])

    async def delete(self, step_id: str) -> int:
        self.calls.append(("delete", step_id))
        await asyncio.sleep(0)
        if self.fail_delete:
            raise TransportError(503, "unavailable")
        return 1 if self.rows.pop(step_id, None) else 0


class FakePlayRepository:
    def __init__(self) -> None:
        self.plays: dict[str, Play] = {}
        self.get_delay = 0.0
        self._ids = itertools.count(1)

    def seed(self, play_name: str) -> Play:
        play = Play(play_id=f"play-{next(self._ids)}", play_name=play_name, owner_token="device-1")
        self.plays[play.play_id] = play
        return play

    async def list(self) -> list[Play]:
        return sorted(self.plays.values(), key=lambda play: play.play_name)

    async def get(self, play_id: str) -> Play | None:
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        return self.plays.get(play_id)

    async def create(self, play_name: str) -> Play:
        return self.seed(play_name)

    async def update(self, play_id: str, play_name: str) -> Play:
        if play_id not in self.plays:
            raise NotFoundError("Play", play_id)
        self.plays[play_id].play_name = play_name
        return self.plays[play_id]

    async def delete(self, play_id: str) -> int:
        return 1 if self.plays.pop(play_id, None) else 0


class FakeRoleRepository:
    def __init__(self, names: tuple[str, ...] = ()) -> None:
        self.roles: dict[str, Role] = {name: Role(role_name=name, role_description=f"{name} duties") for name in names}
        self.calls: list[tuple] = []
        self.create_error: Exception | None = None

    async def list(self) -> list[Role]:
        self.calls.append(("list",))
        return sorted(self.roles.values(), key=lambda role: role.role_name)

    async def create(self, role_name: str, role_description: str) -> Role:
        self.calls.append(("create", role_name, role_description))
        if self.create_error is not None:
            raise self.create_error
        role = Role(role_name=role_name, role_description=role_description)
        self.roles[role_name] = role
        return role

    async def update(self, role_name: str, role_description: str) -> Role:
        self.calls.append(("update", role_name, role_description))
        if role_name not in self.roles:
            raise NotFoundError("Role", role_name)
        self.roles[role_name].role_description = role_description
        return self.roles[role_name]

    async def delete(self, role_name: str) -> int:
        self.calls.append(("delete", role_name))
        return 1 if self.roles.pop(role_name, None) else 0


class RecordingHandler:
    """httpx.MockTransport handler that replays queued responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def queue(self, response: httpx.Response | Exception) -> None:
        self.responses.append(response)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def settings() -> ProcessCoachSettings:
    return ProcessCoachSettings(
        graphql=GraphQLSettings(url="https://project.example.test/", api_key="publishable-key"),
        generator=GeneratorSettings(url="https://generator.example.test"),
    )


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def mock_transport(recorder) -> httpx.MockTransport:
    return httpx.MockTransport(recorder)


@pytest.fixture
def step_store() -> FakeStepStore:
    return FakeStepStore()


@pytest.fixture
def play_repo() -> FakePlayRepository:
    return FakePlayRepository()


@pytest.fixture
def role_repo() -> FakeRoleRepository:
    return FakeRoleRepository(("Sales Rep", "Account Manager"))
