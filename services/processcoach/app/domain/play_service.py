"""Play orchestration: page loads, creation with optional step generation."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Sequence

import structlog

from ..persistence.repositories import PlayRepository, PlayStepRepository, RoleRepository
from .errors import GenerationError, NotFoundError, ProcessCoachError, ValidationError
from .generator_client import GeneratorClient
from .notifications import Notifier
from .step_editor import StepListEditor
from .types import Play, PlayCreation, PlayStep, Role

logger = structlog.get_logger(__name__)

GENERATION_WARNING = "Play created, but we couldn't auto-generate steps."


@dataclass
class PlayOverview:
    plays: list[Play]
    roles: list[Role]


@dataclass
class PlayDetail:
    play: Play
    steps: list[PlayStep] = field(default_factory=list)


@dataclass
class EditorSession:
    play: Play
    roles: list[Role]
    editor: StepListEditor


def _require_name(play_name: str) -> str:
    name = play_name.strip()
    if not name:
        raise ValidationError("Give this play a name before saving.")
    return name


class PlayService:
    def __init__(
        self,
        plays: PlayRepository,
        steps: PlayStepRepository,
        roles: RoleRepository,
        generator: GeneratorClient | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._plays = plays
        self._steps = steps
        self._roles = roles
        self._generator = generator
        self._notifier = notifier or Notifier()

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    async def load_overview(self) -> PlayOverview:
        plays, roles = await asyncio.gather(self._plays.list(), self._roles.list())
        return PlayOverview(plays=plays, roles=roles)

    async def role_names(self) -> list[str]:
        return [role.role_name for role in await self._roles.list()]

    async def load_play(self, play_id: str) -> PlayDetail:
        play, steps = await asyncio.gather(self._plays.get(play_id), self._steps.list(play_id))
        if play is None:
            raise NotFoundError("Play", play_id)
        return PlayDetail(play=play, steps=steps)

    async def open_editor(self, play_id: str, owner_token: str | None = None) -> EditorSession:
        """Load play, steps and roles concurrently and seed a new editor."""
        play, steps, roles = await asyncio.gather(
            self._plays.get(play_id),
            self._steps.list(play_id),
            self._roles.list(),
        )
        if play is None:
            raise NotFoundError("Play", play_id)
        editor = StepListEditor(play_id, self._steps, notifier=Notifier(), owner_token=owner_token)
        editor.replace(steps)
        return EditorSession(play=play, roles=roles, editor=editor)

    async def create_play(
        self,
        play_name: str,
        goal: str | None = None,
        role_names: Sequence[str] = (),
    ) -> PlayCreation:
        name = _require_name(play_name)
        play = await self._plays.create(name)
        creation = PlayCreation(play=play)
        if not goal or not goal.strip():
            self._notifier.success("Play created.")
            return creation

        # the play stays created whatever happens below
        try:
            creation.generated_steps = await self._generate_steps(play, goal, role_names)
        except ProcessCoachError as exc:
            logger.warning("plays.generation_failed", play_id=play.play_id, error=str(exc))
            creation.warning = GENERATION_WARNING
            self._notifier.error(GENERATION_WARNING)
            return creation

        if creation.generated_steps:
            self._notifier.success("Play created and steps generated.")
        else:
            self._notifier.success("Play created.")
        return creation

    async def _generate_steps(self, play: Play, goal: str, role_names: Sequence[str]) -> list[PlayStep]:
        if self._generator is None:
            raise GenerationError("Step generation is not configured")
        generated = await self._generator.generate(play.play_id, goal, role_names)
        if not generated:
            return []
        created = await asyncio.gather(
            *(
                self._steps.create(
                    play.play_id,
                    step_name=step.step_name,
                    step_num=step.step_num,
                    step_description=step.step_description,
                    step_role_name=step.step_role_name,
                )
                for step in generated
            )
        )
        logger.info("plays.steps_generated", play_id=play.play_id, count=len(created))
        return sorted(created, key=lambda step: step.step_num)

    async def rename_play(self, play_id: str, play_name: str) -> Play:
        return await self._plays.update(play_id, _require_name(play_name))

    async def delete_play(self, play_id: str) -> int:
        return await self._plays.delete(play_id)


__all__ = ["EditorSession", "GENERATION_WARNING", "PlayDetail", "PlayOverview", "PlayService"]
