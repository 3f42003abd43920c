"""In-session editor for the ordered steps of one play.

The editor owns the authoritative ordering while a play is being edited.
Steps created in the session carry a :class:`PendingRef` until a save creates
them server-side and the following reload replaces them with persisted rows.

Per-operation failure policy:

* ``save_all`` validates first and makes no calls when any step is unnamed.
* ``delete_step`` removes the step immediately and deletes it remotely in the
  background; a failed remote delete is reported but the step stays removed.
* Results that arrive after ``close()`` are dropped.
"""
from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from .errors import ProcessCoachError, SaveError, ValidationError
from .notifications import Notifier
from .types import PendingRef, PersistedRef, PlayStep, StepRef

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = ("step_name", "step_description")


class StepStore(Protocol):
    async def list(self, play_id: str) -> list[PlayStep]: ...

    async def create(
        self,
        play_id: str,
        step_name: str,
        step_num: int,
        step_description: str | None = None,
        step_role_name: str | None = None,
    ) -> PlayStep: ...

    async def update(
        self,
        step_id: str,
        step_name: str,
        step_num: int,
        step_description: str | None = None,
        step_role_name: str | None = None,
    ) -> PlayStep: ...

    async def delete(self, step_id: str) -> int: ...


@dataclass
class SaveResult:
    updated: int
    created: int
    steps: list[PlayStep] = field(default_factory=list)


class StepListEditor:
    def __init__(
        self,
        play_id: str,
        store: StepStore,
        notifier: Notifier | None = None,
        owner_token: str | None = None,
    ) -> None:
        self._play_id = play_id
        self._store = store
        self._notifier = notifier or Notifier()
        self._owner_token = owner_token
        self._steps: list[PlayStep] = []
        self._dirty: set[str] = set()
        self._next_pending = 1
        self._closed = False
        self._background: set[asyncio.Task[None]] = set()

    @property
    def play_id(self) -> str:
        return self._play_id

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def steps(self) -> list[PlayStep]:
        return list(self._steps)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dirty_refs(self) -> list[StepRef]:
        return [step.ref for step in self._steps if step.is_pending or step.ref.id in self._dirty]

    @property
    def is_dirty(self) -> bool:
        return bool(self.dirty_refs)

    def replace(self, steps: list[PlayStep]) -> None:
        """Replace the whole list with server state; every step becomes clean."""
        self._steps = list(steps)
        self._dirty.clear()

    async def load(self) -> list[PlayStep]:
        steps = await self._store.list(self._play_id)
        if self._closed:
            logger.debug("editor.load_discarded", play_id=self._play_id)
            return steps
        self.replace(steps)
        return self.steps

    def find(self, ref: StepRef) -> PlayStep | None:
        index = self._index_of(ref)
        return self._steps[index] if index is not None else None

    def _index_of(self, ref: StepRef) -> int | None:
        for index, step in enumerate(self._steps):
            if step.ref == ref:
                return index
        return None

    def _mark_dirty(self, step: PlayStep) -> None:
        if isinstance(step.ref, PersistedRef):
            self._dirty.add(step.ref.id)

    def _renumber(self) -> None:
        for position, step in enumerate(self._steps, start=1):
            if step.step_num != position:
                step.step_num = position
                self._mark_dirty(step)

    def add_step(self) -> PlayStep:
        step = PlayStep(
            ref=PendingRef(self._next_pending),
            play_id=self._play_id,
            owner_token=self._owner_token,
            step_name="",
            step_description="",
            step_num=len(self._steps) + 1,
            step_role_name=None,
        )
        self._next_pending += 1
        self._steps.append(step)
        return step

    def edit_field(self, ref: StepRef, field_name: str, value: str) -> bool:
        if field_name not in EDITABLE_FIELDS:
            raise ValueError(f"Field {field_name!r} is not editable")
        step = self.find(ref)
        if step is None:
            return False
        setattr(step, field_name, value)
        self._mark_dirty(step)
        return True

    def set_role(self, ref: StepRef, role_name: str | None) -> bool:
        step = self.find(ref)
        if step is None:
            return False
        step.step_role_name = role_name
        self._mark_dirty(step)
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move one step and renumber every ``step_num`` in the same call."""
        size = len(self._steps)
        if from_index == to_index or not (0 <= from_index < size and 0 <= to_index < size):
            return False
        step = self._steps.pop(from_index)
        self._steps.insert(to_index, step)
        self._renumber()
        return True

    def delete_step(self, ref: StepRef) -> asyncio.Task[None] | None:
        """Remove a step now; persisted steps are deleted remotely in the background.

        Returns the background task for persisted steps, ``None`` otherwise.
        """
        index = self._index_of(ref)
        if index is None:
            return None
        self._steps.pop(index)
        self._renumber()
        if not isinstance(ref, PersistedRef):
            return None
        self._dirty.discard(ref.id)
        task = asyncio.get_running_loop().create_task(self._delete_remote(ref.id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _delete_remote(self, step_id: str) -> None:
        try:
            await self._store.delete(step_id)
        except ProcessCoachError as exc:
            logger.warning("editor.delete_failed", play_id=self._play_id, step_id=step_id, error=str(exc))
            if not self._closed:
                self._notifier.error("Failed to delete step. Please refresh and try again.")
            return
        if not self._closed:
            self._notifier.success("Step deleted.")

    def validate(self) -> None:
        for step in self._steps:
            if not step.step_name or not step.step_name.strip():
                raise ValidationError("Give every step a name before saving.")

    async def _save_one(self, step: PlayStep) -> PlayStep:
        if isinstance(step.ref, PersistedRef):
            return await self._store.update(
                step.ref.id,
                step_name=step.step_name,
                step_num=step.step_num,
                step_description=step.step_description,
                step_role_name=step.step_role_name,
            )
        return await self._store.create(
            self._play_id,
            step_name=step.step_name,
            step_num=step.step_num,
            step_description=step.step_description,
            step_role_name=step.step_role_name,
        )

    async def save_all(self) -> SaveResult:
        """Update persisted steps, create pending ones, then reload.

        The per-step calls run concurrently and are not atomic: when some of
        them fail the others stay applied, the list is still reloaded, and
        :class:`SaveError` is raised afterwards.
        """
        self.validate()
        # steps loaded without a step_num are saved at their displayed position
        self._renumber()
        snapshot = [dataclasses.replace(step) for step in self._steps]
        updated = sum(1 for step in snapshot if isinstance(step.ref, PersistedRef))
        created = len(snapshot) - updated

        results = await asyncio.gather(*(self._save_one(step) for step in snapshot), return_exceptions=True)
        failures: list[tuple[StepRef, BaseException]] = []
        for step, result in zip(snapshot, results):
            if isinstance(result, Exception):
                failures.append((step.ref, result))
            elif isinstance(result, BaseException):
                raise result

        logger.info(
            "editor.save",
            play_id=self._play_id,
            updated=updated,
            created=created,
            failed=len(failures),
        )
        try:
            steps = await self.load()
        except ProcessCoachError as exc:
            logger.warning("editor.reload_failed", play_id=self._play_id, error=str(exc))
            if not failures:
                raise
            self._notify_save_failed()
            raise SaveError(failures) from exc
        if failures:
            self._notify_save_failed()
            raise SaveError(failures)
        if not self._closed:
            self._notifier.success("Play steps saved.")
        return SaveResult(updated=updated, created=created, steps=steps)

    def _notify_save_failed(self) -> None:
        if not self._closed:
            self._notifier.error("Failed to save. Please try again.")

    def close(self) -> None:
        self._closed = True

    async def drain(self) -> None:
        """Wait for background deletes issued so far."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)


__all__ = ["EDITABLE_FIELDS", "SaveResult", "StepListEditor", "StepStore"]
