"""Request and response models shared by the routers."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain.notifications import Notification
from ..domain.types import PendingRef, PersistedRef, Play, PlayStep, Role, StepRef


class StepRefPayload(BaseModel):
    kind: Literal["persisted", "pending"]
    id: str | None = None
    index: int | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "StepRefPayload":
        if self.kind == "persisted" and not self.id:
            raise ValueError("persisted step reference requires an id")
        if self.kind == "pending" and self.index is None:
            raise ValueError("pending step reference requires an index")
        return self

    def to_ref(self) -> StepRef:
        if self.kind == "persisted":
            return PersistedRef(str(self.id))
        return PendingRef(int(self.index or 0))

    @classmethod
    def from_ref(cls, ref: StepRef) -> "StepRefPayload":
        if isinstance(ref, PersistedRef):
            return cls(kind="persisted", id=ref.id)
        return cls(kind="pending", index=ref.index)


class NotificationOut(BaseModel):
    level: str
    message: str

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationOut":
        return cls(level=notification.level.value, message=notification.message)


class PlayOut(BaseModel):
    play_id: str = Field(alias="playId")
    play_name: str = Field(alias="playName")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_play(cls, play: Play) -> "PlayOut":
        return cls(play_id=play.play_id, play_name=play.play_name)


class StepOut(BaseModel):
    ref: StepRefPayload
    step_name: str = Field(alias="stepName")
    step_description: Optional[str] = Field(default=None, alias="stepDescription")
    step_num: int = Field(alias="stepNum")
    step_role_name: Optional[str] = Field(default=None, alias="stepRoleName")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_step(cls, step: PlayStep) -> "StepOut":
        return cls(
            ref=StepRefPayload.from_ref(step.ref),
            step_name=step.step_name,
            step_description=step.step_description,
            step_num=step.step_num,
            step_role_name=step.step_role_name,
        )


class RoleOut(BaseModel):
    role_name: str = Field(alias="roleName")
    role_description: Optional[str] = Field(default=None, alias="roleDescription")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_role(cls, role: Role) -> "RoleOut":
        return cls(role_name=role.role_name, role_description=role.role_description)


class PlayCreateRequest(BaseModel):
    play_name: str = Field(alias="playName")
    goal: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class PlayRenameRequest(BaseModel):
    play_name: str = Field(alias="playName")

    model_config = ConfigDict(populate_by_name=True)


class PlayCreateResponse(BaseModel):
    play: PlayOut
    steps: List[StepOut] = Field(default_factory=list)
    warning: str | None = None
    notifications: List[NotificationOut] = Field(default_factory=list)


class PlayDetailResponse(BaseModel):
    play: PlayOut
    steps: List[StepOut] = Field(default_factory=list)


class PlaysOverviewResponse(BaseModel):
    plays: List[PlayOut]
    roles: List[RoleOut]


class RoleCreateRequest(BaseModel):
    role_name: str = Field(alias="roleName")
    role_description: str = Field(alias="roleDescription")

    model_config = ConfigDict(populate_by_name=True)


class RoleUpdateRequest(BaseModel):
    role_description: str = Field(alias="roleDescription")

    model_config = ConfigDict(populate_by_name=True)


class StepEditRequest(BaseModel):
    ref: StepRefPayload
    field: Literal["step_name", "step_description", "step_role_name"]
    value: str | None = None


class StepDeleteRequest(BaseModel):
    ref: StepRefPayload


class ReorderRequest(BaseModel):
    from_index: int = Field(alias="fromIndex")
    to_index: int = Field(alias="toIndex")

    model_config = ConfigDict(populate_by_name=True)


class EditorStateResponse(BaseModel):
    session_id: str = Field(alias="sessionId")
    play: PlayOut
    steps: List[StepOut]
    roles: List[RoleOut]
    dirty: bool
    notifications: List[NotificationOut] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


__all__ = [
    "EditorStateResponse",
    "NotificationOut",
    "PlayCreateRequest",
    "PlayCreateResponse",
    "PlayDetailResponse",
    "PlayOut",
    "PlayRenameRequest",
    "PlaysOverviewResponse",
    "ReorderRequest",
    "RoleCreateRequest",
    "RoleOut",
    "RoleUpdateRequest",
    "StepDeleteRequest",
    "StepEditRequest",
    "StepOut",
    "StepRefPayload",
]
