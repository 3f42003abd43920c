"""Domain-level dataclasses for plays, steps and roles."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


def normalize_optional(value: str | None) -> str | None:
    """Trim ``value``; empty or whitespace-only text becomes ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class OwnerContext:
    """Per-device owner token, resolved once and passed to repositories."""

    token: str


@dataclass(frozen=True)
class PersistedRef:
    id: str


@dataclass(frozen=True)
class PendingRef:
    index: int


StepRef = Union[PersistedRef, PendingRef]


@dataclass
class Play:
    play_id: str
    play_name: str
    owner_token: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "Play":
        return cls(play_id=node["play_id"], play_name=node["play_name"], owner_token=node.get("client_id"))


@dataclass
class PlayStep:
    ref: StepRef
    play_id: str
    step_name: str
    step_num: int
    step_description: str | None = None
    step_role_name: str | None = None
    owner_token: str | None = None

    @property
    def is_pending(self) -> bool:
        return isinstance(self.ref, PendingRef)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "PlayStep":
        return cls(
            ref=PersistedRef(str(node["id"])),
            play_id=node["play_id"],
            owner_token=node.get("client_id"),
            step_name=node.get("step_name") or "",
            step_description=node.get("step_description"),
            step_num=node.get("step_num") or 0,
            step_role_name=node.get("step_role_name"),
        )


@dataclass
class Role:
    role_name: str
    role_description: str | None = None
    owner_token: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "Role":
        return cls(
            role_name=node["role_name"],
            role_description=node.get("role_description"),
            owner_token=node.get("client_id"),
        )


@dataclass
class GeneratedStep:
    step_name: str
    step_num: int
    step_description: str | None = None
    step_role_name: str | None = None


@dataclass
class PlayCreation:
    play: Play
    generated_steps: list[PlayStep] = field(default_factory=list)
    warning: str | None = None


__all__ = [
    "GeneratedStep",
    "OwnerContext",
    "PendingRef",
    "PersistedRef",
    "Play",
    "PlayCreation",
    "PlayStep",
    "Role",
    "StepRef",
    "normalize_optional",
]
