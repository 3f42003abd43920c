"""Error taxonomy shared by the gateway, repositories and services."""
from __future__ import annotations

import json
from typing import Any


class ProcessCoachError(Exception):
    """Base class for every error raised by the service."""


class GatewayConfigurationError(ProcessCoachError, RuntimeError):
    """Required GraphQL configuration is missing."""


class OwnerTokenUnavailableError(ProcessCoachError):
    """No owner token can be resolved in the current context."""


class TransportError(ProcessCoachError):
    """Network failure or non-2xx HTTP response.

    ``status`` is ``None`` when the request never produced a response.
    """

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        label = f"HTTP {status}" if status is not None else "network failure"
        super().__init__(f"GraphQL {label}: {body}")


class ApplicationError(ProcessCoachError):
    """A well-formed response that carried a GraphQL ``errors`` list."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        super().__init__("GraphQL error: " + json.dumps(errors, indent=2))

    @property
    def messages(self) -> list[str]:
        return [str(error.get("message", "")) for error in self.errors if isinstance(error, dict)]

    def mentions(self, *needles: str) -> bool:
        text = " ".join(self.messages).lower()
        return any(needle in text for needle in needles)


class ValidationError(ProcessCoachError):
    """Client-side precondition failure; the action is blocked."""


class DuplicateRoleError(ValidationError):
    pass


class NotFoundError(ProcessCoachError):
    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class GenerationError(ProcessCoachError):
    """The step generation collaborator failed or returned garbage."""


class SaveError(ProcessCoachError):
    """Some of the per-step calls issued by a bulk save failed.

    The calls that succeeded are not rolled back.
    """

    def __init__(self, failures: list[tuple[Any, BaseException]]) -> None:
        self.failures = failures
        super().__init__(f"{len(failures)} step(s) failed to save")


__all__ = [
    "ApplicationError",
    "DuplicateRoleError",
    "GatewayConfigurationError",
    "GenerationError",
    "NotFoundError",
    "OwnerTokenUnavailableError",
    "ProcessCoachError",
    "SaveError",
    "TransportError",
    "ValidationError",
]
