"""FastAPI dependency helpers."""
from __future__ import annotations

import time
import uuid
from functools import lru_cache
from typing import Callable

import structlog
from fastapi import Depends, HTTPException, status

from ..auth.owner_token import resolve_owner_context
from ..config import get_settings
from ..domain.generator_client import GeneratorClient
from ..domain.play_service import EditorSession, PlayService
from ..domain.role_service import RoleService
from ..domain.types import OwnerContext
from ..persistence.gateway import GraphQLGateway
from ..persistence.repositories import Gateway, PlayRepository, PlayStepRepository, RoleRepository

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=1)
def get_gateway() -> Gateway:
    return GraphQLGateway()


@lru_cache(maxsize=1)
def get_generator() -> GeneratorClient:
    return GeneratorClient()


async def get_owner_context() -> OwnerContext:
    return await resolve_owner_context()


def get_play_service(
    owner: OwnerContext = Depends(get_owner_context),
    gateway: Gateway = Depends(get_gateway),
    generator: GeneratorClient = Depends(get_generator),
) -> PlayService:
    return PlayService(
        PlayRepository(gateway, owner),
        PlayStepRepository(gateway, owner),
        RoleRepository(gateway, owner),
        generator=generator,
    )


def get_role_service(
    owner: OwnerContext = Depends(get_owner_context),
    gateway: Gateway = Depends(get_gateway),
) -> RoleService:
    return RoleService(RoleRepository(gateway, owner))


class EditorRegistry:
    """In-process editor sessions, one per opened play editor.

    A session untouched for ``idle_ttl_s`` seconds is closed the next time the
    registry is used, so its editor drops any results still in flight.
    """

    def __init__(self, idle_ttl_s: float = 1800.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._idle_ttl_s = idle_ttl_s
        self._clock = clock
        self._sessions: dict[str, EditorSession] = {}
        self._touched: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: EditorSession) -> str:
        self.expire_idle()
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = session
        self._touched[session_id] = self._clock()
        return session_id

    def get(self, session_id: str) -> EditorSession:
        self.expire_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Editor session {session_id} not found")
        self._touched[session_id] = self._clock()
        return session

    def expire_idle(self) -> list[str]:
        now = self._clock()
        expired = [sid for sid, touched in self._touched.items() if now - touched > self._idle_ttl_s]
        for session_id in expired:
            logger.info("editor.session_expired", session_id=session_id)
            self.close(session_id)
        return expired

    def close(self, session_id: str) -> None:
        self._touched.pop(session_id, None)
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.editor.close()

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)


_registry = EditorRegistry(get_settings().editor_idle_ttl_s)


def get_editor_registry() -> EditorRegistry:
    return _registry


__all__ = [
    "EditorRegistry",
    "get_editor_registry",
    "get_gateway",
    "get_generator",
    "get_owner_context",
    "get_play_service",
    "get_role_service",
]
