"""Per-device owner token kept in the local state store.

The token scopes every GraphQL read and write to one device. It is not a
credential: anybody presenting the same token sees the same data.
"""
from __future__ import annotations

import asyncio
import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..config import ProcessCoachSettings, get_settings
from ..domain.errors import OwnerTokenUnavailableError
from ..domain.types import OwnerContext
from ..persistence.db import get_session_factory, init_db, session_scope
from ..persistence.models import LocalState

logger = structlog.get_logger(__name__)


class OwnerTokenProvider:
    """Create the owner token lazily on first access and return it unchanged afterwards."""

    def __init__(self, settings: ProcessCoachSettings | None = None, engine: AsyncEngine | None = None) -> None:
        self._settings = settings or get_settings()
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._token: str | None = None
        self._lock = asyncio.Lock()

    @property
    def available(self) -> bool:
        return self._settings.local_state.enabled

    async def _get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            await init_db(self._engine)
            self._session_factory = get_session_factory(self._engine)
        return self._session_factory

    async def get_or_create_owner_token(self) -> str | None:
        """Return the stored token, creating it on first use.

        Returns ``None`` when no persistent storage is available; a token is
        never fabricated in that case.
        """
        if not self.available:
            return None
        async with self._lock:
            if self._token is not None:
                return self._token
            key = self._settings.local_state.owner_token_key
            session_factory = await self._get_session_factory()
            async with session_scope(session_factory) as session:
                row = await session.get(LocalState, key)
                if row is None:
                    row = LocalState(key=key, value=str(uuid.uuid4()))
                    session.add(row)
                    logger.info("owner_token.created", key=key)
                self._token = row.value
            return self._token

    async def resolve(self) -> OwnerContext:
        token = await self.get_or_create_owner_token()
        if not token:
            raise OwnerTokenUnavailableError("Owner token is unavailable: local state storage is disabled")
        return OwnerContext(token=token)


_provider_singleton: OwnerTokenProvider | None = None


def get_owner_token_provider() -> OwnerTokenProvider:
    global _provider_singleton
    if _provider_singleton is None:
        _provider_singleton = OwnerTokenProvider(get_settings())
    return _provider_singleton


async def get_or_create_owner_token() -> str | None:
    return await get_owner_token_provider().get_or_create_owner_token()


async def resolve_owner_context() -> OwnerContext:
    """Return the owner context or fail fast when no token can be resolved."""
    return await get_owner_token_provider().resolve()


__all__ = [
    "OwnerTokenProvider",
    "get_or_create_owner_token",
    "get_owner_token_provider",
    "resolve_owner_context",
]
