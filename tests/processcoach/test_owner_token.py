import asyncio
import uuid

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from services.processcoach.app.auth.owner_token import OwnerTokenProvider
from services.processcoach.app.config import LocalStateSettings, ProcessCoachSettings
from services.processcoach.app.domain.errors import OwnerTokenUnavailableError
from services.processcoach.app.persistence import db
from services.processcoach.app.persistence.models import LocalState


def _settings() -> ProcessCoachSettings:
    return ProcessCoachSettings(local_state=LocalStateSettings(enabled=True))


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'local.db'}")
    yield engine
    await engine.dispose()


@pytest.mark.asyncio
async def test_token_created_once_and_reused(engine):
    provider = OwnerTokenProvider(_settings(), engine=engine)

    first, second = await asyncio.gather(
        provider.get_or_create_owner_token(),
        provider.get_or_create_owner_token(),
    )

    assert first == second
    uuid.UUID(first)


@pytest.mark.asyncio
async def test_token_survives_new_provider(engine):
    first = await OwnerTokenProvider(_settings(), engine=engine).get_or_create_owner_token()
    again = await OwnerTokenProvider(_settings(), engine=engine).get_or_create_owner_token()

    assert first == again


@pytest.mark.asyncio
async def test_disabled_storage_reports_unavailable(engine):
    settings = ProcessCoachSettings(local_state=LocalStateSettings(enabled=False))
    provider = OwnerTokenProvider(settings, engine=engine)

    assert await provider.get_or_create_owner_token() is None
    with pytest.raises(OwnerTokenUnavailableError):
        await provider.resolve()


@pytest.mark.asyncio
async def test_resolve_returns_owner_context(engine):
    provider = OwnerTokenProvider(_settings(), engine=engine)

    context = await provider.resolve()

    assert context.token == await provider.get_or_create_owner_token()


@pytest.fixture
async def configured_database(tmp_path, monkeypatch):
    settings = ProcessCoachSettings(
        local_state=LocalStateSettings(enabled=True, database_url=f"sqlite+aiosqlite:///{tmp_path / 'shared.db'}")
    )
    await db.dispose_engine()
    monkeypatch.setattr(db, "get_settings", lambda: settings)
    yield settings
    await db.dispose_engine()


@pytest.mark.asyncio
async def test_provider_uses_configured_database(configured_database):
    token = await OwnerTokenProvider(configured_database).get_or_create_owner_token()

    async with db.session_scope() as session:
        row = await session.get(LocalState, "client_id")

    assert row is not None
    assert row.value == token
    assert row.created_at is not None
