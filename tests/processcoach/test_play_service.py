import httpx
import pytest

from services.processcoach.app.domain.errors import NotFoundError, ValidationError
from services.processcoach.app.domain.generator_client import GeneratorClient
from services.processcoach.app.domain.play_service import GENERATION_WARNING, PlayService


@pytest.fixture
def generator(settings, mock_transport):
    return GeneratorClient(settings, transport=mock_transport)


@pytest.fixture
def service(play_repo, step_store, role_repo, generator):
    return PlayService(play_repo, step_store, role_repo, generator=generator)


@pytest.mark.asyncio
async def test_create_play_requires_name(service, play_repo):
    with pytest.raises(ValidationError, match="Give this play a name"):
        await service.create_play("   ")

    assert play_repo.plays == {}


@pytest.mark.asyncio
async def test_manual_create_skips_generator(service, recorder):
    creation = await service.create_play("  Onboarding  ")

    assert creation.play.play_name == "Onboarding"
    assert creation.warning is None
    assert recorder.requests == []
    assert [n.message for n in service.notifier.drain()] == ["Play created."]


@pytest.mark.asyncio
async def test_generated_steps_are_created(service, recorder, step_store):
    recorder.queue(
        httpx.Response(
            200,
            json={
                "steps": [
                    {"step_name": "Research account", "step_num": 1, "step_role_name": "Sales Rep"},
                    {"step_name": "Send intro", "step_description": " ", "step_num": 2},
                ]
            },
        )
    )

    creation = await service.create_play("Outbound", goal="Book more demos", role_names=["Sales Rep"])

    assert recorder.payload() == {
        "play_id": creation.play.play_id,
        "goal": "Book more demos",
        "roles": ["Sales Rep"],
    }
    assert str(recorder.requests[0].url) == "https://generator.example.test/generate"
    assert [step.step_name for step in creation.generated_steps] == ["Research account", "Send intro"]
    assert len(step_store.calls_named("create")) == 2
    assert creation.warning is None


@pytest.mark.asyncio
async def test_generator_failure_keeps_play(service, recorder, play_repo):
    recorder.queue(httpx.Response(500, text="model overloaded"))

    creation = await service.create_play("Renewals", goal="Renew contracts early")

    assert creation.play.play_id in play_repo.plays
    assert creation.generated_steps == []
    assert creation.warning == GENERATION_WARNING
    assert service.notifier.drain()[0].message == GENERATION_WARNING


@pytest.mark.asyncio
async def test_generator_unreachable_keeps_play(service, recorder, play_repo):
    recorder.queue(httpx.ConnectError("refused"))

    creation = await service.create_play("Renewals", goal="Renew contracts early")

    assert creation.play.play_id in play_repo.plays
    assert creation.warning == GENERATION_WARNING


@pytest.mark.asyncio
async def test_generated_step_creation_failure_keeps_play(service, recorder, play_repo, step_store):
    step_store.fail_create_names = {"Broken"}
    recorder.queue(httpx.Response(200, json={"steps": [{"step_name": "Broken", "step_num": 1}]}))

    creation = await service.create_play("Partial", goal="Anything")

    assert creation.play.play_id in play_repo.plays
    assert creation.warning == GENERATION_WARNING


@pytest.mark.asyncio
async def test_open_editor_tolerates_slow_play_lookup(service, play_repo, step_store):
    play = play_repo.seed("Slow play")
    step_store.seed(play.play_id, "Second", 2)
    step_store.seed(play.play_id, "First", 1)
    play_repo.get_delay = 0.01

    session = await service.open_editor(play.play_id, owner_token="device-1")

    assert session.play.play_name == "Slow play"
    assert [step.step_name for step in session.editor.steps] == ["First", "Second"]
    assert [role.role_name for role in session.roles] == ["Account Manager", "Sales Rep"]
    assert session.editor.add_step().owner_token == "device-1"


@pytest.mark.asyncio
async def test_load_play_missing_raises(service):
    with pytest.raises(NotFoundError):
        await service.load_play("play-404")


@pytest.mark.asyncio
async def test_rename_and_delete(service, play_repo):
    play = play_repo.seed("Old")

    renamed = await service.rename_play(play.play_id, " New ")
    assert renamed.play_name == "New"

    assert await service.delete_play(play.play_id) == 1
    assert play_repo.plays == {}
