import httpx
import pytest

from services.processcoach.app.config import GraphQLSettings, ProcessCoachSettings
from services.processcoach.app.domain.errors import ApplicationError, GatewayConfigurationError, TransportError
from services.processcoach.app.domain.types import OwnerContext
from services.processcoach.app.persistence.gateway import GraphQLGateway, operation_name
from services.processcoach.app.persistence.queries import LIST_ROLES

OWNER = OwnerContext(token="device-1")


@pytest.mark.asyncio
async def test_execute_posts_query_and_returns_data(settings, recorder, mock_transport):
    recorder.queue(httpx.Response(200, json={"data": {"rolesCollection": {"edges": []}}}))
    gateway = GraphQLGateway(settings, transport=mock_transport)

    data = await gateway.execute(LIST_ROLES, {"client_id": OWNER.token}, owner=OWNER)

    assert data == {"rolesCollection": {"edges": []}}
    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://project.example.test/graphql/v1"
    assert request.headers["apikey"] == "publishable-key"
    assert request.headers["x-client-id"] == "device-1"
    assert recorder.payload() == {"query": LIST_ROLES, "variables": {"client_id": "device-1"}}


@pytest.mark.asyncio
async def test_execute_without_owner_omits_header(settings, recorder, mock_transport):
    recorder.queue(httpx.Response(200, json={"data": {}}))
    gateway = GraphQLGateway(settings, transport=mock_transport)

    await gateway.execute("query Ping { __typename }")

    assert "x-client-id" not in recorder.requests[0].headers
    assert recorder.payload()["variables"] == {}


@pytest.mark.asyncio
async def test_non_2xx_raises_transport_error(settings, recorder, mock_transport):
    recorder.queue(httpx.Response(401, text="invalid apikey"))
    gateway = GraphQLGateway(settings, transport=mock_transport)

    with pytest.raises(TransportError) as excinfo:
        await gateway.execute(LIST_ROLES, owner=OWNER)

    assert excinfo.value.status == 401
    assert excinfo.value.body == "invalid apikey"


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error(settings, recorder, mock_transport):
    recorder.queue(httpx.ConnectError("connection refused"))
    gateway = GraphQLGateway(settings, transport=mock_transport)

    with pytest.raises(TransportError) as excinfo:
        await gateway.execute(LIST_ROLES, owner=OWNER)

    assert excinfo.value.status is None


@pytest.mark.asyncio
async def test_error_list_raises_application_error(settings, recorder, mock_transport):
    errors = [{"message": "duplicate key value violates unique constraint \"roles_pkey\""}]
    recorder.queue(httpx.Response(200, json={"data": None, "errors": errors}))
    gateway = GraphQLGateway(settings, transport=mock_transport)

    with pytest.raises(ApplicationError) as excinfo:
        await gateway.execute(LIST_ROLES, owner=OWNER)

    assert excinfo.value.errors == errors
    assert excinfo.value.mentions("unique")


@pytest.mark.parametrize(
    "graphql",
    [GraphQLSettings(url=None, api_key="key"), GraphQLSettings(url="https://x.test", api_key=None)],
)
def test_missing_configuration_is_fatal(graphql):
    with pytest.raises(GatewayConfigurationError):
        GraphQLGateway(ProcessCoachSettings(graphql=graphql))


def test_operation_name_parses_documents():
    assert operation_name(LIST_ROLES) == "GetRoles"
    assert operation_name("{ __typename }") == "anonymous"
