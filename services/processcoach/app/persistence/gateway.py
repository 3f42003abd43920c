"""Client for the GraphQL endpoint backing plays, steps and roles."""
from __future__ import annotations

import re
import time
from typing import Any

import httpx
import structlog
from opentelemetry import trace

from ..config import ProcessCoachSettings, get_settings
from ..domain.errors import ApplicationError, GatewayConfigurationError, TransportError
from ..domain.types import OwnerContext

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

OWNER_TOKEN_HEADER = "x-client-id"
_OPERATION_NAME = re.compile(r"\b(?:query|mutation)\s+(\w+)")


def operation_name(document: str) -> str:
    match = _OPERATION_NAME.search(document)
    return match.group(1) if match else "anonymous"


class GraphQLGateway:
    """Execute GraphQL documents against ``<url>/graphql/v1``.

    Every call is a fresh POST: no retry, no timeout, no caching.
    """

    def __init__(
        self,
        settings: ProcessCoachSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        graphql = (settings or get_settings()).graphql
        if not graphql.url:
            raise GatewayConfigurationError("PROCESSCOACH_GRAPHQL__URL is not set")
        if not graphql.api_key:
            raise GatewayConfigurationError("PROCESSCOACH_GRAPHQL__API_KEY is not set")
        self._endpoint = graphql.url.rstrip("/") + "/graphql/v1"
        self._api_key = graphql.api_key
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _headers(self, owner: OwnerContext | None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self._api_key,
        }
        if owner is not None:
            headers[OWNER_TOKEN_HEADER] = owner.token
        return headers

    async def execute(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        owner: OwnerContext | None = None,
    ) -> dict[str, Any]:
        name = operation_name(document)
        payload = {"query": document, "variables": variables or {}}

        with tracer.start_as_current_span("graphql.execute") as span:
            span.set_attribute("graphql.operation.name", name)
            start = time.perf_counter()
            try:
                async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                    response = await client.post(self._endpoint, headers=self._headers(owner), json=payload)
            except httpx.HTTPError as exc:
                logger.warning("graphql.transport_failed", operation=name, error=str(exc))
                raise TransportError(None, str(exc)) from exc
            latency_ms = int((time.perf_counter() - start) * 1000)
            span.set_attribute("http.status_code", response.status_code)
            logger.info("graphql.execute", operation=name, latency_ms=latency_ms, status_code=response.status_code)

            if not response.is_success:
                raise TransportError(response.status_code, response.text)

            try:
                body = response.json()
            except ValueError as exc:
                raise TransportError(response.status_code, response.text) from exc
            errors = body.get("errors")
            if errors:
                logger.error("graphql.errors", operation=name, errors=errors)
                raise ApplicationError(list(errors))
            return body.get("data") or {}


__all__ = ["GraphQLGateway", "OWNER_TOKEN_HEADER", "operation_name"]
