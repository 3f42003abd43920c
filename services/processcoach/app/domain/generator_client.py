"""Client for the external step generation service."""
from __future__ import annotations

import time
from typing import Any, Sequence

import httpx
import structlog

from ..config import ProcessCoachSettings, get_settings
from .errors import GenerationError
from .types import GeneratedStep

logger = structlog.get_logger(__name__)


class GeneratorClient:
    """Wrapper around ``POST <generator url>/generate``."""

    def __init__(
        self,
        settings: ProcessCoachSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    async def generate(self, play_id: str, goal: str, roles: Sequence[str]) -> list[GeneratedStep]:
        settings = self._settings.generator
        if not settings.url:
            raise GenerationError("Step generator URL is not configured")
        payload = {"play_id": play_id, "goal": goal, "roles": list(roles)}

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    settings.url.rstrip("/") + "/generate",
                    headers={"Content-Type": "application/json"},
                    json=payload,
                    timeout=settings.timeout_s,
                )
        except httpx.HTTPError as exc:
            raise GenerationError(f"Step generator unreachable: {exc}") from exc
        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.info("generator.call", play_id=play_id, latency_ms=latency_ms, status_code=response.status_code)
        if not response.is_success:
            logger.error("generator.failed", play_id=play_id, body=response.text)
            raise GenerationError(f"Step generator returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise GenerationError("Step generator returned invalid JSON") from exc
        steps: Any = data.get("steps") if isinstance(data, dict) else None
        if not isinstance(steps, list):
            return []
        try:
            return [
                GeneratedStep(
                    step_name=item["step_name"],
                    step_num=int(item["step_num"]),
                    step_description=item.get("step_description"),
                    step_role_name=item.get("step_role_name"),
                )
                for item in steps
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise GenerationError("Step generator returned a malformed step") from exc


__all__ = ["GeneratorClient"]
