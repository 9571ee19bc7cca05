"""Connectivity checks for the external services used by the workflows."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from gameart.api.replicate_client import PredictionClient
from gameart.config.settings import get_settings


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:  # pragma: no cover - reported, not raised
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_replicate() -> IntegrationCheckResult:
    """Verify the configured Replicate token against the account endpoint."""

    client = PredictionClient()

    async def _ping() -> bool:
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Replicate",
        factory=_ping,
        success_message="Replicate API accepted the token.",
    )


async def check_imgbb() -> IntegrationCheckResult:
    """Report whether an ImgBB key is configured.

    ImgBB has no read-only endpoint, so the key is only validated on upload.
    """

    async def _configured() -> bool:
        return bool(get_settings().imgbb_api_key)

    return await _run_check(
        name="ImgBB",
        factory=_configured,
        success_message="ImgBB API key is configured.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_replicate(), check_imgbb()))
