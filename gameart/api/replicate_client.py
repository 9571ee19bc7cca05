"""Async client for creating and polling Replicate predictions."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

import httpx
from pydantic import ValidationError as PydanticValidationError

from gameart.config.settings import Settings, get_settings
from gameart.errors import (
    PollCancelled,
    PollError,
    PollTimeout,
    SubmissionError,
    ValidationError,
)
from gameart.schemas import PredictionJob, PredictionRequest, PredictionResponse

logger = logging.getLogger(__name__)

PREDICTIONS_PATH = "/v1/predictions"
ACCOUNT_PATH = "/v1/account"


class PredictionClient:
    """Submits a prediction and follows it until it reaches a terminal status."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._settings.replicate_base_url.rstrip("/"),
            timeout=self._settings.request_timeout,
        )

    async def __aenter__(self) -> PredictionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""

        if self._owns_client:
            await self._client.aclose()

    def resolve_token(self, token: str | None = None) -> str:
        """Return the per-call token or the configured one, failing fast if neither is set."""

        token = token or self._settings.replicate_api_token
        if not token:
            raise ValidationError("Replicate API token is not configured.")
        return token

    def _headers(self, token: str | None) -> dict[str, str]:
        return {"Authorization": f"Token {self.resolve_token(token)}"}

    async def _request(
        self,
        method: str,
        url: str,
        token: str | None,
        error_cls: type[SubmissionError] | type[PollError],
        *,
        json_body: dict | None = None,
    ) -> PredictionJob:
        headers = self._headers(token)
        try:
            response = await self._client.request(method, url, headers=headers, json=json_body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise error_cls(
                f"Replicate returned {exc.response.status_code}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise error_cls(f"Could not reach Replicate: {exc}") from exc

        try:
            parsed = PredictionResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise error_cls(
                "Replicate returned a malformed prediction body.",
                status_code=response.status_code,
            ) from exc
        return PredictionJob.from_response(parsed)

    async def submit(self, request: PredictionRequest, token: str | None = None) -> PredictionJob:
        """Create a prediction; the returned job is usually still ``starting``."""

        try:
            job = await self._request(
                "POST",
                PREDICTIONS_PATH,
                token,
                SubmissionError,
                json_body=request.to_payload(),
            )
        except SubmissionError as exc:
            logger.warning("Prediction submission failed: %s", exc)
            raise
        logger.info("Submitted prediction %s (status=%s)", job.id, job.status.value)
        return job

    async def poll(self, job_id: str, token: str | None = None) -> PredictionJob:
        """Fetch the current state of ``job_id`` whether or not it is terminal."""

        if not job_id:
            raise ValidationError("Prediction id is empty.")
        try:
            job = await self._request("GET", f"{PREDICTIONS_PATH}/{job_id}", token, PollError)
        except PollError as exc:
            logger.warning("Polling prediction %s failed: %s", job_id, exc)
            raise
        logger.debug("Prediction %s is %s", job.id, job.status.value)
        return job

    async def await_completion(
        self,
        job: PredictionJob,
        token: str | None = None,
        *,
        interval: float | None = None,
        max_attempts: int | None = None,
        cancel_event: asyncio.Event | None = None,
        on_update: Callable[[PredictionJob], None] | None = None,
    ) -> PredictionJob:
        """Poll ``job`` at a fixed interval until it reaches a terminal status.

        A ``failed`` job is returned, not raised; callers check ``status``.
        Raises :class:`PollTimeout` once ``max_attempts`` polls have been spent
        and :class:`PollCancelled` when ``cancel_event`` is set.

        ``max_attempts=None`` falls back to ``settings.max_poll_attempts``;
        ``max_attempts=0`` polls without a bound for this call only.
        """

        if interval is None:
            interval = self._settings.poll_interval
        if max_attempts is None:
            max_attempts = self._settings.max_poll_attempts
        elif max_attempts <= 0:
            max_attempts = None

        attempts = 0
        while not job.is_terminal:
            if max_attempts is not None and attempts >= max_attempts:
                logger.warning("Prediction %s still %s after %d polls", job.id, job.status.value, attempts)
                raise PollTimeout(
                    f"Prediction {job.id} did not finish after {attempts} polls.",
                    job=job,
                    attempts=attempts,
                )
            if await self._wait(interval, cancel_event):
                logger.info("Stopped waiting for prediction %s on request", job.id)
                raise PollCancelled(f"Waiting for prediction {job.id} was cancelled.", job=job)

            job = await self.poll(job.id, token)
            attempts += 1
            if cancel_event is not None and cancel_event.is_set():
                raise PollCancelled(f"Waiting for prediction {job.id} was cancelled.", job=job)
            if on_update is not None:
                on_update(job)

        logger.info("Prediction %s finished with status %s", job.id, job.status.value)
        return job

    @staticmethod
    async def _wait(interval: float, cancel_event: asyncio.Event | None) -> bool:
        """Sleep for ``interval`` seconds; return ``True`` if cancelled meanwhile."""

        if cancel_event is None:
            await asyncio.sleep(interval)
            return False
        if cancel_event.is_set():
            return True
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(cancel_event.wait(), timeout=interval)
        return cancel_event.is_set()

    async def run(
        self,
        request: PredictionRequest,
        token: str | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> PredictionJob:
        """Submit ``request`` and wait for its terminal state."""

        job = await self.submit(request, token)
        return await self.await_completion(job, token, cancel_event=cancel_event)

    async def ping(self, token: str | None = None) -> bool:
        """Return ``True`` when the account endpoint accepts the token."""

        response = await self._client.get(ACCOUNT_PATH, headers=self._headers(token))
        return response.is_success
