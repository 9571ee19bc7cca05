"""Shared fixtures and HTTP stubs for the test suite."""

from __future__ import annotations

from io import BytesIO
from typing import Any

import httpx
import pytest
from PIL import Image

from gameart.config.settings import Settings

REPLICATE_URL = "https://replicate.test"
IMGBB_URL = "https://imgbb.test"


class ReplicateStub:
    """Fake prediction service: one canned submit response, then poll responses in order."""

    def __init__(
        self,
        submit_body: dict[str, Any],
        poll_bodies: list[dict[str, Any]] | None = None,
        *,
        submit_status: int = 201,
        poll_status: int = 200,
    ) -> None:
        self.submit_body = submit_body
        self.poll_bodies = list(poll_bodies or [])
        self.submit_status = submit_status
        self.poll_status = poll_status
        self.requests: list[httpx.Request] = []

    @property
    def poll_count(self) -> int:
        return sum(1 for request in self.requests if request.method == "GET")

    @property
    def submit_count(self) -> int:
        return sum(1 for request in self.requests if request.method == "POST")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST" and request.url.path == "/v1/predictions":
            return httpx.Response(self.submit_status, json=self.submit_body)
        if request.method == "GET" and request.url.path.startswith("/v1/predictions/"):
            if not self.poll_bodies:
                raise AssertionError("Unexpected extra poll")
            return httpx.Response(self.poll_status, json=self.poll_bodies.pop(0))
        if request.method == "GET" and request.url.path == "/v1/account":
            return httpx.Response(200, json={"username": "tester"})
        return httpx.Response(404, json={"detail": "not found"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=REPLICATE_URL, transport=httpx.MockTransport(self))


class ImgbbStub:
    """Fake image host returning one URL per upload, or a fixed failure body."""

    def __init__(self, urls: list[str] | None = None, *, failure: dict[str, Any] | None = None, status: int = 200) -> None:
        self.urls = list(urls or [])
        self.failure = failure
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failure is not None:
            return httpx.Response(self.status, json=self.failure)
        url = self.urls.pop(0)
        return httpx.Response(
            200,
            json={
                "success": True,
                "status": 200,
                "data": {"url": url, "display_url": url, "delete_url": f"{url}/delete"},
            },
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=IMGBB_URL, transport=httpx.MockTransport(self))


def prediction(job_id: str, status: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"id": job_id, "status": status, "output": None, "error": None}
    body.update(extra)
    return body


def png_bytes(size: tuple[int, int] = (64, 48), color: tuple[int, int, int] = (30, 120, 200)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        replicate_api_token="test-token",
        replicate_base_url=REPLICATE_URL,
        imgbb_api_key="test-imgbb-key",
        imgbb_base_url=IMGBB_URL,
        poll_interval_ms=0,
        max_poll_attempts=10,
        mask_radius_px=5,
    )
