"""Tests for the ImgBB uploader."""

from __future__ import annotations

import base64
import dataclasses
import re

import httpx
import pytest

from conftest import IMGBB_URL, ImgbbStub
from gameart.api.imgbb_client import ImageHostUploader
from gameart.config.settings import Settings
from gameart.errors import UploadError, ValidationError


def _form(request: httpx.Request) -> dict[str, str]:
    """Collect the plain fields of a multipart body."""

    assert request.headers["Content-Type"].startswith("multipart/form-data")
    fields = re.findall(
        rb'Content-Disposition: form-data; name="([^"]+)"\r\n(?:[^\r\n]+\r\n)*\r\n(.*?)\r\n--',
        request.content,
        re.S,
    )
    return {name.decode(): value.decode() for name, value in fields}


@pytest.mark.asyncio
async def test_upload_posts_key_and_raw_base64(settings: Settings) -> None:
    stub = ImgbbStub(["https://i.ibb.co/abc/base.png"])
    uploader = ImageHostUploader(settings, http_client=stub.client())

    asset = await uploader.upload(b"\x89PNG fake bytes")

    assert asset.url == "https://i.ibb.co/abc/base.png"
    assert asset.delete_url == "https://i.ibb.co/abc/base.png/delete"
    request = stub.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/1/upload"
    form = _form(request)
    assert form["key"] == "test-imgbb-key"
    assert form["image"] == base64.b64encode(b"\x89PNG fake bytes").decode()
    assert not form["image"].startswith("data:")
    assert "expiration" not in form


@pytest.mark.asyncio
async def test_upload_uses_explicit_key_and_expiration(settings: Settings) -> None:
    stub = ImgbbStub(["https://i.ibb.co/x.png"])
    uploader = ImageHostUploader(
        dataclasses.replace(settings, imgbb_expiration=600),
        http_client=stub.client(),
    )

    await uploader.upload(b"bytes", api_key="per-call-key")

    form = _form(stub.requests[0])
    assert form["key"] == "per-call-key"
    assert form["expiration"] == "600"


@pytest.mark.asyncio
async def test_upload_failure_carries_service_message(settings: Settings) -> None:
    stub = ImgbbStub(
        failure={
            "success": False,
            "status_code": 400,
            "status_txt": "Bad Request",
            "error": {"message": "Invalid API v1 key.", "code": 100},
        },
        status=400,
    )
    uploader = ImageHostUploader(settings, http_client=stub.client())

    with pytest.raises(UploadError) as excinfo:
        await uploader.upload(b"bytes")

    assert "Invalid API v1 key." in str(excinfo.value)
    assert excinfo.value.status_code == 400


@pytest.mark.asyncio
async def test_upload_success_false_with_http_200_is_an_error(settings: Settings) -> None:
    stub = ImgbbStub(failure={"success": False, "status_txt": "Upload quota exceeded"})
    uploader = ImageHostUploader(settings, http_client=stub.client())

    with pytest.raises(UploadError, match="Upload quota exceeded"):
        await uploader.upload(b"bytes")


@pytest.mark.asyncio
async def test_upload_unparseable_body_raises_upload_error(settings: Settings) -> None:
    def _html(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    http_client = httpx.AsyncClient(base_url=IMGBB_URL, transport=httpx.MockTransport(_html))
    uploader = ImageHostUploader(settings, http_client=http_client)

    with pytest.raises(UploadError) as excinfo:
        await uploader.upload(b"bytes")

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_upload_transport_error_raises_upload_error(settings: Settings) -> None:
    def _timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    http_client = httpx.AsyncClient(base_url=IMGBB_URL, transport=httpx.MockTransport(_timeout))
    uploader = ImageHostUploader(settings, http_client=http_client)

    with pytest.raises(UploadError):
        await uploader.upload(b"bytes")


@pytest.mark.asyncio
async def test_empty_bytes_and_missing_key_fail_before_request(settings: Settings) -> None:
    stub = ImgbbStub(["unused"])
    uploader = ImageHostUploader(dataclasses.replace(settings, imgbb_api_key=""), http_client=stub.client())

    with pytest.raises(ValidationError):
        await uploader.upload(b"")
    with pytest.raises(ValidationError):
        await uploader.upload(b"bytes")

    assert stub.requests == []


@pytest.mark.asyncio
async def test_upload_failure_with_plain_string_error(settings: Settings) -> None:
    stub = ImgbbStub(failure={"success": False, "status_code": 400, "error": "Empty upload source."}, status=400)
    uploader = ImageHostUploader(settings, http_client=stub.client())

    with pytest.raises(UploadError, match="Empty upload source.") as excinfo:
        await uploader.upload(b"bytes")

    assert excinfo.value.status_code == 400
