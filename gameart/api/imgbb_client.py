"""Async uploader that turns raw image bytes into public ImgBB URLs."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from gameart.config.settings import Settings, get_settings
from gameart.errors import UploadError, ValidationError
from gameart.schemas import ImgbbResponse, UploadedAsset

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/1/upload"


class ImageHostUploader:
    """Uploads images to ImgBB so remote models can fetch them by URL."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._settings.imgbb_base_url.rstrip("/"),
            timeout=self._settings.request_timeout,
        )

    async def __aenter__(self) -> ImageHostUploader:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this uploader created it."""

        if self._owns_client:
            await self._client.aclose()

    async def upload(self, image_bytes: bytes, api_key: str | None = None) -> UploadedAsset:
        """Upload ``image_bytes`` once and return the hosted asset.

        No retry is attempted; any failure surfaces as :class:`UploadError`.
        """

        if not image_bytes:
            raise ValidationError("Image data is empty; nothing to upload.")
        key = api_key or self._settings.imgbb_api_key
        if not key:
            raise ValidationError("ImgBB API key is not configured.")

        form: dict[str, Any] = {"key": key}
        if self._settings.imgbb_expiration:
            form["expiration"] = str(self._settings.imgbb_expiration)
        # A filename-less part keeps the body multipart while ``image`` stays a plain field.
        files = {"image": (None, base64.b64encode(image_bytes).decode("ascii"))}

        try:
            response = await self._client.post(UPLOAD_PATH, data=form, files=files)
        except httpx.HTTPError as exc:
            logger.warning("ImgBB upload request failed: %s", exc)
            raise UploadError(f"Could not reach the image host: {exc}") from exc

        try:
            body = ImgbbResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            logger.warning("ImgBB returned an unreadable body (HTTP %s)", response.status_code)
            raise UploadError(
                f"Image host returned an unreadable response (HTTP {response.status_code}).",
                status_code=response.status_code,
            ) from exc

        if response.is_error or not body.success or body.data is None:
            message = body.failure_message()
            logger.warning("ImgBB rejected upload (HTTP %s): %s", response.status_code, message)
            raise UploadError(message, status_code=body.status_code or response.status_code)

        logger.info("Uploaded %d bytes to image host", len(image_bytes))
        return UploadedAsset(
            url=body.data.url,
            display_url=body.data.display_url,
            delete_url=body.data.delete_url,
        )
