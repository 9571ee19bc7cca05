"""Inpainting and style-conversion workflows exposed to host applications."""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from typing import Sequence

from PIL import Image, UnidentifiedImageError

from gameart.api.imgbb_client import ImageHostUploader
from gameart.api.replicate_client import PredictionClient
from gameart.config.settings import Settings, get_settings
from gameart.errors import RemoteFailure, ValidationError
from gameart.imgproc.mask import MaskPoint, png_data_uri, rasterize, scale_points
from gameart.schemas import GenerationResult, PredictionJob, PredictionRequest

logger = logging.getLogger(__name__)


def _finish(job: PredictionJob) -> GenerationResult:
    if not job.succeeded:
        raise RemoteFailure(job)
    if not job.output:
        logger.error("Prediction %s succeeded without output", job.id)
        raise RemoteFailure(job)
    return GenerationResult(job=job, output_urls=job.output)


def _image_size_and_mime(image_bytes: bytes) -> tuple[tuple[int, int], str]:
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            mime_type = Image.MIME.get(img.format or "", "image/png")
            return img.size, mime_type
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ValidationError("Uploaded file is not a supported image.") from exc


class InpaintingWorkflow:
    """Edits the masked area of an image according to a text prompt."""

    def __init__(
        self,
        client: PredictionClient,
        settings: Settings | None = None,
        *,
        model_version: str | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._model_version = model_version or self._settings.inpaint_model_version

    def build_request(
        self,
        image_bytes: bytes,
        points: Sequence[MaskPoint],
        prompt: str,
        *,
        canvas_size: tuple[int, int] | None = None,
    ) -> PredictionRequest:
        """Validate inputs and rasterize the mask into a ready-to-send request."""

        if not image_bytes:
            raise ValidationError("Please upload an image.")
        if not points:
            raise ValidationError("Please draw a mask over the area to edit.")
        if not prompt or not prompt.strip():
            raise ValidationError("Please describe the edit in the prompt.")

        (width, height), mime_type = _image_size_and_mime(image_bytes)
        if canvas_size is not None:
            points = scale_points(points, canvas_size, (width, height))
        mask = rasterize(points, width, height, radius=self._settings.mask_radius_px)
        if mask.foreground_count == 0:
            raise ValidationError("Please draw a mask over the area to edit.")

        return PredictionRequest(
            version=self._model_version,
            input={
                "image": png_data_uri(image_bytes, mime_type),
                "mask": mask.to_data_uri(),
                "prompt": prompt.strip(),
            },
        )

    async def edit(
        self,
        image_bytes: bytes,
        points: Sequence[MaskPoint],
        prompt: str,
        *,
        canvas_size: tuple[int, int] | None = None,
        token: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> GenerationResult:
        request = self.build_request(image_bytes, points, prompt, canvas_size=canvas_size)
        token = self._client.resolve_token(token)
        job = await self._client.run(request, token, cancel_event=cancel_event)
        return _finish(job)


class StyleConversionWorkflow:
    """Re-renders a base image in the style of a reference image."""

    def __init__(
        self,
        client: PredictionClient,
        uploader: ImageHostUploader,
        settings: Settings | None = None,
        *,
        model_version: str | None = None,
    ) -> None:
        self._client = client
        self._uploader = uploader
        self._settings = settings or get_settings()
        self._model_version = model_version or self._settings.style_model_version

    async def convert(
        self,
        base_bytes: bytes,
        reference_bytes: bytes,
        *,
        token: str | None = None,
        upload_key: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> GenerationResult:
        if not base_bytes or not reference_bytes:
            raise ValidationError("Please upload both the base and the reference image.")
        token = self._client.resolve_token(token)

        base_asset = await self._uploader.upload(base_bytes, upload_key)
        reference_asset = await self._uploader.upload(reference_bytes, upload_key)
        request = PredictionRequest(
            version=self._model_version,
            input={"content": base_asset.url, "style": reference_asset.url},
        )
        job = await self._client.run(request, token, cancel_event=cancel_event)
        return _finish(job)


async def inpaint(
    image_bytes: bytes,
    points: Sequence[MaskPoint],
    prompt: str,
    *,
    settings: Settings | None = None,
    canvas_size: tuple[int, int] | None = None,
    token: str | None = None,
    model_version: str | None = None,
    cancel_event: asyncio.Event | None = None,
) -> GenerationResult:
    """One-shot inpainting helper that owns its client for the duration of a call."""

    settings = settings or get_settings()
    async with PredictionClient(settings) as client:
        workflow = InpaintingWorkflow(client, settings, model_version=model_version)
        return await workflow.edit(
            image_bytes,
            points,
            prompt,
            canvas_size=canvas_size,
            token=token,
            cancel_event=cancel_event,
        )


async def upload_and_convert(
    base_bytes: bytes,
    reference_bytes: bytes,
    model_version: str | None = None,
    token: str | None = None,
    *,
    settings: Settings | None = None,
    upload_key: str | None = None,
    cancel_event: asyncio.Event | None = None,
) -> GenerationResult:
    """One-shot style conversion helper that owns its clients for the duration of a call."""

    settings = settings or get_settings()
    async with PredictionClient(settings) as client, ImageHostUploader(settings) as uploader:
        workflow = StyleConversionWorkflow(client, uploader, settings, model_version=model_version)
        return await workflow.convert(
            base_bytes,
            reference_bytes,
            token=token,
            upload_key=upload_key,
            cancel_event=cancel_event,
        )
