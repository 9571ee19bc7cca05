"""Game art inpainting and style conversion on top of hosted image models."""

from gameart.api import ImageHostUploader, PredictionClient
from gameart.errors import (
    GameArtError,
    PollCancelled,
    PollError,
    PollTimeout,
    RemoteFailure,
    SubmissionError,
    UploadError,
    ValidationError,
)
from gameart.imgproc.mask import MaskBuffer, MaskPoint, rasterize
from gameart.schemas import (
    GenerationResult,
    PredictionJob,
    PredictionRequest,
    PredictionStatus,
    UploadedAsset,
)
from gameart.services.workflows import (
    InpaintingWorkflow,
    StyleConversionWorkflow,
    inpaint,
    upload_and_convert,
)

__all__ = [
    "GameArtError",
    "GenerationResult",
    "ImageHostUploader",
    "InpaintingWorkflow",
    "MaskBuffer",
    "MaskPoint",
    "PollCancelled",
    "PollError",
    "PollTimeout",
    "PredictionClient",
    "PredictionJob",
    "PredictionRequest",
    "PredictionStatus",
    "RemoteFailure",
    "StyleConversionWorkflow",
    "SubmissionError",
    "UploadError",
    "UploadedAsset",
    "ValidationError",
    "inpaint",
    "rasterize",
    "upload_and_convert",
]
