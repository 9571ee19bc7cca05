"""HTTP clients for the prediction service and the image host."""

from .imgbb_client import ImageHostUploader
from .replicate_client import PredictionClient

__all__ = ["ImageHostUploader", "PredictionClient"]
