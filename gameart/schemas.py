"""Domain types and wire response models for the prediction and upload APIs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict


class PredictionStatus(str, Enum):
    """Lifecycle states reported by the prediction service."""

    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {PredictionStatus.SUCCEEDED, PredictionStatus.FAILED, PredictionStatus.CANCELED},
)


@dataclass(frozen=True, slots=True)
class PredictionRequest:
    """A model version plus its input fields, ready to be submitted."""

    version: str
    input: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", MappingProxyType(dict(self.input)))

    def to_payload(self) -> dict[str, Any]:
        return {"version": self.version, "input": dict(self.input)}


@dataclass(frozen=True, slots=True)
class PredictionJob:
    """Snapshot of a remote prediction as last seen by the client.

    ``output`` is always a tuple of URLs, empty unless the job succeeded, and
    ``error`` is only set for failed jobs.
    """

    id: str
    status: PredictionStatus
    output: tuple[str, ...] = ()
    error: str | None = None
    logs: str | None = None
    urls: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def succeeded(self) -> bool:
        return self.status is PredictionStatus.SUCCEEDED

    @property
    def result_url(self) -> str | None:
        """Last output URL; list-output models put the final image last."""

        return self.output[-1] if self.output else None

    @classmethod
    def from_response(cls, response: PredictionResponse) -> PredictionJob:
        output: tuple[str, ...] = ()
        if response.status is PredictionStatus.SUCCEEDED and response.output is not None:
            if isinstance(response.output, str):
                output = (response.output,)
            else:
                output = tuple(response.output)

        error: str | None = None
        if response.status is PredictionStatus.FAILED:
            error = _error_text(response.error) or "prediction failed"

        return cls(
            id=response.id,
            status=response.status,
            output=output,
            error=error,
            logs=response.logs,
            urls=dict(response.urls or {}),
        )


def _error_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        detail = value.get("detail") or value.get("message")
        if detail:
            return str(detail)
    return str(value)


@dataclass(frozen=True, slots=True)
class UploadedAsset:
    """Publicly fetchable copy of an uploaded image."""

    url: str
    display_url: str | None = None
    delete_url: str | None = None


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Outcome of a workflow whose prediction succeeded."""

    job: PredictionJob
    output_urls: tuple[str, ...]

    @property
    def url(self) -> str:
        return self.output_urls[-1]


class PredictionResponse(BaseModel):
    """Shape of ``POST /v1/predictions`` and ``GET /v1/predictions/{id}`` bodies."""

    model_config = ConfigDict(extra="ignore")

    id: str
    status: PredictionStatus
    output: str | list[str] | None = None
    error: Any = None
    logs: str | None = None
    urls: dict[str, str] | None = None


class ImgbbImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str
    display_url: str | None = None
    delete_url: str | None = None


class ImgbbErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None
    code: int | None = None


class ImgbbResponse(BaseModel):
    """Shape of the image host ``POST /1/upload`` body, success or failure."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: ImgbbImage | None = None
    status: int | None = None
    status_code: int | None = None
    status_txt: str | None = None
    error: ImgbbErrorBody | str | None = None

    def failure_message(self) -> str:
        if isinstance(self.error, str) and self.error:
            return self.error
        if isinstance(self.error, ImgbbErrorBody) and self.error.message:
            return self.error.message
        if self.status_txt:
            return self.status_txt
        return "image upload failed"
