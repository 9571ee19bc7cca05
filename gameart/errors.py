"""Error kinds raised by the upload, prediction and workflow layers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gameart.schemas import PredictionJob


class GameArtError(RuntimeError):
    """Base class for every error raised by this package."""


class ValidationError(GameArtError):
    """Raised when required input is missing before any network call is made."""


class UploadError(GameArtError):
    """Raised when the image host rejects an upload or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SubmissionError(GameArtError):
    """Raised when a prediction cannot be created."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PollError(GameArtError):
    """Raised when the status of a prediction cannot be fetched or parsed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PollTimeout(PollError):
    """Raised when a prediction stays non-terminal for the whole poll budget."""

    def __init__(self, message: str, job: PredictionJob, attempts: int) -> None:
        self.job = job
        self.attempts = attempts
        super().__init__(message)


class PollCancelled(PollError):
    """Raised when the caller signals cancellation while a job is being awaited."""

    def __init__(self, message: str, job: PredictionJob) -> None:
        self.job = job
        super().__init__(message)


class RemoteFailure(GameArtError):
    """The prediction ran to a terminal status other than ``succeeded``."""

    def __init__(self, job: PredictionJob) -> None:
        self.job = job
        detail = job.error or "no error message returned"
        super().__init__(f"Prediction {job.id} ended with status '{job.status.value}': {detail}")
