"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_INPAINT_MODEL_VERSION = "c7cdb0e5b9b915f9b1c8c66e089a486a76c81c44a5fc173926c9503f1d7b03c0"
DEFAULT_STYLE_MODEL_VERSION = "e5ee08e492bc65006e53f2f93e325b7880b10e6c268d36c1b2efbba271a7b6a1"


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _optional_int(raw: str | None) -> int | None:
    """Parse an optional positive integer; empty or ``0`` means unset."""

    if raw is None or not raw.strip():
        return None
    value = int(raw)
    return value if value > 0 else None


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    replicate_api_token: str = ""
    replicate_base_url: str = "https://api.replicate.com"

    imgbb_api_key: str = ""
    imgbb_base_url: str = "https://api.imgbb.com"
    imgbb_expiration: int | None = None

    poll_interval_ms: int = 2000
    max_poll_attempts: int | None = 150
    mask_radius_px: int = 20
    request_timeout: float = 60.0

    inpaint_model_version: str = DEFAULT_INPAINT_MODEL_VERSION
    style_model_version: str = DEFAULT_STYLE_MODEL_VERSION

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""

        return self.poll_interval_ms / 1000


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        replicate_api_token=os.getenv("REPLICATE_API_TOKEN", ""),
        replicate_base_url=os.getenv("REPLICATE_BASE_URL", "https://api.replicate.com"),
        imgbb_api_key=os.getenv("IMGBB_API_KEY", ""),
        imgbb_base_url=os.getenv("IMGBB_BASE_URL", "https://api.imgbb.com"),
        imgbb_expiration=_optional_int(os.getenv("IMGBB_EXPIRATION")),
        poll_interval_ms=int(os.getenv("POLL_INTERVAL_MS", "2000")),
        max_poll_attempts=_optional_int(os.getenv("MAX_POLL_ATTEMPTS", "150")),
        mask_radius_px=int(os.getenv("MASK_RADIUS_PX", "20")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        inpaint_model_version=os.getenv("INPAINT_MODEL_VERSION", DEFAULT_INPAINT_MODEL_VERSION),
        style_model_version=os.getenv("STYLE_MODEL_VERSION", DEFAULT_STYLE_MODEL_VERSION),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
