"""Environment-based configuration for PawPredict."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GALLERY: list[str] = ["cat545", "cat456", "cat547", "dog443", "dog444", "dog445"]


class Settings(BaseSettings):
    """Application settings loaded from PAWPREDICT_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PAWPREDICT_",
        case_sensitive=False,
        protected_namespaces=(),
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080

    # Authentication (None = disabled)
    api_key: str | None = None

    # ML device
    device: Literal["cpu", "cuda", "openvino"] = "cpu"

    # Model selection. Put <classifier_model>.onnx in models_dir to skip the
    # HuggingFace download; without a usable file the service starts with no
    # classifier and predictions return "Sin etiqueta".
    classifier_model: str = "catdog_mobilenetv2"
    models_dir: str = "models"

    # Gallery (JSON list in the environment, e.g. '["cat1", "dog1"]')
    gallery_dir: str = "gallery"
    gallery_images: list[str] = Field(default_factory=lambda: list(DEFAULT_GALLERY), min_length=1)

    # ONNX Runtime threading
    intra_op_threads: int = Field(default=0, ge=0)
    inter_op_threads: int = Field(default=1, ge=1)

    # Concurrency
    max_concurrent: int = Field(default=1, ge=1)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)

    # Model management
    model_ttl: int = Field(default=300, ge=0)
    gpu_mem_limit: int = Field(default=2_147_483_648, ge=0)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
