"""Pydantic request/response schemas for the PawPredict API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from pawpredict.gallery import GallerySnapshot

GALLERY_TITLE = "Predicción de Imágenes"


class GalleryState(BaseModel):
    """Visible state of the gallery screen."""

    title: str = GALLERY_TITLE
    images: list[str]
    current_index: int = Field(ge=0)
    current_image: str
    class_label: str = Field(description="Last predicted label, empty when none")
    is_predicting: bool
    has_previous: bool = Field(description="False disables the 'Anterior' action")
    has_next: bool = Field(description="False disables the 'Siguiente' action")

    @classmethod
    def from_snapshot(cls, snapshot: GallerySnapshot) -> GalleryState:
        return cls(
            images=list(snapshot.images),
            current_index=snapshot.current_index,
            current_image=snapshot.current_image,
            class_label=snapshot.class_label,
            is_predicting=snapshot.is_predicting,
            has_previous=snapshot.has_previous,
            has_next=snapshot.has_next,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    gpu: bool
    classifier_ready: bool
    models_loaded: list[str]
    concurrent_requests: int
    queue_depth: int


class ModelInfo(BaseModel):
    """Information about an available model."""

    name: str
    task: str = Field(description="Model task: 'image_classification'")
    status: str = Field(description="Model status: 'active' or 'available'")
    license: str
    labels: list[str]


class ModelsResponse(BaseModel):
    """Response for the models listing endpoint."""

    models: list[ModelInfo]


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
