"""API route definitions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse

from pawpredict.api.middleware import verify_api_key
from pawpredict.api.schemas import (
    ErrorResponse,
    GalleryState,
    HealthResponse,
    ModelInfo,
    ModelsResponse,
)
from pawpredict.ml.model_manager import MODEL_REGISTRY
from pawpredict.predictor import PredictionInProgressError

if TYPE_CHECKING:
    from pawpredict.config import Settings
    from pawpredict.gallery import Gallery
    from pawpredict.ml.inference import InferencePool
    from pawpredict.ml.model_manager import ModelManager
    from pawpredict.predictor import Predictor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_gallery(request: Request) -> Gallery:
    gallery: Gallery = request.app.state.gallery
    return gallery


def _get_predictor(request: Request) -> Predictor:
    predictor: Predictor = request.app.state.predictor
    return predictor


def _get_inference_pool(request: Request) -> InferencePool:
    pool: InferencePool = request.app.state.inference_pool
    return pool


def _get_model_manager(request: Request) -> ModelManager:
    manager: ModelManager = request.app.state.model_manager
    return manager


@router.get(
    "/gallery",
    response_model=GalleryState,
    summary="Current gallery state",
)
async def get_gallery(request: Request) -> GalleryState:
    """Return the image being shown, its label, and navigation availability."""
    return GalleryState.from_snapshot(_get_gallery(request).snapshot())


@router.get(
    "/gallery/image",
    response_class=FileResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Current image file",
)
async def get_gallery_image(request: Request) -> FileResponse:
    """Serve the file backing the current gallery image."""
    gallery = _get_gallery(request)
    try:
        path = gallery.resolve_path()
    except FileNotFoundError as exc:
        logger.warning("%s", exc)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Image '{gallery.current_image}' not found",
        ) from None
    return FileResponse(path)


@router.post(
    "/gallery/next",
    response_model=GalleryState,
    summary="Show the next image",
)
async def next_image(request: Request) -> GalleryState:
    """Advance to the next image (no-op on the last one) and clear the label."""
    gallery = _get_gallery(request)
    gallery.next()
    return GalleryState.from_snapshot(gallery.snapshot())


@router.post(
    "/gallery/previous",
    response_model=GalleryState,
    summary="Show the previous image",
)
async def previous_image(request: Request) -> GalleryState:
    """Go back to the previous image (no-op on the first one) and clear the label."""
    gallery = _get_gallery(request)
    gallery.previous()
    return GalleryState.from_snapshot(gallery.snapshot())


@router.post(
    "/gallery/predict",
    response_model=GalleryState,
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
    summary="Classify the current image",
)
async def predict(request: Request) -> GalleryState:
    """Run the classifier on the current image and return the updated state."""
    gallery = _get_gallery(request)
    predictor = _get_predictor(request)
    try:
        snapshot = await predictor.predict(gallery)
    except PredictionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from None
    return GalleryState.from_snapshot(snapshot)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    settings = _get_settings(request)
    pool = _get_inference_pool(request)
    manager = _get_model_manager(request)
    return HealthResponse(
        status="ok",
        gpu=settings.device == "cuda",
        classifier_ready=request.app.state.classifier is not None,
        models_loaded=manager.get_loaded_models(),
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )


@router.get(
    "/models",
    response_model=ModelsResponse,
    summary="List available models",
)
async def list_models(request: Request) -> ModelsResponse:
    """Return registered classifiers, marking the configured one as active."""
    settings = _get_settings(request)

    models = [
        ModelInfo(
            name=spec.name,
            task=spec.task,
            status="active" if spec.name == settings.classifier_model else "available",
            license=spec.license,
            labels=list(spec.labels),
        )
        for spec in MODEL_REGISTRY.values()
    ]
    return ModelsResponse(models=models)
