"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pawpredict.config import Settings

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pawpredict.api.routes import router
from pawpredict.config import get_settings
from pawpredict.gallery import Gallery
from pawpredict.ml.image_classifier import OnnxImageClassifier
from pawpredict.ml.inference import InferencePool
from pawpredict.ml.model_manager import ModelManager, OnnxModelManager, get_spec
from pawpredict.predictor import Predictor

logger = logging.getLogger(__name__)

EVICTION_INTERVAL_SECONDS: float = 60.0


def load_classifier(settings: Settings, model_manager: ModelManager) -> OnnxImageClassifier | None:
    """Build and warm up the configured classifier.

    A model that cannot be loaded is logged and reported as None; the gallery
    keeps working and predictions come back without a label.
    """
    try:
        classifier = OnnxImageClassifier(get_spec(settings.classifier_model), model_manager)
        classifier.load()
    except Exception:
        logger.exception("Error al cargar el modelo %s", settings.classifier_model)
        return None
    logger.info("Classifier %s ready", classifier.model_name)
    return classifier


def init_state(app: FastAPI, settings: Settings, *, load_model: bool = True) -> None:
    """Attach settings, gallery, and inference components to the application."""
    app.state.settings = settings
    app.state.gallery = Gallery(settings.gallery_images, settings.gallery_dir)
    app.state.inference_pool = InferencePool(settings)
    app.state.model_manager = OnnxModelManager(settings)
    app.state.classifier = load_classifier(settings, app.state.model_manager) if load_model else None
    app.state.predictor = Predictor(
        app.state.classifier,
        app.state.inference_pool,
        max_image_pixels=settings.max_image_pixels,
    )


async def _evict_idle_models(model_manager: ModelManager) -> None:
    while True:
        await asyncio.sleep(EVICTION_INTERVAL_SECONDS)
        model_manager.unload_idle_models()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting PawPredict (device=%s, classifier=%s, gallery=%s images in %s)",
        settings.device,
        settings.classifier_model,
        len(settings.gallery_images),
        settings.gallery_dir,
    )

    init_state(app, settings)
    eviction = None
    if settings.model_ttl > 0:
        eviction = asyncio.create_task(_evict_idle_models(app.state.model_manager))

    logger.info("PawPredict ready")
    yield

    logger.info("Shutting down PawPredict")
    if eviction is not None:
        eviction.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await eviction
    app.state.inference_pool.shutdown()
    app.state.model_manager.shutdown()
    logger.info("PawPredict shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="PawPredict",
        description="Cat and dog image gallery with on-demand classification",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run("pawpredict.main:app", host=settings.host, port=settings.port)
