"""Prediction flow for the image currently shown in the gallery.

Every failure ends the same way: it is logged and the visible label is set
to a fixed message. Nothing propagates past :meth:`Predictor.predict`
except the overlap guard.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pawpredict.ml import preprocessing
from pawpredict.ml.image_classifier import class_label

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from pawpredict.gallery import Gallery, GallerySnapshot
    from pawpredict.ml.image_classifier import ImageClassifier
    from pawpredict.ml.inference import InferencePool

logger = logging.getLogger(__name__)

LABEL_LOAD_ERROR = "Error al cargar imagen"
LABEL_PROCESS_ERROR = "Error al procesar imagen"
LABEL_PREDICT_ERROR = "Error en predicción"
LABEL_NO_LABEL = "Sin etiqueta"


class PredictionInProgressError(RuntimeError):
    """Raised when a prediction is requested while another is still running."""


class Predictor:
    """Runs the classifier on the gallery's current image."""

    def __init__(
        self,
        classifier: ImageClassifier | None,
        pool: InferencePool,
        input_size: tuple[int, int] = preprocessing.DEFAULT_INPUT_SIZE,
        max_image_pixels: int | None = None,
    ) -> None:
        self._classifier = classifier
        self._pool = pool
        self._input_size = classifier.input_size if classifier is not None else input_size
        self._max_image_pixels = max_image_pixels

    async def predict(self, gallery: Gallery) -> GallerySnapshot:
        """Classify the current image and store the label on the gallery.

        Raises:
            PredictionInProgressError: If a prediction is already in flight.
        """
        if gallery.is_predicting:
            raise PredictionInProgressError("A prediction is already running")

        image_id = gallery.current_image
        try:
            path = gallery.resolve_path(image_id)
            image = preprocessing.load_image(path, max_pixels=self._max_image_pixels)
        except (OSError, ValueError):
            logger.exception("No se pudo cargar la imagen (%s)", image_id)
            gallery.class_label = LABEL_LOAD_ERROR
            return gallery.snapshot()

        try:
            image = preprocessing.resize(image, self._input_size)
        except (OSError, ValueError):
            logger.exception("Error al redimensionar la imagen (%s)", image_id)
            gallery.class_label = LABEL_PROCESS_ERROR
            return gallery.snapshot()

        try:
            buffer = preprocessing.to_pixel_buffer(image)
        except (OSError, ValueError):
            logger.exception("Error al convertir la imagen a buffer de píxeles (%s)", image_id)
            gallery.class_label = LABEL_PROCESS_ERROR
            return gallery.snapshot()

        generation = gallery.generation
        gallery.is_predicting = True
        try:
            label = await self._classify(buffer)
        except Exception as exc:
            logger.error("Error al predecir: %s", exc)
            label = LABEL_PREDICT_ERROR
        finally:
            gallery.is_predicting = False

        if gallery.generation != generation:
            logger.info("Discarding prediction for %s, gallery moved on", image_id)
            return gallery.snapshot()

        gallery.class_label = label
        logger.info("Predicted %s for %s", label, image_id)
        return gallery.snapshot()

    async def _classify(self, buffer: NDArray[np.uint8]) -> str:
        if self._classifier is None:
            return LABEL_NO_LABEL
        results = await self._pool.run(self._classifier.classify, buffer)
        return class_label(results) or LABEL_NO_LABEL
