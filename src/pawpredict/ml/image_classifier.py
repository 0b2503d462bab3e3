"""Image classification over a pretrained ONNX cat/dog model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pawpredict.ml.model_manager import ModelManager, ModelSpec


@dataclass(frozen=True)
class ClassificationResult:
    """A single classification prediction."""

    label: str
    confidence: float


class ImageClassifier(Protocol):
    """Protocol for image classification models."""

    @property
    def model_name(self) -> str:
        """Return the model identifier string."""
        ...

    @property
    def input_size(self) -> tuple[int, int]:
        """Return the (width, height) the input buffer must be resized to."""
        ...

    def classify(self, image: NDArray[np.uint8]) -> list[ClassificationResult]:
        """Classify an image and return ranked labels.

        Args:
            image: HxWx3 RGB uint8 array at the model's input size.

        Returns:
            List of classification results sorted by confidence (descending).
        """
        ...


def class_label(results: list[ClassificationResult]) -> str | None:
    """Return the top label, or None when there are no results."""
    if not results:
        return None
    return results[0].label


def _softmax(logits: NDArray[np.float32]) -> NDArray[np.float32]:
    shifted = logits - np.max(logits)
    exp = np.exp(shifted)
    return exp / np.sum(exp)


class OnnxImageClassifier:
    """Runs an ONNX classifier session fetched from the model manager.

    The session is looked up on every call so TTL eviction in the manager
    applies; a cached session makes the lookup cheap.
    """

    def __init__(self, spec: ModelSpec, model_manager: ModelManager) -> None:
        self._spec = spec
        self._model_manager = model_manager
        self._mean = np.asarray(spec.mean, dtype=np.float32).reshape(1, 3, 1, 1)
        self._std = np.asarray(spec.std, dtype=np.float32).reshape(1, 3, 1, 1)

    @property
    def model_name(self) -> str:
        return self._spec.name

    @property
    def input_size(self) -> tuple[int, int]:
        return self._spec.input_size

    def load(self) -> None:
        """Create the underlying session ahead of the first prediction."""
        self._model_manager.get_session(self._spec.name)

    def to_tensor(self, image: NDArray[np.uint8]) -> NDArray[np.float32]:
        """Convert an HxWx3 uint8 buffer into a normalized 1x3xHxW tensor."""
        width, height = self._spec.input_size
        if image.shape != (height, width, 3):
            raise ValueError(f"Expected buffer of shape {(height, width, 3)}, got {image.shape}")
        tensor = image.astype(np.float32) / 255.0
        tensor = np.transpose(tensor, (2, 0, 1))[np.newaxis, ...]
        return np.ascontiguousarray((tensor - self._mean) / self._std, dtype=np.float32)

    def classify(self, image: NDArray[np.uint8]) -> list[ClassificationResult]:
        session = self._model_manager.get_session(self._spec.name)
        input_name = session.get_inputs()[0].name
        outputs = session.run(None, {input_name: self.to_tensor(image)})

        logits = np.asarray(outputs[0], dtype=np.float32).reshape(-1)
        if logits.shape[0] != len(self._spec.labels):
            raise ValueError(
                f"Model {self._spec.name} returned {logits.shape[0]} scores for {len(self._spec.labels)} labels"
            )
        probs = _softmax(logits)
        results = [
            ClassificationResult(label=label, confidence=float(prob))
            for label, prob in zip(self._spec.labels, probs, strict=True)
        ]
        results.sort(key=lambda r: r.confidence, reverse=True)
        return results
