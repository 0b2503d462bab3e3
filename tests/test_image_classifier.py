"""Tests for the ONNX image classifier wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from pawpredict.ml.image_classifier import ClassificationResult, OnnxImageClassifier, class_label
from pawpredict.ml.model_manager import MODEL_REGISTRY


def _make_classifier(logits: list[float]) -> tuple[OnnxImageClassifier, MagicMock]:
    session = MagicMock()
    session.get_inputs.return_value = [MagicMock()]
    session.get_inputs.return_value[0].name = "input"
    session.run.return_value = [np.asarray([logits], dtype=np.float32)]
    manager = MagicMock()
    manager.get_session.return_value = session
    return OnnxImageClassifier(MODEL_REGISTRY["catdog_mobilenetv2"], manager), session


class TestClassLabel:
    def test_top_label(self) -> None:
        results = [ClassificationResult("Dog", 0.9), ClassificationResult("Cat", 0.1)]
        assert class_label(results) == "Dog"

    def test_empty_results(self) -> None:
        assert class_label([]) is None


class TestOnnxImageClassifier:
    def test_to_tensor_shape_and_dtype(self) -> None:
        classifier, _ = _make_classifier([0.0, 0.0])
        tensor = classifier.to_tensor(np.zeros((224, 224, 3), dtype=np.uint8))
        assert tensor.shape == (1, 3, 224, 224)
        assert tensor.dtype == np.float32

    def test_to_tensor_normalizes(self) -> None:
        classifier, _ = _make_classifier([0.0, 0.0])
        tensor = classifier.to_tensor(np.full((224, 224, 3), 255, dtype=np.uint8))
        expected = (1.0 - 0.485) / 0.229
        assert tensor[0, 0, 0, 0] == pytest.approx(expected, rel=1e-5)

    def test_to_tensor_rejects_wrong_size(self) -> None:
        classifier, _ = _make_classifier([0.0, 0.0])
        with pytest.raises(ValueError, match="Expected buffer"):
            classifier.to_tensor(np.zeros((100, 100, 3), dtype=np.uint8))

    def test_classify_ranks_by_confidence(self) -> None:
        classifier, session = _make_classifier([0.5, 2.5])
        results = classifier.classify(np.zeros((224, 224, 3), dtype=np.uint8))

        assert [r.label for r in results] == ["Dog", "Cat"]
        assert sum(r.confidence for r in results) == pytest.approx(1.0)
        assert results[0].confidence > 0.8
        feeds = session.run.call_args.args[1]
        assert feeds["input"].shape == (1, 3, 224, 224)

    def test_classify_label_count_mismatch(self) -> None:
        classifier, _ = _make_classifier([0.1, 0.2, 0.7])
        with pytest.raises(ValueError, match="3 scores for 2 labels"):
            classifier.classify(np.zeros((224, 224, 3), dtype=np.uint8))

    def test_load_warms_session(self) -> None:
        manager = MagicMock()
        classifier = OnnxImageClassifier(MODEL_REGISTRY["catdog_resnet18"], manager)
        classifier.load()
        manager.get_session.assert_called_once_with("catdog_resnet18")
        assert classifier.model_name == "catdog_resnet18"
