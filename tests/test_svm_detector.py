import os

import numpy as np
import pytest

from hog_svm_detector import feature_extraction
from hog_svm_detector import svm_detector
from hog_svm_detector.errors import ExtractionInvariantViolation, InvalidPathError


class FakeClassifier:
    """Подставная модель с теми же двумя методами, что и TrainedClassifier."""

    def __init__(self, sv, alpha=(1.0,), svidx=(0,), rho=0.5, alpha_dtype=np.float64):
        self.sv = sv
        self.alpha = np.array(alpha, dtype=alpha_dtype).reshape(1, -1)
        self.svidx = np.array(svidx, dtype=np.int32).reshape(1, -1)
        self.rho = rho

    def decision_function(self, class_index):
        assert class_index == 0
        return self.rho, self.alpha, self.svidx

    def support_vectors(self):
        return self.sv


def test_get_svm_detector_layout():
    sv = np.array([[0.1, -0.2, 0.3]], dtype=np.float32)
    detector = svm_detector.get_svm_detector(FakeClassifier(sv, rho=0.75))

    assert detector.dtype == np.float32
    assert detector.shape == (4,)
    assert np.allclose(detector[:3], sv[0])
    assert detector[3] == pytest.approx(-0.75)


def test_get_svm_detector_accepts_float32_alpha():
    sv = np.ones((1, 3), dtype=np.float32)
    detector = svm_detector.get_svm_detector(FakeClassifier(sv, alpha_dtype=np.float32))
    assert detector.shape == (4,)


def test_get_svm_detector_rejects_many_support_vectors():
    sv = np.ones((2, 3), dtype=np.float32)
    with pytest.raises(ExtractionInvariantViolation):
        svm_detector.get_svm_detector(FakeClassifier(sv, alpha=(1.0, 1.0), svidx=(0, 1)))


def test_get_svm_detector_rejects_no_support_vectors():
    sv = np.empty((0, 3), dtype=np.float32)
    with pytest.raises(ExtractionInvariantViolation):
        svm_detector.get_svm_detector(FakeClassifier(sv))


def test_get_svm_detector_rejects_non_unit_alpha():
    sv = np.ones((1, 3), dtype=np.float32)
    with pytest.raises(ExtractionInvariantViolation):
        svm_detector.get_svm_detector(FakeClassifier(sv, alpha=(0.5,)))


def test_get_svm_detector_rejects_float64_support_vectors():
    sv = np.ones((1, 3), dtype=np.float64)
    with pytest.raises(ExtractionInvariantViolation):
        svm_detector.get_svm_detector(FakeClassifier(sv))


def test_create_hog_detector_writes_nothing_on_violation(tmp_path, monkeypatch):
    bad = FakeClassifier(np.ones((2, 3), dtype=np.float32), alpha=(1.0, 1.0), svidx=(0, 1))
    monkeypatch.setattr(svm_detector, "load_classifier", lambda path: bad)
    out = tmp_path / "detector.yml"

    with pytest.raises(ExtractionInvariantViolation):
        svm_detector.create_hog_detector("model.xml", str(out))
    assert not out.exists()


def test_create_hog_detector_rejects_wrong_length(tmp_path, monkeypatch):
    short = FakeClassifier(np.ones((1, 10), dtype=np.float32))
    monkeypatch.setattr(svm_detector, "load_classifier", lambda path: short)
    out = tmp_path / "detector.yml"

    with pytest.raises(ExtractionInvariantViolation):
        svm_detector.create_hog_detector("model.xml", str(out))
    assert not out.exists()


def test_create_hog_detector_from_fake_model(tmp_path, monkeypatch):
    length = feature_extraction.descriptor_length(feature_extraction.create_hog_descriptor())
    good = FakeClassifier(np.full((1, length), 0.01, dtype=np.float32), rho=-2.0)
    monkeypatch.setattr(svm_detector, "load_classifier", lambda path: good)
    out = tmp_path / "nested" / "detector.yml"

    detector = svm_detector.create_hog_detector("model.xml", str(out))

    assert out.is_file()
    assert detector.size == length + 1
    assert detector[-1] == pytest.approx(2.0)


def test_load_classifier_missing_file(tmp_path):
    with pytest.raises(InvalidPathError):
        svm_detector.load_classifier(os.path.join(str(tmp_path), "missing.xml"))
