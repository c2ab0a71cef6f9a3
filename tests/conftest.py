import os

import cv2
import numpy as np
import pytest

from hog_svm_detector import config
from hog_svm_detector import feature_extraction


def stripes(orientation, period=8, size=64, phase=0):
    """Черно-белые полосы: 'v' - вертикальные, 'h' - горизонтальные. BGR."""
    line = ((np.arange(size) + phase) // (period // 2)) % 2 * 255
    if orientation == "v":
        gray = np.tile(line, (size, 1))
    else:
        gray = np.tile(line.reshape(-1, 1), (1, size))
    gray = gray.astype(np.uint8)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def write_images(directory, images):
    os.makedirs(directory, exist_ok=True)
    paths = []
    for i, image in enumerate(images):
        path = os.path.join(str(directory), f"sample_{i}.png")
        assert cv2.imwrite(path, image)
        paths.append(path)
    return paths


def save_constant_detector(path, bias):
    """Детектор с нулевыми весами: ответ в любом окне равен `bias`."""
    hog = feature_extraction.create_hog_descriptor()
    length = feature_extraction.descriptor_length(hog)
    detector = np.append(np.zeros(length, dtype=np.float32), np.float32(bias)).astype(np.float32)
    hog.setSVMDetector(detector)
    hog.save(str(path), config.DETECTOR_OBJECT_NAME)
    return str(path)


@pytest.fixture
def hog():
    return feature_extraction.create_hog_descriptor()


@pytest.fixture
def resource_dir(tmp_path):
    """Стандартная раскладка ресурсов: 2 позитива, 2 негатива, пустые target/result."""
    root = tmp_path / "resource"
    write_images(root / config.POSITIVE_SAMPLES_SUBDIR, [stripes("v"), stripes("v", phase=2)])
    # Один негатив другого размера - проверяем ресайз к окну
    write_images(root / config.NEGATIVE_SAMPLES_SUBDIR, [stripes("h"), stripes("h", size=80, phase=2)])
    (root / config.TARGET_SUBDIR).mkdir()
    return str(root)
