# hog_svm_detector/config.py

import os
from dataclasses import dataclass

# --- Геометрия HOG ---
# Канонический размер окна (ширина, высота). К нему приводится каждый сэмпл,
# и с ним же сохраняется детектор.
WINDOW_SIZE = (64, 64)

# Параметры HOG-дескриптора. Одни и те же для обучения и для детекции,
# иначе длина вектора признаков не совпадет с длиной детектора.
HOG_PARAMS = {
    'winSize': WINDOW_SIZE,
    'blockSize': (16, 16),
    'blockStride': (4, 4),
    'cellSize': (4, 4),
    'nbins': 9,
    'derivAperture': 1,
    'winSigma': -1.0,            # -1 = OpenCV считает sigma сам
    'histogramNormType': 0,      # 0 = L2-Hys
    'L2HysThreshold': 0.2,
    'gammaCorrection': False,
    'nlevels': 64,               # HOGDescriptor::DEFAULT_NLEVELS
    'signedGradients': False,
}

# --- Параметры SVM ---
SVM_PARAMS = {
    'C': 1.0,
    'gamma': 1.0,
    'max_iter': 100,
    'epsilon': 1e-6,
}

# --- Параметры детекции ---
DETECTION_THRESHOLD = 0.0          # hitThreshold для detectMultiScale
DETECTION_WIN_STRIDE = (0, 0)      # (0, 0) = шаг по умолчанию (размер ячейки)
DETECTION_PADDING = (0, 0)
DETECTION_PYRAMID_SCALE = 1.05
DETECTION_GROUP_THRESHOLD = 2.0
# weight = score^2 * CONFIDENCE_WEIGHT_SCALE, только для наглядности рамок
CONFIDENCE_WEIGHT_SCALE = 200.0

# Имя объекта внутри файла детектора
DETECTOR_OBJECT_NAME = "svm"

# --- Раскладка ресурсов по умолчанию ---
RESOURCE_DIR = "resource"
POSITIVE_SAMPLES_SUBDIR = "base"
NEGATIVE_SAMPLES_SUBDIR = "negative"
TARGET_SUBDIR = "target"
RESULTS_SUBDIR = "result"
SVM_MODEL_FILENAME = "svm_traindata.xml"
DETECTOR_FILENAME = "hog_svm_detector.yml"


@dataclass(frozen=True)
class PipelineConfig:
    """Все пути, с которыми работают этапы пайплайна."""

    positive_dir: str
    negative_dir: str
    target_dir: str
    classifier_path: str
    detector_path: str
    results_dir: str

    @classmethod
    def from_resource_dir(cls, resource_dir: str = RESOURCE_DIR) -> "PipelineConfig":
        """Собирает конфиг по стандартной раскладке папки ресурсов."""
        return cls(
            positive_dir=os.path.join(resource_dir, POSITIVE_SAMPLES_SUBDIR),
            negative_dir=os.path.join(resource_dir, NEGATIVE_SAMPLES_SUBDIR),
            target_dir=os.path.join(resource_dir, TARGET_SUBDIR),
            classifier_path=os.path.join(resource_dir, SVM_MODEL_FILENAME),
            detector_path=os.path.join(resource_dir, DETECTOR_FILENAME),
            results_dir=os.path.join(resource_dir, RESULTS_SUBDIR),
        )
