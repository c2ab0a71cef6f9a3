# hog_svm_detector/svm_detector.py

import logging
import os

import cv2
import numpy as np

from hog_svm_detector import config
from hog_svm_detector import feature_extraction
from hog_svm_detector import utils
from hog_svm_detector.errors import (
    CollaboratorFailure,
    ExtractionInvariantViolation,
    InvalidPathError,
)

logger = logging.getLogger(__name__)


class TrainedClassifier:
    """
    Обертка над обученным cv2.ml.SVM.

    Наружу отдает только то, что нужно для извлечения детектора:
    решающую функцию и опорные векторы.
    """

    def __init__(self, svm):
        self._svm = svm

    def decision_function(self, class_index):
        """Возвращает (rho, alpha, svidx) для решающей функции `class_index`."""
        rho, alpha, svidx = self._svm.getDecisionFunction(class_index)
        return rho, alpha, svidx

    def support_vectors(self):
        return self._svm.getSupportVectors()


def load_classifier(svm_path):
    """Загружает сохраненную модель SVM и заворачивает ее в TrainedClassifier."""
    # Сначала проверяем, на месте ли файл модели
    if not os.path.isfile(svm_path):
        raise InvalidPathError(f"Файл модели SVM не найден: {svm_path}")
    try:
        # Загружаем модель, сохраненную через svm.save
        svm = cv2.ml.SVM_load(svm_path)
    except cv2.error as e:
        # Битый файл или не модель SVM вовсе
        raise CollaboratorFailure(f"OpenCV не смог загрузить модель {svm_path}: {e}") from e
    return TrainedClassifier(svm)


def get_svm_detector(classifier):
    """
    Собирает из обученного линейного SVM вектор для HOG.setSVMDetector.

    Для линейного ядра OpenCV сжимает все опорные векторы в один
    с коэффициентом 1.0, тогда решающая функция - это w·x - rho.
    Формат детектора: сначала все веса подряд, потом свободный член (-rho).

    Args:
        classifier (TrainedClassifier): Загруженная модель.

    Returns:
        np.ndarray: Вектор float32 длины L + 1.

    Raises:
        ExtractionInvariantViolation: Если модель не сводится к одному
            опорному вектору с коэффициентом 1.0.
    """
    # Опорные векторы (строками) и решающая функция для пары классов 0/1
    sv = classifier.support_vectors()
    rho, alpha, svidx = classifier.decision_function(0)
    # Модель без опорных векторов может отдать None - считаем это нулем векторов
    sv = np.asarray(sv) if sv is not None else np.empty((0, 0), dtype=np.float32)
    alpha = np.asarray(alpha)
    svidx = np.asarray(svidx)

    # --- Проверка 1: ровно один опорный вектор, один коэффициент, один индекс ---
    sv_num = sv.shape[0] if sv.ndim == 2 else 0
    if sv_num != 1 or alpha.size != 1 or svidx.size != 1:
        raise ExtractionInvariantViolation(
            f"Ожидался ровно один опорный вектор, получено: векторов {sv_num}, "
            f"коэффициентов {alpha.size}, индексов {svidx.size}. "
            "Данные не разделимы линейно при заданной регуляризации."
        )
    # --- Проверка 2: коэффициент ровно 1.0 (OpenCV хранит его как float32 или float64) ---
    if alpha.dtype not in (np.float32, np.float64) or alpha.ravel()[0] != 1.0:
        raise ExtractionInvariantViolation(
            f"Коэффициент опорного вектора должен быть 1.0, получено {alpha.ravel()[0]!r} ({alpha.dtype})."
        )
    # --- Проверка 3: сами веса во float32, как их ждет HOG ---
    if sv.dtype != np.float32:
        raise ExtractionInvariantViolation(f"Опорный вектор должен быть float32, получено {sv.dtype}.")

    # Собираем детектор: L весов, затем свободный член
    cols = sv.shape[1]
    hog_detector = np.empty(cols + 1, dtype=np.float32)
    hog_detector[:cols] = sv[0]     # Веса - это и есть единственный опорный вектор
    hog_detector[cols] = -rho       # У OpenCV решающая функция w·x - rho, HOG ждет w·x + b
    return hog_detector


def create_hog_detector(svm_path, detector_path, hog_params=None):
    """
    Превращает сохраненный SVM в файл HOG-детектора.

    Детектор сохраняется вместе с геометрией HOG (в том числе окном 64x64),
    с которой считались признаки при обучении. При любой ошибке файл
    детектора не создается.

    Args:
        svm_path (str): Путь к обученной модели SVM.
        detector_path (str): Куда сохранить детектор.
        hog_params (dict, optional): Параметры HOG, по умолчанию `config.HOG_PARAMS`.

    Returns:
        np.ndarray: Сохраненный вектор детектора.
    """
    # Загружаем модель и вытаскиваем из нее вектор детектора (со всеми проверками)
    classifier = load_classifier(svm_path)
    svm_detector = get_svm_detector(classifier)

    # HOG с ТОЙ ЖЕ геометрией, что и при обучении.
    # Длина детектора обязана быть длиной вектора признаков + 1 (свободный член)
    hog = feature_extraction.create_hog_descriptor(hog_params)
    expected = feature_extraction.descriptor_length(hog) + 1
    if svm_detector.size != expected:
        raise ExtractionInvariantViolation(
            f"Длина детектора {svm_detector.size} не совпадает с ожидаемой {expected}. "
            "Модель обучена с другими параметрами HOG."
        )

    # Все проверки пройдены - только теперь пишем файл
    try:
        hog.setSVMDetector(svm_detector)     # "Вшиваем" веса SVM в HOG
        utils.ensure_parent_dir(detector_path)
        hog.save(detector_path, config.DETECTOR_OBJECT_NAME)
    except cv2.error as e:
        raise CollaboratorFailure(f"Не удалось сохранить детектор в {detector_path}: {e}") from e
    logger.info("HOG детектор (длина %d) сохранен в: %s", svm_detector.size, detector_path)
    return svm_detector
