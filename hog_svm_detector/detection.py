# hog_svm_detector/detection.py

import logging
import os
import time
from typing import NamedTuple, Tuple

import cv2          # HOGDescriptor.detectMultiScale - скользящее окно по пирамиде
import numpy as np
from tqdm import tqdm

from hog_svm_detector import config
from hog_svm_detector import utils
from hog_svm_detector.errors import CollaboratorFailure, InvalidPathError

logger = logging.getLogger(__name__)


class Detection(NamedTuple):
    """Одна найденная рамка в координатах исходной картинки."""

    rect: Tuple[int, int, int, int]   # (x, y, w, h)
    score: float                      # сырой ответ SVM
    weight: float                     # вес для отрисовки, см. confidence_weight


def confidence_weight(score):
    """
    Переводит сырой ответ SVM в вес для отрисовки: score^2 * 200.

    Это не вероятность, а просто контраст: уверенные срабатывания
    рисуются заметно ярче слабых.
    """
    return float(score) ** 2 * config.CONFIDENCE_WEIGHT_SCALE


def load_detector(detector_path):
    """
    Загружает HOG-детектор, сохраненный `svm_detector.create_hog_detector`.

    Вместе с весами SVM восстанавливается и геометрия HOG
    (окно 64x64, блоки, ячейки).

    Returns:
        cv2.HOGDescriptor: Детектор, готовый к detectMultiScale.
    """
    if not os.path.isfile(detector_path):
        raise InvalidPathError(f"Файл детектора не найден: {detector_path}")

    hog = cv2.HOGDescriptor()
    try:
        loaded = hog.load(detector_path, config.DETECTOR_OBJECT_NAME)
    except cv2.error as e:
        raise CollaboratorFailure(f"OpenCV не смог прочитать детектор {detector_path}: {e}") from e
    if not loaded:
        raise CollaboratorFailure(f"Не удалось загрузить детектор из {detector_path}")
    if np.asarray(hog.svmDetector).size == 0:
        raise CollaboratorFailure(f"В файле {detector_path} нет весов SVM.")
    return hog


def detect_objects(image, hog_detector,
                   hit_threshold=config.DETECTION_THRESHOLD,
                   win_stride=config.DETECTION_WIN_STRIDE,
                   padding=config.DETECTION_PADDING,
                   scale=config.DETECTION_PYRAMID_SCALE,
                   group_threshold=config.DETECTION_GROUP_THRESHOLD):
    """
    Ищет объекты на картинке скользящим окном по пирамиде масштабов.

    Пирамиду и группировку близких рамок делает сама detectMultiScale,
    отдельного NMS здесь нет.

    Args:
        image (np.ndarray): Входное изображение.
        hog_detector (cv2.HOGDescriptor): Загруженный детектор.
        hit_threshold (float): Порог ответа SVM.
        win_stride (tuple): Шаг окна, (0, 0) - по умолчанию.
        padding (tuple): Отступы вокруг окна.
        scale (float): Шаг пирамиды масштабов.
        group_threshold (float): Порог группировки рамок.

    Returns:
        list: Список Detection в порядке, в котором их вернул OpenCV.
    """
    try:
        # Параметры передаем позиционно: имя последнего порога
        # отличается в разных версиях OpenCV
        rects, weights = hog_detector.detectMultiScale(
            image,
            hit_threshold,
            tuple(win_stride),
            tuple(padding),
            scale,
            group_threshold,
            False,
        )
    except cv2.error as e:
        raise CollaboratorFailure(f"Ошибка во время выполнения HOG detectMultiScale: {e}") from e

    if len(rects) == 0:
        return []

    scores = np.asarray(weights, dtype=np.float64).ravel()
    detections = []
    for (x, y, w, h), score in zip(rects, scores):
        detections.append(Detection(
            rect=(int(x), int(y), int(w), int(h)),
            score=float(score),
            weight=confidence_weight(score),
        ))
    return detections


def draw_detection(image, detection):
    """Рисует рамку: чем больше вес, тем ярче зеленый канал."""
    x, y, w, h = detection.rect
    green = min(detection.weight, 255.0)
    cv2.rectangle(image, (x, y), (x + w, y + h), (0, green, 0), 1, cv2.LINE_8)
    return image


def run_detection(target_dir, detector_path, result_dir, detection_params=None):
    """
    Прогоняет детектор по всем картинкам из папки и сохраняет результаты.

    Рамки рисуются на картинке по одной, и после каждой картинка
    сохраняется в `result_dir` под следующим порядковым номером
    (`0.png`, `1.png`, ...). Нумерация сквозная для всех картинок.
    Если ничего не найдено, файлы не пишутся.

    Args:
        target_dir (str): Папка с картинками для детекции.
        detector_path (str): Файл детектора.
        result_dir (str): Папка для картинок с рамками.
        detection_params (dict, optional): Аргументы для `detect_objects`.

    Returns:
        dict: {путь к картинке: [Detection, ...]}.
    """
    # Сначала проверяем папку: пустая папка - ошибка до любой детекции
    target_files = utils.list_sample_files(target_dir)
    hog_detector = load_detector(detector_path)
    detection_params = detection_params or {}

    results = {}
    output_index = 0
    start_time = time.time()
    for image_path in tqdm(target_files, desc="Детекция"):
        image = utils.read_image(image_path)
        detections = detect_objects(image, hog_detector, **detection_params)
        for detection in detections:
            draw_detection(image, detection)
            utils.write_image(os.path.join(result_dir, f"{output_index}.png"), image)
            output_index += 1
        results[image_path] = detections
        logger.debug("%s: найдено %d объектов", image_path, len(detections))

    logger.info(
        "Детекция завершена: картинок %d, рамок %d, за %.2f сек",
        len(target_files), output_index, time.time() - start_time,
    )
    return results
