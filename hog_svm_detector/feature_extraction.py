# hog_svm_detector/feature_extraction.py

import logging
import os

import cv2          # OpenCV для перевода в серый, ресайза и HOG
import numpy as np  # Векторы признаков - numpy-массивы float32
from tqdm import tqdm

from hog_svm_detector import config
from hog_svm_detector import utils
from hog_svm_detector.errors import CollaboratorFailure

logger = logging.getLogger(__name__)


def create_hog_descriptor(params=None):
    """
    Создает HOG-дескриптор с параметрами из конфига.

    Создавать его нужно один раз и передавать дальше, а не заново
    для каждой картинки.

    Args:
        params (dict, optional): Параметры HOG в формате `config.HOG_PARAMS`.
                                 По умолчанию берутся из конфига.

    Returns:
        cv2.HOGDescriptor: Готовый дескриптор.
    """
    if params is None:
        params = config.HOG_PARAMS
    try:
        return cv2.HOGDescriptor(
            tuple(params['winSize']),
            tuple(params['blockSize']),
            tuple(params['blockStride']),
            tuple(params['cellSize']),
            params['nbins'],
            params['derivAperture'],
            params['winSigma'],
            params['histogramNormType'],
            params['L2HysThreshold'],
            params['gammaCorrection'],
            params['nlevels'],
            params['signedGradients'],
        )
    except cv2.error as e:
        raise CollaboratorFailure(f"Не удалось создать HOG дескриптор: {e}") from e


def descriptor_length(hog_descriptor):
    """Длина вектора признаков. Постоянна для всего пайплайна."""
    return int(hog_descriptor.getDescriptorSize())


def compute_descriptor(image, hog_descriptor, window_size=config.WINDOW_SIZE):
    """
    Считает HOG-вектор для одной картинки.

    Цветная картинка переводится в оттенки серого, затем приводится
    к каноническому размеру окна.

    Args:
        image (np.ndarray): Декодированная картинка (BGR или уже серая).
        hog_descriptor (cv2.HOGDescriptor): Дескриптор из `create_hog_descriptor`.
        window_size (tuple): Размер окна (ширина, высота).

    Returns:
        np.ndarray: Плоский вектор float32 длины `descriptor_length(hog_descriptor)`.
    """
    try:
        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image
        resized = cv2.resize(gray, tuple(window_size), interpolation=cv2.INTER_LINEAR)
        hog_features = hog_descriptor.compute(resized)
    except cv2.error as e:
        raise CollaboratorFailure(f"Ошибка OpenCV при вычислении HOG: {e}") from e

    if hog_features is None:
        raise CollaboratorFailure("HOG не вернул вектор признаков.")
    # В разных версиях OpenCV compute отдает строку или столбец,
    # нам нужен плоский вектор
    return np.asarray(hog_features, dtype=np.float32).ravel()


def compute_hog_features_for_samples(sample_dir, hog_descriptor, window_size=config.WINDOW_SIZE):
    """
    Проходит по всем картинкам в папке и считает для каждой HOG-признаки.

    Битые картинки не пропускаются: ошибка чтения прерывает весь этап.

    Args:
        sample_dir (str): Папка с позитивными или негативными сэмплами.
        hog_descriptor (cv2.HOGDescriptor): Уже созданный HOG-дескриптор.
        window_size (tuple): Канонический размер окна (ширина, высота).

    Returns:
        list: Векторы признаков в порядке отсортированных имен файлов.
    """
    filenames = utils.list_sample_files(sample_dir)
    dir_name = os.path.basename(os.path.normpath(sample_dir))
    logger.info("Вычисляем HOG-признаки для %d сэмплов в папке: %s", len(filenames), dir_name)

    features = []
    for img_path in tqdm(filenames, desc=f"Обработка {dir_name}"):
        image = utils.read_image(img_path)
        features.append(compute_descriptor(image, hog_descriptor, window_size))
    return features
