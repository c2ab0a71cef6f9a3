# hog_svm_detector/training.py

import logging
import time

import cv2          # cv2.ml.SVM - сам решатель SVM
import numpy as np
from sklearn.metrics import accuracy_score, classification_report

from hog_svm_detector import config
from hog_svm_detector import feature_extraction
from hog_svm_detector import utils
from hog_svm_detector.errors import CollaboratorFailure, ShapeMismatchError

logger = logging.getLogger(__name__)

# Метки классов. Позитивам - 0, негативам - 1: тогда положительное значение
# решающей функции OpenCV означает "объект найден".
# Обратно привычному соглашению, но менять нельзя - иначе старые модели
# начнут работать наоборот.
POSITIVE_LABEL = 0
NEGATIVE_LABEL = 1


def as_row_vector(vector):
    """
    Приводит вектор признаков к одной строке формы (1, L).

    HOG может вернуть вектор как строку, как столбец или как плоский массив.
    Столбец транспонируется, строка остается как есть. Повторный вызов
    ничего не меняет.

    Raises:
        ShapeMismatchError: Если это ни строка, ни столбец (или вектор пустой).
    """
    array = np.asarray(vector) # Списки и прочее тоже превращаем в numpy
    # Пустой вектор в матрицу не поставить
    if array.size == 0:
        raise ShapeMismatchError("Пустой вектор признаков.")

    # Плоский вектор - просто делаем из него одну строку
    if array.ndim == 1:
        return array.reshape(1, -1)
    if array.ndim == 2:
        # Уже строка (1, L) - оставляем как есть
        if array.shape[0] == 1:
            return array
        # Столбец (L, 1) - транспонируем в строку
        if array.shape[1] == 1:
            return array.T
    # Все остальное (матрица, 3D и т.д.) - это не вектор признаков
    raise ShapeMismatchError(
        f"Вектор признаков формы {array.shape} не является ни строкой, ни столбцом."
    )


def build_training_matrix(positive_features, negative_features):
    """
    Собирает матрицу признаков и вектор меток для обучения.

    Сначала идут все позитивы (метка 0), затем все негативы (метка 1),
    в том же порядке, в каком они переданы.

    Args:
        positive_features (list): Векторы признаков позитивных сэмплов.
        negative_features (list): Векторы признаков негативных сэмплов.

    Returns:
        tuple:
            - np.ndarray: Матрица float32 формы (P + N, L).
            - np.ndarray: Метки int32 длины P + N.

    Raises:
        ShapeMismatchError: Если векторов нет вовсе или их длины различаются.
    """
    # Приводим каждый вектор к строке: сначала позитивы, потом негативы
    rows = [as_row_vector(v) for v in positive_features]
    rows += [as_row_vector(v) for v in negative_features]
    # Без единого вектора обучать нечего
    if not rows:
        raise ShapeMismatchError("Нет ни одного вектора признаков для обучения.")

    # Длина первого вектора - эталон для всех остальных.
    # Ничего не обрезаем и не дополняем: разная длина - это ошибка параметров HOG.
    length = rows[0].shape[1]
    for index, row in enumerate(rows):
        if row.shape[1] != length:
            raise ShapeMismatchError(
                f"Вектор #{index} имеет длину {row.shape[1]}, ожидалась {length}."
            )

    # Склеиваем строки в одну матрицу. cv2.ml требует float32
    matrix = np.vstack(rows).astype(np.float32)
    # Метки в том же порядке, что и строки матрицы. cv2.ml требует int32
    labels = np.concatenate((
        np.full(len(positive_features), POSITIVE_LABEL, dtype=np.int32),
        np.full(len(negative_features), NEGATIVE_LABEL, dtype=np.int32),
    ))
    return matrix, labels


def create_svm(params=None):
    """Создает C-SVC с линейным ядром и критерием остановки из конфига."""
    # Параметры по умолчанию берем из конфига
    if params is None:
        params = config.SVM_PARAMS
    svm = cv2.ml.SVM_create()
    svm.setType(cv2.ml.SVM_C_SVC)        # Классификация на два класса с параметром C
    svm.setKernel(cv2.ml.SVM_LINEAR)     # Линейное ядро: только оно сводится к одному вектору весов
    svm.setGamma(params['gamma'])        # Для линейного ядра не влияет, но задаем явно
    svm.setC(params['C'])                # Регуляризация
    # Остановка по числу итераций ИЛИ по изменению целевой функции
    svm.setTermCriteria((
        cv2.TERM_CRITERIA_MAX_ITER + cv2.TERM_CRITERIA_EPS,
        params['max_iter'],
        params['epsilon'],
    ))
    return svm


def training_report(svm, matrix, labels):
    """
    Прогоняет обученную модель по обучающей выборке.

    Это не оценка качества, а проверка разделимости: если на своих же
    данных есть ошибки, детектор из такой модели будет слабым.

    Returns:
        tuple:
            - float: Accuracy на обучающей выборке.
            - str: Текстовый отчет sklearn.
    """
    # predict возвращает (retval, столбец предсказанных меток)
    _, predicted = svm.predict(matrix)
    # Метки приходят столбцом float32 - делаем плоский int32, как у labels
    predicted = np.asarray(predicted).ravel().astype(np.int32)
    accuracy = accuracy_score(labels, predicted)
    # Явно перечисляем оба класса, чтобы отчет строился даже если один не предсказан ни разу
    report = classification_report(
        labels,
        predicted,
        labels=[POSITIVE_LABEL, NEGATIVE_LABEL],
        target_names=["positive", "negative"],
        zero_division=0,
    )
    return accuracy, report


def train_svm_model(matrix, labels, model_save_path, params=None):
    """
    Обучает SVM с нуля и сохраняет модель в файл.

    Args:
        matrix (np.ndarray): Матрица признаков (P + N, L), float32.
        labels (np.ndarray): Метки int32.
        model_save_path (str): Куда сохранить модель (XML/YAML OpenCV).
        params (dict, optional): Параметры SVM, по умолчанию `config.SVM_PARAMS`.

    Returns:
        cv2.ml.SVM: Обученная модель.
    """
    # Каждый запуск - новая модель, дообучения нет
    svm = create_svm(params)
    logger.info("Обучаем SVM на %d сэмплах, длина вектора %d...", matrix.shape[0], matrix.shape[1])
    start_time = time.time() # Засекаем время обучения
    try:
        # ROW_SAMPLE: каждая строка матрицы - один сэмпл
        svm.train(matrix, cv2.ml.ROW_SAMPLE, labels)
    except cv2.error as e:
        raise CollaboratorFailure(f"Ошибка OpenCV при обучении SVM: {e}") from e
    logger.info("SVM обучен за %.2f сек", time.time() - start_time)

    # Проверяем, как модель справляется со своей же обучающей выборкой
    accuracy, report = training_report(svm, matrix, labels)
    logger.info("Accuracy на обучающей выборке: %.4f\n%s", accuracy, report)

    # Сохраняем модель. Папку создаем, если ее еще нет
    utils.ensure_parent_dir(model_save_path)
    try:
        svm.save(model_save_path)
    except cv2.error as e:
        raise CollaboratorFailure(f"Не удалось сохранить модель в {model_save_path}: {e}") from e
    logger.info("Модель SVM сохранена в: %s", model_save_path)
    return svm


def train_from_directories(positive_dir, negative_dir, model_save_path,
                           hog_params=None, svm_params=None):
    """Полный путь обучения: папки с сэмплами -> HOG -> матрица -> SVM."""
    if hog_params is None:
        hog_params = config.HOG_PARAMS
    # Один HOG-дескриптор на все сэмплы
    hog = feature_extraction.create_hog_descriptor(hog_params)
    window_size = tuple(hog_params['winSize'])

    # Считаем HOG-признаки для позитивов (объект есть)...
    positive_features = feature_extraction.compute_hog_features_for_samples(positive_dir, hog, window_size)
    # ...и для негативов (объекта нет)
    negative_features = feature_extraction.compute_hog_features_for_samples(negative_dir, hog, window_size)

    # Собираем матрицу и метки, заодно проверяем одинаковую длину векторов
    matrix, labels = build_training_matrix(positive_features, negative_features)
    logger.info(
        "Позитивов: %d, негативов: %d, размер матрицы: %s",
        len(positive_features), len(negative_features), matrix.shape,
    )
    return train_svm_model(matrix, labels, model_save_path, svm_params)
