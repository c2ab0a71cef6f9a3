# hog_svm_detector/utils.py

import os       # Работа с путями и папками
import cv2      # OpenCV для чтения/записи изображений

from hog_svm_detector.errors import (
    CollaboratorFailure,
    InvalidPathError,
    NoValidFilesError,
)


# --- Загрузка сэмплов ---

def list_sample_files(sample_dir):
    """
    Возвращает список файлов в папке (без обхода подпапок).

    Подпапки пропускаются. Файлы отдаются в отсортированном порядке,
    чтобы строки матрицы признаков шли одинаково от запуска к запуску.

    Args:
        sample_dir (str): Папка с картинками.

    Returns:
        list: Полные пути к файлам.

    Raises:
        InvalidPathError: Если `sample_dir` не папка.
        NoValidFilesError: Если в папке нет ни одного файла.
    """
    if not os.path.isdir(sample_dir):
        raise InvalidPathError(f"Папка не найдена или не является папкой: {sample_dir}")

    files = []
    for name in sorted(os.listdir(sample_dir)):
        path = os.path.join(sample_dir, name)
        # Подпапки игнорируем, рекурсии нет
        if not os.path.isfile(path):
            continue
        files.append(path)

    if not files:
        raise NoValidFilesError(f"В папке {sample_dir} нет файлов.")
    return files


# --- Чтение и запись изображений ---

def read_image(path, flags=cv2.IMREAD_COLOR):
    """Читает картинку. Если OpenCV не смог ее декодировать - CollaboratorFailure."""
    image = cv2.imread(path, flags)
    if image is None:
        raise CollaboratorFailure(f"Не удалось прочитать изображение: {path}")
    return image


def write_image(path, image):
    """Сохраняет картинку, создавая папку при необходимости."""
    ensure_parent_dir(path)
    try:
        ok = cv2.imwrite(path, image)
    except cv2.error as e:
        raise CollaboratorFailure(f"Ошибка OpenCV при сохранении {path}: {e}") from e
    if not ok:
        raise CollaboratorFailure(f"Не удалось сохранить изображение: {path}")
    return path


def ensure_parent_dir(path):
    """Создает родительскую папку для файла, если ее еще нет."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
