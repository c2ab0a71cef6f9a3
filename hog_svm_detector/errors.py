# hog_svm_detector/errors.py


class DetectorPipelineError(Exception):
    """Базовая ошибка пайплайна. Ловится в CLI и завершает процесс."""

    kind = "DetectorPipelineError"


class InvalidPathError(DetectorPipelineError):
    """Путь не существует или это не папка (не файл) там, где она нужна."""

    kind = "InvalidPath"


class NoValidFilesError(DetectorPipelineError):
    """Папка существует, но в ней нет ни одного файла."""

    kind = "NoValidFiles"


class ShapeMismatchError(DetectorPipelineError):
    """Векторы признаков разной длины или неподходящей формы."""

    kind = "ShapeMismatch"


class ExtractionInvariantViolation(DetectorPipelineError):
    """
    Обученный SVM не сводится к одному опорному вектору с коэффициентом 1.0.
    Автоматически не исправляется: нужно переобучить с другими данными
    или параметрами.
    """

    kind = "ExtractionInvariantViolation"


class CollaboratorFailure(DetectorPipelineError):
    """Ошибка OpenCV: чтение/запись картинки, HOG, загрузка/обучение SVM."""

    kind = "CollaboratorFailure"
