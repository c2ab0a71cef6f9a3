# hog_svm_detector/pipeline.py

import argparse
import logging
import sys
import time

from hog_svm_detector import config
from hog_svm_detector import detection
from hog_svm_detector import svm_detector
from hog_svm_detector import training
from hog_svm_detector.errors import DetectorPipelineError

logger = logging.getLogger(__name__)

# Порядок этапов фиксирован, даже если флаги переданы в другом порядке
STAGES = ("train-svm", "make-detector", "detect")


class StageFailed(Exception):
    """Этап пайплайна упал. Хранит имя этапа и исходную ошибку."""

    def __init__(self, stage, error):
        super().__init__(f"[{stage}] {error.kind}: {error}")
        self.stage = stage
        self.error = error


def run_train_svm(cfg):
    """Этап 1: HOG-признаки из папок с сэмплами -> обучение SVM."""
    return training.train_from_directories(cfg.positive_dir, cfg.negative_dir, cfg.classifier_path)


def run_make_detector(cfg):
    """Этап 2: обученный SVM -> файл HOG-детектора."""
    return svm_detector.create_hog_detector(cfg.classifier_path, cfg.detector_path)


def run_detect(cfg):
    """Этап 3: детекция по папке с целевыми картинками."""
    return detection.run_detection(cfg.target_dir, cfg.detector_path, cfg.results_dir)


STAGE_RUNNERS = {
    "train-svm": run_train_svm,
    "make-detector": run_make_detector,
    "detect": run_detect,
}


def run_pipeline(cfg, stages):
    """
    Запускает выбранные этапы по очереди.

    Args:
        cfg (config.PipelineConfig): Пути для всех этапов.
        stages (iterable): Имена этапов из STAGES.

    Returns:
        dict: {имя этапа: результат этапа}.

    Raises:
        StageFailed: Первый упавший этап. Следующие этапы не запускаются.
    """
    selected = set(stages) # Какие этапы попросили запустить
    results = {}           # Сюда складываем результат каждого этапа
    # Идем строго в порядке STAGES, а не в порядке флагов
    for stage in STAGES:
        if stage not in selected:
            continue
        logger.info("--- Запускаем этап %s ---", stage)
        start_time = time.time() # Засекаем время этапа
        try:
            results[stage] = STAGE_RUNNERS[stage](cfg)
        except DetectorPipelineError as e:
            # Этап упал - дальше не идем, частичный прогресс не продолжаем
            raise StageFailed(stage, e) from e
        logger.info("--- Этап %s завершен за %.2f сек ---", stage, time.time() - start_time)
    return results


def build_parser():
    parser = argparse.ArgumentParser(
        prog="hog-svm-detector",
        description="Обучение и запуск детектора объектов HOG + линейный SVM.",
    )
    parser.add_argument("-s", "--train-svm", action="store_true", help="Обучить SVM на позитивных/негативных сэмплах")
    parser.add_argument("-m", "--make-detector", action="store_true", help="Собрать HOG-детектор из обученного SVM")
    parser.add_argument("-d", "--detect", action="store_true", help="Запустить детекцию по целевым картинкам")
    parser.add_argument("--resource-dir", default=config.RESOURCE_DIR,
                        help="Папка ресурсов со стандартной раскладкой (по умолчанию: %(default)s)")
    parser.add_argument("--positive-dir", help="Папка с позитивными сэмплами")
    parser.add_argument("--negative-dir", help="Папка с негативными сэмплами")
    parser.add_argument("--target-dir", help="Папка с картинками для детекции")
    parser.add_argument("--classifier-path", help="Файл обученного SVM")
    parser.add_argument("--detector-path", help="Файл HOG-детектора")
    parser.add_argument("--results-dir", help="Папка для картинок с результатами")
    parser.add_argument("--log-level", default="INFO", help="Уровень логирования (по умолчанию: %(default)s)")
    return parser


def config_from_args(args):
    """Стандартная раскладка из --resource-dir, поверх нее - явно заданные пути."""
    # Пути по умолчанию - из стандартной раскладки папки ресурсов
    defaults = config.PipelineConfig.from_resource_dir(args.resource_dir)
    # Явно переданный путь всегда важнее стандартного
    return config.PipelineConfig(
        positive_dir=args.positive_dir or defaults.positive_dir,
        negative_dir=args.negative_dir or defaults.negative_dir,
        target_dir=args.target_dir or defaults.target_dir,
        classifier_path=args.classifier_path or defaults.classifier_path,
        detector_path=args.detector_path or defaults.detector_path,
        results_dir=args.results_dir or defaults.results_dir,
    )


def setup_logging(level):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(message)s")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Собираем выбранные этапы. Можно любую комбинацию флагов
    stages = [name for name, flag in (
        ("train-svm", args.train_svm),
        ("make-detector", args.make_detector),
        ("detect", args.detect),
    ) if flag]
    # Без единого флага делать нечего - argparse выведет usage и завершит с кодом 2
    if not stages:
        parser.error("нужен хотя бы один из флагов: --train-svm, --make-detector, --detect")

    setup_logging(args.log_level)
    cfg = config_from_args(args) # Все пути - в одном объекте, глобальных путей нет
    try:
        run_pipeline(cfg, stages)
    except StageFailed as e:
        # Сообщаем, какой этап и какая ошибка прервали запуск, и выходим с ненулевым кодом
        logger.error("Этап %s прерван (%s): %s", e.stage, e.error.kind, e.error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
