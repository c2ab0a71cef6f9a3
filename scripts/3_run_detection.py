# hog_svm_detector/scripts/3_run_detection.py

import sys
import os
import time

# Корень проекта в sys.path, чтобы скрипт работал и без установки пакета
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from hog_svm_detector import config
from hog_svm_detector import pipeline

if __name__ == "__main__":
    pipeline.setup_logging("INFO")
    overall_start_time = time.time()
    cfg = config.PipelineConfig.from_resource_dir(sys.argv[1] if len(sys.argv) > 1 else config.RESOURCE_DIR)
    try:
        results = pipeline.run_pipeline(cfg, ["detect"])
    except pipeline.StageFailed as e:
        print(f"Ошибка: детекция прервана: {e}")
        sys.exit(1)

    # Краткая сводка по каждой картинке
    for image_path, detections in results["detect"].items():
        print(f"{os.path.basename(image_path)}: найдено {len(detections)}")
        for det in detections:
            print(f"    рамка {det.rect}, score {det.score:.3f}, вес {det.weight:.1f}")
    print(f"--- Детекция завершена за {time.time() - overall_start_time:.2f} сек ---")
