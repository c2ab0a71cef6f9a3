# hog_svm_detector/scripts/2_make_detector.py

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
        pipeline.run_pipeline(cfg, ["make-detector"])
    except pipeline.StageFailed as e:
        print(f"Ошибка: сборка детектора прервана: {e}")
        sys.exit(1)
    print(f"--- Детектор собран за {time.time() - overall_start_time:.2f} сек ---")
