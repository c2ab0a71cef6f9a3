import sys

from hog_svm_detector.pipeline import main

sys.exit(main())
