# hog_svm_detector/__init__.py
# Детектор объектов одного класса: HOG-признаки + линейный SVM.
