import numpy as np
import pytest

from hog_svm_detector import training
from hog_svm_detector.errors import ShapeMismatchError


def test_as_row_vector_flat():
    assert training.as_row_vector(np.arange(5, dtype=np.float32)).shape == (1, 5)


def test_as_row_vector_column_is_transposed():
    column = np.arange(4, dtype=np.float32).reshape(-1, 1)
    row = training.as_row_vector(column)
    assert row.shape == (1, 4)
    assert np.array_equal(row[0], [0, 1, 2, 3])


def test_as_row_vector_is_idempotent():
    row = training.as_row_vector(np.arange(6).reshape(-1, 1))
    assert np.array_equal(training.as_row_vector(row), row)


@pytest.mark.parametrize("bad", [np.zeros((2, 3)), np.zeros((0,)), np.zeros((1, 2, 3))])
def test_as_row_vector_rejects_other_shapes(bad):
    with pytest.raises(ShapeMismatchError):
        training.as_row_vector(bad)


def test_build_training_matrix_shape_and_labels():
    positive = [np.full(7, i, dtype=np.float32) for i in range(3)]
    negative = [np.full(7, 10 + i, dtype=np.float32) for i in range(2)]

    matrix, labels = training.build_training_matrix(positive, negative)

    assert matrix.shape == (5, 7)
    assert matrix.dtype == np.float32
    assert labels.dtype == np.int32
    assert labels.tolist() == [0, 0, 0, 1, 1]
    # Порядок строк сохраняется: сначала позитивы, потом негативы
    assert matrix[:, 0].tolist() == [0, 1, 2, 10, 11]


def test_row_and_column_inputs_give_same_rows():
    data = np.linspace(0, 1, 9, dtype=np.float32)
    rows, _ = training.build_training_matrix([data.reshape(1, -1)], [data.reshape(1, -1)])
    cols, _ = training.build_training_matrix([data.reshape(-1, 1)], [data.reshape(-1, 1)])
    assert np.array_equal(rows, cols)


def test_build_training_matrix_length_mismatch():
    with pytest.raises(ShapeMismatchError):
        training.build_training_matrix([np.zeros(5)], [np.zeros(6)])


def test_build_training_matrix_mismatch_inside_group():
    with pytest.raises(ShapeMismatchError):
        training.build_training_matrix([np.zeros(5), np.zeros(4)], [np.zeros(5)])


def test_build_training_matrix_empty():
    with pytest.raises(ShapeMismatchError):
        training.build_training_matrix([], [])


def test_create_svm_parameters():
    import cv2

    svm = training.create_svm()
    assert svm.getType() == cv2.ml.SVM_C_SVC
    assert svm.getKernelType() == cv2.ml.SVM_LINEAR
    assert svm.getC() == pytest.approx(1.0)
    assert svm.getGamma() == pytest.approx(1.0)
    criteria_type, max_iter, epsilon = svm.getTermCriteria()
    assert max_iter == 100
    assert epsilon == pytest.approx(1e-6)
