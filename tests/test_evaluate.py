import numpy as np
import pytest
import scipy.sparse

from randbin_krr.evaluate import performance, predict


def test_binary_accuracy():
    perf = performance([1, -1, 1, -1], [0.9, -0.2, -0.1, -3], 2)
    assert perf == pytest.approx(75.0)


def test_binary_zero_prediction_is_a_miss():
    assert performance([1, -1], [0.0, -1.0], 2) == pytest.approx(50.0)


def test_regression_exact():
    assert performance([1, 2, 3], [1, 2, 3], 1) == 0.0


def test_regression_relative_error():
    # ||(0, 0, 4)|| / ||(3, 0, 4)||
    assert performance([3, 0, 4], [3, 0, 0], 1) == pytest.approx(0.8)


def test_multiclass_accuracy():
    scores = np.array([[5, 1, 1], [1, 5, 1], [1, 1, 0.5]])
    assert performance([0, 1, 2], scores, 3) == pytest.approx(200 / 3)


@pytest.mark.parametrize(
    "y_true, y_pred, n_classes",
    [
        ([1, -1, 1], [1, -1], 2),
        ([1, 2], [1, 2, 3], 1),
        ([0, 1], np.ones((3, 3)), 3),
        ([0, 1, 2], np.ones((3, 4)), 3),
        ([0, 1, 2], np.ones(3), 3),
        ([1, -1], np.ones((2, 2)), 2),
        ([], [], 2),
    ],
)
def test_mismatch_gives_nan(y_true, y_pred, n_classes, caplog):
    assert np.isnan(performance(y_true, y_pred, n_classes))
    assert "Returning nan" in caplog.text


def test_predict_vector_and_matrix():
    Z = scipy.sparse.csr_matrix(np.array([[1.0, 0.0, 1.0], [0.0, 1.0, 1.0]]))
    np.testing.assert_allclose(predict(Z, np.array([1.0, 2.0, 3.0])), [4.0, 5.0])
    W = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    np.testing.assert_allclose(predict(Z, W), [[2.0, 1.0], [1.0, 2.0]])
