import logging

import numpy as np
from sklearn.metrics import accuracy_score

logger = logging.getLogger(__name__)


def predict(Z_test, weights):
    """Z_test w (vector) or Z_test W (one score column per class)."""
    return np.asarray(Z_test @ weights)


def performance(y_true, y_pred, n_classes):
    """
    Score predictions.

    n_classes == 1: relative error ||y - y_pred|| / ||y||.
    n_classes == 2: accuracy in percent, a hit when y_i * y_pred_i > 0.
    n_classes > 2: accuracy in percent of the row-wise argmax of the (n, n_classes)
    score matrix y_pred against the integer labels y_true.

    Size mismatches are logged and give nan.
    """
    y_true = np.asarray(y_true, dtype=np.float64)
    y_pred = np.asarray(y_pred, dtype=np.float64)
    n = y_true.shape[0]
    if n == 0:
        logger.warning("Performance: no test instances. Returning nan.")
        return float("nan")

    if n_classes > 2:
        if y_pred.ndim != 2 or y_pred.shape != (n, n_classes):
            logger.warning(
                "Performance: size mismatch, truth %s vs prediction %s for %d classes. Returning nan.",
                y_true.shape, y_pred.shape, n_classes,
            )
            return float("nan")
        predicted = np.argmax(y_pred, axis=1)
        return float(accuracy_score(y_true.astype(np.int64), predicted) * 100.0)

    if y_pred.ndim != 1 or y_pred.shape[0] != n:
        logger.warning(
            "Performance: vector lengths mismatch, truth %s vs prediction %s. Returning nan.",
            y_true.shape, y_pred.shape,
        )
        return float("nan")
    if n_classes < 1:
        logger.warning("Performance: NumClasses = %d is not a valid problem. Returning nan.", n_classes)
        return float("nan")
    if n_classes == 1:
        return float(np.linalg.norm(y_true - y_pred) / np.linalg.norm(y_true))

    hits = y_true * y_pred > 0
    return float(np.mean(hits) * 100.0)
