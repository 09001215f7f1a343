import logging

import numpy as np
import scipy.sparse
from sklearn.datasets import load_svmlight_file

from .helpers import DataError

logger = logging.getLogger(__name__)


def load_libsvm(path, d):
    """
    Read a LibSVM file with 1-based attribute indices.

    Returns (X, y) with X a CSR matrix of shape (n, d) and y float64 labels.
    Raises DataError if the file is missing, malformed, or uses an attribute
    index larger than d.
    """
    try:
        X, y = load_svmlight_file(str(path), n_features=d, zero_based=False)
    except FileNotFoundError as err:
        raise DataError(f"Data file not found: {path}") from err
    except ValueError as err:
        raise DataError(f"Could not read '{path}' with d = {d}: {err}") from err
    if X.shape[1] != d:
        raise DataError(f"'{path}' has {X.shape[1]} features, expected d = {d}")
    logger.debug("Loaded %s: n = %d, nnz = %d", path, X.shape[0], X.nnz)
    return X.tocsr(), y.astype(np.float64)


def check_labels(y, n_classes):
    """Multiclass labels must be the integers 0..n_classes-1."""
    if n_classes <= 2:
        return
    y = np.asarray(y)
    if not np.all(np.mod(y, 1) == 0):
        raise DataError("Multiclass labels must be integers")
    if y.size and (y.min() < 0 or y.max() >= n_classes):
        raise DataError(
            f"Multiclass labels must lie in [0, {n_classes}), "
            f"found [{y.min():g}, {y.max():g}]"
        )


def encode_instances(X):
    """
    Convert a point array into a list of sparse instances.

    Each instance is a list of (index, value) pairs with 1-based indices in
    increasing order; exact zeros are dropped. X may be a dense (n, d) array
    or a scipy sparse matrix.
    """
    if scipy.sparse.issparse(X):
        X = scipy.sparse.csr_matrix(X)
        X.sum_duplicates()
        instances = []
        for i in range(X.shape[0]):
            lo, hi = X.indptr[i], X.indptr[i + 1]
            instances.append(
                [
                    (int(j) + 1, float(v))
                    for j, v in zip(X.indices[lo:hi], X.data[lo:hi])
                    if v != 0
                ]
            )
        return instances

    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D point array, got shape {X.shape}")
    instances = []
    for row in X:
        nz = np.flatnonzero(row)
        instances.append([(int(j) + 1, float(row[j])) for j in nz])
    return instances


def instances_to_dense(instances, d):
    """Inverse of encode_instances; absent dimensions are 0."""
    X = np.zeros((len(instances), d), dtype=np.float64)
    for i, inst in enumerate(instances):
        for index, value in inst:
            if not 1 <= index <= d:
                raise DataError(f"Instance {i} has index {index} outside [1, {d}]")
            X[i, index - 1] = value
    return X
