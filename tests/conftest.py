import numpy as np
import pytest


def separable_2d(n, seed, margin=0.1):
    """Points in the unit square labelled by the side of the diagonal, with a margin."""
    rng = np.random.default_rng(seed)
    X = rng.uniform(0.0, 1.0, size=(4 * n, 2))
    gap = X[:, 0] - X[:, 1]
    X = X[np.abs(gap) > margin][:n]
    y = np.where(X[:, 0] > X[:, 1], 1.0, -1.0)
    return X, y


def blobs(n_per_class, centers, scale, seed):
    rng = np.random.default_rng(seed)
    X = np.vstack([rng.normal(c, scale, size=(n_per_class, len(c))) for c in centers])
    y = np.repeat(np.arange(len(centers)), n_per_class).astype(np.float64)
    perm = rng.permutation(len(y))
    return X[perm], y[perm]


@pytest.fixture
def binary_data():
    X, y = separable_2d(600, seed=7)
    return X[:400], y[:400], X[400:], y[400:]


@pytest.fixture
def multiclass_data():
    X, y = blobs(100, [(0.0, 0.0), (3.0, 0.0), (0.0, 3.0)], 0.3, seed=11)
    return X[:240], y[:240], X[240:], y[240:]
