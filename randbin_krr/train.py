import logging
from dataclasses import dataclass
from typing import List

import numpy as np
from joblib import Parallel, delayed

from .pcg import SolveResult, normal_operator, pcg

logger = logging.getLogger(__name__)


@dataclass
class TrainResult:
    # (M,) for regression / binary, (M, n_classes) for multiclass.
    weights: np.ndarray
    solves: List[SolveResult]

    @property
    def numeric_failure(self) -> bool:
        return any(s.numeric_failure for s in self.solves)


def one_hot_labels(y, n_classes):
    """+1 in the column of the true class, -1 elsewhere; labels are 0..n_classes-1."""
    y = np.asarray(y).astype(np.int64)
    Y = -np.ones((y.shape[0], n_classes), dtype=np.float64)
    Y[np.arange(y.shape[0]), y] = 1.0
    return Y


def binary_labels(y):
    """Map {0, 1} labels to {-1, +1}; other label sets are returned unchanged."""
    y = np.asarray(y, dtype=np.float64)
    if y.size and np.all((y == 0) | (y == 1)):
        return np.where(y == 1, 1.0, -1.0)
    return y


def _solve_column(Z, A, y_col, maxiter, tol):
    b = Z.T @ y_col
    return pcg(A, b, maxiter=maxiter, tol=tol)


def train_one_vs_all(Z, y, n_classes, lam, maxiter=100, tol=1e-3, n_jobs=1,
                     operator_factory=normal_operator):
    """
    Fit (Z'Z + lam I) w = Z'y, once per class column for n_classes > 2.

    Class columns are solved on a thread pool of n_jobs workers. Z is shared
    read-only between workers.
    """
    if n_classes > 2:
        Y = one_hot_labels(y, n_classes)
    elif n_classes == 2:
        Y = binary_labels(y)[:, None]
    else:
        Y = np.asarray(y, dtype=np.float64)[:, None]

    A = operator_factory(Z, lam)
    solves = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_solve_column)(Z, A, Y[:, c], maxiter, tol) for c in range(Y.shape[1])
    )

    W = np.column_stack([s.x for s in solves])
    for c, s in enumerate(solves):
        if s.numeric_failure:
            logger.warning("Class %d: PCG numeric failure after %d iterations.", c, s.n_iter)

    weights = W if n_classes > 2 else W[:, 0]
    return TrainResult(weights=weights, solves=list(solves))
