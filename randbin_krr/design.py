from dataclasses import dataclass

import numpy as np
import scipy.sparse


@dataclass
class DesignMatrix:
    train: scipy.sparse.csr_matrix
    test: scipy.sparse.csr_matrix
    n_bins: int


def assemble_design_matrix(bins, n_bins=None):
    """
    Pack an (N, r) array of bin ids into an N x n_bins CSR matrix of ones.

    Every row has exactly r entries, so the row pointers are 0, r, ..., N*r.
    """
    bins = np.asarray(bins)
    n, r = bins.shape
    if n_bins is None:
        n_bins = int(bins.max()) + 1 if bins.size else 0

    indptr = np.arange(n + 1, dtype=np.int64) * r
    indices = bins.reshape(-1)
    data = np.ones(n * r, dtype=np.float64)
    return scipy.sparse.csr_matrix((data, indices, indptr), shape=(n, n_bins))


def split_design_matrix(Z, n_train):
    """Rows [0, n_train) and [n_train, N) as independent CSR copies."""
    n = Z.shape[0]
    if not 0 <= n_train <= n:
        raise ValueError(f"n_train = {n_train} outside [0, {n}]")
    return Z[:n_train].tocsr(copy=True), Z[n_train:].tocsr(copy=True)


def build_design_matrix(assignment, n_train):
    """Design matrices for train rows (first n_train) and test rows (the rest)."""
    Z = assemble_design_matrix(assignment.bins, assignment.n_bins)
    train, test = split_design_matrix(Z, n_train)
    del Z
    return DesignMatrix(train=train, test=test, n_bins=assignment.n_bins)
