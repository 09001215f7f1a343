"""
Random Binning Features.

Each of the r repetitions lays a randomly pitched and randomly shifted grid over
the input space. An instance's t-th feature is the id of the grid cell it falls
into, so every instance gets exactly r nonzero features (all 1.0) and two
instances share a feature with probability k(x, y) for the configured kernel.

Width distributions per kernel (per dimension, bandwidth sigma):

- laplace:    delta ~ Gamma(2, sigma)  ->  k = exp(-||x - y||_1 / sigma)
- triangular: delta = sigma            ->  k = prod_j max(0, 1 - |x_j - y_j| / sigma)

For a fixed pitch delta and a uniform offset, two points at distance D share a
cell with probability max(0, 1 - D / delta). Averaging that over
delta ~ Gamma(2, sigma), whose density is delta / sigma^2 * exp(-delta / sigma),
gives exp(-D / sigma).
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .config import check_kernel, check_rank, check_sigma
from .data import instances_to_dense
from .helpers import ConfigError


@dataclass(frozen=True)
class RandomGrid:
    width: np.ndarray
    offset: np.ndarray

    def cells(self, X):
        """Integer cell coordinates of each row of X, shape (n, d)."""
        return np.floor((X - self.offset) / self.width).astype(np.int64)


@dataclass
class BinAssignment:
    # bins[i, t] is the global id of the cell instance i occupies in grid t.
    bins: np.ndarray
    n_bins: int

    @property
    def n_instances(self) -> int:
        return self.bins.shape[0]

    @property
    def rank(self) -> int:
        return self.bins.shape[1]

    def features(self, i) -> List[Tuple[int, float]]:
        return [(int(b), 1.0) for b in self.bins[i]]

    def __len__(self):
        return self.n_instances


def sample_grid(d, sigma, rng, kernel="laplace"):
    if kernel == "laplace":
        width = rng.gamma(shape=2.0, scale=sigma, size=d)
    elif kernel == "triangular":
        width = np.full(d, float(sigma))
    else:
        raise ConfigError(f"Unsupported kernel '{kernel}'")
    offset = rng.uniform(0.0, width)
    return RandomGrid(width=width, offset=offset)


def sample_grids(d, sigma, r, rng, kernel="laplace"):
    return [sample_grid(d, sigma, rng, kernel) for _ in range(r)]


def _first_seen_ids(cells):
    """
    Number the distinct rows of `cells` 0, 1, ... in order of first appearance.

    Returns (ids per row, number of distinct rows).
    """
    _, first, inverse = np.unique(cells, axis=0, return_index=True, return_inverse=True)
    inverse = inverse.reshape(-1)
    order = np.argsort(first, kind="stable")
    rank = np.empty_like(order)
    rank[order] = np.arange(order.size)
    return rank[inverse], order.size


def bin_points(X, grids):
    """
    Assign each row of the dense array X to one bin per grid.

    Ids are allocated grid by grid, first seen first numbered, so the ids of
    grid t form a contiguous block below those of grid t+1.
    """
    n = X.shape[0]
    bins = np.empty((n, len(grids)), dtype=np.int64)
    next_id = 0
    if n == 0:
        return BinAssignment(bins=bins, n_bins=0)

    for t, grid in enumerate(grids):
        ids, n_seen = _first_seen_ids(grid.cells(X))
        bins[:, t] = ids + next_id
        next_id += n_seen

    return BinAssignment(bins=bins, n_bins=int(bins.max()) + 1)


def random_binning_features(instances, d, sigma, r, rng, kernel="laplace"):
    """
    Random binning transform of a list of sparse instances.

    Args:
        instances: list of [(index, value), ...] with 1-based indices <= d.
        d: input dimension.
        sigma: kernel bandwidth, > 0.
        r: number of grids (features per instance), >= 1.
        rng: numpy Generator; the only source of randomness.
        kernel: one of config.KERNELS.

    Returns:
        BinAssignment with exactly r bins per instance.
    """
    check_rank(r)
    check_sigma(sigma)
    check_kernel(kernel)
    if d < 1:
        raise ConfigError(f"Data dimension d must be >= 1, got {d}")

    X = instances_to_dense(instances, d)
    grids = sample_grids(d, sigma, r, rng, kernel)
    return bin_points(X, grids)
