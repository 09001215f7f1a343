"""Hyperparameter sweep over (lambda, sigma): build features, train, test, report."""

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .binning import random_binning_features
from .data import check_labels, encode_instances
from .design import build_design_matrix
from .evaluate import performance, predict
from .helpers import Timer
from .pcg import normal_operator
from .train import binary_labels, train_one_vs_all

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    r: int
    n_bins: int
    sigma: float
    lam: float
    perf: float
    time_train: float
    time_test: float
    time_format: float = 0.0
    time_features: float = 0.0
    time_assemble: float = 0.0
    time_solve: float = 0.0
    # None, "numeric" or "shape"
    failure: Optional[str] = None


def make_rng(seed):
    """A fresh generator for the given seed; negative seeds draw from OS entropy."""
    return np.random.default_rng(None if seed < 0 else seed)


def get_operator_factory(device):
    if device == "cuda":
        from .gpu import cuda_normal_operator

        return cuda_normal_operator
    return normal_operator


def run_pair(config, X_train, y_train, X_test, y_test, lam, sigma, rng=None):
    """Train and test one (lambda, sigma) pair. `config` must be validated."""
    n_train = X_train.shape[0]
    time_train = 0.0
    rng = make_rng(config.seed) if rng is None else rng

    with Timer() as t:
        instances = encode_instances(X_train) + encode_instances(X_test)
    time_train += t.elapsed
    time_format = t.elapsed
    print(f"RandBinning: Train. Time (in seconds) for converting data format: {t.elapsed:g}", flush=True)

    with Timer() as t:
        assignment = random_binning_features(instances, config.d, sigma, config.r, rng, config.kernel)
    time_train += t.elapsed
    time_features = t.elapsed
    print(f"RandBinning: Train. Time (in seconds) for generating random binning features: {t.elapsed:g}", flush=True)

    with Timer() as t:
        design = build_design_matrix(assignment, n_train)
        del instances, assignment
    time_train += t.elapsed
    time_assemble = t.elapsed
    print(f"RandBinning: Train. Time (in seconds) for converting data format back: {t.elapsed:g}", flush=True)

    with Timer() as t:
        fit = train_one_vs_all(
            design.train, y_train, config.n_classes, lam,
            maxiter=config.max_iter, tol=config.tol, n_jobs=config.n_threads,
            operator_factory=get_operator_factory(config.device),
        )
    time_train += t.elapsed
    time_solve = t.elapsed
    if config.verbose:
        for s in fit.solves:
            print(
                f"RandBinning: Train. PCG: iteration = {s.n_iter}, Relative residual = {s.relative_residual:g}",
                flush=True,
            )
    print(f"RandBinning: Train. Time (in seconds) for solving linear system solution: {t.elapsed:g}", flush=True)

    failure = None
    with Timer() as t:
        if fit.numeric_failure:
            failure = "numeric"
            perf = float("nan")
        else:
            y_truth = binary_labels(y_test) if config.n_classes == 2 else y_test
            perf = performance(y_truth, predict(design.test, fit.weights), config.n_classes)
            if np.isnan(perf):
                failure = "shape"
    time_test = t.elapsed

    if failure is not None:
        logger.warning("sigma = %g, lambda = %g: %s failure, no metric recorded.", sigma, lam, failure)
    print(
        f"RandBinning: OneVsAll. r = {config.r}, D = {design.n_bins}, param = {sigma:g} {lam:g}, "
        f"perf = {perf:g}, time = {time_train:g} {time_test:g}",
        flush=True,
    )
    return SweepResult(
        r=config.r,
        n_bins=design.n_bins,
        sigma=sigma,
        lam=lam,
        perf=perf,
        time_train=time_train,
        time_test=time_test,
        time_format=time_format,
        time_features=time_features,
        time_assemble=time_assemble,
        time_solve=time_solve,
        failure=failure,
    )


def run_sweep(config, X_train, y_train, X_test, y_test) -> List[SweepResult]:
    """
    Every (lambda, sigma) pair, lambdas outermost.

    The generator is reseeded for each pair, so a given sigma always produces
    the same random features for a non-negative seed.
    """
    config.validate()
    check_labels(y_train, config.n_classes)
    check_labels(y_test, config.n_classes)

    results = []
    for lam in config.lambdas:
        for sigma in config.sigmas:
            results.append(run_pair(config, X_train, y_train, X_test, y_test, lam, sigma))
    return results


def results_frame(results) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in results])
