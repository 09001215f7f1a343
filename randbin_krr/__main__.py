"""
One-vs-all kernel ridge regression with Random Binning features.

Usage:

    python -m randbin_krr NumThreads FileTrain FileTest NumClasses d r \
        Num_lambda List_lambda Num_sigma List_sigma MAXIT TOL verbose \
        [--seed SEED] [--kernel laplace|triangular] [--device cpu|cuda] \
        [--results-csv PATH] [--log-level LEVEL]

    NumThreads:  Number of worker threads for the per-class solves
    FileTrain:   LibSVM train file (attribute indices start at 1)
    FileTest:    LibSVM test file
    NumClasses:  1 = regression, 2 = binary, > 2 = multiclass (labels 0..NumClasses-1)
    d:           Data dimension
    r:           Rank (number of random grids)
    Num_lambda:  Number of lambda's, followed by that many regularizations
    Num_sigma:   Number of sigma's, followed by that many bandwidths
    MAXIT:       PCG iteration cap
    TOL:         PCG relative residual tolerance
    verbose:     1 to print the PCG residual of every solve

Exit status is -1 if the data cannot be loaded, 2 on invalid parameters.
"""

import argparse
import logging
import sys

from .config import DEVICES, KERNELS, RunConfig
from .data import load_libsvm
from .helpers import ConfigError, DataError, Timer
from .sweep import results_frame, run_sweep


def build_parser():
    ap = argparse.ArgumentParser(
        prog="randbin_krr",
        description="One-vs-all kernel ridge regression approximated with Random Binning features.",
    )
    ap.add_argument("params", nargs="+", help="NumThreads FileTrain FileTest NumClasses d r "
                    "Num_lambda List_lambda Num_sigma List_sigma MAXIT TOL verbose")
    ap.add_argument("--seed", type=int, default=0, help="RNG seed; negative draws from OS entropy")
    ap.add_argument("--kernel", type=str, default="laplace", choices=list(KERNELS))
    ap.add_argument("--device", type=str, default="cpu", choices=list(DEVICES))
    ap.add_argument("--results-csv", type=str, default=None, help="write one row per (lambda, sigma)")
    ap.add_argument("--log-level", type=str, default="WARNING")
    return ap


def parse_params(tokens):
    """
    Unpack the positional parameters in their fixed order.

    Returns (file_train, file_test, kwargs for RunConfig). Raises ConfigError on
    a missing, extra, or non-numeric token.
    """
    tokens = list(tokens)

    def take(kind, name):
        if not tokens:
            raise ConfigError(f"Missing argument {name}")
        tok = tokens.pop(0)
        try:
            return kind(tok)
        except ValueError:
            raise ConfigError(f"Argument {name} = '{tok}' is not a valid {kind.__name__}") from None

    n_threads = take(int, "NumThreads")
    file_train = take(str, "FileTrain")
    file_test = take(str, "FileTest")
    n_classes = take(int, "NumClasses")
    d = take(int, "d")
    r = take(int, "r")
    num_lambda = take(int, "Num_lambda")
    lambdas = [take(float, f"lambda[{i}]") for i in range(num_lambda)]
    num_sigma = take(int, "Num_sigma")
    sigmas = [take(float, f"sigma[{i}]") for i in range(num_sigma)]
    max_iter = take(int, "MAXIT")
    tol = take(float, "TOL")
    verbose = bool(take(int, "verbose"))
    if tokens:
        raise ConfigError(f"Unexpected extra arguments: {' '.join(tokens)}")

    kwargs = dict(
        n_classes=n_classes, d=d, r=r, lambdas=lambdas, sigmas=sigmas,
        max_iter=max_iter, tol=tol, n_threads=n_threads, verbose=verbose,
    )
    return file_train, file_test, kwargs


def main(argv=None):
    args = build_parser().parse_intermixed_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        file_train, file_test, kwargs = parse_params(args.params)
        config = RunConfig(seed=args.seed, kernel=args.kernel, device=args.device, **kwargs).validate()
    except ConfigError as err:
        print(f"randbin_krr: error: {err}", file=sys.stderr)
        return 2

    try:
        with Timer() as t:
            X_train, y_train = load_libsvm(file_train, config.d)
            X_test, y_test = load_libsvm(file_test, config.d)
    except DataError as err:
        print(f"randbin_krr: error: {err}", file=sys.stderr)
        return -1
    print(
        f"RandBinning: time loading data = {t.elapsed:g} seconds, n train = {X_train.shape[0]}, "
        f"m test = {X_test.shape[0]}, num threads = {config.n_threads}",
        flush=True,
    )

    try:
        results = run_sweep(config, X_train, y_train, X_test, y_test)
    except DataError as err:
        print(f"randbin_krr: error: {err}", file=sys.stderr)
        return -1

    if args.results_csv:
        results_frame(results).to_csv(args.results_csv, index=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
