"""
Kernel ridge regression approximated with Random Binning features, trained
one-vs-all and solved with a matrix-free conjugate gradient.
"""

from .binning import BinAssignment, RandomGrid, random_binning_features
from .config import KERNELS, RunConfig
from .data import encode_instances, load_libsvm
from .design import DesignMatrix, build_design_matrix
from .evaluate import performance, predict
from .helpers import ConfigError, DataError, Timer
from .pcg import SolveResult, normal_operator, pcg
from .sweep import SweepResult, run_sweep
from .train import TrainResult, train_one_vs_all

__all__ = [
    "BinAssignment",
    "ConfigError",
    "DataError",
    "DesignMatrix",
    "KERNELS",
    "RandomGrid",
    "RunConfig",
    "SolveResult",
    "SweepResult",
    "Timer",
    "TrainResult",
    "build_design_matrix",
    "encode_instances",
    "load_libsvm",
    "normal_operator",
    "pcg",
    "performance",
    "predict",
    "random_binning_features",
    "run_sweep",
    "train_one_vs_all",
]
