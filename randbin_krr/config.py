from dataclasses import dataclass, field
from typing import List

from .helpers import ConfigError

# Kernel families random binning can represent exactly (see binning.sample_grid).
KERNELS = ("laplace", "triangular")
DEVICES = ("cpu", "cuda")


@dataclass
class RunConfig:
    n_classes: int
    d: int
    r: int
    lambdas: List[float] = field(default_factory=lambda: [1e-3])
    sigmas: List[float] = field(default_factory=lambda: [1.0])
    max_iter: int = 100
    tol: float = 1e-3
    kernel: str = "laplace"
    # Negative seed: draw from OS entropy.
    seed: int = 0
    n_threads: int = 1
    verbose: bool = False
    device: str = "cpu"

    def validate(self):
        if self.n_classes < 1:
            raise ConfigError(f"NumClasses must be >= 1, got {self.n_classes}")
        if self.d < 1:
            raise ConfigError(f"Data dimension d must be >= 1, got {self.d}")
        check_rank(self.r)
        if not self.lambdas:
            raise ConfigError("At least one lambda is required")
        for lam in self.lambdas:
            if not lam >= 0:
                raise ConfigError(f"lambda must be >= 0, got {lam}")
        if not self.sigmas:
            raise ConfigError("At least one sigma is required")
        for sigma in self.sigmas:
            check_sigma(sigma)
        if self.max_iter < 1:
            raise ConfigError(f"MAXIT must be >= 1, got {self.max_iter}")
        if not self.tol > 0:
            raise ConfigError(f"TOL must be > 0, got {self.tol}")
        check_kernel(self.kernel)
        if self.n_threads < 1:
            raise ConfigError(f"NumThreads must be >= 1, got {self.n_threads}")
        if self.device not in DEVICES:
            raise ConfigError(f"Unknown device '{self.device}', expected one of {DEVICES}")
        return self


def check_rank(r):
    if r < 1:
        raise ConfigError(f"Rank r must be >= 1, got {r}")


def check_sigma(sigma):
    # `not >` also rejects nan.
    if not sigma > 0:
        raise ConfigError(f"sigma must be > 0, got {sigma}")


def check_kernel(kernel):
    if kernel not in KERNELS:
        raise ConfigError(f"Unsupported kernel '{kernel}', expected one of {KERNELS}")
