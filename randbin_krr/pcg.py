import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from scipy.sparse.linalg import LinearOperator, aslinearoperator

logger = logging.getLogger(__name__)


@dataclass
class SolveResult:
    x: np.ndarray
    history: List[float] = field(default_factory=list)
    norm_rhs: float = 0.0
    converged: bool = False
    numeric_failure: bool = False

    @property
    def n_iter(self) -> int:
        return len(self.history)

    @property
    def relative_residual(self) -> float:
        if not self.history:
            return 0.0 if self.converged else float("nan")
        if self.norm_rhs == 0:
            return self.history[-1]
        return self.history[-1] / self.norm_rhs


def normal_operator(Z, lam) -> LinearOperator:
    """
    The operator v -> Z'(Z v) + lam * v.

    Z only needs matrix-vector products with itself and its transpose; Z'Z is
    never formed.
    """
    Zop = aslinearoperator(Z)
    n = Zop.shape[1]

    def matvec(v):
        v = np.ravel(v)
        return Zop.rmatvec(Zop.matvec(v)) + lam * v

    return LinearOperator((n, n), matvec=matvec, rmatvec=matvec, dtype=np.float64)


def identity_preconditioner(n) -> LinearOperator:
    return LinearOperator((n, n), matvec=lambda v: np.array(v, dtype=np.float64).ravel(), dtype=np.float64)


def pcg(A, b, M=None, maxiter=100, tol=1e-3, x0=None) -> SolveResult:
    """
    Preconditioned conjugate gradient for a symmetric positive definite A.

    Iterates until ||r_k|| / ||b|| < tol or maxiter iterations, appending
    ||r_k|| to the history after each iteration. Non-finite values or a
    non-positive curvature p'Ap stop the iteration with numeric_failure set;
    the last iterate is returned either way.

    Args:
        A: operator with matvec, e.g. normal_operator(Z, lam).
        b: right-hand side.
        M: preconditioner (approximate inverse of A); None means identity.
        maxiter: iteration cap.
        tol: relative residual tolerance.
        x0: initial guess, zeros by default.
    """
    b = np.asarray(b, dtype=np.float64).ravel()
    n = b.shape[0]
    A = aslinearoperator(A)
    M = identity_preconditioner(n) if M is None else aslinearoperator(M)

    x = np.zeros(n) if x0 is None else np.array(x0, dtype=np.float64).ravel()
    norm_b = float(np.linalg.norm(b))
    result = SolveResult(x=x, norm_rhs=norm_b)

    if not np.isfinite(norm_b):
        logger.warning("PCG: right-hand side is not finite.")
        result.numeric_failure = True
        return result
    if norm_b == 0:
        result.x = np.zeros(n)
        result.converged = True
        return result

    r = b - A.matvec(x) if x0 is not None else b.copy()
    if float(np.linalg.norm(r)) / norm_b < tol:
        result.converged = True
        return result

    z = M.matvec(r)
    p = z.copy()
    rz = float(r @ z)

    for _ in range(maxiter):
        Ap = A.matvec(p)
        pAp = float(p @ Ap)
        if not np.isfinite(pAp) or pAp <= 0:
            logger.warning("PCG: breakdown at iteration %d (p'Ap = %g).", result.n_iter + 1, pAp)
            result.numeric_failure = True
            break

        alpha = rz / pAp
        x += alpha * p
        r -= alpha * Ap
        res = float(np.linalg.norm(r))
        result.history.append(res)

        if not np.isfinite(res):
            logger.warning("PCG: non-finite residual at iteration %d.", result.n_iter)
            result.numeric_failure = True
            break
        if res / norm_b < tol:
            result.converged = True
            break

        z = M.matvec(r)
        rz_new = float(r @ z)
        p = z + (rz_new / rz) * p
        rz = rz_new

    result.x = x
    if not (result.converged or result.numeric_failure):
        logger.info(
            "PCG: no convergence in %d iterations (relative residual %g).",
            maxiter,
            result.relative_residual,
        )
    return result
