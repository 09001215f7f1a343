# CUDA back end for the normal-equations operator. Requires the `gpu` extra (cupy).

import numpy as np
import cupy as cp
from scipy.sparse.linalg import LinearOperator

# y = Z v, one thread per row
csr_mv_src = r'''
extern "C" __global__
void csr_mv(const double* Zd, const long long* Zidx, const long long* Zptr,
            const double* vec, double* out, long long n_rows) {
  long long i = (long long)blockIdx.x*blockDim.x + threadIdx.x;
  if (i >= n_rows) return;
  double s = 0.0;
  for (long long p = Zptr[i]; p < Zptr[i+1]; ++p) {
    s += Zd[p] * vec[Zidx[p]];
  }
  out[i] = s;
}
'''
# out += Z' v, one thread per row scattering into the columns it touches
csr_mvt_src = r'''
extern "C" __global__
void csr_mvt(const double* Zd, const long long* Zidx, const long long* Zptr,
             const double* invec, double* out, long long n_rows) {
  long long i = (long long)blockIdx.x*blockDim.x + threadIdx.x;
  if (i >= n_rows) return;
  double v = invec[i];
  if (v == 0.0) return;
  for (long long p = Zptr[i]; p < Zptr[i+1]; ++p) {
    atomicAdd(&out[Zidx[p]], Zd[p] * v);
  }
}
'''

csr_mv = cp.RawKernel(csr_mv_src, 'csr_mv')
csr_mvt = cp.RawKernel(csr_mvt_src, 'csr_mvt')

tp = 256


class CudaNormalOperator(LinearOperator):
    """v -> Z'(Z v) + lam * v with Z resident on the device; vectors stay on the host."""

    def __init__(self, Z, lam):
        n_rows, n_cols = Z.shape
        super().__init__(dtype=np.float64, shape=(n_cols, n_cols))
        self.lam = float(lam)
        self.n_rows = n_rows
        self.n_cols = n_cols
        self.blocks = max((n_rows + tp - 1) // tp, 1)
        self.d_Z_data = cp.asarray(Z.data.astype(np.float64))
        self.d_Z_idx = cp.asarray(Z.indices.astype(np.int64))
        self.d_Z_ptr = cp.asarray(Z.indptr.astype(np.int64))

    def _Z_dot(self, d_vec):
        out = cp.zeros(self.n_rows, dtype=cp.float64)
        csr_mv((self.blocks,), (tp,),
               (self.d_Z_data, self.d_Z_idx, self.d_Z_ptr, d_vec, out, np.int64(self.n_rows)))
        return out

    def _ZT_dot(self, d_vec):
        out = cp.zeros(self.n_cols, dtype=cp.float64)
        csr_mvt((self.blocks,), (tp,),
                (self.d_Z_data, self.d_Z_idx, self.d_Z_ptr, d_vec, out, np.int64(self.n_rows)))
        return out

    def _matvec(self, v):
        d_v = cp.asarray(np.ravel(v), dtype=cp.float64)
        out = self._ZT_dot(self._Z_dot(d_v))
        if self.lam != 0.0:
            out += self.lam * d_v
        return cp.asnumpy(out)

    def _rmatvec(self, v):
        return self._matvec(v)


def cuda_normal_operator(Z, lam):
    return CudaNormalOperator(Z, lam)
