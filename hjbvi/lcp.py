"""
Linear complementarity problems: find z with

    z >= 0,  Bz + q >= 0,  z'(Bz + q) = 0,

equivalently min(z, Bz + q) = 0 componentwise. B is the implicit-step matrix
(rho + 1/Delta)I - A, which is an M-matrix whenever A is a proper generator.
"""

import collections

import numpy as np
import scipy.sparse as sp
from numba import njit
from scipy.sparse.linalg import spsolve

LCPResult = collections.namedtuple('LCPResult', ['z', 'iterations', 'converged'])


def howard(B, q, z0, maxit=200):
    """
    Policy iteration. In each row keep whichever of z and Bz + q is smaller and
    set it to zero, solve the resulting linear system, and repeat until the set
    of rows using Bz + q = 0 stops changing. Terminates in finitely many steps
    for M-matrices.
    """
    B = sp.csr_matrix(B)
    n = B.shape[0]
    z = np.asarray(z0, dtype=float).copy()
    active = z > B @ z + q
    for i in range(1, maxit + 1):
        rows = active.astype(float)
        M = sp.diags(rows) @ B + sp.diags(1. - rows)
        z = spsolve(M.tocsc(), np.where(active, -q, 0.)).reshape(n)
        new_active = z > B @ z + q
        if np.array_equal(new_active, active):
            return LCPResult(z, i, True)
        active = new_active
    return LCPResult(z, maxit, False)


@njit
def _psor_sweeps(indptr, indices, data, q, z, omega, tol, maxit):
    n = z.shape[0]
    for it in range(maxit):
        err = 0.
        for i in range(n):
            r, diag = q[i], 0.
            for k in range(indptr[i], indptr[i+1]):
                j = indices[k]
                if j == i:
                    diag = data[k]
                r += data[k]*z[j]
            znew = max(0., z[i] - omega*r/diag)
            err = max(err, abs(znew - z[i]))
            z[i] = znew
        if err < tol:
            return it + 1, True
    return maxit, False


def psor(B, q, z0, omega=1.2, tol=10**-12, maxit=10**5):
    """Projected successive over-relaxation, one Gauss-Seidel sweep over the CSR rows at a time."""
    B = sp.csr_matrix(B)
    B.sort_indices()
    z = np.maximum(np.asarray(z0, dtype=float), 0.).copy()
    its, converged = _psor_sweeps(B.indptr, B.indices, B.data.astype(float),
                                  np.asarray(q, dtype=float), z, omega, tol, maxit)
    return LCPResult(z, its, converged)


methods = {'howard': howard, 'psor': psor}


def solve_lcp(B, q, z0, method='howard', **kwargs):
    if method not in methods:
        raise ValueError("Unknown LCP method {0!r}, choose from {1}".format(method, sorted(methods)))
    return methods[method](B, q, z0, **kwargs)


def complementarity_residual(B, q, z):
    return np.max(np.abs(z*(B @ z + q)))
