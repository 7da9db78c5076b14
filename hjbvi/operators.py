"""
Finite differences, upwind policies and generator assembly.

The generator is built the same way for every model: a dictionary of rates
keyed by the offset of the destination point, e.g. (0,1) for one step up the
asset grid in the same discrete state, turned into coordinate triplets.
"""

import numpy as np
import scipy.sparse as sp

from hjbvi.errors import NumericalInstabilityError


def forward_backward(v, dx, axis=-1, upper=None, lower=None):
    """
    Forward and backward differences of v along axis. The forward difference at
    the last point and the backward difference at the first point have no
    neighbor; they take the boundary values upper and lower (zero if unset).
    """
    axis = axis % v.ndim
    sl = lambda s: tuple(s if ax == axis else slice(None) for ax in range(v.ndim))
    vF, vB = np.zeros(v.shape), np.zeros(v.shape)
    diff = np.diff(v, axis=axis)/dx
    vF[sl(slice(None, -1))] = diff
    vB[sl(slice(1, None))] = diff
    if upper is not None:
        vF[sl(-1)] = upper
    if lower is not None:
        vB[sl(0)] = lower
    return vF, vB


def upwind_savings(v, cash, da, utility):
    """
    Consumption and savings along the last (asset) axis. cash is income plus
    interest, i.e. consumption that keeps assets constant. At both ends of the
    grid the derivative is replaced by marginal utility of cash on hand, which
    enforces the state constraint.

    Forward difference where it implies positive drift, backward where it implies
    negative drift, steady state elsewhere. The backward difference is always used
    at the last point and wins where both conditions hold.
    """
    vF, vB = forward_backward(v, da, axis=-1, upper=utility.u_prime(cash[..., -1]),
                              lower=utility.u_prime(cash[..., 0]))
    cF, cB = utility.u_prime_inv(vF), utility.u_prime_inv(vB)
    sF, sB = cash - cF, cash - cB
    IB = sB < 0
    IB[..., -1] = True
    IF = (sF > 0) & ~IB
    I0 = ~IF & ~IB
    c = cF*IF + cB*IB + cash*I0
    X, Z = -np.minimum(sB, 0)/da, np.maximum(sF, 0)/da
    X[..., 0], Z[..., -1] = 0, 0
    return {'vF': vF, 'vB': vB, 'c': c, 'drift': cash - c, 'sF': sF, 'sB': sB,
            'IF': IF, 'IB': IB, 'I0': I0, 'down': X, 'up': Z, 'concave': vB >= vF}


class TransitionBuilder(object):
    """
    Coordinate-list builder for the generator on a grid of the given shape.

    Each call to add(key, rate) places rate[i] at (i, i + key) for every point
    whose destination lies on the grid. The diagonal is minus the total rate out
    of each point, including rates that point off the grid, so a rate that should
    have vanished at a boundary shows up as a nonzero row sum.
    """

    def __init__(self, shape):
        self.shape, self.M = tuple(shape), int(np.prod(shape))
        self.rows, self.cols, self.vals = [], [], []
        self.outflow = np.zeros(self.shape)

    def add(self, key, rate):
        rate = np.broadcast_to(rate, self.shape)
        self.outflow = self.outflow + rate
        ind = tuple(self.mesh(key))
        row = np.ravel_multi_index(ind, self.shape)
        column = np.ravel_multi_index(tuple(i + k for i, k in zip(ind, key)), self.shape)
        self.triplet(row, column, rate[ind])
        return self

    def triplet(self, row, column, val):
        self.rows.append(np.ravel(row))
        self.cols.append(np.ravel(column))
        self.vals.append(np.ravel(val))

    def tocsr(self):
        diag = np.arange(self.M)
        rows = np.concatenate(self.rows + [diag])
        cols = np.concatenate(self.cols + [diag])
        vals = np.concatenate(self.vals + [-self.outflow.reshape(self.M)])
        return sp.coo_matrix((vals, (rows, cols)), shape=(self.M, self.M)).tocsr()

    def mesh(self, m):
        return np.meshgrid(*[range(max(-k, 0), n - max(k, 0)) for k, n in zip(m, self.shape)], indexing='ij')


def switching_matrix(la_mat, block):
    """Exogenous switching between discrete states, each owning a block of points."""
    la_mat = np.atleast_2d(np.asarray(la_mat, dtype=float))
    return sp.kron(sp.csr_matrix(la_mat), sp.identity(block, format='csr'), format='csr')


def row_sums(A):
    return np.asarray(A.sum(axis=1)).reshape(-1)


def check_generator(A, tol=10**-12, iteration=None):
    worst = np.max(np.abs(row_sums(A)))
    if not worst <= tol:
        raise NumericalInstabilityError(worst, iteration=iteration, tol=tol)
    return worst
