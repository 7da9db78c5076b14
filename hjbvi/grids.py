"""
Grids and state spaces.

A state space is a finite discrete dimension (ownership flag, income state)
followed by one or two continuous dimensions. Arrays defined on it have shape
(n_discrete, N[0], ..., N[-1]) and use 'ij' indexing, so that if
_, aa, bb = space.mesh() then aa varies along axis 1 and bb along axis 2.

Since numpy reshapes by reading across rows then columns, the flat position of
the point (k, i, j) is k*N[0]*N[1] + i*N[1] + j, and each discrete state owns one
contiguous block of the stacked vector.
"""

import numbers

import numpy as np

from hjbvi.errors import ConfigurationError


class Grid(object):
    """Evenly spaced points from xmin to xmax inclusive."""

    def __init__(self, xmin, xmax, N):
        if isinstance(N, bool) or not isinstance(N, numbers.Integral):
            raise ConfigurationError("Number of grid points must be an integer, got {0!r}".format(N))
        if N < 2:
            raise ConfigurationError("Need at least two grid points, got {0}".format(N))
        try:
            xmin, xmax = float(xmin), float(xmax)
        except (TypeError, ValueError):
            raise ConfigurationError("Grid bounds must be numbers, got [{0!r}, {1!r}]".format(xmin, xmax))
        if not np.isfinite(xmin) or not np.isfinite(xmax) or not xmax > xmin:
            raise ConfigurationError("Grid bounds must satisfy xmin < xmax, got [{0}, {1}]".format(xmin, xmax))
        self.xmin, self.xmax, self.N = xmin, xmax, int(N)
        self.delta = (self.xmax - self.xmin)/(self.N - 1)
        self.points = np.linspace(self.xmin, self.xmax, self.N)

    def __len__(self):
        return self.N

    def __repr__(self):
        return "Grid({0}, {1}, {2})".format(self.xmin, self.xmax, self.N)


def make_grid(xmin, xmax, N):
    return Grid(xmin, xmax, N)


class StateSpace(object):
    def __init__(self, grids, n_discrete=1):
        if isinstance(n_discrete, bool) or not isinstance(n_discrete, numbers.Integral) or n_discrete < 1:
            raise ConfigurationError("Discrete dimension must be a positive integer, got {0!r}".format(n_discrete))
        self.grids = tuple(grids)
        if len(self.grids) not in (1, 2):
            raise ConfigurationError("Only one or two continuous dimensions are supported")
        self.n_discrete = int(n_discrete)
        self.shape = (self.n_discrete,) + tuple(len(g) for g in self.grids)
        self.size = int(np.prod(self.shape))
        self.block = self.size // self.n_discrete

    def mesh(self):
        """Discrete index followed by the continuous points, each of full shape."""
        return np.meshgrid(np.arange(self.n_discrete), *[g.points for g in self.grids], indexing='ij')

    def index(self):
        """Flat position of every point, of full shape."""
        return np.arange(self.size).reshape(self.shape)

    def stack(self, x):
        return np.reshape(x, (self.size,))

    def unstack(self, x):
        return np.reshape(x, self.shape)
