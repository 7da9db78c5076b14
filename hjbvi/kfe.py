"""
Stationary distribution from the Kolmogorov forward equation A'g = 0, and the
asset market clearing of the Huggett economy built on it.
"""

import numpy as np
import scipy.optimize
import scipy.sparse as sp
from scipy.sparse.linalg import spsolve

from hjbvi.classes import HuggettModel
from hjbvi.solver import solve_hjbvi


def stationary_distribution(sol, i_fix=0):
    """
    Density g on the state space, normalized so that g times the cell volume
    (da, or da*db with two assets) sums to one. A' is singular, so one
    equation is replaced by g[i_fix] = 0.1 before solving.
    """
    model = sol.model
    AT = sp.lil_matrix(sol.A.T)
    b = np.zeros(model.space.size)
    b[i_fix] = .1
    AT[i_fix, :] = 0
    AT[i_fix, i_fix] = 1.
    g = spsolve(AT.tocsc(), b)
    g = g/(np.sum(g)*np.prod([grid.delta for grid in model.space.grids]))
    return model.space.unstack(g)


def excess_demand(r, maxit=None, crit=None, Delta=None, **kwargs):
    """Aggregate asset holdings sum(a*g)*da of the Huggett economy at interest rate r."""
    model = HuggettModel(r=r, **kwargs)
    g = stationary_distribution(solve_hjbvi(model, maxit=maxit, crit=crit, Delta=Delta))
    return np.sum(model.aa*g)*model.da


def equilibrium_rate(bracket=(0.01, 0.03), xtol=10**-8, **kwargs):
    """Interest rate within bracket at which bonds are in zero net supply."""
    return scipy.optimize.brentq(lambda r: excess_demand(r, **kwargs), bracket[0], bracket[1], xtol=xtol)
