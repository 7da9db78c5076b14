"""
One implicit step v_old -> v_new of

    rho v = max(u + A v, rho v*)        (obstacle problems)
    rho v = u + A v                     (no obstacle)

Each strategy exposes update(A, u, v, v_star, rho, Delta, iteration) taking the
stacked generator, flow utility, current iterate and shadow value.
"""

import logging

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import spsolve

from hjbvi.errors import ComplementarityError
from hjbvi.lcp import complementarity_residual, solve_lcp
from hjbvi.operators import check_generator

_log = logging.getLogger("hjbvi")


def implicit_matrix(A, rho, Delta):
    return (rho + 1/Delta)*sp.identity(A.shape[0], format='csr') - A


def implicit_step(A, u, v, rho, Delta, gen_tol=10**-12, iteration=None):
    """Solve ((rho + 1/Delta)I - A) v_new = u + v/Delta after checking that A is a generator."""
    check_generator(A, gen_tol, iteration)
    B = implicit_matrix(A, rho, Delta)
    return spsolve(B.tocsc(), u + v/Delta)


class ImplicitStep(object):
    obstacle = False

    def __init__(self, gen_tol=10**-12):
        self.gen_tol = gen_tol

    def update(self, A, u, v, v_star, rho, Delta, iteration=None):
        return implicit_step(A, u, v, rho, Delta, gen_tol=self.gen_tol, iteration=iteration)


class ExplicitSwitch(ImplicitStep):
    """
    Upwind switching. The choice between adjusting and not adjusting is made
    when the policy is computed, from the one-sided derivatives of the current
    iterate, and is already encoded in the generator. What is left is the plain
    linear solve.
    """


class LCPObstacle(object):
    """
    Value matching through a linear complementarity problem. Writing
    B = (rho + 1/Delta)I - A and z = v_new - v*, the implicit step of the
    variational inequality is

        z >= 0,  Bz + q >= 0,  z'(Bz + q) = 0,   q = -u - v/Delta + B v*.

    Extra keywords are passed on to the LCP routine.
    """
    obstacle = True

    def __init__(self, method='howard', tol=10**-5, gen_tol=10**-12, **lcp_kwargs):
        self.method, self.tol, self.gen_tol = method, tol, gen_tol
        self.lcp_kwargs = lcp_kwargs

    def update(self, A, u, v, v_star, rho, Delta, iteration=None):
        check_generator(A, self.gen_tol, iteration)
        B = implicit_matrix(A, rho, Delta)
        q = -u - v/Delta + B @ v_star
        res = solve_lcp(B, q, v - v_star, method=self.method, **self.lcp_kwargs)
        if not res.converged:
            _log.warning("LCP routine {0} stopped after {1} iterations".format(self.method, res.iterations))
        residual = complementarity_residual(B, q, res.z)
        if not residual <= self.tol:
            raise ComplementarityError(residual, iteration=iteration, tol=self.tol)
        return np.asarray(res.z) + v_star
