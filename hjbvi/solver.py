"""
Implicit time-stepping driver, shared by all models.

Each iteration recomputes the policy from the current iterate, assembles the
generator, rebuilds the shadow value and takes one implicit step through the
chosen strategy. The loop stops when the largest change in the value function
falls below crit.
"""

import enum
import logging

import numpy as np

from hjbvi.errors import ConfigurationError, HJBError, NonConvergenceError

logging.basicConfig(format="%(message)s")
_log = logging.getLogger("hjbvi")
_log.setLevel(logging.ERROR)


def disable_logging():
    _log.disabled = True


def enable_logging():
    _log.disabled = False


def warnings():
    _log.setLevel(logging.WARNING)


def quiet():
    _log.setLevel(logging.ERROR)


def verbose():
    _log.setLevel(logging.INFO)


def set_verbosity_level(level):
    _log.setLevel(level)


class Status(enum.Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    FAILED = "failed"


class IterationState(object):
    """Everything one iteration hands to the next."""

    def __init__(self, v, it=0, dist=None, status=Status.RUNNING, pol=None, A=None, v_star=None):
        self.v, self.it, self.status = v, it, status
        self.dist = [] if dist is None else dist
        self.pol, self.A, self.v_star = pol, A, v_star


class Solution(object):
    """
    Converged value function v with the shadow value v_star, consumption c and
    drift of the last iteration, the number of iterations it, the distance trace
    dist and the last generator A. Model-specific policy arrays are in extras and
    are also reachable as attributes.
    """

    def __init__(self, model, state):
        self.model, self.status = model, state.status
        self.v, self.v_star, self.A = state.v, state.v_star, state.A
        self.it, self.dist = state.it, np.array(state.dist)
        self.policy = state.pol
        self.c, self.drift = state.pol['c'], model.drift(state.pol)
        self.extras = model.outputs(state.pol)

    def __getattr__(self, name):
        extras = self.__dict__.get('extras', {})
        if name in extras:
            return extras[name]
        raise AttributeError(name)


def step(model, state, strategy, Delta):
    space = model.space
    pol = model.policy(state.v)
    A = model.generator(pol)
    u = model.flow_utility(pol)
    v_star = model.shadow_value(state.v) if strategy.obstacle else None
    if strategy.obstacle and v_star is None:
        raise ConfigurationError("{0} has no obstacle to impose".format(type(model).__name__))
    V = strategy.update(A, space.stack(u), space.stack(state.v),
                        None if v_star is None else space.stack(v_star),
                        model.rho, Delta, iteration=state.it + 1)
    V = space.unstack(V)
    change = V - state.v
    if np.min(change) < -model.mono_tol:
        fails = change[change < -model.mono_tol]
        _log.debug("Failure of monotonicity at: {0} points out of {1}".format(len(fails), space.size))
        _log.debug("Average magnitude of monotonicity failure: {0}".format(np.mean(fails)))
    dist = state.dist + [np.max(np.abs(change))]
    _log.info("Difference in iterations: {0} Iterations: {1}".format(dist[-1], state.it + 1))
    return IterationState(V, state.it + 1, dist, Status.RUNNING, pol, A, v_star)


def solve_hjbvi(model, maxit=None, crit=None, Delta=None, strategy=None):
    """
    Iterate to convergence from model.v0. Settings left as None come from the
    model, and the strategy defaults to the model's own (LCP for the stopping
    problems, explicit switching for the two-asset problem). Model defaults are
    maxit=100, crit=1e-6 and Delta=1000, except TwoAssetModel which uses
    crit=1e-5 and Delta=100.

    Raises NonConvergenceError when maxit iterations leave the distance above
    crit; errors from the generator check and the LCP solve propagate at once.
    """
    maxit = model.maxit if maxit is None else maxit
    crit = model.crit if crit is None else crit
    Delta = model.Delta if Delta is None else Delta
    strategy = model.default_strategy() if strategy is None else strategy

    state = IterationState(np.array(model.v0, dtype=float))
    while state.status is Status.RUNNING:
        try:
            state = step(model, state, strategy, Delta)
        except HJBError as err:
            state.status = Status.FAILED
            _log.error("Solve failed: {0}".format(err))
            raise
        if state.dist[-1] < crit:
            state.status = Status.CONVERGED
        elif state.it >= maxit:
            state.status = Status.FAILED
            raise NonConvergenceError(state.it, state.dist[-1], np.array(state.dist))
    _log.info("Value function converged after {0} iterations, difference {1}".format(state.it, state.dist[-1]))
    return Solution(model, state)
