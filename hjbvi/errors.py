"""
Exceptions raised by the solver. All of them are fatal to the solve that raised
them: a value function produced under any of these conditions is never returned.
"""


class HJBError(Exception):
    pass


class ConfigurationError(HJBError, ValueError):
    """Invalid grid or model parameters, detected at construction."""


class NumericalInstabilityError(HJBError):
    """The assembled generator is not a proper transition-rate matrix."""

    def __init__(self, row_sum, iteration=None, tol=None):
        self.row_sum, self.iteration, self.tol = row_sum, iteration, tol
        msg = "Improper transition matrix: max absolute row sum {0:.3e}".format(row_sum)
        if tol is not None:
            msg += " exceeds {0:.1e}".format(tol)
        if iteration is not None:
            msg += " at iteration {0}".format(iteration)
        super().__init__(msg)


class ComplementarityError(HJBError):
    """The LCP solve did not achieve complementarity."""

    def __init__(self, residual, iteration=None, tol=None):
        self.residual, self.iteration, self.tol = residual, iteration, tol
        msg = "LCP not solved: complementarity residual {0:.3e}".format(residual)
        if tol is not None:
            msg += " exceeds {0:.1e}".format(tol)
        if iteration is not None:
            msg += " at iteration {0}".format(iteration)
        super().__init__(msg)


class NonConvergenceError(HJBError):
    """Iteration limit reached before the value function settled."""

    def __init__(self, iterations, distance, dist=None):
        self.iterations, self.distance, self.dist = iterations, distance, dist
        super().__init__("Algorithm did not converge: difference {0:.3e} after {1} iterations"
                         .format(distance, iterations))
