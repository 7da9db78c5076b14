"""
Four models solved by the generic driver in solver.py.

DurableModel is the durable-good (car) purchase problem, RetirementModel is the
irreversible retirement problem, HuggettModel is the income-fluctuation problem
with Poisson income and no stopping decision, and TwoAssetModel is the liquid and
illiquid asset problem with a kinked adjustment cost.

Each class derives its grids once in the constructor and then supplies, for a
value function v of shape space.shape:

    policy(v)         consumption, drifts and upwind rates (a dictionary)
    tran_func(pol)    generator rates keyed by the offset of the destination
    generator(pol)    sparse generator, transition plus exogenous switching
    flow_utility(pol)
    shadow_value(v)   value of stopping/switching, None without an obstacle
    outputs(pol)      model-specific policy arrays reported with the solution

Following uses indexing='ij', with the discrete state first; see grids.py.
"""

import numpy as np

from hjbvi.errors import ConfigurationError
from hjbvi.grids import Grid, StateSpace
from hjbvi.obstacles import ExplicitSwitch, ImplicitStep, LCPObstacle
from hjbvi.operators import TransitionBuilder, forward_backward, switching_matrix, upwind_savings
from hjbvi.switching import adjustment_cost, kernels
from hjbvi.utility import CRRA


class HJBModel(object):
    la_mat = None

    def __init__(self, rho, maxit=100, crit=10**-6, Delta=1000, gen_tol=10**-12,
                 lcp_tol=10**-5, mono_tol=10**-6, lcp_method='howard'):
        self.rho = rho
        self.maxit, self.crit, self.Delta = maxit, crit, Delta
        self.gen_tol, self.lcp_tol, self.mono_tol = gen_tol, lcp_tol, mono_tol
        self.lcp_method = lcp_method
        if not rho > 0:
            raise ConfigurationError("Discount rate must be positive, got {0}".format(rho))
        if isinstance(maxit, bool) or not isinstance(maxit, (int, np.integer)) or maxit < 1:
            raise ConfigurationError("Iteration limit must be a positive integer, got {0!r}".format(maxit))
        for name in ['crit', 'Delta', 'gen_tol', 'lcp_tol', 'mono_tol']:
            if not getattr(self, name) > 0:
                raise ConfigurationError("{0} must be positive, got {1}".format(name, getattr(self, name)))

    def generator(self, pol):
        T = TransitionBuilder(self.space.shape)
        for key, rate in self.tran_func(pol).items():
            T.add(key, rate)
        A = T.tocsr()
        if self.la_mat is not None:
            A = A + switching_matrix(self.la_mat, self.space.block)
        return A

    def shadow_value(self, v):
        return None

    def outputs(self, pol):
        return {}

    def default_strategy(self):
        return ImplicitStep(gen_tol=self.gen_tol)

    def lcp_strategy(self, **kwargs):
        return LCPObstacle(method=self.lcp_method, tol=self.lcp_tol, gen_tol=self.gen_tol, **kwargs)


class ConsumptionSavings(HJBModel):
    """
    One asset a with constant income in each discrete state, so that cash on
    hand is income + r*a. Subclasses set self.income of shape space.shape.
    """

    def __init__(self, sigma, rho, r, bnd, N_a, n_discrete=1, **kwargs):
        super().__init__(rho, **kwargs)
        self.sigma, self.r = sigma, r
        self.utility = CRRA(sigma)
        self.grid = Grid(bnd[0], bnd[1], N_a)
        self.N_a, self.da, self.a = self.grid.N, self.grid.delta, self.grid.points
        self.space = StateSpace([self.grid], n_discrete)
        self.ii, self.aa = self.space.mesh()

    def check_cash(self):
        if not np.all(self.cash > 0):
            raise ConfigurationError("Cash on hand income + r*a must be positive on the whole grid, "
                                     "minimum is {0}".format(np.min(self.cash)))

    def policy(self, v):
        return upwind_savings(v, self.cash, self.da, self.utility)

    def tran_func(self, pol):
        return {(0, -1): pol['down'], (0, 1): pol['up']}

    def flow_utility(self, pol):
        return self.utility.u(pol['c'])

    def drift(self, pol):
        return pol['drift']

    def outputs(self, pol):
        return {'concave': pol['concave']}


class DurableModel(ConsumptionSavings):
    """
    Household with income y that can buy a durable good (a car) at price p0 and
    sell it at price p1. Discrete state d = 0 without the good, d = 1 with it;
    owning adds kappa to flow utility. Buying moves the household from (0, a) to
    (1, a - p0) and selling from (1, a) to (0, a + p1), so both prices are rounded
    up to a whole number of grid steps.
    """

    def __init__(self, sigma=2., rho=0.05, r=0.045, y=0.1, kappa=0.25, p0=0.2, p1=0.1,
                 N_a=500, amin=-0.02, amax=3., **kwargs):
        super().__init__(sigma, rho, r, (amin, amax), N_a, n_discrete=2, **kwargs)
        self.y, self.kappa, self.p0, self.p1 = y, kappa, p0, p1
        if not p0 >= 0 or not p1 >= 0:
            raise ConfigurationError("Prices must be non-negative, got p0={0}, p1={1}".format(p0, p1))
        self.i_buy, self.i_sell = int(np.ceil(p0/self.da)), int(np.ceil(p1/self.da))
        if self.i_buy + 2 > self.N_a or self.i_sell + 1 > self.N_a:
            raise ConfigurationError("Prices {0}, {1} exceed the width of the asset grid".format(p0, p1))
        self.income = y + 0*self.aa
        self.cash = self.income + r*self.aa
        self.check_cash()
        self.v0 = self.utility.u(self.cash)/rho

    def flow_utility(self, pol):
        return self.utility.u(pol['c']) + self.kappa*(self.ii == 1)

    def shadow_value(self, v):
        N, ib, isl = self.N_a, self.i_buy, self.i_sell
        v_star = np.zeros(self.space.shape)
        v_star[0, ib:] = v[1, :N-ib]
        #points that cannot afford the good get a linear extrapolation rather than -inf
        slope = (v_star[0, ib+1] - v_star[0, ib])/self.da
        v_star[0, :ib] = v_star[0, ib] + slope*(self.a[:ib] - self.a[ib])
        v_star[1, :N-isl] = v[0, isl:]
        #sale proceeds are capped at amax
        v_star[1, N-isl:] = v[0, N-1]
        return v_star

    def default_strategy(self):
        return self.lcp_strategy()


class RetirementModel(ConsumptionSavings):
    """
    Worker with wage y who can retire irreversibly. A retiree consumes the
    interest r*a forever and enjoys leisure kappa, which gives the fixed value
    of stopping (u(r*a) + kappa)/rho.
    """

    def __init__(self, sigma=2., rho=0.05, r=0.05, y=0.1, kappa=0.25, N_a=500,
                 amin=5., amax=20., **kwargs):
        super().__init__(sigma, rho, r, (amin, amax), N_a, **kwargs)
        self.y, self.kappa = y, kappa
        self.income = y + 0*self.aa
        self.cash = self.income + r*self.aa
        self.check_cash()
        if not np.all(r*self.aa > 0):
            raise ConfigurationError("Retirement income r*a must be positive on the whole grid")
        self.v_star = (self.utility.u(r*self.aa) + kappa)/rho
        self.v0 = self.utility.u(self.cash)/rho

    def shadow_value(self, v):
        return self.v_star

    def default_strategy(self):
        return self.lcp_strategy()


class HuggettModel(ConsumptionSavings):
    """
    Income-fluctuation problem with income z[k] switching to the other state at
    Poisson rate lam[k].
    """

    def __init__(self, sigma=2., rho=0.05, r=0.03, z=(0.1, 0.2), lam=(0.02, 0.03),
                 N_a=500, amin=-0.1, amax=1.5, la_mat=None, **kwargs):
        self.z = np.asarray(z, dtype=float)
        super().__init__(sigma, rho, r, (amin, amax), N_a, n_discrete=len(self.z), **kwargs)
        if la_mat is None:
            if len(self.z) != 2:
                raise ConfigurationError("Pass la_mat for more than two income states")
            la_mat = [[-lam[0], lam[0]], [lam[1], -lam[1]]]
        self.lam, self.la_mat = lam, np.asarray(la_mat, dtype=float)
        if self.la_mat.shape != (len(self.z),)*2 or np.max(np.abs(self.la_mat.sum(axis=1))) > 10**-12:
            raise ConfigurationError("Income switching matrix must be square with rows summing to zero")
        self.income = self.z[self.ii]
        self.cash = self.income + r*self.aa
        self.check_cash()
        self.v0 = self.utility.u(self.cash)/rho


class TwoAssetModel(HJBModel):
    """
    Liquid asset b with a borrowing wedge (rb_neg above rb_pos) and illiquid asset
    a paying ra, taxed at high a so that it does not grow without bound. A fraction
    xi of labor income w*z is deposited automatically into a; any other deposit d
    costs chi0*|d| + chi1*d**2/(2a). Income follows a Poisson process with
    intensity matrix la_mat.

    Arrays have shape (n_z, J, I) with a on axis 1 and b on axis 2.
    """

    def __init__(self, gamma=2., ra=0.05, rb_pos=0.03, rb_neg=0.12, rho=0.06, chi0=0.03,
                 chi1=2., xi=0.1, w=4., z=(.8, 1.3), la_mat=((-1/3, 1/3), (1/3, -1/3)),
                 I=100, bmin=-2., bmax=40., J=50, amin=0., amax=70., tau=10,
                 kernel='vectorized', shadow_gap=10**3, maxit=100, crit=10**-5, Delta=100, **kwargs):
        super().__init__(rho, maxit=maxit, crit=crit, Delta=Delta, **kwargs)
        self.gamma, self.ra, self.rb_pos, self.rb_neg = gamma, ra, rb_pos, rb_neg
        self.chi0, self.chi1, self.xi, self.w, self.tau = chi0, chi1, xi, w, tau
        self.z, self.la_mat = np.asarray(z, dtype=float), np.asarray(la_mat, dtype=float)
        if self.la_mat.shape != (len(self.z),)*2 or np.max(np.abs(self.la_mat.sum(axis=1))) > 10**-12:
            raise ConfigurationError("Income switching matrix must be square with rows summing to zero")
        if kernel not in kernels:
            raise ConfigurationError("Unknown kernel {0!r}, choose from {1}".format(kernel, sorted(kernels)))
        if not chi1 > 0 or not chi0 >= 0:
            raise ConfigurationError("Adjustment cost needs chi0 >= 0 and chi1 > 0")
        #V_a has no boundary value at amin, so withdrawals there only net out when amin = 0
        if amin != 0:
            raise ConfigurationError("Illiquid asset grid must start at zero, got amin={0}".format(amin))
        if not shadow_gap > 0:
            raise ConfigurationError("Shadow gap must be positive, got {0}".format(shadow_gap))
        self.kernel, self.shadow_gap = kernel, shadow_gap
        self.utility = CRRA(gamma)

        self.grid_a, self.grid_b = Grid(amin, amax, J), Grid(bmin, bmax, I)
        self.I, self.J, self.db, self.da = self.grid_b.N, self.grid_a.N, self.grid_b.delta, self.grid_a.delta
        self.amin, self.amax, self.bmin, self.bmax = amin, amax, bmin, bmax
        self.space = StateSpace([self.grid_a, self.grid_b], len(self.z))
        self.ii, self.aa, self.bb = self.space.mesh()
        self.zz = self.z[self.ii]

        self.Rb = rb_pos*(self.bb > 0) + rb_neg*(self.bb < 0)
        with np.errstate(divide='ignore'):
            self.Ra = ra*(1 - (1.33*amax/self.aa)**(1-tau))
        self.cash = (1-xi)*w*self.zz + self.Rb*self.bb
        if not np.all(self.cash > 0):
            raise ConfigurationError("Liquid income (1-xi)*w*z + Rb*b must be positive on the whole grid")
        self.v0 = self.utility.u((1-xi)*w*self.zz + ra*self.aa + rb_neg*self.bb)/rho

    def policy(self, v):
        u_prime = self.utility.u_prime
        #state constraints in b; no boundary condition in a
        VbF, VbB = forward_backward(v, self.db, axis=2, upper=u_prime(self.cash[..., -1]),
                                    lower=u_prime(self.cash[..., 0]))
        VaF, VaB = forward_backward(v, self.da, axis=1)
        c_B, c_F = self.utility.u_prime_inv(VbB), self.utility.u_prime_inv(VbF)
        return kernels[self.kernel](VaB, VaF, VbB, VbF, c_B, c_F, self.aa, self.cash, self.chi0, self.chi1)

    def tran_func(self, pol):
        sc, sd_B, sd_F, Id_B, Id_F = pol['sc'], pol['sd_B'], pol['sd_F'], pol['Id_B'], pol['Id_F']
        tran_func = {}
        tran_func[(0, 0, -1)] = -np.minimum(sc, 0)/self.db - Id_B*sd_B/self.db
        tran_func[(0, 0, 1)] = np.maximum(sc, 0)/self.db + Id_F*sd_F/self.db
        MB = np.minimum(pol['dB'], 0)
        MF = np.maximum(pol['dF'], 0) + self.xi*self.w*self.zz + self.Ra*self.aa
        MB[:, -1, :] = self.xi*self.w*self.zz[:, -1, :] + pol['dB'][:, -1, :] + self.Ra[:, -1, :]*self.amax
        MF[:, -1, :] = 0
        tran_func[(0, -1, 0)] = -MB/self.da
        tran_func[(0, 1, 0)] = MF/self.da
        return tran_func

    def flow_utility(self, pol):
        return self.utility.u(pol['c'])

    def shadow_value(self, v):
        #never binds, so the LCP step reduces to the plain implicit step
        return v - self.shadow_gap

    def outputs(self, pol):
        d, c = pol['d'], pol['c']
        cost = adjustment_cost(d, self.aa, self.chi0, self.chi1)
        return {'d': d, 'm': d + self.xi*self.w*self.zz + self.Ra*self.aa,
                's': self.cash - d - cost - c, 'sc': self.cash - c, 'sd': -d - cost,
                'u': self.flow_utility(pol)}

    def drift(self, pol):
        return self.outputs(pol)['s']

    def default_strategy(self):
        return ExplicitSwitch(gen_tol=self.gen_tol)
