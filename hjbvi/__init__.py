from hjbvi.classes import DurableModel, HJBModel, HuggettModel, RetirementModel, TwoAssetModel
from hjbvi.errors import (ComplementarityError, ConfigurationError, HJBError, NonConvergenceError,
                          NumericalInstabilityError)
from hjbvi.grids import Grid, StateSpace, make_grid
from hjbvi.kfe import equilibrium_rate, excess_demand, stationary_distribution
from hjbvi.obstacles import ExplicitSwitch, ImplicitStep, LCPObstacle, implicit_step
from hjbvi.solver import (IterationState, Solution, Status, disable_logging, enable_logging, quiet,
                          set_verbosity_level, solve_hjbvi, step, verbose, warnings)
from hjbvi.tables import durable_thresholds, exercise_boundary, results_to_df

__version__ = "0.1.0"
