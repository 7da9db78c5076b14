"""
Solutions as pandas tables, one row per grid point.
"""

import numpy as np
import pandas as pd


def action_region(sol):
    """Points where the value function sits on the shadow value, i.e. where the agent stops or switches."""
    if sol.v_star is None:
        return np.zeros(sol.v.shape, dtype=bool)
    return np.isclose(sol.v, sol.v_star, rtol=np.sqrt(np.finfo(float).eps), atol=0)


def results_to_df(sol):
    model = sol.model
    mesh = model.space.mesh()
    names = ['state'] + [name for name, _ in zip(['a', 'b'], mesh[1:])]
    df = pd.DataFrame({name: x.reshape(-1) for name, x in zip(names, mesh)})
    df['c'], df['drift'] = sol.c.reshape(-1), sol.drift.reshape(-1)
    for key, x in sol.extras.items():
        df[key] = np.asarray(x).reshape(-1)
    df['v'] = sol.v.reshape(-1)
    if sol.v_star is not None:
        df['v_star'] = sol.v_star.reshape(-1)
    df['action'] = action_region(sol).reshape(-1)
    df.loc[df['action'], ['c', 'drift']] = np.nan
    return df


def exercise_boundary(sol, state=0, which='min'):
    """Smallest ('min') or largest ('max') asset level in a discrete state where action holds."""
    if which not in ('min', 'max'):
        raise ValueError("which must be 'min' or 'max', got {0!r}".format(which))
    df = results_to_df(sol)
    a = df.loc[(df['state'] == state) & df['action'], 'a']
    if a.empty:
        return np.nan
    return a.min() if which == 'min' else a.max()


def durable_thresholds(sol):
    """Purchase threshold (owners-to-be, d = 0) and sale threshold (owners, d = 1)."""
    return exercise_boundary(sol, 0, 'min'), exercise_boundary(sol, 1, 'max')
