"""
Durable good (car) purchase problem as an optimal-stopping problem.

Solves with both LCP routines over a set of grid sizes and reports timings,
iterations and the purchase and sale thresholds.
"""

import numpy as np
import pandas as pd
import time
import hjbvi

sigma, rho, r, y = 2., 0.05, 0.045, 0.1
kappa, p0, p1 = 0.25, 0.2, 0.1
amin, amax = -0.02, 3.

"""
Grid sizes. Prices are rounded up to whole grid steps, so thresholds move with N_a
by up to one step.
"""

N_set = [250, 500, 1000]
methods = ['howard', 'psor']

data = []
for N_a in N_set:
    X = hjbvi.DurableModel(sigma=sigma, rho=rho, r=r, y=y, kappa=kappa, p0=p0, p1=p1,
    N_a=N_a, amin=amin, amax=amax)
    for method in methods:
        tic = time.time()
        sol = hjbvi.solve_hjbvi(X, strategy=X.lcp_strategy() if method == 'howard' else
        hjbvi.LCPObstacle(method='psor', tol=X.lcp_tol, maxit=10**5))
        toc = time.time()
        buy, sell = hjbvi.durable_thresholds(sol)
        data.append({'N_a': N_a, 'LCP': method, 'Time': toc-tic, 'Iterations': sol.it,
        'Purchase': buy, 'Sale': sell})
        print("Grid size", N_a, "with", method, "completed:", sol.it, "iterations")

df = pd.DataFrame(data).set_index(['N_a', 'LCP'])
print(df.round(decimals=4))

"""
Value functions and policies at the default grid.
"""

sol = hjbvi.solve_hjbvi(hjbvi.DurableModel())
df_sol = hjbvi.results_to_df(sol)
print(df_sol.groupby(['state', 'action'])[['a', 'v']].describe())
print("Maximum of v - v_star:", np.max(sol.v - sol.v_star), "minimum:", np.min(sol.v - sol.v_star))
