"""
Irreversible retirement decision.

Workers retire once wealth is high enough that interest income plus the value of
leisure beats continued work. Reports the retirement threshold for a range of
leisure values.
"""

import numpy as np
import pandas as pd
import time
import hjbvi

sigma, rho, r, y = 2., 0.05, 0.05, 0.1
N_a, amin, amax = 500, 5., 20.
kappa_set = [0.1, 0.15, 0.2, 0.25, 0.3]

data = []
for kappa in kappa_set:
    X = hjbvi.RetirementModel(sigma=sigma, rho=rho, r=r, y=y, kappa=kappa, N_a=N_a, amin=amin, amax=amax)
    tic = time.time()
    sol = hjbvi.solve_hjbvi(X)
    toc = time.time()
    data.append({'kappa': kappa, 'Time': toc-tic, 'Iterations': sol.it,
    'Threshold': hjbvi.exercise_boundary(sol, 0, 'min')})

df = pd.DataFrame(data).set_index('kappa')
print(df.round(decimals=4))

X = hjbvi.RetirementModel()
df_sol = hjbvi.results_to_df(hjbvi.solve_hjbvi(X))
print("Share of grid in retirement region:", np.mean(df_sol['action']))
