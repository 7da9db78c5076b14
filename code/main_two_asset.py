"""
Two-asset problem with kinked adjustment costs.

Solves with the vectorized and per-cell switching kernels and with the LCP step
against a non-binding shadow value, and compares the three.
"""

import numpy as np
import pandas as pd
import time
import hjbvi

gamma, ra, rb_pos, rb_neg, rho = 2., 0.05, 0.03, 0.12, 0.06
chi0, chi1, xi, w = 0.03, 2., 0.1, 4.

if ra - 1/chi1 > 0:
    print("Warning: ra - 1/chi1 > 0")

"""
Kernels and strategies to compare. The first run of the per-cell kernel includes
compilation time.
"""

runs = {'vectorized': ('vectorized', None), 'cells': ('cells', None), 'LCP': ('vectorized', 'lcp')}
V, data = {}, []
for name, (kernel, strategy) in runs.items():
    X = hjbvi.TwoAssetModel(gamma=gamma, ra=ra, rb_pos=rb_pos, rb_neg=rb_neg, rho=rho,
    chi0=chi0, chi1=chi1, xi=xi, w=w, kernel=kernel)
    tic = time.time()
    sol = hjbvi.solve_hjbvi(X, strategy=X.lcp_strategy() if strategy == 'lcp' else None)
    toc = time.time()
    V[name] = sol
    data.append({'Method': name, 'Time': toc-tic, 'Iterations': sol.it, 'Difference': sol.dist[-1]})

print(pd.DataFrame(data).set_index('Method').round(decimals=6))
for name in ['cells', 'LCP']:
    print("Max absolute difference with vectorized,", name, ":", np.max(np.abs(V[name].v - V['vectorized'].v)))

df = hjbvi.results_to_df(V['vectorized'])
print(df.groupby('state')[['c', 'd', 's', 'm']].mean())
