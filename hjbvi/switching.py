"""
Upwind switch for the two-asset model with a kinked adjustment cost.

Arrays have shape (n_z, N_a, N_b): the illiquid asset a runs along axis 1 and
the liquid asset b along axis 2. Both kernels take the one-sided derivatives of
the value function, the consumption they imply and cash = (1-xi)*w*z + Rb*b,
and return the same dictionary:

    c, sc        consumption and its contribution to the drift of b
    d            deposit flow into the illiquid account
    dB, dF       adjustment flows upwinded in the a direction
    sd_B, sd_F   drift of b from deposits, under backward/forward Vb
    Id_B, Id_F   which Vb difference is used for deposits

'vectorized' works on whole arrays. 'cells' visits one grid point at a time and
states each boundary rule per point; it is compiled with numba.
"""

import numpy as np
from numba import njit

tol = 10**-12


def adjustment_cost(d, a, chi0, chi1):
    return chi0*np.abs(d) + chi1*d**2/2/np.maximum(a, 10**-5)


def adjustment_foc(pa, pb, a, chi0, chi1):
    x = pa/pb
    return np.minimum(x - 1 + chi0, 0)*a/chi1 + np.maximum(x - 1 - chi0, 0)*a/chi1


def adjustment_vectorized(VaB, VaF, VbB, VbF, c_B, c_F, aa, cash, chi0, chi1):
    foc = lambda pa, pb: adjustment_foc(pa, pb, aa, chi0, chi1)
    cost = lambda d: adjustment_cost(d, aa, chi0, chi1)
    dBB, dFB, dBF, dFF = foc(VaB, VbB), foc(VaB, VbF), foc(VaF, VbB), foc(VaF, VbF)

    d_B = (dBF > 0)*dBF + (dBB < 0)*dBB
    #d >= 0 at amin (no VaB there), d <= 0 at amax (no VaF there)
    d_B[:, 0, :] = (dBF[:, 0, :] > tol)*dBF[:, 0, :]
    d_B[:, -1, :] = (dBB[:, -1, :] < -tol)*dBB[:, -1, :]
    d_B[:, 0, 0] = np.maximum(d_B[:, 0, 0], 0)
    d_F = (dFF > 0)*dFF + (dFB < 0)*dFB
    d_F[:, 0, :] = (dFF[:, 0, :] > tol)*dFF[:, 0, :]
    d_F[:, -1, :] = (dFB[:, -1, :] < -tol)*dFB[:, -1, :]

    sc_B, sc_F = cash - c_B, cash - c_F
    sd_B, sd_F = -d_B - cost(d_B), -d_F - cost(d_F)
    sd_F[..., -1] = np.minimum(sd_F[..., -1], 0)

    Ic_B = sc_B < -tol
    Ic_F = (sc_F > tol) & ~Ic_B
    Ic_0 = ~Ic_F & ~Ic_B

    Id_F = sd_F > tol
    Id_B = (sd_B < -tol) & ~Id_F
    Id_B[..., 0] = False
    Id_F[..., -1] = False
    #VbF at bmax would pick up the artificial state constraint
    Id_B[..., -1] = True

    return {'c': c_F*Ic_F + c_B*Ic_B + cash*Ic_0,
            'sc': sc_F*Ic_F + sc_B*Ic_B,
            'd': Id_B*d_B + Id_F*d_F,
            'dB': Id_B*dBB + Id_F*dFB,
            'dF': Id_B*dBF + Id_F*dFF,
            'sd_B': sd_B, 'sd_F': sd_F, 'Id_B': Id_B, 'Id_F': Id_F}


@njit
def _cost(d, a, chi0, chi1):
    return chi0*abs(d) + chi1*d**2/2/max(a, 1e-5)


@njit
def _foc(pa, pb, a, chi0, chi1):
    x = pa/pb
    return min(x - 1 + chi0, 0.)*a/chi1 + max(x - 1 - chi0, 0.)*a/chi1


@njit
def _get_d(VaB, VaF, Vb, a, chi0, chi1, at_amin, at_amax, at_corner):
    dxB = _foc(VaB, Vb, a, chi0, chi1)
    dxF = _foc(VaF, Vb, a, chi0, chi1)
    d = 0.
    if dxF > 0:
        d += dxF
    if dxB < 0:
        d += dxB
    if at_amin:
        d = dxF if dxF > 1e-12 else 0.
    if at_amax:
        d = dxB if dxB < -1e-12 else 0.
    if at_corner:
        d = max(d, 0.)
    return d, dxB, dxF, -d - _cost(d, a, chi0, chi1)


@njit
def _cells(VaB, VaF, VbB, VbF, c_B, c_F, aa, cash, chi0, chi1):
    n, J, I = VaB.shape
    c, sc, d = np.zeros(VaB.shape), np.zeros(VaB.shape), np.zeros(VaB.shape)
    dB, dF = np.zeros(VaB.shape), np.zeros(VaB.shape)
    sd_B, sd_F = np.zeros(VaB.shape), np.zeros(VaB.shape)
    Id_B, Id_F = np.zeros(VaB.shape, dtype=np.bool_), np.zeros(VaB.shape, dtype=np.bool_)
    for k in range(n):
        for i in range(J):
            for j in range(I):
                a = aa[k, i, j]
                at_amin, at_amax = i == 0, i == J - 1
                at_corner = at_amin and j == 0
                dk_B, dBB, dBF, sdB = _get_d(VaB[k, i, j], VaF[k, i, j], VbB[k, i, j], a, chi0, chi1,
                                             at_amin, at_amax, at_corner)
                dk_F, dFB, dFF, sdF = _get_d(VaB[k, i, j], VaF[k, i, j], VbF[k, i, j], a, chi0, chi1,
                                             at_amin, at_amax, at_corner)
                if j == I - 1:
                    sdF = min(sdF, 0.)
                sd_B[k, i, j] = sdB
                sd_F[k, i, j] = sdF
                if j == I - 1 or (sdF <= 1e-12 and sdB < -1e-12 and j > 0):
                    Id_B[k, i, j] = True
                    dB[k, i, j] = dBB
                    dF[k, i, j] = dBF
                    d[k, i, j] = dk_B
                elif sdF > 1e-12:
                    Id_F[k, i, j] = True
                    dB[k, i, j] = dFB
                    dF[k, i, j] = dFF
                    d[k, i, j] = dk_F

                scF, scB = cash[k, i, j] - c_F[k, i, j], cash[k, i, j] - c_B[k, i, j]
                if scF > 1e-12:
                    c[k, i, j] = c_F[k, i, j]
                    sc[k, i, j] = scF
                elif scB < -1e-12:
                    c[k, i, j] = c_B[k, i, j]
                    sc[k, i, j] = scB
                else:
                    c[k, i, j] = cash[k, i, j]
    return c, sc, d, dB, dF, sd_B, sd_F, Id_B, Id_F


def adjustment_cells(VaB, VaF, VbB, VbF, c_B, c_F, aa, cash, chi0, chi1):
    args = [np.ascontiguousarray(x, dtype=float) for x in (VaB, VaF, VbB, VbF, c_B, c_F, aa, cash)]
    out = _cells(*args, float(chi0), float(chi1))
    return dict(zip(['c', 'sc', 'd', 'dB', 'dF', 'sd_B', 'sd_F', 'Id_B', 'Id_F'], out))


kernels = {'vectorized': adjustment_vectorized, 'cells': adjustment_cells}
