"""
Species thermodynamic kernels.

Numba-accelerated evaluation of dimensionless species properties for the
two supported thermodynamic models:

- NASA 7-term polynomials (Cp/R, H/RT, S/R)
- Rigid-rotor / harmonic-oscillator (RRHO) partition functions with
  electronic levels, evaluated in thermal nonequilibrium where each
  energy mode has its own temperature

All kernels take raw numpy arrays to keep Numba nopython compatibility.
Record unpacking and temperature bookkeeping live in thermo_db.py.

References:
    - McBride, B.J., Zehe, M.J., & Gordon, S. (2002). "NASA Glenn Coefficients
      for Calculating Thermodynamic Properties of Individual Species"
      NASA/TP-2002-211556.
    - Vincenti, W.G. & Kruger, C.H. (1965). "Introduction to Physical Gas
      Dynamics", Ch. IV.
    - Scoggins, J.B. & Magin, T.E. (2014). "Development of Mutation++:
      Multicomponent Thermodynamic and Transport Properties for Ionized
      Plasmas written in C++", AIAA 2014-2966.
"""

import numpy as np
from numba import jit
from numpy.typing import NDArray

from .constants import HP, KB, NA, STANDARD_P, TWO_PI


# =============================================================================
# NASA 7-term Polynomials
# =============================================================================

@jit(nopython=True, cache=True)
def nasa7_cp_over_r(
    T: NDArray[np.float64],
    coeffs_low: NDArray[np.float64],
    coeffs_high: NDArray[np.float64],
    t_mid: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Cp/R = a1 + a2*T + a3*T^2 + a4*T^3 + a5*T^4 for every species.

    Args:
        T: Per-species evaluation temperature (K)
        coeffs_low: (n_species, 7) low-T coefficients
        coeffs_high: (n_species, 7) high-T coefficients
        t_mid: Per-species switch temperature (K)
    """
    n = T.shape[0]
    cp = np.empty(n, dtype=np.float64)
    for j in range(n):
        t = T[j]
        c = coeffs_high[j] if t_mid[j] <= t else coeffs_low[j]
        cp[j] = c[0] + c[1] * t + c[2] * t**2 + c[3] * t**3 + c[4] * t**4
    return cp


@jit(nopython=True, cache=True)
def nasa7_h_over_rt(
    T: NDArray[np.float64],
    coeffs_low: NDArray[np.float64],
    coeffs_high: NDArray[np.float64],
    t_mid: NDArray[np.float64],
) -> NDArray[np.float64]:
    """H/RT = a1 + a2/2*T + a3/3*T^2 + a4/4*T^3 + a5/5*T^4 + a6/T."""
    n = T.shape[0]
    h = np.empty(n, dtype=np.float64)
    for j in range(n):
        t = T[j]
        c = coeffs_high[j] if t_mid[j] <= t else coeffs_low[j]
        h[j] = (
            c[0]
            + c[1] / 2.0 * t
            + c[2] / 3.0 * t**2
            + c[3] / 4.0 * t**3
            + c[4] / 5.0 * t**4
            + c[5] / t
        )
    return h


@jit(nopython=True, cache=True)
def nasa7_s_over_r(
    T: NDArray[np.float64],
    P: float,
    coeffs_low: NDArray[np.float64],
    coeffs_high: NDArray[np.float64],
    t_mid: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    S/R of the pure species at pressure P.

    S°/R = a1*ln(T) + a2*T + a3/2*T^2 + a4/3*T^3 + a5/4*T^4 + a7
    S/R  = S°/R - ln(P/P°)
    """
    n = T.shape[0]
    s = np.empty(n, dtype=np.float64)
    ln_p = np.log(P / STANDARD_P)
    for j in range(n):
        t = T[j]
        c = coeffs_high[j] if t_mid[j] <= t else coeffs_low[j]
        s[j] = (
            c[0] * np.log(t)
            + c[1] * t
            + c[2] / 2.0 * t**2
            + c[3] / 3.0 * t**3
            + c[4] / 4.0 * t**4
            + c[6]
            - ln_p
        )
    return s


# =============================================================================
# RRHO Energy Modes
# =============================================================================

@jit(nopython=True, cache=True)
def translational_entropy(T: float, P: float, mw: float) -> float:
    """
    Sackur-Tetrode translational entropy S/R.

    S/R = 5/2 + ln[(2 pi m kB T / h^2)^(3/2) kB T / P]

    Args:
        T: Translational temperature (K)
        P: Pressure (Pa)
        mw: Molar mass (kg/mol)
    """
    m = mw / NA
    return 2.5 + np.log((TWO_PI * m * KB * T / (HP * HP)) ** 1.5 * KB * T / P)


@jit(nopython=True, cache=True)
def vibrational_modes(
    T: float,
    theta: NDArray[np.float64],
    start: int,
    stop: int,
) -> tuple[float, float, float]:
    """
    Harmonic-oscillator energy (K), Cp/R and S/R summed over modes.

    Returns:
        (E/R, Cp/R, S/R) for the modes theta[start:stop]
    """
    e = 0.0
    cp = 0.0
    s = 0.0
    for k in range(start, stop):
        x = theta[k] / T
        if x > 700.0:
            continue
        ex = np.exp(x)
        em1 = ex - 1.0
        e += theta[k] / em1
        cp += x * x * ex / (em1 * em1)
        s += x / em1 - np.log(1.0 - 1.0 / ex)
    return e, cp, s


@jit(nopython=True, cache=True)
def electronic_modes(
    T: float,
    degeneracy: NDArray[np.float64],
    theta: NDArray[np.float64],
    start: int,
    stop: int,
) -> tuple[float, float, float]:
    """
    Electronic energy (K), Cp/R and S/R from discrete levels.

    Q = sum g_k exp(-theta_k/T)
    E = sum g_k theta_k exp(-theta_k/T) / Q
    Cp/R = (<theta^2> - <theta>^2) / T^2
    S/R = ln Q + E/T
    """
    q = 0.0
    q1 = 0.0
    q2 = 0.0
    for k in range(start, stop):
        w = degeneracy[k] * np.exp(-theta[k] / T)
        q += w
        q1 += w * theta[k]
        q2 += w * theta[k] * theta[k]
    if q <= 0.0:
        return 0.0, 0.0, 0.0
    e = q1 / q
    cp = (q2 / q - e * e) / (T * T)
    s = np.log(q) + e / T
    return e, cp, s


@jit(nopython=True, cache=True)
def rrho_properties(
    Th: float,
    Te: float,
    Tr: float,
    Tv: float,
    Tel: float,
    P: float,
    mw: NDArray[np.float64],
    is_electron: NDArray[np.bool_],
    linearity: NDArray[np.int64],
    symmetry: NDArray[np.float64],
    theta_rot: NDArray[np.float64],
    vib_theta: NDArray[np.float64],
    vib_offsets: NDArray[np.int64],
    el_g: NDArray[np.float64],
    el_theta: NDArray[np.float64],
    el_offsets: NDArray[np.int64],
    hf0: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Evaluate all RRHO species properties at once.

    Enthalpies are returned per mode as energies in kelvin (H/R); the
    caller normalizes them by the heavy-particle temperature.

    Returns:
        cp: (n_species,) Cp/R
        h: (6, n_species) H/R rows [total, trans, rot, vib, elec, formation]
        s: (n_species,) S/R at pressure P
    """
    n = mw.shape[0]
    cp = np.zeros(n, dtype=np.float64)
    h = np.zeros((6, n), dtype=np.float64)
    s = np.zeros(n, dtype=np.float64)

    for j in range(n):
        t_tr = Te if is_electron[j] else Th

        # Translation
        h[1, j] = 2.5 * t_tr
        cp[j] = 2.5
        s[j] = translational_entropy(t_tr, P, mw[j])

        # Rotation
        if linearity[j] == 1:
            h[2, j] = Tr
            cp[j] += 1.0
            s[j] += 1.0 + np.log(Tr / (symmetry[j] * theta_rot[j, 0]))
        elif linearity[j] == 2:
            h[2, j] = 1.5 * Tr
            cp[j] += 1.5
            prod = theta_rot[j, 0] * theta_rot[j, 1] * theta_rot[j, 2]
            s[j] += 1.5 + np.log(np.sqrt(np.pi * Tr**3 / prod) / symmetry[j])

        # Vibration
        ev, cpv, sv = vibrational_modes(Tv, vib_theta, vib_offsets[j], vib_offsets[j + 1])
        h[3, j] = ev
        cp[j] += cpv
        s[j] += sv

        # Electronic excitation
        ee, cpe, se = electronic_modes(Tel, el_g, el_theta, el_offsets[j], el_offsets[j + 1])
        h[4, j] = ee
        cp[j] += cpe
        s[j] += se

        h[5, j] = hf0[j]
        h[0, j] = h[1, j] + h[2, j] + h[3, j] + h[4, j] + h[5, j]

    return cp, h, s
