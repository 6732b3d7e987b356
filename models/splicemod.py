import math

import numpy as np
import pandas as pd
from numba import njit

from config.constants import TAU, SIGMA, LAMBDA, P0, M0, TIME_GRID, DEGENERACY_RTOL, DEGENERATE_MODE
from config.logconf import setup_logger
from models.exceptions import InvalidParameter, DegenerateRates
from models.params import check_rate, check_amount, RateParameters, InitialState

logger = setup_logger()

TRAJECTORY_COLUMNS = ["time", "P", "M"]
DEGENERATE_MODES = ("limit", "raise")


@njit(cache=True)
def kinetics_core(t, tau, sigma, lam, P0, M0):
    """
    Closed-form solution of

        dP/dt = tau - sigma * P
        dM/dt = sigma * P - lam * M

    The coupling term (exp(-sigma t) - exp(-lam t)) / (lam - sigma) is evaluated as
    exp(-k t) * -expm1(-d t) / d with k = min(sigma, lam) and d = |lam - sigma|.
    It tends to t * exp(-sigma t) as d -> 0, so the same loop covers lam == sigma.

    Args:
        t: 1D float64 array of time points
        tau: transcription rate
        sigma: splicing rate
        lam: decay rate
        P0: pre-mRNA at t = 0
        M0: mRNA at t = 0

    Returns:
        P, M: arrays with the same length as t
    """
    n = t.shape[0]
    P = np.empty(n)
    M = np.empty(n)

    # Steady states
    Ps = tau / sigma
    Ms = tau / lam

    k = min(sigma, lam)
    d = abs(lam - sigma)
    for i in range(n):
        if d == 0.0:
            g = t[i] * math.exp(-k * t[i])
        else:
            g = math.exp(-k * t[i]) * -math.expm1(-d * t[i]) / d
        P[i] = (P0 - Ps) * math.exp(-sigma * t[i]) + Ps
        M[i] = (M0 - Ms) * math.exp(-lam * t[i]) + sigma * (P0 - Ps) * g + Ms

    return P, M


def check_time_grid(t) -> np.ndarray:
    """
    Validate a time grid and return it as a contiguous float64 array.

    A scalar is treated as a one-point grid. An empty grid is valid.

    Raises:
        InvalidParameter: grid is not 1D, or holds negative, non-finite or
            non strictly increasing values.
    """
    try:
        arr = np.atleast_1d(np.asarray(t, dtype=np.float64))
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"time grid must be numeric: {e}") from e
    if arr.ndim != 1:
        raise InvalidParameter(f"time grid must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        return np.ascontiguousarray(arr)
    if not np.all(np.isfinite(arr)):
        raise InvalidParameter("time grid contains NaN/inf values")
    if np.any(arr < 0):
        raise InvalidParameter(f"time grid must be non-negative, min is {arr.min()}")
    if np.any(np.diff(arr) <= 0):
        raise InvalidParameter("time grid must be strictly increasing")
    return np.ascontiguousarray(arr)


def is_degenerate(sigma: float, lam: float, rtol: float = DEGENERACY_RTOL) -> bool:
    """True when splicing and decay rates coincide within `rtol` (relative to the larger one)."""
    return abs(lam - sigma) <= rtol * max(abs(lam), abs(sigma))


def solve_kinetics(tau=TAU, sigma=SIGMA, lam=LAMBDA, P0=P0, M0=M0, t=None,
                   degenerate=DEGENERATE_MODE, rtol=DEGENERACY_RTOL):
    """
    Evaluate the analytical pre-mRNA / mRNA time course on a time grid.

    Args:
        tau (float): transcription rate, > 0
        sigma (float): splicing rate, > 0
        lam (float): mRNA decay rate, > 0
        P0 (float): pre-mRNA at t = 0, >= 0
        M0 (float): mRNA at t = 0, >= 0
        t (array-like): strictly increasing, non-negative time points. Defaults to TIME_GRID.
        degenerate (str): 'limit' to evaluate the solution when lam ~ sigma (it stays finite there),
            'raise' to raise DegenerateRates instead.
        rtol (float): relative tolerance deciding when lam and sigma are considered equal.

    Returns:
        pd.DataFrame: columns time, P, M; one row per time point.

    Raises:
        InvalidParameter: invalid rates, initial amounts or time grid.
        DegenerateRates: lam ~ sigma and degenerate == 'raise'.
    """
    tau = check_rate("tau", tau)
    sigma = check_rate("sigma", sigma)
    lam = check_rate("lam", lam)
    P0 = check_amount("P0", P0)
    M0 = check_amount("M0", M0)
    if degenerate not in DEGENERATE_MODES:
        raise InvalidParameter(f"degenerate must be one of {DEGENERATE_MODES}, got {degenerate!r}")
    t = check_time_grid(TIME_GRID if t is None else t)

    singular = is_degenerate(sigma, lam, rtol)
    if singular and degenerate == "raise":
        raise DegenerateRates(
            f"splicing rate sigma={sigma} and decay rate lam={lam} coincide within rtol={rtol}"
        )

    logger.debug(f"solve_kinetics tau={tau} sigma={sigma} lam={lam} P0={P0} M0={M0} "
                 f"n_t={t.size} degenerate={singular}")

    if t.size == 0:
        return pd.DataFrame({col: np.empty(0) for col in TRAJECTORY_COLUMNS})

    P, M = kinetics_core(t, tau, sigma, lam, P0, M0)
    return pd.DataFrame({"time": t, "P": P, "M": M}, columns=TRAJECTORY_COLUMNS)


def solve_state(params: RateParameters, init: InitialState = None, t=None, **kwargs):
    """
    Same as solve_kinetics, taking the parameter dataclasses.
    """
    init = InitialState() if init is None else init
    return solve_kinetics(params.tau, params.sigma, params.lam, init.P0, init.M0, t=t, **kwargs)
