import numpy as np
import pandas as pd

from config.constants import STEADY_RTOL
from models.params import check_rate


def steady_state(tau: float, sigma: float, lam: float) -> tuple:
    """
    Long-time limits of the model, reached from any initial state.

    Returns:
        (Ps, Ms) = (tau / sigma, tau / lam)
    """
    tau = check_rate("tau", tau)
    sigma = check_rate("sigma", sigma)
    lam = check_rate("lam", lam)
    return tau / sigma, tau / lam


def steady_fraction_unspliced(sigma: float, lam: float) -> float:
    """Limit of P / (P + M): lam / (sigma + lam). Independent of tau."""
    sigma = check_rate("sigma", sigma)
    lam = check_rate("lam", lam)
    return lam / (sigma + lam)


def relaxation_times(sigma: float, lam: float) -> tuple:
    """Time constants of the two exponential modes, (1 / sigma, 1 / lam)."""
    return 1.0 / check_rate("sigma", sigma), 1.0 / check_rate("lam", lam)


def time_to_steady_state(df: pd.DataFrame, tau: float, sigma: float, lam: float,
                         rtol: float = STEADY_RTOL) -> float:
    """
    First time on the grid from which P and M both stay within `rtol` of steady state.

    Args:
        df: trajectory with columns time, P, M
        tau, sigma, lam: rates the trajectory was computed with
        rtol: relative tolerance

    Returns:
        float: the time, or NaN if the grid ends before steady state is reached.
    """
    Ps, Ms = steady_state(tau, sigma, lam)
    close = (np.abs(df["P"].to_numpy() - Ps) <= rtol * Ps) & (np.abs(df["M"].to_numpy() - Ms) <= rtol * Ms)
    if close.size == 0 or not close[-1]:
        return float("nan")
    # last index where the trajectory was still away from steady state
    away = np.flatnonzero(~close)
    first = 0 if away.size == 0 else away[-1] + 1
    return float(df["time"].iloc[first])
