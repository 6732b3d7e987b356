import itertools
from concurrent.futures import ProcessPoolExecutor

import numpy as np
import pandas as pd
from tqdm import tqdm

from config.constants import (TAU, SIGMA, LAMBDA, P0, M0, T_START, T_END, N_TIME_POINTS, ZOOM_T_END,
                              ZOOM_N_POINTS, PARAM_NAMES, PARAM_SYMBOLS, SWEEP_WORKERS, DEGENERATE_MODE,
                              DEGENERACY_RTOL, STEADY_RTOL)
from config.logconf import setup_logger, SweepProgress
from models.derived import fraction_unspliced
from models.exceptions import InvalidParameter
from models.params import check_rate, check_amount
from models.splicemod import solve_kinetics, check_time_grid, TRAJECTORY_COLUMNS
from steadystate.analytic import steady_fraction_unspliced, time_to_steady_state

logger = setup_logger()

_RATE_NAMES = ("tau", "sigma", "lam")


def default_time_grid():
    """Default report grid: N_TIME_POINTS evenly spaced points on [T_START, T_END]."""
    return np.linspace(T_START, T_END, N_TIME_POINTS)


def zoom_time_grid(t_max=ZOOM_T_END, n_points=ZOOM_N_POINTS):
    """
    Fine grid on [0, t_max] resolving the early labelling window.

    Args:
        t_max (float): end of the window, > 0
        n_points (int): number of grid points, >= 2
    """
    if not np.isfinite(t_max) or t_max <= 0:
        raise InvalidParameter(f"t_max must be > 0, got {t_max}")
    if int(n_points) < 2:
        raise InvalidParameter(f"n_points must be >= 2, got {n_points}")
    return np.linspace(0.0, float(t_max), int(n_points))


def format_label(name: str, value: float) -> str:
    """Display label of a grid value, e.g. format_label('sigma', 1.0) -> 'σ = 1'."""
    return f"{PARAM_SYMBOLS.get(name, name)} = {value:g}"


def _check_value(name, value):
    if name in _RATE_NAMES:
        return check_rate(name, value)
    return check_amount(name, value)


def _check_name(name):
    if name not in PARAM_NAMES:
        raise InvalidParameter(f"Unknown parameter '{name}', expected one of {', '.join(PARAM_NAMES)}")


def parameter_grid(value_sets: dict) -> list:
    """
    Cartesian product of parameter value sets.

    Combinations are ordered lexicographically: the first parameter varies slowest,
    values keep the order in which they were given.

    Args:
        value_sets (dict): parameter name -> sequence of candidate values

    Returns:
        list[dict]: one {name: value} dictionary per combination

    Raises:
        InvalidParameter: no value sets, unknown name, empty or duplicated values, invalid value.
    """
    if not value_sets:
        raise InvalidParameter("At least one parameter must be varied")
    names = list(value_sets)
    values = []
    for name in names:
        _check_name(name)
        raw = value_sets[name]
        # unordered sets are sorted so row order stays reproducible
        if isinstance(raw, (set, frozenset)):
            raw = sorted(raw)
        vals = [_check_value(name, v) for v in np.atleast_1d(np.asarray(raw, dtype=object)).tolist()]
        if not vals:
            raise InvalidParameter(f"Value set for '{name}' is empty")
        if len(set(vals)) != len(vals):
            raise InvalidParameter(f"Value set for '{name}' contains duplicates: {vals}")
        values.append(vals)
    return [dict(zip(names, combo)) for combo in itertools.product(*values)]


def _solve_job(job):
    params, t, degenerate, rtol = job
    return solve_kinetics(t=t, degenerate=degenerate, rtol=rtol, **params)


def sweep(value_sets: dict, fixed: dict = None, time_grid_factory=default_time_grid,
          label_param: str = None, max_workers: int = SWEEP_WORKERS, degenerate: str = DEGENERATE_MODE,
          rtol: float = DEGENERACY_RTOL):
    """
    Evaluate the kinetic model once for every combination of the varied parameters.

    Parameters not varied or fixed take the configured defaults (TAU, SIGMA, LAMBDA, P0, M0).

    Args:
        value_sets (dict): varied parameter name -> candidate values
        fixed (dict): parameter name -> value held constant across the sweep
        time_grid_factory (callable): returns the time grid shared by all combinations
        label_param (str): varied parameter used for the display label; defaults to the last one
        max_workers (int): > 1 solves combinations in a process pool
        degenerate (str): passed to solve_kinetics
        rtol (float): passed to solve_kinetics

    Returns:
        pd.DataFrame: one column per varied parameter (exact values), `label`, then time, P, M.
            Rows are ordered by combination (see parameter_grid), then by time.
            `attrs['fixed']` holds the parameters shared by every row.
    """
    combos = parameter_grid(value_sets)
    varying = list(value_sets)

    fixed = dict(fixed or {})
    for name in fixed:
        _check_name(name)
    both = sorted(set(fixed) & set(varying))
    if both:
        raise InvalidParameter(f"Parameters cannot be both varied and fixed: {', '.join(both)}")

    base = {"tau": TAU, "sigma": SIGMA, "lam": LAMBDA, "P0": P0, "M0": M0}
    base.update({name: _check_value(name, value) for name, value in fixed.items()})

    if label_param is None:
        label_param = varying[-1]
    if label_param not in varying:
        raise InvalidParameter(f"label_param '{label_param}' is not a varied parameter")

    t = check_time_grid(time_grid_factory())
    jobs = [({**base, **combo}, t, degenerate, rtol) for combo in combos]

    logger.info(f"Sweep over {', '.join(varying)}: {len(combos)} combinations x {t.size} time points")

    progress = dict(total=len(jobs), desc="Sweep", file=SweepProgress(logger), disable=len(jobs) < 10)
    if max_workers > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            trajectories = list(tqdm(executor.map(_solve_job, jobs), **progress))
    else:
        trajectories = [_solve_job(job) for job in tqdm(jobs, **progress)]

    frames = []
    for combo, traj in zip(combos, trajectories):
        for name in varying:
            traj[name] = combo[name]
        traj["label"] = format_label(label_param, combo[label_param])
        frames.append(traj[varying + ["label"] + TRAJECTORY_COLUMNS])

    result = pd.concat(frames, ignore_index=True)
    result.attrs["fixed"] = {k: v for k, v in base.items() if k not in varying}
    return result


def combinations_of(sweep_df: pd.DataFrame) -> list:
    """Varied parameter columns of a sweep table."""
    return [c for c in sweep_df.columns if c in PARAM_NAMES]


def summarize_sweep(sweep_df: pd.DataFrame, rtol: float = STEADY_RTOL) -> pd.DataFrame:
    """
    One row per combination: final P, M, fraction unspliced, its steady-state limit
    and the first time the trajectory settles within `rtol` of steady state.
    """
    varying = combinations_of(sweep_df)
    fixed = sweep_df.attrs.get("fixed", {})
    rows = []
    for key, group in sweep_df.groupby(varying, sort=False):
        key = key if isinstance(key, tuple) else (key,)
        params = {**fixed, **dict(zip(varying, key))}
        last = group.iloc[-1]
        rows.append({
            **dict(zip(varying, key)),
            "label": last["label"],
            "P_end": last["P"],
            "M_end": last["M"],
            "fraction_unspliced_end": fraction_unspliced(last["P"], last["M"]),
            "fraction_unspliced_steady": steady_fraction_unspliced(params["sigma"], params["lam"]),
            "time_to_steady_state": time_to_steady_state(group, params["tau"], params["sigma"],
                                                         params["lam"], rtol),
        })
    return pd.DataFrame(rows)
