import numpy as np
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors
from pathlib import Path

from config_loader import load

########################################################################################################################
# GLOBAL CONSTANTS
# The following constants are used throughout the project.
# They define the default rates of the transcription -> splicing -> decay model,
# the parameter values swept in the report, the time grids and the output locations.
# Every value can be overridden from the [kinetics], [sweep], [time] and [paths]
# sections of config.toml (see config_loader.py) or from the command line (see config/config.py).
########################################################################################################################
_kinetics = load("kinetics")
_sweep = load("sweep")
_time = load("time")
_paths = load("paths")

# Default rate constants (per unit time).
# TAU: transcription rate, pre-mRNA produced per unit time.
# SIGMA: splicing rate, fraction of pre-mRNA converted to mRNA per unit time.
# LAMBDA: decay rate, fraction of mRNA degraded per unit time.
TAU = float(_kinetics.get("tau", 1.0))
SIGMA = float(_kinetics.get("sigma", 1.0))
LAMBDA = float(_kinetics.get("lam", 0.1))
# Initial pre-mRNA and mRNA amounts.
# P0 = M0 = 0 mimics a pulse (4tU) labelling experiment: no labelled RNA at t = 0.
P0 = float(_kinetics.get("P0", 0.0))
M0 = float(_kinetics.get("M0", 0.0))

# Parameter values swept in the report.
# Each sweep evaluates the closed-form solution once per combination.
TAU_VALUES = tuple(float(v) for v in _sweep.get("tau_values", (0.5, 1.0, 2.0)))
SIGMA_VALUES = tuple(float(v) for v in _sweep.get("sigma_values", (0.5, 1.0, 2.0)))
LAMBDA_VALUES = tuple(float(v) for v in _sweep.get("lam_values", (0.05, 0.1, 0.2)))
# Number of worker processes used by sweep(); 1 runs serially.
SWEEP_WORKERS = int(_sweep.get("workers", 1))

# TIME GRID:
# Default grid is 2001 evenly spaced points on [0, 20].
# The zoom grid resolves the early labelling window where fraction unspliced changes fastest.
T_START = float(_time.get("t_start", 0.0))
T_END = float(_time.get("t_end", 20.0))
N_TIME_POINTS = int(_time.get("n_points", 2001))
TIME_GRID = np.linspace(T_START, T_END, N_TIME_POINTS)
ZOOM_T_END = float(_time.get("zoom_t_end", 2.0))
ZOOM_N_POINTS = int(_time.get("zoom_n_points", 2001))

# DEGENERATE RATES:
# When |lam - sigma| <= DEGENERACY_RTOL * max(lam, sigma) the two exponential
# modes coincide and the textbook formula divides by ~0; the solver uses a form that stays exact there.
# DEGENERATE_MODE:
# 'limit' : evaluate it, tending to the t * exp(-sigma * t) solution at lam == sigma.
# 'raise' : raise DegenerateRates.
DEGENERACY_RTOL = float(_kinetics.get("degeneracy_rtol", 1e-9))
DEGENERATE_MODE = str(_kinetics.get("degenerate", "limit"))
# Relative tolerance used when reporting the time needed to reach steady state.
STEADY_RTOL = float(_kinetics.get("steady_rtol", 1e-3))

# Symbols used in plot labels and sweep labels.
PARAM_SYMBOLS = {
    "tau": "τ",
    "sigma": "σ",
    "lam": "λ",
    "P0": "P0",
    "M0": "M0",
}
# Parameters that may be varied or fixed in a sweep, in solver argument order.
PARAM_NAMES = ("tau", "sigma", "lam", "P0", "M0")

# Top-Level Directory Configuration:
# - PROJECT_ROOT: The root directory of the project, determined by moving one level up from the current file.
# - OUT_DIR: Directory to store all figures, tables and the HTML report.
# - RESULTS_WORKBOOK: File name of the Excel workbook written into the output directory.
# - LOG_DIR: Directory to store log files.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
OUT_DIR = PROJECT_ROOT / _paths.get("results_dir", "splicekin_results")
RESULTS_WORKBOOK = "splicekin_results.xlsx"
LOG_DIR = PROJECT_ROOT / _paths.get("logs_dir", "splicekin_results/logs")

# Plotting Style Configuration
COLOR_PALETTE = [mcolors.to_hex(plt.get_cmap('tab20')(i)) for i in range(0, 20, 2)]
