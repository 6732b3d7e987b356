import os
import sys
import time
from functools import partial

import numpy as np

from config.config import parse_args, extract_config, log_config
from config.constants import RESULTS_WORKBOOK
from config.logconf import setup_logger
from models import solve_kinetics, add_derived_columns, KineticsError
from plotting import Plotter
from steadystate import steady_state, steady_fraction_unspliced, time_to_steady_state
from sweep import sweep, summarize_sweep, zoom_time_grid
from utils.display import ensure_output_directory, format_duration, save_sweep_tables, create_report

logger = setup_logger()


def run(config):
    """
    Build every table and figure of the report.

    Args:
        config (dict): run configuration from extract_config()

    Returns:
        dict: sheet name -> table written to the Excel workbook
    """
    out_dir = config["out_dir"]
    ensure_output_directory(out_dir)

    def time_grid():
        return np.linspace(config["t_start"], config["t_end"], config["n_points"])

    zoom_grid = partial(zoom_time_grid, config["zoom_t_end"], config["zoom_n_points"])
    rates = {k: config[k] for k in ("tau", "sigma", "lam")}
    init = {k: config[k] for k in ("P0", "M0")}
    common = dict(max_workers=config["workers"], degenerate=config["degenerate"],
                  rtol=config["degeneracy_rtol"])

    # Single time course at the default rates
    base = solve_kinetics(**rates, **init, t=time_grid(), degenerate=config["degenerate"],
                          rtol=config["degeneracy_rtol"])
    Ps, Ms = steady_state(**rates)
    logger.info(f"Steady state: P = {Ps:.4g}, M = {Ms:.4g}, "
                f"fraction unspliced = {steady_fraction_unspliced(rates['sigma'], rates['lam']):.4g}")
    logger.info(f"Steady state reached at t = "
                f"{time_to_steady_state(base, **rates)} (nan: not within the time grid)")
    base_plotter = Plotter("base", out_dir)
    base_plotter.plot_timecourse(base, rates)
    base_plotter.plot_fraction_unspliced(base, rates)

    # Splicing rate sweep
    sigma_sweep = sweep({"sigma": config["sigma_values"]},
                        fixed={"tau": rates["tau"], "lam": rates["lam"], **init},
                        time_grid_factory=time_grid, **common)
    sigma_plotter = Plotter("sigma", out_dir)
    sigma_plotter.plot_fraction_by_sigma(sigma_sweep)
    sigma_plotter.plot_species_sweep(sigma_sweep, col="sigma")

    # Transcription rate sweep: fraction unspliced does not depend on tau
    tau_sweep = sweep({"tau": config["tau_values"], "sigma": config["sigma_values"]},
                      fixed={"lam": rates["lam"], **init}, time_grid_factory=time_grid,
                      label_param="tau", **common)
    Plotter("tau", out_dir).plot_tau_invariance(tau_sweep)

    # Decay rate sweep
    lam_sweep = sweep({"lam": config["lam_values"], "sigma": config["sigma_values"]},
                      fixed={"tau": rates["tau"], **init}, time_grid_factory=time_grid,
                      label_param="sigma", **common)
    Plotter("lambda", out_dir).plot_fraction_by_sigma(lam_sweep, col="lam")

    # Early labelling window
    zoom_sweep = sweep({"sigma": config["sigma_values"], "lam": config["lam_values"]},
                       fixed={"tau": rates["tau"], **init}, time_grid_factory=zoom_grid,
                       label_param="sigma", **common)
    Plotter("zoom", out_dir).plot_fraction_by_sigma(zoom_sweep, col="lam")

    Plotter("steady", out_dir).plot_steady_fraction_map(config["sigma_values"], config["lam_values"])

    summaries = {
        "sigma_summary": summarize_sweep(sigma_sweep),
        "tau_summary": summarize_sweep(tau_sweep),
        "lambda_summary": summarize_sweep(lam_sweep),
    }
    tables = {
        "trajectory": add_derived_columns(base),
        "sigma_sweep": add_derived_columns(sigma_sweep),
        "tau_sweep": add_derived_columns(tau_sweep),
        "lambda_sweep": add_derived_columns(lam_sweep),
        "zoom_sweep": add_derived_columns(zoom_sweep),
        **summaries,
    }
    excel_path = os.path.join(out_dir, RESULTS_WORKBOOK)
    save_sweep_tables(tables, excel_path)
    logger.info(f"Tables written to {excel_path}")

    report = create_report(out_dir, tables={
        "σ sweep": summaries["sigma_summary"],
        "τ sweep": summaries["tau_summary"],
        "λ sweep": summaries["lambda_summary"],
    })
    logger.info(f"Report written to {report}")
    return tables


def main(argv=None):
    """
    Command-line entry point. Returns the process exit code.
    """
    start = time.time()
    args = parse_args(argv)
    try:
        config = extract_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    # From here on the run log is written to the configured directory
    setup_logger(log_dir=config["log_dir"])
    log_config(logger, config)

    try:
        run(config)
    except KineticsError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    logger.info(f"Finished in {format_duration(time.time() - start)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
