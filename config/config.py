import argparse
import os

from config.constants import (
    TAU, SIGMA, LAMBDA, P0, M0, TAU_VALUES, SIGMA_VALUES, LAMBDA_VALUES, T_START, T_END, N_TIME_POINTS,
    ZOOM_T_END, ZOOM_N_POINTS, DEGENERATE_MODE, DEGENERACY_RTOL, SWEEP_WORKERS, OUT_DIR, LOG_DIR
)
from config_loader import load


def parse_positive(val):
    """
    Parse a strictly positive float from the command line.

    Args:
        val (str): e.g. "0.5"
    Returns:
        float
    """
    try:
        value = float(val)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid number '{val}': {e}")
    if not value > 0:
        raise argparse.ArgumentTypeError(f"Value must be > 0, got {val}")
    return value


def parse_value_list(val):
    """
    Parse a comma-separated list of positive values, e.g. "0.5,1,2".
    Duplicates are rejected since every sweep combination is evaluated once.

    Args:
        val (str): The string to parse.
    Returns:
        tuple: The parsed values, in the given order.
    """
    parts = [p.strip() for p in val.split(',') if p.strip()]
    if not parts:
        raise argparse.ArgumentTypeError(f"Empty value list '{val}'")
    values = tuple(parse_positive(p) for p in parts)
    if len(set(values)) != len(values):
        raise argparse.ArgumentTypeError(f"Duplicate values in '{val}'")
    return values


def build_parser():
    parser = argparse.ArgumentParser(
        description="splicekin - fraction unspliced as a proxy for splicing rate "
                    "(analytical transcription -> splicing -> decay model)"
    )
    parser.add_argument("--tau", type=parse_positive, default=None, help=f"Transcription rate (default {TAU})")
    parser.add_argument("--sigma", type=parse_positive, default=None, help=f"Splicing rate (default {SIGMA})")
    parser.add_argument("--lam", type=parse_positive, default=None, help=f"mRNA decay rate (default {LAMBDA})")
    parser.add_argument("--tau-values", type=parse_value_list, default=None,
                        help="Comma-separated transcription rates to sweep")
    parser.add_argument("--sigma-values", type=parse_value_list, default=None,
                        help="Comma-separated splicing rates to sweep")
    parser.add_argument("--lam-values", type=parse_value_list, default=None,
                        help="Comma-separated decay rates to sweep")
    parser.add_argument("--t-end", type=parse_positive, default=None, help=f"End of the time grid (default {T_END})")
    parser.add_argument("--n-points", type=int, default=None,
                        help=f"Number of time points (default {N_TIME_POINTS})")
    parser.add_argument("--degenerate", choices=["limit", "raise"], default=None,
                        help="Handling of sigma == lam: closed-form limit or error")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes for sweeps")
    parser.add_argument("--out-dir", type=str, default=None, help="Directory for figures, tables and report")
    parser.add_argument("--log-dir", type=str, default=None, help="Directory for the run log file")
    parser.add_argument("--config", type=str, default=None, help="Path to a config.toml with overrides")
    return parser


def parse_args(argv=None):
    """
    Parse command-line arguments for the splicekin pipeline.

    Args:
        argv (list): argument list; defaults to sys.argv[1:]
    Returns:
        argparse.Namespace: The parsed command-line arguments.
    """
    return build_parser().parse_args(argv)


def _defaults():
    return {
        "tau": TAU,
        "sigma": SIGMA,
        "lam": LAMBDA,
        "P0": P0,
        "M0": M0,
        "tau_values": TAU_VALUES,
        "sigma_values": SIGMA_VALUES,
        "lam_values": LAMBDA_VALUES,
        "t_start": T_START,
        "t_end": T_END,
        "n_points": N_TIME_POINTS,
        "zoom_t_end": ZOOM_T_END,
        "zoom_n_points": ZOOM_N_POINTS,
        "degenerate": DEGENERATE_MODE,
        "degeneracy_rtol": DEGENERACY_RTOL,
        "workers": SWEEP_WORKERS,
        "out_dir": str(OUT_DIR),
        "log_dir": str(LOG_DIR),
    }


def _file_overrides(path):
    kinetics = load("kinetics", path)
    sweep = load("sweep", path)
    time = load("time", path)
    paths = load("paths", path)
    out = {k: kinetics[k] for k in ("tau", "sigma", "lam", "P0", "M0", "degenerate", "degeneracy_rtol")
           if k in kinetics}
    for k in ("tau_values", "sigma_values", "lam_values"):
        if k in sweep:
            out[k] = tuple(float(v) for v in sweep[k])
    if "workers" in sweep:
        out["workers"] = int(sweep["workers"])
    out.update({k: time[k] for k in ("t_start", "t_end", "n_points", "zoom_t_end", "zoom_n_points")
                if k in time})
    if "results_dir" in paths:
        out["out_dir"] = paths["results_dir"]
    if "logs_dir" in paths:
        out["log_dir"] = paths["logs_dir"]
    return out


def extract_config(args):
    """
    Build the run configuration: constants, then the --config file, then command-line flags.

    :param args: argparse.Namespace from parse_args()
    :return: dict
    """
    config = _defaults()
    if args.config:
        if not os.path.isfile(args.config):
            raise ValueError(f"Config file not found: {args.config}")
        config.update(_file_overrides(args.config))

    cli = {
        "tau": args.tau,
        "sigma": args.sigma,
        "lam": args.lam,
        "tau_values": args.tau_values,
        "sigma_values": args.sigma_values,
        "lam_values": args.lam_values,
        "t_end": args.t_end,
        "n_points": args.n_points,
        "degenerate": args.degenerate,
        "workers": args.workers,
        "out_dir": args.out_dir,
        "log_dir": args.log_dir,
    }
    config.update({k: v for k, v in cli.items() if v is not None})

    if config["n_points"] < 2:
        raise ValueError(f"n_points must be >= 2, got {config['n_points']}")
    if config["t_end"] <= config["t_start"]:
        raise ValueError(f"t_end ({config['t_end']}) must be greater than t_start ({config['t_start']})")
    if config["workers"] < 1:
        raise ValueError(f"workers must be >= 1, got {config['workers']}")
    return config


def log_config(logger, config):
    """
    Log the configuration of a run.
    """
    logger.info("           --------------------------------")
    logger.info("Transcription -> Splicing -> Decay Model Configuration")
    logger.info("           --------------------------------")
    logger.info(f"      τ (transcription) : {config['tau']}")
    logger.info(f"      σ (splicing)      : {config['sigma']}")
    logger.info(f"      λ (decay)         : {config['lam']}")
    logger.info(f"      P0, M0            : {config['P0']}, {config['M0']}")
    logger.info(f"      τ sweep           : {', '.join(f'{v:g}' for v in config['tau_values'])}")
    logger.info(f"      σ sweep           : {', '.join(f'{v:g}' for v in config['sigma_values'])}")
    logger.info(f"      λ sweep           : {', '.join(f'{v:g}' for v in config['lam_values'])}")
    logger.info(f"      Time grid         : {config['n_points']} points on [{config['t_start']}, {config['t_end']}]")
    logger.info(f"      Zoom grid         : {config['zoom_n_points']} points on [0, {config['zoom_t_end']}]")
    logger.info(f"      σ == λ handling   : {config['degenerate']}")
    logger.info(f"      Workers           : {config['workers']}")
    logger.info(f"      Output            : {config['out_dir']}")
    logger.info(f"      Logs              : {config['log_dir']}")
    logger.info("           --------------------------------")
