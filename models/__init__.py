from models.exceptions import KineticsError, InvalidParameter, DegenerateRates
from models.params import RateParameters, InitialState
from models.splicemod import solve_kinetics, solve_state, is_degenerate, check_time_grid, TRAJECTORY_COLUMNS
from models.derived import fraction_unspliced, add_derived_columns, to_long

__all__ = [
    "KineticsError",
    "InvalidParameter",
    "DegenerateRates",
    "RateParameters",
    "InitialState",
    "solve_kinetics",
    "solve_state",
    "is_degenerate",
    "check_time_grid",
    "TRAJECTORY_COLUMNS",
    "fraction_unspliced",
    "add_derived_columns",
    "to_long",
]
