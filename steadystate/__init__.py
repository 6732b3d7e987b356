from steadystate.analytic import (
    steady_state,
    steady_fraction_unspliced,
    relaxation_times,
    time_to_steady_state,
)
