from sweep.grid import (
    default_time_grid,
    zoom_time_grid,
    format_label,
    parameter_grid,
    sweep,
    summarize_sweep,
)
