import os

import numpy as np
import pytest

from models import solve_kinetics
from plotting import Plotter, PlotTheme
from sweep import sweep

THEME = PlotTheme(dpi=40, figsize=(4, 3), facet_height=2.0)


@pytest.fixture
def plotter(tmp_path):
    return Plotter("test", str(tmp_path), theme=THEME)


def test_plot_timecourse(plotter, dummy_time_points, default_rates):
    df = solve_kinetics(**default_rates, t=dummy_time_points)
    path = plotter.plot_timecourse(df, default_rates)
    assert os.path.basename(path) == "test_timecourse.png"
    assert os.path.exists(path)


def test_plot_fraction_unspliced(plotter, dummy_time_points, default_rates):
    df = solve_kinetics(**default_rates, t=dummy_time_points)
    path = plotter.plot_fraction_unspliced(df, default_rates)
    assert os.path.exists(path)


def test_plot_sweep_figures(plotter, small_grid):
    df = sweep({"tau": [0.5, 1.0], "sigma": [0.5, 2.0]}, time_grid_factory=small_grid, label_param="tau")
    paths = [
        plotter.plot_tau_invariance(df),
        plotter.plot_fraction_by_sigma(df),
        plotter.plot_sweep(df, y="M", hue="sigma", col="tau"),
        plotter.plot_species_sweep(df, col="sigma"),
    ]
    for path in paths:
        assert os.path.exists(path)
    assert os.path.basename(paths[2]) == "test_sweep_M.png"


def test_plot_sweep_does_not_modify_input(plotter, small_grid):
    df = sweep({"sigma": [0.5, 2.0]}, time_grid_factory=small_grid)
    columns = list(df.columns)
    plotter.plot_fraction_by_sigma(df)
    assert list(df.columns) == columns


def test_plot_tau_invariance_requires_tau(plotter, small_grid):
    df = sweep({"sigma": [0.5, 2.0]}, time_grid_factory=small_grid)
    with pytest.raises(KeyError):
        plotter.plot_tau_invariance(df)


def test_plot_steady_fraction_map(plotter):
    path = plotter.plot_steady_fraction_map([0.5, 1.0, 2.0], np.array([0.05, 0.1, 0.2]))
    assert os.path.exists(path)
