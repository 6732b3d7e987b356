import os

os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pytest


@pytest.fixture
def dummy_time_points():
    return np.linspace(0, 10, 51)


@pytest.fixture
def long_time_points():
    # long enough for exp(-lam * t) to vanish with lam = 0.05
    return np.linspace(0, 800, 801)


@pytest.fixture
def default_rates():
    return {
        "tau": 1.0,
        "sigma": 1.0,
        "lam": 0.1,
    }


@pytest.fixture
def pulse_state():
    return {
        "P0": 0.0,
        "M0": 0.0,
    }


@pytest.fixture
def small_grid():
    return lambda: np.linspace(0, 10, 21)
