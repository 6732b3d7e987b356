import numpy as np
import pandas as pd
import pytest

from models.derived import fraction_unspliced, add_derived_columns, to_long


def test_fraction_unspliced_scalar():
    assert fraction_unspliced(1.0, 3.0) == pytest.approx(0.25)


def test_fraction_unspliced_zero_over_zero_is_zero():
    assert fraction_unspliced(0.0, 0.0) == 0.0
    out = fraction_unspliced(np.array([0.0, 1.0]), np.array([0.0, 1.0]))
    np.testing.assert_array_equal(out, [0.0, 0.5])


def test_fraction_unspliced_keeps_series_index():
    P = pd.Series([0.0, 2.0, 1.0], index=[10, 11, 12])
    M = pd.Series([0.0, 2.0, 3.0], index=[10, 11, 12])
    out = fraction_unspliced(P, M)
    assert isinstance(out, pd.Series)
    assert list(out.index) == [10, 11, 12]
    np.testing.assert_allclose(out.to_numpy(), [0.0, 0.5, 0.25])


def test_add_derived_columns_does_not_mutate_input():
    df = pd.DataFrame({"time": [0.0, 1.0], "P": [0.0, 1.0], "M": [0.0, 4.0]})
    out = add_derived_columns(df)
    assert "total" not in df.columns
    np.testing.assert_allclose(out["total"], [0.0, 5.0])
    np.testing.assert_allclose(out["fraction_unspliced"], [0.0, 0.2])


def test_to_long_melts_species():
    df = pd.DataFrame({"sigma": [1.0, 1.0], "time": [0.0, 1.0], "P": [0.0, 1.0], "M": [0.0, 2.0]})
    long = to_long(df)
    assert len(long) == 4
    assert set(long["species"]) == {"P", "M"}
    assert list(long.columns) == ["sigma", "time", "species", "value"]
    assert long.loc[(long["species"] == "M") & (long["time"] == 1.0), "value"].item() == 2.0


def test_to_long_missing_species_raises():
    df = pd.DataFrame({"time": [0.0], "P": [0.0]})
    with pytest.raises(KeyError):
        to_long(df)
