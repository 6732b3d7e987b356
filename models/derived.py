import numpy as np
import pandas as pd


def fraction_unspliced(P, M):
    """
    Fraction of unspliced RNA, P / (P + M).

    Where P + M == 0 (only at t = 0 of a pulse-labelling run with P0 = M0 = 0)
    the value is 0: nothing has been labelled yet.

    Args:
        P: pre-mRNA amounts (scalar, array or Series)
        M: mRNA amounts, same shape as P

    Returns:
        Same type as P (Series keeps its index, scalars return a float).
    """
    p = np.asarray(P, dtype=float)
    m = np.asarray(M, dtype=float)
    total = p + m
    out = np.divide(p, total, out=np.zeros(np.broadcast(p, m).shape), where=total != 0)
    if isinstance(P, pd.Series):
        return pd.Series(out, index=P.index, name="fraction_unspliced")
    if out.ndim == 0:
        return float(out)
    return out


def add_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of a trajectory or sweep table with `total` and `fraction_unspliced` columns.
    """
    out = df.copy()
    out["total"] = out["P"] + out["M"]
    out["fraction_unspliced"] = fraction_unspliced(out["P"], out["M"]).to_numpy()
    return out


def to_long(df: pd.DataFrame, id_vars=None, species=("P", "M")) -> pd.DataFrame:
    """
    Melt the species columns into long format (`species`, `value`) for faceted plots.

    Args:
        df: trajectory or sweep table
        id_vars: columns kept as identifiers; defaults to every non-species column
        species: columns melted into rows

    Returns:
        pd.DataFrame with id_vars + ['species', 'value']
    """
    species = list(species)
    missing = [s for s in species if s not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {', '.join(missing)}")
    if id_vars is None:
        id_vars = [c for c in df.columns if c not in species and c not in ("total", "fraction_unspliced")]
    return df.melt(id_vars=list(id_vars), value_vars=species, var_name="species", value_name="value")
