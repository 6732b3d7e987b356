import itertools
import os
from contextlib import contextmanager
from dataclasses import dataclass

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from config.constants import COLOR_PALETTE, OUT_DIR, PARAM_NAMES, PARAM_SYMBOLS
from models.derived import add_derived_columns, to_long
from steadystate.analytic import steady_state, steady_fraction_unspliced
from sweep.grid import format_label

_Y_LABELS = {
    "P": "Pre-mRNA (P)",
    "M": "mRNA (M)",
    "total": "Total RNA (P + M)",
    "fraction_unspliced": "Fraction unspliced P / (P + M)",
    "value": "Amount",
}


@dataclass(frozen=True)
class PlotTheme:
    """
    Styling handed to Plotter. Applied through seaborn context managers around
    each figure, so nothing leaks into matplotlib's global rcParams.
    """
    context: str = "notebook"
    style: str = "whitegrid"
    font_scale: float = 1.0
    palette: tuple = tuple(COLOR_PALETTE)
    dpi: int = 300
    figsize: tuple = (8, 6)
    facet_height: float = 3.5


class Plotter:
    """
    Figures of the fraction-unspliced report.

    Attributes:
        name (str): prefix of every file written (also used as figure title).
        out_dir (str): directory where plots are saved.
        theme (PlotTheme): styling of all figures.
    """

    def __init__(self, name: str, out_dir: str = OUT_DIR, theme: PlotTheme = None):
        self.name = name
        self.out_dir = str(out_dir)
        self.theme = theme or PlotTheme()
        os.makedirs(self.out_dir, exist_ok=True)

    @contextmanager
    def _styled(self):
        with sns.axes_style(self.theme.style), sns.plotting_context(self.theme.context,
                                                                    font_scale=self.theme.font_scale):
            yield

    def _save_fig(self, fig, filename: str) -> str:
        """
        Saves and closes the given matplotlib figure, returning its path.
        """
        path = os.path.join(self.out_dir, filename)
        fig.savefig(path, dpi=self.theme.dpi)
        plt.close(fig)
        return path

    def _colors(self, n: int) -> list:
        return list(itertools.islice(itertools.cycle(self.theme.palette), n))

    def plot_timecourse(self, trajectory: pd.DataFrame, rates: dict = None) -> str:
        """
        Pre-mRNA and mRNA against time. With `rates` (tau, sigma, lam) the steady
        states are drawn as dashed lines.
        """
        c_p, c_m = self._colors(2)
        with self._styled():
            fig, ax = plt.subplots(figsize=self.theme.figsize)
            ax.plot(trajectory["time"], trajectory["P"], color=c_p, label=_Y_LABELS["P"])
            ax.plot(trajectory["time"], trajectory["M"], color=c_m, label=_Y_LABELS["M"])
            if rates:
                Ps, Ms = steady_state(rates["tau"], rates["sigma"], rates["lam"])
                ax.axhline(Ps, color=c_p, linestyle="--", linewidth=0.8)
                ax.axhline(Ms, color=c_m, linestyle="--", linewidth=0.8)
            ax.set_title(self.name)
            ax.set_xlabel("Time")
            ax.set_ylabel("Amount")
            ax.legend(loc="best")
            plt.tight_layout()
        return self._save_fig(fig, f"{self.name}_timecourse.png")

    def plot_fraction_unspliced(self, trajectory: pd.DataFrame, rates: dict = None) -> str:
        """
        P / (P + M) against time; the steady-state limit lam / (sigma + lam) is dashed.
        """
        df = add_derived_columns(trajectory)
        color = self._colors(1)[0]
        with self._styled():
            fig, ax = plt.subplots(figsize=self.theme.figsize)
            ax.plot(df["time"], df["fraction_unspliced"], color=color)
            if rates:
                ax.axhline(steady_fraction_unspliced(rates["sigma"], rates["lam"]),
                           color="gray", linestyle="--", linewidth=0.8)
            ax.set_ylim(0, 1)
            ax.set_title(self.name)
            ax.set_xlabel("Time")
            ax.set_ylabel(_Y_LABELS["fraction_unspliced"])
            plt.tight_layout()
        return self._save_fig(fig, f"{self.name}_fraction_unspliced.png")

    def _hue_column(self, df: pd.DataFrame, hue: str):
        """Categorical display column for a numeric parameter, ordered by value."""
        values = sorted(df[hue].unique())
        order = [format_label(hue, v) for v in values]
        column = f"{hue}_label"
        df[column] = df[hue].map(lambda v: format_label(hue, v))
        return column, order

    def plot_sweep(self, sweep_df: pd.DataFrame, y: str = "fraction_unspliced", hue: str = None,
                   col: str = None, filename: str = None) -> str:
        """
        Facet grid of one quantity against time for every combination of a sweep.

        :param sweep_df: table returned by sweep()
        :param y: P, M, total or fraction_unspliced
        :param hue: varied parameter mapped to colour (defaults to the first varied parameter)
        :param col: varied parameter mapped to facet columns
        :param filename: output name; defaults to <name>_sweep_<y>.png
        """
        df = add_derived_columns(sweep_df)
        varying = [c for c in df.columns if c in PARAM_NAMES]
        hue = hue or varying[0]
        hue_col, hue_order = self._hue_column(df, hue)
        kwargs = {}
        if col:
            col_col, col_order = self._hue_column(df, col)
            kwargs = dict(col=col_col, col_order=col_order, col_wrap=min(3, len(col_order)))

        with self._styled():
            g = sns.relplot(
                data=df, x="time", y=y, hue=hue_col, hue_order=hue_order,
                palette=self._colors(len(hue_order)), kind="line", errorbar=None,
                height=self.theme.facet_height, aspect=1.2, facet_kws=dict(sharey=True),
                **kwargs
            )
            g.set_axis_labels("Time", _Y_LABELS.get(y, y))
            if col:
                g.set_titles("{col_name}")
            g.legend.set_title(PARAM_SYMBOLS.get(hue, hue))
            g.figure.suptitle(self.name)
            plt.tight_layout(rect=[0, 0, 0.9, 0.95])
        return self._save_fig(g.figure, filename or f"{self.name}_sweep_{y}.png")

    def plot_species_sweep(self, sweep_df: pd.DataFrame, col: str = None) -> str:
        """
        P and M of every combination, one facet per value of `col`.
        """
        varying = [c for c in sweep_df.columns if c in PARAM_NAMES]
        col = col or varying[0]
        others = [v for v in varying if v != col]
        df = to_long(sweep_df)
        col_col, col_order = self._hue_column(df, col)
        style_kwargs = {}
        if others:
            style_col, style_order = self._hue_column(df, others[0])
            style_kwargs = dict(style=style_col, style_order=style_order)
        with self._styled():
            g = sns.relplot(
                data=df, x="time", y="value", hue="species", hue_order=["P", "M"],
                **style_kwargs,
                col=col_col, col_order=col_order, col_wrap=min(3, len(col_order)),
                palette=self._colors(2), kind="line", errorbar=None,
                height=self.theme.facet_height, aspect=1.2,
            )
            g.set_axis_labels("Time", _Y_LABELS["value"])
            g.set_titles("{col_name}")
            g.figure.suptitle(self.name)
            plt.tight_layout(rect=[0, 0, 0.9, 0.95])
        return self._save_fig(g.figure, f"{self.name}_species.png")

    def plot_tau_invariance(self, sweep_df: pd.DataFrame) -> str:
        """
        Fraction unspliced for several transcription rates, one panel per splicing rate.
        With P0 = M0 = 0 the curves of one panel coincide: tau cancels in P / (P + M).
        """
        if "tau" not in sweep_df.columns:
            raise KeyError("sweep table has no 'tau' column")
        col = "sigma" if "sigma" in sweep_df.columns else None
        return self.plot_sweep(sweep_df, y="fraction_unspliced", hue="tau", col=col,
                               filename=f"{self.name}_tau_invariance.png")

    def plot_fraction_by_sigma(self, sweep_df: pd.DataFrame, col: str = None) -> str:
        """
        Fraction unspliced for several splicing rates; faster splicing gives lower curves.
        """
        if "sigma" not in sweep_df.columns:
            raise KeyError("sweep table has no 'sigma' column")
        return self.plot_sweep(sweep_df, y="fraction_unspliced", hue="sigma", col=col,
                               filename=f"{self.name}_fraction_by_sigma.png")

    def plot_steady_fraction_map(self, sigma_values, lam_values) -> str:
        """
        Heatmap of the steady-state fraction unspliced lam / (sigma + lam).
        """
        sigma_values = np.asarray(sorted(sigma_values), dtype=float)
        lam_values = np.asarray(sorted(lam_values), dtype=float)
        grid = pd.DataFrame(
            [[steady_fraction_unspliced(s, lam) for s in sigma_values] for lam in lam_values],
            index=[f"{lam:g}" for lam in lam_values],
            columns=[f"{s:g}" for s in sigma_values],
        )
        with self._styled():
            fig, ax = plt.subplots(figsize=self.theme.figsize)
            sns.heatmap(grid, annot=True, fmt=".3f", cmap="viridis", ax=ax,
                        cbar_kws={"label": "Steady-state fraction unspliced"})
            ax.set_xlabel(f"{PARAM_SYMBOLS['sigma']} (splicing rate)")
            ax.set_ylabel(f"{PARAM_SYMBOLS['lam']} (decay rate)")
            ax.set_title(self.name)
            plt.tight_layout()
        return self._save_fig(fig, f"{self.name}_steady_fraction.png")
