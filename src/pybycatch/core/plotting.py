"""
Plotting module for PyBycatch.

Static matplotlib figures built from the results and summary tables:
- Elasticity heat map of the required bycatch reduction
- Bycatch reduction and cost distributions per species
- Tradeoff chart of policy sufficiency and cost
- Alpha sensitivity curve
- Target stocks of a species and regional upsides

Every function takes the figure styling as an explicit PlotTheme.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

import matplotlib.pyplot as plt
from matplotlib.ticker import PercentFormatter

from pybycatch.config import PlotTheme
from pybycatch.core.constants import POLICIES
from pybycatch.core.elasticity import alpha_sensitivity_curve, elasticity_grid
from pybycatch.core.params import BycatchSpecies
from pybycatch.core.stocks import StockPool, select_stocks

CLADE_MARKERS = ("o", "s", "^", "D", "v", "P")


def _theme(theme: Optional[PlotTheme]) -> PlotTheme:
    return theme if theme is not None else PlotTheme()


def _facet_axes(
    n: int, theme: PlotTheme, ncol: Optional[int] = None
) -> Tuple[plt.Figure, List[plt.Axes]]:
    ncol = min(ncol or theme.facet_ncol, max(n, 1))
    nrow = int(np.ceil(max(n, 1) / ncol))
    width, height = theme.facet_figsize
    fig, axes = plt.subplots(
        nrow, ncol, figsize=(width, max(height * nrow / 5.0, 3.0)), squeeze=False
    )
    axes = list(axes.ravel())
    for ax in axes[n:]:
        ax.set_visible(False)
    return fig, axes[:n]


# =============================================================================
# ELASTICITY
# =============================================================================


def plot_elasticity_heatmap(
    species: Optional[Sequence[BycatchSpecies]] = None,
    delta_range: Tuple[float, float] = (-0.4, 0.0),
    fe_range: Tuple[float, float] = (0.0, 0.4),
    n: int = 100,
    theme: Optional[PlotTheme] = None,
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """Heat map of the bycatch reduction needed to halt decline.

    Parameters
    ----------
    species : list of BycatchSpecies, optional
        Species point estimates to overlay, one marker per clade
    delta_range, fe_range : tuple
        Axis ranges
    n : int
        Grid resolution per axis
    theme : PlotTheme, optional
    ax : Axes, optional

    Returns
    -------
    matplotlib.Figure
    """
    theme = _theme(theme)
    grid = elasticity_grid(delta_range, fe_range, n)
    z = grid["z"].to_numpy().reshape(n, n).T

    with plt.rc_context(theme.rc_params()):
        if ax is None:
            fig, ax = plt.subplots(figsize=theme.figsize)
        else:
            fig = ax.figure

        mesh = ax.imshow(
            z,
            origin="lower",
            extent=(*delta_range, *fe_range),
            cmap=f"{theme.heatmap_cmap}_r",
            vmin=0.0,
            vmax=1.0,
            aspect="auto",
            interpolation="bilinear",
        )
        cbar = fig.colorbar(mesh, ax=ax)
        cbar.set_label(r"$\Delta / F_e$")
        cbar.ax.yaxis.set_major_formatter(PercentFormatter(1.0))

        if species:
            clades = sorted({s.clade.title() for s in species})
            for i, clade in enumerate(clades):
                members = [s for s in species if s.clade.title() == clade]
                ax.scatter(
                    [s.delta for s in members],
                    [s.fe for s in members],
                    marker=CLADE_MARKERS[i % len(CLADE_MARKERS)],
                    facecolor="black",
                    edgecolor="white",
                    alpha=0.7,
                    s=40,
                    label=clade,
                )
            ax.legend(loc="upper left")

        ax.set_xlim(delta_range)
        ax.set_ylim(fe_range)
        ax.set_xlabel(r"Rate of population decline ($\Delta$)")
        ax.set_ylabel(r"Bycatch mortality rate ($F_e$)")

    return fig


def plot_alpha_sensitivity(
    effort_red: float = 0.5, theme: Optional[PlotTheme] = None
) -> plt.Figure:
    """Bycatch reduction delivered by a fixed effort reduction across alpha."""
    theme = _theme(theme)
    curve = alpha_sensitivity_curve(np.linspace(0.01, 5.0, 200), effort_red)

    with plt.rc_context(theme.rc_params()):
        fig, ax = plt.subplots(figsize=(4, 4))
        ax.plot(curve["alpha"], curve["bycatch_red"], color="black")
        ax.axvline(1.0, linestyle="--", color="grey")
        ax.axhline(effort_red, linestyle="--", color="grey")
        ax.yaxis.set_major_formatter(PercentFormatter(1.0))
        ax.set_xlabel(r"$\alpha$")
        ax.set_ylabel("Reduction in bycatch mortality")
        ax.set_title(f"Target effort reduction {effort_red:.0%}", fontsize=10)
    return fig


# =============================================================================
# DISTRIBUTIONS
# =============================================================================


def _species_list(df: pd.DataFrame, species) -> List[str]:
    if species is None:
        return sorted(df["species"].unique())
    return [species] if isinstance(species, str) else list(species)


def plot_bycatch_distribution(
    results: pd.DataFrame,
    species: Optional[Union[str, Sequence[str]]] = None,
    policies: Sequence[str] = POLICIES,
    theme: Optional[PlotTheme] = None,
) -> plt.Figure:
    """Distributions of required vs. policy-delivered bycatch reduction.

    One panel per species; the required reduction is drawn once, the
    delivered reduction once per policy.
    """
    theme = _theme(theme)
    names = _species_list(results, species)
    bins = np.linspace(0.0, 1.0, theme.hist_bins + 1)

    with plt.rc_context(theme.rc_params()):
        fig, axes = _facet_axes(len(names), theme)
        for ax, name in zip(axes, names):
            df = results[results["species"] == name]
            required = df.drop_duplicates("draw")["bycatch_red"].dropna()
            ax.hist(
                required, bins=bins, density=True, alpha=0.6,
                color=theme.required_color, label="Required",
            )
            for policy in policies:
                delivered = df.loc[df["policy"] == policy, "policy_red"].dropna()
                ax.hist(
                    delivered, bins=bins, density=True, alpha=0.6,
                    color=theme.policy_colors.get(policy), label=policy,
                )
            ax.set_title(name, fontsize=9)
            ax.xaxis.set_major_formatter(PercentFormatter(1.0))
        if axes:
            axes[0].legend(fontsize=8)
            fig.supxlabel("Reduction in bycatch mortality")
        fig.tight_layout()
    return fig


def plot_cost_distribution(
    results: pd.DataFrame,
    species: Optional[Union[str, Sequence[str]]] = None,
    policies: Sequence[str] = POLICIES,
    theme: Optional[PlotTheme] = None,
) -> plt.Figure:
    """Distributions of the cost of closing the gap left by each policy."""
    theme = _theme(theme)
    names = _species_list(results, species)

    with plt.rc_context(theme.rc_params()):
        fig, axes = _facet_axes(len(names), theme)
        for ax, name in zip(axes, names):
            df = results[results["species"] == name]
            for policy in policies:
                cost = df.loc[df["policy"] == policy, "cost"].dropna()
                if cost.empty:
                    continue
                ax.hist(
                    cost, bins=theme.hist_bins, alpha=0.6,
                    color=theme.policy_colors.get(policy), label=policy,
                )
            ax.set_title(name, fontsize=9)
            ax.xaxis.set_major_formatter(PercentFormatter(1.0))
        if axes:
            axes[0].legend(fontsize=8)
            fig.supxlabel("Forgone fishing expenditure beyond target")
        fig.tight_layout()
    return fig


# =============================================================================
# SUMMARY
# =============================================================================


def plot_tradeoffs(
    summary: pd.DataFrame,
    policy: str = "MEY",
    theme: Optional[PlotTheme] = None,
) -> plt.Figure:
    """Per-species chance that a policy suffices, and the residual cost.

    Parameters
    ----------
    summary : pd.DataFrame
        Output of ``summarize_results`` (needs ``prob_sufficient`` and
        ``cost_mean``; ``cost_q10``/``cost_q90`` give error bars)
    policy : str
        Reference policy to show
    """
    theme = _theme(theme)
    df = summary[summary["policy"] == policy].sort_values("prob_sufficient")
    y = np.arange(len(df))

    with plt.rc_context(theme.rc_params()):
        fig, (ax_prob, ax_cost) = plt.subplots(
            1, 2, sharey=True, figsize=(10 * 0.6, max(13 * 0.6 * len(df) / 20, 3))
        )
        color = theme.policy_colors.get(policy, theme.palette[1])
        ax_prob.barh(y, df["prob_sufficient"], color=color)
        ax_prob.set_yticks(y)
        ax_prob.set_yticklabels(df["species"], fontsize=8)
        ax_prob.set_xlim(0, 1)
        ax_prob.xaxis.set_major_formatter(PercentFormatter(1.0))
        ax_prob.set_xlabel(f"P({policy} halts decline)")

        cost = df["cost_mean"].to_numpy(dtype=float)
        if {"cost_q10", "cost_q90"}.issubset(df.columns):
            lower = np.clip(cost - df["cost_q10"].to_numpy(dtype=float), 0, None)
            upper = np.clip(df["cost_q90"].to_numpy(dtype=float) - cost, 0, None)
            xerr = np.vstack([lower, upper])
        else:
            xerr = None
        ax_cost.errorbar(cost, y, xerr=xerr, fmt="o", color="black", ecolor="grey")
        ax_cost.xaxis.set_major_formatter(PercentFormatter(1.0))
        ax_cost.set_xlabel("Cost beyond target")
        fig.suptitle(policy)
        fig.tight_layout()
    return fig


def plot_stock_samples(
    pool: StockPool,
    species: BycatchSpecies,
    theme: Optional[PlotTheme] = None,
) -> plt.Figure:
    """Effort reductions to MEY/MSY of the stocks a species is exposed to."""
    theme = _theme(theme)
    table = select_stocks(pool, species).table
    categories = sorted(table["speciescatname"].dropna().unique())

    with plt.rc_context(theme.rc_params()):
        fig, axes = plt.subplots(1, 2, sharey=True, figsize=theme.figsize)
        for ax, policy, col in zip(axes, POLICIES, ("pctmey", "pctmsy")):
            for i, cat in enumerate(categories):
                values = table.loc[table["speciescatname"] == cat, col].dropna()
                jitter = np.linspace(-0.2, 0.2, len(values)) if len(values) > 1 else 0.0
                ax.scatter(
                    values, i + jitter, s=12, alpha=0.6,
                    color=theme.policy_colors.get(policy),
                )
            ax.set_yticks(range(len(categories)))
            ax.set_yticklabels(categories, fontsize=8)
            ax.set_title(policy)
            ax.set_xlabel("Effort reduction (%)")
        fig.suptitle(species.species)
        fig.tight_layout()
    return fig


def plot_region_upsides(
    regions: pd.DataFrame,
    column: str = "avpctmey",
    theme: Optional[PlotTheme] = None,
) -> plt.Figure:
    """Bar chart of the effort reduction per FAO region.

    ``regions`` is the output of ``region_upsides``.
    """
    theme = _theme(theme)
    df = regions.dropna(subset=[column]).sort_values(column)
    cmap = plt.get_cmap(theme.region_cmap)
    values = df[column].to_numpy(dtype=float) / 100.0

    with plt.rc_context(theme.rc_params()):
        fig, ax = plt.subplots(figsize=theme.figsize)
        labels = df["regionfao"].astype(str)
        if "taxonomy" in df.columns:
            labels = df["taxonomy"].astype(str) + " / " + labels
        ax.barh(labels, values, color=cmap(np.clip(values, 0, 1)))
        ax.xaxis.set_major_formatter(PercentFormatter(1.0))
        ax.set_xlabel("Reduction in fishing effort")
        ax.set_ylabel("FAO area")
        fig.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    path: Union[str, Path],
    formats: Sequence[str] = ("png", "pdf"),
    theme: Optional[PlotTheme] = None,
) -> List[Path]:
    """Save a figure in several formats next to each other.

    ``path`` is taken without extension; ``figures/fig-1`` gives
    ``figures/fig-1.png`` and ``figures/fig-1.pdf``.
    """
    theme = _theme(theme)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    saved = []
    for fmt in formats:
        out = path.with_suffix(f".{fmt}")
        fig.savefig(out, dpi=theme.dpi, bbox_inches="tight")
        saved.append(out)
    return saved
