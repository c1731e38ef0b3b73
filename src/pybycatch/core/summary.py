"""
Summary statistics of simulation results.

Reduces the long-format results table to one row per (species, policy)
with the mean and requested quantiles of each metric. Missing values are
dropped metric by metric; they never count as zero.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from pybycatch.core.constants import (
    DEFAULT_QUANTILES,
    POLICIES,
    SUMMARY_KEY_COLUMNS,
    SUMMARY_METRICS,
)


def quantile_label(q: float) -> str:
    """Column suffix for a quantile, e.g. 0.1 -> 'q10', 0.025 -> 'q2.5'."""
    return f"q{q * 100:g}"


def summary_columns(quantiles: Sequence[float] = DEFAULT_QUANTILES) -> List[str]:
    """Column layout of the summary table."""
    cols = list(SUMMARY_KEY_COLUMNS)
    for metric in SUMMARY_METRICS:
        cols.append(f"{metric}_mean")
        cols.extend(f"{metric}_{quantile_label(q)}" for q in quantiles)
    return cols


def _describe(values: np.ndarray, quantiles: Sequence[float]) -> List[float]:
    values = values[~np.isnan(values)]
    if values.size == 0:
        return [np.nan] * (1 + len(quantiles))
    # Sorting first makes the sum independent of row order
    values = np.sort(values)
    return [float(values.sum() / values.size)] + [
        float(v) for v in np.quantile(values, quantiles)
    ]


def summarize_results(
    results: pd.DataFrame,
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    species: Optional[Union[str, Sequence[str]]] = None,
    policy: Optional[str] = None,
    excluded_draws: Optional[Dict[str, int]] = None,
) -> pd.DataFrame:
    """Summarize the results table per species and policy.

    Parameters
    ----------
    results : pd.DataFrame
        Results table (see ``RESULT_COLUMNS``)
    quantiles : sequence of float
        Quantiles to report for each metric
    species : str or list of str, optional
        Restrict to these species
    policy : str, optional
        Restrict to one reference policy ('MEY' or 'MSY')
    excluded_draws : dict, optional
        Species -> excluded draw count, copied into ``n_excluded``

    Returns
    -------
    pd.DataFrame
        One row per (species, policy), sorted, with columns
        ``summary_columns(quantiles)``. ``prob_sufficient`` is the share of
        rows where the policy alone delivers the required bycatch
        reduction.

    Raises
    ------
    ValueError
        If required columns are missing or the policy is unknown.
    """
    quantiles = [float(q) for q in quantiles]
    if any(q < 0 or q > 1 for q in quantiles):
        raise ValueError(f"Quantiles must lie in [0, 1], got {quantiles}")
    required = ["species", "policy"] + list(SUMMARY_METRICS)
    missing = [c for c in required if c not in results.columns]
    if missing:
        raise ValueError(f"Results table is missing columns: {missing}")
    if policy is not None and policy not in POLICIES:
        raise ValueError(f"Unknown policy '{policy}', expected one of {POLICIES}")

    df = results
    if species is not None:
        wanted = [species] if isinstance(species, str) else list(species)
        df = df[df["species"].isin(wanted)]
    if policy is not None:
        df = df[df["policy"] == policy]

    excluded_draws = excluded_draws or {}
    rows = []
    for (sp, pol), group in df.groupby(["species", "policy"], sort=True):
        bycatch = group["bycatch_red"].to_numpy(dtype=float)
        delivered = group["policy_red"].to_numpy(dtype=float)
        both = ~np.isnan(bycatch) & ~np.isnan(delivered)
        prob = float(np.mean(delivered[both] >= bycatch[both])) if both.any() else np.nan

        row = [sp, pol, len(group), int(excluded_draws.get(sp, 0)), prob]
        for metric in SUMMARY_METRICS:
            row.extend(_describe(group[metric].to_numpy(dtype=float), quantiles))
        rows.append(row)

    summary = pd.DataFrame(rows, columns=summary_columns(quantiles))
    return summary.astype({"n": np.int64, "n_excluded": np.int64})


def draw_level_results(results: pd.DataFrame) -> pd.DataFrame:
    """Average the resamples of each draw, one row per (species, policy, draw).

    Useful for plotting distributions over states of the world rather than
    over individual resamples.
    """
    keys = ["species", "policy", "draw"]
    metrics = ["delta", "fe"] + list(SUMMARY_METRICS)
    return results.groupby(keys, sort=True)[metrics].mean().reset_index()
