"""
Target stock pool for PyBycatch.

Target-stock records (one per fishery/stock, from the upsides model of
Costello et al. 2016) are prepared once into an immutable StockPool that
every species task reads from.

Preparation follows explicit per-column rules:
- numeric fields are averaged per lumped stock ignoring missing values
- infinite biomass/reduction ratios become missing, never zero
- derived cost columns that divide by zero become missing
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Union

import numpy as np
import pandas as pd

from pybycatch.core.constants import (
    POLICIES,
    POLICY_REDUCTION_COLUMNS,
    STOCK_COST_COLUMNS,
    STOCK_FIELD_MAP,
    STOCK_KEY_COLUMNS,
    STOCK_RATIO_COLUMNS,
)
from pybycatch.core.errors import MissingInputError, SpeciesSimulationError
from pybycatch.core.params import BycatchSpecies
from pybycatch.io.utils import normalize_code, split_codes


@dataclass(frozen=True, eq=False)
class StockPool:
    """Prepared, read-only pool of target-stock records.

    The stock table is held privately; ``table`` returns a copy, so no
    caller (or concurrently running species task) can alter the pool.

    Attributes
    ----------
    table : pd.DataFrame
        Copy of the prepared table, one row per lumped stock with columns
        ``idoriglumped``, ``regionfao``, ``speciescat``, ``speciescatname``, ``margc``,
        ``bet``, ``g``, ``fvfmey``, ``fvfmsy``, ``pctmey``, ``pctmsy``,
        ``cstcurr``, ``cstmey``, ``cstmsy``, ``wt``, ``wtpctmey``,
        ``wtpctmsy`` and ``regions`` (tuple of FAO codes).
    reductions : dict
        Policy -> effort reduction to reach that policy, as a fraction
        clipped to [0, 1] (NaN where undefined).
    weights : np.ndarray
        Current-cost weight of each stock (NaN where undefined).
    beta : np.ndarray
        Cost-curvature exponent of each stock.
    """

    _table: pd.DataFrame = field(repr=False)
    reductions: Dict[str, np.ndarray] = field(repr=False)
    weights: np.ndarray = field(repr=False)
    beta: np.ndarray = field(repr=False)

    @property
    def table(self) -> pd.DataFrame:
        return self._table.copy()

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        n_regions = len({r for regions in self._table["regions"] for r in regions})
        return f"StockPool(stocks={len(self)}, regions={n_regions})"

    @classmethod
    def from_table(cls, table: pd.DataFrame) -> "StockPool":
        """Wrap an already prepared stock table."""
        table = table.reset_index(drop=True).copy()
        reductions = {}
        for policy in POLICIES:
            pct = table[POLICY_REDUCTION_COLUMNS[policy]].to_numpy(dtype=float)
            reductions[policy] = _read_only(np.clip(pct / 100.0, 0.0, 1.0))
        weights = table["wt"].to_numpy(dtype=float)
        beta = table["bet"].to_numpy(dtype=float)
        return cls(
            _table=table,
            reductions=reductions,
            weights=_read_only(weights.copy()),
            beta=_read_only(beta.copy()),
        )

    def subset(self, mask: np.ndarray) -> "StockPool":
        """Pool restricted to the rows selected by a boolean mask."""
        return StockPool.from_table(self._table.loc[np.asarray(mask, dtype=bool)])


def _read_only(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _undefined_to_nan(series: pd.Series) -> pd.Series:
    return series.where(np.isfinite(series), np.nan)


def prepare_stock_pool(raw: pd.DataFrame) -> StockPool:
    """Aggregate raw upsides records into a StockPool.

    Parameters
    ----------
    raw : pd.DataFrame
        Raw target-stock table with the key columns ``idoriglumped``,
        ``regionfao``, ``speciescat``, ``speciescatname`` and the fields
        ``marginalcost``, ``beta``, ``g``, ``eqfvfmey``, ``fvfmsy``,
        ``pctredfmey``, ``pctredfmsy``.

    Returns
    -------
    StockPool

    Raises
    ------
    MissingInputError
        If the table is empty or lacks required columns.
    """
    required = list(STOCK_KEY_COLUMNS) + list(STOCK_FIELD_MAP)
    missing = [c for c in required if c not in raw.columns]
    if missing:
        raise MissingInputError(f"Stock table is missing columns: {missing}")
    if raw.empty:
        raise MissingInputError("Stock table is empty")

    df = raw[required].copy()
    df["regionfao"] = df["regionfao"].map(
        lambda v: " ".join(split_codes(v)) if pd.notna(v) else ""
    )
    df["speciescat"] = df["speciescat"].map(normalize_code)
    for col in STOCK_FIELD_MAP:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    # Mean of each field per lumped stock; NaN skipped, all-NaN stays NaN
    grouped = (
        df.groupby(list(STOCK_KEY_COLUMNS), sort=True, dropna=False)[list(STOCK_FIELD_MAP)]
        .mean()
        .reset_index()
        .rename(columns=STOCK_FIELD_MAP)
    )

    n_inf = 0
    for col in STOCK_RATIO_COLUMNS:
        n_inf += int(np.isinf(grouped[col]).sum())
        grouped[col] = _undefined_to_nan(grouped[col])
    if n_inf:
        warnings.warn(f"{n_inf} infinite stock ratio(s) treated as missing")

    margc, bet, g = grouped["margc"], grouped["bet"], grouped["g"]
    fvfmsy, fvfmey = grouped["fvfmsy"], grouped["fvfmey"]
    with np.errstate(divide="ignore", invalid="ignore"):
        grouped["cstcurr"] = margc * (g * fvfmsy) ** bet
        grouped["cstmey"] = margc * ((g * fvfmsy) / fvfmey) ** bet
        grouped["cstmsy"] = margc * g**bet
    for col in STOCK_COST_COLUMNS:
        grouped[col] = _undefined_to_nan(grouped[col])

    total = grouped["cstcurr"].sum(skipna=True)
    if not total > 0:
        warnings.warn("Stock pool has no positive current cost; weights undefined")
        grouped["wt"] = np.nan
    else:
        grouped["wt"] = grouped["cstcurr"] / total
    grouped["wtpctmey"] = grouped["wt"] * grouped["pctmey"]
    grouped["wtpctmsy"] = grouped["wt"] * grouped["pctmsy"]
    grouped["regions"] = grouped["regionfao"].map(split_codes)

    n_unweighted = int(grouped["wt"].isna().sum())
    if 0 < n_unweighted < len(grouped):
        warnings.warn(
            f"{n_unweighted} of {len(grouped)} stocks have no cost weight "
            "and are excluded from weighted statistics"
        )

    return StockPool.from_table(grouped)


def read_stock_table(path: Union[str, Path]) -> StockPool:
    """Read a raw upsides CSV file and prepare it into a StockPool."""
    raw = pd.read_csv(path, dtype={"regionfao": str, "speciescat": str})
    return prepare_stock_pool(raw)


def select_stocks(pool: StockPool, species: BycatchSpecies) -> StockPool:
    """Target stocks a bycatch species is exposed to.

    A stock is selected when it shares at least one FAO region with the
    species and, if the species lists target categories, its species
    category is among them. Empty species regions/categories match all.

    Raises
    ------
    SpeciesSimulationError
        If no stock is selected.
    """
    mask = np.ones(len(pool), dtype=bool)
    if species.regions:
        wanted = set(species.regions)
        mask &= pool._table["regions"].map(lambda r: bool(wanted.intersection(r))).to_numpy(
            dtype=bool
        )
    if species.categories:
        mask &= pool._table["speciescat"].isin(species.categories).to_numpy(dtype=bool)

    if not mask.any():
        raise SpeciesSimulationError(
            species.species,
            f"no target stocks in regions {species.regions} "
            f"and categories {species.categories}",
        )
    if mask.all():
        return pool
    return pool.subset(mask)


def stock_summary(pool: StockPool) -> pd.DataFrame:
    """Per species-category counts and median reductions of a pool."""
    return (
        pool.table.groupby(["speciescat", "speciescatname"], dropna=False)
        .agg(
            n_stocks=("idoriglumped", "size"),
            pctmey=("pctmey", "median"),
            pctmsy=("pctmsy", "median"),
            margc=("margc", "median"),
        )
        .reset_index()
    )
