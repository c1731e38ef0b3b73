"""
Fishery upsides by FAO region.

Aggregates the prepared stock pool into the effort reductions needed to
move each FAO major fishing area to MEY or MSY, the data behind the
regional maps of the analysis.

A stock listed under several FAO regions is fanned out to one row per
region and contributes its full costs to each of them; totals summed over
regions therefore exceed pool totals. Within a region costs are summed,
not averaged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from pybycatch.core.errors import MissingInputError
from pybycatch.core.stocks import StockPool
from pybycatch.io.utils import normalize_code

# Columns summed within a region after fan-out
REGION_SUM_COLUMNS = ("cstcurr", "cstmey", "cstmsy", "wt", "wtpctmey", "wtpctmsy")


def read_taxonomy(path: Union[str, Path]) -> pd.DataFrame:
    """Read the species-category to taxonomic-group mapping.

    The file needs columns ``speciescat`` and ``taxonomy``; other columns
    (e.g. ``speciescatname``) are kept. Category codes are normalised the
    way the stock table normalises them.
    """
    df = pd.read_csv(path, dtype={"speciescat": str})
    missing = [c for c in ("speciescat", "taxonomy") if c not in df.columns]
    if missing:
        raise MissingInputError(f"Taxonomy table is missing columns: {missing}")
    df["speciescat"] = df["speciescat"].map(normalize_code)
    df = df.dropna(subset=["speciescat"]).drop_duplicates("speciescat")
    return df.reset_index(drop=True)


def _table(pool: Union[StockPool, pd.DataFrame]) -> pd.DataFrame:
    return pool.table if isinstance(pool, StockPool) else pool


def explode_regions(pool: Union[StockPool, pd.DataFrame]) -> pd.DataFrame:
    """One row per (stock, FAO region); stocks without a region are dropped."""
    df = _table(pool).copy()
    df["regionfao"] = df["regions"].map(list)
    df = df.explode("regionfao")
    df = df[df["regionfao"].notna()]
    return df.drop(columns=["regions"]).reset_index(drop=True)


def _relative_reductions(df: pd.DataFrame) -> pd.DataFrame:
    cstcurr = df["cstcurr"].where(df["cstcurr"] > 0)
    df["avpctmey"] = 100.0 * (1.0 - df["cstmey"] / cstcurr)
    df["avpctmsy"] = 100.0 * (1.0 - df["cstmsy"] / cstcurr)
    for col in ("avpctmey", "avpctmsy"):
        df[col] = df[col].where(np.isfinite(df[col]))
    return df


def region_upsides(
    pool: Union[StockPool, pd.DataFrame],
    taxonomy: Optional[pd.DataFrame] = None,
    exclude_taxonomy: str = "Not Included",
) -> pd.DataFrame:
    """Summed costs and relative effort reductions per FAO region.

    Parameters
    ----------
    pool : StockPool or pd.DataFrame
        Prepared stock pool (or its table)
    taxonomy : pd.DataFrame, optional
        Mapping with columns ``speciescat`` and ``taxonomy``. When given,
        results are also grouped by taxonomy and rows labelled
        ``exclude_taxonomy`` are dropped.
    exclude_taxonomy : str
        Taxonomy label to leave out

    Returns
    -------
    pd.DataFrame
        Columns ``regionfao`` (and ``taxonomy``), ``n_stocks``, the summed
        ``REGION_SUM_COLUMNS`` and ``avpctmey``/``avpctmsy``
        (``100 * (1 - cost at target / current cost)``).
    """
    df = explode_regions(pool)
    keys = ["regionfao"]
    if taxonomy is not None:
        tax = taxonomy[["speciescat", "taxonomy"]].copy()
        tax["speciescat"] = tax["speciescat"].astype(str)
        df = df.assign(speciescat=df["speciescat"].astype(str)).merge(
            tax, on="speciescat", how="left"
        )
        df = df[df["taxonomy"].notna() & (df["taxonomy"] != exclude_taxonomy)]
        keys = ["taxonomy", "regionfao"]

    grouped = df.groupby(keys, sort=True)
    out = grouped[list(REGION_SUM_COLUMNS)].sum(min_count=1)
    out.insert(0, "n_stocks", grouped.size())
    out = out.reset_index()
    return _relative_reductions(out)


def global_upsides(pool: Union[StockPool, pd.DataFrame]) -> pd.Series:
    """Pool-wide effort reductions to MEY and MSY.

    Returns
    -------
    pd.Series
        ``wtpctmey``/``wtpctmsy``: current-cost weighted mean of the stock
        reductions; ``avpctmey``/``avpctmsy``: reductions implied by total
        costs at target relative to total current cost.
    """
    df = _table(pool)
    totals = df[list(REGION_SUM_COLUMNS)].sum(min_count=1)
    out = pd.DataFrame([totals])
    out = _relative_reductions(out)
    return out.iloc[0][["wtpctmey", "wtpctmsy", "avpctmey", "avpctmsy"]].astype(float)
