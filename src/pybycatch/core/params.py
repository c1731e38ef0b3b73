"""
Bycatch species parameters for PyBycatch.

This module contains the BycatchSpecies class and functions for building,
reading and validating the per-species decline and mortality parameters.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from pybycatch.core.constants import (
    DEFAULT_PARAM_SPREAD,
    SPECIES_REQUIRED_COLUMNS,
)
from pybycatch.core.errors import MissingInputError
from pybycatch.io.utils import safe_float, split_codes


@dataclass(frozen=True)
class BycatchSpecies:
    """Parameters of one bycatch (non-target) species.

    Attributes
    ----------
    species : str
        Species (population) name, unique within a run.
    clade : str
        Taxonomic group tag, e.g. 'mammal', 'bird', 'turtle'.
    delta : float
        Population growth rate; negative when declining.
    fe : float
        Bycatch mortality rate (non-negative).
    delta_lo, delta_hi, fe_lo, fe_hi : float, optional
        Uncertainty bounds. When missing, a uniform band of +/-25% around
        the point estimate is used.
    regions : tuple of str
        FAO major fishing areas the species overlaps. Empty for all.
    categories : tuple of str
        Target species-category codes caught alongside. Empty for all.
    silhouette : str, optional
        Display metadata (figure silhouette file stem).

    Examples
    --------
    >>> sp = BycatchSpecies("Vaquita", "mammal", delta=-0.3, fe=0.35,
    ...                     regions=("77",))
    >>> sp.delta_bounds()
    (-0.375, -0.225)
    """

    species: str
    clade: str
    delta: float
    fe: float
    delta_lo: Optional[float] = None
    delta_hi: Optional[float] = None
    fe_lo: Optional[float] = None
    fe_hi: Optional[float] = None
    regions: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    silhouette: Optional[str] = None

    def delta_bounds(self, spread: float = DEFAULT_PARAM_SPREAD) -> Tuple[float, float]:
        """Lower and upper bounds of the decline rate."""
        return _bounds(self.delta, self.delta_lo, self.delta_hi, spread)

    def fe_bounds(self, spread: float = DEFAULT_PARAM_SPREAD) -> Tuple[float, float]:
        """Lower and upper bounds of the bycatch mortality rate."""
        lo, hi = _bounds(self.fe, self.fe_lo, self.fe_hi, spread)
        return max(lo, 0.0), max(hi, 0.0)


def _bounds(
    point: float, lo: Optional[float], hi: Optional[float], spread: float
) -> Tuple[float, float]:
    a = point * (1.0 - spread)
    b = point * (1.0 + spread)
    default_lo, default_hi = min(a, b), max(a, b)
    lo = default_lo if lo is None else lo
    hi = default_hi if hi is None else hi
    if lo > hi:
        lo, hi = hi, lo
    return lo, hi


def species_from_frame(df: pd.DataFrame) -> List[BycatchSpecies]:
    """Build BycatchSpecies objects from a species table.

    Parameters
    ----------
    df : pd.DataFrame
        Table with columns ``species``, ``clade``, ``delta``, ``fe`` and
        optionally ``delta_lo``, ``delta_hi``, ``fe_lo``, ``fe_hi``,
        ``regionfao``, ``speciescat``, ``silhouette``.

    Returns
    -------
    list of BycatchSpecies
        One entry per row, in table order.

    Raises
    ------
    MissingInputError
        If a required column is absent.
    ValueError
        If species names are duplicated.
    """
    missing = [c for c in SPECIES_REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise MissingInputError(f"Species table is missing columns: {missing}")

    names = df["species"].astype(str)
    dupes = names[names.duplicated()].unique().tolist()
    if dupes:
        raise ValueError(f"Duplicated species names: {dupes}")

    def optional(row, col):
        return safe_float(row[col]) if col in row.index else None

    species = []
    for _, row in df.iterrows():
        delta = safe_float(row["delta"])
        fe = safe_float(row["fe"])
        species.append(
            BycatchSpecies(
                species=str(row["species"]),
                clade=str(row["clade"]),
                delta=np.nan if delta is None else delta,
                fe=np.nan if fe is None else fe,
                delta_lo=optional(row, "delta_lo"),
                delta_hi=optional(row, "delta_hi"),
                fe_lo=optional(row, "fe_lo"),
                fe_hi=optional(row, "fe_hi"),
                regions=split_codes(row["regionfao"]) if "regionfao" in row.index else (),
                categories=(
                    split_codes(row["speciescat"]) if "speciescat" in row.index else ()
                ),
                silhouette=(
                    str(row["silhouette"])
                    if "silhouette" in row.index and pd.notna(row["silhouette"])
                    else None
                ),
            )
        )
    return species


def species_to_frame(species: List[BycatchSpecies]) -> pd.DataFrame:
    """Inverse of ``species_from_frame``; multi-code fields are space separated."""
    return pd.DataFrame(
        {
            "species": [s.species for s in species],
            "clade": [s.clade for s in species],
            "delta": [s.delta for s in species],
            "fe": [s.fe for s in species],
            "delta_lo": [s.delta_lo for s in species],
            "delta_hi": [s.delta_hi for s in species],
            "fe_lo": [s.fe_lo for s in species],
            "fe_hi": [s.fe_hi for s in species],
            "regionfao": [" ".join(s.regions) for s in species],
            "speciescat": [" ".join(s.categories) for s in species],
            "silhouette": [s.silhouette for s in species],
        }
    )


def read_species(path: Union[str, Path]) -> List[BycatchSpecies]:
    """Read bycatch species parameters from a CSV file."""
    df = pd.read_csv(path, dtype={"regionfao": str, "speciescat": str})
    return species_from_frame(df)


def check_species_params(species: List[BycatchSpecies]) -> bool:
    """Check species parameters for values the simulation cannot use well.

    Returns
    -------
    bool
        True if no issue was found.

    Raises
    ------
    warnings.warn
        For each issue found.
    """
    n_warnings = 0

    for sp in species:
        if np.isnan(sp.delta) or np.isnan(sp.fe):
            warnings.warn(f"{sp.species}: missing delta or fe")
            n_warnings += 1
            continue
        if sp.delta > 0:
            warnings.warn(
                f"{sp.species}: delta={sp.delta} is positive (population not declining)"
            )
            n_warnings += 1
        if sp.fe < 0:
            warnings.warn(f"{sp.species}: negative bycatch mortality fe={sp.fe}")
            n_warnings += 1
        elif sp.fe == 0:
            warnings.warn(
                f"{sp.species}: fe=0, every draw will be excluded from the simulation"
            )
            n_warnings += 1

    return n_warnings == 0
