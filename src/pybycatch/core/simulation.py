"""
Monte Carlo simulation engine for a single bycatch species.

Each species run draws ``n1`` states of the world (decline rate ``delta``
and bycatch mortality ``fe``), maps every draw through the elasticity
transform onto a required reduction in target-stock effort, and resolves
that requirement against ``n2`` resamples of the species' target stocks.

States of a run:

INIT      select the stocks the species is exposed to
DRAW      sample delta and fe (n1 times); draws with an undefined
          transform (fe == 0) are skipped and counted
RESAMPLE  score n2 resamples per valid draw
DONE      return one row per (draw, resample, policy)
"""

from __future__ import annotations

import zlib
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from pybycatch.core.constants import (
    DEFAULT_ALPHA,
    POLICIES,
    RESULT_COLUMNS,
    UNCERT_NONE,
    UNCERTAINTY_MODES,
)
from pybycatch.core.elasticity import required_effort_reduction_array
from pybycatch.core.errors import SpeciesSimulationError
from pybycatch.core.params import BycatchSpecies
from pybycatch.core.resample import resample_stocks
from pybycatch.core.stocks import StockPool, select_stocks
from pybycatch.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SpeciesResult:
    """Output of one species simulation.

    Attributes
    ----------
    species : str
        Species name
    results : pd.DataFrame
        Results table slice with columns ``RESULT_COLUMNS``
    n_draws : int
        Draws attempted (n1)
    n_excluded : int
        Draws skipped because the elasticity transform was undefined
    """

    species: str
    results: pd.DataFrame
    n_draws: int
    n_excluded: int

    @property
    def n_valid(self) -> int:
        return self.n_draws - self.n_excluded

    def __repr__(self) -> str:
        return (
            f"SpeciesResult(species='{self.species}', rows={len(self.results)}, "
            f"draws={self.n_draws}, excluded={self.n_excluded})"
        )


def empty_results_frame() -> pd.DataFrame:
    """Results table with no rows and the stable column dtypes."""
    return pd.DataFrame(
        {
            "species": pd.Series(dtype=object),
            "policy": pd.Series(dtype=object),
            "draw": pd.Series(dtype=np.int64),
            "resample": pd.Series(dtype=np.int64),
            **{c: pd.Series(dtype=float) for c in RESULT_COLUMNS[4:]},
        }
    )[list(RESULT_COLUMNS)]


def species_seed_sequence(
    seed: Optional[int], species: str
) -> np.random.SeedSequence:
    """Independent random stream for one species.

    The stream depends only on the run seed and the species name, so a
    species gets the same draws whatever other species share the run and
    in whatever order tasks are scheduled.
    """
    key = zlib.crc32(species.encode("utf-8"))
    if seed is None:
        return np.random.SeedSequence(spawn_key=(key,))
    return np.random.SeedSequence(entropy=[int(seed), key])


def draw_parameters(
    species: BycatchSpecies,
    n1: int,
    uncertainty: str,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample delta and fe for ``n1`` draws.

    In 'nouncert' mode the point estimates are reused on every draw; in
    'uncert' mode both are uniform within the species' bounds.
    """
    if uncertainty not in UNCERTAINTY_MODES:
        raise ValueError(f"Unknown uncertainty mode '{uncertainty}'")
    if np.isnan(species.delta) or np.isnan(species.fe):
        raise SpeciesSimulationError(species.species, "missing delta or fe")

    if uncertainty == UNCERT_NONE:
        return np.full(n1, float(species.delta)), np.full(n1, float(species.fe))

    delta_lo, delta_hi = species.delta_bounds()
    fe_lo, fe_hi = species.fe_bounds()
    delta = rng.uniform(delta_lo, delta_hi, size=n1)
    fe = rng.uniform(fe_lo, fe_hi, size=n1)
    return delta, fe


def simulate_species(
    species: BycatchSpecies,
    pool: StockPool,
    n1: int,
    n2: int,
    alpha: float = DEFAULT_ALPHA,
    uncertainty: str = UNCERT_NONE,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    resample_size: Optional[int] = None,
    policies: Sequence[str] = POLICIES,
) -> SpeciesResult:
    """Run the two-level Monte Carlo simulation for one species.

    Parameters
    ----------
    species : BycatchSpecies
        Species parameters
    pool : StockPool
        Full target stock pool; the species' stocks are selected from it
    n1 : int
        Draws (states of the world)
    n2 : int
        Resamples over target stocks per draw
    alpha : float, default=1.0
        Elasticity of bycatch mortality to target-stock effort
    uncertainty : str, default='nouncert'
        'nouncert' or 'uncert', see ``draw_parameters``
    seed : int, optional
        Run seed; combined with the species name into the task's stream
    rng : np.random.Generator, optional
        Explicit random stream, overrides ``seed``
    resample_size : int, optional
        Stocks per resample, defaults to the number of selected stocks
    policies : sequence of str
        Reference policies to score

    Returns
    -------
    SpeciesResult
        Rows ordered by draw, resample and policy. Empty (with a warning
        logged) when every draw was excluded.

    Raises
    ------
    SpeciesSimulationError
        If the species has no usable parameters or no target stocks.
    """
    if n1 < 1 or n2 < 1:
        raise ValueError(f"n1 and n2 must be >= 1, got n1={n1}, n2={n2}")
    policies = tuple(policies)

    # INIT
    if rng is None:
        rng = np.random.default_rng(species_seed_sequence(seed, species.species))
    if len(pool) == 0:
        raise SpeciesSimulationError(species.species, "empty stock pool")
    stocks = select_stocks(pool, species)
    logger.debug(
        f"{species.species}: {len(stocks)} target stocks, n1={n1}, n2={n2}, "
        f"alpha={alpha}, mode={uncertainty}"
    )

    # DRAW
    delta, fe = draw_parameters(species, n1, uncertainty, rng)
    bycatch_red, target_red, valid = required_effort_reduction_array(delta, fe, alpha)
    n_excluded = int((~valid).sum())
    if n_excluded:
        logger.debug(f"{species.species}: {n_excluded} of {n1} draws excluded")

    if not valid.any():
        logger.warning(
            f"{species.species}: all {n1} draws excluded "
            "(undefined elasticity transform), no results"
        )
        return SpeciesResult(species.species, empty_results_frame(), n1, n_excluded)

    # RESAMPLE
    n_pol = len(policies)
    per_draw = n2 * n_pol
    columns = {name: [] for name in ("prop_meeting", "policy_red", "cost")}
    draw_idx = np.flatnonzero(valid)
    for i in draw_idx:
        outcomes = resample_stocks(
            stocks,
            target_red[i],
            rng,
            size=resample_size,
            n_resamples=n2,
            policies=policies,
            alpha=alpha,
        )
        for name in columns:
            # (n2, n_policies) -> resample-major, policy-minor
            stacked = np.column_stack([getattr(outcomes[p], name) for p in policies])
            columns[name].append(stacked.ravel())

    # DONE
    n_rows = len(draw_idx) * per_draw
    results = pd.DataFrame(
        {
            "species": np.full(n_rows, species.species, dtype=object),
            "policy": np.tile(np.asarray(policies, dtype=object), len(draw_idx) * n2),
            "draw": np.repeat(draw_idx.astype(np.int64), per_draw),
            "resample": np.tile(np.repeat(np.arange(n2, dtype=np.int64), n_pol), len(draw_idx)),
            "delta": np.repeat(delta[draw_idx], per_draw),
            "fe": np.repeat(fe[draw_idx], per_draw),
            "bycatch_red": np.repeat(bycatch_red[draw_idx], per_draw),
            "target_red": np.repeat(target_red[draw_idx], per_draw),
            **{name: np.concatenate(parts) for name, parts in columns.items()},
        }
    )[list(RESULT_COLUMNS)]

    logger.info(
        f"{species.species}: {len(draw_idx)} valid draws, {len(results)} rows"
    )
    return SpeciesResult(species.species, results, n1, n_excluded)
