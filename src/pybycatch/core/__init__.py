"""
Core module for PyBycatch.

Contains the elasticity transform, the target stock pool, the Monte Carlo
simulation engine, the parallel driver and the summary statistics.
"""

from pybycatch.core.params import (
    BycatchSpecies,
    species_from_frame,
    species_to_frame,
    read_species,
    check_species_params,
)
from pybycatch.core.stocks import (
    StockPool,
    prepare_stock_pool,
    read_stock_table,
    select_stocks,
)
from pybycatch.core.elasticity import (
    bycatch_reduction,
    required_effort_reduction,
    bycatch_from_effort,
)
from pybycatch.core.resample import ResampleOutcome, resample_stocks
from pybycatch.core.simulation import SpeciesResult, simulate_species
from pybycatch.core.parallel import RunReport, RunResult, run_simulation
from pybycatch.core.summary import summarize_results
from pybycatch.core.upsides import region_upsides, global_upsides, read_taxonomy

__all__ = [
    # Parameters
    "BycatchSpecies",
    "species_from_frame",
    "species_to_frame",
    "read_species",
    "check_species_params",
    # Stocks
    "StockPool",
    "prepare_stock_pool",
    "read_stock_table",
    "select_stocks",
    # Elasticity
    "bycatch_reduction",
    "required_effort_reduction",
    "bycatch_from_effort",
    # Simulation
    "ResampleOutcome",
    "resample_stocks",
    "SpeciesResult",
    "simulate_species",
    "RunReport",
    "RunResult",
    "run_simulation",
    # Summaries
    "summarize_results",
    "region_upsides",
    "global_upsides",
    "read_taxonomy",
]
