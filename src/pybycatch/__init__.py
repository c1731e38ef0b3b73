"""
PyBycatch - Bycatch reductions from rebuilding target fisheries

Monte Carlo estimates of how reducing fishing effort on target stocks
propagates into reduced bycatch mortality of non-target species, and what
economic cost such reductions impose.
"""

__version__ = "0.1.0"
__author__ = "PyBycatch Development Team"

# Core imports
from pybycatch.core.params import (
    BycatchSpecies,
    read_species,
    check_species_params,
)
from pybycatch.core.stocks import StockPool, prepare_stock_pool, read_stock_table
from pybycatch.core.elasticity import required_effort_reduction
from pybycatch.core.simulation import SpeciesResult, simulate_species
from pybycatch.core.parallel import RunReport, RunResult, run_simulation
from pybycatch.core.summary import summarize_results
from pybycatch.config import SimulationConfig, PlotTheme

__all__ = [
    # Version
    "__version__",
    "__author__",
    # Inputs
    "BycatchSpecies",
    "read_species",
    "check_species_params",
    "StockPool",
    "prepare_stock_pool",
    "read_stock_table",
    # Simulation
    "required_effort_reduction",
    "SpeciesResult",
    "simulate_species",
    "RunReport",
    "RunResult",
    "run_simulation",
    "summarize_results",
    # Configuration
    "SimulationConfig",
    "PlotTheme",
]
