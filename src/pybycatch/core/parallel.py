"""
Parallel driver running the species simulation over all species.

Each species is an independent task reading the shared, read-only stock
pool. Tasks run on a ``concurrent.futures`` pool (processes by default);
a failing species is recorded in the run report without cancelling the
others. Results are concatenated in species-name order so downstream
consumers see a deterministic table.

Example
-------
>>> from pybycatch.config import SimulationConfig
>>> from pybycatch.core.parallel import run_simulation
>>> config = SimulationConfig(n1=1000, n2=50, seed=42)
>>> run = run_simulation(species, pool, config, progress=log_progress)
>>> run.report.failures
{}
"""

from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from pybycatch.config import SimulationConfig
from pybycatch.core.errors import MissingInputError
from pybycatch.core.params import BycatchSpecies
from pybycatch.core.simulation import SpeciesResult, empty_results_frame, simulate_species
from pybycatch.core.stocks import StockPool
from pybycatch.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class RunReport:
    """Bookkeeping of a full run, persisted next to the output tables.

    Attributes
    ----------
    n1, n2 : int
        Draws and resamples per draw
    alpha : float
        Elasticity exponent
    uncertainty : str
        Uncertainty mode of the species parameters
    seed : int or None
        Run seed
    policies : tuple of str
        Reference policies evaluated
    excluded_draws : dict
        Species -> draws skipped because the transform was undefined
    failures : dict
        Species -> error message, for species whose task failed
    """

    n1: int
    n2: int
    alpha: float
    uncertainty: str
    seed: Optional[int]
    policies: Tuple[str, ...]
    excluded_draws: Dict[str, int] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def completed(self) -> List[str]:
        """Species whose task finished (possibly with every draw excluded)."""
        return sorted(self.excluded_draws)

    @property
    def fully_excluded(self) -> List[str]:
        """Species for which every draw was excluded."""
        return sorted(s for s, n in self.excluded_draws.items() if n >= self.n1)

    def to_dict(self) -> dict:
        return {
            "n1": self.n1,
            "n2": self.n2,
            "alpha": self.alpha,
            "uncertainty": self.uncertainty,
            "seed": self.seed,
            "policies": list(self.policies),
            "excluded_draws": dict(sorted(self.excluded_draws.items())),
            "fully_excluded": self.fully_excluded,
            "failures": dict(sorted(self.failures.items())),
        }


@dataclass
class RunResult:
    """Concatenated results table and run report."""

    results: pd.DataFrame
    report: RunReport

    def __repr__(self) -> str:
        return (
            f"RunResult(rows={len(self.results)}, "
            f"species={len(self.report.completed)}, "
            f"failures={len(self.report.failures)})"
        )


def log_progress(done: int, total: int, species: str) -> None:
    """Progress callback writing the completed fraction to the log."""
    logger.info(f"[{done}/{total}] {100.0 * done / total:.0f}% done ({species})")


def _run_species_task(
    species: BycatchSpecies, pool: StockPool, config: SimulationConfig
) -> SpeciesResult:
    return simulate_species(
        species,
        pool,
        n1=config.n1,
        n2=config.n2,
        alpha=config.alpha,
        uncertainty=config.uncertainty,
        seed=config.seed,
        resample_size=config.resample_size,
        policies=config.policies,
    )


def _make_executor(config: SimulationConfig, n_tasks: int):
    max_workers = config.max_workers or os.cpu_count() or 1
    max_workers = max(1, min(max_workers, n_tasks))
    if config.executor == "thread":
        return ThreadPoolExecutor(max_workers=max_workers)
    return ProcessPoolExecutor(max_workers=max_workers)


def run_simulation(
    species: List[BycatchSpecies],
    pool: StockPool,
    config: Optional[SimulationConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> RunResult:
    """Simulate every species, one independent task per species.

    Parameters
    ----------
    species : list of BycatchSpecies
        Species to simulate; names must be unique
    pool : StockPool
        Prepared target stock pool, shared read-only by all tasks
    config : SimulationConfig, optional
        Run parameters; defaults to ``SimulationConfig()``
    progress : callable, optional
        ``progress(done, total, species)`` called as each task finishes

    Returns
    -------
    RunResult
        Results of all successful species, sorted by species name, plus a
        report of excluded draws and failed species.

    Raises
    ------
    MissingInputError
        If there are no species or no stocks; nothing is run.
    """
    if config is None:
        config = SimulationConfig()
    if not species:
        raise MissingInputError("No bycatch species to simulate")
    if pool is None or len(pool) == 0:
        raise MissingInputError("Target stock pool is empty")

    names = [s.species for s in species]
    if len(set(names)) != len(names):
        raise ValueError("Species names must be unique within a run")

    report = RunReport(
        n1=config.n1,
        n2=config.n2,
        alpha=config.alpha,
        uncertainty=config.uncertainty,
        seed=config.seed,
        policies=tuple(config.policies),
    )
    finished: Dict[str, SpeciesResult] = {}
    total = len(species)
    done = 0

    def collect(name: str, get_result: Callable[[], SpeciesResult]) -> None:
        nonlocal done
        try:
            result = get_result()
        except Exception as e:
            report.failures[name] = f"{type(e).__name__}: {e}"
            logger.error(f"Species '{name}' failed: {e}")
        else:
            finished[name] = result
            report.excluded_draws[name] = result.n_excluded
        done += 1
        if progress is not None:
            progress(done, total, name)

    logger.info(
        f"Simulating {total} species (n1={config.n1}, n2={config.n2}, "
        f"alpha={config.alpha}, mode={config.uncertainty}, executor={config.executor})"
    )

    if config.executor == "serial":
        for sp in species:
            collect(sp.species, lambda sp=sp: _run_species_task(sp, pool, config))
    else:
        with _make_executor(config, total) as executor:
            future_to_name = {
                executor.submit(_run_species_task, sp, pool, config): sp.species
                for sp in species
            }
            for future in as_completed(future_to_name):
                collect(future_to_name[future], future.result)

    frames = [finished[name].results for name in sorted(finished)]
    frames = [f for f in frames if not f.empty]
    if frames:
        results = pd.concat(frames, ignore_index=True)
    else:
        results = empty_results_frame()

    if report.failures:
        logger.warning(
            f"{len(report.failures)} of {total} species failed: "
            + ", ".join(sorted(report.failures))
        )
    if report.fully_excluded:
        logger.warning(
            "Species with every draw excluded: " + ", ".join(report.fully_excluded)
        )

    return RunResult(results=results, report=report)
