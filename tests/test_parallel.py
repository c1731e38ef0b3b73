"""
Tests for the parallel driver.
"""

import pandas as pd
import pytest

from pybycatch.config import SimulationConfig
from pybycatch.core.errors import MissingInputError
from pybycatch.core.params import BycatchSpecies
from pybycatch.core.parallel import RunReport, run_simulation
from pybycatch.core.simulation import simulate_species


@pytest.fixture
def species_list(turtle, albatross, zero_mortality_species):
    return [turtle, albatross, zero_mortality_species]


class TestRunSimulation:
    """Tests for run_simulation function."""

    @pytest.mark.parametrize("executor", ["serial", "thread"])
    def test_matches_single_species_runs(self, species_list, stock_pool, executor):
        """Each species slice equals its standalone simulation."""
        config = SimulationConfig(n1=10, n2=5, seed=7, executor=executor, max_workers=2)
        run = run_simulation(species_list, stock_pool, config)
        for sp in species_list[:2]:
            expected = simulate_species(sp, stock_pool, n1=10, n2=5, seed=7).results
            got = run.results[run.results["species"] == sp.species].reset_index(drop=True)
            pd.testing.assert_frame_equal(got, expected)

    def test_thread_and_serial_agree(self, species_list, stock_pool):
        serial = run_simulation(
            species_list, stock_pool, SimulationConfig(n1=8, n2=4, seed=3, executor="serial")
        )
        threaded = run_simulation(
            species_list,
            stock_pool,
            SimulationConfig(n1=8, n2=4, seed=3, executor="thread", max_workers=3),
        )
        pd.testing.assert_frame_equal(serial.results, threaded.results)

    def test_process_pool(self, turtle, albatross, stock_pool):
        config = SimulationConfig(n1=5, n2=3, seed=11, executor="process", max_workers=2)
        run = run_simulation([turtle, albatross], stock_pool, config)
        assert len(run.results) == 2 * 5 * 3 * 2
        assert run.report.failures == {}

    def test_process_pool_matches_serial(self, species_list, stock_pool):
        serial = run_simulation(
            species_list, stock_pool, SimulationConfig(n1=6, n2=3, seed=5, executor="serial")
        )
        pooled = run_simulation(
            species_list,
            stock_pool,
            SimulationConfig(n1=6, n2=3, seed=5, executor="process", max_workers=2),
        )
        pd.testing.assert_frame_equal(serial.results, pooled.results)
        assert pooled.report.excluded_draws == serial.report.excluded_draws

    @pytest.mark.parametrize("max_workers", [1, 2])
    def test_failure_isolated_in_process_pool(self, turtle, albatross, stock_pool, max_workers):
        """A species failing in a worker process leaves its siblings intact."""
        orphan = BycatchSpecies("Dugong", "mammal", -0.1, 0.5, regions=("99",))
        config = SimulationConfig(
            n1=5, n2=2, seed=1, executor="process", max_workers=max_workers
        )
        run = run_simulation([orphan, turtle, albatross], stock_pool, config)
        assert list(run.report.failures) == ["Dugong"]
        assert "SpeciesSimulationError" in run.report.failures["Dugong"]
        assert "no target stocks" in run.report.failures["Dugong"]
        assert set(run.results["species"]) == {"Albatross", "Loggerhead turtle"}
        assert len(run.results) == 2 * 5 * 2 * 2

    def test_results_sorted_by_species(self, species_list, stock_pool):
        config = SimulationConfig(n1=4, n2=2, seed=1, executor="thread")
        run = run_simulation(species_list, stock_pool, config)
        names = run.results["species"].drop_duplicates().tolist()
        assert names == ["Albatross", "Loggerhead turtle"]

    def test_failure_isolated(self, turtle, stock_pool):
        """A species without matching stocks fails alone."""
        orphan = BycatchSpecies("Dugong", "mammal", -0.1, 0.5, regions=("99",))
        config = SimulationConfig(n1=5, n2=2, seed=1, executor="thread")
        run = run_simulation([orphan, turtle], stock_pool, config)
        assert list(run.report.failures) == ["Dugong"]
        assert "SpeciesSimulationError" in run.report.failures["Dugong"]
        assert set(run.results["species"]) == {"Loggerhead turtle"}
        assert len(run.results) == 5 * 2 * 2

    def test_fully_excluded_reported(self, species_list, stock_pool):
        config = SimulationConfig(n1=6, n2=2, seed=1, executor="serial")
        run = run_simulation(species_list, stock_pool, config)
        assert run.report.excluded_draws["Monk seal"] == 6
        assert run.report.fully_excluded == ["Monk seal"]
        assert "Monk seal" not in set(run.results["species"])
        assert run.report.completed == ["Albatross", "Loggerhead turtle", "Monk seal"]

    def test_progress_callback(self, species_list, stock_pool):
        calls = []
        config = SimulationConfig(n1=3, n2=2, seed=1, executor="thread")
        run_simulation(
            species_list, stock_pool, config,
            progress=lambda done, total, name: calls.append((done, total, name)),
        )
        assert [c[0] for c in calls] == [1, 2, 3]
        assert all(c[1] == 3 for c in calls)
        assert sorted(c[2] for c in calls) == sorted(s.species for s in species_list)

    def test_all_failed_gives_empty_table(self, stock_pool):
        orphan = BycatchSpecies("Dugong", "mammal", -0.1, 0.5, regions=("99",))
        run = run_simulation([orphan], stock_pool, SimulationConfig(n1=2, n2=2, executor="serial"))
        assert run.results.empty
        assert "cost" in run.results.columns

    def test_no_species_is_fatal(self, stock_pool):
        with pytest.raises(MissingInputError):
            run_simulation([], stock_pool)

    def test_empty_pool_is_fatal(self, turtle, stock_pool):
        with pytest.raises(MissingInputError):
            run_simulation([turtle], stock_pool.subset([False] * len(stock_pool)))

    def test_duplicate_names_rejected(self, turtle, stock_pool):
        with pytest.raises(ValueError):
            run_simulation([turtle, turtle], stock_pool, SimulationConfig(executor="serial"))


class TestRunReport:
    """Tests for RunReport."""

    def test_to_dict(self):
        report = RunReport(
            n1=10, n2=5, alpha=0.5, uncertainty="uncert", seed=1,
            policies=("MEY", "MSY"),
            excluded_draws={"b": 10, "a": 2},
            failures={"c": "boom"},
        )
        data = report.to_dict()
        assert list(data["excluded_draws"]) == ["a", "b"]
        assert data["fully_excluded"] == ["b"]
        assert data["policies"] == ["MEY", "MSY"]
        assert data["failures"] == {"c": "boom"}
