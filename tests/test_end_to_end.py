"""
End-to-end test: species and stocks in, summary table out.

With equal stock weights and alpha = 1 the expected outcomes have closed
forms. For a required reduction r and MEY reductions 10%..50%:

- prop_meeting -> share of stocks with reduction >= r
- policy_red   -> mean stock reduction (0.3)
- cost         -> mean shortfall max(r - p, 0) over the stocks
"""

import numpy as np
import pytest

from pybycatch.config import SimulationConfig
from pybycatch.core.parallel import run_simulation
from pybycatch.core.summary import summarize_results


@pytest.fixture
def summary(turtle, albatross, stock_pool):
    config = SimulationConfig(n1=100, n2=10, alpha=1.0, seed=2024, executor="serial")
    run = run_simulation([turtle, albatross], stock_pool, config)
    assert len(run.results) == 2 * 100 * 10 * 2
    return summarize_results(run.results, excluded_draws=run.report.excluded_draws)


def row(summary, species, policy):
    match = summary[(summary["species"] == species) & (summary["policy"] == policy)]
    assert len(match) == 1
    return match.iloc[0]


class TestEndToEnd:
    """Monte Carlo estimates against their closed forms."""

    def test_required_reduction(self, summary):
        assert row(summary, "Loggerhead turtle", "MEY")["bycatch_red_mean"] == pytest.approx(0.25)
        assert row(summary, "Albatross", "MSY")["target_red_mean"] == pytest.approx(0.45)

    def test_share_of_stocks_meeting(self, summary):
        assert row(summary, "Loggerhead turtle", "MEY")["prop_meeting_mean"] == pytest.approx(0.6, abs=0.03)
        assert row(summary, "Loggerhead turtle", "MSY")["prop_meeting_mean"] == pytest.approx(0.4, abs=0.03)
        assert row(summary, "Albatross", "MEY")["prop_meeting_mean"] == pytest.approx(0.2, abs=0.03)

    def test_policy_reduction(self, summary):
        assert row(summary, "Loggerhead turtle", "MEY")["policy_red_mean"] == pytest.approx(0.3, abs=0.01)
        assert row(summary, "Albatross", "MSY")["policy_red_mean"] == pytest.approx(0.2, abs=0.01)

    def test_cost(self, summary):
        # Shortfalls 0.15 and 0.05 over five stocks
        assert row(summary, "Loggerhead turtle", "MEY")["cost_mean"] == pytest.approx(0.04, abs=0.01)
        # Shortfalls 0.35, 0.25, 0.15, 0.05 over five stocks
        assert row(summary, "Albatross", "MEY")["cost_mean"] == pytest.approx(0.16, abs=0.01)

    def test_summary_shape(self, summary):
        assert len(summary) == 4
        assert (summary["n"] == 1000).all()
        assert (summary["n_excluded"] == 0).all()
        assert summary["prob_sufficient"].between(0, 1).all()
        # The MSY reductions average 20%, short of the albatross' 45%
        assert row(summary, "Albatross", "MSY")["prob_sufficient"] == 0.0

    def test_quantiles_ordered(self, summary):
        for metric in ("prop_meeting", "policy_red", "cost"):
            assert np.all(summary[f"{metric}_q10"] <= summary[f"{metric}_q50"])
            assert np.all(summary[f"{metric}_q50"] <= summary[f"{metric}_q90"])
