"""
Tests for summary statistics of simulation results.
"""

import numpy as np
import pandas as pd
import pytest

from pybycatch.core.summary import (
    draw_level_results,
    quantile_label,
    summarize_results,
    summary_columns,
)


def make_results(species="A", policy="MEY", values=None, n=10):
    """Synthetic results rows with one value sequence reused for all metrics."""
    if values is None:
        values = np.linspace(0.0, 0.9, n)
    values = np.asarray(values, dtype=float)
    n = len(values)
    return pd.DataFrame(
        {
            "species": species,
            "policy": policy,
            "draw": np.arange(n),
            "resample": 0,
            "delta": -0.1,
            "fe": 0.5,
            "bycatch_red": 0.2,
            "target_red": 0.2,
            "prop_meeting": values,
            "policy_red": values,
            "cost": values,
        }
    )


class TestQuantileLabel:
    """Tests for quantile column naming."""

    def test_labels(self):
        assert quantile_label(0.1) == "q10"
        assert quantile_label(0.5) == "q50"
        assert quantile_label(0.9) == "q90"
        assert quantile_label(0.025) == "q2.5"

    def test_columns(self):
        cols = summary_columns((0.5,))
        assert cols[:5] == ["species", "policy", "n", "n_excluded", "prob_sufficient"]
        assert "cost_mean" in cols and "cost_q50" in cols


class TestSummarizeResults:
    """Tests for summarize_results function."""

    def test_one_row_per_species_policy(self):
        df = pd.concat(
            [
                make_results("B", "MSY"),
                make_results("A", "MEY"),
                make_results("A", "MSY"),
            ]
        )
        summary = summarize_results(df)
        assert list(zip(summary["species"], summary["policy"])) == [
            ("A", "MEY"),
            ("A", "MSY"),
            ("B", "MSY"),
        ]
        assert summary["n"].tolist() == [10, 10, 10]

    def test_mean_and_quantiles(self):
        summary = summarize_results(make_results(values=np.arange(11) / 10.0))
        row = summary.iloc[0]
        assert row["cost_mean"] == pytest.approx(0.5)
        assert row["cost_q10"] == pytest.approx(0.1)
        assert row["cost_q50"] == pytest.approx(0.5)
        assert row["cost_q90"] == pytest.approx(0.9)

    def test_missing_values_excluded(self):
        """One NaN among ten values gives the mean of the other nine."""
        values = np.arange(10, dtype=float)
        values[4] = np.nan
        summary = summarize_results(make_results(values=values))
        expected = np.delete(np.arange(10, dtype=float), 4).mean()
        assert summary.loc[0, "cost_mean"] == pytest.approx(expected)
        assert summary.loc[0, "n"] == 10

    def test_all_missing_metric_is_nan(self):
        summary = summarize_results(make_results(values=[np.nan] * 4))
        assert np.isnan(summary.loc[0, "cost_mean"])
        assert np.isnan(summary.loc[0, "cost_q50"])
        assert np.isnan(summary.loc[0, "prob_sufficient"])

    def test_row_order_does_not_matter(self):
        rng = np.random.default_rng(0)
        df = pd.concat(
            [
                make_results("A", "MEY", rng.random(200)),
                make_results("A", "MSY", rng.random(200)),
            ],
            ignore_index=True,
        )
        shuffled = df.sample(frac=1.0, random_state=3)
        pd.testing.assert_frame_equal(summarize_results(df), summarize_results(shuffled))

    def test_prob_sufficient(self):
        """Share of rows where the policy delivers the required reduction."""
        df = make_results(values=[0.1, 0.2, 0.3, 0.4])
        summary = summarize_results(df)
        assert summary.loc[0, "prob_sufficient"] == pytest.approx(0.75)

    def test_filters(self):
        df = pd.concat([make_results("A", "MEY"), make_results("B", "MSY")])
        assert summarize_results(df, species="A")["species"].tolist() == ["A"]
        assert summarize_results(df, policy="MSY")["species"].tolist() == ["B"]
        assert summarize_results(df, species=["A", "B"], policy="MEY")["species"].tolist() == ["A"]

    def test_excluded_draws_copied(self):
        summary = summarize_results(make_results(), excluded_draws={"A": 3})
        assert summary.loc[0, "n_excluded"] == 3
        assert summary["n_excluded"].dtype == np.int64

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="policy"):
            summarize_results(make_results(), policy="OA")

    def test_missing_columns(self):
        with pytest.raises(ValueError):
            summarize_results(make_results().drop(columns=["cost"]))

    def test_invalid_quantiles(self):
        with pytest.raises(ValueError):
            summarize_results(make_results(), quantiles=(0.5, 1.5))

    def test_empty_results(self):
        summary = summarize_results(make_results().iloc[0:0])
        assert summary.empty
        assert list(summary.columns) == summary_columns()


class TestDrawLevelResults:
    """Tests for draw_level_results function."""

    def test_averages_resamples(self):
        df = pd.concat([make_results(values=[0.0, 1.0]), make_results(values=[1.0, 0.0])])
        draws = draw_level_results(df)
        assert len(draws) == 2
        assert np.allclose(draws["cost"], 0.5)
