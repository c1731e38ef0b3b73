"""
Unit tests for the elasticity transform.
"""

import math

import numpy as np
import pytest

from pybycatch.core.elasticity import (
    alpha_sensitivity_curve,
    bycatch_from_effort,
    bycatch_reduction,
    elasticity_grid,
    required_effort_reduction,
    required_effort_reduction_array,
)
from pybycatch.core.errors import UndefinedElasticityError


class TestRequiredEffortReduction:
    """Tests for required_effort_reduction function."""

    def test_half_reduction(self):
        """delta=-10, fe=20 at alpha=1 needs exactly half."""
        assert required_effort_reduction(-10, 20, alpha=1.0) == 0.5

    def test_clamped_at_one(self):
        """delta=-40, fe=10 would need 400%, capped at 100%."""
        assert required_effort_reduction(-40, 10, alpha=1.0) == 1.0

    @pytest.mark.parametrize("alpha", [0.5, 1.0, 2.0])
    def test_output_in_unit_interval(self, alpha):
        """For delta <= 0 and fe > 0 the result lies in [0, 1]."""
        for delta in np.linspace(-50, 0, 21):
            for fe in np.linspace(0.01, 50, 21):
                out = required_effort_reduction(delta, fe, alpha)
                assert 0.0 <= out <= 1.0

    @pytest.mark.parametrize("delta", [-10.0, 0.0, 5.0])
    def test_zero_fe_is_undefined(self, delta):
        """fe=0 raises instead of returning a number."""
        with pytest.raises(UndefinedElasticityError):
            required_effort_reduction(delta, 0.0)

    def test_nan_input_is_undefined(self):
        with pytest.raises(UndefinedElasticityError):
            required_effort_reduction(float("nan"), 1.0)

    def test_undefined_is_value_error(self):
        """Callers catching ValueError also see undefined transforms."""
        with pytest.raises(ValueError):
            bycatch_reduction(-1.0, 0.0)

    def test_alpha_two_needs_less_effort(self):
        """With alpha=2, halving bycatch needs 1 - sqrt(0.5) effort reduction."""
        out = required_effort_reduction(-10, 20, alpha=2.0)
        assert out == pytest.approx(1 - math.sqrt(0.5))

    def test_alpha_half_needs_more_effort(self):
        out = required_effort_reduction(-10, 20, alpha=0.5)
        assert out == pytest.approx(0.75)

    def test_invalid_alpha(self):
        with pytest.raises(ValueError):
            required_effort_reduction(-10, 20, alpha=0.0)


class TestVectorisedTransform:
    """Tests for required_effort_reduction_array."""

    def test_matches_scalar(self):
        delta = np.array([-10.0, -40.0, -1.0])
        fe = np.array([20.0, 10.0, 4.0])
        bycatch, effort, valid = required_effort_reduction_array(delta, fe, alpha=2.0)
        assert valid.all()
        for d, f, b, e in zip(delta, fe, bycatch, effort):
            assert b == pytest.approx(bycatch_reduction(d, f))
            assert e == pytest.approx(required_effort_reduction(d, f, 2.0))

    def test_marks_zero_fe_invalid(self):
        bycatch, effort, valid = required_effort_reduction_array(
            np.array([-1.0, -1.0]), np.array([0.0, 2.0])
        )
        assert valid.tolist() == [False, True]
        assert np.isnan(bycatch[0]) and np.isnan(effort[0])
        assert effort[1] == 0.5
        assert not np.isinf(effort).any()


class TestBycatchFromEffort:
    """Tests for the inverse map."""

    def test_inverse_of_required_reduction(self):
        effort = required_effort_reduction(-3, 10, alpha=2.0)
        assert bycatch_from_effort(effort, alpha=2.0) == pytest.approx(0.3)

    def test_half_effort_alpha_one(self):
        assert bycatch_from_effort(0.5, 1.0) == pytest.approx(0.5)

    def test_nan_propagates(self):
        assert np.isnan(bycatch_from_effort(np.nan, 1.0))


class TestGrids:
    """Tests for the heat-map surface and alpha curve."""

    def test_grid_shape_and_range(self):
        grid = elasticity_grid(n=20)
        assert len(grid) == 400
        z = grid["z"].dropna()
        assert z.between(0, 1).all()

    def test_grid_zero_fe_is_nan(self):
        grid = elasticity_grid(n=10)
        assert grid.loc[grid["fe"] == 0, "z"].isna().all()

    def test_alpha_curve_passes_through_half(self):
        curve = alpha_sensitivity_curve([1.0], effort_red=0.5)
        assert curve["bycatch_red"].iloc[0] == pytest.approx(0.5)

    def test_alpha_curve_increasing(self):
        curve = alpha_sensitivity_curve()
        assert np.all(np.diff(curve["bycatch_red"]) > 0)
