"""
Tests for the exception classes.

Species tasks may run in worker processes, so every exception must
survive a pickle round trip with its attributes and message intact.
"""

import pickle

import pytest

from pybycatch.core.errors import (
    BycatchError,
    MissingInputError,
    SpeciesSimulationError,
    UndefinedElasticityError,
)


def round_trip(exc):
    return pickle.loads(pickle.dumps(exc))


class TestPickling:
    """Tests for exceptions crossing process boundaries."""

    @pytest.mark.parametrize(
        "exc",
        [
            BycatchError("generic"),
            MissingInputError("Stock table is empty"),
            SpeciesSimulationError("Dugong", "no stocks"),
            UndefinedElasticityError(-0.1, 0.0),
            UndefinedElasticityError(float("nan"), 1.0, "missing delta"),
        ],
    )
    def test_round_trip_keeps_type_and_message(self, exc):
        copy = round_trip(exc)
        assert type(copy) is type(exc)
        assert str(copy) == str(exc)

    def test_species_error_attributes(self):
        copy = round_trip(SpeciesSimulationError("Dugong", "no stocks"))
        assert copy.species == "Dugong"
        assert copy.message == "no stocks"
        assert str(copy) == "Dugong: no stocks"

    def test_elasticity_error_attributes(self):
        copy = round_trip(UndefinedElasticityError(-0.1, 0.0))
        assert copy.delta == -0.1
        assert copy.fe == 0.0
        assert isinstance(copy, ValueError)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    def test_all_derive_from_base(self):
        for cls in (MissingInputError, SpeciesSimulationError, UndefinedElasticityError):
            assert issubclass(cls, BycatchError)
