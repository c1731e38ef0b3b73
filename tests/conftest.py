"""Shared fixtures: a small synthetic stock table and bycatch species."""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pybycatch.core.params import BycatchSpecies
from pybycatch.core.stocks import prepare_stock_pool


@pytest.fixture
def raw_stocks():
    """Five stocks with equal current costs and known reductions.

    Every stock has current cost 0.5 (weight 0.2). Reductions to MEY are
    10%..50% and to MSY 0%..40%. Stock s3 is listed under two FAO regions.
    """
    return pd.DataFrame(
        {
            "idoriglumped": ["s1", "s2", "s3", "s4", "s5"],
            "regionfao": ["21", "27", "21 27", "31", "27"],
            "speciescat": [31, 32, 33, 34, 35],
            "speciescatname": [
                "Flounders, halibuts, soles",
                "Cods, hakes, haddocks",
                "Miscellaneous coastal fishes",
                "Miscellaneous demersal fishes",
                "Herrings, sardines, anchovies",
            ],
            "marginalcost": [1.0] * 5,
            "beta": [1.0] * 5,
            "g": [0.5] * 5,
            "eqfvfmey": [2.0] * 5,
            "fvfmsy": [1.0] * 5,
            "pctredfmey": [10.0, 20.0, 30.0, 40.0, 50.0],
            "pctredfmsy": [0.0, 10.0, 20.0, 30.0, 40.0],
        }
    )


@pytest.fixture
def stock_pool(raw_stocks):
    """Prepared pool of the synthetic stocks."""
    return prepare_stock_pool(raw_stocks)


@pytest.fixture
def turtle():
    """Declining species needing a 25% bycatch reduction."""
    return BycatchSpecies("Loggerhead turtle", "turtle", delta=-0.25, fe=1.0)


@pytest.fixture
def albatross():
    """Declining species needing a 45% bycatch reduction."""
    return BycatchSpecies("Albatross", "bird", delta=-0.45, fe=1.0)


@pytest.fixture
def zero_mortality_species():
    """Species whose decline cannot be attributed to bycatch (fe == 0)."""
    return BycatchSpecies("Monk seal", "mammal", delta=-0.1, fe=0.0)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)
