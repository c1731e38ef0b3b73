"""Constants and column definitions for bycatch simulations.

This module centralizes the column names, reference policies and default
sampling parameters used throughout PyBycatch, so that the results and
summary tables keep a stable layout for downstream consumers.
"""

# ============================================================================
# REFERENCE POLICIES
# ============================================================================

POLICY_MEY = "MEY"  # Maximum Economic Yield
POLICY_MSY = "MSY"  # Maximum Sustainable Yield
POLICIES = (POLICY_MEY, POLICY_MSY)

# Stock pool column holding the % effort reduction needed to reach each policy
POLICY_REDUCTION_COLUMNS = {
    POLICY_MEY: "pctmey",
    POLICY_MSY: "pctmsy",
}

# ============================================================================
# UNCERTAINTY MODES
# ============================================================================

UNCERT_NONE = "nouncert"  # Point estimates of delta and fe
UNCERT_DRAWS = "uncert"  # delta and fe drawn from their uncertainty bounds
UNCERTAINTY_MODES = (UNCERT_NONE, UNCERT_DRAWS)

# Half-width of the default uniform band around point estimates
DEFAULT_PARAM_SPREAD = 0.25

# ============================================================================
# SAMPLING DEFAULTS
# ============================================================================

DEFAULT_N1 = 10000  # States of the world per species
DEFAULT_N2 = 100  # Resamples over target stocks per state of the world
DEFAULT_ALPHA = 1.0  # Elasticity of bycatch to target-stock effort
DEFAULT_QUANTILES = (0.1, 0.5, 0.9)

EXECUTOR_TYPES = ("process", "thread", "serial")

# ============================================================================
# INPUT TABLE COLUMNS
# ============================================================================

SPECIES_REQUIRED_COLUMNS = ("species", "clade", "delta", "fe")
SPECIES_OPTIONAL_COLUMNS = (
    "delta_lo",
    "delta_hi",
    "fe_lo",
    "fe_hi",
    "regionfao",
    "speciescat",
    "silhouette",
)

STOCK_KEY_COLUMNS = ("idoriglumped", "regionfao", "speciescat", "speciescatname")

# Raw upsides column -> prepared stock pool column
STOCK_FIELD_MAP = {
    "marginalcost": "margc",
    "beta": "bet",
    "g": "g",
    "eqfvfmey": "fvfmey",
    "fvfmsy": "fvfmsy",
    "pctredfmey": "pctmey",
    "pctredfmsy": "pctmsy",
}

# Prepared columns in which an infinite value means "undefined"
STOCK_RATIO_COLUMNS = ("fvfmey", "fvfmsy", "pctmey", "pctmsy")
STOCK_COST_COLUMNS = ("cstcurr", "cstmey", "cstmsy")

# ============================================================================
# OUTPUT TABLE COLUMNS
# ============================================================================

RESULT_COLUMNS = (
    "species",
    "policy",
    "draw",
    "resample",
    "delta",
    "fe",
    "bycatch_red",
    "target_red",
    "prop_meeting",
    "policy_red",
    "cost",
)

SUMMARY_METRICS = (
    "bycatch_red",
    "target_red",
    "prop_meeting",
    "policy_red",
    "cost",
)

SUMMARY_KEY_COLUMNS = ("species", "policy", "n", "n_excluded", "prob_sufficient")

RESULTS_FILE_PREFIX = "bycatch_results"
