"""
Per-draw resampling over target stocks.

For one state of the world (one required effort reduction), the pool of
target stocks is resampled with replacement to resolve which stocks a
bycatch species actually interacts with. Each resample yields, per
reference policy:

- prop_meeting: share of stocks whose own reduction to the policy target
  meets the required reduction
- policy_red: bycatch mortality reduction delivered by moving the resampled
  stocks to the policy target (current-cost weighted)
- cost: fishing expenditure that must be forgone beyond the policy target to
  reach the required reduction, relative to current expenditure

Stocks with a missing reduction, weight or cost exponent are left out of
the numerator and the denominator of the statistics that need them. A
resample with no usable stock yields NaN rather than zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from pybycatch.core.constants import DEFAULT_ALPHA, POLICIES
from pybycatch.core.elasticity import bycatch_from_effort
from pybycatch.core.stocks import StockPool


@dataclass
class ResampleOutcome:
    """Statistics of ``n_resamples`` resamples for one policy.

    Attributes
    ----------
    policy : str
        'MEY' or 'MSY'
    prop_meeting : np.ndarray
        Share of valid stocks meeting the threshold, per resample
    policy_red : np.ndarray
        Bycatch mortality reduction delivered by the policy, per resample
    cost : np.ndarray
        Forgone expenditure fraction beyond the policy target, per resample
    n_valid : np.ndarray
        Stocks with a defined reduction, per resample
    """

    policy: str
    prop_meeting: np.ndarray
    policy_red: np.ndarray
    cost: np.ndarray
    n_valid: np.ndarray


def _ratio(num: np.ndarray, den: np.ndarray) -> np.ndarray:
    out = np.full(num.shape, np.nan)
    ok = den > 0
    out[ok] = num[ok] / den[ok]
    return out


def resample_stocks(
    pool: StockPool,
    threshold: float,
    rng: np.random.Generator,
    size: Optional[int] = None,
    n_resamples: int = 1,
    policies: Sequence[str] = POLICIES,
    alpha: float = DEFAULT_ALPHA,
) -> Dict[str, ResampleOutcome]:
    """Resample target stocks with replacement and score them.

    Parameters
    ----------
    pool : StockPool
        Stocks available to the species (read only)
    threshold : float
        Required fractional reduction in target-stock effort for this draw
    rng : np.random.Generator
        Random stream owned by the calling task
    size : int, optional
        Stocks per resample; defaults to the pool size
    n_resamples : int, default=1
        Number of independent resamples
    policies : sequence of str
        Reference policies to score
    alpha : float, default=1.0
        Elasticity used to map effort reductions to bycatch reductions

    Returns
    -------
    dict
        Policy -> ResampleOutcome; all resamples of every policy share the
        same drawn stocks.

    Raises
    ------
    ValueError
        If the pool is empty, the threshold is missing or sizes are invalid.

    Example
    -------
    >>> rng = np.random.default_rng(1)
    >>> out = resample_stocks(pool, 0.3, rng, n_resamples=100)
    >>> out["MEY"].prop_meeting.mean()
    """
    n_stocks = len(pool)
    if n_stocks == 0:
        raise ValueError("Cannot resample from an empty stock pool")
    if threshold is None or math.isnan(threshold):
        raise ValueError("Resampling threshold is undefined")
    if size is None:
        size = n_stocks
    if size < 1 or n_resamples < 1:
        raise ValueError(f"size and n_resamples must be >= 1, got {size}, {n_resamples}")

    idx = rng.integers(0, n_stocks, size=(n_resamples, size))
    w = pool.weights[idx]
    beta = pool.beta[idx]
    # Cost of reductions beyond 100% is capped at closing the fishery
    cost_threshold = min(max(threshold, 0.0), 1.0)

    outcomes = {}
    for policy in policies:
        p = pool.reductions[policy][idx]
        valid_p = ~np.isnan(p)
        n_valid = valid_p.sum(axis=1)

        # Share of stocks whose policy reduction already meets the threshold
        meets = valid_p & (np.where(valid_p, p, -np.inf) >= threshold)
        prop_meeting = _ratio(meets.sum(axis=1).astype(float), n_valid.astype(float))

        # Cost-weighted effort reduction delivered by the policy
        valid_w = valid_p & ~np.isnan(w)
        w_sum = np.where(valid_w, w, 0.0).sum(axis=1)
        effort = _ratio(np.where(valid_w, w * p, 0.0).sum(axis=1), w_sum)
        policy_red = bycatch_from_effort(effort, alpha)

        # Expenditure forgone by stocks pushed below their policy effort
        valid_c = valid_w & ~np.isnan(beta)
        short = valid_c & (np.where(valid_p, p, np.inf) < cost_threshold)
        with np.errstate(invalid="ignore", over="ignore", divide="ignore"):
            forgone = w * (
                np.power(1.0 - np.where(short, p, 0.0), beta)
                - np.power(1.0 - cost_threshold, beta)
            )
        c_sum = np.where(valid_c, w, 0.0).sum(axis=1)
        cost = _ratio(np.where(short, forgone, 0.0).sum(axis=1), c_sum)

        outcomes[policy] = ResampleOutcome(
            policy=policy,
            prop_meeting=prop_meeting,
            policy_red=policy_red,
            cost=cost,
            n_valid=n_valid,
        )

    return outcomes
