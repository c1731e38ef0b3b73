"""
Elasticity transform between bycatch mortality and target-stock effort.

A bycatch population declining at rate ``delta`` under bycatch mortality
``fe`` stops declining once bycatch mortality falls by ``|delta / fe|``.
Bycatch mortality is assumed proportional to target-stock fishing effort
raised to the elasticity ``alpha``, so a fractional effort reduction ``r``
yields a bycatch reduction of ``1 - (1 - r) ** alpha``.

Functions
---------
- bycatch_reduction(): reduction in bycatch mortality needed to halt decline
- required_effort_reduction(): matching reduction in target-stock effort
- required_effort_reduction_array(): vectorised version with validity mask
- bycatch_from_effort(): bycatch reduction delivered by an effort reduction
- elasticity_grid(): reduction surface over a (delta, fe) grid
- alpha_sensitivity_curve(): bycatch reduction as a function of alpha
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from pybycatch.core.constants import DEFAULT_ALPHA
from pybycatch.core.errors import UndefinedElasticityError


def _check_alpha(alpha: float) -> None:
    if not alpha > 0:
        raise ValueError(f"alpha must be positive, got {alpha}")


def bycatch_reduction(delta: float, fe: float) -> float:
    """Fractional reduction in bycatch mortality needed to halt decline.

    Parameters
    ----------
    delta : float
        Population growth rate (negative when declining).
    fe : float
        Bycatch mortality rate (non-negative).

    Returns
    -------
    float
        ``min(|delta / fe|, 1)``

    Raises
    ------
    UndefinedElasticityError
        If ``fe`` is zero or either input is missing.
    """
    if delta is None or fe is None or math.isnan(delta) or math.isnan(fe):
        raise UndefinedElasticityError(delta, fe)
    if fe == 0:
        raise UndefinedElasticityError(
            delta, fe, f"Bycatch mortality rate is zero (delta={delta})"
        )
    return min(abs(delta / fe), 1.0)


def required_effort_reduction(
    delta: float, fe: float, alpha: float = DEFAULT_ALPHA
) -> float:
    """Reduction in target-stock fishing effort needed to halt decline.

    Parameters
    ----------
    delta : float
        Population growth rate (negative when declining).
    fe : float
        Bycatch mortality rate (non-negative).
    alpha : float, default=1.0
        Elasticity of bycatch mortality to target-stock effort.

    Returns
    -------
    float
        Effort reduction in [0, 1]. Equal to ``bycatch_reduction`` when
        ``alpha == 1``.

    Raises
    ------
    UndefinedElasticityError
        If ``fe`` is zero or either input is missing.
    ValueError
        If ``alpha`` is not positive.

    Examples
    --------
    >>> required_effort_reduction(-10, 20)
    0.5
    >>> required_effort_reduction(-40, 10)
    1.0
    """
    _check_alpha(alpha)
    red = bycatch_reduction(delta, fe)
    if alpha == 1:
        return red
    out = 1.0 - (1.0 - red) ** (1.0 / alpha)
    return min(max(out, 0.0), 1.0)


def required_effort_reduction_array(
    delta: np.ndarray, fe: np.ndarray, alpha: float = DEFAULT_ALPHA
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorised ``required_effort_reduction`` over many draws.

    Returns
    -------
    bycatch_red : np.ndarray
        Required bycatch mortality reduction (NaN where undefined)
    effort_red : np.ndarray
        Required effort reduction (NaN where undefined)
    valid : np.ndarray of bool
        False where ``fe == 0`` or an input is missing
    """
    _check_alpha(alpha)
    delta = np.asarray(delta, dtype=float)
    fe = np.asarray(fe, dtype=float)
    delta, fe = np.broadcast_arrays(delta, fe)

    valid = (fe != 0) & ~np.isnan(delta) & ~np.isnan(fe)
    bycatch_red = np.full(delta.shape, np.nan)
    bycatch_red[valid] = np.minimum(np.abs(delta[valid] / fe[valid]), 1.0)

    effort_red = np.full(delta.shape, np.nan)
    if alpha == 1:
        effort_red[valid] = bycatch_red[valid]
    else:
        effort_red[valid] = 1.0 - (1.0 - bycatch_red[valid]) ** (1.0 / alpha)
    effort_red[valid] = np.clip(effort_red[valid], 0.0, 1.0)

    return bycatch_red, effort_red, valid


def bycatch_from_effort(effort_red, alpha: float = DEFAULT_ALPHA):
    """Bycatch mortality reduction delivered by a target-effort reduction.

    Works on scalars and arrays; NaN inputs stay NaN.
    """
    _check_alpha(alpha)
    clipped = np.clip(effort_red, 0.0, 1.0)
    return 1.0 - (1.0 - clipped) ** alpha


def elasticity_grid(
    delta_range: Tuple[float, float] = (-0.4, 0.0),
    fe_range: Tuple[float, float] = (0.0, 0.4),
    n: int = 100,
) -> pd.DataFrame:
    """Required bycatch reduction over a regular (delta, fe) grid.

    Cells with ``fe == 0`` are undefined and left as NaN.

    Returns
    -------
    pd.DataFrame
        Columns ``delta``, ``fe`` and ``z`` (reduction clamped to [0, 1])
    """
    deltas = np.linspace(delta_range[0], delta_range[1], n)
    fes = np.linspace(fe_range[0], fe_range[1], n)
    dd, ff = np.meshgrid(deltas, fes, indexing="ij")
    z, _, _ = required_effort_reduction_array(dd.ravel(), ff.ravel(), alpha=1.0)
    return pd.DataFrame({"delta": dd.ravel(), "fe": ff.ravel(), "z": z})


def alpha_sensitivity_curve(
    alphas: Sequence[float] = None, effort_red: float = 0.5
) -> pd.DataFrame:
    """Bycatch reduction achieved by a fixed effort reduction across alphas."""
    if alphas is None:
        alphas = np.linspace(0.01, 5.0, 200)
    alphas = np.asarray(alphas, dtype=float)
    if np.any(alphas <= 0):
        raise ValueError("alphas must be positive")
    return pd.DataFrame(
        {"alpha": alphas, "bycatch_red": 1.0 - (1.0 - effort_red) ** alphas}
    )
