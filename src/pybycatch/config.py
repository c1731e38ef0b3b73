"""PyBycatch configuration.

Run parameters and figure styling are plain dataclasses passed explicitly
to the simulation driver and the plotting functions.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from pybycatch.core.constants import (
    DEFAULT_ALPHA,
    DEFAULT_N1,
    DEFAULT_N2,
    DEFAULT_QUANTILES,
    EXECUTOR_TYPES,
    POLICIES,
    RESULTS_FILE_PREFIX,
    UNCERT_NONE,
    UNCERTAINTY_MODES,
)


@dataclass
class SimulationConfig:
    """Parameters of one Monte Carlo run.

    Attributes
    ----------
    n1 : int
        Number of draws (states of the world) per species.
    n2 : int
        Number of resamples over target stocks per draw.
    alpha : float
        Elasticity of bycatch mortality to target-stock fishing effort.
    uncertainty : str
        'nouncert' to reuse the species point estimates on every draw,
        'uncert' to draw delta and fe from their uncertainty bounds.
    seed : int, optional
        Run seed. Each species derives its own stream from it.
    resample_size : int, optional
        Stocks per resample. Defaults to the size of the species' stock pool.
    policies : tuple of str
        Reference policies to evaluate ('MEY', 'MSY').
    quantiles : tuple of float
        Quantiles reported by the summary table.
    max_workers : int, optional
        Worker pool size. Defaults to the number of CPUs.
    executor : str
        'process', 'thread' or 'serial'.
    """

    n1: int = DEFAULT_N1
    n2: int = DEFAULT_N2
    alpha: float = DEFAULT_ALPHA
    uncertainty: str = UNCERT_NONE
    seed: Optional[int] = None
    resample_size: Optional[int] = None
    policies: Tuple[str, ...] = POLICIES
    quantiles: Tuple[float, ...] = DEFAULT_QUANTILES
    max_workers: Optional[int] = None
    executor: str = "process"

    def __post_init__(self):
        """Validate run parameters."""
        if self.n1 < 1 or self.n2 < 1:
            raise ValueError(f"n1 and n2 must be >= 1, got n1={self.n1}, n2={self.n2}")
        if not self.alpha > 0:
            raise ValueError(f"alpha must be positive, got {self.alpha}")
        if self.uncertainty not in UNCERTAINTY_MODES:
            raise ValueError(
                f"Unknown uncertainty mode '{self.uncertainty}', "
                f"expected one of {UNCERTAINTY_MODES}"
            )
        self.policies = tuple(self.policies)
        unknown = [p for p in self.policies if p not in POLICIES]
        if unknown or not self.policies:
            raise ValueError(f"Unknown policies {unknown}, expected {POLICIES}")
        self.quantiles = tuple(float(q) for q in self.quantiles)
        if any(q < 0 or q > 1 for q in self.quantiles):
            raise ValueError(f"Quantiles must lie in [0, 1], got {self.quantiles}")
        if self.executor not in EXECUTOR_TYPES:
            raise ValueError(
                f"Unknown executor '{self.executor}', expected one of {EXECUTOR_TYPES}"
            )
        if self.resample_size is not None and self.resample_size < 1:
            raise ValueError("resample_size must be >= 1")

    @property
    def alpha_tag(self) -> str:
        """Alpha as encoded in file names, e.g. '_alpha=05' for 0.5."""
        return "_alpha=" + f"{self.alpha:g}".replace(".", "")

    @property
    def file_stem(self) -> str:
        """Base name of the results file for this run."""
        return f"{RESULTS_FILE_PREFIX}_{self.uncertainty}{self.alpha_tag}"


@dataclass
class PlotTheme:
    """Figure styling shared by all plotting functions."""

    font_family: str = "sans-serif"
    preferred_fonts: Tuple[str, ...] = ("Open Sans", "DejaVu Sans")
    palette: Tuple[str, ...] = (
        "#ef3b2c",
        "#386cb0",
        "#fdb462",
        "#7fc97f",
        "#662506",
        "#a6cee3",
        "#fb9a99",
        "#984ea3",
        "#ffff33",
    )
    heatmap_cmap: str = "Spectral"
    region_cmap: str = "viridis"
    dpi: int = 150
    figsize: Tuple[float, float] = (8.0, 5.0)
    facet_figsize: Tuple[float, float] = (10.0, 13.0)
    facet_ncol: int = 3
    hist_bins: int = 40

    # Colours of the required reduction vs. policy reduction series
    required_color: str = "#ef3b2c"
    policy_colors: dict = field(
        default_factory=lambda: {"MEY": "#386cb0", "MSY": "#7fc97f"}
    )

    def rc_params(self) -> dict:
        """matplotlib rcParams for use with ``plt.rc_context``."""
        return {
            "font.family": self.font_family,
            f"font.{self.font_family}": list(self.preferred_fonts)
            + ["DejaVu Sans"],
            "axes.spines.top": False,
            "axes.spines.right": False,
            "legend.frameon": False,
            "savefig.dpi": self.dpi,
        }
