"""Request and engine configuration.

Out-of-range request values are clamped to the nearest bound, never rejected.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from .engine.scenarios import Scenario

logger = logging.getLogger(__name__)

HORIZON_RANGE = (1, 60)
WINDOW_RANGE = (12, 240)
NFCI_SHOCK_RANGE = (-2.0, 2.0)
FF_SHOCK_RANGE = (-4.0, 4.0)


def clamp_int(x, lo: int, hi: int, default: int) -> int:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(v):
        return default
    return max(lo, min(hi, int(math.floor(v))))


def clamp_num(x, lo: float, hi: float) -> float:
    """Clamp to [lo, hi]; anything non-numeric or non-finite becomes 0."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v):
        return 0.0
    return max(lo, min(hi, v))


@dataclass
class ForecastRequest:
    """Parameters of one forecast request."""

    year: int = 2026
    horizon_months: int = 12
    window_months: int = 36
    scenario: str = "baseline"
    nfci_shock: float = 0.0
    ff_shock: float = 0.0

    def __post_init__(self):
        """Clamp every parameter into its permitted range."""
        raw = (
            self.year, self.horizon_months, self.window_months,
            self.scenario, self.nfci_shock, self.ff_shock,
        )

        self.horizon_months = clamp_int(self.horizon_months, *HORIZON_RANGE, default=12)
        self.window_months = clamp_int(self.window_months, *WINDOW_RANGE, default=36)
        self.nfci_shock = clamp_num(self.nfci_shock, *NFCI_SHOCK_RANGE)
        self.ff_shock = clamp_num(self.ff_shock, *FF_SHOCK_RANGE)
        self.year = clamp_int(self.year, 1900, 2200, default=2026)
        self.scenario = Scenario.parse(self.scenario).value

        clamped = (
            self.year, self.horizon_months, self.window_months,
            self.scenario, self.nfci_shock, self.ff_shock,
        )
        if clamped != raw:
            logger.warning("Request parameters clamped: %s -> %s", raw, clamped)

    def to_dict(self) -> dict:
        """Echo of the effective (clamped) parameters."""
        return {
            "horizonMonths": self.horizon_months,
            "windowMonths": self.window_months,
            "year": self.year,
            "scenario": self.scenario,
            "shocks": {"nfci": self.nfci_shock, "ff": self.ff_shock},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ForecastRequest":
        """Create from a request body (camelCase keys, shocks nested)."""
        shocks = data.get("shocks") or {}
        return cls(
            year=data.get("year") or 2026,
            horizon_months=data.get("horizonMonths", 12),
            window_months=data.get("windowMonths", 36),
            scenario=data.get("scenario") or "baseline",
            nfci_shock=shocks.get("nfci", 0.0),
            ff_shock=shocks.get("ff", 0.0),
        )


@dataclass(frozen=True)
class EngineConfig:
    """Fixed simulation settings shared by every series in a request."""

    n_paths: int = 400
    smoothing: float = 0.25
    quantiles: Tuple[float, float] = (0.10, 0.90)
    max_workers: int = 6
    decimals: int = 2
