"""Scenario and shock resolution for the macro series.

All tables are read-only mappings keyed by SeriesId / Scenario and built once
at import time.
"""

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

import numpy as np


class SeriesId(Enum):
    """The six analysed series, valued by their FRED code."""

    CPI = "CPI"              # CPI YoY %, from CPIAUCSL level
    UNRATE = "UNRATE"        # Unemployment rate %
    FEDFUNDS = "FEDFUNDS"    # Effective fed funds rate %
    INDPRO = "INDPRO"        # Industrial production index
    GDP = "GDP"              # Real GDP YoY %, from quarterly GDPC1
    NFCI = "NFCI"            # Chicago Fed financial conditions index

    @property
    def response_key(self) -> str:
        """Key used for this series in the forecast response."""
        return RESPONSE_KEYS[self]


RESPONSE_KEYS: Mapping[SeriesId, str] = MappingProxyType({
    SeriesId.CPI: "cpi",
    SeriesId.UNRATE: "unemployment",
    SeriesId.FEDFUNDS: "fedFunds",
    SeriesId.INDPRO: "industrialProduction",
    SeriesId.GDP: "gdp",
    SeriesId.NFCI: "fci",
})


class Scenario(Enum):
    """Named macro regimes."""

    BASELINE = "baseline"
    SOFT_LANDING = "soft_landing"
    CREDIT_TIGHTENING = "credit_tightening"
    REACCELERATION = "reacceleration"

    @classmethod
    def parse(cls, name) -> "Scenario":
        """Scenario for name; unknown or empty names fall back to baseline."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name or "").strip().lower())
        except ValueError:
            return cls.BASELINE


# (drift multiplier, volatility multiplier)
SCENARIO_MULTIPLIERS: Mapping[Scenario, Tuple[float, float]] = MappingProxyType({
    Scenario.BASELINE: (1.0, 1.0),
    Scenario.SOFT_LANDING: (0.85, 0.9),
    Scenario.CREDIT_TIGHTENING: (1.2, 1.25),
    Scenario.REACCELERATION: (1.15, 1.1),
})

SERIES_DRIFT_TILT: Mapping[Scenario, Mapping[SeriesId, float]] = MappingProxyType({
    Scenario.BASELINE: MappingProxyType({}),
    Scenario.SOFT_LANDING: MappingProxyType({
        SeriesId.UNRATE: 0.9,
        SeriesId.INDPRO: 0.95,
        SeriesId.GDP: 0.95,
        SeriesId.CPI: 0.9,
        SeriesId.NFCI: 0.95,
    }),
    Scenario.CREDIT_TIGHTENING: MappingProxyType({
        SeriesId.UNRATE: 1.25,
        SeriesId.INDPRO: 0.75,
        SeriesId.GDP: 0.8,
        SeriesId.CPI: 0.9,
        SeriesId.NFCI: 1.1,
    }),
    Scenario.REACCELERATION: MappingProxyType({
        SeriesId.UNRATE: 0.85,
        SeriesId.INDPRO: 1.15,
        SeriesId.GDP: 1.15,
        SeriesId.CPI: 1.1,
        SeriesId.NFCI: 0.95,
    }),
})

# per-step drift added per unit of (nfci shock, fed funds shock)
SHOCK_SENSITIVITY: Mapping[SeriesId, Tuple[float, float]] = MappingProxyType({
    SeriesId.UNRATE: (0.04, 0.015),
    SeriesId.INDPRO: (-0.25, -0.08),
    SeriesId.GDP: (-0.1, -0.05),
    SeriesId.CPI: (-0.06, -0.03),
    SeriesId.NFCI: (0.08, 0.02),
    SeriesId.FEDFUNDS: (0.0, 0.02),  # policy rate barely reacts to its own shock
})

# hard (floor, ceiling) on every simulated level
SERIES_BOUNDS: Mapping[SeriesId, Tuple[float, float]] = MappingProxyType({
    SeriesId.UNRATE: (2.0, 15.0),
    SeriesId.FEDFUNDS: (0.0, 10.0),
    SeriesId.INDPRO: (40.0, 140.0),
    SeriesId.CPI: (-2.0, 15.0),
    SeriesId.GDP: (-8.0, 10.0),
    SeriesId.NFCI: (-2.5, 3.5),
})

STATE_NOISE_SLOPE = 0.45
STATE_NOISE_CAP = 0.8  # at most 1.8x volatility


@dataclass(frozen=True)
class ScenarioParameters:
    """Resolved adjustments for one series under one scenario."""

    scenario: Scenario
    series: SeriesId
    drift_multiplier: float
    volatility_multiplier: float
    drift_tilt: float
    shock_offset: float
    state_noise: float

    @property
    def effective_volatility(self) -> float:
        """Scenario volatility times the financial-conditions noise factor."""
        return self.volatility_multiplier * self.state_noise

    def effective_drift(self, trend: float) -> float:
        """(trend + shock offset) scaled by the scenario multiplier and series tilt."""
        return (trend + self.shock_offset) * self.drift_multiplier * self.drift_tilt


def drift_tilt(series: SeriesId, scenario: Scenario) -> float:
    return SERIES_DRIFT_TILT[scenario].get(series, 1.0)


def shock_to_drift(series: SeriesId, nfci_shock: float, ff_shock: float) -> float:
    """Additive per-step drift offset for the two continuous shocks."""
    n = finite_or_zero(nfci_shock)
    f = finite_or_zero(ff_shock)
    k_nfci, k_ff = SHOCK_SENSITIVITY.get(series, (0.0, 0.0))
    return k_nfci * n + k_ff * f


def state_noise_factor(fci_latest: float) -> float:
    """Volatility widening from the latest financial-conditions reading.

    Loose conditions (index <= 0) leave volatility alone; tighter readings widen
    it linearly up to the cap.
    """
    level = max(0.0, finite_or_zero(fci_latest))
    return 1.0 + min(STATE_NOISE_CAP, STATE_NOISE_SLOPE * level)


def soft_clamp(series: SeriesId, x):
    """Clip a level (or array of levels) into the series' plausible range.

    Non-finite levels are treated as 0 before clipping.
    """
    lo, hi = SERIES_BOUNDS[series]
    if np.ndim(x) == 0:
        v = float(x)
        v = v if math.isfinite(v) else 0.0
        return max(lo, min(hi, v))
    arr = np.asarray(x, dtype=float)
    return np.clip(np.where(np.isfinite(arr), arr, 0.0), lo, hi)


def resolve_scenario(
    scenario,
    series: SeriesId,
    nfci_shock: float = 0.0,
    ff_shock: float = 0.0,
    fci_latest: float = 0.0,
) -> ScenarioParameters:
    """Resolve scenario name + shocks into drift/volatility adjustments for one series."""
    sc = Scenario.parse(scenario)
    drift_mult, vol_mult = SCENARIO_MULTIPLIERS[sc]
    return ScenarioParameters(
        scenario=sc,
        series=series,
        drift_multiplier=drift_mult,
        volatility_multiplier=vol_mult,
        drift_tilt=drift_tilt(series, sc),
        shock_offset=shock_to_drift(series, nfci_shock, ff_shock),
        state_noise=state_noise_factor(fci_latest),
    )


def finite_or_zero(x) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def parse_series(key) -> SeriesId:
    """SeriesId from an enum member, a FRED code ("UNRATE") or a response key ("unemployment")."""
    if isinstance(key, SeriesId):
        return key
    text = str(key).strip()
    for sid in SeriesId:
        if text.upper() == sid.value or text == sid.response_key:
            return sid
    raise ValueError(f"Unknown series: {key!r}")
