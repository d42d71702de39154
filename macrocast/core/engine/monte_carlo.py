# macrocast/core/engine/monte_carlo.py
"""
Vectorized Monte Carlo engine for short-horizon macro forecasts.

Inputs:
- history_values / history_labels: clean (no missing) monthly history and its months
- horizon_months: number of future months simulated
- series: SeriesId, selects tilt, shock sensitivity and clamp bounds
- scenario: scenario name (unknown names behave like baseline)
- nfci_shock / ff_shock: financial-conditions and policy-rate surprises
- fci_latest: latest financial-conditions reading, drives the state-noise factor
- n_paths: number of Monte Carlo paths
- smoothing: exponential smoothing factor applied to the mean path only

Outputs (MonteCarloResult):
- mean_path: smoothed cross-path mean, shape (horizon,)
- p10_path / p90_path: cross-path percentiles, shape (horizon,)
- paths: clamped ensemble, shape (n_paths, horizon)
- diagnostics: effective drift, base volatility, volatility multiplier

Every path starts at the last history value and, at each step, adds
drift + seasonal[month] + residual * volatility multiplier, where the residual
is bootstrapped with replacement from the whole residual pool. The level is
clamped to the series bounds after every step.

The reported mean is the exponentially smoothed cross-path mean clipped into
[p10, p90]. Smoothing therefore only shows where the band is wide enough to
hold the lagged value; on a narrow or degenerate band the mean tracks the raw
ensemble mean.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from .decompose import Decomposition, decompose
from .rng import SeededGenerator, stable_seed
from .scenarios import ScenarioParameters, SeriesId, finite_or_zero, resolve_scenario, soft_clamp
from .series_utilities import month_labels

logger = logging.getLogger(__name__)

N_PATHS = 400
SMOOTHING = 0.25


@dataclass
class MCInputs:
    history_values: Sequence[float]
    history_labels: Sequence
    horizon_months: int
    series: SeriesId
    scenario: str = "baseline"
    nfci_shock: float = 0.0
    ff_shock: float = 0.0
    fci_latest: float = 0.0
    n_paths: int = N_PATHS
    smoothing: float = SMOOTHING
    quantiles: Tuple[float, float] = (0.10, 0.90)


@dataclass(frozen=True)
class Diagnostics:
    drift: float
    base_volatility: float
    volatility_multiplier: float

    def to_dict(self, decimals: Optional[int] = 2) -> dict:
        r = (lambda x: round(float(x), decimals)) if decimals is not None else float
        return {
            "drift": r(self.drift),
            "baseVolatility": r(self.base_volatility),
            "volatilityMultiplier": r(self.volatility_multiplier),
        }


@dataclass
class MonteCarloResult:
    mean_path: np.ndarray
    p10_path: np.ndarray
    p90_path: np.ndarray
    paths: np.ndarray
    diagnostics: Diagnostics
    future_labels: pd.DatetimeIndex
    seed: int
    decomposition: Decomposition = field(repr=False, default=None)
    scenario: Optional[ScenarioParameters] = None

    @property
    def horizon(self) -> int:
        return len(self.mean_path)


def exponential_smooth(x: np.ndarray, alpha: float) -> np.ndarray:
    """out[0] = x[0]; out[i] = alpha * x[i] + (1 - alpha) * out[i-1]."""
    x = np.asarray(x, dtype=float)
    out = np.empty_like(x)
    if len(x) == 0:
        return out
    out[0] = x[0]
    for i in range(1, len(x)):
        out[i] = alpha * x[i] + (1.0 - alpha) * out[i - 1]
    return out


def ensemble_seed(
    params: MCInputs,
    n_history: int,
    last_value: float,
    scenario_name: str,
    nfci_shock: float,
    ff_shock: float,
    fci_latest: float,
) -> int:
    """Seed from everything that defines the forecast, so reruns reproduce it exactly."""
    return stable_seed(
        params.series.value,
        scenario_name,
        n_history,
        float(last_value),
        fci_latest,
        nfci_shock,
        ff_shock,
        int(params.horizon_months),
    )


def _draw_residuals(gen: SeededGenerator, pool: np.ndarray, n: int, T: int) -> np.ndarray:
    # one sub-generator per path keeps results independent of draw order
    if len(pool) == 0:
        return np.zeros((n, T), dtype=float)
    idx = np.vstack([gen.for_path(p).draw_indices(len(pool), T) for p in range(n)])
    return pool[idx]


def simulate_paths(params: MCInputs) -> MonteCarloResult:
    n = int(params.n_paths)
    T = int(params.horizon_months)
    if n < 1:
        raise ValueError("n_paths must be positive")
    if T < 1:
        raise ValueError("horizon_months must be at least 1")

    vals = np.asarray(params.history_values, dtype=float)
    labels = pd.DatetimeIndex(params.history_labels)

    # Fewer than 2 points degrades to zero drift/seasonality, never an error
    dec = decompose(vals, labels)

    # junk shocks count as no shock; seed and resolver see the same numbers
    nfci_shock = finite_or_zero(params.nfci_shock)
    ff_shock = finite_or_zero(params.ff_shock)
    fci_latest = finite_or_zero(params.fci_latest)
    sp = resolve_scenario(
        params.scenario,
        params.series,
        nfci_shock=nfci_shock,
        ff_shock=ff_shock,
        fci_latest=fci_latest,
    )
    drift = sp.effective_drift(dec.drift)
    vol_mult = sp.effective_volatility

    last_value = float(vals[-1]) if len(vals) else 0.0
    if len(labels):
        future = month_labels(labels[-1], 1, T)[1:]
    else:
        future = month_labels(pd.Timestamp.today(), 1, T)[1:]
    future_months = future.month.to_numpy() - 1

    seed = ensemble_seed(
        params, len(vals), last_value, sp.scenario.value, nfci_shock, ff_shock, fci_latest,
    )
    gen = SeededGenerator(seed)
    shocks = _draw_residuals(gen, dec.residuals, n, T)

    # steps[:, t] = drift + seasonal + residual * vol, shape (n, T)
    steps = drift + dec.seasonal[future_months][None, :] + shocks * vol_mult

    V = np.zeros((n, T), dtype=float)
    v = np.full(n, last_value, dtype=float)
    for t in range(T):
        v = soft_clamp(params.series, v + steps[:, t])
        V[:, t] = v

    q_lo, q_hi = params.quantiles
    mean_raw = V.mean(axis=0)
    p_lo = np.percentile(V, q_lo * 100.0, axis=0)
    p_hi = np.percentile(V, q_hi * 100.0, axis=0)

    # Smoothing lags the raw mean; keep it inside the band it summarizes
    mean_path = np.clip(exponential_smooth(mean_raw, params.smoothing), p_lo, p_hi)

    diagnostics = Diagnostics(
        drift=float(drift),
        base_volatility=dec.base_volatility,
        volatility_multiplier=float(vol_mult),
    )
    logger.debug(
        "%s/%s: seed=%d drift=%.4f base_vol=%.4f vol_mult=%.3f pool=%d",
        params.series.value, sp.scenario.value, seed, drift,
        dec.base_volatility, vol_mult, len(dec.residuals),
    )

    return MonteCarloResult(
        mean_path=mean_path,
        p10_path=p_lo,
        p90_path=p_hi,
        paths=V,
        diagnostics=diagnostics,
        future_labels=future,
        seed=seed,
        decomposition=dec,
        scenario=sp,
    )
