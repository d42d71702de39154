# macrocast/core/forecasting.py
"""
Multi-series forecast pipeline.

We forecast six monthly series per request:
- CPI inflation (y/y %, derived from the CPI level)
- Unemployment rate
- Fed funds rate
- Industrial production index
- Real GDP growth (y/y %, quarterly GDP step-filled to months)
- Financial conditions index (weekly prints averaged per month)

Every series is prepared and checked before any simulation runs, so a short
history aborts the whole request with no partial results. The six Monte Carlo
runs share no state and execute concurrently; the response is built after all
of them have joined.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import numpy as np
import pandas as pd

from .config import EngineConfig, ForecastRequest
from .engine.assemble import AssembledSeries, assemble_series
from .engine.monte_carlo import MCInputs, simulate_paths
from .engine.scenarios import SeriesId, parse_series
from .engine.series_utilities import (
    clean_history,
    compute_yoy_from_level,
    ensure_history,
    history_window,
    monthly_average_from_high_freq,
    quarterly_to_monthly_step_fill,
    to_monthly_aligned,
)

logger = logging.getLogger(__name__)

# raw observation shape -> monthly analysis series
LEVEL = "level"                  # monthly level, last print per month
LEVEL_YOY = "level_yoy"          # monthly level -> y/y %
QUARTERLY_YOY = "quarterly_yoy"  # quarterly level -> monthly step fill -> y/y %
WEEKLY_MEAN = "weekly_mean"      # sub-monthly prints -> monthly mean


@dataclass(frozen=True)
class SeriesSpec:
    series: SeriesId
    source: str                  # FRED code of the raw observations
    kind: str
    anchor: Optional[float] = None


SERIES_SPECS: Mapping[SeriesId, SeriesSpec] = MappingProxyType({
    SeriesId.CPI: SeriesSpec(SeriesId.CPI, "CPIAUCSL", LEVEL_YOY, anchor=2.0),
    SeriesId.UNRATE: SeriesSpec(SeriesId.UNRATE, "UNRATE", LEVEL),
    SeriesId.FEDFUNDS: SeriesSpec(SeriesId.FEDFUNDS, "FEDFUNDS", LEVEL),
    SeriesId.INDPRO: SeriesSpec(SeriesId.INDPRO, "INDPRO", LEVEL),
    SeriesId.GDP: SeriesSpec(SeriesId.GDP, "GDPC1", QUARTERLY_YOY),
    SeriesId.NFCI: SeriesSpec(SeriesId.NFCI, "NFCI", WEEKLY_MEAN, anchor=0.0),
})


@dataclass
class PreparedSeries:
    """A series aligned, transformed and cut to its history window."""

    spec: SeriesSpec
    monthly: pd.Series
    window_labels: pd.DatetimeIndex
    window_values: np.ndarray
    clean_values: np.ndarray
    clean_labels: pd.DatetimeIndex

    @property
    def as_of(self) -> str:
        return self.monthly.index[-1].strftime("%Y-%m-%d")


@dataclass
class ForecastResponse:
    request: ForecastRequest
    series: Dict[SeriesId, AssembledSeries]
    updated: Optional[str] = None
    decimals: int = 2

    def to_dict(self, decimals: Optional[int] = None) -> dict:
        """Response body; numbers rounded to decimals, or the configured precision."""
        if decimals is None:
            decimals = self.decimals
        return {
            "updated": self.updated,
            "params": self.request.to_dict(),
            "series": {sid.response_key: s.to_dict(decimals) for sid, s in self.series.items()},
        }


def to_analysis_series(spec: SeriesSpec, observations) -> pd.Series:
    """Turn raw observations into the monthly series the engine forecasts."""
    name = spec.series.value
    if spec.kind == LEVEL:
        return to_monthly_aligned(observations, name)
    if spec.kind == LEVEL_YOY:
        return compute_yoy_from_level(to_monthly_aligned(observations, name))
    if spec.kind == QUARTERLY_YOY:
        return compute_yoy_from_level(quarterly_to_monthly_step_fill(observations, name))
    if spec.kind == WEEKLY_MEAN:
        return monthly_average_from_high_freq(observations, name)
    raise ValueError(f"Unknown series kind: {spec.kind}")


def prepare_series(series, observations, window_months: int) -> PreparedSeries:
    """Align + transform one series and cut its window.

    Raises InsufficientHistory when fewer than window_months + 2 months exist.
    """
    spec = SERIES_SPECS[parse_series(series)]
    monthly = to_analysis_series(spec, observations if observations is not None else [])
    ensure_history(monthly, window_months, spec.series.value)

    labels, values = history_window(monthly, window_months)
    clean_values, clean_labels = clean_history(labels, values)
    if len(clean_values) < len(values):
        logger.info(
            "%s: %d of %d window months missing",
            spec.series.value, len(values) - len(clean_values), len(values),
        )
    return PreparedSeries(
        spec=spec,
        monthly=monthly,
        window_labels=labels,
        window_values=values,
        clean_values=clean_values,
        clean_labels=clean_labels,
    )


def forecast_series(
    prepared: PreparedSeries,
    request: ForecastRequest,
    fci_latest: float = 0.0,
    config: EngineConfig = EngineConfig(),
) -> AssembledSeries:
    """Simulate one prepared series and assemble it with its history."""
    params = MCInputs(
        history_values=prepared.clean_values,
        history_labels=prepared.clean_labels,
        horizon_months=request.horizon_months,
        series=prepared.spec.series,
        scenario=request.scenario,
        nfci_shock=request.nfci_shock,
        ff_shock=request.ff_shock,
        fci_latest=fci_latest,
        n_paths=config.n_paths,
        smoothing=config.smoothing,
        quantiles=config.quantiles,
    )
    result = simulate_paths(params)
    logger.info(
        "%s forecast: %d months, drift=%.4f vol_mult=%.3f",
        prepared.spec.series.value, result.horizon,
        result.diagnostics.drift, result.diagnostics.volatility_multiplier,
    )
    return assemble_series(
        prepared.spec.series,
        prepared.window_labels,
        prepared.window_values,
        result,
        anchor=prepared.spec.anchor,
    )


def run_forecast(
    request: ForecastRequest,
    observations: Mapping,
    config: EngineConfig = EngineConfig(),
) -> ForecastResponse:
    """
    Forecast all six series.

    observations maps each series (SeriesId, FRED code or response key) to
    its raw observations. A missing entry counts as an empty history.
    """
    raw = {parse_series(k): v for k, v in observations.items()}

    # validate everything up front: any InsufficientHistory aborts here
    prepared = {
        sid: prepare_series(sid, raw.get(sid), request.window_months)
        for sid in SERIES_SPECS
    }

    fci = prepared[SeriesId.NFCI].monthly
    fci_latest = float(fci.iloc[-1])

    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        futures = {
            sid: pool.submit(forecast_series, p, request, fci_latest, config)
            for sid, p in prepared.items()
        }
        series = {sid: fut.result() for sid, fut in futures.items()}

    return ForecastResponse(
        request=request,
        series=series,
        updated=prepared[SeriesId.CPI].as_of,
        decimals=config.decimals,
    )
