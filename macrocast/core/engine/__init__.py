"""
Forecast engine - calendar alignment, decomposition, scenarios and Monte Carlo.

Stages, leaves first:
- series_utilities: month alignment, high-frequency averaging, quarterly step
  fill, year-over-year transform and history windowing.
- decompose: drift, per-month seasonality and the residual bootstrap pool.
- scenarios: named scenarios, per-series tilts, shock sensitivities, bounds.
- monte_carlo: seeded ensemble simulation reduced to mean and p10/p90 bands.
- assemble: history + forecast on one monthly label axis.
"""

from .errors import ForecastError, InsufficientHistory
from .series_utilities import (
    to_month_start,
    to_monthly_aligned,
    monthly_average_from_high_freq,
    quarterly_to_monthly_step_fill,
    compute_yoy_from_level,
    ensure_history,
    history_window,
    clean_history,
    month_labels,
)
from .decompose import Decomposition, decompose
from .rng import SeededGenerator, stable_seed
from .scenarios import (
    SeriesId,
    Scenario,
    ScenarioParameters,
    SCENARIO_MULTIPLIERS,
    SERIES_DRIFT_TILT,
    SHOCK_SENSITIVITY,
    SERIES_BOUNDS,
    parse_series,
    resolve_scenario,
    shock_to_drift,
    state_noise_factor,
    soft_clamp,
)
from .monte_carlo import MCInputs, MonteCarloResult, Diagnostics, simulate_paths
from .assemble import AssembledSeries, Known, Forecast, Missing, assemble_series

__version__ = "0.3.0"
__all__ = [
    # Errors
    "ForecastError",
    "InsufficientHistory",
    # Calendar / transforms
    "to_month_start",
    "to_monthly_aligned",
    "monthly_average_from_high_freq",
    "quarterly_to_monthly_step_fill",
    "compute_yoy_from_level",
    "ensure_history",
    "history_window",
    "clean_history",
    "month_labels",
    # Decomposition
    "Decomposition",
    "decompose",
    # Seeding
    "SeededGenerator",
    "stable_seed",
    # Scenarios
    "SeriesId",
    "Scenario",
    "ScenarioParameters",
    "SCENARIO_MULTIPLIERS",
    "SERIES_DRIFT_TILT",
    "SHOCK_SENSITIVITY",
    "SERIES_BOUNDS",
    "parse_series",
    "resolve_scenario",
    "shock_to_drift",
    "state_noise_factor",
    "soft_clamp",
    # Simulation
    "MCInputs",
    "MonteCarloResult",
    "Diagnostics",
    "simulate_paths",
    # Assembly
    "AssembledSeries",
    "Known",
    "Forecast",
    "Missing",
    "assemble_series",
]
