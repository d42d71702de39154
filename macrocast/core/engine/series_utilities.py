# macrocast/core/engine/series_utilities.py
"""
Calendar alignment and derived-series transforms.

Every helper takes raw observations in any of the shapes a data collaborator
hands over (a date-indexed pandas Series, (date, value) tuples, or mappings
with "date"/"value" keys) and returns a float pandas Series indexed by
month-start Timestamps, strictly increasing with no duplicate months.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Iterable, Tuple

import numpy as np
import pandas as pd

from .errors import InsufficientHistory

logger = logging.getLogger(__name__)

# window plus the two extra points needed for a first difference and a residual
HISTORY_MARGIN = 2


def to_month_start(dates) -> pd.DatetimeIndex:
    """Truncate dates to the first day of their month."""
    idx = pd.DatetimeIndex(pd.to_datetime(list(dates), errors="coerce"))
    return idx.to_period("M").to_timestamp()


def _observations(obs, name: str | None = None) -> pd.Series:
    """Coerce raw observations to a month-stamped float Series in input order.

    Null, unparseable and non-finite values are dropped here, so downstream
    bucketing only ever sees real prints.
    """
    if isinstance(obs, pd.Series):
        dates = list(obs.index)
        values = list(obs.to_numpy())
        name = name or obs.name
    else:
        dates, values = [], []
        for o in obs:
            if isinstance(o, Mapping):
                d, v = o.get("date"), o.get("value")
            else:
                d, v = o
            dates.append(d)
            values.append(v)

    nums = pd.to_numeric(pd.Series(values, dtype=object), errors="coerce").to_numpy(dtype=float)
    s = pd.Series(nums, index=to_month_start(dates), name=name)
    keep = np.isfinite(s.to_numpy()) & s.index.notna()
    return s[keep]


def to_monthly_aligned(obs, name: str | None = None) -> pd.Series:
    """One value per month; later raw entries for the same month win."""
    s = _observations(obs, name)
    out = s.groupby(level=0, sort=True).last()
    out.name = s.name
    return out


def monthly_average_from_high_freq(obs, name: str | None = None) -> pd.Series:
    """Arithmetic mean of all sub-monthly prints in each month.

    Months with no prints are absent, not zero.
    """
    s = _observations(obs, name)
    out = s.groupby(level=0, sort=True).mean()
    out.name = s.name
    return out


def quarterly_to_monthly_step_fill(obs, name: str | None = None) -> pd.Series:
    """Spread each quarterly value over the 3 months ending at its reported month.

    Quarters are expanded in input order, so a later quarter overwrites an
    earlier one on any month they share.
    """
    q = _observations(obs, name)
    dates, values = [], []
    for month, value in q.items():
        for lag in (2, 1, 0):
            dates.append(month - pd.DateOffset(months=lag))
            values.append(value)
    return to_monthly_aligned(pd.Series(values, index=pd.DatetimeIndex(dates), dtype=float), q.name)


def compute_yoy_from_level(monthly: pd.Series) -> pd.Series:
    """Year-over-year percent change, (v[t] / v[t-12] - 1) * 100.

    t-12 is the same calendar month one year earlier. Months where either
    endpoint is missing or non-finite, or the prior-year value is zero, are
    left out rather than raising.
    """
    s = monthly.dropna()
    if s.empty:
        return s.astype(float)

    full = s.asfreq("MS")
    prior = full.shift(12)
    with np.errstate(divide="ignore", invalid="ignore"):
        yoy = (full / prior - 1.0) * 100.0

    ok = np.isfinite(full.to_numpy()) & np.isfinite(prior.to_numpy()) & (prior.to_numpy() != 0)
    out = yoy[ok]
    out.name = monthly.name
    return out


def ensure_history(aligned: pd.Series, window_months: int, series: str) -> None:
    """Raise InsufficientHistory unless there are window_months + 2 aligned months."""
    required = int(window_months) + HISTORY_MARGIN
    available = int(len(aligned))
    if available < required:
        logger.warning("%s: %d aligned months, %d required", series, available, required)
        raise InsufficientHistory(series, available, required)


def month_labels(last_month, window_months: int, horizon_months: int = 0) -> pd.DatetimeIndex:
    """Contiguous month-start labels: window months ending at last_month, then the horizon."""
    last = pd.Timestamp(last_month).to_period("M").to_timestamp()
    start = last - pd.DateOffset(months=window_months - 1)
    return pd.date_range(start=start, periods=window_months + horizon_months, freq="MS")


def history_window(aligned: pd.Series, window_months: int) -> Tuple[pd.DatetimeIndex, np.ndarray]:
    """Calendar grid of the window ending at the last aligned month, with its values.

    Months absent from the aligned series come back as NaN placeholders.
    """
    labels = month_labels(aligned.index[-1], window_months)
    values = aligned.reindex(labels).to_numpy(dtype=float)
    return labels, values


def clean_history(labels: Iterable, values: np.ndarray) -> Tuple[np.ndarray, pd.DatetimeIndex]:
    """Drop missing placeholders, keeping each value paired with its own month."""
    labels = pd.DatetimeIndex(labels)
    values = np.asarray(values, dtype=float)
    mask = np.isfinite(values)
    return values[mask], labels[mask]
