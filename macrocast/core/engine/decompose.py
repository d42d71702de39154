"""Seasonal-drift decomposition of a clean monthly history."""

from dataclasses import dataclass
import numpy as np
import pandas as pd

# trailing differences averaged into the recent drift
DRIFT_LOOKBACK = 12


@dataclass(frozen=True)
class Decomposition:
    """Drift, per-calendar-month seasonal terms and the residual pool."""

    drift: float
    seasonal: np.ndarray          # shape (12,), index 0 = January
    residuals: np.ndarray         # bootstrap pool, unfiltered
    base_volatility: float        # sample std of residuals (ddof=1)

    @classmethod
    def empty(cls) -> "Decomposition":
        """Degenerate decomposition for histories shorter than 2 points."""
        return cls(drift=0.0, seasonal=np.zeros(12), residuals=np.zeros(0), base_volatility=0.0)


def month_index(labels) -> np.ndarray:
    """Calendar month 0..11 for each label."""
    return pd.DatetimeIndex(labels).month.to_numpy() - 1


def decompose(values, labels) -> Decomposition:
    """
    Split a history into drift, seasonality and residuals:
      - diffs: first differences of the values
      - seasonal[m]: mean diff whose later endpoint falls in calendar month m (0 if none)
      - drift: mean of the trailing 12 diffs
      - residuals: diff - drift - seasonal[month], extremes kept
    """
    vals = np.asarray(values, dtype=float)
    if len(vals) < 2:
        return Decomposition.empty()

    months = month_index(labels)
    if len(months) != len(vals):
        raise ValueError("values and labels must have the same length")

    diffs = np.diff(vals)
    diff_months = months[1:]

    sums = np.bincount(diff_months, weights=diffs, minlength=12)
    counts = np.bincount(diff_months, minlength=12)
    seasonal = np.divide(sums, counts, out=np.zeros(12), where=counts > 0)

    drift = float(diffs[-DRIFT_LOOKBACK:].mean())
    residuals = diffs - drift - seasonal[diff_months]
    residuals = residuals[np.isfinite(residuals)]

    base_vol = float(np.std(residuals, ddof=1)) if len(residuals) >= 2 else 0.0

    return Decomposition(
        drift=drift,
        seasonal=seasonal,
        residuals=residuals,
        base_volatility=base_vol,
    )
