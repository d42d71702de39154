"""Stitch history and forecast onto one monthly label axis.

Internally every month is one slot: Known (an observed history value),
Forecast (mean plus band) or Missing (an alignment placeholder). The
null-padded parallel lists that consumers expect are produced only by
AssembledSeries.to_dict(), which is also the only place values get rounded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .monte_carlo import Diagnostics, MonteCarloResult
from .scenarios import SeriesId
from .series_utilities import month_labels

DECIMALS = 2


@dataclass(frozen=True)
class Known:
    value: float


@dataclass(frozen=True)
class Forecast:
    mean: float
    p10: float
    p90: float


@dataclass(frozen=True)
class Missing:
    pass


Slot = Union[Known, Forecast, Missing]
MISSING = Missing()


def round2(x, decimals: int = DECIMALS) -> Optional[float]:
    if x is None:
        return None
    x = float(x)
    if not np.isfinite(x):
        return None
    return round(x, decimals)


@dataclass
class AssembledSeries:
    series: SeriesId
    labels: pd.DatetimeIndex
    slots: Tuple[Slot, ...]
    window_months: int
    horizon_months: int
    diagnostics: Diagnostics
    anchor: Optional[float] = None

    @property
    def history(self) -> List[Optional[float]]:
        return [s.value if isinstance(s, Known) else None for s in self.slots]

    @property
    def forecast(self) -> List[Optional[float]]:
        return [s.mean if isinstance(s, Forecast) else None for s in self.slots]

    @property
    def p10_path(self) -> List[Optional[float]]:
        return [s.p10 if isinstance(s, Forecast) else None for s in self.slots]

    @property
    def p90_path(self) -> List[Optional[float]]:
        return [s.p90 if isinstance(s, Forecast) else None for s in self.slots]

    @property
    def latest(self) -> Optional[float]:
        """Last observed value in the history half."""
        for s in reversed(self.slots[: self.window_months]):
            if isinstance(s, Known):
                return s.value
        return None

    @property
    def label_strings(self) -> List[str]:
        return [d.strftime("%Y-%m-%d") for d in self.labels]

    def to_dict(self, decimals: int = DECIMALS) -> dict:
        """Flatten to the null-padded parallel-list shape consumers read."""
        r = lambda col: [round2(v, decimals) for v in col]  # noqa: E731
        return {
            "labels": self.label_strings,
            "history": r(self.history),
            "forecast": r(self.forecast),
            "p10Path": r(self.p10_path),
            "p90Path": r(self.p90_path),
            "anchor": round2(self.anchor, decimals),
            "latest": round2(self.latest, decimals),
            "diagnostics": self.diagnostics.to_dict(decimals),
        }


def assemble_series(
    series: SeriesId,
    window_labels: pd.DatetimeIndex,
    window_values,
    result: MonteCarloResult,
    anchor: Optional[float] = None,
) -> AssembledSeries:
    """
    Lay the window (with Missing placeholders) and the horizon (Forecast slots)
    onto window + horizon contiguous month labels.
    """
    window_labels = pd.DatetimeIndex(window_labels)
    values = np.asarray(window_values, dtype=float)
    W = len(window_labels)
    H = result.horizon
    if len(values) != W:
        raise ValueError("window_values must match window_labels")

    labels = month_labels(window_labels[-1], W, H)

    slots: List[Slot] = [Known(float(v)) if np.isfinite(v) else MISSING for v in values]
    for i in range(H):
        slots.append(Forecast(
            mean=float(result.mean_path[i]),
            p10=float(result.p10_path[i]),
            p90=float(result.p90_path[i]),
        ))

    return AssembledSeries(
        series=series,
        labels=labels,
        slots=tuple(slots),
        window_months=W,
        horizon_months=H,
        diagnostics=result.diagnostics,
        anchor=anchor,
    )
