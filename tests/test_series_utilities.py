"""
Tests for calendar alignment and year-over-year transforms.
"""
import pytest
import numpy as np
import pandas as pd
from macrocast.core.engine.errors import InsufficientHistory
from macrocast.core.engine.series_utilities import (
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


def _monthly(values, start="2020-01-01", name="TEST"):
    idx = pd.date_range(start, periods=len(values), freq="MS")
    return pd.Series(np.asarray(values, dtype=float), index=idx, name=name)


@pytest.mark.unit
class TestMonthlyAlignment:
    """Tests for truncating observations onto a monthly grid."""

    def test_month_start_truncation(self):
        """Any day of the month maps to the first of that month."""
        idx = to_month_start(["2024-03-17", "2024-12-31"])
        assert list(idx.strftime("%Y-%m-%d")) == ["2024-03-01", "2024-12-01"]

    def test_last_value_in_month_wins(self):
        """Later raw entries overwrite earlier ones for the same month."""
        obs = [("2024-01-05", 1.0), ("2024-01-20", 2.0), ("2024-02-01", 3.0)]
        s = to_monthly_aligned(obs)

        assert len(s) == 2
        assert s[pd.Timestamp("2024-01-01")] == 2.0
        assert s[pd.Timestamp("2024-02-01")] == 3.0

    def test_output_sorted_by_month(self):
        """Unordered input comes back in ascending month order."""
        obs = [("2024-03-01", 5.0), ("2024-01-01", 1.0), ("2024-02-10", 2.0)]
        s = to_monthly_aligned(obs)

        assert s.index.is_monotonic_increasing
        assert s.index.is_unique
        np.testing.assert_array_equal(s.to_numpy(), [1.0, 2.0, 5.0])

    def test_null_values_are_skipped(self):
        """Missing prints never overwrite a real value."""
        obs = [
            ("2024-01-01", 1.0),
            ("2024-01-20", None),
            ("2024-02-01", "."),
            ("2024-03-01", float("nan")),
            ("2024-04-01", 4.0),
        ]
        s = to_monthly_aligned(obs)

        assert list(s.index.strftime("%Y-%m")) == ["2024-01", "2024-04"]
        assert s.iloc[0] == 1.0

    def test_mapping_and_series_inputs(self):
        """Dict observations and date-indexed Series align the same way."""
        as_dicts = [{"date": "2024-01-15", "value": 1.5}, {"date": "2024-02-15", "value": "2.5"}]
        as_series = pd.Series([1.5, 2.5], index=pd.to_datetime(["2024-01-15", "2024-02-15"]))

        a = to_monthly_aligned(as_dicts)
        b = to_monthly_aligned(as_series)

        np.testing.assert_array_equal(a.to_numpy(), b.to_numpy())
        assert (a.index == b.index).all()

    def test_empty_input(self):
        """No observations gives an empty series, not an error."""
        s = to_monthly_aligned([])
        assert len(s) == 0


@pytest.mark.unit
class TestHighFrequencyAverage:
    """Tests for averaging weekly prints into months."""

    def test_mean_per_month(self):
        """Each month is the mean of its prints; empty months are absent."""
        obs = [
            ("2024-01-05", 1.0),
            ("2024-01-12", 2.0),
            ("2024-01-19", 3.0),
            ("2024-03-08", 4.0),
        ]
        s = monthly_average_from_high_freq(obs)

        assert list(s.index.strftime("%Y-%m")) == ["2024-01", "2024-03"]
        np.testing.assert_almost_equal(s.iloc[0], 2.0)
        np.testing.assert_almost_equal(s.iloc[1], 4.0)

    def test_nulls_do_not_count(self):
        """Null prints are excluded from both the sum and the count."""
        obs = [("2024-01-05", 1.0), ("2024-01-12", None), ("2024-01-19", 3.0)]
        s = monthly_average_from_high_freq(obs)
        np.testing.assert_almost_equal(s.iloc[0], 2.0)


@pytest.mark.unit
class TestQuarterlyStepFill:
    """Tests for spreading quarterly values over months."""

    def test_two_quarters(self):
        """Each quarter fills the 3 months ending at its reported month."""
        obs = [("2024-03-01", 100.0), ("2024-06-01", 103.0)]
        s = quarterly_to_monthly_step_fill(obs)

        assert list(s.index.strftime("%Y-%m")) == [
            "2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06",
        ]
        np.testing.assert_array_equal(s.to_numpy(), [100, 100, 100, 103, 103, 103])

    def test_later_quarter_overwrites_overlap(self):
        """Overlapping months take the later quarter's value."""
        obs = [("2024-03-01", 100.0), ("2024-04-01", 110.0)]
        s = quarterly_to_monthly_step_fill(obs)

        np.testing.assert_array_equal(s.to_numpy(), [100, 110, 110, 110])

    def test_crosses_year_boundary(self):
        """A first-quarter print reaches back into the previous year."""
        s = quarterly_to_monthly_step_fill([("2024-01-01", 50.0)])
        assert list(s.index.strftime("%Y-%m")) == ["2023-11", "2023-12", "2024-01"]


@pytest.mark.unit
class TestYoY:
    """Tests for year-over-year percent change."""

    def test_constant_level_is_zero(self):
        """A constant 24-month level series has 0.00 YoY everywhere."""
        yoy = compute_yoy_from_level(_monthly([100.0] * 24))

        assert len(yoy) == 12
        np.testing.assert_array_equal(yoy.round(2).to_numpy(), np.zeros(12))
        assert yoy.index[0] == pd.Timestamp("2021-01-01")

    def test_ten_percent_growth(self):
        """110 against 100 a year earlier is +10%."""
        yoy = compute_yoy_from_level(_monthly([100.0] * 12 + [110.0] * 12))
        np.testing.assert_allclose(yoy.to_numpy(), np.full(12, 10.0))

    def test_zero_prior_value_is_skipped(self):
        """A zero denominator drops that month instead of producing inf."""
        values = [0.0] + [100.0] * 23
        yoy = compute_yoy_from_level(_monthly(values))

        assert len(yoy) == 11
        assert pd.Timestamp("2021-01-01") not in yoy.index
        assert np.isfinite(yoy.to_numpy()).all()

    def test_missing_prior_month_is_skipped(self):
        """A gap in the prior year drops the matching month a year later."""
        s = _monthly([100.0] * 24).drop(pd.Timestamp("2020-05-01"))
        yoy = compute_yoy_from_level(s)

        assert len(yoy) == 11
        assert pd.Timestamp("2021-05-01") not in yoy.index

    def test_short_series_is_empty(self):
        """Fewer than 13 months has nothing to compare."""
        assert len(compute_yoy_from_level(_monthly([100.0] * 12))) == 0
        assert len(compute_yoy_from_level(pd.Series(dtype=float))) == 0


@pytest.mark.unit
class TestHistoryWindow:
    """Tests for history checks and window extraction."""

    def test_insufficient_history_raises(self):
        """Fewer than window + 2 months raises with the series and count."""
        with pytest.raises(InsufficientHistory) as exc:
            ensure_history(_monthly([1.0] * 5), 36, "UNRATE")

        assert exc.value.series == "UNRATE"
        assert exc.value.available == 5
        assert exc.value.required == 38
        assert "UNRATE" in str(exc.value)
        assert "5" in str(exc.value)

    def test_exact_minimum_passes(self):
        """Exactly window + 2 months is enough."""
        ensure_history(_monthly([1.0] * 38), 36, "UNRATE")

    def test_window_keeps_gaps_as_nan(self):
        """Missing months stay on the grid as NaN placeholders."""
        s = _monthly(np.arange(30, dtype=float)).drop(pd.Timestamp("2021-12-01"))
        labels, values = history_window(s, 12)

        assert len(labels) == 12
        assert labels[-1] == pd.Timestamp("2022-06-01")
        assert labels[0] == pd.Timestamp("2021-07-01")
        assert np.isnan(values[5])
        assert np.isfinite(np.delete(values, 5)).all()

    def test_clean_history_keeps_pairs(self):
        """Dropping placeholders keeps each value with its own month."""
        labels = pd.date_range("2024-01-01", periods=4, freq="MS")
        vals, labs = clean_history(labels, [1.0, np.nan, 3.0, 4.0])

        np.testing.assert_array_equal(vals, [1.0, 3.0, 4.0])
        assert list(labs.strftime("%m")) == ["01", "03", "04"]

    def test_month_labels_contiguous(self):
        """Window + horizon labels are one per calendar month."""
        labels = month_labels("2024-11-15", 3, 4)

        assert len(labels) == 7
        assert list(labels.strftime("%Y-%m")) == [
            "2024-09", "2024-10", "2024-11", "2024-12", "2025-01", "2025-02", "2025-03",
        ]
