"""
Tests for seasonal-drift decomposition.
"""
import pytest
import numpy as np
import pandas as pd
from macrocast.core.engine.decompose import Decomposition, decompose, month_index


def _labels(n, start="2020-01-01"):
    return pd.date_range(start, periods=n, freq="MS")


@pytest.mark.unit
class TestDecompose:
    """Tests for drift, seasonality and the residual pool."""

    def test_hand_computed_example(self):
        """Three points: every term checked by hand."""
        dec = decompose([0.0, 1.0, 3.0], _labels(3, "2024-01-01"))

        # diffs [1, 2] land in Feb and Mar
        np.testing.assert_almost_equal(dec.drift, 1.5)
        np.testing.assert_almost_equal(dec.seasonal[1], 1.0)
        np.testing.assert_almost_equal(dec.seasonal[2], 2.0)
        assert dec.seasonal[0] == 0.0
        np.testing.assert_allclose(dec.residuals, [-1.5, -1.5])
        np.testing.assert_almost_equal(dec.base_volatility, 0.0)

    def test_linear_series(self):
        """Constant steps: drift and every seasonal term equal the step."""
        vals = 10.0 + 0.5 * np.arange(36)
        dec = decompose(vals, _labels(36))

        np.testing.assert_almost_equal(dec.drift, 0.5)
        np.testing.assert_allclose(dec.seasonal, np.full(12, 0.5))
        assert len(dec.residuals) == 35
        np.testing.assert_allclose(dec.residuals, np.full(35, -0.5), atol=1e-12)

    def test_drift_uses_trailing_twelve(self):
        """Only the last 12 differences feed the drift."""
        vals = np.concatenate([np.zeros(13), np.arange(1, 13, dtype=float)])
        dec = decompose(vals, _labels(len(vals)))

        np.testing.assert_almost_equal(dec.drift, 1.0)

    def test_short_history_drift_uses_all(self):
        """With under 12 differences the drift averages whatever exists."""
        dec = decompose([1.0, 2.0, 4.0, 7.0], _labels(4))
        np.testing.assert_almost_equal(dec.drift, 2.0)

    def test_seasonal_keyed_by_later_month(self):
        """A December -> January difference counts toward January."""
        dec = decompose([5.0, 8.0], pd.to_datetime(["2023-12-01", "2024-01-01"]))

        np.testing.assert_almost_equal(dec.seasonal[0], 3.0)
        assert dec.seasonal[11] == 0.0

    def test_outliers_stay_in_pool(self):
        """Extreme residuals are kept for resampling."""
        vals = np.zeros(24)
        vals[10:] += 50.0  # one-off jump
        dec = decompose(vals, _labels(24))

        assert np.abs(dec.residuals).max() > 20.0
        assert len(dec.residuals) == 23

    def test_base_volatility_is_sample_std(self):
        """Base volatility uses ddof = 1."""
        rng = np.random.default_rng(3)
        vals = np.cumsum(rng.normal(0, 1, 48))
        dec = decompose(vals, _labels(48))

        np.testing.assert_almost_equal(dec.base_volatility, np.std(dec.residuals, ddof=1))

    def test_single_residual_has_zero_volatility(self):
        """One residual cannot define a sample std."""
        dec = decompose([1.0, 2.0], _labels(2))
        assert len(dec.residuals) == 1
        assert dec.base_volatility == 0.0


@pytest.mark.unit
class TestDegenerateHistory:
    """Tests for histories too short to decompose."""

    @pytest.mark.parametrize("values", [[], [4.2]])
    def test_degrades_to_zero(self, values):
        """Fewer than 2 points gives zero drift, zero seasonality, empty pool."""
        dec = decompose(values, _labels(len(values)))

        assert dec.drift == 0.0
        np.testing.assert_array_equal(dec.seasonal, np.zeros(12))
        assert len(dec.residuals) == 0
        assert dec.base_volatility == 0.0

    def test_empty_factory(self):
        """Decomposition.empty matches the degenerate result."""
        dec = Decomposition.empty()
        assert dec.seasonal.shape == (12,)

    def test_month_index(self):
        """Calendar months map to 0..11."""
        idx = month_index(pd.to_datetime(["2024-01-01", "2024-12-01"]))
        np.testing.assert_array_equal(idx, [0, 11])
