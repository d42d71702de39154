"""Error types raised by the forecasting engine."""


class ForecastError(Exception):
    """Base class for forecasting failures surfaced to the caller."""


class InsufficientHistory(ForecastError):
    """Raised when a series has fewer aligned months than the window needs.

    Fatal for the whole multi-series response: no partial results are built.
    """

    def __init__(self, series: str, available: int, required: int):
        self.series = series
        self.available = available
        self.required = required
        super().__init__(
            f"Not enough data for {series}. Have {available} months, need {required}."
        )
