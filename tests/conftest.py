import numpy as np
import pandas as pd
import pytest

from data_fetcher import Quote, QuoteSeries

DAY = 24 * 60 * 60
START_TS = 1700000000  # 2023-11-14 UTC


def _quote(close, spread_pct=1.0, timestamp=START_TS):
    half = close * spread_pct / 200
    return Quote(timestamp=timestamp, open=close, high=close + half, low=close - half, close=close)


@pytest.fixture
def make_quote():
    """Quote whose high-low spread is spread_pct percent of the close"""
    return _quote


@pytest.fixture
def make_series():
    def factory(closes, ticker="TEST", spread_pct=1.0, volatile=()):
        quotes = []
        for i, close in enumerate(closes):
            pct = 5.0 if i in volatile else spread_pct
            quotes.append(_quote(close, pct, START_TS + i * DAY))
        return QuoteSeries(ticker, quotes)
    return factory


@pytest.fixture
def random_closes():
    rng = np.random.default_rng(42)
    returns = rng.normal(0, 0.02, 120)
    return list(100 * np.cumprod(1 + returns))


@pytest.fixture
def history_frame():
    """Frame shaped like yfinance Ticker.history output"""
    index = pd.date_range('2024-01-02', periods=5, freq='D', tz='America/New_York')
    return pd.DataFrame({
        'Open': [10.0, 11.0, 12.0, 13.0, 14.0],
        'High': [10.5, 11.5, 12.5, 13.5, 14.5],
        'Low': [9.5, 10.5, 11.5, 12.5, 13.5],
        'Close': [10.2, 11.2, 12.2, 13.2, 14.2],
        'Volume': [1000, 1100, 1200, 1300, 1400],
        'Dividends': [0.0] * 5,
        'Stock Splits': [0.0] * 5,
    }, index=index)
