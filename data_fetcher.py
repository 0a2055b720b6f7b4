import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import yfinance as yf

import config


class FetchError(Exception):
    """Raised when quotes for a ticker cannot be retrieved"""


@dataclass(frozen=True)
class Quote:
    """One trading day (immutable)."""
    timestamp: int
    open: float
    high: float
    low: float
    close: float


class QuoteSeries:
    """Ordered, index-addressable sequence of daily quotes for one ticker"""

    def __init__(self, ticker: str, quotes: Sequence[Quote] = ()):
        self.ticker = ticker
        self._quotes: Tuple[Quote, ...] = tuple(quotes)

    def __len__(self) -> int:
        return len(self._quotes)

    def __iter__(self) -> Iterator[Quote]:
        return iter(self._quotes)

    def __getitem__(self, index: int) -> Quote:
        return self._quotes[index]

    def __repr__(self) -> str:
        return f"QuoteSeries({self.ticker!r}, {len(self)} quotes)"

    @property
    def closes(self) -> List[float]:
        return [quote.close for quote in self._quotes]

    @property
    def timestamps(self) -> List[int]:
        return [quote.timestamp for quote in self._quotes]

    @classmethod
    def from_dataframe(cls, ticker: str, df: pd.DataFrame) -> "QuoteSeries":
        """
        Build a series from a Yahoo Finance history frame

        Args:
            ticker: Stock symbol the frame belongs to
            df: DataFrame with a DatetimeIndex and Open/High/Low/Close columns

        Returns:
            QuoteSeries in the frame's row order
        """
        if df.empty:
            return cls(ticker)

        # Rows without a close cannot be charted
        df = df.dropna(subset=['Close'])
        values = df[['Open', 'High', 'Low', 'Close']].to_numpy(dtype=np.float64)
        timestamps = [int(pd.Timestamp(ts).timestamp()) for ts in df.index]

        quotes = [
            Quote(timestamp=ts, open=float(o), high=float(h), low=float(l), close=float(c))
            for ts, (o, h, l, c) in zip(timestamps, values)
        ]
        return cls(ticker, quotes)


def six_month_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return the (start, end) pair of the trailing lookback window ending now (UTC)"""
    end = now or datetime.now(timezone.utc)
    start = end - timedelta(days=config.LOOKBACK_DAYS)
    return start, end


class QuoteSource:
    """Fetch historical daily quotes from Yahoo Finance"""

    def __init__(self, interval: str = config.DATA_INTERVAL):
        self.interval = interval
        self.logger = logging.getLogger(__name__)

    def fetch(self, ticker: str, start: Union[datetime, str], end: Union[datetime, str]) -> QuoteSeries:
        """
        Fetch daily quotes for a ticker

        Args:
            ticker: Stock symbol
            start: First day of the window
            end: Last day of the window

        Returns:
            QuoteSeries ordered by ascending timestamp

        Raises:
            FetchError: Invalid ticker, network failure or no data in the window
        """
        ticker = ticker.strip().upper()
        if not ticker:
            raise FetchError("Empty ticker symbol")

        self.logger.debug(f"Fetching {ticker} from {start} to {end}")
        try:
            df = yf.Ticker(ticker).history(start=start, end=end, interval=self.interval)
        except Exception as e:
            raise FetchError(f"Failed to fetch history for {ticker}: {e}") from e

        if df is None or df.empty:
            raise FetchError(f"No data returned for {ticker}")

        series = QuoteSeries.from_dataframe(ticker, df.sort_index())
        if len(series) == 0:
            raise FetchError(f"No usable quotes for {ticker}")

        self.logger.info(f"Fetched {len(series)} quotes for {ticker}")
        return series

