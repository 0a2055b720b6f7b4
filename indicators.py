from dataclasses import dataclass
from typing import Iterable, List, Union

import pandas as pd

import config
from config import ConfigurationError
from data_fetcher import QuoteSeries
from macd_calculator import MACDCalculator
from rsi_calculator import RSICalculator

__all__ = ['ConfigurationError', 'IndicatorSample', 'IndicatorEngine', 'rsi', 'macd']


@dataclass(frozen=True)
class IndicatorSample:
    index: int
    rsi: float
    macd: float
    macd_signal: float
    macd_histogram: float


class IndicatorEngine:
    """Computes RSI and MACD side by side in one forward pass over closing prices"""

    def __init__(self, rsi_period: int = config.RSI_PERIOD, fast_period: int = config.MACD_FAST,
                 slow_period: int = config.MACD_SLOW, signal_period: int = config.MACD_SIGNAL):
        # Validates the periods up front
        self.rsi_calculator = RSICalculator(rsi_period)
        self.macd_calculator = MACDCalculator(fast_period, slow_period, signal_period)

    def compute(self, prices: Iterable[float]) -> List[IndicatorSample]:
        self.rsi_calculator.reset()
        self.macd_calculator.reset()

        samples = []
        for index, price in enumerate(prices):
            price = float(price)
            rsi_value = self.rsi_calculator.step(price)
            macd_sample = self.macd_calculator.step(price)
            samples.append(IndicatorSample(
                index=index,
                rsi=rsi_value,
                macd=macd_sample.macd,
                macd_signal=macd_sample.signal,
                macd_histogram=macd_sample.histogram,
            ))
        return samples

    def compute_series(self, series: QuoteSeries) -> List[IndicatorSample]:
        return self.compute(series.closes)


def rsi(prices: Union[pd.Series, Iterable[float]], period: int = config.RSI_PERIOD):
    values = RSICalculator(period).calculate(prices)
    if isinstance(prices, pd.Series):
        return pd.Series(values, index=prices.index, name='RSI', dtype=float)
    return values


def macd(prices: Union[pd.Series, Iterable[float]], fast: int = config.MACD_FAST,
         slow: int = config.MACD_SLOW, signal: int = config.MACD_SIGNAL):
    samples = MACDCalculator(fast, slow, signal).calculate(prices)
    if isinstance(prices, pd.Series):
        return pd.DataFrame(samples, index=prices.index, columns=['MACD', 'Signal', 'Histogram'], dtype=float)
    return samples
