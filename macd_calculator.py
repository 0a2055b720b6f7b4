import logging
from typing import Iterable, List, NamedTuple, Optional

import config
from config import ConfigurationError


class MACDSample(NamedTuple):
    macd: float
    signal: float
    histogram: float


class MACDCalculator:
    """
    Streaming Moving Average Convergence Divergence.

    Every EMA is seeded with the first value it sees: the fast and slow EMAs
    with the first price, the signal EMA with the first MACD value (0). This
    matches pandas ``ewm(span=period, adjust=False)``.
    """

    def __init__(self, fast_period: int = config.MACD_FAST, slow_period: int = config.MACD_SLOW,
                 signal_period: int = config.MACD_SIGNAL):
        """
        Initialize MACD calculator

        Args:
            fast_period: Fast EMA period (default 12)
            slow_period: Slow EMA period (default 26)
            signal_period: Signal line EMA period (default 9)

        Raises:
            ConfigurationError: On non-positive periods or fast >= slow
        """
        for name, period in (('fast', fast_period), ('slow', slow_period), ('signal', signal_period)):
            if not isinstance(period, int) or isinstance(period, bool) or period <= 0:
                raise ConfigurationError(f"MACD {name} period must be a positive integer, got {period!r}")
        if fast_period >= slow_period:
            raise ConfigurationError(
                f"MACD fast period ({fast_period}) must be shorter than slow period ({slow_period})"
            )

        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period

        self.fast_alpha = 2.0 / (fast_period + 1)
        self.slow_alpha = 2.0 / (slow_period + 1)
        self.signal_alpha = 2.0 / (signal_period + 1)

        self.logger = logging.getLogger(__name__)
        self.reset()

    def reset(self):
        """Forget all prices seen so far"""
        self.ema_fast: Optional[float] = None
        self.ema_slow: Optional[float] = None
        self.ema_signal: Optional[float] = None

    @staticmethod
    def _ema(previous: Optional[float], value: float, alpha: float) -> float:
        if previous is None:
            return value
        return previous + alpha * (value - previous)

    def step(self, price: float) -> MACDSample:
        """Consume one closing price and return (macd, signal, histogram)"""
        self.ema_fast = self._ema(self.ema_fast, price, self.fast_alpha)
        self.ema_slow = self._ema(self.ema_slow, price, self.slow_alpha)

        macd = self.ema_fast - self.ema_slow
        self.ema_signal = self._ema(self.ema_signal, macd, self.signal_alpha)

        return MACDSample(macd, self.ema_signal, macd - self.ema_signal)

    def calculate(self, prices: Iterable[float]) -> List[MACDSample]:
        """
        Calculate MACD for a whole price sequence with fresh state

        Args:
            prices: Closing prices in chronological order

        Returns:
            One MACDSample per price
        """
        self.reset()
        samples = [self.step(float(price)) for price in prices]
        if samples:
            last = samples[-1]
            self.logger.debug(f"MACD calculated for {len(samples)} prices. "
                              f"MACD: {last.macd:.4f}, Signal: {last.signal:.4f}")
        return samples
