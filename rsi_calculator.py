import logging
from typing import Iterable, List, Optional

import config
from config import ConfigurationError


class RSICalculator:
    """Streaming Relative Strength Index using Wilder's smoothing"""

    def __init__(self, rsi_period: int = config.RSI_PERIOD):
        """
        Initialize RSI calculator

        Args:
            rsi_period: Period for RSI calculation (default 14)

        Raises:
            ConfigurationError: If the period is not a positive integer
        """
        if not isinstance(rsi_period, int) or isinstance(rsi_period, bool) or rsi_period <= 0:
            raise ConfigurationError(f"RSI period must be a positive integer, got {rsi_period!r}")

        self.rsi_period = rsi_period
        self.logger = logging.getLogger(__name__)
        self.reset()

    def reset(self):
        """Forget all prices seen so far"""
        self.avg_gain = 0.0
        self.avg_loss = 0.0
        self.previous_price: Optional[float] = None

    def step(self, price: float) -> float:
        """
        Consume one closing price and return the RSI after it

        The first price has no predecessor and counts as a zero delta, so both
        averages start from 0 and the first sample is 100.

        Args:
            price: Next closing price

        Returns:
            RSI value in [0, 100]
        """
        delta = 0.0 if self.previous_price is None else price - self.previous_price
        self.previous_price = price

        gain = delta if delta > 0 else 0.0
        loss = -delta if delta < 0 else 0.0

        period = self.rsi_period
        self.avg_gain = (self.avg_gain * (period - 1) + gain) / period
        self.avg_loss = (self.avg_loss * (period - 1) + loss) / period

        # No losses in the window
        if self.avg_loss == 0:
            return 100.0

        rs = self.avg_gain / self.avg_loss
        return 100.0 - (100.0 / (1.0 + rs))

    def calculate(self, prices: Iterable[float]) -> List[float]:
        """
        Calculate RSI for a whole price sequence with fresh state

        Args:
            prices: Closing prices in chronological order

        Returns:
            One RSI value per price
        """
        self.reset()
        values = [self.step(float(price)) for price in prices]
        if values:
            self.logger.debug(f"RSI calculated for {len(values)} prices. Current RSI: {values[-1]:.2f}")
        return values


def classify_rsi_level(rsi_value: float,
                       oversold_threshold: float = config.RSI_OVERSOLD_THRESHOLD,
                       overbought_threshold: float = config.RSI_OVERBOUGHT_THRESHOLD) -> str:
    """Classify RSI level into categories"""
    if rsi_value >= overbought_threshold:
        return 'OVERBOUGHT'
    elif rsi_value <= oversold_threshold:
        return 'OVERSOLD'
    return 'NEUTRAL'
