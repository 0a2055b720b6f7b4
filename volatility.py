import math
from typing import List

import config
from data_fetcher import Quote, QuoteSeries


def is_volatile(quote: Quote, threshold_pct: float = config.VOLATILITY_THRESHOLD_PCT) -> bool:
    """
    A day is volatile when its high-low spread exceeds threshold_pct of the close.
    A zero close is never volatile.
    """
    if quote.close == 0:
        return False
    spread_pct = (quote.high - quote.low) / quote.close * 100
    return math.isfinite(spread_pct) and spread_pct > threshold_pct


def classify_volatility(series: QuoteSeries, threshold_pct: float = config.VOLATILITY_THRESHOLD_PCT) -> List[bool]:
    return [is_volatile(quote, threshold_pct) for quote in series]
