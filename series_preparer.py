import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, NamedTuple, Sequence, Tuple

import config
from data_fetcher import QuoteSeries
from indicators import IndicatorSample

logger = logging.getLogger(__name__)

Point = Tuple[int, float]
Range = Tuple[float, float]


class DateLabel(NamedTuple):
    index: int
    label: str


class ErrorBar(NamedTuple):
    index: int
    low: float
    high: float


class Envelope(NamedTuple):
    """High and low lines around a volatile day, one index either side"""
    index: int
    xs: Tuple[int, ...]
    highs: Tuple[float, ...]
    lows: Tuple[float, ...]


class ReferenceLine(NamedTuple):
    y: float
    label: str
    x_range: Tuple[int, int]


@dataclass
class PriceBundle:
    points: List[Point] = field(default_factory=list)
    error_bars: List[ErrorBar] = field(default_factory=list)
    envelopes: List[Envelope] = field(default_factory=list)
    x_range: Tuple[int, int] = (0, 0)
    y_range: Range = (0.0, 0.0)


@dataclass
class RSIBundle:
    points: List[Point] = field(default_factory=list)
    reference_lines: List[ReferenceLine] = field(default_factory=list)
    x_range: Tuple[int, int] = (0, 0)
    y_range: Range = (0.0, 100.0)


@dataclass
class MACDBundle:
    macd_points: List[Point] = field(default_factory=list)
    signal_points: List[Point] = field(default_factory=list)
    x_range: Tuple[int, int] = (0, 0)
    y_range: Range = (0.0, 0.0)


@dataclass
class ChartBundles:
    price: PriceBundle
    rsi: RSIBundle
    macd: MACDBundle
    labels: List[DateLabel]
    label_indices: List[int]


def format_date(timestamp: int) -> str:
    """UTC calendar date of a timestamp, or '' when it is not a valid date"""
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime('%Y-%m-%d')
    except (OverflowError, OSError, ValueError, TypeError):
        return ''


def date_labels(series: QuoteSeries) -> List[DateLabel]:
    """
    One label per quote. Unparseable timestamps keep their slot with an empty
    label so labels and prices share one index space.
    """
    labels = []
    for index, quote in enumerate(series):
        label = format_date(quote.timestamp)
        if not label:
            logger.warning(f"Invalid timestamp at index {index}: {quote.timestamp}")
        labels.append(DateLabel(index, label))
    return labels


def pick_label_indices(count: int, max_labels: int = config.MAX_X_LABELS) -> List[int]:
    """Indices of the labels to display: every (count // max_labels)-th, at least every one"""
    if count <= 0:
        return []
    step = max(1, count // max(1, max_labels))
    return [idx for idx in range(count) if idx % step == 0]


class SeriesPreparer:
    """Turns quotes and indicator output into chart-ready bundles"""

    def __init__(self, overbought: float = config.RSI_OVERBOUGHT_THRESHOLD,
                 oversold: float = config.RSI_OVERSOLD_THRESHOLD,
                 max_labels: int = config.MAX_X_LABELS):
        self.overbought = overbought
        self.oversold = oversold
        self.max_labels = max_labels
        self.logger = logging.getLogger(__name__)

    def prepare(self, series: QuoteSeries, samples: Sequence[IndicatorSample],
                flags: Sequence[bool], labels: Sequence[DateLabel]) -> ChartBundles:
        """
        Build the price, RSI and MACD bundles plus the shared label axis

        Args:
            series: Quotes in chart order
            samples: One IndicatorSample per quote
            flags: One volatility flag per quote
            labels: Date labels for the x axis

        Returns:
            ChartBundles

        Raises:
            ValueError: If samples or flags do not match the series length
        """
        n = len(series)
        if len(samples) != n or len(flags) != n:
            raise ValueError(
                f"Length mismatch: {n} quotes, {len(samples)} indicator samples, {len(flags)} volatility flags"
            )
        if len(labels) != n:
            self.logger.warning(f"{len(labels)} date labels for {n} quotes")

        bundles = ChartBundles(
            price=self._price_bundle(series, flags),
            rsi=self._rsi_bundle(samples),
            macd=self._macd_bundle(samples),
            labels=list(labels),
            label_indices=pick_label_indices(len(labels), self.max_labels),
        )
        self.logger.debug(f"Prepared bundles for {series.ticker}: {n} points, "
                          f"{len(bundles.price.error_bars)} volatile days")
        return bundles

    def _price_bundle(self, series: QuoteSeries, flags: Sequence[bool]) -> PriceBundle:
        n = len(series)
        bundle = PriceBundle()
        if n == 0:
            return bundle

        closes = series.closes
        bundle.points = list(enumerate(closes))
        bundle.x_range = (0, n + n // 20)
        bundle.y_range = (min(closes) - 10.0, max(closes) + 10.0)

        for idx, (quote, volatile) in enumerate(zip(series, flags)):
            if not volatile:
                continue
            bundle.error_bars.append(ErrorBar(idx, quote.low, quote.high))
            xs = tuple(range(max(0, idx - 1), min(n - 1, idx + 1) + 1))
            bundle.envelopes.append(Envelope(
                index=idx,
                xs=xs,
                highs=(quote.high,) * len(xs),
                lows=(quote.low,) * len(xs),
            ))
        return bundle

    def _rsi_bundle(self, samples: Sequence[IndicatorSample]) -> RSIBundle:
        bundle = RSIBundle()
        if not samples:
            return bundle

        x_range = (0, len(samples) - 1)
        bundle.points = [(s.index, s.rsi) for s in samples]
        bundle.x_range = x_range
        bundle.reference_lines = [
            ReferenceLine(self.overbought, 'overbought', x_range),
            ReferenceLine(self.oversold, 'oversold', x_range),
        ]
        return bundle

    def _macd_bundle(self, samples: Sequence[IndicatorSample]) -> MACDBundle:
        bundle = MACDBundle()
        if not samples:
            return bundle

        bundle.macd_points = [(s.index, s.macd) for s in samples]
        bundle.signal_points = [(s.index, s.macd_signal) for s in samples]
        bundle.x_range = (0, len(samples) - 1)

        # Axis is scaled by the histogram range even though the histogram is not drawn
        histogram = [s.macd_histogram for s in samples]
        hist_min, hist_max = min(histogram), max(histogram)
        span = hist_max - hist_min
        bundle.y_range = (hist_min - span, hist_max + span)
        return bundle
