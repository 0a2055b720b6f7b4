import argparse
import logging
import sys
from typing import Dict, Optional

import config
from data_fetcher import FetchError, QuoteSource, six_month_window
from indicators import IndicatorEngine
from rsi_calculator import classify_rsi_level
from series_preparer import SeriesPreparer, date_labels
from utils import Timer, setup_logging
from visualizer import ChartRenderer, RenderError
from volatility import classify_volatility

PROMPT = "Enter the stock ticker (or 'q' to exit): "

logger = logging.getLogger(__name__)


def process_ticker(ticker: str, source: QuoteSource, engine: IndicatorEngine,
                   preparer: SeriesPreparer, renderer: ChartRenderer) -> Dict[str, str]:
    """
    Fetch quotes for one ticker and write its three charts

    Raises:
        FetchError: Quotes could not be fetched, nothing is rendered
        RenderError: A chart could not be written
    """
    start, end = six_month_window()
    series = source.fetch(ticker, start, end)
    if len(series) == 0:
        raise FetchError(f"No quotes for {ticker}")

    with Timer(f"Indicator pipeline for {series.ticker}"):
        samples = engine.compute_series(series)
        flags = classify_volatility(series)
        labels = date_labels(series)
        bundles = preparer.prepare(series, samples, flags, labels)

    last = samples[-1]
    logger.info(f"{series.ticker}: close {series[-1].close:.2f}, RSI {last.rsi:.1f} "
                f"({classify_rsi_level(last.rsi, preparer.oversold, preparer.overbought)}), "
                f"MACD {last.macd:.3f}, {sum(flags)} volatile days")

    # Files are named after the ticker as typed
    return renderer.render_all(ticker.strip(), bundles)


def run(source: QuoteSource, engine: IndicatorEngine, preparer: SeriesPreparer, renderer: ChartRenderer,
        stdin=None, stdout=None, stderr=None):
    """Prompt for tickers until 'q' or end of input"""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    while True:
        stdout.write(PROMPT)
        stdout.flush()

        line = stdin.readline()
        if not line:
            break

        ticker = line.strip()
        if ticker == 'q':
            break
        if not ticker:
            continue

        try:
            paths = process_ticker(ticker, source, engine, preparer, renderer)
        except FetchError as e:
            logger.warning(f"Fetch failed for {ticker}: {e}")
            print(f"Invalid Company Code, {e}", file=stderr)
            continue
        except RenderError as e:
            logger.error(f"Render failed for {ticker}: {e}")
            print(f"Failed to draw charts for {ticker}: {e}", file=stderr)
            continue

        for path in paths.values():
            print(f"Chart saved: {path}", file=stdout)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Draw price, RSI and MACD charts for stock tickers")
    parser.add_argument('--output-dir', default=config.OUTPUT_DIR, help="Directory for the PNG charts")
    parser.add_argument('--log-level', default=config.LOG_LEVEL,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], type=str.upper)
    parser.add_argument('--log-file', default=None, help="Log file path (default: logs/stock_charts_<time>.log)")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None):
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file, log_to_file=config.LOG_TO_FILE)

    engine = IndicatorEngine()
    try:
        run(QuoteSource(), engine, SeriesPreparer(), ChartRenderer(output_dir=args.output_dir))
    except KeyboardInterrupt:
        print("\nInterrupted by user")


if __name__ == "__main__":
    main()
