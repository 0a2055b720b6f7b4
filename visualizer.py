import logging
import os
from typing import Dict, List, Sequence, Tuple

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt

import config
from series_preparer import ChartBundles, DateLabel, MACDBundle, PriceBundle, RSIBundle


class RenderError(Exception):
    """Raised when a chart cannot be drawn or written"""


COLORS = {
    'price': 'red',
    'volatility': '#F59E0B',
    'rsi': '#8B5CF6',
    'overbought': 'red',
    'oversold': 'green',
    'macd': '#3B82F6',
    'signal': '#F59E0B',
}


def chart_paths(ticker: str, output_dir: str = config.OUTPUT_DIR) -> Dict[str, str]:
    """Output file for each chart of a ticker"""
    return {
        'price': os.path.join(output_dir, f"{ticker}-stock-chart.png"),
        'rsi': os.path.join(output_dir, f"{ticker}-stock-RSI-chart.png"),
        'macd': os.path.join(output_dir, f"{ticker}-stock-MACD-chart.png"),
    }


class ChartRenderer:
    """Draw prepared bundles to PNG files with matplotlib"""

    def __init__(self, output_dir: str = config.OUTPUT_DIR,
                 figsize: Tuple[float, float] = config.FIGURE_SIZE, dpi: int = config.DPI):
        """
        Initialize chart renderer

        Args:
            output_dir: Directory the PNG files are written to
            figsize: Figure size in inches
            dpi: Figure resolution
        """
        self.output_dir = output_dir
        self.figsize = figsize
        self.dpi = dpi
        self.logger = logging.getLogger(__name__)

    def render_all(self, ticker: str, bundles: ChartBundles) -> Dict[str, str]:
        """
        Render the price, RSI and MACD charts for a ticker

        Returns:
            Mapping of chart name to written file path

        Raises:
            RenderError: If any chart fails
        """
        paths = chart_paths(ticker, self.output_dir)
        self.render_price(ticker, bundles.price, bundles.labels, bundles.label_indices, paths['price'])
        self.render_rsi(ticker, bundles.rsi, bundles.labels, bundles.label_indices, paths['rsi'])
        self.render_macd(ticker, bundles.macd, bundles.labels, bundles.label_indices, paths['macd'])
        return paths

    def render_price(self, ticker: str, bundle: PriceBundle, labels: Sequence[DateLabel],
                     label_indices: List[int], path: str) -> str:
        def draw(ax):
            if bundle.points:
                xs, ys = zip(*bundle.points)
                ax.plot(xs, ys, color=COLORS['price'], linewidth=1.5, label=ticker)

            for i, bar in enumerate(bundle.error_bars):
                ax.vlines(bar.index, bar.low, bar.high, colors=COLORS['volatility'], linewidth=2,
                          label='High-Low range (volatile)' if i == 0 else '')

            for envelope in bundle.envelopes:
                ax.plot(envelope.xs, envelope.highs, color=COLORS['volatility'], linestyle='--', alpha=0.6)
                ax.plot(envelope.xs, envelope.lows, color=COLORS['volatility'], linestyle='--', alpha=0.6)

            ax.set_title(f"{ticker} Stock Price")
            ax.set_ylabel("Price")
            self._apply_ranges(ax, bundle.x_range, bundle.y_range)

        return self._render(draw, labels, label_indices, path)

    def render_rsi(self, ticker: str, bundle: RSIBundle, labels: Sequence[DateLabel],
                   label_indices: List[int], path: str) -> str:
        def draw(ax):
            if bundle.points:
                xs, ys = zip(*bundle.points)
                ax.plot(xs, ys, color=COLORS['rsi'], linewidth=1.5, label="RSI")

            for line in bundle.reference_lines:
                ax.hlines(line.y, line.x_range[0], line.x_range[1], colors=COLORS.get(line.label, 'gray'),
                          linestyles='--', label=f"{line.label.capitalize()} ({line.y:g})")

            ax.set_title(f"{ticker} RSI")
            ax.set_ylabel("RSI")
            self._apply_ranges(ax, bundle.x_range, bundle.y_range)

        return self._render(draw, labels, label_indices, path)

    def render_macd(self, ticker: str, bundle: MACDBundle, labels: Sequence[DateLabel],
                    label_indices: List[int], path: str) -> str:
        def draw(ax):
            if bundle.macd_points:
                xs, ys = zip(*bundle.macd_points)
                ax.plot(xs, ys, color=COLORS['macd'], linewidth=1.5, label="MACD")
            if bundle.signal_points:
                xs, ys = zip(*bundle.signal_points)
                ax.plot(xs, ys, color=COLORS['signal'], linewidth=1.5, label="Signal Line")

            ax.set_title(f"{ticker} MACD")
            ax.set_ylabel("MACD")
            self._apply_ranges(ax, bundle.x_range, bundle.y_range)

        return self._render(draw, labels, label_indices, path)

    @staticmethod
    def _apply_ranges(ax, x_range, y_range):
        # Degenerate ranges are left to autoscaling
        if x_range[1] > x_range[0]:
            ax.set_xlim(*x_range)
        if y_range[1] > y_range[0]:
            ax.set_ylim(*y_range)

    @staticmethod
    def _apply_labels(ax, labels: Sequence[DateLabel], label_indices: List[int]):
        ticks = [idx for idx in label_indices if idx < len(labels)]
        ax.set_xticks(ticks)
        ax.set_xticklabels([labels[idx].label for idx in ticks])

    def _render(self, draw, labels: Sequence[DateLabel], label_indices: List[int], path: str) -> str:
        fig = None
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
            fig.patch.set_facecolor('white')
            draw(ax)
            self._apply_labels(ax, labels, label_indices)
            ax.grid(True, linestyle='--', alpha=0.5)
            if ax.get_legend_handles_labels()[0]:
                ax.legend(loc='upper left')

            fig.tight_layout()
            fig.savefig(path, dpi=self.dpi, facecolor='white')
        except Exception as e:
            raise RenderError(f"Failed to render {path}: {e}") from e
        finally:
            if fig is not None:
                plt.close(fig)

        self.logger.debug(f"Chart written: {path}")
        return path
