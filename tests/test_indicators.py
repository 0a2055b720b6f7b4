import numpy as np
import pandas as pd
import pytest

from config import ConfigurationError
from indicators import IndicatorEngine, IndicatorSample, macd, rsi
from macd_calculator import MACDCalculator
from rsi_calculator import RSICalculator, classify_rsi_level


@pytest.mark.parametrize("length", [1, 2, 14, 30, 120])
def test_outputs_match_input_length(random_closes, length):
    prices = random_closes[:length]
    samples = IndicatorEngine().compute(prices)

    assert len(samples) == length
    assert len(RSICalculator().calculate(prices)) == length
    assert len(MACDCalculator().calculate(prices)) == length
    assert [s.index for s in samples] == list(range(length))


def test_empty_input_gives_empty_output():
    assert IndicatorEngine().compute([]) == []
    assert rsi([]) == []
    assert macd([]) == []


def test_rsi_stays_within_bounds(random_closes):
    values = RSICalculator().calculate(random_closes + [0.0, 500.0, 0.0])
    assert all(0.0 <= v <= 100.0 for v in values)


def test_rsi_non_decreasing_prices_stay_at_100():
    values = RSICalculator().calculate([1, 1, 2, 3, 3, 5, 8, 8, 13])
    assert values == [100.0] * 9


def test_rsi_flat_prices_are_constant():
    values = RSICalculator(14).calculate([10, 10, 10])
    assert values[0] == values[1] == values[2] == 100.0


def test_rsi_falling_prices_drop_to_zero():
    values = RSICalculator().calculate([5, 4, 3, 2, 1])
    assert values[0] == 100.0
    assert values[1:] == [0.0] * 4


def test_rsi_matches_wilder_smoothing_in_pandas(random_closes):
    period = 14
    closes = pd.Series(random_closes)
    delta = closes.diff().fillna(0.0)
    avg_gain = delta.clip(lower=0).ewm(alpha=1 / period, adjust=False).mean()
    avg_loss = (-delta).clip(lower=0).ewm(alpha=1 / period, adjust=False).mean()
    expected = np.where(avg_loss == 0, 100.0, 100 - 100 / (1 + avg_gain / avg_loss.replace(0, np.nan)))

    assert np.allclose(RSICalculator(period).calculate(random_closes), expected)


def test_rsi_single_step_example():
    calc = RSICalculator(2)
    calc.step(10)
    # gain 2: avg_gain = (0 + 2) / 2 = 1, avg_loss = 0
    assert calc.step(12) == 100.0
    # loss 1: avg_gain = 0.5, avg_loss = 0.5
    assert calc.step(11) == pytest.approx(50.0)


def test_macd_histogram_is_macd_minus_signal(random_closes):
    for sample in MACDCalculator().calculate(random_closes):
        assert sample.histogram == sample.macd - sample.signal


def test_macd_first_sample_is_zero():
    first = MACDCalculator().calculate([42.0, 43.0])[0]
    assert first == (0.0, 0.0, 0.0)


def test_macd_matches_pandas_ewm(random_closes):
    closes = pd.Series(random_closes)
    macd_line = closes.ewm(span=12, adjust=False).mean() - closes.ewm(span=26, adjust=False).mean()
    signal_line = macd_line.ewm(span=9, adjust=False).mean()

    result = macd(closes)

    assert list(result.columns) == ['MACD', 'Signal', 'Histogram']
    assert np.allclose(result['MACD'], macd_line)
    assert np.allclose(result['Signal'], signal_line)
    assert np.allclose(result['Histogram'], macd_line - signal_line)


def test_rsi_helper_keeps_series_index():
    closes = pd.Series([1.0, 2.0, 1.5], index=pd.date_range('2024-01-01', periods=3))
    result = rsi(closes)
    assert isinstance(result, pd.Series)
    assert result.index.equals(closes.index)


def test_calculate_resets_state(random_closes):
    calc = MACDCalculator()
    assert calc.calculate(random_closes) == calc.calculate(random_closes)

    rsi_calc = RSICalculator()
    assert rsi_calc.calculate(random_closes) == rsi_calc.calculate(random_closes)


def test_engine_combines_both_indicators(random_closes):
    samples = IndicatorEngine().compute(random_closes)
    rsi_values = RSICalculator().calculate(random_closes)
    macd_values = MACDCalculator().calculate(random_closes)

    assert samples[10] == IndicatorSample(10, rsi_values[10], *macd_values[10])


def test_engine_compute_series(make_series):
    series = make_series([10, 11, 12])
    assert IndicatorEngine().compute_series(series) == IndicatorEngine().compute([10, 11, 12])


@pytest.mark.parametrize("period", [0, -1, 2.5, None])
def test_rsi_rejects_invalid_period(period):
    with pytest.raises(ConfigurationError):
        RSICalculator(period)


@pytest.mark.parametrize("fast, slow, signal", [
    (0, 26, 9),
    (12, -26, 9),
    (12, 26, 0),
    (26, 12, 9),
    (12, 12, 9),
])
def test_macd_rejects_invalid_periods(fast, slow, signal):
    with pytest.raises(ConfigurationError):
        MACDCalculator(fast, slow, signal)


def test_engine_validates_at_construction():
    with pytest.raises(ConfigurationError):
        IndicatorEngine(rsi_period=0)
    with pytest.raises(ValueError):
        IndicatorEngine(fast_period=30, slow_period=26)


@pytest.mark.parametrize("value, level", [
    (85.0, 'OVERBOUGHT'),
    (70.0, 'OVERBOUGHT'),
    (50.0, 'NEUTRAL'),
    (30.0, 'OVERSOLD'),
    (5.0, 'OVERSOLD'),
])
def test_classify_rsi_level(value, level):
    assert classify_rsi_level(value) == level
