import os
import sys

import numpy as np
import pandas as pd
import pytest

# add signal_engine_py to sys.path for tests
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../services/signal_engine_py')))

from signal_core.errors import IndicatorError, InsufficientDataError, MisalignedInputError
from signal_core.generator import (
    MIN_BARS,
    NO_SIGNAL_REASON,
    compute_readings,
    generate_signal,
    generate_signal_from_frame,
)
from signal_core.indicators import compute_bollinger, compute_rsi, compute_sma, compute_vwap
from signal_core.rules import clamp_confidence, score_readings, select_action
from signal_core.signals import Action


def _bars(closes, volume=1000.0):
    closes = [float(c) for c in closes]
    return {
        "closes": closes,
        "highs": [c + 1 for c in closes],
        "lows": [c - 1 for c in closes],
        "volumes": [volume] * len(closes),
    }


def _random_walk_bars(n=260, seed=11):
    rng = np.random.default_rng(seed)
    close = 100 * np.exp(np.cumsum(rng.normal(0, 0.01, n)))
    return {
        "closes": close,
        "highs": close * 1.01,
        "lows": close * 0.99,
        "volumes": rng.integers(900, 1500, n).astype(float),
    }


def test_declining_prices_score_high_but_hold():
    # 170 flat bars at 100, then 30 bars falling 100 -> 71
    bars = _bars([100] * 170 + list(range(100, 70, -1)))
    signal = generate_signal("DOWN", **bars)
    # RSI 0 (+25), bearish MACD (+20), below middle band (+5),
    # below VWAP (+15), full bearish alignment (+20)
    assert signal.confidence == 85
    # 71 sits above the lower band and RSI < 50, so no strong pattern fires
    assert signal.action == Action.HOLD
    assert signal.reason == (
        "RSI oversold (<30). MACD bearish crossover (12,26,9). "
        "Price below Bollinger middle. Price below VWAP (bearish). "
        "Strong downtrend with moving averages aligned."
    )
    snap = signal.indicators
    assert snap.rsi == 0.0
    assert snap.moving_averages.sma20 == pytest.approx(80.5)
    assert snap.moving_averages.sma50 == pytest.approx(91.3)
    assert snap.moving_averages.sma200 == pytest.approx(97.825)
    assert snap.vwap == pytest.approx(97.825)
    assert snap.bollinger_bands.lower < 71 < snap.bollinger_bands.middle


def test_rising_prices_with_volume_spike():
    closes = [100] * 170 + list(range(101, 131))
    bars = _bars(closes)
    bars["volumes"][-1] = 2000.0
    signal = generate_signal("UP", **bars)
    # RSI 100 (+25), bullish MACD (+20), above middle band (+5), above VWAP (+15),
    # full bullish alignment (+20), volume spike (+10)
    assert signal.confidence == 95
    assert signal.action == Action.HOLD
    assert signal.reason.startswith("RSI overbought (>70). MACD bullish crossover (12,26,9).")
    assert signal.reason.endswith("High volume confirmation.")
    assert signal.indicators.rsi == 100.0


def test_flat_prices_produce_no_signal():
    closes = [100.0] * 250
    signal = generate_signal(
        "FLAT", closes, closes, closes, [1000.0] * 250
    )
    snap = signal.indicators
    assert snap.rsi == 50.0
    assert snap.bollinger_bands.upper == pytest.approx(snap.bollinger_bands.lower, abs=1e-9)
    assert snap.macd.histogram == pytest.approx(0.0, abs=1e-9)
    assert signal.confidence == 0
    assert signal.action == Action.HOLD
    assert signal.reason == NO_SIGNAL_REASON


def test_too_few_bars_raise_insufficient_data():
    bars = _bars(range(1, MIN_BARS))
    with pytest.raises(InsufficientDataError):
        generate_signal("SHORT", **bars)


def test_misaligned_series_raise():
    bars = _bars(range(1, 251))
    bars["volumes"] = bars["volumes"][:-1]
    with pytest.raises(MisalignedInputError):
        generate_signal("RAGGED", **bars)


def test_generation_is_idempotent_apart_from_timestamp():
    bars = _random_walk_bars()
    first = generate_signal("RW", **bars)
    second = generate_signal("RW", **bars)
    assert first.confidence == second.confidence
    assert first.action == second.action
    assert first.reason == second.reason
    assert first.indicators == second.indicators


def test_snapshot_matches_indicator_library():
    bars = _random_walk_bars()
    closes = bars["closes"]
    signal = generate_signal("RW", **bars)
    snap = signal.indicators
    bands = compute_bollinger(closes, 20, 2.0)
    assert snap.rsi == pytest.approx(compute_rsi(closes, 14).iloc[-1])
    assert snap.bollinger_bands.middle == pytest.approx(bands.middle.iloc[-1])
    assert snap.moving_averages.sma200 == pytest.approx(compute_sma(closes, 200).iloc[-1])
    assert snap.vwap == pytest.approx(
        compute_vwap(bars["highs"], bars["lows"], closes, bars["volumes"]).iloc[-1]
    )
    assert 0 <= signal.confidence <= 100


def test_signal_agrees_with_rules():
    bars = _random_walk_bars(seed=5)
    readings = compute_readings(**bars)
    raw, notes = score_readings(readings)
    signal = generate_signal("RW", **bars)
    assert signal.confidence == clamp_confidence(raw)
    assert signal.action == select_action(readings, signal.confidence)
    assert signal.reason == (" ".join(notes) or NO_SIGNAL_REASON)


def test_generate_signal_from_frame():
    bars = _random_walk_bars()
    df = pd.DataFrame({
        "open": bars["closes"],
        "high": bars["highs"],
        "low": bars["lows"],
        "close": bars["closes"],
        "volume": bars["volumes"],
    }, index=pd.date_range("2024-01-01", periods=260, freq="D"))
    from_frame = generate_signal_from_frame("RW", df)
    from_arrays = generate_signal("RW", **bars)
    assert from_frame.indicators == from_arrays.indicators
    assert from_frame.action == from_arrays.action


def test_generate_signal_from_frame_requires_ohlcv_columns():
    df = pd.DataFrame({"close": [1.0] * 250})
    with pytest.raises(IndicatorError):
        generate_signal_from_frame("X", df)


def test_signal_serialises_to_plain_dict():
    closes = [100.0] * 250
    payload = generate_signal("FLAT", closes, closes, closes, [1000.0] * 250).to_dict()
    assert payload["action"] == "HOLD"
    assert set(payload["indicators"]) == {"rsi", "macd", "bollingerBands", "movingAverages", "vwap"}
    assert set(payload["indicators"]["macd"]) == {"macd", "signal", "histogram"}
    assert payload["timestamp"].endswith("+00:00")


@pytest.mark.parametrize("price", [33.3, 0.1, 123.456, 1e-7])
def test_flat_prices_at_any_level_produce_no_signal(price):
    closes = [price] * 250
    signal = generate_signal("FLAT", closes, closes, closes, [1234.5] * 250)
    assert signal.indicators.vwap == price
    assert signal.indicators.bollinger_bands.middle == price
    assert signal.confidence == 0
    assert signal.action == Action.HOLD
    assert signal.reason == NO_SIGNAL_REASON
