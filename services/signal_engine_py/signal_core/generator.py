"""
Composite signal generation.

Runs the canonical indicator battery (RSI 14, MACD 12/26/9, Bollinger
20/2, SMA 20/50/200, VWAP over the whole series) on one symbol's bars,
scores the latest readings with :mod:`signal_core.rules` and returns a
fresh :class:`TradingSignal`.  Inputs are validated up front so a short
or ragged series never yields a partially-computed signal.
"""
from __future__ import annotations

import pandas as pd

from .config import configure_logger
from .errors import IndicatorError, InsufficientDataError, MisalignedInputError
from .indicators import (
    PriceInput,
    as_series,
    compute_bollinger,
    compute_macd,
    compute_rsi,
    compute_sma,
    compute_vwap,
)
from .rules import MarketReadings, clamp_confidence, score_readings, select_action
from .signals import (
    BandValues,
    IndicatorSnapshot,
    MACDValues,
    MovingAverages,
    TradingSignal,
)

logger = configure_logger("signal_generator")

RSI_PERIOD = 14
MACD_FAST, MACD_SLOW, MACD_SIGNAL = 12, 26, 9
BB_PERIOD, BB_STD = 20, 2.0
SMA_PERIODS = (20, 50, 200)
VOLUME_LOOKBACK = 20
MIN_BARS = max(SMA_PERIODS)

NO_SIGNAL_REASON = "No clear signal detected."


def _last(series: pd.Series) -> float:
    return float(series.iloc[-1])


def _validate(closes: pd.Series, highs: pd.Series, lows: pd.Series, volumes: pd.Series) -> None:
    lengths = [len(closes), len(highs), len(lows), len(volumes)]
    if len(set(lengths)) > 1:
        raise MisalignedInputError(
            f"closes/highs/lows/volumes must have equal length, got {lengths}"
        )
    if lengths[0] < MIN_BARS:
        raise InsufficientDataError(
            f"signal generation needs at least {MIN_BARS} bars, got {lengths[0]}"
        )


def compute_readings(
    closes: PriceInput, highs: PriceInput, lows: PriceInput, volumes: PriceInput
) -> MarketReadings:
    """Validate the bars and collect the latest value of every indicator."""
    closes, highs, lows, volumes = (as_series(s) for s in (closes, highs, lows, volumes))
    _validate(closes, highs, lows, volumes)

    macd = compute_macd(closes, MACD_FAST, MACD_SLOW, MACD_SIGNAL)
    bands = compute_bollinger(closes, BB_PERIOD, BB_STD)
    sma20, sma50, sma200 = (_last(compute_sma(closes, p)) for p in SMA_PERIODS)
    vwap = compute_vwap(highs, lows, closes, volumes)

    return MarketReadings(
        price=_last(closes),
        rsi=_last(compute_rsi(closes, RSI_PERIOD)),
        macd=_last(macd.macd),
        macd_signal=_last(macd.signal),
        macd_histogram=_last(macd.histogram),
        bb_upper=_last(bands.upper),
        bb_middle=_last(bands.middle),
        bb_lower=_last(bands.lower),
        sma20=sma20,
        sma50=sma50,
        sma200=sma200,
        vwap=_last(vwap),
        volume=_last(volumes),
        avg_volume=float(volumes.iloc[-VOLUME_LOOKBACK:].mean()),
    )


def snapshot_from_readings(r: MarketReadings) -> IndicatorSnapshot:
    return IndicatorSnapshot(
        rsi=r.rsi,
        macd=MACDValues(macd=r.macd, signal=r.macd_signal, histogram=r.macd_histogram),
        bollinger_bands=BandValues(upper=r.bb_upper, middle=r.bb_middle, lower=r.bb_lower),
        moving_averages=MovingAverages(sma20=r.sma20, sma50=r.sma50, sma200=r.sma200),
        vwap=r.vwap,
    )


def generate_signal(
    symbol: str,
    closes: PriceInput,
    highs: PriceInput,
    lows: PriceInput,
    volumes: PriceInput,
) -> TradingSignal:
    """
    Generate a composite trading signal from aligned, oldest-first bars.

    Raises ``MisalignedInputError`` when the series differ in length and
    ``InsufficientDataError`` when fewer than ``MIN_BARS`` bars are given.
    """
    readings = compute_readings(closes, highs, lows, volumes)
    raw, notes = score_readings(readings)
    confidence = clamp_confidence(raw)
    action = select_action(readings, confidence)
    logger.debug("%s rule matches: %s (raw=%s)", symbol, notes, raw)
    logger.info("%s signal: %s confidence=%s", symbol, action.value, confidence)
    return TradingSignal(
        symbol=symbol,
        action=action,
        confidence=confidence,
        reason=" ".join(notes) or NO_SIGNAL_REASON,
        indicators=snapshot_from_readings(readings),
    )


def generate_signal_from_frame(symbol: str, df: pd.DataFrame) -> TradingSignal:
    """Generate a signal from an OHLCV frame with high/low/close/volume columns."""
    missing = [c for c in ("high", "low", "close", "volume") if c not in df.columns]
    if missing:
        raise IndicatorError(f"missing OHLCV columns: {missing}")
    return generate_signal(symbol, df["close"], df["high"], df["low"], df["volume"])
