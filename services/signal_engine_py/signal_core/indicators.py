"""Implement common technical indicators using pure pandas.

This module provides stand‑alone implementations of SMA, EMA, RSI,
MACD, Bollinger Bands, the Stochastic Oscillator and VWAP without
relying on external TA libraries.

Every function drops its warm‑up samples instead of padding them with
NaN, so outputs are shorter than their inputs (VWAP excepted).  The
index of each output value is the index label of the input bar the
value ends on, which keeps results alignable with the source data.
Inputs that are too short to yield a single value raise
:class:`InsufficientDataError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np
import pandas as pd

from .errors import IndicatorError, InsufficientDataError, MisalignedInputError

PriceInput = Union[pd.Series, Sequence[float], np.ndarray]


@dataclass(frozen=True)
class MACDResult:
    macd: pd.Series
    signal: pd.Series
    histogram: pd.Series


@dataclass(frozen=True)
class BollingerBands:
    upper: pd.Series
    middle: pd.Series
    lower: pd.Series


@dataclass(frozen=True)
class StochasticResult:
    k: pd.Series
    d: pd.Series


def as_series(values: PriceInput) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float))


def _aligned(*inputs: PriceInput) -> List[pd.Series]:
    """Convert parallel inputs to float series sharing the first input's index."""
    series = [as_series(v) for v in inputs]
    lengths = {len(s) for s in series}
    if len(lengths) > 1:
        raise MisalignedInputError(
            f"parallel series must have equal length, got {[len(s) for s in series]}"
        )
    index = series[0].index
    return [pd.Series(s.to_numpy(), index=index) for s in series]


def _check_period(period: int, name: str) -> None:
    if period <= 0:
        raise IndicatorError(f"{name} must be positive, got {period}")


def _require(length: int, needed: int, name: str) -> None:
    if length < needed:
        raise InsufficientDataError(
            f"{name} needs at least {needed} samples, got {length}"
        )


def _seeded_ewm(values: pd.Series, period: int, alpha: float) -> pd.Series:
    """
    Exponentially smooth ``values`` after seeding with the plain mean of
    the first ``period`` samples.  The seed sits on the label of the
    ``period``-th sample; the recurrence is
    ``out[i] = out[i-1] + alpha * (values[i] - out[i-1])``.
    """
    head = values.iloc[:period]
    # anchored on the first sample so a constant series seeds exactly
    seed_value = head.iloc[0] + (head - head.iloc[0]).mean()
    seed = pd.Series([seed_value], index=values.index[period - 1:period])
    return pd.concat([seed, values.iloc[period:]]).ewm(alpha=alpha, adjust=False).mean()


def compute_sma(close: PriceInput, window: int) -> pd.Series:
    """
    Compute the simple moving average (SMA) over the given window.
    Output length is ``len(close) - window + 1``.
    """
    _check_period(window, "window")
    close = as_series(close)
    _require(len(close), window, "SMA")
    return close.rolling(window=window, min_periods=window).mean().iloc[window - 1:]


def compute_ema(close: PriceInput, window: int) -> pd.Series:
    """
    Compute the exponential moving average (EMA) with multiplier
    ``2 / (window + 1)``.  The first value is the SMA of the first
    ``window`` prices, as trading platforms seed it.
    """
    _check_period(window, "window")
    close = as_series(close)
    _require(len(close), window, "EMA")
    return _seeded_ewm(close, window, 2.0 / (window + 1))


def compute_rsi(close: PriceInput, window: int = 14) -> pd.Series:
    """
    Compute the Relative Strength Index (RSI) using Wilder’s method.

    Average gain/loss are seeded with the plain mean of the first
    ``window`` differences and then smoothed as
    ``avg = (avg * (window - 1) + new) / window``.  Only the smoothed
    steps are emitted, so the output has ``len(close) - window - 1``
    values.  A zero average loss drives RSI to 100 through float
    division; a series with no movement at all reads a neutral 50.
    """
    _check_period(window, "window")
    close = as_series(close)
    _require(len(close), window + 2, "RSI")
    delta = close.diff().iloc[1:]
    gain = delta.where(delta > 0, 0.0)
    loss = delta.where(delta < 0, 0.0).abs()
    avg_gain = _seeded_ewm(gain, window, 1.0 / window).iloc[1:]
    avg_loss = _seeded_ewm(loss, window, 1.0 / window).iloc[1:]
    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_gain / avg_loss
        rsi = 100 - (100 / (1 + rs))
    return rsi.mask((avg_gain == 0) & (avg_loss == 0), 50.0)


def compute_macd(
    close: PriceInput, fast: int = 12, slow: int = 26, signal: int = 9
) -> MACDResult:
    """
    Compute the Moving Average Convergence Divergence (MACD).

    The fast EMA is trimmed to the bars covered by the slow EMA before
    subtracting.  The histogram is reported on the signal line's bars.
    """
    for name, value in (("fast", fast), ("slow", slow), ("signal", signal)):
        _check_period(value, name)
    if fast >= slow:
        raise IndicatorError(f"fast period ({fast}) must be shorter than slow ({slow})")
    close = as_series(close)
    _require(len(close), slow + signal - 1, "MACD")
    ema_fast = compute_ema(close, fast)
    ema_slow = compute_ema(close, slow)
    macd_line = pd.Series(
        ema_fast.iloc[slow - fast:].to_numpy() - ema_slow.to_numpy(),
        index=ema_slow.index,
    )
    signal_line = compute_ema(macd_line, signal)
    histogram = pd.Series(
        macd_line.iloc[signal - 1:].to_numpy() - signal_line.to_numpy(),
        index=signal_line.index,
    )
    return MACDResult(macd=macd_line, signal=signal_line, histogram=histogram)


def compute_bollinger(
    close: PriceInput, window: int = 20, n_std: float = 2.0
) -> BollingerBands:
    """
    Compute Bollinger Bands using a rolling mean (middle band) and the
    rolling population standard deviation (no Bessel correction).
    """
    _check_period(window, "window")
    close = as_series(close)
    _require(len(close), window, "Bollinger Bands")
    rolling = close.rolling(window=window, min_periods=window)
    mid = rolling.mean().iloc[window - 1:]
    std = rolling.std(ddof=0).iloc[window - 1:]
    return BollingerBands(upper=mid + n_std * std, middle=mid, lower=mid - n_std * std)


def compute_stochastic(
    high: PriceInput,
    low: PriceInput,
    close: PriceInput,
    k_period: int = 14,
    d_period: int = 3,
) -> StochasticResult:
    """
    Compute the Stochastic Oscillator.  %K places the close within the
    trailing ``k_period`` high/low range; %D is the SMA of %K.  A flat
    range is left to float division (NaN or ±inf).
    """
    _check_period(k_period, "k_period")
    _check_period(d_period, "d_period")
    close, high, low = _aligned(close, high, low)
    _require(len(close), k_period + d_period - 1, "Stochastic")
    lowest = low.rolling(window=k_period, min_periods=k_period).min()
    highest = high.rolling(window=k_period, min_periods=k_period).max()
    with np.errstate(divide="ignore", invalid="ignore"):
        k = ((close - lowest) / (highest - lowest) * 100).iloc[k_period - 1:]
    return StochasticResult(k=k, d=compute_sma(k, d_period))


def compute_vwap(
    high: PriceInput, low: PriceInput, close: PriceInput, volume: PriceInput
) -> pd.Series:
    """
    Compute the running Volume Weighted Average Price of the typical
    price ``(high + low + close) / 3`` from the first bar.  Bars before
    any volume has traded report the typical price itself.

    Both the typical price and the running average are taken as offsets
    (from the close, and from the first typical price) so a flat series
    reproduces its price exactly instead of drifting by rounding.
    """
    close, high, low, volume = _aligned(close, high, low, volume)
    _require(len(close), 1, "VWAP")
    typical = close + ((high - close) + (low - close)) / 3
    anchor = typical.iloc[0]
    cum_pv = ((typical - anchor) * volume).cumsum()
    cum_vol = volume.cumsum()
    with np.errstate(divide="ignore", invalid="ignore"):
        vwap = anchor + cum_pv / cum_vol
    return vwap.where(cum_vol > 0, typical)
