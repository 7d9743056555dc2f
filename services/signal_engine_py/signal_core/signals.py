"""Result records produced by the signal generator."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Action(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    SHORT = "SHORT"
    HOLD = "HOLD"


@dataclass(frozen=True)
class MACDValues:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BandValues:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class MovingAverages:
    sma20: float
    sma50: float
    sma200: float


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Most recent value of every indicator the generator computes."""

    rsi: float
    macd: MACDValues
    bollinger_bands: BandValues
    moving_averages: MovingAverages
    vwap: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rsi": self.rsi,
            "macd": {
                "macd": self.macd.macd,
                "signal": self.macd.signal,
                "histogram": self.macd.histogram,
            },
            "bollingerBands": {
                "upper": self.bollinger_bands.upper,
                "middle": self.bollinger_bands.middle,
                "lower": self.bollinger_bands.lower,
            },
            "movingAverages": {
                "sma20": self.moving_averages.sma20,
                "sma50": self.moving_averages.sma50,
                "sma200": self.moving_averages.sma200,
            },
            "vwap": self.vwap,
        }


@dataclass(frozen=True)
class TradingSignal:
    """
    Composite recommendation for one symbol.  ``confidence`` is an
    additive score clamped to 100, not a probability, and ``timestamp``
    records when the signal was generated rather than any bar time.
    """

    symbol: str
    action: Action
    confidence: int
    reason: str
    indicators: IndicatorSnapshot
    timestamp: dt.datetime = field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc)
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "action": self.action.value,
            "confidence": self.confidence,
            "reason": self.reason,
            "indicators": self.indicators.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }
