"""Core of the technical signal engine.

This package computes technical indicators from OHLCV series, scores
their latest readings with a fixed rule set, and assembles a composite
trading signal.  All functions are side‑effect free and deterministic
when given the same inputs (only a signal's timestamp varies).
"""

from .errors import IndicatorError, InsufficientDataError, MisalignedInputError
from .indicators import (
    BollingerBands,
    MACDResult,
    StochasticResult,
    compute_sma,
    compute_ema,
    compute_rsi,
    compute_macd,
    compute_bollinger,
    compute_stochastic,
    compute_vwap,
)
from .rules import (
    MarketReadings,
    RuleMatch,
    ScoringRule,
    SCORING_RULES,
    evaluate_rules,
    score_readings,
    select_action,
)
from .signals import Action, IndicatorSnapshot, TradingSignal
from .generator import MIN_BARS, generate_signal, generate_signal_from_frame

__all__ = [
    "IndicatorError",
    "InsufficientDataError",
    "MisalignedInputError",
    "BollingerBands",
    "MACDResult",
    "StochasticResult",
    "compute_sma",
    "compute_ema",
    "compute_rsi",
    "compute_macd",
    "compute_bollinger",
    "compute_stochastic",
    "compute_vwap",
    "MarketReadings",
    "RuleMatch",
    "ScoringRule",
    "SCORING_RULES",
    "evaluate_rules",
    "score_readings",
    "select_action",
    "Action",
    "IndicatorSnapshot",
    "TradingSignal",
    "MIN_BARS",
    "generate_signal",
    "generate_signal_from_frame",
]
