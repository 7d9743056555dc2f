"""
Scoring rules that turn the latest indicator readings into a
confidence score and a recommended action.

Each :class:`ScoringRule` is an ordered chain of branches; the first
branch whose predicate holds contributes its points and note, the rest
of the chain is skipped.  Rules are independent of each other and are
evaluated in the fixed order of :data:`SCORING_RULES`, so every rule
can be tested on its own.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .signals import Action


@dataclass(frozen=True)
class MarketReadings:
    """Latest price, volume and indicator values for one symbol."""

    price: float
    rsi: float
    macd: float
    macd_signal: float
    macd_histogram: float
    bb_upper: float
    bb_middle: float
    bb_lower: float
    sma20: float
    sma50: float
    sma200: float
    vwap: float
    volume: float
    avg_volume: float


Predicate = Callable[[MarketReadings], bool]


@dataclass(frozen=True)
class Branch:
    predicate: Predicate
    points: int
    note: str


@dataclass(frozen=True)
class RuleMatch:
    rule: str
    points: int
    note: str


@dataclass(frozen=True)
class ScoringRule:
    name: str
    branches: Tuple[Branch, ...]

    def evaluate(self, r: MarketReadings) -> Optional[RuleMatch]:
        """Return the first matching branch, or None when nothing matches."""
        for branch in self.branches:
            if branch.predicate(r):
                return RuleMatch(self.name, branch.points, branch.note)
        return None


def _bullish_alignment(r: MarketReadings) -> bool:
    return r.price > r.sma20 > r.sma50 > r.sma200


def _bearish_alignment(r: MarketReadings) -> bool:
    return r.price < r.sma20 < r.sma50 < r.sma200


def _above_key_averages(r: MarketReadings) -> bool:
    return r.price > r.sma20 > r.sma50


def _below_key_averages(r: MarketReadings) -> bool:
    return r.price < r.sma20 < r.sma50


RSI_RULE = ScoringRule("rsi", (
    Branch(lambda r: r.rsi < 30, 25, "RSI oversold (<30)."),
    Branch(lambda r: r.rsi > 70, 25, "RSI overbought (>70)."),
    Branch(lambda r: r.rsi < 40, 10, "RSI approaching oversold."),
    Branch(lambda r: r.rsi > 60, 10, "RSI approaching overbought."),
))

MACD_RULE = ScoringRule("macd", (
    Branch(lambda r: r.macd > r.macd_signal and r.macd_histogram > 0, 20,
           "MACD bullish crossover (12,26,9)."),
    Branch(lambda r: r.macd < r.macd_signal and r.macd_histogram < 0, 20,
           "MACD bearish crossover (12,26,9)."),
))

BOLLINGER_RULE = ScoringRule("bollinger", (
    Branch(lambda r: r.price < r.bb_lower, 20, "Price below lower Bollinger Band."),
    Branch(lambda r: r.price > r.bb_upper, 20, "Price above upper Bollinger Band."),
    Branch(lambda r: r.price < r.bb_middle, 5, "Price below Bollinger middle."),
    Branch(lambda r: r.price > r.bb_middle, 5, "Price above Bollinger middle."),
))

VWAP_RULE = ScoringRule("vwap", (
    Branch(lambda r: r.price > r.vwap, 15, "Price above VWAP (bullish)."),
    Branch(lambda r: r.price < r.vwap, 15, "Price below VWAP (bearish)."),
))

TREND_RULE = ScoringRule("trend", (
    Branch(_bullish_alignment, 20, "Strong uptrend with moving averages aligned."),
    Branch(_bearish_alignment, 20, "Strong downtrend with moving averages aligned."),
    Branch(_above_key_averages, 10, "Price above key moving averages."),
    Branch(_below_key_averages, 10, "Price below key moving averages."),
))

VOLUME_RULE = ScoringRule("volume", (
    Branch(lambda r: r.volume > r.avg_volume * 1.5, 10, "High volume confirmation."),
    Branch(lambda r: r.volume > r.avg_volume * 1.2, 5, "Above average volume."),
))

SCORING_RULES: Tuple[ScoringRule, ...] = (
    RSI_RULE,
    MACD_RULE,
    BOLLINGER_RULE,
    VWAP_RULE,
    TREND_RULE,
    VOLUME_RULE,
)

# (action, predicate) pairs; first match wins within a tier.
STRONG_PATTERNS: Tuple[Tuple[Action, Predicate], ...] = (
    (Action.BUY, lambda r: r.rsi < 30 and r.price < r.bb_lower
        and r.macd > r.macd_signal and r.price > r.vwap),
    (Action.SELL, lambda r: r.rsi > 70 and r.price > r.bb_upper
        and r.macd < r.macd_signal and r.price < r.vwap),
    (Action.SHORT, lambda r: _below_key_averages(r) and r.price < r.vwap and r.rsi > 50),
)

MODERATE_PATTERNS: Tuple[Tuple[Action, Predicate], ...] = (
    (Action.BUY, lambda r: r.rsi < 35 and r.price < r.vwap and r.macd > r.macd_signal),
    (Action.SELL, lambda r: r.rsi > 65 and r.price > r.vwap and r.macd < r.macd_signal),
)

STRONG_CONFIDENCE = 70
MODERATE_CONFIDENCE = 50
MAX_CONFIDENCE = 100


def evaluate_rules(
    readings: MarketReadings, rules: Sequence[ScoringRule] = SCORING_RULES
) -> List[RuleMatch]:
    """Evaluate every rule in order and return the ones that matched."""
    matches = []
    for rule in rules:
        match = rule.evaluate(readings)
        if match is not None:
            matches.append(match)
    return matches


def score_readings(readings: MarketReadings) -> Tuple[int, List[str]]:
    """Return the unclamped confidence sum and the matched notes in order."""
    matches = evaluate_rules(readings)
    return sum(m.points for m in matches), [m.note for m in matches]


def clamp_confidence(raw: int) -> int:
    return min(raw, MAX_CONFIDENCE)


def select_action(readings: MarketReadings, confidence: int) -> Action:
    """
    Pick an action from the confidence tier and the corroborating
    pattern for that tier.  High confidence without a matching pattern
    still yields HOLD.
    """
    if confidence >= STRONG_CONFIDENCE:
        patterns = STRONG_PATTERNS
    elif confidence >= MODERATE_CONFIDENCE:
        patterns = MODERATE_PATTERNS
    else:
        return Action.HOLD
    for action, predicate in patterns:
        if predicate(readings):
            return action
    return Action.HOLD
