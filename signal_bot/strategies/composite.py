"""
Composite score strategy: volume (40%) + sentiment (35%) + SMA momentum (25%).
Score above +threshold proposes BUY, below -threshold proposes SELL.
"""

from __future__ import annotations
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from signal_bot.core.config import Config
from signal_bot.core.errors import ConfigurationError
from signal_bot.core.types import EnrichedBar, SignalProposal, SignalSide
from signal_bot.risk.levels import RiskLevels
from signal_bot.strategies.base import BaseStrategy

logger = logging.getLogger("signal_bot.strategies")


@dataclass(frozen=True)
class ScoringPolicy:
    """All cutoffs of the scoring rule. Volume cutoffs are percent volume change."""
    name: str = "standard"
    threshold: float = 0.35
    volume_weight: float = 0.4
    volume_surge_pct: float = 50.0
    volume_rise_pct: float = 25.0
    volume_drop_pct: float = -30.0
    volume_fade_pct: float = -15.0
    sentiment_weight: float = 0.35
    sentiment_min_abs: float = 0.0
    momentum_weight: float = 0.25
    momentum_periods: Tuple[int, ...] = (10, 20)
    momentum_history: int = 40
    momentum_band_pct: float = 0.5
    momentum_partial: float = 0.0

    def __post_init__(self) -> None:
        if self.threshold <= 0:
            raise ConfigurationError(f"threshold must be positive, got {self.threshold}")
        periods = tuple(sorted(int(p) for p in self.momentum_periods))
        if len(periods) < 2 or periods[0] < 1:
            raise ConfigurationError(f"need at least two positive momentum periods, got {self.momentum_periods}")
        if self.momentum_history < periods[-1]:
            raise ConfigurationError(
                f"momentum_history {self.momentum_history} shorter than slowest period {periods[-1]}"
            )
        object.__setattr__(self, "momentum_periods", periods)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "ScoringPolicy":
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"unknown scoring cutoffs: {', '.join(unknown)}")
        return dataclasses.replace(self, **overrides)


STANDARD_POLICY = ScoringPolicy()

STRICT_POLICY = ScoringPolicy(
    name="strict",
    threshold=0.5,
    volume_surge_pct=80.0,
    volume_rise_pct=40.0,
    volume_drop_pct=-40.0,
    volume_fade_pct=-20.0,
    sentiment_min_abs=0.3,
    momentum_periods=(5, 10, 20),
    momentum_partial=0.5,
)

POLICIES: Dict[str, ScoringPolicy] = {p.name: p for p in (STANDARD_POLICY, STRICT_POLICY)}


def build_policy(
    name: str = "standard",
    threshold: Optional[float] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ScoringPolicy:
    """Preset by name, then cutoff overrides, then threshold."""
    try:
        policy = POLICIES[name.lower()]
    except KeyError:
        raise ConfigurationError(f"unknown scoring policy {name!r} (choose from {', '.join(POLICIES)})") from None
    if overrides:
        policy = policy.with_overrides(overrides)
    if threshold is not None:
        policy = dataclasses.replace(policy, threshold=threshold)
    return policy


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-term contributions for observability."""
    volume: float
    sentiment: float
    momentum: float
    rationale: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def total(self) -> float:
        return self.volume + self.sentiment + self.momentum


def _sma(values: Sequence[float], period: int) -> float:
    # Left-to-right sum, no compensation
    total = 0.0
    for v in values[-period:]:
        total += v
    return total / period


class CompositeStrategy(BaseStrategy):
    """
    Volume: categorical cutoffs on volume_change (full weight on surge/drop, half on rise/fade).
    Sentiment: sentiment * weight, when |sentiment| >= sentiment_min_abs.
    Momentum: SMAs over the last `momentum_history` closes of the window; fastest vs slowest
    beyond the band gives the full weight when all averages are stacked, else the partial share.
    """

    def __init__(
        self,
        policy: ScoringPolicy = STANDARD_POLICY,
        risk: Optional[RiskLevels] = None,
        min_window: int = 20,
    ):
        self.policy = policy
        self.risk = risk or RiskLevels()
        self.min_window = min_window

    @classmethod
    def from_config(cls, config: Config) -> "CompositeStrategy":
        policy = build_policy(config.scoring_policy, config.score_threshold, config.scoring_overrides)
        risk = RiskLevels(config.stop_loss_pct, config.take_profit_pct)
        return cls(policy=policy, risk=risk, min_window=config.min_window)

    def _volume_term(self, volume_change: float, notes: List[str]) -> float:
        p = self.policy
        if volume_change > p.volume_surge_pct:
            term = p.volume_weight
        elif volume_change > p.volume_rise_pct:
            term = p.volume_weight / 2
        elif volume_change < p.volume_drop_pct:
            term = -p.volume_weight
        elif volume_change < p.volume_fade_pct:
            term = -p.volume_weight / 2
        else:
            term = 0.0
        notes.append(f"volume change {volume_change:+.1f}% -> {term:+.3f}")
        return term

    def _sentiment_term(self, sentiment: float, notes: List[str]) -> float:
        p = self.policy
        term = sentiment * p.sentiment_weight if abs(sentiment) >= p.sentiment_min_abs else 0.0
        notes.append(f"sentiment {sentiment:+.2f} -> {term:+.3f}")
        return term

    def _momentum_term(self, window: Sequence[EnrichedBar], notes: List[str]) -> float:
        p = self.policy
        closes = [b.close for b in window[-p.momentum_history:]]
        if len(closes) < p.momentum_history:
            notes.append(f"momentum skipped ({len(closes)} < {p.momentum_history} closes)")
            return 0.0
        averages = [_sma(closes, n) for n in p.momentum_periods]
        fast, slow = averages[0], averages[-1]
        pairs = list(zip(averages, averages[1:]))
        band = p.momentum_band_pct / 100
        if fast > slow * (1 + band):
            stacked = all(a > b for a, b in pairs)
            term = p.momentum_weight if stacked else p.momentum_weight * p.momentum_partial
        elif fast < slow * (1 - band):
            stacked = all(a < b for a, b in pairs)
            term = -p.momentum_weight if stacked else -p.momentum_weight * p.momentum_partial
        else:
            term = 0.0
        label = "/".join(f"SMA{n}={avg:.2f}" for n, avg in zip(p.momentum_periods, averages))
        notes.append(f"momentum {label} -> {term:+.3f}")
        return term

    def evaluate(self, current: EnrichedBar, window: Sequence[EnrichedBar]) -> ScoreBreakdown:
        """Score terms for `current`. Does not check the window minimum."""
        notes: List[str] = []
        volume = self._volume_term(current.volume_change, notes)
        sentiment = self._sentiment_term(current.sentiment, notes)
        momentum = self._momentum_term(window, notes)
        return ScoreBreakdown(volume=volume, sentiment=sentiment, momentum=momentum, rationale=tuple(notes))

    def get_signal(self, current: EnrichedBar, window: Sequence[EnrichedBar]) -> Optional[SignalProposal]:
        if len(window) < self.min_window:
            return None
        breakdown = self.evaluate(current, window)
        score = breakdown.total
        if score > self.policy.threshold:
            side = SignalSide.LONG
        elif score < -self.policy.threshold:
            side = SignalSide.SHORT
        else:
            return None
        entry = current.close
        stop, tp = self.risk.levels(side, entry)
        logger.debug("%s proposal at %s: score=%.3f entry=%.2f", side.value, current.time, score, entry)
        return SignalProposal(
            side=side,
            entry_price=entry,
            stop_price=stop,
            take_profit_price=tp,
            score=score,
            rationale=breakdown.rationale,
        )
