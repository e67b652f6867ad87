"""Strategies: base interface and composite score implementation."""

from signal_bot.strategies.base import BaseStrategy
from signal_bot.strategies.composite import (
    CompositeStrategy,
    ScoringPolicy,
    ScoreBreakdown,
    STANDARD_POLICY,
    STRICT_POLICY,
    build_policy,
)

__all__ = [
    "BaseStrategy",
    "CompositeStrategy",
    "ScoringPolicy",
    "ScoreBreakdown",
    "STANDARD_POLICY",
    "STRICT_POLICY",
    "build_policy",
]
