"""
Core data types for bars, signal proposals, positions, and closed trades.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Tuple

from signal_bot.core.errors import InvalidBarError


class SignalSide(str, Enum):
    LONG = "BUY"
    SHORT = "SELL"


class ExitReason(str, Enum):
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"


def _check_price(name: str, value: float) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise InvalidBarError(f"{name} must be a positive number, got {value!r}")


@dataclass(frozen=True)
class Bar:
    """OHLCV candle. Validated on construction."""
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self) -> None:
        if self.time is None:
            raise InvalidBarError("bar has no timestamp")
        for name in ("open", "high", "low", "close"):
            _check_price(name, getattr(self, name))
        if self.volume is None or not math.isfinite(self.volume) or self.volume < 0:
            raise InvalidBarError(f"volume must be non-negative, got {self.volume!r}")

    @classmethod
    def from_price(cls, time: datetime, price: float) -> "Bar":
        """Price-only observation from a live feed (no true volume)."""
        return cls(time=time, open=price, high=price, low=price, close=price, volume=0.0)


@dataclass(frozen=True)
class EnrichedBar(Bar):
    """Bar plus features derived from the bars before it."""
    volume_change: float = 0.0
    sentiment: float = 0.0

    @classmethod
    def from_bar(cls, bar: Bar, volume_change: float, sentiment: float) -> "EnrichedBar":
        return cls(
            time=bar.time,
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            volume=bar.volume,
            volume_change=volume_change,
            sentiment=sentiment,
        )


@dataclass(frozen=True)
class SignalProposal:
    """Candidate trade: side, entry, stop, and target."""
    side: SignalSide
    entry_price: float
    stop_price: float
    take_profit_price: float
    score: float
    rationale: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.side == SignalSide.LONG:
            ordered = self.stop_price < self.entry_price < self.take_profit_price
        else:
            ordered = self.take_profit_price < self.entry_price < self.stop_price
        if not ordered:
            raise ValueError(
                f"{self.side.value} levels out of order: stop={self.stop_price} "
                f"entry={self.entry_price} tp={self.take_profit_price}"
            )

    @property
    def risk_reward(self) -> float:
        return abs(self.take_profit_price - self.entry_price) / abs(self.entry_price - self.stop_price)


@dataclass(frozen=True)
class HoldSignal:
    """Live output when the decision rule does not fire."""
    reason: str


@dataclass(frozen=True)
class OpenPosition:
    """The single position held by a simulation run."""
    proposal: SignalProposal
    entry_time: datetime
    entry_index: int
    volume_change: float = 0.0
    sentiment: float = 0.0

    @property
    def side(self) -> SignalSide:
        return self.proposal.side

    @property
    def entry_price(self) -> float:
        return self.proposal.entry_price

    @property
    def stop_price(self) -> float:
        return self.proposal.stop_price

    @property
    def take_profit_price(self) -> float:
        return self.proposal.take_profit_price

    def pnl_pct(self, exit_price: float) -> float:
        """Signed return in percent; a favorable move is positive for either side."""
        if self.side == SignalSide.LONG:
            return (exit_price - self.entry_price) / self.entry_price * 100
        return (self.entry_price - exit_price) / self.entry_price * 100


@dataclass(frozen=True)
class ClosedTrade:
    """Closed trade for analytics."""
    side: SignalSide
    entry_price: float
    stop_price: float
    take_profit_price: float
    score: float
    entry_time: datetime
    entry_index: int
    exit_price: float
    exit_time: datetime
    exit_index: int
    pnl_pct: float
    exit_reason: ExitReason
    volume_change: float = 0.0
    sentiment: float = 0.0

    @property
    def is_win(self) -> bool:
        return self.exit_reason == ExitReason.TAKE_PROFIT
