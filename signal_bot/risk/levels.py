"""
Stop-loss / take-profit levels as fixed percentages of entry.
Default 4% stop and 12% target (risk:reward 1:3).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from signal_bot.core.errors import ConfigurationError
from signal_bot.core.types import SignalSide


def risk_reward_ratio(entry: float, stop: float, tp: float) -> float:
    """Reward / risk. 0 when the stop sits on the entry."""
    risk = abs(entry - stop)
    if risk <= 0:
        return 0.0
    return abs(tp - entry) / risk


@dataclass(frozen=True)
class RiskLevels:
    """Percent distances from entry to stop and target."""
    stop_loss_pct: float = 4.0
    take_profit_pct: float = 12.0

    def __post_init__(self) -> None:
        if not 0 < self.stop_loss_pct < 100:
            raise ConfigurationError(f"stop_loss_pct must be in (0, 100), got {self.stop_loss_pct}")
        if not 0 < self.take_profit_pct < 100:
            raise ConfigurationError(f"take_profit_pct must be in (0, 100), got {self.take_profit_pct}")

    @property
    def risk_reward(self) -> float:
        return self.take_profit_pct / self.stop_loss_pct

    def levels(self, side: SignalSide, entry: float) -> Tuple[float, float]:
        """Return (stop_price, take_profit_price) for a position entered at `entry`."""
        if side == SignalSide.LONG:
            stop = entry * (1 - self.stop_loss_pct / 100)
            tp = entry * (1 + self.take_profit_pct / 100)
        else:
            stop = entry * (1 + self.stop_loss_pct / 100)
            tp = entry * (1 - self.take_profit_pct / 100)
        return stop, tp
