"""
Single-position tracker. State is FLAT or OPEN(position); the position itself is the only state.
Exits are checked against the bar close: stop-loss first, then take-profit.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Optional

from signal_bot.core.types import (
    ClosedTrade,
    EnrichedBar,
    ExitReason,
    OpenPosition,
    SignalProposal,
    SignalSide,
)

logger = logging.getLogger("signal_bot.backtest.tracker")


class PositionState(str, Enum):
    FLAT = "FLAT"
    OPEN = "OPEN"


class PositionTracker:
    """Holds at most one OpenPosition."""

    def __init__(self) -> None:
        self._position: Optional[OpenPosition] = None

    @property
    def state(self) -> PositionState:
        return PositionState.FLAT if self._position is None else PositionState.OPEN

    @property
    def position(self) -> Optional[OpenPosition]:
        return self._position

    def open(self, proposal: SignalProposal, bar: EnrichedBar, index: int) -> OpenPosition:
        """FLAT -> OPEN. Records the enrichment values in effect at entry."""
        if self._position is not None:
            raise RuntimeError(f"position already open since bar {self._position.entry_index}")
        self._position = OpenPosition(
            proposal=proposal,
            entry_time=bar.time,
            entry_index=index,
            volume_change=bar.volume_change,
            sentiment=bar.sentiment,
        )
        logger.debug(
            "Open %s @ %.2f (bar %d) SL=%.2f TP=%.2f",
            proposal.side.value, proposal.entry_price, index, proposal.stop_price, proposal.take_profit_price,
        )
        return self._position

    def _exit_reason(self, close: float) -> Optional[ExitReason]:
        pos = self._position
        if pos.side == SignalSide.LONG:
            if close <= pos.stop_price:
                return ExitReason.STOP_LOSS
            if close >= pos.take_profit_price:
                return ExitReason.TAKE_PROFIT
        else:
            if close >= pos.stop_price:
                return ExitReason.STOP_LOSS
            if close <= pos.take_profit_price:
                return ExitReason.TAKE_PROFIT
        return None

    def check_exit(self, bar: EnrichedBar, index: int) -> Optional[ClosedTrade]:
        """
        OPEN -> FLAT when the close breaches stop or target. Fills at the level price,
        not the close. Never closes on the entry bar. Returns None while FLAT or holding.
        """
        pos = self._position
        if pos is None or index <= pos.entry_index:
            return None
        reason = self._exit_reason(bar.close)
        if reason is None:
            return None
        exit_price = pos.stop_price if reason == ExitReason.STOP_LOSS else pos.take_profit_price
        trade = ClosedTrade(
            side=pos.side,
            entry_price=pos.entry_price,
            stop_price=pos.stop_price,
            take_profit_price=pos.take_profit_price,
            score=pos.proposal.score,
            entry_time=pos.entry_time,
            entry_index=pos.entry_index,
            exit_price=exit_price,
            exit_time=bar.time,
            exit_index=index,
            pnl_pct=pos.pnl_pct(exit_price),
            exit_reason=reason,
            volume_change=pos.volume_change,
            sentiment=pos.sentiment,
        )
        self._position = None
        logger.debug("Close %s %s @ %.2f (bar %d) pnl=%.2f%%", trade.side.value, reason.value, exit_price, index, trade.pnl_pct)
        return trade
