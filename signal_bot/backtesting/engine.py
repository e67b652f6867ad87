"""
Backtest engine: bar-by-bar replay of the scoring rule with one position at a time.
No slippage or fees. A position still open at the end is left out of the trade log.
"""

from __future__ import annotations
import logging
import threading
from typing import List, Optional, Sequence

from signal_bot.analytics.metrics import BacktestReport, compute_report
from signal_bot.core.config import Config
from signal_bot.core.errors import BacktestCancelled, ConfigurationError
from signal_bot.core.types import ClosedTrade, EnrichedBar
from signal_bot.backtesting.tracker import PositionState, PositionTracker
from signal_bot.strategies.base import BaseStrategy

logger = logging.getLogger("signal_bot.backtest")


class BacktestEngine:
    """
    For each bar i >= warmup_bars:
      1. if OPEN, check stop-loss then take-profit on bar i's close;
      2. if FLAT (including just closed), score bar i against bars[i - history_window:i]
         and open on a proposal.
    Balance compounds: balance *= 1 + pnl_pct / 100.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        initial_capital: float = 10000.0,
        warmup_bars: int = 50,
        history_window: int = 50,
        min_bars: int = 100,
    ):
        self.strategy = strategy
        self.initial_capital = initial_capital
        self.warmup_bars = warmup_bars
        self.history_window = history_window
        self.min_bars = min_bars

    @classmethod
    def from_config(cls, strategy: BaseStrategy, config: Config) -> "BacktestEngine":
        return cls(
            strategy=strategy,
            initial_capital=config.initial_capital,
            warmup_bars=config.warmup_bars,
            history_window=config.history_window,
            min_bars=config.min_backtest_bars,
        )

    def _validate(self, n_bars: int) -> None:
        if n_bars < self.min_bars:
            raise ConfigurationError(f"backtest needs at least {self.min_bars} bars, got {n_bars}")
        if self.warmup_bars >= n_bars:
            raise ConfigurationError(f"warm-up of {self.warmup_bars} bars leaves nothing to simulate")
        if self.initial_capital <= 0:
            raise ConfigurationError(f"initial capital must be positive, got {self.initial_capital}")

    def run(
        self,
        bars: Sequence[EnrichedBar],
        cancel_event: Optional[threading.Event] = None,
    ) -> BacktestReport:
        """
        Run the simulation over enriched bars (oldest first).
        Raises ConfigurationError before starting, BacktestCancelled if `cancel_event` is set mid-run.
        """
        self._validate(len(bars))
        tracker = PositionTracker()
        balance = self.initial_capital
        curve: List[float] = [balance]
        trades: List[ClosedTrade] = []

        for i in range(self.warmup_bars, len(bars)):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Backtest cancelled at bar %d/%d", i, len(bars))
                raise BacktestCancelled(f"cancelled at bar {i}")
            bar = bars[i]

            trade = tracker.check_exit(bar, i)
            if trade is not None:
                balance *= 1 + trade.pnl_pct / 100
                trades.append(trade)
                curve.append(balance)

            if tracker.state == PositionState.FLAT:
                window = bars[max(0, i - self.history_window): i]
                proposal = self.strategy.get_signal(bar, window)
                if proposal is not None:
                    tracker.open(proposal, bar, i)

        if tracker.position is not None:
            logger.debug("Position opened at bar %d still open at end; excluded", tracker.position.entry_index)

        report = compute_report(
            trades,
            initial_capital=self.initial_capital,
            curve=curve,
            data_point_count=len(bars),
            time_range=(bars[0].time, bars[-1].time),
        )
        logger.info(
            "Backtest done: %d bars, %d trades, return %.2f%%, max DD %.2f%%",
            len(bars), report.total_trades, report.total_return_pct, report.max_drawdown_pct,
        )
        return report
