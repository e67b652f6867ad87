"""Backtesting engine: bar-by-bar single-position simulation, sync or in the background."""

from signal_bot.backtesting.engine import BacktestEngine
from signal_bot.backtesting.tracker import PositionTracker, PositionState
from signal_bot.backtesting.jobs import BacktestJob, run_backtest_async

__all__ = ["BacktestEngine", "PositionTracker", "PositionState", "BacktestJob", "run_backtest_async"]
