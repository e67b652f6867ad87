"""Analytics: backtest report (win rate, return, profit factor, max drawdown)."""

from signal_bot.analytics.metrics import (
    BacktestReport,
    compute_report,
    equity_curve,
    max_drawdown,
    win_rate,
    profit_factor,
)

__all__ = [
    "BacktestReport",
    "compute_report",
    "equity_curve",
    "max_drawdown",
    "win_rate",
    "profit_factor",
]
