"""
Performance metrics over a closed-trade log: win rate, return, profit factor, max drawdown.
Returns are per-trade percentages compounded multiplicatively into the balance.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from signal_bot.core.types import ClosedTrade, ExitReason


@dataclass(frozen=True)
class BacktestReport:
    """Aggregate backtest output. Built once per run."""
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    total_return_pct: float
    initial_capital: float
    final_balance: float
    avg_win_pct: float
    avg_loss_pct: float
    profit_factor: float
    max_drawdown_pct: float
    trades: Tuple[ClosedTrade, ...] = field(default_factory=tuple)
    equity_curve: Tuple[float, ...] = field(default_factory=tuple)
    data_point_count: int = 0
    time_range: Optional[Tuple[datetime, datetime]] = None

    def to_dict(self, max_trades: Optional[int] = None) -> Dict[str, Any]:
        """Plain dict for presentation; `max_trades` keeps only the most recent trades."""
        trades = self.trades
        if max_trades is not None:
            trades = trades[-max_trades:] if max_trades > 0 else ()
        start, end = self.time_range if self.time_range else (None, None)
        return {
            "total_trades": self.total_trades,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": self.win_rate,
            "total_return_pct": self.total_return_pct,
            "initial_capital": self.initial_capital,
            "final_balance": self.final_balance,
            "avg_win_pct": self.avg_win_pct,
            "avg_loss_pct": self.avg_loss_pct,
            "profit_factor": self.profit_factor,
            "max_drawdown_pct": self.max_drawdown_pct,
            "data_point_count": self.data_point_count,
            "time_range": [_iso(start), _iso(end)],
            "trades": [_trade_dict(t) for t in trades],
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _trade_dict(t: ClosedTrade) -> Dict[str, Any]:
    return {
        "side": t.side.value,
        "entry_price": t.entry_price,
        "stop_price": t.stop_price,
        "take_profit_price": t.take_profit_price,
        "score": t.score,
        "entry_time": _iso(t.entry_time),
        "entry_index": t.entry_index,
        "exit_price": t.exit_price,
        "exit_time": _iso(t.exit_time),
        "exit_index": t.exit_index,
        "pnl_pct": t.pnl_pct,
        "outcome": t.exit_reason.value,
        "volume_change": t.volume_change,
        "sentiment": t.sentiment,
    }


def equity_curve(pnl_pcts: Sequence[float], initial_capital: float = 10000.0) -> List[float]:
    """Starting balance followed by the balance after each trade: balance *= 1 + pnl/100."""
    balance = initial_capital
    curve = [balance]
    for p in pnl_pcts:
        balance *= 1 + p / 100
        curve.append(balance)
    return curve


def max_drawdown(curve: Sequence[float]) -> float:
    """Largest peak-to-trough decline in percent of the peak (>= 0)."""
    if len(curve) == 0:
        return 0.0
    arr = np.asarray(curve, dtype=float)
    peak = np.maximum.accumulate(arr)
    dd = (peak - arr) / np.where(peak != 0, peak, 1) * 100
    return float(max(dd.max(), 0.0))


def win_rate(wins: int, total: int) -> float:
    """Percent of trades that hit take-profit."""
    if total <= 0:
        return 0.0
    return wins / total * 100


def profit_factor(avg_win_pct: float, avg_loss_pct: float) -> float:
    """|avg win / avg loss|. Returns 0 if there is no average loss."""
    if avg_loss_pct == 0:
        return 0.0
    return abs(avg_win_pct / avg_loss_pct)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_report(
    trades: Sequence[ClosedTrade],
    initial_capital: float = 10000.0,
    curve: Optional[Sequence[float]] = None,
    data_point_count: int = 0,
    time_range: Optional[Tuple[datetime, datetime]] = None,
) -> BacktestReport:
    """
    Reduce a trade log to a BacktestReport.
    curve: balance trajectory produced by the simulator (initial + one per trade).
    If None, it is rebuilt from the trades' pnl_pct.
    """
    if curve is None:
        curve = equity_curve([t.pnl_pct for t in trades], initial_capital)
    if len(curve) != len(trades) + 1:
        raise ValueError(f"equity curve has {len(curve)} points for {len(trades)} trades")
    wins = [t.pnl_pct for t in trades if t.exit_reason == ExitReason.TAKE_PROFIT]
    losses = [t.pnl_pct for t in trades if t.exit_reason == ExitReason.STOP_LOSS]
    final_balance = float(curve[-1])
    avg_win = _mean(wins)
    avg_loss = _mean(losses)
    return BacktestReport(
        total_trades=len(trades),
        wins=len(wins),
        losses=len(losses),
        win_rate=win_rate(len(wins), len(trades)),
        total_return_pct=(final_balance - initial_capital) / initial_capital * 100,
        initial_capital=initial_capital,
        final_balance=final_balance,
        avg_win_pct=avg_win,
        avg_loss_pct=avg_loss,
        profit_factor=profit_factor(avg_win, avg_loss),
        max_drawdown_pct=max_drawdown(curve),
        trades=tuple(trades),
        equity_curve=tuple(float(x) for x in curve),
        data_point_count=data_point_count,
        time_range=time_range,
    )
