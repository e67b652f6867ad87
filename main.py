#!/usr/bin/env python3
"""
Signal Bot CLI: backtest | signal
Usage:
  python main.py backtest --data bars.csv [--config config.yaml] [--json]
  python main.py signal --data bars.csv [--config config.yaml] [--notify]
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from signal_bot.core.config import load_config, Config
from signal_bot.core.errors import BacktestCancelled, ConfigurationError
from signal_bot.core.logger import setup_logging
from signal_bot.core.types import HoldSignal
from signal_bot.data.loader import load_bars
from signal_bot.features.enricher import FeatureEnricher
from signal_bot.strategies.composite import CompositeStrategy
from signal_bot.backtesting.engine import BacktestEngine
from signal_bot.backtesting.jobs import run_backtest_async
from signal_bot.live.signals import generate_current_signal
from signal_bot.utils.telegram import SignalNotifier

logger = logging.getLogger("signal_bot")


def _setup_logging(config: Config) -> None:
    setup_logging(
        config.log_level,
        config.log_dir,
        config.log_file,
        trade_log_file=config.trade_log_file,
        secrets=(config.telegram_bot_token, config.telegram_chat_id),
    )


def _load_enriched(path: Path, config: Config):
    try:
        bars = load_bars(path)
    except OSError as e:
        logger.error("Cannot read %s: %s", path, e)
        return None
    if not bars:
        logger.error("No valid bars found in %s", path)
        return None
    logger.info("Loaded %d bars from %s to %s", len(bars), bars[0].time, bars[-1].time)
    return FeatureEnricher(config.lookback).enrich(bars)


def run_backtest(data_path: Path, config_path: Path | None, as_json: bool = False) -> int:
    """Run backtest on a CSV/TSV bar file."""
    config = load_config(config_path, ROOT)
    _setup_logging(config)
    try:
        strategy = CompositeStrategy.from_config(config)
        engine = BacktestEngine.from_config(strategy, config)
    except ConfigurationError as e:
        logger.error("Bad configuration: %s", e)
        return 1
    bars = _load_enriched(data_path, config)
    if bars is None:
        return 1
    job = run_backtest_async(engine, bars)
    try:
        report = job.result()
    except KeyboardInterrupt:
        job.cancel()
        logger.info("Backtest cancelled by user")
        return 1
    except (ConfigurationError, BacktestCancelled) as e:
        logger.error("Backtest not run: %s", e)
        return 1
    if as_json:
        print(json.dumps(report.to_dict(max_trades=100), indent=2))
        return 0
    start, end = report.time_range
    print("\n--- Backtest Results ---")
    print(f"Data: {report.data_point_count} bars, {start} to {end}")
    print(f"Policy: {strategy.policy.name} (threshold {strategy.policy.threshold})")
    print(f"Total trades: {report.total_trades} (wins: {report.wins}, losses: {report.losses})")
    print(f"Win rate: {report.win_rate:.1f}%")
    print(f"Total return: {report.total_return_pct:.2f}%")
    print(f"Final balance: {report.final_balance:.2f} (start {report.initial_capital:.2f})")
    print(f"Avg win: {report.avg_win_pct:.2f}% | Avg loss: {report.avg_loss_pct:.2f}%")
    print(f"Profit factor: {report.profit_factor:.2f}")
    print(f"Max drawdown: {report.max_drawdown_pct:.2f}%")
    return 0


def run_signal(data_path: Path, config_path: Path | None, notify: bool = False) -> int:
    """Print the current signal for the latest bar; optionally alert Telegram."""
    config = load_config(config_path, ROOT)
    _setup_logging(config)
    try:
        strategy = CompositeStrategy.from_config(config)
    except ConfigurationError as e:
        logger.error("Bad configuration: %s", e)
        return 1
    bars = _load_enriched(data_path, config)
    if bars is None:
        return 1
    signal = generate_current_signal(bars, strategy, config.signal_window)
    if isinstance(signal, HoldSignal):
        print(f"HOLD: {signal.reason}")
        return 0
    print(f"{signal.side.value} @ {signal.entry_price:.2f} | SL {signal.stop_price:.2f} | TP {signal.take_profit_price:.2f}")
    print(f"Score: {signal.score:+.3f} | R:R {signal.risk_reward:.2f}")
    for line in signal.rationale:
        print(f"  - {line}")
    if notify:
        if not config.telegram_enabled:
            logger.error("Missing TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID in .env")
            return 1
        notifier = SignalNotifier(config.telegram_bot_token, config.telegram_chat_id, config.symbol)
        if not notifier.notify(signal):
            logger.warning("Signal alert not delivered")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Signal Bot CLI")
    parser.add_argument("mode", choices=["backtest", "signal"], help="Run backtest or print the current signal")
    parser.add_argument("--data", type=Path, required=True, help="OHLCV file (tab or comma separated, header row)")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--json", action="store_true", help="Backtest: print the report as JSON")
    parser.add_argument("--notify", action="store_true", help="Signal: send the proposal to Telegram")
    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args.data, args.config, args.json)
    return run_signal(args.data, args.config, args.notify)


if __name__ == "__main__":
    sys.exit(main())
