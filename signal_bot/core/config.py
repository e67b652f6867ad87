"""
Load configuration from config.yaml and .env. Telegram secrets only from env.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_optional_float(key: str, default: Optional[float]) -> Optional[float]:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError:
            return default

    strategy = data.get("strategy") or {}
    risk = data.get("risk") or {}
    backtest = data.get("backtest") or {}
    live = data.get("live") or {}
    logging_cfg = data.get("logging") or {}

    threshold = strategy.get("score_threshold")
    return Config(
        symbol=env("SYMBOL", strategy.get("symbol", "BTCUSD")).upper(),
        # Features / scoring
        lookback=env_int("LOOKBACK", strategy.get("lookback", 28)),
        min_window=env_int("MIN_WINDOW", strategy.get("min_window", 20)),
        signal_window=env_int("SIGNAL_WINDOW", strategy.get("signal_window", 50)),
        scoring_policy=env("SCORING_POLICY", strategy.get("policy", "standard")).lower(),
        score_threshold=env_optional_float("SCORE_THRESHOLD", float(threshold) if threshold is not None else None),
        scoring_overrides=dict(strategy.get("cutoffs") or {}),
        # Risk
        stop_loss_pct=env_float("STOP_LOSS_PCT", risk.get("stop_loss_pct", 4.0)),
        take_profit_pct=env_float("TAKE_PROFIT_PCT", risk.get("take_profit_pct", 12.0)),
        # Backtest
        initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", 10000.0)),
        warmup_bars=env_int("WARMUP_BARS", backtest.get("warmup_bars", 50)),
        history_window=env_int("HISTORY_WINDOW", backtest.get("history_window", 50)),
        min_backtest_bars=env_int("MIN_BACKTEST_BARS", backtest.get("min_bars", 100)),
        # Live
        live_buffer_size=env_int("LIVE_BUFFER_SIZE", live.get("buffer_size", 200)),
        volatility_scale=env_float("VOLATILITY_SCALE", live.get("volatility_scale", 10000.0)),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=env("TELEGRAM_CHAT_ID"),
        # Logging
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "signal_bot.log"),
        trade_log_file=logging_cfg.get("trade_log_file"),
    )


class Config:
    """Unified configuration. Immutable after load."""

    __slots__ = (
        "symbol", "lookback", "min_window", "signal_window",
        "scoring_policy", "score_threshold", "scoring_overrides",
        "stop_loss_pct", "take_profit_pct",
        "initial_capital", "warmup_bars", "history_window", "min_backtest_bars",
        "live_buffer_size", "volatility_scale",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file", "trade_log_file",
    )

    def __init__(
        self,
        symbol: str = "BTCUSD",
        lookback: int = 28,
        min_window: int = 20,
        signal_window: int = 50,
        scoring_policy: str = "standard",
        score_threshold: Optional[float] = None,
        scoring_overrides: Optional[dict] = None,
        stop_loss_pct: float = 4.0,
        take_profit_pct: float = 12.0,
        initial_capital: float = 10000.0,
        warmup_bars: int = 50,
        history_window: int = 50,
        min_backtest_bars: int = 100,
        live_buffer_size: int = 200,
        volatility_scale: float = 10000.0,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "signal_bot.log",
        trade_log_file: Optional[str] = None,
    ):
        self.symbol = symbol
        self.lookback = lookback
        self.min_window = min_window
        self.signal_window = signal_window
        self.scoring_policy = scoring_policy
        self.score_threshold = score_threshold
        self.scoring_overrides = dict(scoring_overrides or {})
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct
        self.initial_capital = initial_capital
        self.warmup_bars = warmup_bars
        self.history_window = history_window
        self.min_backtest_bars = min_backtest_bars
        self.live_buffer_size = live_buffer_size
        self.volatility_scale = volatility_scale
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
        self.trade_log_file = trade_log_file

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)
