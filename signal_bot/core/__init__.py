"""Core: config, types, errors, logging."""

from signal_bot.core.config import load_config, Config
from signal_bot.core.errors import (
    SignalBotError,
    InsufficientDataError,
    InvalidBarError,
    ConfigurationError,
    BacktestCancelled,
)
from signal_bot.core.types import (
    Bar,
    EnrichedBar,
    SignalSide,
    ExitReason,
    SignalProposal,
    HoldSignal,
    OpenPosition,
    ClosedTrade,
)
from signal_bot.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "SignalBotError",
    "InsufficientDataError",
    "InvalidBarError",
    "ConfigurationError",
    "BacktestCancelled",
    "Bar",
    "EnrichedBar",
    "SignalSide",
    "ExitReason",
    "SignalProposal",
    "HoldSignal",
    "OpenPosition",
    "ClosedTrade",
    "setup_logging",
]
