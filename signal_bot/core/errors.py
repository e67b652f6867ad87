"""
Error kinds raised by the engine. "No signal" is never an error.
"""

from __future__ import annotations


class SignalBotError(Exception):
    """Base class for all engine errors."""


class InsufficientDataError(SignalBotError):
    """Window or sequence shorter than the required minimum. Recoverable: wait for more bars."""

    def __init__(self, required: int, available: int, what: str = "bars"):
        self.required = required
        self.available = available
        super().__init__(f"need at least {required} {what}, got {available}")


class InvalidBarError(SignalBotError, ValueError):
    """Bar with a bad field or out-of-order timestamp. Loaders skip the row."""


class ConfigurationError(SignalBotError):
    """Run cannot start with the given settings or data. Fatal to that run."""


class BacktestCancelled(SignalBotError):
    """Background backtest abandoned by the caller; no partial report exists."""
