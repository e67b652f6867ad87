"""
Logging setup for the signal_bot hierarchy. Console plus optional run log and trade log.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
TRADE_LOGGER = "signal_bot.backtest.tracker"


class RedactFilter(logging.Filter):
    """Masks secret values (Telegram bot token, chat id) in rendered messages."""

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        msg = record.getMessage()
        for secret in self.secrets:
            msg = msg.replace(secret, "***")
        record.msg, record.args = msg, None
        return True


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
    trade_log_file: Optional[str] = None,
    secrets: Iterable[str] = (),
) -> logging.Logger:
    """
    Configure the signal_bot logger: console, optional run log file, optional
    trade log (position opens/closes at DEBUG regardless of `level`).
    `secrets` are masked in every handler's output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger("signal_bot")
    root.setLevel(logging.DEBUG if trade_log_file else log_level)
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redact = RedactFilter(secrets)

    def add(handler: logging.Handler, handler_level: int, logger: logging.Logger = root) -> None:
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)
        handler.addFilter(redact)
        logger.addHandler(handler)

    add(logging.StreamHandler(sys.stdout), log_level)

    if log_dir and (log_file or trade_log_file):
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        if log_file:
            add(logging.FileHandler(log_dir / log_file, encoding="utf-8"), log_level)
        if trade_log_file:
            trades = logging.getLogger(TRADE_LOGGER)
            trades.handlers.clear()
            add(logging.FileHandler(log_dir / trade_log_file, encoding="utf-8"), logging.DEBUG, trades)

    # requests' pool logs full URLs, bot token included
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return root
