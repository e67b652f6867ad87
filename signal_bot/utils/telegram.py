"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
import logging
import threading
from datetime import datetime
from typing import Optional, Union

import requests

from signal_bot.core.types import HoldSignal, SignalProposal, SignalSide

logger = logging.getLogger("signal_bot.utils.telegram")


def send_telegram(text: str, bot_token: str = "", chat_id: str = "", parse_mode: Optional[str] = None) -> bool:
    """Send message to Telegram. Returns True on success. No-op if not configured."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text}
    if parse_mode:
        payload["parse_mode"] = parse_mode
    try:
        r = requests.post(url, json=payload, timeout=10)
    except requests.RequestException as e:
        logger.warning("Telegram request failed: %s", type(e).__name__)
        return False
    if r.status_code != 200:
        logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
        return False
    return True


def format_signal_message(proposal: SignalProposal, symbol: str = "BTCUSD", when: Optional[datetime] = None) -> str:
    """Markdown alert text for a proposal."""
    marker = "🟢" if proposal.side == SignalSide.LONG else "🔴"
    when = when or datetime.now()
    return (
        f"{marker} *{proposal.side.value} SIGNAL - {symbol}*\n\n"
        f"📊 *Entry Price:* ${proposal.entry_price:.2f}\n"
        f"🛑 *Stop Loss:* ${proposal.stop_price:.2f}\n"
        f"🎯 *Take Profit:* ${proposal.take_profit_price:.2f}\n"
        f"⚖️ *Score:* {proposal.score:+.2f} (R:R {proposal.risk_reward:.2f})\n\n"
        f"⏰ {when:%Y-%m-%d %H:%M:%S}"
    )


def signal_key(proposal: SignalProposal) -> str:
    """Dedup key: side plus entry rounded to whole units."""
    return f"{proposal.side.value}-{proposal.entry_price:.0f}"


class SignalNotifier:
    """
    Sends each new proposal once. A proposal is new when its key differs from the
    last one dispatched; HOLD signals are never sent.
    """

    def __init__(self, bot_token: str = "", chat_id: str = "", symbol: str = "BTCUSD"):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self.symbol = symbol
        self._last_sent: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    @property
    def last_sent(self) -> Optional[str]:
        return self._last_sent

    def notify(self, signal: Union[SignalProposal, HoldSignal]) -> bool:
        """Send `signal` if it is a proposal not sent last time. Returns True if dispatched."""
        if not self.enabled or isinstance(signal, HoldSignal):
            return False
        key = signal_key(signal)
        with self._lock:
            if key == self._last_sent:
                return False
            self._last_sent = key
        logger.info("New signal %s, sending alert", key)
        return send_telegram(
            format_signal_message(signal, self.symbol), self._bot_token, self._chat_id, parse_mode="Markdown"
        )

    def test_connection(self) -> bool:
        return send_telegram(f"🤖 {self.symbol} signal bot connected!", self._bot_token, self._chat_id)
