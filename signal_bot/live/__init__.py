"""Live: bar buffer for streamed prices and current-signal generation."""

from signal_bot.live.feed import LiveBarBuffer
from signal_bot.live.signals import generate_current_signal, latest_window

__all__ = ["LiveBarBuffer", "generate_current_signal", "latest_window"]
