"""Utils: Telegram notifications."""

from signal_bot.utils.telegram import send_telegram, format_signal_message, signal_key, SignalNotifier

__all__ = ["send_telegram", "format_signal_message", "signal_key", "SignalNotifier"]
