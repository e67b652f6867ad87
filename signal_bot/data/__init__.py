"""Data: historical bar loading and DataFrame conversion."""

from signal_bot.data.loader import parse_bars, parse_row, load_bars, bars_to_frame, check_chronological

__all__ = ["parse_bars", "parse_row", "load_bars", "bars_to_frame", "check_chronological"]
