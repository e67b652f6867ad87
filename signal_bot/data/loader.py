"""
Historical bar loader: delimited text (tab or comma) -> validated Bar list.
Malformed rows are skipped, never fatal to the whole file.
"""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from signal_bot.core.errors import InvalidBarError
from signal_bot.core.types import Bar

logger = logging.getLogger("signal_bot.data")

OHLCV_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def _split_row(line: str) -> List[str]:
    values = line.split("\t")
    if len(values) < 6:
        values = line.split(",")
    return [v.strip().replace('"', "").replace("'", "") for v in values]


def _parse_time(raw: str) -> datetime:
    """
    Timestamp text or epoch digits (13 = milliseconds, otherwise seconds).
    Returned naive in UTC so rows with and without offsets compare.
    """
    try:
        if raw.isdigit():
            ts = pd.to_datetime(int(raw), unit="ms" if len(raw) >= 13 else "s")
        else:
            ts = pd.Timestamp(raw)
    except (ValueError, TypeError, OverflowError) as e:
        raise InvalidBarError(f"bad timestamp {raw!r}") from e
    if pd.isna(ts):
        raise InvalidBarError(f"bad timestamp {raw!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidBarError(f"bad {name} {raw!r}") from e


def parse_row(line: str) -> Bar:
    """Parse one data row. Raises InvalidBarError."""
    values = _split_row(line)
    if len(values) < 6:
        raise InvalidBarError(f"expected 6 columns, got {len(values)}")
    time = _parse_time(values[0])
    o, h, l, c, v = (_parse_float(name, raw) for name, raw in zip(OHLCV_COLUMNS[1:], values[1:6]))
    return Bar(time=time, open=o, high=h, low=l, close=c, volume=v)


def parse_bars(text: str) -> List[Bar]:
    """
    Parse delimited OHLCV text. First line is a header.
    Skips rows that are short, unparsable, invalid, or not strictly after the previous row.
    """
    lines = text.strip().splitlines()
    bars: List[Bar] = []
    skipped = 0
    last_time: Optional[datetime] = None
    for lineno, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        try:
            bar = parse_row(line)
            if last_time is not None and bar.time <= last_time:
                raise InvalidBarError(f"timestamp {bar.time} not after {last_time}")
        except InvalidBarError as e:
            skipped += 1
            logger.debug("Skipping line %d: %s", lineno, e)
            continue
        bars.append(bar)
        last_time = bar.time
    logger.info("Parsed %d bars (%d rows skipped)", len(bars), skipped)
    return bars


def load_bars(path: Path) -> List[Bar]:
    """Read a tab/comma separated OHLCV file."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_bars(f.read())


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """OHLCV DataFrame (columns: time, open, high, low, close, volume)."""
    return pd.DataFrame(
        [(b.time, b.open, b.high, b.low, b.close, b.volume) for b in bars],
        columns=OHLCV_COLUMNS,
    )


def check_chronological(bars: Iterable[Bar]) -> None:
    """Raise InvalidBarError if the sequence goes backwards in time."""
    prev: Optional[datetime] = None
    for i, bar in enumerate(bars):
        if prev is not None and bar.time < prev:
            raise InvalidBarError(f"bar {i} at {bar.time} precedes {prev}")
        prev = bar.time
