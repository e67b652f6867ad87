"""
Live bar buffer: the single up-to-date owner of streamed observations.
Readers take immutable snapshots; nothing holds a reference to the live deque.
"""

from __future__ import annotations
import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Iterable, List, Optional, Tuple

from signal_bot.core.config import Config
from signal_bot.core.errors import InvalidBarError
from signal_bot.core.types import Bar, EnrichedBar
from signal_bot.features.enricher import FeatureEnricher, FeatureSource

logger = logging.getLogger("signal_bot.live")


class LiveBarBuffer:
    """
    Bounded, lock-protected buffer of the most recent `maxlen` bars.
    Observations must arrive in time order. Price-only feeds are enriched with
    the volatility proxy; set `source=FeatureSource.OHLCV` for feeds with real volume.
    """

    def __init__(
        self,
        maxlen: int = 200,
        lookback: int = 28,
        volatility_scale: float = 10000.0,
        source: FeatureSource = FeatureSource.PRICE,
    ):
        if maxlen <= lookback:
            raise ValueError(f"maxlen ({maxlen}) must exceed lookback ({lookback})")
        self._bars: Deque[Bar] = deque(maxlen=maxlen)
        self._lock = threading.Lock()
        self._enricher = FeatureEnricher(lookback, source, volatility_scale)

    @classmethod
    def from_config(cls, config: Config, source: FeatureSource = FeatureSource.PRICE) -> "LiveBarBuffer":
        return cls(
            maxlen=config.live_buffer_size,
            lookback=config.lookback,
            volatility_scale=config.volatility_scale,
            source=source,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._bars)

    @property
    def last(self) -> Optional[Bar]:
        with self._lock:
            return self._bars[-1] if self._bars else None

    def append_bar(self, bar: Bar) -> None:
        """Append one observation. Raises InvalidBarError if it is older than the last one."""
        with self._lock:
            if self._bars:
                last = self._bars[-1].time
                try:
                    earlier = bar.time < last
                except TypeError:
                    raise InvalidBarError(f"bar at {bar.time} mixes naive and tz-aware time with {last}") from None
                if earlier:
                    raise InvalidBarError(f"bar at {bar.time} precedes last bar at {last}")
            self._bars.append(bar)

    def append_price(self, price: float, time: Optional[datetime] = None) -> Bar:
        """Append a price-only observation stamped `time` (default: now, UTC)."""
        bar = Bar.from_price(time or datetime.now(timezone.utc), float(price))
        self.append_bar(bar)
        return bar

    def extend(self, bars: Iterable[Bar]) -> int:
        """Append in order, skipping invalid or out-of-order bars. Returns the count accepted."""
        accepted = 0
        for bar in bars:
            try:
                self.append_bar(bar)
            except InvalidBarError as e:
                logger.debug("Skipping live bar: %s", e)
                continue
            accepted += 1
        return accepted

    def snapshot(self) -> Tuple[Bar, ...]:
        with self._lock:
            return tuple(self._bars)

    def enriched_snapshot(self) -> List[EnrichedBar]:
        """Enrich a snapshot; the buffer may keep changing while this runs."""
        return self._enricher.enrich(self.snapshot())
