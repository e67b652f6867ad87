"""
Feature enrichment: volume change and price-momentum sentiment per bar.
Each value depends only on the bar and the `lookback` bars strictly before it.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import List, Sequence

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from signal_bot.core.types import Bar, EnrichedBar
from signal_bot.data.loader import bars_to_frame

logger = logging.getLogger("signal_bot.features")


class FeatureSource(str, Enum):
    OHLCV = "ohlcv"
    PRICE = "price"  # live feed without true volume


def sentiment_from_change(price_change_pct: float) -> float:
    """Map a lookback price change (percent) to sentiment in [-1, 1]."""
    if price_change_pct > 3:
        s = 0.7
    elif price_change_pct > 1:
        s = 0.4
    elif price_change_pct < -3:
        s = -0.7
    elif price_change_pct < -1:
        s = -0.4
    else:
        s = price_change_pct * 0.1
    return max(-1.0, min(1.0, s))


def trailing_mean(values: pd.Series, n: int) -> pd.Series:
    """
    Mean of the `n` values strictly before each position; NaN until `n` prior values exist.
    Each window is summed left to right, so results match sum(values[i-n:i]) / n bit for bit.
    """
    arr = values.to_numpy(dtype=float)
    out = np.full(len(arr), np.nan)
    if len(arr) > n:
        windows = sliding_window_view(arr[:-1], n)
        total = windows[:, 0].copy()
        for j in range(1, n):
            total += windows[:, j]
        out[n:] = total / n
    return pd.Series(out, index=values.index)


class FeatureEnricher:
    """
    volume_change: percent deviation of volume from the average of the prior
    `lookback` bars (OHLCV source), or a volatility proxy for price-only feeds:
    mean absolute price change over the prior window / mean price * volatility_scale.
    sentiment: piecewise map of the close-to-close change over `lookback` bars.
    Both are 0 until `lookback` prior bars exist.
    """

    def __init__(
        self,
        lookback: int = 28,
        source: FeatureSource = FeatureSource.OHLCV,
        volatility_scale: float = 10000.0,
    ):
        if lookback < 1:
            raise ValueError(f"lookback must be >= 1, got {lookback}")
        self.lookback = lookback
        self.source = FeatureSource(source)
        self.volatility_scale = volatility_scale

    def compute_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add price_change, volume_change, sentiment columns to an OHLCV DataFrame."""
        df = df.copy()
        n = self.lookback
        close = df["close"].astype(float)
        has_history = pd.Series(np.arange(len(df)) >= n, index=df.index)

        if self.source == FeatureSource.OHLCV:
            volume = df["volume"].astype(float)
            avg = trailing_mean(volume, n)
            change = (volume - avg) / avg.where(avg > 0) * 100
        else:
            # Window of n prior closes has n-1 steps
            steps = close.diff().abs()
            avg_step = trailing_mean(steps, n - 1) if n > 1 else steps * 0.0
            mean_price = trailing_mean(close, n)
            change = avg_step / mean_price.where(mean_price > 0) * self.volatility_scale
        df["volume_change"] = change.where(has_history, 0.0).fillna(0.0)

        prior = close.shift(n)
        price_change = (close - prior) / prior.where(prior > 0) * 100
        df["price_change"] = price_change.where(has_history, 0.0).fillna(0.0)
        df["sentiment"] = [
            sentiment_from_change(pc) if ok else 0.0
            for pc, ok in zip(df["price_change"], has_history)
        ]
        return df

    def enrich(self, bars: Sequence[Bar]) -> List[EnrichedBar]:
        """Return EnrichedBars of equal length and order."""
        if not bars:
            return []
        df = self.compute_features(bars_to_frame(bars))
        enriched = [
            EnrichedBar.from_bar(bar, float(vc), float(s))
            for bar, vc, s in zip(bars, df["volume_change"], df["sentiment"])
        ]
        logger.debug("Enriched %d bars (source=%s, lookback=%d)", len(enriched), self.source.value, self.lookback)
        return enriched


def enrich_bars(bars: Sequence[Bar], lookback: int = 28) -> List[EnrichedBar]:
    """Enrich an OHLCV bar sequence."""
    return FeatureEnricher(lookback).enrich(bars)


def enrich_prices(bars: Sequence[Bar], lookback: int = 28, volatility_scale: float = 10000.0) -> List[EnrichedBar]:
    """Enrich a price-only sequence using the volatility proxy in place of volume change."""
    return FeatureEnricher(lookback, FeatureSource.PRICE, volatility_scale).enrich(bars)
