"""Features: per-bar volume change and sentiment enrichment."""

from signal_bot.features.enricher import (
    FeatureEnricher,
    FeatureSource,
    enrich_bars,
    enrich_prices,
    sentiment_from_change,
    trailing_mean,
)

__all__ = ["FeatureEnricher", "FeatureSource", "enrich_bars", "enrich_prices", "sentiment_from_change", "trailing_mean"]
