"""Unit tests for features.enricher."""

from datetime import datetime, timedelta

import numpy as np
import pytest
from signal_bot.core.types import Bar
from signal_bot.features.enricher import (
    FeatureEnricher,
    FeatureSource,
    enrich_bars,
    enrich_prices,
    sentiment_from_change,
    trailing_mean,
)

T0 = datetime(2024, 1, 1)


def _bars(closes, volumes=None):
    volumes = volumes if volumes is not None else [1000.0] * len(closes)
    return [
        Bar(T0 + timedelta(minutes=15 * i), c, c, c, c, v)
        for i, (c, v) in enumerate(zip(closes, volumes))
    ]


def _random_walk(n: int, seed: int = 3):
    rng = np.random.default_rng(seed)
    closes = 100.0 * np.cumprod(1 + rng.normal(0, 0.03, n))
    volumes = rng.uniform(0, 5000, n)
    return _bars(closes.tolist(), volumes.tolist())


def test_sentiment_mapping():
    assert sentiment_from_change(5.0) == 0.7
    assert sentiment_from_change(2.0) == 0.4
    assert sentiment_from_change(-5.0) == -0.7
    assert sentiment_from_change(-2.0) == -0.4
    assert sentiment_from_change(0.5) == pytest.approx(0.05)
    # Boundaries fall through to the linear band
    assert sentiment_from_change(1.0) == pytest.approx(0.1)
    assert sentiment_from_change(-3.0) == -0.4


def test_same_length_and_order():
    bars = _random_walk(80)
    enriched = enrich_bars(bars)
    assert len(enriched) == len(bars)
    assert [e.time for e in enriched] == [b.time for b in bars]
    assert [e.close for e in enriched] == [b.close for b in bars]


def test_empty_sequence():
    assert enrich_bars([]) == []


def test_zero_before_lookback():
    enriched = enrich_bars(_random_walk(60), lookback=28)
    for e in enriched[:28]:
        assert e.volume_change == 0.0
        assert e.sentiment == 0.0


def test_volume_change_against_prior_average():
    volumes = [1000.0] * 28 + [1500.0, 500.0]
    enriched = enrich_bars(_bars([100.0] * 30, volumes))
    assert enriched[28].volume_change == pytest.approx(50.0)
    # avg of bars 1..28 = (27 * 1000 + 1500) / 28
    avg = (27 * 1000 + 1500) / 28
    assert enriched[29].volume_change == pytest.approx((500 - avg) / avg * 100)


def test_volume_change_zero_average():
    volumes = [0.0] * 28 + [1000.0]
    enriched = enrich_bars(_bars([100.0] * 29, volumes))
    assert enriched[28].volume_change == 0.0


def test_sentiment_from_lookback_change():
    closes = [100.0] * 28 + [104.0, 98.0, 100.5]
    enriched = enrich_bars(_bars(closes))
    assert enriched[28].sentiment == 0.7
    assert enriched[29].sentiment == -0.4
    assert enriched[30].sentiment == pytest.approx(0.05)


def test_sentiment_bounded():
    for e in enrich_bars(_random_walk(300, seed=11)):
        assert -1.0 <= e.sentiment <= 1.0


def test_custom_lookback():
    volumes = [1000.0] * 5 + [2000.0]
    enriched = enrich_bars(_bars([100.0] * 6, volumes), lookback=5)
    assert enriched[4].volume_change == 0.0
    assert enriched[5].volume_change == pytest.approx(100.0)


def test_deterministic():
    bars = _random_walk(120, seed=5)
    assert enrich_bars(bars) == enrich_bars(bars)


def test_price_only_volatility_proxy():
    closes = [100.0 if i % 2 == 0 else 101.0 for i in range(30)]
    bars = [Bar.from_price(T0 + timedelta(seconds=3 * i), c) for i, c in enumerate(closes)]
    enriched = enrich_prices(bars, lookback=28, volatility_scale=10000.0)
    assert all(e.volume_change == 0.0 for e in enriched[:28])
    # 27 unit steps over prior 28 prices averaging 100.5
    assert enriched[28].volume_change == pytest.approx(1.0 / 100.5 * 10000.0)
    assert enriched[29].volume_change == pytest.approx(1.0 / 100.5 * 10000.0)


def test_price_only_flat_has_no_volatility():
    bars = [Bar.from_price(T0 + timedelta(seconds=i), 87687.0) for i in range(40)]
    enriched = FeatureEnricher(28, FeatureSource.PRICE).enrich(bars)
    assert all(e.volume_change == 0.0 for e in enriched)
    assert all(e.sentiment == 0.0 for e in enriched)


def test_compute_features_columns():
    from signal_bot.data.loader import bars_to_frame

    df = FeatureEnricher(28).compute_features(bars_to_frame(_random_walk(40)))
    for col in ("volume_change", "price_change", "sentiment"):
        assert col in df.columns
    assert not df[["volume_change", "price_change", "sentiment"]].isna().any().any()


def test_invalid_lookback():
    with pytest.raises(ValueError):
        FeatureEnricher(0)


def test_trailing_mean_uses_prior_values_only():
    import pandas as pd

    out = trailing_mean(pd.Series([1.0, 2.0, 3.0, 4.0, 5.0]), 2)
    assert out.isna().tolist() == [True, True, False, False, False]
    assert out.tolist()[2:] == [1.5, 2.5, 3.5]
    assert trailing_mean(pd.Series([1.0, 2.0]), 2).isna().all()


def test_volume_change_matches_direct_sum_exactly():
    bars = _random_walk(3000, seed=11)
    enriched = enrich_bars(bars, lookback=28)
    volumes = [b.volume for b in bars]
    mismatches = 0
    for i in range(28, len(bars)):
        total = 0.0
        for v in volumes[i - 28:i]:
            total += v
        avg = total / 28
        if enriched[i].volume_change != (volumes[i] - avg) / avg * 100:
            mismatches += 1
    assert mismatches == 0
