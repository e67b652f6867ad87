"""Unit tests for strategies.composite."""

from datetime import datetime, timedelta

import pytest
from signal_bot.core.config import Config
from signal_bot.core.errors import ConfigurationError
from signal_bot.core.types import EnrichedBar, SignalSide
from signal_bot.strategies.composite import (
    CompositeStrategy,
    STANDARD_POLICY,
    STRICT_POLICY,
    ScoringPolicy,
    build_policy,
)

T0 = datetime(2024, 1, 1)


def _window(closes):
    return [
        EnrichedBar(T0 + timedelta(minutes=15 * i), c, c, c, c, 1000.0)
        for i, c in enumerate(closes)
    ]


def _current(close=100.0, volume_change=0.0, sentiment=0.0):
    return EnrichedBar(T0 + timedelta(days=1), close, close, close, close, 1000.0,
                       volume_change=volume_change, sentiment=sentiment)


def test_short_window_no_signal():
    s = CompositeStrategy()
    cur = _current(volume_change=500.0, sentiment=0.7)
    for n in (0, 1, 19):
        assert s.get_signal(cur, _window([100.0] * n)) is None


def test_buy_levels():
    s = CompositeStrategy()
    p = s.get_signal(_current(100.0, volume_change=60.0), _window([100.0] * 20))
    assert p is not None
    assert p.side == SignalSide.LONG
    assert p.entry_price == 100.0
    assert p.stop_price == pytest.approx(96.0)
    assert p.take_profit_price == pytest.approx(112.0)
    assert p.score == pytest.approx(0.4)


def test_sell_levels():
    s = CompositeStrategy()
    p = s.get_signal(_current(100.0, volume_change=-40.0, sentiment=-0.4), _window([100.0] * 20))
    assert p.side == SignalSide.SHORT
    assert p.stop_price == pytest.approx(104.0)
    assert p.take_profit_price == pytest.approx(88.0)
    assert p.score == pytest.approx(-0.54)


def test_below_threshold_holds():
    s = CompositeStrategy()
    # 0.2 (rise) + 0.4 * 0.35 = 0.34
    assert s.get_signal(_current(volume_change=30.0, sentiment=0.4), _window([100.0] * 20)) is None
    assert s.get_signal(_current(), _window([100.0] * 50)) is None


def test_momentum_bullish_crossover():
    s = CompositeStrategy()
    window = _window([100.0] * 30 + [110.0] * 10)
    b = s.evaluate(_current(volume_change=30.0), window)
    assert b.momentum == pytest.approx(0.25)
    p = s.get_signal(_current(volume_change=30.0), window)
    assert p.side == SignalSide.LONG
    assert p.score == pytest.approx(0.45)


def test_momentum_bearish_crossover():
    s = CompositeStrategy()
    window = _window([100.0] * 30 + [90.0] * 10)
    assert s.evaluate(_current(), window).momentum == pytest.approx(-0.25)


def test_momentum_needs_full_history():
    s = CompositeStrategy()
    window = _window([100.0] * 29 + [110.0] * 10)
    assert s.evaluate(_current(volume_change=30.0), window).momentum == 0.0
    assert s.get_signal(_current(volume_change=30.0), window) is None


def test_momentum_inside_band_is_zero():
    s = CompositeStrategy()
    window = _window([100.0] * 30 + [100.4] * 10)
    assert s.evaluate(_current(), window).momentum == 0.0


def test_idempotent():
    s = CompositeStrategy()
    cur = _current(volume_change=60.0, sentiment=0.4)
    window = _window([100.0] * 30 + [110.0] * 10)
    assert s.get_signal(cur, window) == s.get_signal(cur, window)


def test_rationale_lists_each_term():
    s = CompositeStrategy()
    p = s.get_signal(_current(volume_change=60.0), _window([100.0] * 40))
    assert len(p.rationale) == 3
    assert p.rationale[0].startswith("volume change +60.0%")
    assert p.rationale[1].startswith("sentiment")
    assert p.rationale[2].startswith("momentum")


def test_strict_policy_is_stricter():
    cur = _current(volume_change=60.0, sentiment=0.2)
    window = _window([100.0] * 20)
    assert CompositeStrategy(STANDARD_POLICY).get_signal(cur, window) is not None
    strict = CompositeStrategy(STRICT_POLICY)
    b = strict.evaluate(cur, window)
    assert b.volume == pytest.approx(0.2)
    assert b.sentiment == 0.0  # below the 0.3 minimum
    assert strict.get_signal(cur, window) is None


def test_strict_partial_momentum():
    # SMA5=120, SMA10=100, SMA20=100: spread clears the band but averages are not stacked
    closes = [100.0] * 30 + [80.0] * 5 + [120.0] * 5
    b = CompositeStrategy(STRICT_POLICY).evaluate(_current(), _window(closes))
    assert b.momentum == pytest.approx(0.125)


def test_strict_stacked_momentum():
    closes = [100.0] * 30 + [105.0] * 5 + [110.0] * 5
    b = CompositeStrategy(STRICT_POLICY).evaluate(_current(), _window(closes))
    assert b.momentum == pytest.approx(0.25)


def test_build_policy():
    assert build_policy("standard") is STANDARD_POLICY
    assert build_policy("STRICT").threshold == 0.5
    assert build_policy("standard", threshold=0.5).threshold == 0.5
    p = build_policy("standard", overrides={"volume_surge_pct": 80, "momentum_periods": [20, 10]})
    assert p.volume_surge_pct == 80
    assert p.momentum_periods == (10, 20)


def test_build_policy_rejects_unknown():
    with pytest.raises(ConfigurationError):
        build_policy("aggressive")
    with pytest.raises(ConfigurationError):
        build_policy("standard", overrides={"volume_spike": 10})


def test_policy_validation():
    with pytest.raises(ConfigurationError):
        ScoringPolicy(momentum_periods=(10,))
    with pytest.raises(ConfigurationError):
        ScoringPolicy(momentum_periods=(10, 50), momentum_history=40)
    with pytest.raises(ConfigurationError):
        ScoringPolicy(threshold=0.0)


def test_from_config():
    cfg = Config(scoring_policy="strict", score_threshold=0.6, stop_loss_pct=2.0, take_profit_pct=6.0, min_window=30)
    s = CompositeStrategy.from_config(cfg)
    assert s.policy.name == "strict"
    assert s.policy.threshold == 0.6
    assert s.min_window == 30
    p = s.get_signal(_current(100.0, volume_change=200.0, sentiment=0.7), _window([100.0] * 30))
    assert p.stop_price == pytest.approx(98.0)
    assert p.take_profit_price == pytest.approx(106.0)
