"""Tests for forexpro.risk — ATR stop/target levels and trade setups."""

import dataclasses
from datetime import datetime, timezone

import pytest

from conftest import make_bars
from forexpro.risk.sl_tp import calculate_atr_levels, is_long
from forexpro.risk.trade_setup import (
    PROBABILITY_MAX,
    PROBABILITY_MIN,
    calculate_probability,
    generate_levels,
    generate_trade_setup,
    trade_quality,
)
from forexpro.strategy.indicators import calculate_all
from forexpro.strategy.models import NEUTRAL, SRLevel, Signal
from forexpro.strategy.signals import generate_signal

NOW = datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc)


# ── ATR levels ───────────────────────────────────────────────────────────


class TestATRLevels:
    def test_long(self):
        levels = calculate_atr_levels(1.1000, "LONG", 0.0010)
        assert levels.sl == pytest.approx(1.0985)
        assert levels.tp == pytest.approx(1.1020)
        assert levels.risk_reward == 1.33

    def test_short(self):
        levels = calculate_atr_levels(1.1000, "SELL", 0.0010)
        assert levels.sl == pytest.approx(1.1015)
        assert levels.tp == pytest.approx(1.0980)

    def test_buy_alias(self):
        assert is_long("BUY") is True
        assert is_long("SHORT") is False

    def test_unknown_direction_raises(self):
        with pytest.raises(ValueError, match="direction"):
            calculate_atr_levels(1.1, "SIDEWAYS", 0.001)

    def test_zero_atr_has_zero_rr(self):
        assert calculate_atr_levels(1.1, "LONG", 0.0).risk_reward == 0.0


# ── Setups ───────────────────────────────────────────────────────────────


class TestGenerateTradeSetup:
    def test_long_setup_from_oversold_bounce(self, oversold_bars):
        indicators = calculate_all(oversold_bars)
        signal = generate_signal(oversold_bars)
        setup = generate_trade_setup(oversold_bars, indicators, signal, now=NOW)

        assert setup.active is True
        assert setup.direction == "LONG"
        assert setup.entry == oversold_bars[-1].close
        assert setup.stop_loss < setup.entry < setup.take_profit
        assert setup.risk_reward == 1.33
        assert setup.atr == indicators.atr[-1]
        assert setup.reasons == signal.reasons
        assert setup.created_at == NOW.isoformat()

    def test_short_setup_from_mirror(self, overbought_bars):
        indicators = calculate_all(overbought_bars)
        setup = generate_trade_setup(
            overbought_bars, indicators, generate_signal(overbought_bars), now=NOW
        )
        assert setup.direction == "SHORT"
        assert setup.take_profit < setup.entry < setup.stop_loss

    def test_short_history_is_inactive(self):
        bars = make_bars([1.1 + 0.001 * i for i in range(30)])
        setup = generate_trade_setup(bars, calculate_all(bars), generate_signal(bars))
        assert setup.active is False
        assert setup.message == "Not enough market data for a trade setup"

    def test_missing_inputs_are_inactive(self, oversold_bars):
        setup = generate_trade_setup(oversold_bars, None, None)
        assert setup.active is False

    def test_neutral_signal_is_inactive(self, oversold_bars):
        setup = generate_trade_setup(
            oversold_bars, calculate_all(oversold_bars), Signal(label=NEUTRAL, confidence=40)
        )
        assert setup.to_dict() == {
            "active": False,
            "message": "No clear setup - market is ranging",
            "suggestion": "Wait for stronger directional signals",
        }

    def test_undefined_atr_is_inactive(self, oversold_bars):
        indicators = dataclasses.replace(
            calculate_all(oversold_bars), atr=[None] * len(oversold_bars)
        )
        setup = generate_trade_setup(oversold_bars, indicators, generate_signal(oversold_bars))
        assert setup.active is False
        assert setup.message == "Volatility is unavailable for this market"

    def test_to_dict_active_shape(self, oversold_bars):
        setup = generate_trade_setup(
            oversold_bars, calculate_all(oversold_bars), generate_signal(oversold_bars), now=NOW
        )
        data = setup.to_dict()
        assert data["active"] is True
        assert {"entry", "stop_loss", "take_profit", "risk_reward", "probability", "levels"} <= set(data)


# ── Probability ──────────────────────────────────────────────────────────


class TestProbability:
    def test_oversold_bounce_score(self, oversold_bars):
        indicators = calculate_all(oversold_bars)
        signal = generate_signal(oversold_bars)
        # RSI 15 + MACD 15 + EMA 5 + Bollinger 15 + confidence 10 = 60 / 85
        assert calculate_probability(indicators, signal, oversold_bars[-1].close) == 65

    def test_always_clamped(self, oversold_bars, overbought_bars):
        for bars in (oversold_bars, overbought_bars):
            indicators = calculate_all(bars)
            for confidence in (0, 55, 65, 75, 100):
                for label in ("Buy", "Sell"):
                    p = calculate_probability(
                        indicators, Signal(label=label, confidence=confidence), bars[-1].close
                    )
                    assert PROBABILITY_MIN <= p <= PROBABILITY_MAX

    @pytest.mark.parametrize("p,rating", [(72, "A"), (60, "B"), (57, "C"), (50, "D")])
    def test_quality(self, p, rating):
        assert trade_quality(p)["rating"] == rating


# ── Levels ───────────────────────────────────────────────────────────────


class TestLevels:
    def test_indicator_levels(self, oversold_bars):
        indicators = calculate_all(oversold_bars)
        levels = generate_levels(indicators, oversold_bars[-1].close)
        labels = [lv.label for lv in levels]
        assert labels[:4] == ["EMA 21", "EMA 50", "BB Upper", "BB Lower"]
        # price is below both EMAs in the decline
        assert levels[0].level_type == "resistance"

    def test_sr_levels_numbered_and_capped(self, oversold_bars):
        sr = [
            SRLevel(1.20, "resistance", 3),
            SRLevel(1.10, "support", 2),
            SRLevel(1.21, "resistance", 1),
            SRLevel(1.09, "support", 1),
            SRLevel(1.22, "resistance", 1),
        ]
        indicators = dataclasses.replace(calculate_all(oversold_bars), support_resistance=sr)
        levels = generate_levels(indicators, oversold_bars[-1].close)
        sr_labels = [lv.label for lv in levels if lv.strength is not None]
        assert sr_labels == ["R1", "S2", "R3", "S4"]
