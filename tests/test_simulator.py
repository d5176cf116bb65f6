"""Tests for forexpro.simulation.simulator — probabilistic paper trades."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import numpy as np
import pytest

from forexpro.repos.simulation_repo import SimulationRepo
from forexpro.repos.storage import MemoryStore
from forexpro.simulation.simulator import (
    TradeSimulator,
    calculate_trade_levels,
    calculate_win_probability,
    determine_outcome,
    generate_price_movement,
)
from forexpro.strategy.models import BUY, Signal


def _fixed_rng(random: float = 0.0, uniform: float = 0.0) -> MagicMock:
    """Generator stand-in returning constant draws."""
    rng = MagicMock()
    rng.random.return_value = random
    rng.uniform.return_value = uniform
    return rng


# ── Win probability ──────────────────────────────────────────────────────


class TestWinProbability:
    @pytest.mark.parametrize("confidence,expected", [
        (None, 55), (10, 52), (55, 55), (65, 60), (75, 65), (85, 68),
    ])
    def test_brackets_without_jitter(self, confidence, expected):
        assert calculate_win_probability(confidence, _fixed_rng()) == expected

    def test_clamped_at_70(self):
        assert calculate_win_probability(90, _fixed_rng(uniform=3.0)) == 70

    def test_clamped_at_50(self):
        assert calculate_win_probability(0, _fixed_rng(uniform=-3.0)) == 50

    def test_seeded_range(self):
        rng = np.random.default_rng(7)
        values = [calculate_win_probability(75, rng) for _ in range(200)]
        assert all(62 <= v <= 68 for v in values)


class TestOutcome:
    def test_draw_below_probability_wins(self):
        assert determine_outcome(55, _fixed_rng(random=0.54)) is True

    def test_draw_above_probability_loses(self):
        assert determine_outcome(55, _fixed_rng(random=0.56)) is False

    def test_seeded_frequency(self):
        rng = np.random.default_rng(123)
        wins = sum(determine_outcome(60, rng) for _ in range(5000))
        assert 0.57 < wins / 5000 < 0.63


# ── Levels and animation ─────────────────────────────────────────────────


def test_trade_levels_fallback_atr():
    levels = calculate_trade_levels(1.2000, "BUY", None)
    # ATR defaults to 0.1 % of price
    assert levels.sl == pytest.approx(1.2000 - 1.5 * 0.0012)
    assert levels.tp == pytest.approx(1.2000 + 2.0 * 0.0012)


class TestPriceMovement:
    def test_endpoints(self):
        path = generate_price_movement(1.1, 1.102, steps=20, rng=np.random.default_rng(1))
        assert len(path) == 21
        assert path[0] == 1.1
        assert path[-1] == 1.102

    def test_single_step(self):
        assert generate_price_movement(1.1, 1.0985, steps=1, rng=_fixed_rng()) == [1.1, 1.0985]

    def test_zero_steps_raises(self):
        with pytest.raises(ValueError, match="steps"):
            generate_price_movement(1.1, 1.2, steps=0)


# ── Simulator ────────────────────────────────────────────────────────────


class TestTradeSimulator:
    def _simulator(self, rng) -> tuple[TradeSimulator, SimulationRepo]:
        repo = SimulationRepo(MemoryStore())
        return TradeSimulator(repo, rng=rng), repo

    def test_win_records_target_pips(self):
        sim, repo = self._simulator(_fixed_rng(random=0.0))
        trade = sim.start_trade("BUY", 1.1000, "EUR_USD", atr=0.0010)
        assert trade.is_win is True
        assert trade.exit_price == pytest.approx(1.1020)
        assert trade.pnl_pips == 20.0
        assert trade.price_movement[-1] == trade.exit_price
        assert repo.get_trades()[0]["id"] == trade.id

    def test_loss_records_stop_pips(self):
        sim, _ = self._simulator(_fixed_rng(random=0.99))
        trade = sim.start_trade("SELL", 1.1000, "EUR_USD", atr=0.0010)
        assert trade.is_win is False
        assert trade.exit_price == pytest.approx(1.1015)
        assert trade.pnl_pips == -15.0

    def test_jpy_pip_size(self):
        sim, _ = self._simulator(_fixed_rng(random=0.0))
        trade = sim.start_trade("BUY", 150.00, "USD_JPY", atr=0.10)
        assert trade.pnl_pips == 20.0

    def test_signal_confidence_drives_probability(self):
        sim, _ = self._simulator(_fixed_rng(random=0.0))
        trade = sim.start_trade(
            "BUY", 1.1, "EUR_USD", signal=Signal(label=BUY, confidence=82), atr=0.001
        )
        assert trade.probability == 68

    def test_record_excludes_movement(self):
        sim, repo = self._simulator(np.random.default_rng(5))
        sim.start_trade("BUY", 1.1, "EUR_USD", atr=0.001)
        assert "price_movement" not in repo.get_trades()[0]

    def test_invalid_direction_not_saved(self):
        sim, repo = self._simulator(np.random.default_rng(5))
        with pytest.raises(ValueError):
            sim.start_trade("HOLD", 1.1, "EUR_USD")
        assert repo.get_trades() == []

    def test_same_seed_same_outcomes(self):
        now = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        results = []
        for _ in range(2):
            sim, _ = self._simulator(np.random.default_rng(42))
            trades = [sim.start_trade("BUY", 1.1, "EUR_USD", atr=0.001, now=now) for _ in range(10)]
            results.append([(t.is_win, t.probability, t.price_movement) for t in trades])
        assert results[0] == results[1]

    def test_history_newest_first_and_capped(self):
        sim, repo = self._simulator(np.random.default_rng(9))
        ids = [sim.start_trade("SELL", 1.3, "GBP_USD", atr=0.002).id for _ in range(55)]
        stored = repo.get_trades()
        assert len(stored) == 50
        assert stored[0]["id"] == ids[-1]
        assert stored[-1]["id"] == ids[5]
