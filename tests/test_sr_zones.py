"""Tests for forexpro.strategy.sr_zones — swing detection and clustering."""

from forexpro.strategy.models import Bar, SRLevel
from forexpro.strategy.sr_zones import (
    cluster_levels,
    detect_support_resistance,
    find_swing_points,
)


def _flat_bars(n: int, high: float = 1.0950, low: float = 1.0900) -> list[Bar]:
    return [
        Bar(time=1_700_000_000 + i * 3600, open=1.0920, high=high, low=low, close=1.0920)
        for i in range(n)
    ]


def _with_high(bars: list[Bar], index: int, high: float) -> None:
    b = bars[index]
    bars[index] = Bar(time=b.time, open=b.open, high=high, low=b.low, close=b.close)


def _with_low(bars: list[Bar], index: int, low: float) -> None:
    b = bars[index]
    bars[index] = Bar(time=b.time, open=b.open, high=b.high, low=low, close=b.close)


class TestSwingPoints:
    def test_equal_neighbours_are_not_swings(self):
        assert find_swing_points(_flat_bars(50)) == []

    def test_detects_isolated_peak(self):
        bars = _flat_bars(45)
        _with_high(bars, 22, 1.1000)
        points = find_swing_points(bars)
        assert points == [SRLevel(price=1.1000, level_type="resistance", strength=1)]

    def test_peak_too_close_to_edge_ignored(self):
        bars = _flat_bars(45)
        _with_high(bars, 10, 1.1000)
        assert find_swing_points(bars) == []


class TestClustering:
    def test_nearby_peaks_merge(self):
        bars = _flat_bars(62)
        _with_high(bars, 20, 1.1000)
        _with_high(bars, 41, 1.1005)
        levels = detect_support_resistance(bars)
        assert len(levels) == 1
        assert levels[0].level_type == "resistance"
        assert levels[0].strength == 2
        assert abs(levels[0].price - 1.10025) < 1e-9

    def test_distant_levels_stay_separate(self):
        candidates = [
            SRLevel(1.1000, "resistance", 1),
            SRLevel(1.1200, "resistance", 1),
        ]
        assert len(cluster_levels(candidates)) == 2

    def test_types_never_merge(self):
        candidates = [
            SRLevel(1.1000, "resistance", 1),
            SRLevel(1.1000, "support", 1),
        ]
        merged = cluster_levels(candidates)
        assert [lv.level_type for lv in merged] == ["resistance", "support"]


class TestDetect:
    def test_short_input_returns_empty(self):
        bars = _flat_bars(40)
        _with_high(bars, 20, 1.1000)
        assert detect_support_resistance(bars) == []

    def test_strongest_first_then_discovery_order(self):
        bars = _flat_bars(90)
        _with_low(bars, 20, 1.0800)          # support, strength 1
        _with_high(bars, 41, 1.1000)         # resistance
        _with_high(bars, 62, 1.1004)         # merges with the one above
        levels = detect_support_resistance(bars)
        assert [(lv.level_type, lv.strength) for lv in levels] == [
            ("resistance", 2),
            ("support", 1),
        ]

    def test_capped_at_max_levels(self):
        bars = _flat_bars(200)
        for k, i in enumerate(range(21, 180, 21)):
            _with_high(bars, i, 1.10 + 0.01 * k)
        levels = detect_support_resistance(bars, max_levels=3)
        assert len(levels) == 3
