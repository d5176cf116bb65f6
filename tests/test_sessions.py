"""Tests for forexpro.strategy.session_filter — FX session hours."""

import pytest

from forexpro.strategy import session_filter
from forexpro.strategy.session_filter import (
    TRADING_SESSIONS,
    active_sessions,
    is_in_session,
    time_to_next_window,
    trading_recommendation,
)


class TestIsInSession:
    def test_default_window(self):
        assert is_in_session(7) is True
        assert is_in_session(20) is True
        assert is_in_session(21) is False
        assert is_in_session(6) is False

    def test_midnight_wrap(self):
        assert is_in_session(23, 22, 7) is True
        assert is_in_session(3, 22, 7) is True
        assert is_in_session(7, 22, 7) is False
        assert is_in_session(12, 22, 7) is False


class TestActiveSessions:
    @pytest.mark.parametrize("hour,keys", [
        (23, ["SYDNEY"]),
        (2, ["SYDNEY", "TOKYO"]),
        (8, ["TOKYO", "LONDON"]),
        (14, ["LONDON", "NEW_YORK"]),
        (22, ["SYDNEY"]),
    ])
    def test_overlaps(self, hour, keys):
        assert [s.key for s in active_sessions(hour)] == keys

    def test_every_hour_has_a_session(self):
        for hour in range(24):
            assert active_sessions(hour)

    def test_table_has_four_sessions(self):
        assert len(TRADING_SESSIONS) == 4


class TestRecommendation:
    @pytest.mark.parametrize("utc_hour,status", [
        (13, "excellent"),
        (9, "good"),
        (18, "good"),
        (3, "moderate"),
        (22, "low"),
    ])
    def test_bands_with_default_offset(self, utc_hour, status):
        assert trading_recommendation(utc_hour)["status"] == status

    def test_offset_shifts_local_hour(self):
        rec = trading_recommendation(14, utc_offset=0)
        assert rec["local_hour"] == 14
        assert rec["quality"] == 4

    def test_good_message_names_sessions(self):
        rec = trading_recommendation(8, utc_offset=1)
        assert rec["message"] == "Tokyo (Asian) & London (European) active"

    def test_local_hour_wraps(self):
        assert trading_recommendation(23, utc_offset=3)["local_hour"] == 2

    def test_good_band_without_open_session(self, monkeypatch):
        monkeypatch.setattr(session_filter, "active_sessions", lambda utc_hour: [])
        rec = trading_recommendation(8, utc_offset=1)
        assert rec["status"] == "good"
        assert rec["message"] == "Major session transition"


class TestTimeToNextWindow:
    @pytest.mark.parametrize(
        "utc_hour, utc_minute, expected",
        [
            (6, 30, {"hours": 1, "minutes": 30, "target_time": "09:00"}),
            (8, 0, {"hours": 5, "minutes": 0, "target_time": "14:00"}),
            (10, 15, {"hours": 2, "minutes": 45, "target_time": "14:00"}),
            (20, 0, {"hours": 12, "minutes": 0, "target_time": "09:00 (tomorrow)"}),
            (13, 59, {"hours": 18, "minutes": 1, "target_time": "09:00 (tomorrow)"}),
        ],
    )
    def test_default_offset(self, utc_hour, utc_minute, expected):
        assert time_to_next_window(utc_hour, utc_minute) == expected

    def test_offset_wraps_midnight(self):
        # 23:00 UTC is 02:00 local at +3
        assert time_to_next_window(23, 0, utc_offset=3) == {
            "hours": 7, "minutes": 0, "target_time": "09:00",
        }
