"""Tests for forexpro.notifications — alert qualification and delivery."""

import pytest

from forexpro.notifications import (
    FALLBACK_REASON,
    LoggingNotificationSink,
    NotificationSettings,
    SignalAlert,
    build_signal_alert,
)
from forexpro.strategy.models import BUY, NEUTRAL, STRONG_SELL, Signal


def _signal(label: str = BUY, confidence: int = 75, reasons=("RSI (25.0) indicates oversold conditions",)):
    return Signal(label=label, confidence=confidence, reasons=tuple(reasons))


class TestBuildSignalAlert:
    def test_qualifying_signal(self):
        alert = build_signal_alert("EUR_USD", _signal())
        assert alert == SignalAlert(
            pair="EUR_USD",
            signal_label=BUY,
            confidence=75,
            top_reason="RSI (25.0) indicates oversold conditions",
        )

    def test_threshold_is_inclusive(self):
        assert build_signal_alert("EUR_USD", _signal(confidence=70)) is not None
        assert build_signal_alert("EUR_USD", _signal(confidence=69)) is None

    def test_neutral_never_alerts_by_default(self):
        assert build_signal_alert("EUR_USD", _signal(label=NEUTRAL, confidence=90)) is None

    def test_disabled_label(self):
        settings = NotificationSettings(signal_types=(STRONG_SELL,))
        assert build_signal_alert("EUR_USD", _signal(), settings) is None

    def test_disabled_alerts(self):
        assert build_signal_alert("EUR_USD", _signal(), NotificationSettings(enabled=False)) is None

    def test_custom_minimum(self):
        settings = NotificationSettings(min_confidence=50)
        assert build_signal_alert("EUR_USD", _signal(confidence=55), settings) is not None

    def test_no_reasons_uses_fallback(self):
        alert = build_signal_alert("EUR_USD", _signal(reasons=()))
        assert alert.top_reason == FALLBACK_REASON


def test_alert_text():
    alert = build_signal_alert("GBP_USD", _signal(label=STRONG_SELL, confidence=88))
    assert alert.title == "[down] Strong Sell Signal - GBP_USD"
    assert alert.body.startswith("Confidence: 88%\n")


def test_logging_sink_keeps_recent(caplog):
    sink = LoggingNotificationSink(max_recent=2)
    with caplog.at_level("INFO", logger="forexpro"):
        for pair in ("EUR_USD", "GBP_USD", "USD_JPY"):
            sink.send(build_signal_alert(pair, _signal()))
    assert [a.pair for a in sink.recent] == ["USD_JPY", "GBP_USD"]
    assert "Buy Signal - USD_JPY" in caplog.text


def test_settings_dict_round_trip():
    settings = NotificationSettings(min_confidence=80, sound_enabled=False)
    assert NotificationSettings.from_dict(settings.to_dict()) == settings


@pytest.mark.parametrize("signal_types", ["Buy", ["Buy", 3], 7])
def test_settings_rejects_malformed_signal_types(signal_types):
    with pytest.raises(ValueError, match="signal_types"):
        NotificationSettings.from_dict({"signal_types": signal_types})
