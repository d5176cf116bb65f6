"""Signal alerts — decides when a signal is worth announcing.

Delivery is delegated to a ``NotificationSink``; the default sink writes
the alert to the application log.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Optional, Protocol

from forexpro.strategy.models import BUY, SELL, STRONG_BUY, STRONG_SELL, Signal

logger = logging.getLogger("forexpro")

DEFAULT_MIN_CONFIDENCE = 70
DEFAULT_SIGNAL_TYPES = (STRONG_BUY, STRONG_SELL, BUY, SELL)
FALLBACK_REASON = "Check the app for details"


@dataclass(frozen=True)
class NotificationSettings:
    """User alert preferences."""

    enabled: bool = True
    min_confidence: int = DEFAULT_MIN_CONFIDENCE
    signal_types: tuple[str, ...] = DEFAULT_SIGNAL_TYPES
    sound_enabled: bool = True
    vibration_enabled: bool = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data["signal_types"] = list(self.signal_types)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "NotificationSettings":
        """Build settings from a stored dict; missing keys take defaults.

        Raises:
            ValueError: If ``signal_types`` is not a list of strings.
        """
        defaults = cls()
        signal_types = data.get("signal_types", defaults.signal_types)
        if not isinstance(signal_types, (list, tuple)) or not all(
            isinstance(s, str) for s in signal_types
        ):
            raise ValueError(f"signal_types must be a list of strings, got {signal_types!r}")
        return cls(
            enabled=bool(data.get("enabled", defaults.enabled)),
            min_confidence=int(data.get("min_confidence", defaults.min_confidence)),
            signal_types=tuple(signal_types),
            sound_enabled=bool(data.get("sound_enabled", defaults.sound_enabled)),
            vibration_enabled=bool(
                data.get("vibration_enabled", defaults.vibration_enabled)
            ),
        )


@dataclass(frozen=True)
class SignalAlert:
    pair: str
    signal_label: str
    confidence: int
    top_reason: str

    @property
    def title(self) -> str:
        direction = "up" if "Buy" in self.signal_label else "down"
        return f"[{direction}] {self.signal_label} Signal - {self.pair}"

    @property
    def body(self) -> str:
        return f"Confidence: {self.confidence}%\n{self.top_reason}"


def build_signal_alert(
    pair: str,
    signal: Signal,
    settings: Optional[NotificationSettings] = None,
) -> Optional[SignalAlert]:
    """Return an alert for *signal*, or ``None`` when it does not qualify.

    A signal qualifies when alerts are enabled, its confidence is at least
    ``settings.min_confidence`` and its label is one of
    ``settings.signal_types``.
    """
    if settings is None:
        settings = NotificationSettings()
    if not settings.enabled:
        return None
    if signal.confidence < settings.min_confidence:
        return None
    if signal.label not in settings.signal_types:
        return None
    return SignalAlert(
        pair=pair,
        signal_label=signal.label,
        confidence=signal.confidence,
        top_reason=signal.reasons[0] if signal.reasons else FALLBACK_REASON,
    )


class NotificationSink(Protocol):
    def send(self, alert: SignalAlert) -> None: ...


@dataclass
class LoggingNotificationSink:
    """Sink that logs each alert and keeps the most recent ones in memory."""

    max_recent: int = 20
    recent: list[SignalAlert] = field(default_factory=list)

    def send(self, alert: SignalAlert) -> None:
        logger.info("ALERT %s — %s", alert.title, alert.body.replace("\n", " | "))
        self.recent.insert(0, alert)
        del self.recent[self.max_recent:]
