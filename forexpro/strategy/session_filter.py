"""Session filter — pure functions over the major FX trading sessions.

All session hours are UTC.  Recommendation windows are expressed in the
trader's local hour, obtained from a fixed UTC offset.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TradingSession:
    """A market session; ``close_utc < open_utc`` means it spans midnight."""

    key: str
    name: str
    open_utc: int
    close_utc: int
    pairs: tuple[str, ...]
    volatility: str


TRADING_SESSIONS: tuple[TradingSession, ...] = (
    TradingSession("SYDNEY", "Sydney (Asia Pacific)", 22, 7,
                   ("AUD_USD", "NZD_USD", "AUD_JPY"), "low"),
    TradingSession("TOKYO", "Tokyo (Asian)", 0, 9,
                   ("USD_JPY", "EUR_JPY", "GBP_JPY"), "medium"),
    TradingSession("LONDON", "London (European)", 8, 17,
                   ("EUR_USD", "GBP_USD", "EUR_GBP"), "high"),
    TradingSession("NEW_YORK", "New York (American)", 13, 22,
                   ("EUR_USD", "GBP_USD", "USD_CAD"), "high"),
)


def is_in_session(
    utc_hour: int,
    session_start: int = 7,
    session_end: int = 21,
) -> bool:
    """Return True if *utc_hour* falls within ``[session_start, session_end)``.

    Windows where *session_end* is before *session_start* wrap past midnight.

    Args:
        utc_hour: The hour in UTC (0–23).
        session_start: Session start hour (inclusive).
        session_end: Session end hour (exclusive).
    """
    if session_start < session_end:
        return session_start <= utc_hour < session_end
    return utc_hour >= session_start or utc_hour < session_end


def is_session_active(session: TradingSession, utc_hour: int) -> bool:
    return is_in_session(utc_hour, session.open_utc, session.close_utc)


def active_sessions(utc_hour: int) -> list[TradingSession]:
    """Sessions open at *utc_hour*, in table order."""
    return [s for s in TRADING_SESSIONS if is_session_active(s, utc_hour)]


def local_hour(utc_hour: int, utc_offset: int) -> int:
    return (utc_hour + utc_offset) % 24


def trading_recommendation(utc_hour: int, utc_offset: int = 1) -> dict:
    """Rate the current hour for trading.

    Local-time bands: 14–18 London/NY overlap (quality 4), 09–14 and
    18–22 single major session (3), 01–09 Asian session (2), otherwise a
    quiet transition period (1).

    Returns:
        Dict with ``status``, ``title``, ``message``, ``suggested_action``,
        ``quality`` and ``local_hour``.
    """
    hour = local_hour(utc_hour, utc_offset)

    if 14 <= hour < 18:
        rec = {
            "status": "excellent",
            "title": "Excellent Time to Trade",
            "message": "London/NY overlap - highest liquidity and volatility",
            "suggested_action": "Look for breakout trades on EUR/USD or GBP/USD",
            "quality": 4,
        }
    elif 9 <= hour < 14 or 18 <= hour < 22:
        names = [s.name for s in active_sessions(utc_hour)]
        rec = {
            "status": "good",
            "title": "Good Time to Trade",
            "message": " & ".join(names) + " active" if names else "Major session transition",
            "suggested_action": "Watch for trend continuation patterns",
            "quality": 3,
        }
    elif 1 <= hour < 9:
        rec = {
            "status": "moderate",
            "title": "Asian Session",
            "message": "Lower volatility - good for range trading",
            "suggested_action": "Consider USD/JPY or wait for London open",
            "quality": 2,
        }
    else:
        rec = {
            "status": "low",
            "title": "Low Activity Period",
            "message": "Markets transitioning between sessions",
            "suggested_action": "Wait for London open at 09:00 local time",
            "quality": 1,
        }

    rec["local_hour"] = hour
    return rec


_WINDOW_STARTS = (9, 14)


def time_to_next_window(utc_hour: int, utc_minute: int = 0, utc_offset: int = 1) -> dict:
    """Time until the next good trading window opens in local time.

    Windows open at 09:00 and 14:00 local.  After 14:00 the next window is
    09:00 the following day.

    Returns:
        Dict with ``hours``, ``minutes`` and ``target_time`` (``"HH:00"``,
        suffixed ``" (tomorrow)"`` when it rolls over midnight).
    """
    now = local_hour(utc_hour, utc_offset) * 60 + utc_minute
    for start in _WINDOW_STARTS:
        if now < start * 60:
            hours, minutes = divmod(start * 60 - now, 60)
            return {"hours": hours, "minutes": minutes, "target_time": f"{start:02d}:00"}

    hours, minutes = divmod(24 * 60 - now + _WINDOW_STARTS[0] * 60, 60)
    return {
        "hours": hours,
        "minutes": minutes,
        "target_time": f"{_WINDOW_STARTS[0]:02d}:00 (tomorrow)",
    }
