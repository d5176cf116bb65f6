"""Trade setup generation — entry/stop/target plus a confluence probability.

Pure functions, no I/O.  The probability is a bounded heuristic: it is
always clamped to 50–75 % and never claims near-certainty.
"""

from datetime import datetime, timezone
from typing import Optional

from forexpro.risk.sl_tp import calculate_atr_levels
from forexpro.strategy.models import Bar, IndicatorSet, SetupLevel, Signal, TradeSetup
from forexpro.strategy.series import last_value, round_half_up
from forexpro.strategy.signals import MIN_SIGNAL_BARS

PROBABILITY_MIN = 50
PROBABILITY_MAX = 75

MAX_SR_LEVELS = 4


def _inactive(message: str, suggestion: str) -> TradeSetup:
    return TradeSetup(active=False, message=message, suggestion=suggestion)


# ── Probability ──────────────────────────────────────────────────────────


def _rsi_points(rsi: Optional[float], bullish: bool) -> int:
    if rsi is None:
        return 0
    if bullish and rsi < 40:
        return 15
    if bullish and rsi < 50:
        return 10
    if not bullish and rsi > 60:
        return 15
    if not bullish and rsi > 50:
        return 10
    return 5


def _macd_points(line: Optional[float], signal: Optional[float], bullish: bool) -> int:
    if line is None or signal is None:
        return 0
    if bullish and line > signal:
        return 15
    if not bullish and line < signal:
        return 15
    return 5


def _ema_points(
    price: float, ema21: Optional[float], ema50: Optional[float], bullish: bool
) -> int:
    if ema21 is None or ema50 is None:
        return 0
    if bullish:
        if price > ema21 > ema50:
            return 20
        return 12 if price > ema21 else 5
    if price < ema21 < ema50:
        return 20
    return 12 if price < ema21 else 5


def _bollinger_points(
    price: float,
    upper: Optional[float],
    middle: Optional[float],
    lower: Optional[float],
    bullish: bool,
) -> int:
    if upper is None or middle is None or lower is None:
        return 0
    if bullish and price <= lower * 1.01:
        return 15
    if not bullish and price >= upper * 0.99:
        return 15
    if bullish and price < middle:
        return 10
    if not bullish and price > middle:
        return 10
    return 5


def _confidence_points(confidence: int) -> int:
    if confidence >= 80:
        return 20
    if confidence >= 70:
        return 15
    if confidence >= 60:
        return 10
    return 5


def calculate_probability(indicators: IndicatorSet, signal: Signal, price: float) -> int:
    """Score indicator confluence with the signal direction.

    Points (achieved / maximum):
        RSI alignment 15, MACD alignment 15, EMA stack 20,
        Bollinger extremity 15, signal confidence 20.

    The achieved ratio is rescaled with ``round(ratio × 75 × 0.75 + 25)``
    and clamped to [50, 75].
    """
    bullish = signal.is_bullish
    bb = indicators.bollinger
    max_score = 15 + 15 + 20 + 15 + 20
    score = (
        _rsi_points(last_value(indicators.rsi), bullish)
        + _macd_points(
            last_value(indicators.macd.macd_line),
            last_value(indicators.macd.signal_line),
            bullish,
        )
        + _ema_points(price, last_value(indicators.ema21), last_value(indicators.ema50), bullish)
        + _bollinger_points(
            price,
            last_value(bb.upper),
            last_value(bb.middle),
            last_value(bb.lower),
            bullish,
        )
        + _confidence_points(signal.confidence)
    )
    ratio = score / max_score
    probability = round_half_up(ratio * 75 * 0.75 + 25)
    return min(PROBABILITY_MAX, max(PROBABILITY_MIN, probability))


# ── Chart levels ─────────────────────────────────────────────────────────


def generate_levels(indicators: IndicatorSet, price: float) -> list[SetupLevel]:
    """Collect EMA, Bollinger and S/R levels to annotate around a setup."""
    levels: list[SetupLevel] = []

    for label, series in (("EMA 21", indicators.ema21), ("EMA 50", indicators.ema50)):
        value = last_value(series)
        if value is not None:
            levels.append(
                SetupLevel(
                    price=value,
                    level_type="support" if price > value else "resistance",
                    label=label,
                )
            )

    upper = last_value(indicators.bollinger.upper)
    lower = last_value(indicators.bollinger.lower)
    if upper is not None:
        levels.append(SetupLevel(price=upper, level_type="resistance", label="BB Upper"))
    if lower is not None:
        levels.append(SetupLevel(price=lower, level_type="support", label="BB Lower"))

    for i, sr in enumerate(indicators.support_resistance[:MAX_SR_LEVELS]):
        prefix = "S" if sr.level_type == "support" else "R"
        levels.append(
            SetupLevel(
                price=sr.price,
                level_type=sr.level_type,
                label=f"{prefix}{i + 1}",
                strength=sr.strength,
            )
        )

    return levels


# ── Setup ────────────────────────────────────────────────────────────────


def generate_trade_setup(
    bars: list[Bar],
    indicators: Optional[IndicatorSet],
    signal: Optional[Signal],
    now: Optional[datetime] = None,
) -> TradeSetup:
    """Derive a concrete trade setup from a directional signal.

    Returns an inactive setup (with guidance) when there is not enough
    history, the ATR is undefined, or the signal is Neutral.
    """
    if len(bars) < MIN_SIGNAL_BARS or indicators is None or signal is None:
        return _inactive(
            "Not enough market data for a trade setup",
            "Wait for more price history to load",
        )

    if not signal.is_bullish and not signal.is_bearish:
        return _inactive(
            "No clear setup - market is ranging",
            "Wait for stronger directional signals",
        )

    atr = last_value(indicators.atr)
    if not atr:
        return _inactive(
            "Volatility is unavailable for this market",
            "Wait for more price history to load",
        )

    if now is None:
        now = datetime.now(timezone.utc)

    direction = "LONG" if signal.is_bullish else "SHORT"
    entry = bars[-1].close
    risk = calculate_atr_levels(entry, direction, atr)

    return TradeSetup(
        active=True,
        direction=direction,
        entry=entry,
        stop_loss=risk.sl,
        take_profit=risk.tp,
        risk_reward=risk.risk_reward,
        probability=calculate_probability(indicators, signal, entry),
        atr=atr,
        levels=tuple(generate_levels(indicators, entry)),
        reasons=signal.reasons,
        created_at=now.isoformat(),
    )


def trade_quality(probability: int) -> dict:
    """Letter rating for a setup probability."""
    if probability >= 70:
        return {"rating": "A", "label": "High Quality"}
    if probability >= 60:
        return {"rating": "B", "label": "Good Setup"}
    if probability >= 55:
        return {"rating": "C", "label": "Moderate"}
    return {"rating": "D", "label": "Low Quality"}
