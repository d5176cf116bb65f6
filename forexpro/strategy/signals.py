"""Signal synthesis — pure functions, no I/O.

Each indicator rule inspects the latest bar and casts a vote on a
-2 (strong sell) .. +2 (strong buy) scale together with a human-readable
reason.  The votes are averaged into a label and a 0–100 confidence.

The Bollinger rule only ever votes ±1 at a band; mid-band it abstains
instead of casting a neutral vote, so it does not dilute the agreement
ratio.
"""

from typing import Optional

from forexpro.strategy.indicators import (
    RSI_OVERBOUGHT,
    RSI_OVERSOLD,
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
)
from forexpro.strategy.models import (
    BUY,
    NEUTRAL,
    SELL,
    STRONG_BUY,
    STRONG_SELL,
    Bar,
    IndicatorSnapshot,
    Signal,
    SignalVote,
)
from forexpro.strategy.series import round_half_up

MIN_SIGNAL_BARS = 50

RSI_BUY_ZONE = 40.0
RSI_SELL_ZONE = 60.0

STRONG_THRESHOLD = 1.5
WEAK_THRESHOLD = 0.5


# ── Vote rules ───────────────────────────────────────────────────────────


def rsi_vote(rsi: Optional[float]) -> Optional[SignalVote]:
    """Vote from the latest RSI reading; ``None`` when RSI is undefined."""
    if rsi is None:
        return None
    if rsi < RSI_OVERSOLD:
        return SignalVote("rsi", 2, f"RSI ({rsi:.1f}) indicates oversold conditions")
    if rsi > RSI_OVERBOUGHT:
        return SignalVote("rsi", -2, f"RSI ({rsi:.1f}) indicates overbought conditions")
    if rsi < RSI_BUY_ZONE:
        return SignalVote("rsi", 1, f"RSI ({rsi:.1f}) suggests buying opportunity")
    if rsi > RSI_SELL_ZONE:
        return SignalVote("rsi", -1, f"RSI ({rsi:.1f}) suggests selling opportunity")
    return SignalVote("rsi", 0)


def macd_vote(
    prev_macd: Optional[float],
    prev_signal: Optional[float],
    cur_macd: Optional[float],
    cur_signal: Optional[float],
) -> Optional[SignalVote]:
    """Vote from the MACD / signal-line relationship over the last two bars."""
    if None in (prev_macd, prev_signal, cur_macd, cur_signal):
        return None
    if prev_macd < prev_signal and cur_macd > cur_signal:
        return SignalVote("macd", 2, "MACD bullish crossover detected")
    if prev_macd > prev_signal and cur_macd < cur_signal:
        return SignalVote("macd", -2, "MACD bearish crossover detected")
    if cur_macd > cur_signal:
        return SignalVote("macd", 1, "MACD above signal line (bullish momentum)")
    return SignalVote("macd", -1, "MACD below signal line (bearish momentum)")


def ema_vote(
    price: float,
    ema9: Optional[float],
    ema21: Optional[float],
    ema50: Optional[float],
) -> Optional[SignalVote]:
    """Vote from price position relative to the 9/21/50 EMA stack."""
    if ema9 is None or ema21 is None or ema50 is None:
        return None
    if ema9 > ema21 > ema50 and price > ema9:
        return SignalVote(
            "ema", 2, "Strong uptrend: Price above all EMAs in bullish alignment"
        )
    if ema9 < ema21 < ema50 and price < ema9:
        return SignalVote(
            "ema", -2, "Strong downtrend: Price below all EMAs in bearish alignment"
        )
    if price > ema21:
        return SignalVote("ema", 1, "Price above 21 EMA suggests bullish bias")
    if price < ema21:
        return SignalVote("ema", -1, "Price below 21 EMA suggests bearish bias")
    return SignalVote("ema", 0)


def bollinger_vote(
    price: float,
    upper: Optional[float],
    lower: Optional[float],
) -> Optional[SignalVote]:
    """Vote ±1 when price sits at or beyond a band; abstain otherwise."""
    if upper is None or lower is None:
        return None
    if price <= lower:
        return SignalVote("bollinger", 1, "Price at lower Bollinger Band (potential bounce)")
    if price >= upper:
        return SignalVote("bollinger", -1, "Price at upper Bollinger Band (potential reversal)")
    return None


# ── Aggregation ──────────────────────────────────────────────────────────


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


def classify(avg_signal: float) -> str:
    """Map an averaged vote onto a signal label."""
    if avg_signal >= STRONG_THRESHOLD:
        return STRONG_BUY
    if avg_signal >= WEAK_THRESHOLD:
        return BUY
    if avg_signal <= -STRONG_THRESHOLD:
        return STRONG_SELL
    if avg_signal <= -WEAK_THRESHOLD:
        return SELL
    return NEUTRAL


def aggregate_votes(votes: list[SignalVote]) -> tuple[str, int]:
    """Reduce votes to ``(label, confidence)``.

    ``confidence = min(100, round(|avg| × 25 + agreement × 75))`` where
    *agreement* is the share of votes whose sign matches the sign of the
    average (zero votes only agree with a zero average).
    """
    if not votes:
        return NEUTRAL, 0

    values = [v.vote for v in votes]
    avg_signal = sum(values) / len(values)
    avg_sign = _sign(avg_signal)
    disagreeing = sum(1 for v in values if _sign(v) != avg_sign)
    agreement = 1 - disagreeing / len(values)

    confidence = min(100, round_half_up(abs(avg_signal) * 25 + agreement * 75))
    return classify(avg_signal), confidence


def generate_signal(bars: list[Bar]) -> Signal:
    """Synthesise a directional signal from the latest bar's indicators.

    Fewer than ``MIN_SIGNAL_BARS`` bars is a defined outcome: Neutral with
    zero confidence.
    """
    if len(bars) < MIN_SIGNAL_BARS:
        return Signal(
            label=NEUTRAL,
            confidence=0,
            reasons=("Insufficient data for analysis",),
        )

    last = len(bars) - 1
    price = bars[last].close

    rsi = calculate_rsi(bars)
    macd = calculate_macd(bars)
    ema9 = calculate_ema(bars, 9)
    ema21 = calculate_ema(bars, 21)
    ema50 = calculate_ema(bars, 50)
    bb = calculate_bollinger(bars)

    candidates = [
        rsi_vote(rsi[last]),
        macd_vote(
            macd.macd_line[last - 1],
            macd.signal_line[last - 1],
            macd.macd_line[last],
            macd.signal_line[last],
        ),
        ema_vote(price, ema9[last], ema21[last], ema50[last]),
        bollinger_vote(price, bb.upper[last], bb.lower[last]),
    ]
    votes = [v for v in candidates if v is not None]
    label, confidence = aggregate_votes(votes)

    snapshot = IndicatorSnapshot(
        rsi=rsi[last],
        macd_line=macd.macd_line[last],
        macd_signal=macd.signal_line[last],
        macd_histogram=macd.histogram[last],
        ema9=ema9[last],
        ema21=ema21[last],
        ema50=ema50[last],
        bb_upper=bb.upper[last],
        bb_middle=bb.middle[last],
        bb_lower=bb.lower[last],
    )
    return Signal(
        label=label,
        confidence=confidence,
        reasons=tuple(v.reason for v in votes if v.reason),
        votes=tuple(votes),
        snapshot=snapshot,
    )


def build_assistant_context(pair: str, signal: Signal) -> dict:
    """Snapshot handed to the chat responder alongside a user question."""
    return {"pair": pair, **signal.to_dict()}
