"""Hindsight evaluation of a signal against the bars that followed it."""

from typing import Optional

from forexpro.strategy.models import Bar, Signal, pip_size

DEFAULT_PIPS_TARGET = 20.0


def analyze_trade_opportunity(
    signal: Signal,
    pair: str,
    entry_price: float,
    price_history: list[Bar],
    pips_target: float = DEFAULT_PIPS_TARGET,
) -> Optional[dict]:
    """Walk forward from *entry_price* until ±*pips_target* is reached.

    ``price_history[0]`` is the entry bar; bars from index 1 on are
    scanned by close.  The first side to reach the target decides the
    outcome (``"profit"``, ``"loss"``, or ``"neutral"`` if neither does).

    Returns ``None`` when fewer than two bars are supplied.
    """
    if len(price_history) < 2:
        return None

    if not signal.is_bullish and not signal.is_bearish:
        return {"outcome": "neutral", "pips": 0.0, "duration": 0}

    pip = pip_size(pair)
    sign = 1 if signal.is_bullish else -1

    max_profit = 0.0
    max_loss = 0.0
    outcome = "neutral"
    exit_index = 0

    for i in range(1, len(price_history)):
        pips = sign * (price_history[i].close - entry_price) / pip
        max_profit = max(max_profit, pips)
        max_loss = min(max_loss, pips)
        if pips >= pips_target:
            outcome, exit_index = "profit", i
            break
        if pips <= -pips_target:
            outcome, exit_index = "loss", i
            break

    return {
        "outcome": outcome,
        "max_profit": round(max_profit, 1),
        "max_loss": round(max_loss, 1),
        "exit_index": exit_index,
        "duration": exit_index if exit_index > 0 else len(price_history),
        "signal": signal.label,
        "confidence": signal.confidence,
    }
