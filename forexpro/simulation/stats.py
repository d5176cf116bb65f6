"""Trade statistics — pure functions for trade-series analysis.

Nothing here is stored: every figure is derived from the trade list on
read.
"""

from collections import defaultdict
from datetime import datetime
from typing import Optional

from forexpro.strategy.series import round_half_up


def calculate_simulation_stats(trades: list[dict]) -> dict:
    """Summarise simulated trades (newest first, as stored).

    Each trade dict must have ``"is_win"`` (bool) and ``"pnl_pips"`` (float).

    Returns:
        ``total_trades``, ``wins``, ``losses``, ``win_rate`` (integer %),
        ``total_pips``, ``streak``, ``streak_type`` (``"win"``/``"loss"``),
        ``max_drawdown_pips``.
    """
    if not trades:
        return {
            "total_trades": 0,
            "wins": 0,
            "losses": 0,
            "win_rate": 0,
            "total_pips": 0.0,
            "streak": 0,
            "streak_type": None,
            "max_drawdown_pips": 0.0,
        }

    total = len(trades)
    wins = sum(1 for t in trades if t.get("is_win"))
    pips = [t.get("pnl_pips") or 0.0 for t in trades]

    streak_type = "win" if trades[0].get("is_win") else "loss"
    streak = 0
    for t in trades:
        if bool(t.get("is_win")) == (streak_type == "win"):
            streak += 1
        else:
            break

    return {
        "total_trades": total,
        "wins": wins,
        "losses": total - wins,
        "win_rate": round_half_up(wins / total * 100),
        "total_pips": round(sum(pips), 1),
        "streak": streak,
        "streak_type": streak_type,
        # chronological order for the equity curve
        "max_drawdown_pips": round(_max_drawdown(list(reversed(pips))), 1),
    }


def calculate_performance_stats(trades: list[dict]) -> dict:
    """Break signal-trade outcomes down by hour and by pair.

    Each trade dict needs ``"timestamp"`` (ISO-8601), ``"pair"``,
    ``"outcome"`` (``"profit"`` / ``"loss"``) and ``"pips"``.
    """
    if not trades:
        return {
            "total_trades": 0,
            "wins": 0,
            "losses": 0,
            "win_rate": 0,
            "avg_pips": 0.0,
            "total_pips": 0.0,
            "best_trade": None,
            "worst_trade": None,
            "best_hour": None,
            "best_hour_win_rate": 0,
            "by_hour": {},
            "by_pair": {},
        }

    total = len(trades)
    wins = [t for t in trades if t["outcome"] == "profit"]
    losses = [t for t in trades if t["outcome"] == "loss"]
    total_pips = sum(t["pips"] for t in trades)

    by_hour: dict[int, dict] = defaultdict(lambda: {"wins": 0, "losses": 0, "pips": 0.0})
    by_pair: dict[str, dict] = defaultdict(
        lambda: {"wins": 0, "losses": 0, "pips": 0.0, "count": 0}
    )
    for t in trades:
        hour = datetime.fromisoformat(t["timestamp"]).hour
        key = "wins" if t["outcome"] == "profit" else "losses"
        by_hour[hour][key] += 1
        by_hour[hour]["pips"] += t["pips"]
        by_pair[t["pair"]][key] += 1
        by_pair[t["pair"]]["pips"] += t["pips"]
        by_pair[t["pair"]]["count"] += 1

    best_hour: Optional[int] = None
    best_hour_win_rate = 0.0
    for hour, data in sorted(by_hour.items()):
        hour_total = data["wins"] + data["losses"]
        rate = data["wins"] / hour_total if hour_total else 0.0
        if rate > best_hour_win_rate and hour_total >= 2:
            best_hour_win_rate = rate
            best_hour = hour

    return {
        "total_trades": total,
        "wins": len(wins),
        "losses": len(losses),
        "win_rate": round_half_up(len(wins) / total * 100),
        "avg_pips": round(total_pips / total, 1),
        "total_pips": round(total_pips, 1),
        "best_trade": max(trades, key=lambda t: t["pips"]),
        "worst_trade": min(trades, key=lambda t: t["pips"]),
        "best_hour": best_hour,
        "best_hour_win_rate": round_half_up(best_hour_win_rate * 100),
        "by_hour": dict(by_hour),
        "by_pair": dict(by_pair),
    }


def get_recommendations(stats: dict) -> list[dict]:
    """Turn performance stats into short coaching suggestions."""
    recommendations: list[dict] = []

    if stats.get("best_hour") is not None:
        recommendations.append({
            "type": "timing",
            "title": "Best Trading Time",
            "description": (
                f"Your best win rate ({stats['best_hour_win_rate']}%) is around "
                f"{stats['best_hour']:02d}:00. Consider focusing your analysis "
                "during this window."
            ),
        })

    win_rate = stats.get("win_rate", 0)
    if stats.get("total_trades", 0) and win_rate < 50:
        recommendations.append({
            "type": "strategy",
            "title": "Improve Win Rate",
            "description": (
                "Your win rate is below 50%. Consider waiting for higher "
                "confidence signals (75%+) before entering trades."
            ),
        })
    if win_rate >= 60:
        recommendations.append({
            "type": "success",
            "title": "Good Strategy",
            "description": (
                f"Your {win_rate}% win rate shows a solid understanding of the "
                "signals. Keep refining your approach."
            ),
        })

    best_pair: Optional[tuple[str, float]] = None
    for pair, data in stats.get("by_pair", {}).items():
        if data["count"] < 2:
            continue
        rate = data["wins"] / data["count"]
        if best_pair is None or rate > best_pair[1]:
            best_pair = (pair, rate)
    if best_pair is not None and best_pair[1] > 0.5:
        recommendations.append({
            "type": "pair",
            "title": f"Focus on {best_pair[0]}",
            "description": (
                f"You perform best with {best_pair[0]} "
                f"({round_half_up(best_pair[1] * 100)}% win rate)."
            ),
        })

    return recommendations


# ── Helpers ──────────────────────────────────────────────────────────────


def _max_drawdown(pnls: list[float]) -> float:
    """Maximum drawdown from the cumulative P&L curve.

    Returns the largest peak-to-trough decline as a positive number.
    """
    cumulative = 0.0
    peak = 0.0
    max_dd = 0.0
    for p in pnls:
        cumulative += p
        if cumulative > peak:
            peak = cumulative
        dd = peak - cumulative
        if dd > max_dd:
            max_dd = dd
    return max_dd
