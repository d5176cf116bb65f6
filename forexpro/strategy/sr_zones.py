"""Support/Resistance level detection — pure functions."""

from forexpro.strategy.models import Bar, SRLevel

SR_LOOKBACK = 20
CLUSTER_TOLERANCE = 0.001  # 0.1 % relative price distance
MAX_LEVELS = 6


def _is_swing_high(bars: list[Bar], i: int, lookback: int) -> bool:
    """True if bar *i* has a strictly higher high than every bar within ±lookback."""
    high = bars[i].high
    for j in range(1, lookback + 1):
        if bars[i - j].high >= high or bars[i + j].high >= high:
            return False
    return True


def _is_swing_low(bars: list[Bar], i: int, lookback: int) -> bool:
    """True if bar *i* has a strictly lower low than every bar within ±lookback."""
    low = bars[i].low
    for j in range(1, lookback + 1):
        if bars[i - j].low <= low or bars[i + j].low <= low:
            return False
    return True


def find_swing_points(bars: list[Bar], lookback: int = SR_LOOKBACK) -> list[SRLevel]:
    """Return unclustered swing points in discovery (bar) order.

    A bar that is both a swing high and a swing low yields the resistance
    candidate first.
    """
    candidates: list[SRLevel] = []
    for i in range(lookback, len(bars) - lookback):
        if _is_swing_high(bars, i, lookback):
            candidates.append(SRLevel(price=bars[i].high, level_type="resistance", strength=1))
        if _is_swing_low(bars, i, lookback):
            candidates.append(SRLevel(price=bars[i].low, level_type="support", strength=1))
    return candidates


def cluster_levels(
    candidates: list[SRLevel],
    tolerance: float = CLUSTER_TOLERANCE,
) -> list[SRLevel]:
    """Merge same-type candidates lying within *tolerance* of each other.

    Each candidate joins the first existing cluster of its type whose price
    is within ``tolerance × candidate.price``; the cluster price becomes the
    average of its price and the candidate's, and its strength grows by one.
    Cluster order is discovery order.
    """
    clusters: list[SRLevel] = []
    for level in candidates:
        for idx, existing in enumerate(clusters):
            if existing.level_type != level.level_type:
                continue
            if abs(existing.price - level.price) / level.price < tolerance:
                clusters[idx] = SRLevel(
                    price=(existing.price + level.price) / 2,
                    level_type=existing.level_type,
                    strength=existing.strength + 1,
                )
                break
        else:
            clusters.append(level)
    return clusters


def detect_support_resistance(
    bars: list[Bar],
    lookback: int = SR_LOOKBACK,
    tolerance: float = CLUSTER_TOLERANCE,
    max_levels: int = MAX_LEVELS,
) -> list[SRLevel]:
    """Detect clustered horizontal support and resistance levels.

    Args:
        bars: Bar data, oldest first.  Needs ``2 × lookback + 1`` bars.
        lookback: Bars on each side a swing point must dominate.
        tolerance: Relative clustering distance.
        max_levels: How many clusters to return.

    Returns:
        Up to *max_levels* ``SRLevel`` objects, strongest first.  Equal
        strengths keep discovery order.
    """
    if len(bars) < lookback * 2 + 1:
        return []

    clusters = cluster_levels(find_swing_points(bars, lookback), tolerance)
    # sorted() is stable, so ties stay in discovery order
    return sorted(clusters, key=lambda lv: -lv.strength)[:max_levels]
