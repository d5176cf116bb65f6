"""Sliding-window primitives over a value series. Pure functions, no I/O.

Every function tolerates short input: when there are fewer values than
*period* the result is absent (an all-``None`` series, or ``None``), never
an exception.  ``None`` entries inside *values* are treated as missing.
"""

import math
from typing import Optional, Sequence

from forexpro.strategy.models import Series


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def moving_average(values: Sequence[Optional[float]], period: int) -> Series:
    """Trailing arithmetic mean over *period* values (inclusive of current)."""
    _check_period(period)
    n = len(values)
    result: Series = [None] * n
    if n < period:
        return result

    for i in range(period - 1, n):
        window = values[i - period + 1 : i + 1]
        if any(v is None for v in window):
            continue
        result[i] = sum(window) / period
    return result


def exponential_average(values: Sequence[Optional[float]], period: int) -> Series:
    """Exponential moving average seeded with the simple mean.

    ``ema[period-1] = mean(values[:period])`` and afterwards
    ``ema[i] = (v[i] - ema[i-1]) * k + ema[i-1]`` with ``k = 2 / (period + 1)``.
    """
    _check_period(period)
    n = len(values)
    result: Series = [None] * n
    if n < period:
        return result

    seed_window = values[:period]
    if any(v is None for v in seed_window):
        return result

    k = 2.0 / (period + 1)
    ema = sum(seed_window) / period
    result[period - 1] = ema
    for i in range(period, n):
        if values[i] is None:
            break
        ema = (values[i] - ema) * k + ema
        result[i] = ema
    return result


def standard_deviation(
    values: Sequence[Optional[float]],
    index: int,
    period: int,
    mean: Optional[float],
) -> Optional[float]:
    """Population standard deviation of the window ending at *index*.

    *mean* is the precomputed average of the same window.
    """
    _check_period(period)
    if mean is None or index < period - 1 or index >= len(values):
        return None
    window = values[index - period + 1 : index + 1]
    if any(v is None for v in window):
        return None
    variance = sum((v - mean) ** 2 for v in window) / period
    return math.sqrt(variance)


def last_value(series: Sequence[Optional[float]]) -> Optional[float]:
    """Return the last defined value of *series*, or ``None``."""
    for value in reversed(series):
        if value is not None:
            return value
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))
