"""Shared bar fixtures for strategy, setup and engine tests."""

import pytest

from forexpro.strategy.models import Bar


def make_bars(closes: list[float], wick: float = 0.0002, start: int = 1_700_000_000) -> list[Bar]:
    """Build hourly bars where each open is the previous close."""
    bars = []
    prev = closes[0]
    for i, close in enumerate(closes):
        open_ = prev
        bars.append(
            Bar(
                time=start + i * 3600,
                open=open_,
                high=max(open_, close) + wick,
                low=min(open_, close) - wick,
                close=close,
            )
        )
        prev = close
    return bars


def oversold_closes() -> list[float]:
    """Steady decline, a final flush, then a sharp one-bar bounce (60 bars)."""
    closes = [1.2 - 0.001 * i for i in range(58)]
    closes.append(1.140)
    closes.append(1.1435)
    return closes


@pytest.fixture
def oversold_bars() -> list[Bar]:
    return make_bars(oversold_closes())


@pytest.fixture
def overbought_bars() -> list[Bar]:
    return make_bars([2.4 - c for c in oversold_closes()])
