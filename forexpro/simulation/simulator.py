"""Trade simulator — probabilistic paper trades for the practice screen.

The outcome of a simulated trade is a single Bernoulli draw made when the
trade is created.  The price path returned alongside it is cosmetic: an
eased interpolation from entry to the already-decided exit price.

All randomness comes from an injected ``numpy.random.Generator`` so that
outcomes are reproducible under a fixed seed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from forexpro.repos.simulation_repo import SimulationRepo
from forexpro.risk.sl_tp import RiskLevels, calculate_atr_levels, is_long
from forexpro.strategy.models import SimulatedTrade, Signal, pip_size
from forexpro.strategy.series import round_half_up

logger = logging.getLogger("forexpro")

WIN_PROBABILITY_MIN = 50
WIN_PROBABILITY_MAX = 70
DEFAULT_BASE_PROBABILITY = 55
JITTER = 3.0

FALLBACK_ATR_FRACTION = 0.001  # 0.1 % of price
DEFAULT_STEPS = 20


def calculate_win_probability(
    confidence: Optional[int],
    rng: np.random.Generator,
) -> int:
    """Win probability for a trade taken on a signal of *confidence*.

    Base by confidence bracket: <50 → 52, ≥50 → 55, ≥60 → 60, ≥70 → 65,
    ≥80 → 68 (no signal → 55).  A uniform jitter in [-3, +3] is added and
    the result clamped to [50, 70].
    """
    if confidence is None:
        base = DEFAULT_BASE_PROBABILITY
    elif confidence >= 80:
        base = 68
    elif confidence >= 70:
        base = 65
    elif confidence >= 60:
        base = 60
    elif confidence >= 50:
        base = 55
    else:
        base = 52

    jitter = rng.uniform(-JITTER, JITTER)
    clamped = min(WIN_PROBABILITY_MAX, max(WIN_PROBABILITY_MIN, base + jitter))
    return round_half_up(clamped)


def determine_outcome(probability: float, rng: np.random.Generator) -> bool:
    """Single Bernoulli draw: True (win) with *probability* percent."""
    return rng.random() * 100 < probability


def calculate_trade_levels(
    entry_price: float,
    direction: str,
    atr: Optional[float],
) -> RiskLevels:
    """ATR-based SL/TP; ATR defaults to 0.1 % of price when unavailable."""
    effective_atr = atr if atr else entry_price * FALLBACK_ATR_FRACTION
    return calculate_atr_levels(entry_price, direction, effective_atr)


def generate_price_movement(
    entry_price: float,
    target_price: float,
    steps: int = DEFAULT_STEPS,
    rng: Optional[np.random.Generator] = None,
) -> list[float]:
    """Build an animated path of ``steps + 1`` prices from entry to target.

    Uses ease-in-out progress with small noise (30 % of one step); the
    final element is exactly *target_price*.

    Raises:
        ValueError: If *steps* is less than 1.
    """
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    if rng is None:
        rng = np.random.default_rng()

    total_move = target_price - entry_price
    step_size = total_move / steps
    prices = [entry_price]

    for i in range(1, steps + 1):
        noise = (rng.random() - 0.5) * abs(step_size) * 0.3
        progress = i / steps
        if progress < 0.5:
            eased = 2 * progress * progress
        else:
            eased = 1 - ((-2 * progress + 2) ** 2) / 2
        prices.append(entry_price + total_move * eased + noise)

    prices[-1] = target_price
    return prices


class TradeSimulator:
    """Creates simulated trades and records them in the history.

    Args:
        repo: Where finished trades are persisted.
        rng: Random source for probability jitter, outcome and animation.
    """

    def __init__(
        self,
        repo: SimulationRepo,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._repo = repo
        self._rng = rng if rng is not None else np.random.default_rng()

    def start_trade(
        self,
        direction: str,
        current_price: float,
        pair: str,
        signal: Optional[Signal] = None,
        atr: Optional[float] = None,
        steps: int = DEFAULT_STEPS,
        now: Optional[datetime] = None,
    ) -> SimulatedTrade:
        """Open and immediately resolve a simulated trade.

        Args:
            direction: ``"BUY"`` or ``"SELL"``.
            current_price: Entry price.
            pair: Instrument, e.g. ``"EUR_USD"``.
            signal: Signal the trade follows (its confidence drives the odds).
            atr: Latest ATR, if known.
            steps: Animation path resolution.
            now: Creation time; defaults to the current UTC time.
        """
        is_long(direction)  # validates direction before any draw
        if now is None:
            now = datetime.now(timezone.utc)

        probability = calculate_win_probability(
            signal.confidence if signal is not None else None, self._rng
        )
        is_win = determine_outcome(probability, self._rng)

        levels = calculate_trade_levels(current_price, direction, atr)
        exit_price = levels.tp if is_win else levels.sl
        distance = levels.tp_distance if is_win else -levels.sl_distance
        pnl_pips = round(distance / pip_size(pair), 1)

        movement = generate_price_movement(current_price, exit_price, steps, self._rng)

        trade = SimulatedTrade(
            id=uuid.uuid4().hex,
            pair=pair,
            direction=direction,
            entry_price=current_price,
            exit_price=exit_price,
            stop_loss=levels.sl,
            take_profit=levels.tp,
            probability=probability,
            is_win=is_win,
            pnl_pips=pnl_pips,
            timestamp=now.isoformat(),
            price_movement=tuple(movement),
        )
        self._repo.save_trade(trade)
        logger.info(
            "Simulated %s %s @ %.5f → %s (%.1f pips, p=%d%%)",
            direction, pair, current_price,
            "WIN" if is_win else "LOSS", pnl_pips, probability,
        )
        return trade
