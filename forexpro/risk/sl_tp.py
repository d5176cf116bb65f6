"""Stop-loss and take-profit calculation — pure math, no I/O.

ATR-anchored approach:
    SL is placed 1.5 × ATR against the trade direction.
    TP is placed 2 × ATR in the trade direction (planned R:R of 1:1.33).
"""

from dataclasses import dataclass

SL_ATR_MULT = 1.5
TP_ATR_MULT = 2.0

_LONG_DIRECTIONS = ("LONG", "BUY")
_SHORT_DIRECTIONS = ("SHORT", "SELL")


@dataclass
class RiskLevels:
    """Computed stop-loss and take-profit for a trade."""
    sl: float
    tp: float
    sl_distance: float
    tp_distance: float

    @property
    def risk_reward(self) -> float:
        """Reward distance ÷ risk distance, rounded to 2 decimals."""
        if self.sl_distance == 0:
            return 0.0
        return round(self.tp_distance / self.sl_distance, 2)


def is_long(direction: str) -> bool:
    """Return True for ``LONG``/``BUY``, False for ``SHORT``/``SELL``.

    Raises:
        ValueError: For any other direction.
    """
    if direction in _LONG_DIRECTIONS:
        return True
    if direction in _SHORT_DIRECTIONS:
        return False
    raise ValueError(
        f"direction must be one of LONG/BUY/SHORT/SELL, got '{direction}'"
    )


def calculate_atr_levels(
    entry_price: float,
    direction: str,
    atr: float,
    sl_atr_mult: float = SL_ATR_MULT,
    tp_atr_mult: float = TP_ATR_MULT,
) -> RiskLevels:
    """Calculate ATR-distance stop-loss and take-profit prices.

    - **Long**:  SL = entry − 1.5 × ATR, TP = entry + 2 × ATR
    - **Short**: SL = entry + 1.5 × ATR, TP = entry − 2 × ATR

    Args:
        entry_price: Trade entry price.
        direction: ``"LONG"``/``"BUY"`` or ``"SHORT"``/``"SELL"``.
        atr: Current ATR value.
        sl_atr_mult: Stop distance in ATRs.
        tp_atr_mult: Target distance in ATRs.

    Raises:
        ValueError: If *direction* is not recognised.
    """
    sl_dist = atr * sl_atr_mult
    tp_dist = atr * tp_atr_mult

    if is_long(direction):
        sl, tp = entry_price - sl_dist, entry_price + tp_dist
    else:
        sl, tp = entry_price + sl_dist, entry_price - tp_dist

    return RiskLevels(sl=sl, tp=tp, sl_distance=sl_dist, tp_distance=tp_dist)
