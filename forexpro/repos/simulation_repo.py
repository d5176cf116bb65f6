"""Simulated trade repository — bounded, most-recent-first JSON history."""

import json
import logging

from forexpro.repos.storage import KeyValueStore
from forexpro.strategy.models import SimulatedTrade

logger = logging.getLogger("forexpro")

SIMULATION_STORAGE_KEY = "forexpro_simulated_trades"
MAX_HISTORY = 50


def _is_valid_record(record) -> bool:
    if not isinstance(record, dict):
        return False
    pnl = record.get("pnl_pips")
    return (
        isinstance(record.get("is_win"), bool)
        and isinstance(pnl, (int, float))
        and not isinstance(pnl, bool)
    )


class SimulationRepo:
    """Data access layer for simulated trade records.

    Records are plain dicts (see ``SimulatedTrade.to_record``).  A stored
    value that fails to parse is treated as an empty history, and records
    without a boolean ``is_win`` and numeric ``pnl_pips`` are dropped.

    Args:
        store: Any ``KeyValueStore``.
        max_history: Number of records kept.
    """

    def __init__(self, store: KeyValueStore, max_history: int = MAX_HISTORY) -> None:
        self._store = store
        self._max_history = max_history

    # ── Read ─────────────────────────────────────────────────────────────

    def get_trades(self) -> list[dict]:
        """Return stored trades, newest first."""
        raw = self._store.get(SIMULATION_STORAGE_KEY)
        if not raw:
            return []
        try:
            trades = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable simulation history.")
            return []
        if not isinstance(trades, list):
            logger.warning("Discarding simulation history with unexpected shape.")
            return []
        valid = [t for t in trades if _is_valid_record(t)]
        if len(valid) != len(trades):
            logger.warning(
                "Dropped %d malformed simulation record(s).", len(trades) - len(valid)
            )
        return valid

    # ── Write ────────────────────────────────────────────────────────────

    def save_trade(self, trade: SimulatedTrade) -> list[dict]:
        """Prepend *trade* and trim to the history cap.  Returns the new list."""
        trades = self.get_trades()
        trades.insert(0, trade.to_record())
        trimmed = trades[: self._max_history]
        self._store.set(SIMULATION_STORAGE_KEY, json.dumps(trimmed))
        return trimmed

    def clear(self) -> None:
        """Remove the whole simulation history."""
        self._store.remove(SIMULATION_STORAGE_KEY)
