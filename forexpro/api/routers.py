"""Internal API routers — /analysis, /rates, /sessions, /simulations endpoints.

No business logic, no DB access.  Delegates to the analysis engine, the
simulator and the simulation repo injected at startup.
"""

import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from forexpro.broker.market_data import normalize_pair
from forexpro.simulation.stats import calculate_simulation_stats
from forexpro.strategy.session_filter import (
    active_sessions,
    time_to_next_window,
    trading_recommendation,
)

logger = logging.getLogger("forexpro")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_engine = None           # Set via configure_routers()
_simulation_repo = None  # Set via configure_routers()
_simulator = None        # Set via configure_routers()
_market_data = None      # Set via configure_routers()
_session_utc_offset: int = 1
_latest_analysis: Optional[dict] = None  # Updated by engine after analyze()
_analysis_history: list = []  # Recent analyses (max 50 entries)


def configure_routers(
    engine=None,
    simulation_repo=None,
    simulator=None,
    session_utc_offset: int = 1,
    market_data=None,
) -> None:
    """Inject dependencies from the application startup.

    Args:
        engine: An ``AnalysisEngine`` instance (or duck-type for tests).
        simulation_repo: A ``SimulationRepo`` instance.
        simulator: A ``TradeSimulator`` sharing *simulation_repo*.
        session_utc_offset: Local-time offset for session recommendations.
        market_data: An ``AlphaVantageClient`` used for spot quotes.
    """
    global _engine, _simulation_repo, _simulator, _session_utc_offset, _market_data  # noqa: PLW0603
    _engine = engine
    _simulation_repo = simulation_repo
    _simulator = simulator
    _session_utc_offset = session_utc_offset
    _market_data = market_data


def update_latest_analysis(analysis: Optional[dict]) -> None:
    """Store the most recent analysis and append it to the history log."""
    global _latest_analysis  # noqa: PLW0603
    _latest_analysis = analysis
    if analysis:
        _analysis_history.append({
            "pair": analysis.get("pair", ""),
            "timeframe": analysis.get("timeframe", ""),
            "signal": analysis.get("signal", {}).get("signal"),
            "confidence": analysis.get("signal", {}).get("confidence"),
            "analyzed_at": analysis.get("analyzed_at", ""),
        })
        if len(_analysis_history) > 50:
            del _analysis_history[0]


# ── Analysis ─────────────────────────────────────────────────────────────


@router.get("/analysis/latest")
async def get_latest_analysis():
    """Return the last published analysis (any pair)."""
    if _latest_analysis is None:
        raise HTTPException(status_code=404, detail="No analysis available yet")
    return _latest_analysis


@router.get("/analysis/history")
async def get_analysis_history(limit: int = Query(default=20, ge=1, le=50)):
    return list(reversed(_analysis_history[-limit:]))


@router.get("/analysis/{pair}")
async def get_analysis(
    pair: str,
    timeframe: Optional[str] = Query(default=None),
):
    """Run a fresh analysis for *pair*."""
    if _engine is None:
        raise HTTPException(status_code=503, detail="Analysis engine not configured")
    try:
        pair = normalize_pair(pair)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    result = await _engine.analyze(pair, timeframe)
    if result is None:
        raise HTTPException(status_code=409, detail="Superseded by a newer request")
    return result.to_dict()


# ── Rates ────────────────────────────────────────────────────────────────


@router.get("/rates")
async def get_rates(pairs: str = Query(default="EUR_USD", min_length=1)):
    """Spot quotes for a comma-separated list of pairs."""
    if _market_data is None:
        raise HTTPException(status_code=503, detail="Market data not configured")
    try:
        normalized = [normalize_pair(p) for p in pairs.split(",") if p.strip()]
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if not normalized:
        raise HTTPException(status_code=422, detail="No currency pairs given")
    quotes = await _market_data.fetch_multiple_rates(normalized)
    return [q.to_dict() for q in quotes]


# ── Sessions ─────────────────────────────────────────────────────────────


@router.get("/sessions")
async def get_sessions(
    utc_hour: Optional[int] = Query(default=None, ge=0, le=23),
    utc_minute: Optional[int] = Query(default=None, ge=0, le=59),
):
    """Active FX sessions, a trading recommendation and the next good window."""
    now = datetime.now(timezone.utc)
    if utc_hour is None:
        utc_hour = now.hour
        if utc_minute is None:
            utc_minute = now.minute
    if utc_minute is None:
        utc_minute = 0
    return {
        "utc_hour": utc_hour,
        "active_sessions": [
            {
                "key": s.key,
                "name": s.name,
                "open_utc": s.open_utc,
                "close_utc": s.close_utc,
                "pairs": list(s.pairs),
                "volatility": s.volatility,
            }
            for s in active_sessions(utc_hour)
        ],
        "recommendation": trading_recommendation(utc_hour, _session_utc_offset),
        "next_window": time_to_next_window(utc_hour, utc_minute, _session_utc_offset),
    }


# ── Simulations ──────────────────────────────────────────────────────────


class SimulationRequest(BaseModel):
    pair: str
    direction: Literal["BUY", "SELL"]
    price: Optional[float] = Field(default=None, gt=0)
    steps: int = Field(default=20, ge=1, le=200)


def _require_repo():
    if _simulation_repo is None:
        raise HTTPException(status_code=503, detail="Simulation store not configured")
    return _simulation_repo


@router.get("/simulations")
async def get_simulations(limit: int = Query(default=50, ge=1, le=50)):
    return _require_repo().get_trades()[:limit]


@router.get("/simulations/stats")
async def get_simulation_stats():
    return calculate_simulation_stats(_require_repo().get_trades())


@router.post("/simulations")
async def post_simulation(body: SimulationRequest):
    """Open and resolve a simulated trade.

    Uses the engine's latest analysis for the pair when no price is given;
    the analysis signal and ATR shape the trade either way.
    """
    if _simulator is None:
        raise HTTPException(status_code=503, detail="Simulator not configured")

    try:
        pair = normalize_pair(body.pair)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    analysis = _engine.latest(pair) if _engine is not None else None
    price = body.price
    if price is None:
        if analysis is None or analysis.price is None:
            raise HTTPException(
                status_code=400,
                detail=f"No price given and no analysis available for {pair}",
            )
        price = analysis.price

    trade = _simulator.start_trade(
        direction=body.direction,
        current_price=price,
        pair=pair,
        signal=analysis.signal if analysis is not None else None,
        atr=analysis.atr if analysis is not None else None,
        steps=body.steps,
    )
    return {**trade.to_record(), "price_movement": list(trade.price_movement)}


@router.delete("/simulations")
async def delete_simulations():
    _require_repo().clear()
    logger.info("Simulation history cleared.")
    return {"cleared": True}
