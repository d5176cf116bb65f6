"""ForexPro — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
the analyze, simulate and serve modes.
"""

import logging

from fastapi import FastAPI

from forexpro.api.routers import router

app = FastAPI(title="ForexPro Analysis API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("forexpro")


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    import argparse
    import asyncio
    import signal

    from forexpro.api.routers import configure_routers
    from forexpro.broker.market_data import AlphaVantageClient, normalize_pair
    from forexpro.config import load_config
    from forexpro.engine import AnalysisEngine
    from forexpro.repos.db import init_db
    from forexpro.repos.notification_settings_repo import NotificationSettingsRepo
    from forexpro.repos.simulation_repo import SimulationRepo
    from forexpro.repos.storage import SQLiteStore
    from forexpro.simulation.simulator import TradeSimulator

    parser = argparse.ArgumentParser(description="ForexPro technical analysis")
    parser.add_argument(
        "--mode",
        choices=["analyze", "simulate", "serve"],
        default="analyze",
        help="Run mode (default: analyze)",
    )
    parser.add_argument("--pair", help="Currency pair, e.g. EUR_USD")
    parser.add_argument("--timeframe", help="Bar interval, e.g. 60min or daily")
    parser.add_argument(
        "--direction",
        choices=["BUY", "SELL"],
        help="Simulated trade direction (defaults to the signal's side)",
    )
    args = parser.parse_args(argv)

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    init_db(config.db_path)

    store = SQLiteStore(config.db_path)
    simulation_repo = SimulationRepo(store)
    simulator = TradeSimulator(simulation_repo)
    market_data = AlphaVantageClient(config)
    engine = AnalysisEngine(
        config=config,
        market_data=market_data,
        settings_repo=NotificationSettingsRepo(store),
    )
    configure_routers(
        engine=engine,
        simulation_repo=simulation_repo,
        simulator=simulator,
        session_utc_offset=config.session_utc_offset,
        market_data=market_data,
    )

    try:
        pair = normalize_pair(args.pair or config.default_pair)
    except ValueError as exc:
        parser.error(str(exc))

    if args.mode == "serve":
        def handle_shutdown(signum, frame):
            logger.info("Shutdown signal received — stopping gracefully.")
            engine.stop()

        signal.signal(signal.SIGINT, handle_shutdown)
        asyncio.run(_serve(engine, [pair], config.api_port))
        return

    result = asyncio.run(engine.analyze(pair, args.timeframe))
    if result is None:
        return

    from forexpro.cli.dashboard import print_analysis, print_simulation

    print_analysis(result.to_dict())

    if args.mode == "simulate":
        direction = args.direction or ("SELL" if result.signal.is_bearish else "BUY")
        trade = simulator.start_trade(
            direction=direction,
            current_price=result.price,
            pair=pair,
            signal=result.signal,
            atr=result.atr,
        )
        print_simulation(trade.to_record())


async def _serve(engine, pairs: list[str], port: int = 8080) -> None:
    """Start the API server and the analysis loop concurrently."""
    import asyncio
    import uvicorn

    uvi_config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info",
    )
    server = uvicorn.Server(uvi_config)

    logger.info("API available at http://localhost:%d", port)
    results = await asyncio.gather(
        server.serve(),
        engine.run(pairs),
        return_exceptions=True,
    )
    logger.info("ForexPro stopped. Results: %s", results)


if __name__ == "__main__":
    _run_cli()
