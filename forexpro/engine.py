"""ForexPro — analysis engine (orchestration).

Connects market data, indicators, signal synthesis, trade setup and
alerts into a single analysis pass per ``(pair, timeframe)``.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from forexpro.api.routers import update_latest_analysis
from forexpro.broker.market_data import AlphaVantageClient
from forexpro.config import Config
from forexpro.notifications import (
    LoggingNotificationSink,
    NotificationSettings,
    NotificationSink,
    build_signal_alert,
)
from forexpro.repos.notification_settings_repo import NotificationSettingsRepo
from forexpro.risk.trade_setup import generate_trade_setup, trade_quality
from forexpro.strategy.indicators import calculate_all
from forexpro.strategy.models import Bar, IndicatorSet, Signal, TradeSetup
from forexpro.strategy.series import last_value
from forexpro.strategy.signals import generate_signal

logger = logging.getLogger("forexpro")


@dataclass(frozen=True)
class AnalysisResult:
    """Everything derived from one bar set."""

    pair: str
    timeframe: str
    bars: tuple[Bar, ...]
    indicators: IndicatorSet
    signal: Signal
    setup: TradeSetup
    analyzed_at: str

    @property
    def price(self) -> Optional[float]:
        return self.bars[-1].close if self.bars else None

    @property
    def atr(self) -> Optional[float]:
        return last_value(self.indicators.atr)

    def to_dict(self) -> dict:
        setup = self.setup.to_dict()
        if self.setup.active:
            setup["quality"] = trade_quality(self.setup.probability)
        return {
            "pair": self.pair,
            "timeframe": self.timeframe,
            "price": self.price,
            "bar_count": len(self.bars),
            "atr": self.atr,
            "signal": self.signal.to_dict(),
            "setup": setup,
            "support_resistance": [
                {"price": lvl.price, "type": lvl.level_type, "strength": lvl.strength}
                for lvl in self.indicators.support_resistance
            ],
            "analyzed_at": self.analyzed_at,
        }


class AnalysisEngine:
    """Runs analysis passes and publishes the results.

    Requests for the same ``(pair, timeframe)`` are last-write-wins: when a
    newer request starts while an older one is still waiting for bars, the
    older result is discarded.

    Args:
        config: Application configuration.
        market_data: Bar source.
        settings_repo: Notification preferences; defaults apply when omitted.
        sink: Where qualifying alerts are sent.
        publish: Push results to the API state.
    """

    def __init__(
        self,
        config: Config,
        market_data: AlphaVantageClient,
        settings_repo: Optional[NotificationSettingsRepo] = None,
        sink: Optional[NotificationSink] = None,
        publish: bool = True,
    ) -> None:
        self._config = config
        self._market_data = market_data
        self._settings_repo = settings_repo
        self._sink = sink if sink is not None else LoggingNotificationSink()
        self._publish = publish
        self._generations: dict[tuple[str, str], int] = {}
        self._latest: dict[tuple[str, str], AnalysisResult] = {}
        self._running: bool = False

    def latest(self, pair: str, timeframe: Optional[str] = None) -> Optional[AnalysisResult]:
        timeframe = timeframe or self._config.default_timeframe
        return self._latest.get((pair, timeframe))

    def _notification_settings(self) -> NotificationSettings:
        if self._settings_repo is not None:
            return self._settings_repo.load()
        return NotificationSettings(min_confidence=self._config.notify_min_confidence)

    # ── Single pass ──────────────────────────────────────────────────────

    async def analyze(
        self,
        pair: Optional[str] = None,
        timeframe: Optional[str] = None,
    ) -> Optional[AnalysisResult]:
        """Fetch bars and run the full analysis for *pair*.

        Returns ``None`` when a newer request for the same pair and
        timeframe superseded this one.
        """
        pair = pair or self._config.default_pair
        timeframe = timeframe or self._config.default_timeframe
        key = (pair, timeframe)

        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation

        bars = await self._market_data.fetch_bars(pair, timeframe)

        if self._generations[key] != generation:
            logger.debug("Discarding superseded analysis for %s %s.", pair, timeframe)
            return None

        indicators = calculate_all(bars)
        signal = generate_signal(bars)
        setup = generate_trade_setup(bars, indicators, signal)
        result = AnalysisResult(
            pair=pair,
            timeframe=timeframe,
            bars=tuple(bars),
            indicators=indicators,
            signal=signal,
            setup=setup,
            analyzed_at=datetime.now(timezone.utc).isoformat(),
        )
        self._latest[key] = result

        alert = build_signal_alert(pair, signal, self._notification_settings())
        if alert is not None:
            self._sink.send(alert)

        if self._publish:
            update_latest_analysis(result.to_dict())
        logger.info(
            "Analysis %s %s: %s (%d%%), setup %s",
            pair, timeframe, signal.label, signal.confidence,
            setup.direction if setup.active else "inactive",
        )
        return result

    # ── Polling loop ─────────────────────────────────────────────────────

    def stop(self) -> None:
        """Signal the loop to stop after the current pass."""
        self._running = False

    async def run(
        self,
        pairs: list[str],
        poll_interval: int = 300,
        max_cycles: int = 0,
    ) -> int:
        """Re-analyse *pairs* every *poll_interval* seconds until stopped.

        Returns the number of completed cycles.
        """
        self._running = True
        cycle = 0
        while self._running:
            cycle += 1
            for pair in pairs:
                try:
                    await self.analyze(pair)
                except Exception as exc:
                    logger.error("Analysis of %s failed in cycle %d: %s", pair, cycle, exc)

            if max_cycles > 0 and cycle >= max_cycles:
                break

            # Interruptible sleep
            for _ in range(poll_interval):
                if not self._running:
                    break
                await asyncio.sleep(1)

        self._running = False
        return cycle
