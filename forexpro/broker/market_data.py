"""Alpha Vantage FX market data async client.

Fetches OHLC bars for a currency pair.  Any API failure (error payload,
rate-limit note, exhausted retries) falls back to a synthetic random-walk
series so callers always receive a usable bar sequence.
"""

import asyncio
import logging
import re
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx
import numpy as np

from forexpro.config import Config
from forexpro.strategy.models import Bar

logger = logging.getLogger("forexpro")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}

TIMEFRAME_MINUTES: dict[str, int] = {
    "1min": 1,
    "5min": 5,
    "15min": 15,
    "30min": 30,
    "60min": 60,
    "240min": 240,
    "daily": 1440,
}

BASE_PRICES: dict[str, float] = {
    "EUR_USD": 1.0850,
    "GBP_USD": 1.2650,
    "USD_JPY": 148.50,
    "USD_CHF": 0.8750,
    "AUD_USD": 0.6550,
    "USD_CAD": 1.3550,
    "NZD_USD": 0.6150,
    "EUR_GBP": 0.8580,
    "EUR_JPY": 161.00,
    "GBP_JPY": 187.70,
}

DEMO_BAR_COUNT = 101

_PAIR_PATTERN = re.compile(r"^([A-Z]{3})[_/]?([A-Z]{3})$")


def normalize_pair(pair: str) -> str:
    """Return *pair* in ``"EUR_USD"`` form.

    Accepts ``"EUR_USD"``, ``"EUR/USD"`` and ``"EURUSD"`` in any case.

    Raises:
        ValueError: If *pair* is not two three-letter currency codes.
    """
    match = _PAIR_PATTERN.match(pair.strip().upper())
    if match is None:
        raise ValueError(f"Invalid currency pair '{pair}'")
    return f"{match.group(1)}_{match.group(2)}"


@dataclass(frozen=True)
class Quote:
    """Spot exchange rate for a pair."""
    pair: str
    price: float
    bid: float
    ask: float
    timestamp: str
    change: float = 0.0
    change_percent: float = 0.0
    demo: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class ResponseCache:
    """Time-bounded cache of fetched bar sets keyed by ``(pair, timeframe)``.

    Args:
        ttl_seconds: Entry lifetime.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, list[Bar]]] = {}

    def get(self, pair: str, timeframe: str) -> Optional[list[Bar]]:
        entry = self._entries.get((pair, timeframe))
        if entry is None:
            return None
        stored_at, bars = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[(pair, timeframe)]
            return None
        return bars

    def put(self, pair: str, timeframe: str, bars: list[Bar]) -> None:
        self._entries[(pair, timeframe)] = (self._clock(), bars)

    def clear(self) -> None:
        self._entries.clear()


def generate_demo_bars(
    pair: str,
    timeframe: str,
    rng: Optional[np.random.Generator] = None,
    now: Optional[float] = None,
    count: int = DEMO_BAR_COUNT,
) -> list[Bar]:
    """Synthesise a plausible random-walk bar series ending at *now*.

    A slow sine trend plus uniform noise; JPY crosses move in larger
    absolute steps.
    """
    if rng is None:
        rng = np.random.default_rng()
    if now is None:
        now = time.time()

    interval = TIMEFRAME_MINUTES.get(timeframe, 60) * 60
    price = BASE_PRICES.get(pair, 1.0)
    volatility = 0.5 if "JPY" in pair else 0.003

    bars: list[Bar] = []
    for i in range(count - 1, -1, -1):
        trend = np.sin(i / 20) * volatility
        noise = (rng.random() - 0.5) * volatility * 2
        open_ = price
        close = open_ + float(trend + noise)
        high = max(open_, close) + rng.random() * volatility * 0.5
        low = min(open_, close) - rng.random() * volatility * 0.5
        bars.append(
            Bar(
                time=int(now - i * interval),
                open=open_,
                high=float(high),
                low=float(low),
                close=close,
            )
        )
        price = close
    return bars


def generate_demo_rate(
    pair: str,
    rng: Optional[np.random.Generator] = None,
    now: Optional[datetime] = None,
) -> Quote:
    """Synthesise a spot quote jittered around the pair's base price."""
    if rng is None:
        rng = np.random.default_rng()
    if now is None:
        now = datetime.now(timezone.utc)

    is_jpy = "JPY" in pair
    base = BASE_PRICES.get(pair, 1.0)
    spread = 0.03 if is_jpy else 0.0003
    change = float((rng.random() - 0.5) * (1.0 if is_jpy else 0.01))
    price = base + change
    return Quote(
        pair=pair,
        price=price,
        bid=price - spread / 2,
        ask=price + spread / 2,
        timestamp=now.isoformat(),
        change=change,
        change_percent=change / base * 100,
        demo=True,
    )


def parse_time_series(data: dict, timeframe: str) -> list[Bar]:
    """Convert an Alpha Vantage ``Time Series FX`` payload to ascending bars."""
    label = "Daily" if timeframe == "daily" else timeframe
    series = data.get(f"Time Series FX ({label})")
    if not series:
        return []

    bars: list[Bar] = []
    for stamp, values in series.items():
        fmt = "%Y-%m-%d" if len(stamp) == 10 else "%Y-%m-%d %H:%M:%S"
        dt = datetime.strptime(stamp, fmt).replace(tzinfo=timezone.utc)
        bars.append(
            Bar(
                time=int(dt.timestamp()),
                open=float(values["1. open"]),
                high=float(values["2. high"]),
                low=float(values["3. low"]),
                close=float(values["4. close"]),
            )
        )
    bars.sort(key=lambda b: b.time)
    return bars


class AlphaVantageClient:
    """Async market data source wrapping the Alpha Vantage FX endpoints.

    Args:
        config: Application configuration (API key, cache TTL).
        cache: Response cache; a fresh one using ``config.cache_ttl_seconds``
            is created when omitted.
        rng: Random source for the synthetic fallback series.
    """

    def __init__(
        self,
        config: Config,
        cache: Optional[ResponseCache] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._config = config
        self._base_url = config.alpha_vantage_base_url
        self._cache = cache if cache is not None else ResponseCache(config.cache_ttl_seconds)
        self._rng = rng if rng is not None else np.random.default_rng()

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _request_with_retry(self, params: dict) -> httpx.Response:
        """GET the query endpoint with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504) and rate-limits
        (429).  Non-retryable errors are raised immediately.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(self._base_url, params=params, timeout=30.0)

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "Alpha Vantage returned %d — retry %d/%d in %.1fs",
                        resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    await asyncio.sleep(delay)
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "Alpha Vantage transport error (%s) — retry %d/%d in %.1fs",
                    exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]

    # ── Bars ─────────────────────────────────────────────────────────────

    async def fetch_bars(self, pair: str, timeframe: str = "60min") -> list[Bar]:
        """Fetch bars for *pair* (``"EUR_USD"``), oldest first.

        Never raises for API trouble or a malformed pair: falls back to
        ``generate_demo_bars``.  Successful responses are cached for the
        configured TTL.
        """
        try:
            pair = normalize_pair(pair)
        except ValueError as exc:
            logger.warning("%s; using demo data.", exc)
            return generate_demo_bars(pair, timeframe, self._rng)

        cached = self._cache.get(pair, timeframe)
        if cached is not None:
            return cached

        from_symbol, to_symbol = pair.split("_")
        params = {
            "function": "FX_DAILY" if timeframe == "daily" else "FX_INTRADAY",
            "from_symbol": from_symbol,
            "to_symbol": to_symbol,
            "apikey": self._config.alpha_vantage_api_key,
            "outputsize": "compact",
        }
        if timeframe != "daily":
            params["interval"] = timeframe

        data = await self._fetch_json(params, pair)
        if data is None:
            return generate_demo_bars(pair, timeframe, self._rng)

        try:
            bars = parse_time_series(data, timeframe)
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            logger.warning(
                "Malformed time series for %s %s (%r); using demo data.",
                pair, timeframe, exc,
            )
            return generate_demo_bars(pair, timeframe, self._rng)

        if not bars:
            logger.warning("No time series for %s %s; using demo data.", pair, timeframe)
            return generate_demo_bars(pair, timeframe, self._rng)

        self._cache.put(pair, timeframe, bars)
        return bars

    # ── Quotes ───────────────────────────────────────────────────────────

    async def fetch_exchange_rate(self, pair: str) -> Quote:
        """Fetch the realtime exchange rate for *pair*.

        Falls back to ``generate_demo_rate`` on any API trouble.

        Raises:
            ValueError: If *pair* is not a valid currency pair.
        """
        pair = normalize_pair(pair)
        from_symbol, to_symbol = pair.split("_")
        params = {
            "function": "CURRENCY_EXCHANGE_RATE",
            "from_currency": from_symbol,
            "to_currency": to_symbol,
            "apikey": self._config.alpha_vantage_api_key,
        }

        data = await self._fetch_json(params, pair)
        if data is None:
            return generate_demo_rate(pair, self._rng)

        try:
            rate = data["Realtime Currency Exchange Rate"]
            return Quote(
                pair=pair,
                price=float(rate["5. Exchange Rate"]),
                bid=float(rate["8. Bid Price"]),
                ask=float(rate["9. Ask Price"]),
                timestamp=str(rate["6. Last Refreshed"]),
            )
        except (KeyError, ValueError, TypeError) as exc:
            logger.warning("Malformed exchange rate for %s (%r); using demo data.", pair, exc)
            return generate_demo_rate(pair, self._rng)

    async def fetch_multiple_rates(self, pairs: list[str]) -> list[Quote]:
        """Fetch quotes for several pairs concurrently, in input order."""
        return list(await asyncio.gather(*(self.fetch_exchange_rate(p) for p in pairs)))

    # ── Internals ────────────────────────────────────────────────────────

    async def _fetch_json(self, params: dict, pair: str) -> Optional[dict]:
        """GET *params* and return the decoded JSON object.

        Returns ``None`` (after logging a warning) on transport failure,
        a non-object body, or an error/rate-limit payload.
        """
        try:
            resp = await self._request_with_retry(params)
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("%s fetch for %s failed (%s); using demo data.",
                           params["function"], pair, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("%s response for %s is not an object; using demo data.",
                           params["function"], pair)
            return None

        if "Error Message" in data or "Note" in data:
            logger.warning(
                "Alpha Vantage refused %s request: %s; using demo data.",
                pair, data.get("Error Message") or data.get("Note"),
            )
            return None
        return data
