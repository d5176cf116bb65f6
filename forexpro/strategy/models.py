"""Strategy data models — typed representations for analysis outputs."""

from dataclasses import dataclass, field
from typing import Optional


# Index-aligned indicator output.  ``None`` marks "not enough history yet".
Series = list[Optional[float]]


@dataclass(frozen=True)
class Bar:
    """A single OHLC bar (epoch-seconds timestamp)."""

    time: int
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram, each aligned with the bars."""

    macd_line: Series
    signal_line: Series
    histogram: Series


@dataclass(frozen=True)
class BollingerBands:
    """Upper / middle / lower bands, each aligned with the bars."""

    upper: Series
    middle: Series
    lower: Series


@dataclass(frozen=True)
class SRLevel:
    """A clustered support or resistance price level."""

    price: float
    level_type: str  # "support" or "resistance"
    strength: int  # number of merged swing points


@dataclass(frozen=True)
class IndicatorSet:
    """Every indicator the dashboard charts, computed over one bar set."""

    rsi: Series
    macd: MACDResult
    ema9: Series
    ema21: Series
    ema50: Series
    ema200: Series
    bollinger: BollingerBands
    atr: Series
    support_resistance: list[SRLevel]


# ── Signals ──────────────────────────────────────────────────────────────

STRONG_BUY = "Strong Buy"
BUY = "Buy"
NEUTRAL = "Neutral"
SELL = "Sell"
STRONG_SELL = "Strong Sell"

SIGNAL_LABELS = (STRONG_BUY, BUY, NEUTRAL, SELL, STRONG_SELL)


@dataclass(frozen=True)
class SignalVote:
    """One indicator rule's opinion on the latest bar."""

    indicator: str
    vote: int  # -2 (strong sell) .. +2 (strong buy)
    reason: Optional[str] = None


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Last-bar indicator readings attached to a signal."""

    rsi: Optional[float] = None
    macd_line: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    ema9: Optional[float] = None
    ema21: Optional[float] = None
    ema50: Optional[float] = None
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "rsi": self.rsi,
            "macd": {
                "line": self.macd_line,
                "signal": self.macd_signal,
                "histogram": self.macd_histogram,
            },
            "ema": {"ema9": self.ema9, "ema21": self.ema21, "ema50": self.ema50},
            "bollinger": {
                "upper": self.bb_upper,
                "middle": self.bb_middle,
                "lower": self.bb_lower,
            },
        }


@dataclass(frozen=True)
class Signal:
    """Directional trading signal produced from the latest indicator readings."""

    label: str
    confidence: int
    reasons: tuple[str, ...] = ()
    votes: tuple[SignalVote, ...] = ()
    snapshot: Optional[IndicatorSnapshot] = None

    @property
    def is_bullish(self) -> bool:
        return self.label in (BUY, STRONG_BUY)

    @property
    def is_bearish(self) -> bool:
        return self.label in (SELL, STRONG_SELL)

    def to_dict(self) -> dict:
        return {
            "signal": self.label,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
            "indicators": self.snapshot.to_dict() if self.snapshot else None,
        }


# ── Trade setups ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SetupLevel:
    """A price level annotated on the chart next to a trade setup."""

    price: float
    level_type: str  # "support" or "resistance"
    label: str
    strength: Optional[int] = None


@dataclass(frozen=True)
class TradeSetup:
    """Concrete entry / stop / target derived from a directional signal.

    When ``active`` is False only ``message`` and ``suggestion`` are set.
    """

    active: bool
    direction: Optional[str] = None  # "LONG" or "SHORT"
    entry: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    risk_reward: Optional[float] = None
    probability: Optional[int] = None
    atr: Optional[float] = None
    levels: tuple[SetupLevel, ...] = ()
    reasons: tuple[str, ...] = ()
    message: Optional[str] = None
    suggestion: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        if not self.active:
            return {
                "active": False,
                "message": self.message,
                "suggestion": self.suggestion,
            }
        return {
            "active": True,
            "direction": self.direction,
            "entry": self.entry,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "risk_reward": self.risk_reward,
            "probability": self.probability,
            "atr": self.atr,
            "levels": [
                {
                    "price": lv.price,
                    "type": lv.level_type,
                    "label": lv.label,
                    "strength": lv.strength,
                }
                for lv in self.levels
            ],
            "reasons": list(self.reasons),
            "created_at": self.created_at,
        }


# ── Simulated trades ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class SimulatedTrade:
    """A paper trade whose outcome is fixed the moment it is created."""

    id: str
    pair: str
    direction: str  # "BUY" or "SELL"
    entry_price: float
    exit_price: float
    stop_loss: float
    take_profit: float
    probability: int
    is_win: bool
    pnl_pips: float
    timestamp: str
    price_movement: tuple[float, ...] = field(default=(), compare=False)

    def to_record(self) -> dict:
        """Return the persisted form (animation path excluded)."""
        return {
            "id": self.id,
            "pair": self.pair,
            "direction": self.direction,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "probability": self.probability,
            "is_win": self.is_win,
            "pnl_pips": self.pnl_pips,
            "timestamp": self.timestamp,
        }


# ── Instrument metadata ──────────────────────────────────────────────────

INSTRUMENT_PIP_VALUES: dict[str, float] = {
    "EUR_USD": 0.0001,
    "GBP_USD": 0.0001,
    "USD_JPY": 0.01,
    "USD_CHF": 0.0001,
    "AUD_USD": 0.0001,
    "NZD_USD": 0.0001,
    "USD_CAD": 0.0001,
    "EUR_GBP": 0.0001,
    "EUR_JPY": 0.01,
    "GBP_JPY": 0.01,
}


def pip_size(pair: str) -> float:
    """Return the pip size for *pair* (JPY crosses quote to 2 decimals)."""
    if pair in INSTRUMENT_PIP_VALUES:
        return INSTRUMENT_PIP_VALUES[pair]
    return 0.01 if "JPY" in pair else 0.0001
