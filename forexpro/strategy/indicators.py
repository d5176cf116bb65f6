"""Technical indicators — SMA, EMA, RSI, MACD, Bollinger Bands, ATR. Pure functions, no I/O.

Every function returns series index-aligned with *bars*.  Entries before
the seed window are ``None``; a bar set shorter than the minimum window
yields an all-``None`` series rather than an error.
"""

from forexpro.strategy.models import (
    Bar,
    BollingerBands,
    IndicatorSet,
    MACDResult,
    Series,
)
from forexpro.strategy.series import (
    exponential_average,
    moving_average,
    standard_deviation,
)
from forexpro.strategy.sr_zones import detect_support_resistance

# ── Defaults ─────────────────────────────────────────────────────────────

RSI_PERIOD = 14
RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

EMA_PERIODS = (9, 21, 50, 200)

BOLLINGER_PERIOD = 20
BOLLINGER_STD_DEV = 2.0

ATR_PERIOD = 14


def _closes(bars: list[Bar]) -> list[float]:
    return [b.close for b in bars]


def calculate_sma(bars: list[Bar], period: int) -> Series:
    """Simple moving average of closes."""
    return moving_average(_closes(bars), period)


def calculate_ema(bars: list[Bar], period: int) -> Series:
    """Exponential moving average of closes, seeded with the SMA."""
    return exponential_average(_closes(bars), period)


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(bars: list[Bar], period: int = RSI_PERIOD) -> Series:
    """Calculate Wilder's Relative Strength Index.

    Algorithm (Wilder-smoothed):
        1. delta = close[i] - close[i-1]
        2. Separate gains (positive) and losses (|negative|).
        3. Seed average gain/loss = SMA of first *period* deltas.
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RSI = 100 - 100 / (1 + avg_gain / avg_loss), or 100 when
           avg_loss is zero.

    The first defined value sits at index *period*.  Needs ``period + 1``
    bars.
    """
    n = len(bars)
    rsi: Series = [None] * n
    if n < period + 1:
        return rsi

    closes = _closes(bars)
    deltas = [closes[i] - closes[i - 1] for i in range(1, n)]
    gains = [max(d, 0.0) for d in deltas]
    losses = [abs(min(d, 0.0)) for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    def _rsi_from_avgs(ag: float, al: float) -> float:
        if al == 0:
            return 100.0
        return 100.0 - 100.0 / (1.0 + ag / al)

    rsi[period] = _rsi_from_avgs(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        # deltas are offset by one bar
        rsi[i + 1] = _rsi_from_avgs(avg_gain, avg_loss)

    return rsi


# ── MACD ─────────────────────────────────────────────────────────────────


def calculate_macd(
    bars: list[Bar],
    fast_period: int = MACD_FAST,
    slow_period: int = MACD_SLOW,
    signal_period: int = MACD_SIGNAL,
) -> MACDResult:
    """Moving Average Convergence Divergence.

    ``macd = EMA(fast) - EMA(slow)`` wherever both are defined.  The signal
    line is the EMA(*signal_period*) of the defined MACD values, mapped
    back onto the original bar positions.
    """
    n = len(bars)
    macd_line: Series = [None] * n
    signal_line: Series = [None] * n
    histogram: Series = [None] * n
    if n < slow_period:
        return MACDResult(macd_line, signal_line, histogram)

    fast = calculate_ema(bars, fast_period)
    slow = calculate_ema(bars, slow_period)
    for i in range(n):
        if fast[i] is not None and slow[i] is not None:
            macd_line[i] = fast[i] - slow[i]

    defined = [i for i, v in enumerate(macd_line) if v is not None]
    signal_values = exponential_average([macd_line[i] for i in defined], signal_period)

    for pos, i in enumerate(defined):
        sig = signal_values[pos]
        if sig is None:
            continue
        signal_line[i] = sig
        histogram[i] = macd_line[i] - sig

    return MACDResult(macd_line, signal_line, histogram)


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    bars: list[Bar],
    period: int = BOLLINGER_PERIOD,
    std_dev: float = BOLLINGER_STD_DEV,
) -> BollingerBands:
    """Calculate Bollinger Bands.

    Middle = SMA(close, *period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation of the same window.
    """
    closes = _closes(bars)
    n = len(closes)
    middle = moving_average(closes, period)
    upper: Series = [None] * n
    lower: Series = [None] * n

    for i in range(period - 1, n):
        sigma = standard_deviation(closes, i, period, middle[i])
        if sigma is None:
            continue
        upper[i] = middle[i] + std_dev * sigma
        lower[i] = middle[i] - std_dev * sigma

    return BollingerBands(upper=upper, middle=middle, lower=lower)


# ── ATR ──────────────────────────────────────────────────────────────────


def calculate_atr(bars: list[Bar], period: int = ATR_PERIOD) -> Series:
    """Calculate the Wilder-smoothed Average True Range.

    True Range:
        TR = max(high - low, |high - prev_close|, |low - prev_close|)
    (the first bar has no previous close and uses ``high - low``).

    The seed at index ``period - 1`` is the simple mean of the first
    *period* true ranges; afterwards ``atr = (atr × (period-1) + tr) / period``.
    """
    n = len(bars)
    atr_series: Series = [None] * n
    if n < period:
        return atr_series

    true_ranges: list[float] = [bars[0].high - bars[0].low]
    for i in range(1, n):
        high = bars[i].high
        low = bars[i].low
        prev_close = bars[i - 1].close
        true_ranges.append(
            max(high - low, abs(high - prev_close), abs(low - prev_close))
        )

    atr = sum(true_ranges[:period]) / period
    atr_series[period - 1] = atr
    for i in range(period, n):
        atr = (atr * (period - 1) + true_ranges[i]) / period
        atr_series[i] = atr

    return atr_series


# ── Everything at once ───────────────────────────────────────────────────


def calculate_all(bars: list[Bar]) -> IndicatorSet:
    """Compute every charted indicator with default settings."""
    ema9, ema21, ema50, ema200 = (calculate_ema(bars, p) for p in EMA_PERIODS)
    return IndicatorSet(
        rsi=calculate_rsi(bars),
        macd=calculate_macd(bars),
        ema9=ema9,
        ema21=ema21,
        ema50=ema50,
        ema200=ema200,
        bollinger=calculate_bollinger(bars),
        atr=calculate_atr(bars),
        support_resistance=detect_support_resistance(bars),
    )
