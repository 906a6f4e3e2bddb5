"""
Technical indicator math over close-price series.

All functions take prices oldest first and return values aligned to the end
of the series (the last element is the most recent reading). Series that are
too short for an indicator return an empty list.
"""

from bisect import bisect_left
from typing import Sequence

from cryptoscope.domain.entities.analysis import (
    BollingerValues,
    LevelKind,
    MACDValues,
    StochasticValues,
    SupportResistanceLevel,
    Timeframe,
    Trend,
)
from cryptoscope.domain.entities.market_data import PricePoint

HOUR_MS = 3_600_000

TREND_WINDOW_HOURS = {
    Timeframe.SHORT: 24,
    Timeframe.MEDIUM: 72,
    Timeframe.LONG: 168,
}


def calculate_sma(prices: Sequence[float], period: int) -> list[float]:
    """Simple moving average; first value at index period-1."""
    if period <= 0 or len(prices) < period:
        return []
    window_sum = sum(prices[:period])
    values = [window_sum / period]
    for i in range(period, len(prices)):
        window_sum += prices[i] - prices[i - period]
        values.append(window_sum / period)
    return values


def calculate_ema(prices: Sequence[float], period: int) -> list[float]:
    """
    Calculate EMA for a list of prices.
    Returns list aligned with prices (first EMA starts at index period-1).
    """
    if period <= 0 or len(prices) < period:
        return []

    multiplier = 2 / (period + 1)

    # Start EMA with SMA
    ema_values = [sum(prices[:period]) / period]
    for price in prices[period:]:
        ema_values.append((price - ema_values[-1]) * multiplier + ema_values[-1])
    return ema_values


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def calculate_rsi(prices: Sequence[float], period: int = 14) -> list[float]:
    """Relative Strength Index with Wilder smoothing."""
    if len(prices) < period + 1:
        return []

    gains: list[float] = []
    losses: list[float] = []
    for prev, cur in zip(prices, prices[1:]):
        change = cur - prev
        gains.append(max(change, 0.0))
        losses.append(max(-change, 0.0))

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    values = [_rsi_from_averages(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        values.append(_rsi_from_averages(avg_gain, avg_loss))
    return values


def calculate_macd(
    prices: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> list[MACDValues]:
    """MACD line (EMA fast - EMA slow), its EMA signal line, and the histogram."""
    fast = calculate_ema(prices, fast_period)
    slow = calculate_ema(prices, slow_period)
    if not slow:
        return []

    macd_line = [f - s for f, s in zip(fast[slow_period - fast_period:], slow)]
    signal = calculate_ema(macd_line, signal_period)
    if not signal:
        return []

    return [
        MACDValues(macd=m, signal=s, histogram=m - s)
        for m, s in zip(macd_line[signal_period - 1:], signal)
    ]


def calculate_bollinger(
    prices: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> list[BollingerValues]:
    """Bollinger bands: SMA +/- std_dev population standard deviations."""
    if len(prices) < period:
        return []

    bands: list[BollingerValues] = []
    for end in range(period, len(prices) + 1):
        window = prices[end - period:end]
        middle = sum(window) / period
        variance = sum((p - middle) ** 2 for p in window) / period
        spread = std_dev * variance ** 0.5
        bands.append(BollingerValues(upper=middle + spread, middle=middle, lower=middle - spread))
    return bands


def calculate_stochastic(
    prices: Sequence[float],
    period: int = 14,
    signal_period: int = 3,
) -> list[StochasticValues]:
    """
    Stochastic oscillator from closes only.

    The high/low range is the rolling max/min close over ``period``; %D is
    the SMA of %K over ``signal_period``.
    """
    if len(prices) < period + signal_period - 1:
        return []

    k_values: list[float] = []
    for end in range(period, len(prices) + 1):
        window = prices[end - period:end]
        high, low = max(window), min(window)
        close = window[-1]
        k_values.append(100 * (close - low) / (high - low) if high > low else 50.0)

    d_values = calculate_sma(k_values, signal_period)
    return [
        StochasticValues(k=k, d=d)
        for k, d in zip(k_values[signal_period - 1:], d_values)
    ]


def _directional_index(plus_dm: float, minus_dm: float, true_range: float) -> float:
    if true_range <= 0:
        return 0.0
    plus_di = 100 * plus_dm / true_range
    minus_di = 100 * minus_dm / true_range
    total = plus_di + minus_di
    if total == 0:
        return 0.0
    return 100 * abs(plus_di - minus_di) / total


def calculate_adx(prices: Sequence[float], period: int = 14) -> list[float]:
    """
    Average Directional Index approximated from closes.

    Directional movement is the close-to-close move and true range its
    absolute value; with no intrabar highs/lows this measures how one-sided
    recent moves were.
    """
    if len(prices) < 2 * period:
        return []

    plus_dm: list[float] = []
    minus_dm: list[float] = []
    true_range: list[float] = []
    for prev, cur in zip(prices, prices[1:]):
        move = cur - prev
        plus_dm.append(max(move, 0.0))
        minus_dm.append(max(-move, 0.0))
        true_range.append(abs(move))

    # Wilder smoothing
    smooth_plus = sum(plus_dm[:period])
    smooth_minus = sum(minus_dm[:period])
    smooth_tr = sum(true_range[:period])
    dx = [_directional_index(smooth_plus, smooth_minus, smooth_tr)]
    for i in range(period, len(true_range)):
        smooth_plus = smooth_plus - smooth_plus / period + plus_dm[i]
        smooth_minus = smooth_minus - smooth_minus / period + minus_dm[i]
        smooth_tr = smooth_tr - smooth_tr / period + true_range[i]
        dx.append(_directional_index(smooth_plus, smooth_minus, smooth_tr))

    if len(dx) < period:
        return []
    adx = sum(dx[:period]) / period
    values = [adx]
    for value in dx[period:]:
        adx = (adx * (period - 1) + value) / period
        values.append(adx)
    return values


def find_support_resistance(
    prices: Sequence[float],
    current_price: float,
    window: int = 3,
    tolerance: float = 0.015,
    max_levels: int = 6,
) -> list[SupportResistanceLevel]:
    """
    Cluster swing highs/lows into price levels.

    A pivot is a close that is the max or min of the ``window`` closes on
    each side. Pivots within ``tolerance`` of a cluster's mean join it.
    Strength is ``min(1, touches / 3)``; levels below the current price are
    supports, the rest resistances. Strongest levels come first.
    """
    if len(prices) < 2 * window + 1 or current_price <= 0:
        return []

    pivots: list[float] = []
    for i in range(window, len(prices) - window):
        segment = prices[i - window:i + window + 1]
        if prices[i] == max(segment) or prices[i] == min(segment):
            pivots.append(prices[i])

    clusters: list[list[float]] = []
    for pivot in sorted(pivots):
        if clusters:
            mean = sum(clusters[-1]) / len(clusters[-1])
            if mean > 0 and abs(pivot - mean) / mean <= tolerance:
                clusters[-1].append(pivot)
                continue
        clusters.append([pivot])

    levels = []
    for cluster in clusters:
        price = sum(cluster) / len(cluster)
        levels.append(
            SupportResistanceLevel(
                price=price,
                kind=LevelKind.SUPPORT if price < current_price else LevelKind.RESISTANCE,
                strength=min(1.0, len(cluster) / 3),
            )
        )

    levels.sort(key=lambda lvl: (-lvl.strength, abs(lvl.price - current_price)))
    return levels[:max_levels]


def classify_trend(change_pct: float, threshold: float = 2.0) -> Trend:
    if change_pct > threshold:
        return Trend.BULLISH
    if change_pct < -threshold:
        return Trend.BEARISH
    return Trend.NEUTRAL


def classify_timeframe_trends(
    points: Sequence[PricePoint],
    threshold: float = 2.0,
) -> dict[Timeframe, Trend]:
    """
    Trend per timeframe from the price change over its trailing window.

    The reference price is the oldest sample inside the window, so a
    history shorter than the window uses its first point.
    """
    if len(points) < 2:
        return {tf: Trend.NEUTRAL for tf in TREND_WINDOW_HOURS}

    timestamps = [p.timestamp for p in points]
    latest = points[-1]
    trends: dict[Timeframe, Trend] = {}
    for timeframe, hours in TREND_WINDOW_HOURS.items():
        index = bisect_left(timestamps, latest.timestamp - hours * HOUR_MS)
        reference = points[min(index, len(points) - 1)]
        if reference is latest or reference.price <= 0:
            trends[timeframe] = Trend.NEUTRAL
            continue
        change = (latest.price - reference.price) / reference.price * 100
        trends[timeframe] = classify_trend(change, threshold)
    return trends
