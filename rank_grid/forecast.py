"""平均順位の推移から線形回帰で将来の順位を予測するモジュール."""

from __future__ import annotations

import math

from rank_grid.config import (
    CONFIDENCE_VARIANCE_WEIGHT,
    FORECAST_RANK_MAX,
    FORECAST_RANK_MIN,
    NEXT_MONTH_STEPS,
    TREND_SLOPE_THRESHOLD,
)
from rank_grid.grid import clamp, metrics
from rank_grid.models import Forecast, Snapshot


def forecast(history: list[Snapshot], current_avg: float | None = None) -> Forecast:
    """スナップショット履歴から翌週・翌月の平均順位を予測する.

    x = 日付昇順の通し番号 (0 始まり)、y = 各スナップショットの平均順位として
    最小二乗法で直線を当てはめる。計測済みセルのないスナップショットは
    平均順位を持たないため回帰から外すが、通し番号は詰めない。

    Args:
        history: スナップショット履歴 (順不同)
        current_avg: 系列が 2 点未満のときに返す現在の平均順位

    Returns:
        next_week は x = len(history)、next_month はその 3 つ先の予測値 (1..20 に丸め)。
        trend は傾きの符号で判定 (順位の数値が下がる = improving)。
    """
    ordered = sorted(history, key=lambda s: s.date)
    points = [
        (x, avg)
        for x, avg in enumerate(metrics(s.grid).avg for s in ordered)
        if not math.isnan(avg)
    ]
    ys = [y for _, y in points]
    n = len(points)

    if n < 2:
        if current_avg is None:
            current_avg = ys[0] if ys else 0.0
        fallback = 0.0 if math.isnan(current_avg) else current_avg
        return Forecast(
            next_week=fallback,
            next_month=fallback,
            trend="stable",
            confidence=0.0,
        )

    x_mean = sum(x for x, _ in points) / n
    y_mean = sum(ys) / n
    sxy = sum((x - x_mean) * (y - y_mean) for x, y in points)
    sxx = sum((x - x_mean) ** 2 for x, _ in points)
    slope = sxy / sxx
    intercept = y_mean - slope * x_mean

    def predict(x: int) -> float:
        return clamp(intercept + slope * x, FORECAST_RANK_MIN, FORECAST_RANK_MAX)

    trend = "stable"
    if slope < -TREND_SLOPE_THRESHOLD:
        trend = "improving"
    elif slope > TREND_SLOPE_THRESHOLD:
        trend = "declining"

    variance = sum((y - y_mean) ** 2 for y in ys) / n
    confidence = clamp(100 - variance * CONFIDENCE_VARIANCE_WEIGHT, 0, 100)

    return Forecast(
        next_week=predict(len(ordered)),
        next_month=predict(len(ordered) + NEXT_MONTH_STEPS),
        trend=trend,
        confidence=confidence,
    )
