"""複数スナップショットにまたがるキーワード分析モジュール."""

from __future__ import annotations

import math
import uuid
from datetime import date

from rank_grid.grid import metrics
from rank_grid.models import (
    CompetitorData,
    CompetitorInsights,
    KeywordPerformance,
    KeywordStat,
    RankingAnalytics,
    RankingCampaign,
    Snapshot,
)

TOP_KEYWORD_MAX_RANK = 10
OPPORTUNITY_RANK_RANGE = (5, 15)  # (下限を含まない, 上限を含む)
LEADERBOARD_SIZE = 5


def competitor_insights(competitors: list[CompetitorData], our_rank: float) -> CompetitorInsights:
    """競合と自店の順位を比較する."""
    better = [c.rank for c in competitors if c.rank < our_rank]
    worse = [c for c in competitors if c.rank > our_rank]
    return CompetitorInsights(
        ahead=len(better),
        behind=len(worse),
        closest_competitor=min(better) if better else None,
        market_position=len(better) + 1,
    )


def keyword_stats(snapshots: list[Snapshot]) -> list[KeywordStat]:
    """キーワードごとの平均順位 (スナップショット平均の平均) を集計する.

    平均順位を持たない (計測済みセルのない) スナップショットは数えない。
    """
    totals: dict[str, list[float]] = {}
    for s in snapshots:
        avg = metrics(s.grid).avg
        if math.isnan(avg):
            continue
        totals.setdefault(s.keyword, []).append(avg)

    return [
        KeywordStat(keyword=kw, avg_rank=sum(avgs) / len(avgs), count=len(avgs))
        for kw, avgs in totals.items()
    ]


def top_keywords(snapshots: list[Snapshot]) -> list[KeywordStat]:
    """平均 10 位以内のキーワードを順位の良い順に最大 5 件返す."""
    stats = [s for s in keyword_stats(snapshots) if s.avg_rank <= TOP_KEYWORD_MAX_RANK]
    stats.sort(key=lambda s: s.avg_rank)
    return stats[:LEADERBOARD_SIZE]


def improvement_opportunities(snapshots: list[Snapshot]) -> list[KeywordStat]:
    """TOP3 まで伸ばせる余地の大きいキーワードを最大 5 件返す."""
    lo, hi = OPPORTUNITY_RANK_RANGE
    stats = [s for s in keyword_stats(snapshots) if lo < s.avg_rank <= hi]
    for s in stats:
        s.potential = max(0.0, s.avg_rank - 3)
    stats.sort(key=lambda s: s.potential, reverse=True)
    return stats[:LEADERBOARD_SIZE]


def ranking_analytics(snapshots: list[Snapshot]) -> RankingAnalytics:
    """スナップショット全体の集計を行う.

    improvement_rate は隣り合うスナップショット間の改善幅 (悪化は 0) の平均。
    keyword_performance はキーワードごとの最新平均順位と、その直前の値との比較。
    """
    avgs = [metrics(s.grid).avg for s in snapshots]
    finite = [a for a in avgs if not math.isnan(a)]

    gains = []
    for prev, cur in zip(avgs, avgs[1:]):
        gains.append(0.0 if math.isnan(prev) or math.isnan(cur) else max(0.0, prev - cur))

    performance: dict[str, KeywordPerformance] = {}
    for s, avg in zip(snapshots, avgs):
        if math.isnan(avg):
            continue
        previous = performance.get(s.keyword)
        if previous is None:
            performance[s.keyword] = KeywordPerformance(current_rank=avg)
            continue
        velocity = previous.current_rank - avg
        trend = "up" if velocity > 0 else "down" if velocity < 0 else "stable"
        performance[s.keyword] = KeywordPerformance(
            current_rank=avg,
            previous_rank=previous.current_rank,
            trend=trend,
            velocity=velocity,
        )

    return RankingAnalytics(
        total_keywords=len({s.keyword for s in snapshots}),
        avg_rank=sum(finite) / len(finite) if finite else math.nan,
        top10_count=sum(1 for a in finite if a <= 10),
        top3_count=sum(1 for a in finite if a <= 3),
        improvement_rate=sum(gains) / len(gains) if gains else 0.0,
        keyword_performance=performance,
    )


def trend_series(snapshots: list[Snapshot]) -> list[dict]:
    """日付ごとにキーワード別の可視性スコアを並べたチャート用データを返す.

    Returns:
        [{"date": "2026-01-01", "<keyword>": 72.5, ...}, ...] (日付昇順)
    """
    by_date: dict[str, dict] = {}
    for s in sorted(snapshots, key=lambda s: s.date):
        row = by_date.setdefault(s.date, {"date": s.date})
        row[s.keyword] = math.floor(metrics(s.grid).vis_score * 10 + 0.5) / 10
    return list(by_date.values())


def build_campaign(
    target_keywords: list[str],
    snapshots: list[Snapshot],
    target_rank: int,
    timeframe: str,
    budget: float | None = None,
) -> RankingCampaign:
    """対象キーワードを含むスナップショットから順位改善キャンペーンを作る."""
    if not target_keywords:
        raise ValueError("target_keywords must not be empty")

    needles = [kw.lower() for kw in target_keywords]
    ranks = [
        avg
        for avg in (
            metrics(s.grid).avg
            for s in snapshots
            if any(kw in s.keyword.lower() for kw in needles)
        )
        if not math.isnan(avg)
    ]
    current_avg = sum(ranks) / len(ranks) if ranks else 0.0

    return RankingCampaign(
        id=f"campaign_{uuid.uuid4().hex}",
        name=f"Ranking Campaign - {target_keywords[0]}",
        description=f"Improve rankings for {len(target_keywords)} target keywords",
        target_keywords=list(target_keywords),
        start_date=date.today().isoformat(),
        target_rank=target_rank,
        timeframe=timeframe,
        budget=budget,
        current_avg_rank=current_avg,
        best_rank=min(ranks) if ranks else 0.0,
        improvement=target_rank - current_avg,
    )
