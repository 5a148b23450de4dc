"""analytics モジュールのユニットテスト."""

import math

import pytest

from rank_grid.analytics import (
    build_campaign,
    competitor_insights,
    improvement_opportunities,
    keyword_stats,
    ranking_analytics,
    top_keywords,
    trend_series,
)
from rank_grid.models import CompetitorData, Snapshot


def _snap(keyword, avg, date="2026-01-01") -> Snapshot:
    return Snapshot(
        id=f"{keyword}-{date}",
        date=date,
        keyword=keyword,
        rows=1,
        cols=1,
        grid=[[avg]],
    )


class TestCompetitorInsights:
    """competitor_insights のテスト."""

    def test_position(self):
        competitors = [
            CompetitorData(name="A", rank=2),
            CompetitorData(name="B", rank=4),
            CompetitorData(name="C", rank=8),
            CompetitorData(name="D", rank=5),
        ]
        insights = competitor_insights(competitors, 5)

        assert insights.ahead == 2
        assert insights.behind == 1
        assert insights.closest_competitor == 2
        assert insights.market_position == 3

    def test_no_one_ahead(self):
        insights = competitor_insights([CompetitorData(name="A", rank=9)], 1)

        assert insights.closest_competitor is None
        assert insights.market_position == 1


class TestKeywordLeaderboards:
    """keyword_stats / top_keywords / improvement_opportunities のテスト."""

    def test_stats_average_per_keyword(self):
        snaps = [
            _snap("barber", 4, "2026-01-01"),
            _snap("barber", 6, "2026-01-08"),
            _snap("fade", None),
        ]
        stats = keyword_stats(snaps)

        assert [(s.keyword, s.avg_rank, s.count) for s in stats] == [("barber", 5, 2)]

    def test_top_keywords(self):
        snaps = [_snap(f"kw{i}", i) for i in (12, 3, 9, 1, 7, 5, 2)]
        top = top_keywords(snaps)

        assert [s.keyword for s in top] == ["kw1", "kw2", "kw3", "kw5", "kw7"]

    def test_improvement_opportunities(self):
        snaps = [_snap(f"kw{i}", i) for i in (4, 6, 15, 16, 11)]
        ops = improvement_opportunities(snaps)

        assert [s.keyword for s in ops] == ["kw15", "kw11", "kw6"]
        assert ops[0].potential == 12


class TestRankingAnalytics:
    """ranking_analytics のテスト."""

    def test_summary(self):
        snaps = [
            _snap("barber", 8, "2026-01-01"),
            _snap("barber", 5, "2026-01-08"),
            _snap("fade", 2, "2026-01-08"),
            _snap("fade", 4, "2026-01-15"),
        ]
        a = ranking_analytics(snaps)

        assert a.total_keywords == 2
        assert a.avg_rank == pytest.approx(4.75)
        assert a.top10_count == 4
        assert a.top3_count == 1
        # 改善幅: 3, 3, 0
        assert a.improvement_rate == pytest.approx(2)

    def test_keyword_performance(self):
        snaps = [_snap("barber", 8, "2026-01-01"), _snap("barber", 5, "2026-01-08")]
        perf = ranking_analytics(snaps).keyword_performance["barber"]

        assert perf.current_rank == 5
        assert perf.previous_rank == 8
        assert perf.trend == "up"
        assert perf.velocity == 3

    def test_empty(self):
        a = ranking_analytics([])

        assert a.total_keywords == 0
        assert math.isnan(a.avg_rank)
        assert a.improvement_rate == 0


class TestTrendSeries:
    """trend_series のテスト."""

    def test_rows_by_date(self):
        snaps = [
            _snap("fade", 20, "2026-01-08"),
            _snap("barber", 1, "2026-01-01"),
            _snap("barber", 11, "2026-01-08"),
        ]

        assert trend_series(snaps) == [
            {"date": "2026-01-01", "barber": 100.0},
            {"date": "2026-01-08", "fade": 5.0, "barber": 50.0},
        ]


class TestBuildCampaign:
    """build_campaign のテスト."""

    def test_matching_snapshots(self):
        snaps = [_snap("Barber Calgary", 6), _snap("barber shop", 4), _snap("florist", 1)]
        c = build_campaign(["barber"], snaps, target_rank=3, timeframe="3 months")

        assert c.name == "Ranking Campaign - barber"
        assert c.description == "Improve rankings for 1 target keywords"
        assert c.current_avg_rank == 5
        assert c.best_rank == 4
        assert c.improvement == -2
        assert c.status == "active"

    def test_no_matches(self):
        c = build_campaign(["wedding"], [_snap("barber", 6)], 1, "1 month")

        assert c.current_avg_rank == 0
        assert c.best_rank == 0

    def test_requires_keywords(self):
        with pytest.raises(ValueError):
            build_campaign([], [], 1, "1 month")
