"""alerts モジュールのユニットテスト."""

from rank_grid.alerts import generate_alerts
from rank_grid.models import Snapshot


def _snapshot(grid, date="2026-01-01", keyword="barber calgary") -> Snapshot:
    return Snapshot(
        id=f"snap-{date}",
        date=date,
        keyword=keyword,
        rows=len(grid),
        cols=len(grid[0]),
        grid=grid,
    )


class TestGenerateAlerts:
    """generate_alerts のテスト."""

    def test_no_history(self):
        assert generate_alerts(_snapshot([[1, 2]]), []) == []

    def test_improvement_only(self):
        """平均順位が 2 改善し、TOP3 数が変わらなければ improvement のみ."""
        prior = [_snapshot([[8, 8]])]
        alerts = generate_alerts(_snapshot([[6, 6]], "2026-01-08"), prior)

        assert len(alerts) == 1
        assert alerts[0].type == "improvement"
        assert alerts[0].severity == "medium"
        assert alerts[0].message == 'Ranking improved by 2.0 positions for "barber calgary"'

    def test_decline(self):
        alerts = generate_alerts(_snapshot([[9]], "2026-01-08"), [_snapshot([[5]])])

        assert [a.type for a in alerts] == ["decline"]
        assert alerts[0].severity == "high"
        assert alerts[0].message == 'Ranking declined by 4.0 positions for "barber calgary"'

    def test_milestone(self):
        alerts = generate_alerts(_snapshot([[3, 5]], "2026-01-08"), [_snapshot([[4, 4]])])

        assert [a.type for a in alerts] == ["milestone"]
        assert alerts[0].severity == "low"
        assert alerts[0].message == 'Achieved 1 top-3 rankings for "barber calgary"'

    def test_multiple_alerts(self):
        alerts = generate_alerts(_snapshot([[1, 2]], "2026-01-08"), [_snapshot([[10, 10]])])

        assert [a.type for a in alerts] == ["improvement", "milestone"]

    def test_delta_of_one_is_not_enough(self):
        assert generate_alerts(_snapshot([[4]], "2026-01-08"), [_snapshot([[5]])]) == []

    def test_compares_with_last_prior(self):
        """履歴の末尾 (直近) と比較すること."""
        prior = [_snapshot([[15]], "2026-01-01"), _snapshot([[6]], "2026-01-08")]
        alerts = generate_alerts(_snapshot([[6]], "2026-01-15"), prior)

        assert alerts == []

    def test_prior_without_data(self):
        """直近に平均順位がなければ順位変動アラートは出さないこと."""
        alerts = generate_alerts(_snapshot([[2]], "2026-01-08"), [_snapshot([[None]])])

        assert [a.type for a in alerts] == ["milestone"]

    def test_alert_fields(self):
        alerts = generate_alerts(_snapshot([[1]], "2026-01-08"), [_snapshot([[9]])])

        ids = {a.id for a in alerts}
        assert len(ids) == len(alerts)
        assert all(a.timestamp for a in alerts)

    def test_does_not_mutate_inputs(self):
        current = _snapshot([[1]], "2026-01-08")
        prior = [_snapshot([[9]])]
        generate_alerts(current, prior)

        assert current.alerts is None
        assert len(prior) == 1
