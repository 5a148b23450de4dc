"""スナップショット間の差分からアラートを生成するモジュール."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from rank_grid.config import ALERT_RANK_DELTA
from rank_grid.grid import metrics
from rank_grid.models import Alert, Snapshot

logger = logging.getLogger(__name__)


def _alert(alert_type: str, message: str, severity: str, timestamp: str) -> Alert:
    return Alert(
        id=str(uuid.uuid4()),
        type=alert_type,
        message=message,
        severity=severity,
        timestamp=timestamp,
    )


def generate_alerts(current: Snapshot, prior_snapshots: list[Snapshot]) -> list[Alert]:
    """直近のスナップショットと比較してアラートを生成する.

    Args:
        current: 保存しようとしているスナップショット
        prior_snapshots: 保存済みスナップショット (古い順。末尾が直近)

    Returns:
        improvement / decline / milestone のアラート。該当なしなら空リスト。
    """
    if not prior_snapshots:
        return []

    cur = metrics(current.grid)
    last = metrics(prior_snapshots[-1].grid)
    timestamp = datetime.now(timezone.utc).isoformat()
    keyword = current.keyword
    alerts: list[Alert] = []

    # 順位は数値が小さいほど良い
    if cur.avg < last.avg - ALERT_RANK_DELTA:
        alerts.append(_alert(
            "improvement",
            f'Ranking improved by {last.avg - cur.avg:.1f} positions for "{keyword}"',
            "medium",
            timestamp,
        ))

    if cur.avg > last.avg + ALERT_RANK_DELTA:
        alerts.append(_alert(
            "decline",
            f'Ranking declined by {cur.avg - last.avg:.1f} positions for "{keyword}"',
            "high",
            timestamp,
        ))

    if cur.top3 > last.top3:
        alerts.append(_alert(
            "milestone",
            f'Achieved {cur.top3} top-3 rankings for "{keyword}"',
            "low",
            timestamp,
        ))

    if alerts:
        logger.debug("アラート %d 件: keyword=%s", len(alerts), keyword)
    return alerts
