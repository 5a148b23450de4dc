"""アプリケーション状態の更新・シリアライズモジュール.

RankGridState は呼び出し側が保持する値で、ここの関数はいずれも
元の状態を変更せず新しい状態を返す。
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import asdict, replace
from pathlib import Path

from rank_grid.alerts import generate_alerts
from rank_grid.grid import metrics
from rank_grid.models import (
    Alert,
    CompetitorData,
    RankGridState,
    RankingGoal,
    Snapshot,
)

logger = logging.getLogger(__name__)


def save_snapshot(state: RankGridState, snapshot: Snapshot) -> RankGridState:
    """スナップショットを履歴に追加する.

    保留中の競合データを添付し、直近の履歴と比較したアラートを
    スナップショットと状態の両方に記録する。保存後、保留中の競合データは空になる。
    """
    if state.competitors and not snapshot.competitors:
        snapshot = replace(snapshot, competitors=list(state.competitors))

    new_alerts = generate_alerts(snapshot, state.snapshots)
    if new_alerts:
        snapshot = replace(snapshot, alerts=new_alerts)

    logger.info(
        "スナップショット保存: keyword=%s, date=%s, alerts=%d",
        snapshot.keyword, snapshot.date, len(new_alerts),
    )
    return RankGridState(
        snapshots=[*state.snapshots, snapshot],
        competitors=[],
        goals=list(state.goals),
        alerts=[*new_alerts, *state.alerts],
    )


def add_competitor(state: RankGridState, competitor: CompetitorData) -> RankGridState:
    return replace(state, competitors=[*state.competitors, competitor])


def latest_rank(state: RankGridState, keyword: str) -> float | None:
    """キーワードの最新スナップショットの平均順位. なければ None."""
    for s in reversed(state.snapshots):
        if s.keyword == keyword:
            avg = metrics(s.grid).avg
            return None if math.isnan(avg) else avg
    return None


def add_goal(
    state: RankGridState,
    keyword: str,
    target_rank: int,
    deadline: str | None = None,
    priority: str = "medium",
) -> RankGridState:
    goal = RankingGoal(
        id=str(uuid.uuid4()),
        keyword=keyword,
        target_rank=target_rank,
        current_rank=latest_rank(state, keyword),
        deadline=deadline,
        priority=priority,
    )
    return replace(state, goals=[*state.goals, goal])


def remove_goal(state: RankGridState, goal_id: str) -> RankGridState:
    return replace(state, goals=[g for g in state.goals if g.id != goal_id])


def clear_all(state: RankGridState) -> RankGridState:
    logger.info("全データ削除: snapshots=%d", len(state.snapshots))
    return RankGridState()


# --- シリアライズ ---


def state_to_dict(state: RankGridState) -> dict:
    return asdict(state)


def _alert_from_dict(d: dict) -> Alert:
    return Alert(
        id=d["id"],
        type=d["type"],
        message=d["message"],
        severity=d["severity"],
        timestamp=d["timestamp"],
    )


def _competitor_from_dict(d: dict) -> CompetitorData:
    return CompetitorData(
        name=d["name"],
        rank=int(d["rank"]),
        url=d.get("url"),
        notes=d.get("notes"),
    )


def _snapshot_from_dict(d: dict) -> Snapshot:
    competitors = d.get("competitors")
    alerts = d.get("alerts")
    return Snapshot(
        id=d["id"],
        date=d["date"],
        keyword=d["keyword"],
        rows=int(d["rows"]),
        cols=int(d["cols"]),
        grid=[list(row) for row in d["grid"]],
        notes=d.get("notes"),
        competitors=[_competitor_from_dict(c) for c in competitors] if competitors is not None else None,
        alerts=[_alert_from_dict(a) for a in alerts] if alerts is not None else None,
        location=d.get("location"),
        device=d.get("device"),
        search_type=d.get("search_type"),
    )


def _goal_from_dict(d: dict) -> RankingGoal:
    return RankingGoal(
        id=d["id"],
        keyword=d["keyword"],
        target_rank=int(d["target_rank"]),
        current_rank=d.get("current_rank"),
        deadline=d.get("deadline"),
        priority=d.get("priority", "medium"),
    )


def state_from_dict(d: dict) -> RankGridState:
    """dict から状態を復元する. dict でなければ TypeError、必須キーが欠けていれば KeyError."""
    if not isinstance(d, dict):
        raise TypeError(f"state must be a JSON object, got {type(d).__name__}")
    return RankGridState(
        snapshots=[_snapshot_from_dict(s) for s in d.get("snapshots", [])],
        competitors=[_competitor_from_dict(c) for c in d.get("competitors", [])],
        goals=[_goal_from_dict(g) for g in d.get("goals", [])],
        alerts=[_alert_from_dict(a) for a in d.get("alerts", [])],
    )


def dumps_state(state: RankGridState) -> str:
    return json.dumps(state_to_dict(state), ensure_ascii=False, indent=2)


def loads_state(text: str) -> RankGridState:
    return state_from_dict(json.loads(text))


def load_state(path: Path) -> RankGridState | None:
    """状態ファイルを読み込む.

    Returns:
        RankGridState。ファイルがない・壊れている場合は None。
    """
    if not path.exists():
        logger.warning("状態ファイルがありません: %s", path)
        return None

    try:
        return loads_state(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.error("状態ファイル読み込み失敗: path=%s, error=%s", path, e)
        return None
