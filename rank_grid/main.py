"""順位グリッド分析 — メインエントリーポイント.

処理フロー:
  1. 状態ファイル (JSON) からスナップショット履歴を読み込む
  2. キーワード単位でまとめる
  3. 各キーワードの最新グリッドを集計し、予測・コールドスポットを出す
  4. 全体の集計と上位キーワード・改善候補を出力する
"""

from __future__ import annotations

import logging
import sys
import time
from collections import defaultdict
from datetime import datetime
from pathlib import Path

from rank_grid.analytics import improvement_opportunities, ranking_analytics, top_keywords
from rank_grid.config import COLD_RANK_THRESHOLD, LOG_DIR, STATE_FILE
from rank_grid.forecast import forecast
from rank_grid.grid import cold_spot_suggestions, display, metrics
from rank_grid.models import Snapshot
from rank_grid.state import load_state


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"rank_grid_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def run(state_path: Path = STATE_FILE) -> None:
    """メイン処理."""
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("=== 順位グリッド分析 開始 ===")
    start_time = time.time()

    # 1. 状態ファイル読み込み
    state = load_state(state_path)
    if state is None or not state.snapshots:
        logger.warning("スナップショットがありません。終了します。")
        return

    logger.info("スナップショット: %d 件", len(state.snapshots))

    # 2. キーワード単位でグルーピング (履歴順を保つ)
    keyword_groups: dict[str, list[Snapshot]] = defaultdict(list)
    for s in state.snapshots:
        keyword_groups[s.keyword].append(s)

    logger.info("ユニークキーワード数: %d", len(keyword_groups))

    # 3. キーワードごとの集計
    for keyword, snapshots in keyword_groups.items():
        # 同じ日付なら後から追加したものを最新とする
        latest = max(reversed(snapshots), key=lambda s: s.date)
        m = metrics(latest.grid)
        logger.info(
            "%s (%s): 平均=%s, 中央値=%s, TOP3=%d, TOP10=%d, 可視性=%s, カバー率=%s%%",
            keyword, latest.date, display(m.avg), display(m.med),
            m.top3, m.top10, display(m.vis_score), display(m.coverage),
        )

        fc = forecast(snapshots)
        logger.info(
            "  予測: 翌週=%s, 翌月=%s, 傾向=%s, 信頼度=%s",
            display(fc.next_week), display(fc.next_month), fc.trend, display(fc.confidence, 0),
        )

        for alert in latest.alerts or []:
            logger.info("  [%s/%s] %s", alert.type, alert.severity, alert.message)

        ideas = cold_spot_suggestions(latest)
        logger.info("  %d 位より悪いセルへの施策: %s", COLD_RANK_THRESHOLD, ideas[0])

    # 4. 全体集計
    analytics = ranking_analytics(state.snapshots)
    logger.info(
        "全体: キーワード=%d, 平均順位=%s, TOP10=%d, TOP3=%d, 改善率=%s",
        analytics.total_keywords, display(analytics.avg_rank),
        analytics.top10_count, analytics.top3_count,
        display(analytics.improvement_rate, 2),
    )
    for stat in top_keywords(state.snapshots):
        logger.info("  上位: %s (%s)", stat.keyword, display(stat.avg_rank))
    for stat in improvement_opportunities(state.snapshots):
        logger.info("  改善候補: %s (%s, 余地 %s)",
                    stat.keyword, display(stat.avg_rank), display(stat.potential))

    for goal in state.goals:
        logger.info("  目標: %s → %d 位 (現在 %s, 優先度 %s)",
                    goal.keyword, goal.target_rank, display(goal.current_rank), goal.priority)

    # サマリ
    elapsed = time.time() - start_time
    logger.info("=== 順位グリッド分析 完了 ===")
    logger.info("未読アラート: %d 件, 所要時間: %.1f 秒", len(state.alerts), elapsed)


def cli() -> None:
    run(Path(sys.argv[1]) if len(sys.argv) > 1 else STATE_FILE)


if __name__ == "__main__":
    cli()
