"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass, field

Grid = list[list[int | None]]


@dataclass
class CompetitorData:
    """競合店舗の順位."""

    name: str
    rank: int
    url: str | None = None
    notes: str | None = None  # 所在地など


@dataclass
class Alert:
    """スナップショット保存時に発生するアラート."""

    id: str  # uuid
    type: str  # "improvement" | "decline" | "milestone" | "competitor"
    message: str
    severity: str  # "low" | "medium" | "high"
    timestamp: str  # ISO 8601


@dataclass
class Snapshot:
    """あるキーワードの順位グリッドを1回分記録したもの."""

    id: str  # uuid
    date: str  # YYYY-MM-DD
    keyword: str
    rows: int
    cols: int
    grid: Grid  # grid[r][c], None = 未計測
    notes: str | None = None
    competitors: list[CompetitorData] | None = None
    alerts: list[Alert] | None = None
    location: str | None = None
    device: str | None = None  # "mobile" or "desktop"
    search_type: str | None = None  # "local" | "organic" | "maps"


@dataclass
class RankingGoal:
    """キーワードごとの目標順位."""

    id: str  # uuid
    keyword: str
    target_rank: int
    current_rank: float | None = None
    deadline: str | None = None  # YYYY-MM-DD
    priority: str = "medium"  # "low" | "medium" | "high"


@dataclass
class Metrics:
    """グリッドから算出する集計値. 保存はせず毎回計算する."""

    avg: float  # NaN = データなし
    med: float  # NaN = データなし
    top3: int
    top10: int
    vis_score: float  # 0..100
    coverage: float  # 0..100 (%)
    cells: int  # グリッドの総セル数
    filled: int  # 順位が入っているセル数


@dataclass
class Forecast:
    """平均順位の線形予測."""

    next_week: float
    next_month: float
    trend: str  # "improving" | "stable" | "declining"
    confidence: float  # 0..100


@dataclass
class CompetitorInsights:
    ahead: int  # 自店より上位の競合数
    behind: int
    closest_competitor: int | None  # 上位競合のうち最も良い順位
    market_position: int


@dataclass
class KeywordStat:
    keyword: str
    avg_rank: float
    count: int
    potential: float = 0.0  # TOP3 までの改善余地


@dataclass
class KeywordPerformance:
    current_rank: float
    previous_rank: float | None = None
    trend: str = "stable"  # "up" | "down" | "stable"
    velocity: float = 0.0


@dataclass
class RankingAnalytics:
    """スナップショット全体の集計."""

    total_keywords: int
    avg_rank: float
    top10_count: int
    top3_count: int
    improvement_rate: float
    keyword_performance: dict[str, KeywordPerformance] = field(default_factory=dict)


@dataclass
class RankingCampaign:
    id: str
    name: str
    description: str
    target_keywords: list[str]
    start_date: str  # YYYY-MM-DD
    target_rank: int
    timeframe: str
    current_avg_rank: float
    best_rank: float
    improvement: float
    status: str = "active"  # "draft" | "active" | "completed" | "paused"
    budget: float | None = None


@dataclass
class RankGridState:
    """呼び出し側が保持するアプリケーション状態.

    snapshots は古い順、alerts は新しい順に並ぶ。
    competitors は次に保存するスナップショットへ添付する競合データ。
    """

    snapshots: list[Snapshot] = field(default_factory=list)
    competitors: list[CompetitorData] = field(default_factory=list)
    goals: list[RankingGoal] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)
