"""順位グリッドの集計・編集モジュール.

グリッドは grid[r][c] の 2 次元リストで、各セルは検索順位 (1 が最上位) か
None (未計測)。集計関数は入力を変更せず、常に新しい値を返す。
"""

from __future__ import annotations

import math
import random
import re
import uuid
from datetime import date

from rank_grid.config import (
    CELL_RANK_MAX,
    CELL_RANK_MIN,
    COLD_RANK_THRESHOLD,
    DEFAULT_COLS,
    DEFAULT_KEYWORD,
    DEFAULT_LOCATION,
    DEFAULT_ROWS,
    VISIBILITY_RANK_CAP,
)
from rank_grid.models import Grid, Metrics, Snapshot

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

PLACEHOLDER = "—"


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def is_rank(x) -> bool:
    """有限の数値セルか. None・文字列・bool・NaN・inf は計測値として扱わない."""
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


def _filled_values(grid: Grid) -> list[float]:
    """計測値 (is_rank) のセルだけを行優先で返す."""
    return [x for row in grid for x in row if is_rank(x)]


def metrics(grid: Grid) -> Metrics:
    """グリッドの集計値を算出する.

    - avg: 計測済みセルの算術平均。計測済みセルがなければ NaN
    - med: 昇順ソートした計測済みセルの floor(n/2) 番目の値
    - top3 / top10: 3 位以内 / 10 位以内のセル数
    - vis_score: 1 位を 100、20 位以下を 5 とする線形スコアの平均
    - coverage: 計測済みセルの割合 (%)

    不正なグリッドでも例外は投げず、NaN / 0 で「データなし」を表す。
    """
    flat = _filled_values(grid)
    width = max((len(row) for row in grid), default=0)
    total = len(grid) * width
    n = len(flat)

    avg = sum(flat) / n if n else math.nan
    med = sorted(flat)[n // 2] if n else math.nan
    top3 = sum(1 for x in flat if x <= 3)
    top10 = sum(1 for x in flat if x <= 10)
    vis_score = (
        sum(VISIBILITY_RANK_CAP + 1 - clamp(x, 1, VISIBILITY_RANK_CAP) for x in flat)
        / (n * VISIBILITY_RANK_CAP)
        * 100
        if n
        else 0.0
    )
    coverage = n / total * 100 if total else 0.0

    return Metrics(
        avg=avg,
        med=med,
        top3=top3,
        top10=top10,
        vis_score=vis_score,
        coverage=coverage,
        cells=total,
        filled=n,
    )


def display(value: float | None, digits: int = 1) -> str:
    """集計値を表示用文字列にする. NaN・None はプレースホルダ."""
    if value is None or math.isnan(value):
        return PLACEHOLDER
    return f"{value:.{digits}f}"


def make_grid(rows: int, cols: int, fill: int | None = None) -> Grid:
    return [[fill for _ in range(cols)] for _ in range(rows)]


def resize_grid(grid: Grid, rows: int, cols: int) -> Grid:
    """行数・列数を変更する. 重なる範囲の値は引き継ぎ、新しいセルは None."""
    resized = make_grid(rows, cols)
    for r in range(min(rows, len(grid))):
        for c in range(min(cols, len(grid[r]))):
            resized[r][c] = grid[r][c]
    return resized


def parse_cell(value: str) -> int | None:
    """セル入力文字列を順位に変換する.

    空欄は None。先頭の整数部分を読み取り、読めなければ 0 として
    CELL_RANK_MIN..CELL_RANK_MAX に丸める。
    """
    if value.strip() == "":
        return None
    m = _LEADING_INT.match(value)
    n = int(m.group(1)) if m else 0
    return int(clamp(n, CELL_RANK_MIN, CELL_RANK_MAX))


def set_cell(grid: Grid, r: int, c: int, value: str) -> Grid:
    """(r, c) を書き換えた新しいグリッドを返す."""
    return [
        [parse_cell(value) if (ri, ci) == (r, c) else v for ci, v in enumerate(row)]
        for ri, row in enumerate(grid)
    ]


def demo_grid(
    rows: int = DEFAULT_ROWS,
    cols: int = DEFAULT_COLS,
    rng: random.Random | None = None,
) -> Grid:
    """中心ほど順位が良いサンプルグリッドを生成する."""
    rng = rng or random.Random()
    mid_r = (rows - 1) / 2
    mid_c = (cols - 1) / 2
    grid = make_grid(rows, cols)
    for r in range(rows):
        for c in range(cols):
            d = math.hypot(r - mid_r, c - mid_c)
            base = math.floor(1 + d * 3 + rng.random() * 2 + 0.5)
            grid[r][c] = int(clamp(base, 1, VISIBILITY_RANK_CAP))
    return grid


def demo_snapshot(
    keyword: str = DEFAULT_KEYWORD,
    rows: int = DEFAULT_ROWS,
    cols: int = DEFAULT_COLS,
    rng: random.Random | None = None,
) -> Snapshot:
    return Snapshot(
        id=str(uuid.uuid4()),
        date=date.today().isoformat(),
        keyword=keyword,
        rows=rows,
        cols=cols,
        grid=demo_grid(rows, cols, rng),
        notes="Synthetic demo",
        location=DEFAULT_LOCATION,
    )


def cold_spot_suggestions(snapshot: Snapshot) -> list[str]:
    """順位が 10 位より悪いセル (コールドスポット) への施策案を返す."""
    cold = 0
    worst = (0, 0, 0)  # (row, col, rank)
    for r in range(snapshot.rows):
        row = snapshot.grid[r] if r < len(snapshot.grid) else []
        for c in range(snapshot.cols):
            val = row[c] if c < len(row) else None
            if not is_rank(val):
                continue
            if val > COLD_RANK_THRESHOLD:
                cold += 1
                if val > worst[2]:
                    worst = (r, c, val)

    if not cold:
        return [
            "No cold spots (rank > 10). Keep going: add fresh photos to GBP "
            "and sustain review velocity.",
        ]

    r, c, rank = worst
    first_word = snapshot.keyword.split(" ")[0]
    return [
        f"Focus on {cold} cold cells (>10). Prioritize worst cell at row {r + 1}, "
        f"col {c + 1} (rank {rank}).",
        "Publish a GBP post targeting this sub-area; name nearby anchors "
        "(parks, cafés, LRT). Link with UTM (source=google, medium=gbp).",
        f"On the site's {first_word} page, add a short paragraph mentioning "
        f"{snapshot.keyword} in Bridgeland/Riverside with walking directions.",
        "Earn a local link (BIA/event/neighbor). Even one high-quality "
        "neighborhood link can lift a quadrant of the grid.",
        "Upload 4-6 new georelevant photos this week (exterior/interior/team/tools).",
    ]
