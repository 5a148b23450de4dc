"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- 入出力 ---
STATE_FILE = Path(
    os.environ.get("RANK_GRID_STATE_FILE", _PROJECT_ROOT / "rank_grid_state.json")
)

# --- グリッド既定値 ---
DEFAULT_ROWS = 5
DEFAULT_COLS = 5
DEFAULT_KEYWORD = "southern alberta wedding venues"
DEFAULT_LOCATION = os.environ.get("RANK_GRID_DEFAULT_LOCATION", "High River, AB")

# --- 順位の範囲 ---
CELL_RANK_MIN = 1
CELL_RANK_MAX = 50  # 手入力セルの上限
VISIBILITY_RANK_CAP = 20  # 20 位以下は一律 5 点
COLD_RANK_THRESHOLD = 10  # これより悪いセルをコールドスポットとする

# --- アラート ---
ALERT_RANK_DELTA = 1.0

# --- 予測 ---
FORECAST_RANK_MIN = 1
FORECAST_RANK_MAX = 20
TREND_SLOPE_THRESHOLD = 0.1
CONFIDENCE_VARIANCE_WEIGHT = 10
NEXT_MONTH_STEPS = 3  # 翌週から数えて 3 スナップショット先

# --- ログ ---
LOG_DIR = Path(os.environ.get("RANK_GRID_LOG_DIR", _PROJECT_ROOT / "logs"))
