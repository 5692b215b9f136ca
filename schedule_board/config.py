"""
ボード設定

既定値は参照構成（08:00-24:00、行50px、列110px、15分スナップ）に合わせています。
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from .engine.time_grid import TimeGrid
from .models.schedule import OFFICIAL_SCHEDULE_NAME

SHEET_EXPORT_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"
SHEET_EDIT_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{sheet_id}/edit?usp=sharing"


def build_csv_export_url(sheet_id: str) -> str:
    """「リンクを知っている全員」共有シートのCSVエクスポートURL"""
    return SHEET_EXPORT_URL_TEMPLATE.format(sheet_id=sheet_id)


def build_edit_url(sheet_id: str) -> str:
    """利用者向けの直接編集URL"""
    return SHEET_EDIT_URL_TEMPLATE.format(sheet_id=sheet_id)


class BoardSettings(BaseModel):
    """ボード設定"""

    # データソース・同期先
    sheet_url: Optional[str] = Field(None, description="CSVエクスポートURL（未設定ならモックデータ）")
    sync_url: Optional[str] = Field(None, description="Google Apps Script Web App URL")
    sheet_edit_url: Optional[str] = Field(None, description="スプレッドシート編集画面のURL")
    request_timeout_seconds: float = Field(default=30.0, description="HTTPタイムアウト（秒）")

    # 表示
    default_date: str = Field(default="1.14", description="初期表示の日付キー")
    date_options: List[str] = Field(default_factory=lambda: ["1.14", "1.15"], description="日付切替の選択肢")
    official_name: str = Field(default=OFFICIAL_SCHEDULE_NAME, description="先頭固定の公式予定列")

    # グリッド寸法
    start_hour: int = Field(default=8, description="表示開始時刻（時）")
    end_hour: int = Field(default=24, description="表示終了時刻（時）")
    row_height_px: float = Field(default=50.0, description="1時間の行の高さ")
    snap_minutes: int = Field(default=15, description="スナップ間隔（分）")
    column_width_px: float = Field(default=110.0, description="人の列の幅")
    time_column_width_px: float = Field(default=60.0, description="時刻ラベル列の幅")
    header_height_px: float = Field(default=50.0, description="ヘッダー行の高さ")

    @validator('request_timeout_seconds')
    def validate_timeout(cls, v):
        """タイムアウトの検証"""
        if v <= 0:
            raise ValueError('タイムアウトは正の値である必要があります')
        return v

    def time_grid(self) -> TimeGrid:
        """設定からタイムグリッドを構築"""
        return TimeGrid(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            row_height_px=self.row_height_px,
            snap_minutes=self.snap_minutes
        )

    @classmethod
    def from_env(cls) -> "BoardSettings":
        """環境変数から設定を読み込む（未設定の項目は既定値）"""
        sheet_url = os.getenv("SCHEDULE_SHEET_URL")
        sheet_id = os.getenv("SCHEDULE_SHEET_ID")
        if not sheet_url and sheet_id:
            sheet_url = build_csv_export_url(sheet_id)

        data = {
            "sheet_url": sheet_url or None,
            "sync_url": os.getenv("SCHEDULE_SYNC_URL") or None,
            "sheet_edit_url": build_edit_url(sheet_id) if sheet_id else None,
        }

        optional_values = {
            "default_date": os.getenv("SCHEDULE_DEFAULT_DATE"),
            "start_hour": os.getenv("SCHEDULE_START_HOUR"),
            "end_hour": os.getenv("SCHEDULE_END_HOUR"),
            "snap_minutes": os.getenv("SCHEDULE_SNAP_MINUTES"),
            "official_name": os.getenv("SCHEDULE_OFFICIAL_NAME"),
        }
        for key, value in optional_values.items():
            if value:
                data[key] = value

        date_options = os.getenv("SCHEDULE_DATE_OPTIONS")
        if date_options:
            data["date_options"] = [d.strip() for d in date_options.split(",") if d.strip()]

        return cls(**data)
