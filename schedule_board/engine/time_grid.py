"""
タイムグリッドモデル

ピクセルオフセットと時刻（0時からの経過分）の相互変換、およびスナップ（量子化）を
提供します。状態は持たず、すべて設定値から計算します。
"""

import math
from typing import List

from pydantic import BaseModel, Field, validator

from ..models.schedule import MINUTES_PER_DAY, format_minutes


def _round_half_up(value: float) -> int:
    """四捨五入（0.5は常に切り上げ）"""
    return int(math.floor(value + 0.5))


class TimeGrid(BaseModel):
    """表示時間帯・行の高さ・スナップ間隔から定まるタイムグリッド"""
    start_hour: int = Field(default=8, description="表示開始時刻（時）")
    end_hour: int = Field(default=24, description="表示終了時刻（時）")
    row_height_px: float = Field(default=50.0, description="1時間あたりの行の高さ（px）")
    snap_minutes: int = Field(default=15, description="スナップ間隔（分）")

    class Config:
        """Pydantic設定"""
        frozen = True

    @validator('end_hour')
    def validate_hours(cls, v, values):
        """表示時間帯の検証"""
        if v > 24:
            raise ValueError('表示終了時刻は24時以下である必要があります')
        if 'start_hour' in values and v <= values['start_hour']:
            raise ValueError('表示終了時刻は開始時刻より後である必要があります')
        return v

    @validator('start_hour')
    def validate_start_hour(cls, v):
        """表示開始時刻の検証"""
        if v < 0 or v > 23:
            raise ValueError('表示開始時刻は0-23の範囲である必要があります')
        return v

    @validator('row_height_px')
    def validate_row_height(cls, v):
        """行の高さの検証"""
        if v <= 0:
            raise ValueError('行の高さは正の値である必要があります')
        return v

    @validator('snap_minutes')
    def validate_snap_minutes(cls, v):
        """スナップ間隔の検証"""
        if v <= 0 or 60 % v != 0:
            raise ValueError('スナップ間隔は60を割り切る正の分数である必要があります')
        return v

    @property
    def pixels_per_minute(self) -> float:
        """1分あたりのピクセル数"""
        return self.row_height_px / 60

    @property
    def snap_interval_px(self) -> float:
        """スナップ間隔のピクセル数"""
        return self.snap_minutes * self.pixels_per_minute

    @property
    def window_start_minutes(self) -> int:
        """表示開始時刻（0時からの経過分）"""
        return self.start_hour * 60

    @property
    def window_end_minutes(self) -> int:
        """表示終了時刻（0時からの経過分）"""
        return self.end_hour * 60

    @property
    def grid_height_px(self) -> float:
        """グリッド全体の高さ（px）"""
        return (self.end_hour - self.start_hour) * self.row_height_px

    def hours(self) -> List[int]:
        """行ラベルとなる時刻の一覧"""
        return list(range(self.start_hour, self.end_hour))

    def hour_labels(self) -> List[str]:
        """行ラベル（HH:00）の一覧"""
        return [f"{hour:02d}:00" for hour in self.hours()]

    def time_to_pixel(self, minutes: float) -> float:
        """時刻（0時からの経過分）をグリッド上端からのピクセルオフセットに変換"""
        return (minutes - self.window_start_minutes) * self.pixels_per_minute

    def pixel_to_minutes(self, pixel_offset: float) -> int:
        """ピクセルオフセットを最も近いスナップ間隔の時刻（分）に変換"""
        raw_minutes = self.window_start_minutes + pixel_offset / self.pixels_per_minute
        snapped = _round_half_up(raw_minutes / self.snap_minutes) * self.snap_minutes
        # 1日の範囲外は端に寄せる
        return max(0, min(MINUTES_PER_DAY, snapped))

    def pixel_to_time(self, pixel_offset: float) -> str:
        """ピクセルオフセットを "HH:MM" に変換（スナップ済み、60分は次の時に繰り上げ）"""
        return format_minutes(self.pixel_to_minutes(pixel_offset))

    def snap_pixel(self, pixel_offset: float) -> float:
        """ピクセルオフセットを最も近いスナップ間隔の倍数に丸める"""
        return _round_half_up(pixel_offset / self.snap_interval_px) * self.snap_interval_px

    def clamp_pixel(self, pixel_offset: float) -> float:
        """ピクセルオフセットをグリッドの範囲内に収める"""
        return max(0.0, min(self.grid_height_px, pixel_offset))

    def starts_in_window(self, minutes: int) -> bool:
        """その時刻に始まる予定を描画できるか（表示開始以上、表示終了未満）"""
        return self.window_start_minutes <= minutes < self.window_end_minutes
