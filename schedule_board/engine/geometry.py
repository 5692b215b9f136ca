"""
ボードジオメトリ

ボードコンテンツ座標（ヘッダー行・時刻列を含む）とグリッド座標・列（人）の対応を扱います。
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.schedule import ScheduleEvent
from .time_grid import TimeGrid


class BoardGeometry(BaseModel):
    """列の並びと寸法"""
    people: List[str] = Field(default_factory=list, description="左から順の列（人）")
    time_grid: TimeGrid = Field(default_factory=TimeGrid, description="タイムグリッド")
    column_width_px: float = Field(default=110.0, description="人の列の幅")
    time_column_width_px: float = Field(default=60.0, description="時刻ラベル列の幅")
    header_height_px: float = Field(default=50.0, description="ヘッダー行の高さ")

    @property
    def grid_height_px(self) -> float:
        return self.time_grid.grid_height_px

    @property
    def content_width_px(self) -> float:
        """ボードコンテンツ全体の幅"""
        return self.time_column_width_px + len(self.people) * self.column_width_px

    def grid_y(self, y: float) -> float:
        """コンテンツY座標をグリッド上端基準に変換"""
        return y - self.header_height_px

    def person_at(self, x: float) -> Optional[str]:
        """X座標が含まれる列（人）を返す。どの列にも含まれなければ None"""
        offset = x - self.time_column_width_px
        if offset < 0:
            return None

        index = int(offset // self.column_width_px)
        if index >= len(self.people):
            return None
        return self.people[index]

    def column_left(self, person: str) -> float:
        """列の左端X座標"""
        index = self.people.index(person)
        return self.time_column_width_px + index * self.column_width_px

    def event_top_px(self, event: ScheduleEvent) -> float:
        """予定ブロック上辺のグリッドY座標"""
        return self.time_grid.time_to_pixel(event.start_minutes)

    def event_bottom_px(self, event: ScheduleEvent) -> float:
        """予定ブロック下辺のグリッドY座標"""
        return self.time_grid.time_to_pixel(event.end_minutes)

    def event_height_px(self, event: ScheduleEvent) -> float:
        """予定ブロックの高さ"""
        return event.duration_minutes() * self.time_grid.pixels_per_minute
