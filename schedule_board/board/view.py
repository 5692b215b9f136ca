"""
ボード表示モデル

描画に必要な情報（列の並び・時刻ラベル・レーン割り当て済みの予定ブロック）を
1つのスナップショットにまとめます。スナップショットは描画ごとに作り直し、保存しません。
"""

from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from ..engine.geometry import BoardGeometry
from ..engine.layout import resolve_collisions
from ..models.schedule import OFFICIAL_SCHEDULE_NAME, ScheduleEvent


class EventView(BaseModel):
    """描画用の予定ブロック"""
    event: ScheduleEvent = Field(..., description="予定")
    top_px: float = Field(..., description="上辺（グリッド座標）")
    height_px: float = Field(..., description="高さ")
    column_index: int = Field(..., description="レーン番号")
    column_count: int = Field(..., description="レーン数")
    left_percent: float = Field(..., description="列内の左端位置（%）")
    width_percent: float = Field(..., description="列内の幅（%）")
    is_official: bool = Field(default=False, description="公式予定か")
    is_selected: bool = Field(default=False, description="削除候補として選択中か")


class ColumnView(BaseModel):
    """描画用の列（人）"""
    person: str = Field(..., description="列の所有者")
    left_px: float = Field(..., description="列の左端X座標")
    is_official: bool = Field(default=False, description="公式予定の列か")
    events: List[EventView] = Field(default_factory=list, description="列内の予定ブロック")


class BoardSnapshot(BaseModel):
    """ボード全体の描画情報"""
    date: str = Field(..., description="表示中の日付キー")
    people: List[str] = Field(default_factory=list, description="ヘッダーの列（人）")
    hour_labels: List[str] = Field(default_factory=list, description="時刻ラベル")
    columns: List[ColumnView] = Field(default_factory=list, description="列ごとの描画情報")
    grid_height_px: float = Field(..., description="グリッドの高さ")
    content_width_px: float = Field(..., description="コンテンツ全体の幅")
    selected_event_id: Optional[str] = Field(None, description="選択中の予定ID")

    def column(self, person: str) -> Optional[ColumnView]:
        """列を名前で取得"""
        for column in self.columns:
            if column.person == person:
                return column
        return None


def derive_people(
    known_people: Iterable[str],
    events: Iterable[ScheduleEvent],
    date: str,
    official_name: str = OFFICIAL_SCHEDULE_NAME
) -> List[str]:
    """
    表示する列（人）を決定

    既知の利用者と、その日に予定を持つ人の和集合を名前順に並べ、
    公式予定の列があれば先頭に固定します。
    """
    names = {name for name in known_people if name}
    names.update(event.name for event in events if event.date == date)

    people = sorted(names)
    if official_name in people:
        people = [official_name] + [p for p in people if p != official_name]
    return people


def build_snapshot(
    geometry: BoardGeometry,
    events: Iterable[ScheduleEvent],
    date: str,
    selected_event_id: Optional[str] = None,
    official_name: str = OFFICIAL_SCHEDULE_NAME
) -> BoardSnapshot:
    """列ごとにレイアウトを解決してスナップショットを作成"""
    grid = geometry.time_grid
    day_events = [event for event in events if event.date == date]

    columns = []
    for person in geometry.people:
        # 表示開始より前に始まる予定、表示終了以降に始まる予定は描画しない
        visible = [
            event for event in day_events
            if event.name == person
            and grid.starts_in_window(event.start_minutes)
        ]

        is_official = person == official_name
        views = []
        for laid_out in resolve_collisions(visible):
            top = geometry.event_top_px(laid_out.event)
            bottom = min(geometry.event_bottom_px(laid_out.event), grid.grid_height_px)
            views.append(EventView(
                event=laid_out.event,
                top_px=top,
                height_px=bottom - top,
                column_index=laid_out.column_index,
                column_count=laid_out.column_count,
                left_percent=laid_out.left_percent,
                width_percent=laid_out.width_percent,
                is_official=is_official,
                is_selected=laid_out.event.event_id == selected_event_id
            ))

        columns.append(ColumnView(
            person=person,
            left_px=geometry.column_left(person),
            is_official=is_official,
            events=views
        ))

    return BoardSnapshot(
        date=date,
        people=list(geometry.people),
        hour_labels=grid.hour_labels(),
        columns=columns,
        grid_height_px=grid.grid_height_px,
        content_width_px=geometry.content_width_px,
        selected_event_id=selected_event_id
    )
