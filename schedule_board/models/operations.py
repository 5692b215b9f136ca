"""
スケジュール操作モデル

インタラクションエンジンがジェスチャー完了時に確定させる操作を表現します。
1つの入力シーケンスから確定する操作は高々1つです。
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from .schedule import ScheduleEvent


class OperationKind(str, Enum):
    """操作種別"""
    CREATE = "create"                  # 新規作成
    MOVE = "move"                      # 移動
    RESIZE = "resize"                  # 伸縮
    DELETE = "delete"                  # 削除
    SELECTION_TOGGLE = "selection"     # 削除候補の選択切替（表示のみ）
    OPEN_EDITOR = "open_editor"        # 編集フォームを開く


class CreateSource(str, Enum):
    """作成操作の発生元ジェスチャー"""
    DRAG = "drag"                  # 長押し（マウスは押下）からのドラッグ
    DOUBLE_TAP = "double_tap"      # 空きセルのダブルタップ
    DOUBLE_CLICK = "double_click"  # 空きセルのダブルクリック


class ResizeEdge(str, Enum):
    """伸縮する辺"""
    TOP = "top"
    BOTTOM = "bottom"


class CreateOperation(BaseModel):
    """新規作成操作（詳細はフォームで入力）"""
    kind: OperationKind = Field(default=OperationKind.CREATE)
    person: str = Field(..., description="作成対象の列（人）")
    date: str = Field(..., description="日付キー")
    start_time: str = Field(..., description="開始時刻 HH:MM")
    end_time: str = Field(..., description="終了時刻 HH:MM")
    source: CreateSource = Field(default=CreateSource.DRAG, description="発生元ジェスチャー")


class MoveOperation(BaseModel):
    """移動操作（列の変更を含む、長さは維持）"""
    kind: OperationKind = Field(default=OperationKind.MOVE)
    event: ScheduleEvent = Field(..., description="移動前の予定")
    new_person: str = Field(..., description="移動先の列（人）")
    new_start: str = Field(..., description="新しい開始時刻")
    new_end: str = Field(..., description="新しい終了時刻")

    def updated_event(self) -> ScheduleEvent:
        """移動後の予定を返す"""
        return self.event.with_times(self.new_start, self.new_end, name=self.new_person)


class ResizeOperation(BaseModel):
    """伸縮操作（片方の辺のみ変更）"""
    kind: OperationKind = Field(default=OperationKind.RESIZE)
    event: ScheduleEvent = Field(..., description="伸縮前の予定")
    edge: ResizeEdge = Field(..., description="動かした辺")
    new_start: Optional[str] = Field(None, description="新しい開始時刻（上辺の場合）")
    new_end: Optional[str] = Field(None, description="新しい終了時刻（下辺の場合）")

    def updated_event(self) -> ScheduleEvent:
        """伸縮後の予定を返す"""
        if self.edge == ResizeEdge.TOP:
            return self.event.with_times(self.new_start, self.event.end)
        return self.event.with_times(self.event.start, self.new_end)


class DeleteOperation(BaseModel):
    """削除操作"""
    kind: OperationKind = Field(default=OperationKind.DELETE)
    event: ScheduleEvent = Field(..., description="削除する予定")


class SelectionToggleOperation(BaseModel):
    """削除候補表示の切替（バックエンドへの影響なし）"""
    kind: OperationKind = Field(default=OperationKind.SELECTION_TOGGLE)
    event_id: Optional[str] = Field(None, description="選択された予定ID（解除時は直前の選択）")
    selected: bool = Field(..., description="選択状態")


class OpenEditorOperation(BaseModel):
    """既存の予定の編集フォームを開く"""
    kind: OperationKind = Field(default=OperationKind.OPEN_EDITOR)
    event: ScheduleEvent = Field(..., description="編集する予定")


Operation = Union[
    CreateOperation,
    MoveOperation,
    ResizeOperation,
    DeleteOperation,
    SelectionToggleOperation,
    OpenEditorOperation,
]
