"""
入力サンプルモデル

ホスト（ブラウザ・GUI）から届く低レベルのポインタ／タッチ入力と、
エンジンがサンプルごとにホストへ返す指示を表現します。
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .operations import Operation
from .schedule import ScheduleEvent


class InputDevice(str, Enum):
    """入力デバイス種別"""
    MOUSE = "mouse"    # スクロールとの曖昧さなし
    TOUCH = "touch"    # 同じ指でスクロール・タップ・長押し・ドラッグを行う

    @property
    def supports_ambiguous_scroll(self) -> bool:
        """入力がネイティブスクロールと競合し得るか（保留フェーズが必要か）"""
        return self == InputDevice.TOUCH


class SampleType(str, Enum):
    """入力サンプル種別"""
    PRESS = "press"                # mousedown / touchstart
    MOVE = "move"                  # mousemove / touchmove
    RELEASE = "release"            # mouseup / touchend
    DOUBLE_CLICK = "double_click"  # ネイティブのダブルクリック
    SCROLL = "scroll"              # ネイティブスクロールの検出


class TargetKind(str, Enum):
    """入力の論理ターゲット種別"""
    EMPTY_CELL = "empty_cell"                  # ある人の列の空きセル
    EVENT_BODY = "event_body"                  # 予定ブロック本体
    EVENT_TOP_EDGE = "event_top_edge"          # 予定ブロック上辺（伸縮ハンドル）
    EVENT_BOTTOM_EDGE = "event_bottom_edge"    # 予定ブロック下辺（伸縮ハンドル）
    DELETE_BUTTON = "delete_button"            # 選択中ブロックの削除ボタン
    BACKGROUND = "background"                  # グリッド外の背景


class HitTarget(BaseModel):
    """入力サンプルの論理ターゲット"""
    kind: TargetKind = Field(..., description="ターゲット種別")
    person: Optional[str] = Field(None, description="空きセルの列（人）")
    event: Optional[ScheduleEvent] = Field(None, description="対象の予定ブロック")

    @property
    def is_resize_edge(self) -> bool:
        """伸縮ハンドルかチェック"""
        return self.kind in (TargetKind.EVENT_TOP_EDGE, TargetKind.EVENT_BOTTOM_EDGE)

    @classmethod
    def empty_cell(cls, person: str) -> "HitTarget":
        return cls(kind=TargetKind.EMPTY_CELL, person=person)

    @classmethod
    def event_body(cls, event: ScheduleEvent) -> "HitTarget":
        return cls(kind=TargetKind.EVENT_BODY, event=event, person=event.name)

    @classmethod
    def top_edge(cls, event: ScheduleEvent) -> "HitTarget":
        return cls(kind=TargetKind.EVENT_TOP_EDGE, event=event, person=event.name)

    @classmethod
    def bottom_edge(cls, event: ScheduleEvent) -> "HitTarget":
        return cls(kind=TargetKind.EVENT_BOTTOM_EDGE, event=event, person=event.name)

    @classmethod
    def delete_button(cls, event: ScheduleEvent) -> "HitTarget":
        return cls(kind=TargetKind.DELETE_BUTTON, event=event, person=event.name)

    @classmethod
    def background(cls) -> "HitTarget":
        return cls(kind=TargetKind.BACKGROUND)


class PointerSample(BaseModel):
    """低レベル入力サンプル（座標はボードコンテンツ座標、スクロール補正済み）"""
    sample_type: SampleType = Field(..., description="サンプル種別")
    device: InputDevice = Field(..., description="入力デバイス")
    x: float = Field(default=0.0, description="X座標（px）")
    y: float = Field(default=0.0, description="Y座標（px）")
    timestamp_ms: float = Field(..., description="発生時刻（ミリ秒、単調増加）")
    target: HitTarget = Field(default_factory=HitTarget.background, description="論理ターゲット")


class InputResult(BaseModel):
    """サンプル処理後にホストが行うべきこと"""
    operation: Optional[Operation] = Field(None, description="確定した操作")
    prevent_default: bool = Field(default=False, description="ネイティブスクロールを抑止するか")
    haptic: bool = Field(default=False, description="振動フィードバックを発火するか")
