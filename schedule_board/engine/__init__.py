"""
ジェスチャー → タイムグリッド インタラクションエンジン

このパッケージには、時刻とピクセルの変換、重なり予定のレイアウト解決、
入力ジェスチャーを操作に変換するステートマシンが含まれています。
"""

from .time_grid import TimeGrid
from .geometry import BoardGeometry
from .layout import LaidOutEvent, resolve_collisions, max_simultaneous_overlap
from .interaction import (
    GesturePhase, PendingKind, GestureThresholds, InteractionState,
    GesturePreview, InteractionStateMachine
)

__all__ = [
    # タイムグリッド
    "TimeGrid",
    "BoardGeometry",

    # レイアウト
    "LaidOutEvent",
    "resolve_collisions",
    "max_simultaneous_overlap",

    # インタラクション
    "GesturePhase",
    "PendingKind",
    "GestureThresholds",
    "InteractionState",
    "GesturePreview",
    "InteractionStateMachine",
]
