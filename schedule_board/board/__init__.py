"""
Board Controller and Views
"""

from .view import BoardSnapshot, ColumnView, EventView, build_snapshot, derive_people
from .controller import (
    BoardController, CreationForm, ScheduleDataSource, ScheduleSyncTarget
)

__all__ = [
    # 表示
    "BoardSnapshot",
    "ColumnView",
    "EventView",
    "build_snapshot",
    "derive_people",

    # コントローラー
    "BoardController",
    "CreationForm",
    "ScheduleDataSource",
    "ScheduleSyncTarget",
]
