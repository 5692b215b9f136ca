"""
データモデル - Time-Grid Scheduling Board

このパッケージには、予定ブロック・入力サンプル・確定操作のモデルが含まれています。
"""

from .schedule import (
    ScheduleEvent, ScheduleDraft, RawScheduleRow,
    OFFICIAL_SCHEDULE_NAME, MINUTES_PER_DAY,
    parse_hhmm, format_minutes, normalize_hhmm
)
from .operations import (
    Operation, OperationKind, CreateSource, ResizeEdge,
    CreateOperation, MoveOperation, ResizeOperation, DeleteOperation,
    SelectionToggleOperation, OpenEditorOperation
)
from .input import (
    InputDevice, SampleType, TargetKind, HitTarget, PointerSample, InputResult
)

__all__ = [
    # 予定関連
    "ScheduleEvent",
    "ScheduleDraft",
    "RawScheduleRow",
    "OFFICIAL_SCHEDULE_NAME",
    "MINUTES_PER_DAY",
    "parse_hhmm",
    "format_minutes",
    "normalize_hhmm",

    # 操作関連
    "Operation",
    "OperationKind",
    "CreateSource",
    "ResizeEdge",
    "CreateOperation",
    "MoveOperation",
    "ResizeOperation",
    "DeleteOperation",
    "SelectionToggleOperation",
    "OpenEditorOperation",

    # 入力関連
    "InputDevice",
    "SampleType",
    "TargetKind",
    "HitTarget",
    "PointerSample",
    "InputResult",
]
