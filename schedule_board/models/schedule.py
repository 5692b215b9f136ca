"""
ScheduleEvent エンティティモデル

ボード上の1つの予定ブロック（誰が・どの日に・何時から何時まで）を表現します。
時刻は "HH:MM" 文字列で保持し、計算用の分数（0時からの経過分）は常に
文字列から導出します。
"""

import re
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, validator

MINUTES_PER_DAY = 24 * 60

# 全員に関わる予定を表示する固定列
OFFICIAL_SCHEDULE_NAME = "공식 일정"

_HHMM_PATTERN = re.compile(r'^\s*(\d{1,2}):(\d{2})\s*$')


def parse_hhmm(value: str) -> int:
    """ "HH:MM" を0時からの経過分に変換"""
    match = _HHMM_PATTERN.match(value or "")
    if not match:
        raise ValueError(f'時刻は HH:MM 形式である必要があります: {value!r}')

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60:
        raise ValueError(f'分は0-59の範囲である必要があります: {value!r}')

    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f'時刻は24:00以下である必要があります: {value!r}')
    return total


def format_minutes(total_minutes: int) -> str:
    """0時からの経過分を "HH:MM" に変換（1440 は "24:00"）"""
    if total_minutes < 0 or total_minutes > MINUTES_PER_DAY:
        raise ValueError(f'分数は0-1440の範囲である必要があります: {total_minutes}')
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def normalize_hhmm(value: str) -> str:
    """ "9:5" のような揺れを "HH:MM" 形式に正規化"""
    return format_minutes(parse_hhmm(value))


class ScheduleEvent(BaseModel):
    """予定ブロックエンティティ"""

    # 基本識別情報
    event_id: str = Field(default_factory=lambda: str(uuid4()), description="UI追跡用の合成ID")
    name: str = Field(..., description="所有者名（列を識別）")
    date: str = Field(..., description="日付キー（例: 1.14）")

    # 時刻情報
    start: str = Field(..., description="開始時刻 HH:MM")
    end: str = Field(..., description="終了時刻 HH:MM")

    # 内容
    reason: str = Field(default="", description="予定の内容（自由記述）")

    class Config:
        """Pydantic設定"""
        frozen = True

    @validator('name', 'date')
    def validate_required_text(cls, v):
        """必須テキストの検証"""
        if not v or not v.strip():
            raise ValueError('名前と日付は必須です')
        return v.strip()

    @validator('start', 'end')
    def validate_time_format(cls, v):
        """時刻形式の検証"""
        return normalize_hhmm(v)

    @validator('end')
    def validate_end_after_start(cls, v, values):
        """終了時刻の検証"""
        if 'start' in values and parse_hhmm(v) <= parse_hhmm(values['start']):
            raise ValueError('終了時刻は開始時刻より後である必要があります')
        return v

    @validator('reason', pre=True)
    def validate_reason(cls, v):
        """内容の正規化"""
        return (v or "").strip()

    @property
    def start_minutes(self) -> int:
        """開始時刻（0時からの経過分）"""
        return parse_hhmm(self.start)

    @property
    def end_minutes(self) -> int:
        """終了時刻（0時からの経過分）"""
        return parse_hhmm(self.end)

    def duration_minutes(self) -> int:
        """予定の長さ（分）"""
        return self.end_minutes - self.start_minutes

    def overlaps_with(self, other: "ScheduleEvent") -> bool:
        """他の予定と重複するかチェック（接しているだけなら重複しない）"""
        return not (self.end_minutes <= other.start_minutes or other.end_minutes <= self.start_minutes)

    def with_times(self, start: str, end: str, name: Optional[str] = None) -> "ScheduleEvent":
        """時刻（と所有者）を差し替えた新しい予定を返す。IDは維持される"""
        return ScheduleEvent(
            event_id=self.event_id,
            name=name if name is not None else self.name,
            date=self.date,
            start=start,
            end=end,
            reason=self.reason
        )

    def to_sheet_row(self) -> Dict[str, Any]:
        """スプレッドシート行形式に変換（同期用）"""
        return {
            "name": self.name,
            "date": self.date,
            "start": self.start,
            "end": self.end,
            "reason": self.reason
        }


class ScheduleDraft(BaseModel):
    """作成・編集フォームの入力内容"""
    name: str = Field(..., description="名前")
    date: str = Field(..., description="日付キー")
    start_time: str = Field(..., description="開始時刻 HH:MM")
    end_time: str = Field(..., description="終了時刻 HH:MM")
    reason: str = Field(default="", description="予定の内容")

    @validator('start_time', 'end_time')
    def validate_time_format(cls, v):
        """時刻形式の検証"""
        return normalize_hhmm(v)

    @validator('end_time')
    def validate_end_time(cls, v, values):
        """終了時刻の検証"""
        if 'start_time' in values and parse_hhmm(v) <= parse_hhmm(values['start_time']):
            raise ValueError('終了時刻は開始時刻より後である必要があります')
        return v

    def is_complete(self) -> bool:
        """フォーム送信可能かチェック（名前と内容は必須）"""
        return bool(self.name.strip()) and bool(self.reason.strip())

    def to_event(self, event_id: Optional[str] = None) -> ScheduleEvent:
        """予定エンティティに変換"""
        data = {
            "name": self.name,
            "date": self.date,
            "start": self.start_time,
            "end": self.end_time,
            "reason": self.reason
        }
        if event_id:
            data["event_id"] = event_id
        return ScheduleEvent(**data)

    def to_sheet_row(self) -> Dict[str, Any]:
        """スプレッドシート行形式に変換（作成リクエスト用）"""
        return {
            "name": self.name.strip(),
            "date": self.date,
            "start": self.start_time,
            "end": self.end_time,
            "reason": self.reason.strip()
        }

    @classmethod
    def from_event(cls, event: ScheduleEvent) -> "ScheduleDraft":
        """既存の予定から編集用フォーム内容を作成"""
        return cls(
            name=event.name,
            date=event.date,
            start_time=event.start,
            end_time=event.end,
            reason=event.reason
        )


class RawScheduleRow(BaseModel):
    """データソースから読み込んだ生の行（欠損を許容）"""
    name: Optional[str] = None
    date: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    reason: Optional[str] = None

    class Config:
        """Pydantic設定"""
        extra = "ignore"

    def is_complete(self) -> bool:
        """必須フィールド（name/date/start/end）が揃っているかチェック"""
        return all(
            value is not None and value.strip()
            for value in (self.name, self.date, self.start, self.end)
        )

    def to_event(self) -> ScheduleEvent:
        """予定エンティティに変換（新しい合成IDを付与）"""
        return ScheduleEvent(
            name=self.name.strip(),
            date=self.date.strip(),
            start=self.start.strip(),
            end=self.end.strip(),
            reason=(self.reason or "").strip()
        )
