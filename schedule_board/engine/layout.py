"""
レイアウト解決

同じ列（人）・同じ日の予定のうち時間が重なるものを、横方向のレーンに割り当てます。
開始時刻順の貪欲な区間グラフ彩色で、同じ入力集合からは常に同じ割り当てになります。
"""

from typing import Iterable, List

from pydantic import BaseModel, Field

from ..models.schedule import ScheduleEvent


class LaidOutEvent(BaseModel):
    """レーン割り当て済みの予定（描画ごとに再計算し、保存しない）"""
    event: ScheduleEvent = Field(..., description="予定")
    column_index: int = Field(..., description="レーン番号（0始まり）")
    column_count: int = Field(..., description="その列の最終レーン数")
    left_percent: float = Field(..., description="左端位置（列幅に対する%）")
    width_percent: float = Field(..., description="幅（列幅に対する%）")


def resolve_collisions(events: Iterable[ScheduleEvent]) -> List[LaidOutEvent]:
    """
    重なる予定に横方向のレーンを割り当てる

    Args:
        events: 1つの列・1つの日付の予定（end > start であること）

    Returns:
        レーン順・レーン内は開始時刻順のレイアウト結果
    """
    # 開始時刻でソート（安定ソートなので同時刻は入力順）
    sorted_events = sorted(events, key=lambda e: e.start_minutes)
    lanes: List[List[ScheduleEvent]] = []

    for event in sorted_events:
        for lane in lanes:
            # 接しているだけ（終了 == 開始）なら同じレーンに置ける
            if lane[-1].end_minutes <= event.start_minutes:
                lane.append(event)
                break
        else:
            lanes.append([event])

    total_lanes = len(lanes)
    resolved = []
    for lane_index, lane in enumerate(lanes):
        for event in lane:
            resolved.append(LaidOutEvent(
                event=event,
                column_index=lane_index,
                column_count=total_lanes,
                left_percent=lane_index / total_lanes * 100,
                width_percent=100 / total_lanes
            ))

    return resolved


def max_simultaneous_overlap(events: Iterable[ScheduleEvent]) -> int:
    """ある瞬間に同時に重なっている予定数の最大値"""
    boundaries = []
    for event in events:
        boundaries.append((event.start_minutes, 1))
        boundaries.append((event.end_minutes, -1))

    # 同時刻では終了を先に処理（接しているだけなら重ならない）
    boundaries.sort(key=lambda b: (b[0], b[1]))

    current = 0
    peak = 0
    for _, delta in boundaries:
        current += delta
        peak = max(peak, current)
    return peak
