"""
インタラクションステートマシン

ポインタ／タッチの低レベル入力列を、作成・移動・伸縮・削除などの確定操作に変換します。

タッチ入力は同じ指でスクロール・タップ・長押し・ドラッグを行うため、押下直後は
意図が確定しない保留フェーズ（PENDING）を経由します。保留中に一定距離以上動けば
スクロールとみなして入力をブラウザに返し、タイマーが先に満了すれば意図的な長押しと
して確定します。マウス入力はスクロールとの曖昧さがないため保留フェーズを飛ばします。

状態はすべて InteractionState に保持し、handle() と tick() 以外からは変更しません。
エンジンは予定リストを直接変更せず、確定操作を呼び出し元に返すだけです。
"""

import logging
import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..models.input import (
    InputDevice, InputResult, PointerSample, SampleType, TargetKind
)
from ..models.operations import (
    CreateOperation, CreateSource, DeleteOperation, MoveOperation,
    OpenEditorOperation, ResizeEdge, ResizeOperation,
    SelectionToggleOperation
)
from ..models.schedule import MINUTES_PER_DAY, ScheduleEvent, format_minutes
from .geometry import BoardGeometry

logger = logging.getLogger(__name__)


class GesturePhase(str, Enum):
    """ジェスチャーフェーズ"""
    IDLE = "idle"              # 入力なし
    PENDING = "pending"        # 押下済み・意図未確定（タッチのみ）
    CREATING = "creating"      # 新規予定の範囲をドラッグ中
    MOVING = "moving"          # 既存予定を移動中
    RESIZING = "resizing"      # 既存予定の辺をドラッグ中
    SELECTED = "selected"      # 削除候補表示中（タッチのみ）


class PendingKind(str, Enum):
    """保留中の押下の種類"""
    CREATION = "creation"      # 空きセル上
    BLOCK = "block"            # 予定ブロック上


class GestureThresholds(BaseModel):
    """ジェスチャー判定の閾値"""
    creation_hold_ms: float = Field(default=300.0, description="空きセル長押しの確定時間")
    creation_cancel_px: float = Field(default=12.0, description="空きセル保留中のキャンセル距離")
    block_hold_ms: float = Field(default=400.0, description="予定ブロック長押しの確定時間")
    block_cancel_px: float = Field(default=5.0, description="予定ブロック保留中のキャンセル距離")
    double_tap_window_ms: float = Field(default=300.0, description="空きセルのダブルタップ受付時間")
    double_tap_distance_px: float = Field(default=20.0, description="ダブルタップとみなす距離")
    block_double_tap_window_ms: float = Field(default=300.0, description="予定ブロックのダブルタップ受付時間")
    min_creation_span_px: float = Field(default=10.0, description="作成ドラッグの最小距離")
    default_duration_minutes: int = Field(default=60, description="ダブルタップ作成時の長さ（分）")


class InteractionState(BaseModel):
    """ステートマシンの一時状態（永続化しない）"""
    phase: GesturePhase = GesturePhase.IDLE
    device: Optional[InputDevice] = None

    # 押下情報（コンテンツ座標）
    press_x: float = 0.0
    press_y: float = 0.0
    pending_kind: Optional[PendingKind] = None
    timer_deadline_ms: Optional[float] = None
    hold_confirmed: bool = False

    # 対象
    person: Optional[str] = None
    event: Optional[ScheduleEvent] = None

    # 作成ドラッグ（グリッド座標、スナップなし）
    drag_start_y: float = 0.0
    drag_current_y: float = 0.0

    # 移動
    grab_offset_y: float = 0.0
    target_person: Optional[str] = None
    target_top_px: Optional[float] = None

    # 伸縮
    resize_edge: Optional[ResizeEdge] = None
    resize_candidate_px: Optional[float] = None

    # 削除候補の選択
    selected_event_id: Optional[str] = None
    # 呼び出し元に最後に通知した選択
    reported_selection_id: Optional[str] = None

    # 直前のタップ（ダブルタップ判定用）
    last_tap_ms: Optional[float] = None
    last_tap_x: float = 0.0
    last_tap_y: float = 0.0
    last_block_tap_ms: Optional[float] = None
    last_block_tap_event_id: Optional[str] = None

    def clear_gesture(self) -> None:
        """ジェスチャー固有の状態をリセット（選択とタップ履歴は維持）"""
        self.phase = GesturePhase.SELECTED if self.selected_event_id else GesturePhase.IDLE
        self.device = None
        self.pending_kind = None
        self.timer_deadline_ms = None
        self.hold_confirmed = False
        self.person = None
        self.event = None
        self.drag_start_y = 0.0
        self.drag_current_y = 0.0
        self.grab_offset_y = 0.0
        self.target_person = None
        self.target_top_px = None
        self.resize_edge = None
        self.resize_candidate_px = None


class GesturePreview(BaseModel):
    """ドラッグ中の一時的な描画情報"""
    phase: GesturePhase = Field(..., description="ジェスチャーフェーズ")
    person: Optional[str] = Field(None, description="描画する列（None は無効位置）")
    top_px: float = Field(..., description="上辺（グリッド座標）")
    height_px: float = Field(..., description="高さ")
    valid: bool = Field(default=True, description="この位置で確定できるか")
    event_id: Optional[str] = Field(None, description="対象の既存予定ID")


class InteractionStateMachine:
    """
    ジェスチャー → スケジュール操作 変換エンジン
    - タッチの保留フェーズ（スクロール／長押しの判別）
    - ダブルタップ・ダブルクリックによる1時間予定の作成
    - ドラッグによる作成・移動・伸縮
    - 削除候補の選択と削除
    """

    def __init__(
        self,
        geometry: BoardGeometry,
        date: str,
        thresholds: Optional[GestureThresholds] = None
    ):
        """
        ステートマシンを初期化

        Args:
            geometry: 列の並びとタイムグリッド
            date: 表示中の日付キー（作成操作に使用）
            thresholds: ジェスチャー判定の閾値
        """
        self.geometry = geometry
        self.grid = geometry.time_grid
        self.date = date
        self.thresholds = thresholds or GestureThresholds()
        self.state = InteractionState()

    # ------------------------------------------------------------------
    # 公開インターフェース
    # ------------------------------------------------------------------

    @property
    def phase(self) -> GesturePhase:
        return self.state.phase

    @property
    def selected_event_id(self) -> Optional[str]:
        return self.state.selected_event_id

    def handle(self, sample: PointerSample) -> InputResult:
        """入力サンプルを1つ処理"""
        # 期限切れのタイマーはサンプルより先に発火したものとして扱う
        fired = self._fire_due_timer(sample.timestamp_ms)

        handlers = {
            SampleType.PRESS: self._on_press,
            SampleType.MOVE: self._on_move,
            SampleType.RELEASE: self._on_release,
            SampleType.DOUBLE_CLICK: self._on_double_click,
            SampleType.SCROLL: self._on_scroll,
        }
        result = handlers[sample.sample_type](sample)

        if fired is not None and fired.haptic:
            result.haptic = True
        return self._report_selection(result)

    def tick(self, now_ms: float) -> InputResult:
        """タイマー確認（ホストのタイマーから呼び出す）"""
        fired = self._fire_due_timer(now_ms)
        return self._report_selection(fired if fired is not None else InputResult())

    def preview(self) -> Optional[GesturePreview]:
        """ドラッグ中のブロックの描画情報"""
        state = self.state

        if state.phase == GesturePhase.CREATING:
            top = min(state.drag_start_y, state.drag_current_y)
            return GesturePreview(
                phase=state.phase,
                person=state.person,
                top_px=top,
                height_px=abs(state.drag_current_y - state.drag_start_y),
                valid=abs(state.drag_current_y - state.drag_start_y) >= self.thresholds.min_creation_span_px
            )

        if state.phase == GesturePhase.MOVING and state.event is not None:
            top = state.target_top_px
            if top is None:
                top = self.geometry.event_top_px(state.event)
            return GesturePreview(
                phase=state.phase,
                person=state.target_person,
                top_px=top,
                height_px=self.geometry.event_height_px(state.event),
                valid=state.target_person is not None,
                event_id=state.event.event_id
            )

        if state.phase == GesturePhase.RESIZING and state.event is not None:
            top = self.geometry.event_top_px(state.event)
            bottom = self.geometry.event_bottom_px(state.event)
            if state.resize_candidate_px is not None:
                if state.resize_edge == ResizeEdge.TOP:
                    top = state.resize_candidate_px
                else:
                    bottom = state.resize_candidate_px
            return GesturePreview(
                phase=state.phase,
                person=state.event.name,
                top_px=top,
                height_px=bottom - top,
                event_id=state.event.event_id
            )

        return None

    # ------------------------------------------------------------------
    # サンプル種別ごとの処理
    # ------------------------------------------------------------------

    def _on_press(self, sample: PointerSample) -> InputResult:
        """押下処理"""
        state = self.state
        target = sample.target

        # ドラッグ中は入力ストリームを占有する
        if state.phase in (GesturePhase.CREATING, GesturePhase.MOVING, GesturePhase.RESIZING):
            return InputResult(prevent_default=True)

        # 伸縮ハンドルは保留中のジェスチャーより常に優先
        if target.is_resize_edge and target.event is not None:
            if state.phase == GesturePhase.PENDING:
                logger.debug("伸縮ハンドル押下により保留中のジェスチャーを破棄")
                state.clear_gesture()
            self._clear_selection()
            return self._start_resizing(sample)

        if state.phase == GesturePhase.PENDING:
            # 保留中の別の指は無視
            return InputResult()

        if (
            target.kind == TargetKind.DELETE_BUTTON
            and target.event is not None
            and target.event.event_id == state.selected_event_id
        ):
            logger.debug(f"削除ボタン押下: {target.event.event_id}")
            self._clear_selection()
            state.clear_gesture()
            return InputResult(operation=DeleteOperation(event=target.event), prevent_default=True)

        # 同じブロック以外への押下は選択を解除
        same_block = (
            target.kind == TargetKind.EVENT_BODY
            and target.event is not None
            and target.event.event_id == state.selected_event_id
        )
        if not same_block:
            self._clear_selection()

        if target.kind == TargetKind.EMPTY_CELL and target.person is not None:
            return self._press_empty_cell(sample)

        if target.kind == TargetKind.EVENT_BODY and target.event is not None:
            return self._press_event_body(sample)

        # 背景（選択外の削除ボタンを含む）の押下は選択解除のみ
        return InputResult()

    def _on_move(self, sample: PointerSample) -> InputResult:
        """移動処理"""
        state = self.state

        if state.device is not None and sample.device != state.device:
            return InputResult()

        if state.phase == GesturePhase.PENDING:
            return self._move_pending(sample)

        if state.phase == GesturePhase.CREATING:
            state.drag_current_y = self.grid.clamp_pixel(self.geometry.grid_y(sample.y))
            return InputResult(prevent_default=True)

        if state.phase == GesturePhase.MOVING:
            self._update_move_target(sample)
            return InputResult(prevent_default=True)

        if state.phase == GesturePhase.RESIZING:
            self._update_resize_candidate(sample)
            return InputResult(prevent_default=True)

        return InputResult()

    def _on_release(self, sample: PointerSample) -> InputResult:
        """解放処理"""
        state = self.state

        if state.device is not None and sample.device != state.device:
            return InputResult()

        if state.phase == GesturePhase.PENDING:
            return self._release_pending(sample)

        if state.phase == GesturePhase.CREATING:
            return self._finish_creating()

        if state.phase == GesturePhase.MOVING:
            return self._finish_moving()

        if state.phase == GesturePhase.RESIZING:
            return self._finish_resizing()

        return InputResult()

    def _on_double_click(self, sample: PointerSample) -> InputResult:
        """ネイティブのダブルクリック処理（マウス）"""
        state = self.state
        target = sample.target

        if state.phase in (GesturePhase.CREATING, GesturePhase.MOVING, GesturePhase.RESIZING):
            return InputResult()

        if target.kind == TargetKind.EMPTY_CELL and target.person is not None:
            self._clear_selection()
            state.clear_gesture()
            operation = self._default_create(target.person, sample.y, CreateSource.DOUBLE_CLICK)
            return InputResult(operation=operation, prevent_default=True)

        if target.kind == TargetKind.EVENT_BODY and target.event is not None:
            self._clear_selection()
            state.clear_gesture()
            return InputResult(operation=OpenEditorOperation(event=target.event), prevent_default=True)

        return InputResult()

    def _on_scroll(self, sample: PointerSample) -> InputResult:
        """ネイティブスクロール検出処理"""
        state = self.state
        if state.phase == GesturePhase.PENDING and not state.hold_confirmed:
            logger.debug("スクロール検出により保留中のジェスチャーを破棄")
            self._abandon_pending()
        return InputResult()

    # ------------------------------------------------------------------
    # 押下
    # ------------------------------------------------------------------

    def _press_empty_cell(self, sample: PointerSample) -> InputResult:
        """空きセルの押下"""
        state = self.state
        person = sample.target.person

        if not sample.device.supports_ambiguous_scroll:
            self._begin(sample, person=person)
            state.phase = GesturePhase.CREATING
            state.drag_start_y = self.grid.clamp_pixel(self.geometry.grid_y(sample.y))
            state.drag_current_y = state.drag_start_y
            return InputResult(prevent_default=True)

        # ダブルタップは保留中の長押しより優先
        if self._is_double_tap(sample):
            logger.debug(f"ダブルタップ作成: {person}")
            state.last_tap_ms = None
            state.clear_gesture()
            operation = self._default_create(person, sample.y, CreateSource.DOUBLE_TAP)
            return InputResult(operation=operation, prevent_default=True)

        self._begin(sample, person=person)
        state.phase = GesturePhase.PENDING
        state.pending_kind = PendingKind.CREATION
        state.timer_deadline_ms = sample.timestamp_ms + self.thresholds.creation_hold_ms
        return InputResult()

    def _press_event_body(self, sample: PointerSample) -> InputResult:
        """予定ブロック本体の押下"""
        state = self.state
        event = sample.target.event

        if not sample.device.supports_ambiguous_scroll:
            self._begin(sample, event=event)
            self._enter_moving()
            return InputResult(prevent_default=True)

        self._begin(sample, event=event)
        state.phase = GesturePhase.PENDING
        state.pending_kind = PendingKind.BLOCK
        state.timer_deadline_ms = sample.timestamp_ms + self.thresholds.block_hold_ms
        return InputResult()

    def _start_resizing(self, sample: PointerSample) -> InputResult:
        """伸縮開始（保留フェーズなし）"""
        state = self.state
        target = sample.target

        self._begin(sample, event=target.event)
        state.phase = GesturePhase.RESIZING
        state.resize_edge = (
            ResizeEdge.TOP if target.kind == TargetKind.EVENT_TOP_EDGE else ResizeEdge.BOTTOM
        )
        logger.debug(f"伸縮開始: {target.event.event_id} ({state.resize_edge.value})")
        return InputResult(prevent_default=True)

    def _begin(
        self,
        sample: PointerSample,
        person: Optional[str] = None,
        event: Optional[ScheduleEvent] = None
    ) -> None:
        """ジェスチャー共通の開始処理"""
        state = self.state
        state.device = sample.device
        state.press_x = sample.x
        state.press_y = sample.y
        state.person = person
        state.event = event
        state.hold_confirmed = False
        state.timer_deadline_ms = None

    # ------------------------------------------------------------------
    # 保留フェーズ
    # ------------------------------------------------------------------

    def _fire_due_timer(self, now_ms: float) -> Optional[InputResult]:
        """期限切れの長押しタイマーを発火"""
        state = self.state
        if state.phase != GesturePhase.PENDING or state.timer_deadline_ms is None:
            return None
        if now_ms < state.timer_deadline_ms:
            return None

        state.timer_deadline_ms = None

        if state.pending_kind == PendingKind.CREATION:
            logger.debug(f"長押し確定（作成）: {state.person}")
            state.phase = GesturePhase.CREATING
            state.drag_start_y = self.grid.clamp_pixel(self.geometry.grid_y(state.press_y))
            state.drag_current_y = state.drag_start_y
        else:
            # 削除候補を表示し、続く移動で MOVING へ移れる状態にする
            logger.debug(f"長押し確定（ブロック）: {state.event.event_id}")
            state.hold_confirmed = True
            state.selected_event_id = state.event.event_id

        return InputResult(prevent_default=True, haptic=True)

    def _move_pending(self, sample: PointerSample) -> InputResult:
        """保留中の移動"""
        state = self.state
        distance = math.hypot(sample.x - state.press_x, sample.y - state.press_y)

        if state.hold_confirmed:
            if distance > self.thresholds.block_cancel_px:
                self._enter_moving()
                self._update_move_target(sample)
            return InputResult(prevent_default=True)

        cancel_px = (
            self.thresholds.creation_cancel_px
            if state.pending_kind == PendingKind.CREATION
            else self.thresholds.block_cancel_px
        )
        if distance > cancel_px:
            logger.debug(f"保留中に {distance:.1f}px 移動したためスクロールとして扱う")
            self._abandon_pending()
        return InputResult()

    def _release_pending(self, sample: PointerSample) -> InputResult:
        """保留中の解放（タップ、または長押し確定後の解放）"""
        state = self.state

        if state.pending_kind == PendingKind.CREATION:
            # 長押し前に離した空きセルのタップ: ダブルタップの起点を記録
            state.last_tap_ms = sample.timestamp_ms
            state.last_tap_x = sample.x
            state.last_tap_y = sample.y
            state.clear_gesture()
            return InputResult()

        event = state.event

        if state.hold_confirmed:
            # 長押し後に動かさず離した: 削除候補の表示を残す
            state.selected_event_id = event.event_id
            state.clear_gesture()
            return InputResult(
                operation=SelectionToggleOperation(event_id=event.event_id, selected=True),
                prevent_default=True
            )

        return self._tap_block(event, sample.timestamp_ms)

    def _tap_block(self, event: ScheduleEvent, now_ms: float) -> InputResult:
        """予定ブロックの短いタップ"""
        state = self.state

        is_double_tap = (
            state.last_block_tap_event_id == event.event_id
            and state.last_block_tap_ms is not None
            and now_ms - state.last_block_tap_ms <= self.thresholds.block_double_tap_window_ms
        )
        if is_double_tap:
            logger.debug(f"ダブルタップで編集: {event.event_id}")
            state.last_block_tap_ms = None
            state.last_block_tap_event_id = None
            state.selected_event_id = None
            state.clear_gesture()
            return InputResult(operation=OpenEditorOperation(event=event))

        state.last_block_tap_ms = now_ms
        state.last_block_tap_event_id = event.event_id

        if state.selected_event_id == event.event_id:
            state.selected_event_id = None
            state.clear_gesture()
            return InputResult(operation=SelectionToggleOperation(event_id=event.event_id, selected=False))

        state.selected_event_id = event.event_id
        state.clear_gesture()
        return InputResult(operation=SelectionToggleOperation(event_id=event.event_id, selected=True))

    def _abandon_pending(self) -> None:
        """保留中のジェスチャーを破棄し、入力をネイティブスクロールに返す"""
        self.state.clear_gesture()

    def _is_double_tap(self, sample: PointerSample) -> bool:
        """空きセルのダブルタップ判定"""
        state = self.state
        if state.last_tap_ms is None:
            return False
        if sample.timestamp_ms - state.last_tap_ms > self.thresholds.double_tap_window_ms:
            return False
        distance = math.hypot(sample.x - state.last_tap_x, sample.y - state.last_tap_y)
        return distance <= self.thresholds.double_tap_distance_px

    # ------------------------------------------------------------------
    # 作成
    # ------------------------------------------------------------------

    def _finish_creating(self) -> InputResult:
        """作成ドラッグの確定"""
        state = self.state
        person = state.person
        start_px = min(state.drag_start_y, state.drag_current_y)
        end_px = max(state.drag_start_y, state.drag_current_y)
        state.clear_gesture()

        if end_px - start_px < self.thresholds.min_creation_span_px:
            # 短すぎるドラッグはタップとして扱う
            return InputResult()

        start_minutes = self.grid.pixel_to_minutes(start_px)
        end_minutes = self.grid.pixel_to_minutes(end_px)
        if end_minutes <= start_minutes:
            return InputResult()

        operation = CreateOperation(
            person=person,
            date=self.date,
            start_time=format_minutes(start_minutes),
            end_time=format_minutes(end_minutes),
            source=CreateSource.DRAG
        )
        logger.debug(f"作成確定: {person} {operation.start_time}-{operation.end_time}")
        return InputResult(operation=operation, prevent_default=True)

    def _default_create(self, person: str, y: float, source: CreateSource) -> CreateOperation:
        """タップ位置から既定の長さの作成操作を作る"""
        start_px = self.grid.clamp_pixel(self.geometry.grid_y(y))
        start_minutes = self.grid.pixel_to_minutes(start_px)
        # 開始が1日の終わりに重ならないよう1スナップ分手前に寄せる
        start_minutes = min(start_minutes, MINUTES_PER_DAY - self.grid.snap_minutes)
        end_minutes = min(start_minutes + self.thresholds.default_duration_minutes, MINUTES_PER_DAY)

        return CreateOperation(
            person=person,
            date=self.date,
            start_time=format_minutes(start_minutes),
            end_time=format_minutes(end_minutes),
            source=source
        )

    # ------------------------------------------------------------------
    # 移動
    # ------------------------------------------------------------------

    def _enter_moving(self) -> None:
        """移動開始。押下位置とブロック上辺の差をジェスチャー中保持する"""
        state = self.state
        event = state.event
        state.phase = GesturePhase.MOVING
        state.grab_offset_y = self.geometry.grid_y(state.press_y) - self.geometry.event_top_px(event)
        state.target_person = event.name
        state.target_top_px = None
        state.hold_confirmed = False
        # 移動を始めたら削除候補表示は消す
        if state.selected_event_id == event.event_id:
            state.selected_event_id = None
        logger.debug(f"移動開始: {event.event_id} (offset={state.grab_offset_y:.1f}px)")

    def _update_move_target(self, sample: PointerSample) -> None:
        """移動先の列とスナップ済み上辺を更新"""
        state = self.state
        height = self.geometry.event_height_px(state.event)
        top = self.geometry.grid_y(sample.y) - state.grab_offset_y
        snapped_top = self.grid.snap_pixel(top)

        # グリッドの上下をはみ出すサンプルは無視し、直前の有効値を保持
        if snapped_top < 0 or snapped_top + height > self.grid.grid_height_px:
            return

        state.target_person = self.geometry.person_at(sample.x)
        state.target_top_px = snapped_top

    def _finish_moving(self) -> InputResult:
        """移動の確定"""
        state = self.state
        event = state.event
        target_person = state.target_person
        target_top = state.target_top_px
        state.clear_gesture()

        if target_person is None:
            return InputResult(prevent_default=True)

        if target_top is None:
            new_start = event.start_minutes
        else:
            new_start = self.grid.pixel_to_minutes(target_top)
        new_end = new_start + event.duration_minutes()
        if new_end > MINUTES_PER_DAY:
            return InputResult(prevent_default=True)

        if target_person == event.name and new_start == event.start_minutes:
            return InputResult(prevent_default=True)

        operation = MoveOperation(
            event=event,
            new_person=target_person,
            new_start=format_minutes(new_start),
            new_end=format_minutes(new_end)
        )
        logger.debug(f"移動確定: {event.event_id} -> {target_person} {operation.new_start}-{operation.new_end}")
        return InputResult(operation=operation, prevent_default=True)

    # ------------------------------------------------------------------
    # 伸縮
    # ------------------------------------------------------------------

    def _update_resize_candidate(self, sample: PointerSample) -> None:
        """動かしている辺の候補位置を更新（反転・1スナップ未満への縮小を防ぐ）"""
        state = self.state
        event = state.event
        snapped = self.grid.snap_pixel(self.geometry.grid_y(sample.y))
        snap_px = self.grid.snap_interval_px

        if state.resize_edge == ResizeEdge.TOP:
            pinned_end = self.geometry.event_bottom_px(event)
            state.resize_candidate_px = max(0.0, min(snapped, pinned_end - snap_px))
        else:
            pinned_start = self.geometry.event_top_px(event)
            state.resize_candidate_px = max(pinned_start + snap_px, min(snapped, self.grid.grid_height_px))

    def _finish_resizing(self) -> InputResult:
        """伸縮の確定（動かした辺の時刻が変わった場合のみ）"""
        state = self.state
        event = state.event
        edge = state.resize_edge
        candidate = state.resize_candidate_px
        state.clear_gesture()

        if candidate is None:
            return InputResult(prevent_default=True)

        new_time = self.grid.pixel_to_time(candidate)

        if edge == ResizeEdge.TOP:
            if new_time == event.start:
                return InputResult(prevent_default=True)
            operation = ResizeOperation(event=event, edge=edge, new_start=new_time)
        else:
            if new_time == event.end:
                return InputResult(prevent_default=True)
            operation = ResizeOperation(event=event, edge=edge, new_end=new_time)

        logger.debug(f"伸縮確定: {event.event_id} ({edge.value}) -> {new_time}")
        return InputResult(operation=operation, prevent_default=True)

    # ------------------------------------------------------------------
    # 選択
    # ------------------------------------------------------------------

    def _clear_selection(self) -> None:
        state = self.state
        state.selected_event_id = None
        if state.phase == GesturePhase.SELECTED:
            state.phase = GesturePhase.IDLE

    def _report_selection(self, result: InputResult) -> InputResult:
        """
        選択状態の変化を呼び出し元に通知

        ジェスチャーの途中（スクロールへの移行、伸縮・移動の開始など）で
        選択が外れた場合、確定操作がなければ選択解除の操作を付けて返します。
        選択以外の確定操作は呼び出し元でも選択解除として扱われます。
        """
        state = self.state
        operation = result.operation

        if operation is None:
            reported = state.reported_selection_id
            if reported is not None and state.selected_event_id != reported:
                result.operation = SelectionToggleOperation(event_id=reported, selected=False)
                state.reported_selection_id = None
            return result

        if isinstance(operation, SelectionToggleOperation):
            state.reported_selection_id = operation.event_id if operation.selected else None
        else:
            state.reported_selection_id = None
        return result


__all__ = [
    "GesturePhase",
    "PendingKind",
    "GestureThresholds",
    "InteractionState",
    "GesturePreview",
    "InteractionStateMachine",
]
