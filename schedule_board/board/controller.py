"""
ボードコントローラー

予定リストの唯一の書き手として、インタラクションエンジンが確定させた操作を
楽観的にローカルへ反映し、リモート（スプレッドシート）と同期します。
同期に失敗した場合は通知を出し、再読み込みでリモートの状態に戻します。
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Set

from pydantic import ValidationError

from ..config import BoardSettings
from ..engine.geometry import BoardGeometry
from ..engine.interaction import GestureThresholds, InteractionStateMachine
from ..errors import InvalidScheduleError, ScheduleSourceError, ScheduleSyncError
from ..integrations.notifier import LoggingNotifier, NotificationLevel, Notifier
from ..integrations.sheet_fetcher import ScheduleDataset
from ..integrations.sheet_sync import SyncAction
from ..models.operations import (
    CreateOperation, DeleteOperation, MoveOperation, OpenEditorOperation,
    Operation, ResizeOperation, SelectionToggleOperation
)
from ..models.schedule import ScheduleDraft, ScheduleEvent
from .view import BoardSnapshot, build_snapshot, derive_people

logger = logging.getLogger(__name__)


class ScheduleDataSource(Protocol):
    """予定の取得元"""

    async def fetch(self) -> ScheduleDataset:
        ...


class ScheduleSyncTarget(Protocol):
    """変更の送信先"""

    async def save(
        self,
        action: SyncAction,
        data: Dict[str, Any],
        original: Optional[Dict[str, Any]] = None
    ) -> None:
        ...


class CreationForm(Protocol):
    """作成・編集フォーム（キャンセル時は None を返す）"""

    async def collect(self, proposal: ScheduleDraft) -> Optional[ScheduleDraft]:
        ...


class BoardController:
    """
    スケジュールボードコントローラー
    - 予定リストと利用者一覧の保持
    - 表示日付の切替とスナップショット作成
    - 確定操作の楽観的反映とリモート同期
    - 同期失敗時の通知と再読み込み
    """

    def __init__(
        self,
        data_source: ScheduleDataSource,
        sync_client: ScheduleSyncTarget,
        creation_form: Optional[CreationForm] = None,
        notifier: Optional[Notifier] = None,
        settings: Optional[BoardSettings] = None
    ):
        """
        コントローラーを初期化

        Args:
            data_source: 予定の取得元（SheetFetcher など）
            sync_client: 変更の送信先（SheetSyncClient など）
            creation_form: 作成・編集の詳細入力
            notifier: ユーザー通知先
            settings: ボード設定
        """
        self.data_source = data_source
        self.sync_client = sync_client
        self.creation_form = creation_form
        self.notifier = notifier or LoggingNotifier()
        self.settings = settings or BoardSettings()

        self.events: List[ScheduleEvent] = []
        self.known_people: List[str] = []
        self.current_date = self.settings.default_date
        self.selected_event_id: Optional[str] = None
        self.loaded = False

        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # 読み込み・表示
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """リモートから予定を読み込み、ローカルの一覧を置き換える"""
        try:
            dataset = await self.data_source.fetch()
        except ScheduleSourceError as e:
            # 読み込み失敗時は直前の一覧を表示し続ける
            logger.error(f"スケジュール読み込みエラー: {e}")
            self.notifier.notify(f"スケジュールを読み込めませんでした: {e}", NotificationLevel.ERROR)
            return False

        self.events = list(dataset.events)
        self.known_people = list(dataset.users)
        self.loaded = True

        ids = {event.event_id for event in self.events}
        if self.selected_event_id not in ids:
            self.selected_event_id = None

        logger.info(f"スケジュール読み込み完了: {len(self.events)}件")
        return True

    def available_dates(self) -> List[str]:
        """切替可能な日付（設定の選択肢 + 予定のある日付）"""
        dates = list(self.settings.date_options)
        for event in self.events:
            if event.date not in dates:
                dates.append(event.date)
        return dates

    def set_date(self, date: str) -> None:
        """表示日付を切り替える"""
        if not date or not date.strip():
            raise ValueError('日付は必須です')
        self.current_date = date.strip()
        self.selected_event_id = None

    def events_for_date(self, date: Optional[str] = None) -> List[ScheduleEvent]:
        """指定日（省略時は表示中の日付）の予定"""
        target = date or self.current_date
        return [event for event in self.events if event.date == target]

    def people(self) -> List[str]:
        """表示中の日付の列（人）"""
        return derive_people(
            self.known_people,
            self.events,
            self.current_date,
            self.settings.official_name
        )

    def geometry(self) -> BoardGeometry:
        """現在の列の並びと設定寸法"""
        return BoardGeometry(
            people=self.people(),
            time_grid=self.settings.time_grid(),
            column_width_px=self.settings.column_width_px,
            time_column_width_px=self.settings.time_column_width_px,
            header_height_px=self.settings.header_height_px
        )

    def snapshot(self) -> BoardSnapshot:
        """描画用スナップショット"""
        return build_snapshot(
            self.geometry(),
            self.events,
            self.current_date,
            selected_event_id=self.selected_event_id,
            official_name=self.settings.official_name
        )

    def machine(self, thresholds: Optional[GestureThresholds] = None) -> InteractionStateMachine:
        """現在のジオメトリと日付に結び付いたステートマシンを作成"""
        return InteractionStateMachine(self.geometry(), self.current_date, thresholds)

    def find_event(self, event_id: str) -> Optional[ScheduleEvent]:
        """IDで予定を検索"""
        for event in self.events:
            if event.event_id == event_id:
                return event
        return None

    # ------------------------------------------------------------------
    # 操作の反映
    # ------------------------------------------------------------------

    def dispatch(self, operation: Operation) -> asyncio.Task:
        """操作の反映をバックグラウンドタスクとして開始（入力処理は待たない）"""
        task = asyncio.get_running_loop().create_task(self.apply(operation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_idle(self) -> None:
        """実行中の反映タスクがすべて終わるまで待つ"""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def apply(self, operation: Operation) -> bool:
        """
        確定操作を反映

        Returns:
            ローカルへの反映とリモート同期がともに成功した場合 True
        """
        if isinstance(operation, SelectionToggleOperation):
            return self._apply_selection(operation)

        # 選択以外の確定操作の時点でエンジン側の選択は解除済み
        self.selected_event_id = None

        if isinstance(operation, CreateOperation):
            return await self._apply_create(operation)

        if isinstance(operation, OpenEditorOperation):
            return await self._apply_open_editor(operation)

        if isinstance(operation, (MoveOperation, ResizeOperation)):
            return await self._apply_edit(operation.event, operation.updated_event())

        if isinstance(operation, DeleteOperation):
            return await self._apply_delete(operation.event)

        raise TypeError(f"未対応の操作です: {type(operation).__name__}")

    def _apply_selection(self, operation: SelectionToggleOperation) -> bool:
        """削除候補表示の切替（リモートへの影響なし）"""
        if operation.selected:
            self.selected_event_id = operation.event_id
        elif operation.event_id is None or operation.event_id == self.selected_event_id:
            self.selected_event_id = None
        return True

    async def _apply_create(self, operation: CreateOperation) -> bool:
        """新規作成: フォームで詳細を入力し、送信後に再読み込み"""
        proposal = ScheduleDraft(
            name=operation.person,
            date=operation.date,
            start_time=operation.start_time,
            end_time=operation.end_time
        )
        draft = await self._collect(proposal)
        if draft is None:
            return False

        try:
            await self.sync_client.save(SyncAction.CREATE, draft.to_sheet_row())
        except ScheduleSyncError as e:
            logger.error(f"予定作成の同期エラー: {e}")
            self.notifier.notify(f"保存に失敗しました: {e}", NotificationLevel.ERROR)
            return False

        self.notifier.notify("予定を保存しました", NotificationLevel.SUCCESS)
        await self.load()
        return True

    async def _apply_open_editor(self, operation: OpenEditorOperation) -> bool:
        """既存予定の編集: フォームの結果を楽観的に反映して同期"""
        draft = await self._collect(ScheduleDraft.from_event(operation.event))
        if draft is None:
            return False

        try:
            updated = draft.to_event(event_id=operation.event.event_id)
        except ValidationError as e:
            logger.warning(f"編集内容が不正です: {e}")
            self.notifier.notify("編集内容が不正です", NotificationLevel.WARNING)
            return False

        if updated.to_sheet_row() == operation.event.to_sheet_row():
            return True
        return await self._apply_edit(operation.event, updated)

    async def _apply_edit(self, original: ScheduleEvent, updated: ScheduleEvent) -> bool:
        """移動・伸縮・編集: 同じIDのまま置き換えてから同期"""
        replaced = self._replace_event(updated)
        if not replaced:
            logger.warning(f"ローカルに存在しない予定を更新します: {original.event_id}")

        try:
            await self.sync_client.save(
                SyncAction.EDIT,
                updated.to_sheet_row(),
                original=original.to_sheet_row()
            )
        except ScheduleSyncError as e:
            logger.error(f"予定更新の同期エラー: {e}")
            self.notifier.notify(f"修正に失敗しました（元に戻します）: {e}", NotificationLevel.ERROR)
            # 再読み込みの成否によらず元の予定に戻す
            if replaced:
                self._replace_event(original)
            await self.load()
            return False

        logger.info(f"予定更新を同期: {updated.name} {updated.date} {updated.start}-{updated.end}")
        if not replaced:
            await self.load()
        return True

    async def _apply_delete(self, event: ScheduleEvent) -> bool:
        """削除: ローカルから取り除いてから同期"""
        index = next(
            (i for i, e in enumerate(self.events) if e.event_id == event.event_id),
            None
        )
        self.events = [e for e in self.events if e.event_id != event.event_id]

        try:
            await self.sync_client.save(SyncAction.DELETE, event.to_sheet_row())
        except ScheduleSyncError as e:
            logger.error(f"予定削除の同期エラー: {e}")
            self.notifier.notify(f"削除に失敗しました（元に戻します）: {e}", NotificationLevel.ERROR)
            if index is not None and self.find_event(event.event_id) is None:
                self.events.insert(min(index, len(self.events)), event)
            await self.load()
            return False

        logger.info(f"予定削除を同期: {event.name} {event.date} {event.start}-{event.end}")
        return True

    async def _collect(self, proposal: ScheduleDraft) -> Optional[ScheduleDraft]:
        """フォームで詳細を入力（未設定・キャンセル・必須項目不足は None）"""
        if self.creation_form is None:
            logger.warning("入力フォームが設定されていないため操作を破棄します")
            return None

        draft = await self.creation_form.collect(proposal)
        if draft is None:
            logger.info("フォーム入力がキャンセルされました")
            return None

        try:
            self._require_complete(draft)
        except InvalidScheduleError as e:
            self.notifier.notify(str(e), NotificationLevel.WARNING)
            return None
        return draft

    @staticmethod
    def _require_complete(draft: ScheduleDraft) -> None:
        if not draft.is_complete():
            raise InvalidScheduleError("名前と内容は必須です")

    def _replace_event(self, updated: ScheduleEvent) -> bool:
        """同じIDの予定を置き換える"""
        for index, event in enumerate(self.events):
            if event.event_id == updated.event_id:
                self.events[index] = updated
                return True
        return False
