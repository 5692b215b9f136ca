"""
Unit tests for the board controller
Tests optimistic updates, remote sync and recovery by reload
"""

import asyncio
import pytest
from typing import Dict, List
from unittest.mock import AsyncMock, Mock

# Import project modules
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '../..'))

from schedule_board.board.controller import BoardController
from schedule_board.errors import ScheduleSourceError, ScheduleSyncError
from schedule_board.integrations.notifier import LoggingNotifier, NotificationLevel
from schedule_board.integrations.sheet_fetcher import build_dataset
from schedule_board.integrations.sheet_sync import SyncAction
from schedule_board.models.input import HitTarget, InputDevice, PointerSample, SampleType
from schedule_board.models.operations import (
    CreateOperation, DeleteOperation, MoveOperation, OpenEditorOperation,
    ResizeEdge, ResizeOperation, SelectionToggleOperation
)
from schedule_board.models.schedule import OFFICIAL_SCHEDULE_NAME, ScheduleDraft

ROWS: List[Dict[str, str]] = [
    {"name": "Jinyo", "date": "1.14", "start": "10:00", "end": "11:00", "reason": "Meeting"},
    {"name": "Friend A", "date": "1.14", "start": "18:15", "end": "22:30", "reason": "Gaming"},
    {"name": "Friend B", "date": "1.15", "start": "12:00", "end": "16:00", "reason": "Study"},
    {"name": OFFICIAL_SCHEDULE_NAME, "date": "1.14", "start": "09:00", "end": "09:30", "reason": "Opening"},
]


def remote_state(events):
    """Content of the event list without synthetic ids"""
    return sorted((e.name, e.date, e.start, e.end, e.reason) for e in events)


class TestBoardController:
    """Test board controller behavior"""

    @pytest.fixture
    def data_source(self):
        """Data source that re-reads the same rows with fresh ids each time"""
        source = Mock()
        source.fetch = AsyncMock(side_effect=lambda: build_dataset(ROWS))
        return source

    @pytest.fixture
    def sync_client(self):
        client = Mock()
        client.save = AsyncMock(return_value=None)
        return client

    @pytest.fixture
    def creation_form(self):
        form = Mock()
        form.collect = AsyncMock(return_value=None)
        return form

    @pytest.fixture
    def notifier(self):
        return LoggingNotifier()

    @pytest.fixture
    def controller(self, data_source, sync_client, creation_form, notifier):
        return BoardController(
            data_source=data_source,
            sync_client=sync_client,
            creation_form=creation_form,
            notifier=notifier
        )

    def _event(self, controller, name):
        return next(e for e in controller.events if e.name == name)

    @pytest.mark.asyncio
    async def test_load_replaces_events_and_people(self, controller):
        """Test initial load"""
        assert await controller.load() is True

        assert len(controller.events) == 4
        assert controller.current_date == "1.14"
        assert controller.people() == [OFFICIAL_SCHEDULE_NAME, "Friend A", "Friend B", "Jinyo"]
        assert [e.name for e in controller.events_for_date("1.15")] == ["Friend B"]

    @pytest.mark.asyncio
    async def test_load_failure_keeps_stale_list(self, controller, data_source, notifier):
        """Test a failed reload keeps showing the previous events"""
        await controller.load()
        before = list(controller.events)

        data_source.fetch.side_effect = ScheduleSourceError("offline")
        assert await controller.load() is False

        assert controller.events == before
        assert notifier.last().level == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_available_dates_and_switching(self, controller):
        """Test date options include configured and data dates"""
        await controller.load()

        assert controller.available_dates() == ["1.14", "1.15"]

        controller.set_date("1.15")
        assert [e.name for e in controller.events_for_date()] == ["Friend B"]

        with pytest.raises(ValueError):
            controller.set_date(" ")

    @pytest.mark.asyncio
    async def test_move_is_optimistic_then_synced(self, controller, sync_client):
        """Test the local list changes before the remote call completes"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        seen_during_sync = {}

        async def save(action, data, original=None):
            moved = controller.find_event(meeting.event_id)
            seen_during_sync["local"] = (moved.name, moved.start, moved.end)

        sync_client.save.side_effect = save

        operation = MoveOperation(event=meeting, new_person="Friend A", new_start="12:00", new_end="13:00")
        assert await controller.apply(operation) is True

        assert seen_during_sync["local"] == ("Friend A", "12:00", "13:00")
        moved = controller.find_event(meeting.event_id)
        assert (moved.name, moved.start, moved.end) == ("Friend A", "12:00", "13:00")

        sync_client.save.assert_awaited_once_with(
            SyncAction.EDIT,
            moved.to_sheet_row(),
            original=meeting.to_sheet_row()
        )

    @pytest.mark.asyncio
    async def test_failed_move_sync_restores_state(self, controller, data_source, sync_client, notifier):
        """Test failed sync notifies and reloads the pre-move state"""
        await controller.load()
        before = remote_state(controller.events)
        meeting = self._event(controller, "Jinyo")

        sync_client.save.side_effect = ScheduleSyncError("HTTP 500")

        operation = MoveOperation(event=meeting, new_person="Friend A", new_start="12:00", new_end="13:00")
        assert await controller.apply(operation) is False

        assert remote_state(controller.events) == before
        assert data_source.fetch.await_count == 2
        assert notifier.last().level == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_resize_syncs_edit(self, controller, sync_client):
        """Test resize keeps id and start"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")

        operation = ResizeOperation(event=meeting, edge=ResizeEdge.BOTTOM, new_end="11:30")
        assert await controller.apply(operation) is True

        resized = controller.find_event(meeting.event_id)
        assert (resized.start, resized.end) == ("10:00", "11:30")
        assert sync_client.save.await_args.args[0] == SyncAction.EDIT

    @pytest.mark.asyncio
    async def test_delete_is_optimistic(self, controller, sync_client):
        """Test delete removes locally and sends the original row"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        controller.selected_event_id = meeting.event_id

        assert await controller.apply(DeleteOperation(event=meeting)) is True

        assert controller.find_event(meeting.event_id) is None
        assert controller.selected_event_id is None
        sync_client.save.assert_awaited_once_with(SyncAction.DELETE, meeting.to_sheet_row())

    @pytest.mark.asyncio
    async def test_failed_delete_restores_event(self, controller, sync_client, notifier):
        """Test failed delete brings the event back after reload"""
        await controller.load()
        before = remote_state(controller.events)
        meeting = self._event(controller, "Jinyo")
        sync_client.save.side_effect = ScheduleSyncError("offline")

        assert await controller.apply(DeleteOperation(event=meeting)) is False

        assert remote_state(controller.events) == before
        assert "削除に失敗しました" in notifier.last().message

    @pytest.mark.asyncio
    async def test_failed_move_reverts_when_reload_also_fails(self, controller, data_source, sync_client, notifier):
        """Test the unsaved move is undone even without a fresh list"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        sync_client.save.side_effect = ScheduleSyncError("offline")
        data_source.fetch.side_effect = ScheduleSourceError("offline")

        operation = MoveOperation(event=meeting, new_person="Jinyo", new_start="12:00", new_end="13:00")
        assert await controller.apply(operation) is False

        restored = controller.find_event(meeting.event_id)
        assert (restored.start, restored.end) == ("10:00", "11:00")
        assert len(controller.events) == 4
        assert notifier.last().level == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_failed_delete_reverts_when_reload_also_fails(self, controller, data_source, sync_client):
        """Test the deleted block comes back when sync and reload both fail"""
        await controller.load()
        before = remote_state(controller.events)
        meeting = self._event(controller, "Jinyo")
        sync_client.save.side_effect = ScheduleSyncError("offline")
        data_source.fetch.side_effect = ScheduleSourceError("offline")

        assert await controller.apply(DeleteOperation(event=meeting)) is False

        assert controller.find_event(meeting.event_id) is meeting
        assert remote_state(controller.events) == before

    @pytest.mark.asyncio
    async def test_create_collects_details_then_reloads(self, controller, creation_form, sync_client, data_source):
        """Test create goes through the form and reloads on success"""
        await controller.load()
        creation_form.collect.return_value = ScheduleDraft(
            name="Jinyo", date="1.14", start_time="13:00", end_time="14:00", reason="Lunch"
        )

        operation = CreateOperation(person="Jinyo", date="1.14", start_time="13:00", end_time="14:00")
        assert await controller.apply(operation) is True

        proposal = creation_form.collect.await_args.args[0]
        assert (proposal.name, proposal.start_time, proposal.end_time) == ("Jinyo", "13:00", "14:00")
        assert proposal.reason == ""

        sync_client.save.assert_awaited_once_with(SyncAction.CREATE, {
            "name": "Jinyo", "date": "1.14", "start": "13:00", "end": "14:00", "reason": "Lunch"
        })
        assert data_source.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_cancelled_create_does_nothing(self, controller, sync_client):
        """Test cancelling the form leaves everything unchanged"""
        await controller.load()

        operation = CreateOperation(person="Jinyo", date="1.14", start_time="13:00", end_time="14:00")
        assert await controller.apply(operation) is False

        sync_client.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_incomplete_form_is_rejected(self, controller, creation_form, sync_client, notifier):
        """Test name and reason are required"""
        await controller.load()
        creation_form.collect.return_value = ScheduleDraft(
            name="Jinyo", date="1.14", start_time="13:00", end_time="14:00", reason="  "
        )

        operation = CreateOperation(person="Jinyo", date="1.14", start_time="13:00", end_time="14:00")
        assert await controller.apply(operation) is False

        sync_client.save.assert_not_awaited()
        assert notifier.last().level == NotificationLevel.WARNING

    @pytest.mark.asyncio
    async def test_failed_create_notifies(self, controller, creation_form, sync_client, notifier):
        """Test create failure keeps the list and notifies"""
        await controller.load()
        creation_form.collect.return_value = ScheduleDraft(
            name="Jinyo", date="1.14", start_time="13:00", end_time="14:00", reason="Lunch"
        )
        sync_client.save.side_effect = ScheduleSyncError("同期先URLが設定されていません")

        operation = CreateOperation(person="Jinyo", date="1.14", start_time="13:00", end_time="14:00")
        assert await controller.apply(operation) is False

        assert len(controller.events) == 4
        assert notifier.last().level == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_open_editor_edits_in_place(self, controller, creation_form, sync_client):
        """Test editor result replaces the event with the same id"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        creation_form.collect.return_value = ScheduleDraft(
            name="Jinyo", date="1.14", start_time="10:00", end_time="11:00", reason="Standup"
        )

        assert await controller.apply(OpenEditorOperation(event=meeting)) is True

        assert controller.find_event(meeting.event_id).reason == "Standup"
        assert sync_client.save.await_args.kwargs["original"] == meeting.to_sheet_row()

    @pytest.mark.asyncio
    async def test_selection_toggle_has_no_backend_effect(self, controller, sync_client):
        """Test selection is local only"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")

        await controller.apply(SelectionToggleOperation(event_id=meeting.event_id, selected=True))
        assert controller.selected_event_id == meeting.event_id
        assert controller.snapshot().column("Jinyo").events[0].is_selected

        await controller.apply(SelectionToggleOperation(event_id=meeting.event_id, selected=False))
        assert controller.selected_event_id is None

        sync_client.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_edit_operation_clears_selection(self, controller):
        """Test committed non-selection operations drop the delete affordance"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        await controller.apply(SelectionToggleOperation(event_id=meeting.event_id, selected=True))

        await controller.apply(MoveOperation(event=meeting, new_person="Jinyo", new_start="12:00", new_end="13:00"))

        assert controller.selected_event_id is None

    @pytest.mark.asyncio
    async def test_selection_follows_machine_through_scroll(self, controller):
        """Test tap-select, then a swipe from an empty cell, leaves nothing selected"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        machine = controller.machine()
        # 列: 公式 60-170px, Friend A 170-280px, Friend B 280-390px, Jinyo 390-500px
        body = HitTarget.event_body(meeting)
        cell = HitTarget.empty_cell("Friend A")

        async def feed(sample_type, t, x, y, target=None):
            result = machine.handle(PointerSample(
                sample_type=sample_type,
                device=InputDevice.TOUCH,
                x=x,
                y=y,
                timestamp_ms=t,
                target=target or HitTarget.background()
            ))
            if result.operation is not None:
                await controller.apply(result.operation)

        await feed(SampleType.PRESS, 0, 420, 160, body)
        await feed(SampleType.RELEASE, 80, 420, 160)
        assert controller.selected_event_id == meeting.event_id

        await feed(SampleType.PRESS, 1000, 210, 550, cell)
        await feed(SampleType.MOVE, 1050, 210, 590)
        await feed(SampleType.RELEASE, 1100, 210, 590)

        assert machine.selected_event_id is None
        assert controller.selected_event_id is None
        assert not controller.snapshot().column("Jinyo").events[0].is_selected

    @pytest.mark.asyncio
    async def test_dispatch_does_not_block(self, controller, sync_client):
        """Test dispatch returns before the sync finishes"""
        await controller.load()
        meeting = self._event(controller, "Jinyo")
        release = asyncio.Event()

        async def slow_save(action, data, original=None):
            await release.wait()

        sync_client.save.side_effect = slow_save

        controller.dispatch(MoveOperation(event=meeting, new_person="Jinyo", new_start="15:00", new_end="16:00"))
        await asyncio.sleep(0)

        # 楽観的反映は同期完了前に見えている
        assert controller.find_event(meeting.event_id).start == "15:00"

        release.set()
        await controller.wait_idle()
        assert sync_client.save.await_count == 1

    @pytest.mark.asyncio
    async def test_machine_uses_current_columns(self, controller):
        """Test the state machine is bound to the current geometry"""
        await controller.load()
        controller.set_date("1.15")

        machine = controller.machine()

        assert machine.date == "1.15"
        assert machine.geometry.people == controller.people()
