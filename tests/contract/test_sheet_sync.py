"""
Apps Script 同期のコントラクトテスト。

作成・編集・削除のリクエストボディと、失敗時の例外変換を検証します。
"""

import json

import httpx
import pytest

# Import project modules
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '../..'))

from schedule_board.errors import ScheduleSyncError
from schedule_board.integrations.sheet_sync import SheetSyncClient, SyncAction, build_sync_body

SCRIPT_URL = "https://script.google.com/macros/s/test/exec"

ORIGINAL = {"name": "Jinyo", "date": "1.14", "start": "10:00", "end": "11:00", "reason": "Meeting"}
UPDATED = {"name": "Friend A", "date": "1.14", "start": "12:00", "end": "13:00", "reason": "Meeting"}


class TestSheetSyncClient:
    """Apps Script 同期コントラクトテスト。"""

    @pytest.fixture
    def captured(self):
        return []

    @pytest.fixture
    def http_client(self, captured):
        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"result": "success"})

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_create_body(self, http_client, captured):
        """作成リクエストは data に行を持つ。"""
        client = SheetSyncClient(SCRIPT_URL, http_client=http_client)

        await client.save(SyncAction.CREATE, UPDATED)

        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == SCRIPT_URL
        assert json.loads(request.content) == {"action": "create", "data": UPDATED}

    @pytest.mark.asyncio
    async def test_edit_body(self, http_client, captured):
        """編集リクエストは元の行と新しい行を持つ。"""
        client = SheetSyncClient(SCRIPT_URL, http_client=http_client)

        await client.edit(ORIGINAL, UPDATED)

        assert json.loads(captured[0].content) == {"action": "edit", "original": ORIGINAL, "new": UPDATED}

    @pytest.mark.asyncio
    async def test_delete_body(self, http_client, captured):
        """削除リクエストは元の行のみを持つ。"""
        client = SheetSyncClient(SCRIPT_URL, http_client=http_client)

        await client.delete(ORIGINAL)

        assert json.loads(captured[0].content) == {"action": "delete", "original": ORIGINAL}
        assert client.stats == {"requests": 1, "failures": 0}

    @pytest.mark.asyncio
    async def test_missing_url(self):
        """URL未設定は送信せずにエラー。"""
        client = SheetSyncClient(None)

        with pytest.raises(ScheduleSyncError):
            await client.create(UPDATED)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """HTTPエラーは ScheduleSyncError になる。"""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="error")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = SheetSyncClient(SCRIPT_URL, http_client=http_client)
            with pytest.raises(ScheduleSyncError):
                await client.edit(ORIGINAL, UPDATED)

        assert client.stats["failures"] == 1

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """通信エラーは ScheduleSyncError になる。"""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = SheetSyncClient(SCRIPT_URL, http_client=http_client)
            with pytest.raises(ScheduleSyncError):
                await client.delete(ORIGINAL)


class TestBuildSyncBody:
    """リクエストボディ構築のテスト。"""

    def test_edit_requires_original(self):
        with pytest.raises(ValueError):
            build_sync_body(SyncAction.EDIT, UPDATED)
