"""
スプレッドシート同期統合

Google Apps Script Web App に作成・編集・削除リクエストを送信します。
Web App は結果を返さない前提のため、例外が発生しなければ成功とみなします。
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from ..errors import ScheduleSyncError

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """同期アクション"""
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


def build_sync_body(
    action: SyncAction,
    data: Dict[str, Any],
    original: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Apps Script に送るリクエストボディを構築"""
    if action == SyncAction.CREATE:
        return {"action": "create", "data": data}
    if action == SyncAction.EDIT:
        if original is None:
            raise ValueError('編集には元の行データが必要です')
        return {"action": "edit", "original": original, "new": data}
    return {"action": "delete", "original": data}


class SheetSyncClient:
    """
    Apps Script 同期クライアント
    - 作成・編集・削除リクエスト送信
    - 通信エラーの ScheduleSyncError への変換
    """

    def __init__(
        self,
        script_url: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30.0
    ):
        self.script_url = script_url
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds

        # 送信統計
        self.stats = {
            "requests": 0,
            "failures": 0
        }

    async def save(
        self,
        action: SyncAction,
        data: Dict[str, Any],
        original: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        変更をリモートに送信

        Args:
            action: create / edit / delete
            data: 新しい行（delete の場合は削除する行）
            original: 編集前の行（edit の場合のみ）

        Raises:
            ScheduleSyncError: URL未設定・通信エラー・HTTPエラー
        """
        if not self.script_url:
            raise ScheduleSyncError("同期先URLが設定されていません")

        body = build_sync_body(SyncAction(action), data, original)
        self.stats["requests"] += 1

        client = self._http_client or httpx.AsyncClient(timeout=self._timeout_seconds)
        try:
            response = await client.post(
                self.script_url,
                json=body,
                headers={"Content-Type": "application/json"},
                follow_redirects=True
            )
        except httpx.HTTPError as exc:
            self.stats["failures"] += 1
            raise ScheduleSyncError(f"同期リクエストに失敗しました: {exc}") from exc
        finally:
            if self._http_client is None:
                await client.aclose()

        if response.status_code < 200 or response.status_code >= 300:
            self.stats["failures"] += 1
            raise ScheduleSyncError(f"同期リクエストに失敗しました (HTTP {response.status_code})")

        logger.info(f"同期完了: {body['action']}")

    async def create(self, row: Dict[str, Any]) -> None:
        """行を作成"""
        await self.save(SyncAction.CREATE, row)

    async def edit(self, original: Dict[str, Any], new: Dict[str, Any]) -> None:
        """行を更新"""
        await self.save(SyncAction.EDIT, new, original=original)

    async def delete(self, original: Dict[str, Any]) -> None:
        """行を削除"""
        await self.save(SyncAction.DELETE, original)
