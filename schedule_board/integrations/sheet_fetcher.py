"""
スプレッドシート データソース統合

「リンクを知っている全員」共有の Google スプレッドシートを CSV エクスポートとして取得し、
予定リストと利用者一覧に変換します。
"""

import csv
import io
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..errors import ScheduleSourceError
from ..models.schedule import RawScheduleRow, ScheduleEvent

logger = logging.getLogger(__name__)


# シートURL未設定時（開発用）のモックデータ
MOCK_ROWS: List[Dict[str, str]] = [
    {"name": "Jinyo", "date": "1.14", "start": "10:00", "end": "11:00", "reason": "Meeting"},
    {"name": "Jinyo", "date": "1.14", "start": "10:30", "end": "11:45", "reason": "Brunch"},
    {"name": "Friend A", "date": "1.14", "start": "18:15", "end": "22:30", "reason": "Gaming"},
    {"name": "Friend B", "date": "1.15", "start": "12:00", "end": "16:00", "reason": "Study"},
    {"name": "Friend C", "date": "1.14", "start": "09:00", "end": "11:00", "reason": "Gym"},
]


class ScheduleDataset(BaseModel):
    """取得結果"""
    events: List[ScheduleEvent] = Field(default_factory=list, description="有効な予定")
    users: List[str] = Field(default_factory=list, description="ソート済みの利用者名")
    dropped_rows: int = Field(default=0, description="必須項目欠損などで除外した行数")


def build_dataset(raw_rows: Iterable[Dict[str, Any]]) -> ScheduleDataset:
    """生の行から予定リストと利用者一覧を構築（不完全な行は除外）"""
    events: List[ScheduleEvent] = []
    names = set()
    dropped = 0

    for raw in raw_rows:
        row = RawScheduleRow(**{
            key.strip().lower(): value
            for key, value in raw.items()
            if isinstance(key, str)
        })

        # 利用者一覧は名前さえあれば対象
        if row.name and row.name.strip():
            names.add(row.name.strip())

        if not row.is_complete():
            dropped += 1
            continue

        try:
            events.append(row.to_event())
        except ValidationError as e:
            logger.warning(f"不正な行を除外: {row.name} {row.date} {row.start}-{row.end} ({e.error_count()}件のエラー)")
            dropped += 1

    return ScheduleDataset(events=events, users=sorted(names), dropped_rows=dropped)


def parse_csv(text: str) -> List[Dict[str, Any]]:
    """ヘッダー付きCSVを行の辞書リストに変換"""
    reader = csv.DictReader(io.StringIO(text))
    return [row for row in reader]


class SheetFetcher:
    """
    スプレッドシート取得クライアント
    - CSVエクスポートのダウンロード
    - 行の検証と予定への変換
    - URL未設定時のモックデータ
    """

    def __init__(
        self,
        sheet_url: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30.0
    ):
        self.sheet_url = sheet_url
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds

    async def fetch(self) -> ScheduleDataset:
        """スケジュールデータを取得"""
        if not self.sheet_url:
            logger.warning("シートURLが設定されていないため、モックデータを使用します")
            return build_dataset(MOCK_ROWS)

        text = await self._download(self.sheet_url)
        dataset = build_dataset(parse_csv(text))
        logger.info(
            f"スケジュール取得完了: {len(dataset.events)}件 "
            f"(利用者 {len(dataset.users)}人, 除外 {dataset.dropped_rows}行)"
        )
        return dataset

    async def _download(self, url: str) -> str:
        """CSVをダウンロード"""
        client = self._http_client or httpx.AsyncClient(timeout=self._timeout_seconds)
        try:
            response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise ScheduleSourceError(f"スケジュールの取得に失敗しました: {exc}") from exc
        finally:
            if self._http_client is None:
                await client.aclose()

        if response.status_code < 200 or response.status_code >= 300:
            raise ScheduleSourceError(f"スケジュールの取得に失敗しました (HTTP {response.status_code})")

        return response.text
