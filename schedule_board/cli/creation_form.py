"""
対話式の予定入力フォーム

rich のプロンプトで名前・時刻・内容を入力します。
"""

import logging
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from ..models.schedule import ScheduleDraft

logger = logging.getLogger(__name__)


class PromptCreationForm:
    """ターミナル用の作成・編集フォーム"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    async def collect(self, proposal: ScheduleDraft) -> Optional[ScheduleDraft]:
        """提案内容を初期値として入力を受け付ける（保存しなければ None）"""
        self.console.print(Panel(
            f"👤 {proposal.name}\n"
            f"📅 {proposal.date}\n"
            f"🕒 {proposal.start_time} - {proposal.end_time}",
            title="新しい予定",
            border_style="cyan"
        ))

        name = Prompt.ask("名前", default=proposal.name, console=self.console)
        start_time = Prompt.ask("開始時刻", default=proposal.start_time, console=self.console)
        end_time = Prompt.ask("終了時刻", default=proposal.end_time, console=self.console)
        reason = Prompt.ask("内容", default=proposal.reason, console=self.console)

        try:
            draft = ScheduleDraft(
                name=name,
                date=proposal.date,
                start_time=start_time,
                end_time=end_time,
                reason=reason
            )
        except ValidationError as e:
            logger.warning(f"フォーム入力が不正です: {e.error_count()}件のエラー")
            self.console.print(f"❌ 入力内容が不正です: {e.errors()[0]['msg']}", style="red")
            return None

        if not Confirm.ask("保存しますか？", default=True, console=self.console):
            return None
        return draft
