"""
ユーザー通知

同期失敗などをユーザーに知らせる通知先です。
"""

import logging
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field
from rich.console import Console

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """通知レベル"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """通知内容"""
    message: str = Field(..., description="メッセージ")
    level: NotificationLevel = Field(default=NotificationLevel.INFO, description="通知レベル")
    created_at: datetime = Field(default_factory=lambda: datetime.utcnow(), description="通知時刻（UTC）")


class Notifier(Protocol):
    """通知先インターフェース"""

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> Notification:
        ...


class LoggingNotifier:
    """ログ出力のみの通知先（履歴を保持）"""

    def __init__(self):
        self.history: List[Notification] = []

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> Notification:
        """通知を記録"""
        notification = Notification(message=message, level=level)
        self.history.append(notification)

        if level == NotificationLevel.ERROR:
            logger.error(message)
        elif level == NotificationLevel.WARNING:
            logger.warning(message)
        else:
            logger.info(message)

        return notification

    def last(self) -> Optional[Notification]:
        """直近の通知"""
        return self.history[-1] if self.history else None


class ConsoleNotifier(LoggingNotifier):
    """rich コンソールに表示する通知先（CLI用）"""

    STYLES = {
        NotificationLevel.INFO: ("ℹ️", "cyan"),
        NotificationLevel.SUCCESS: ("✅", "green"),
        NotificationLevel.WARNING: ("⚠️", "yellow"),
        NotificationLevel.ERROR: ("❌", "red"),
    }

    def __init__(self, console: Optional[Console] = None):
        super().__init__()
        self.console = console or Console()

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> Notification:
        notification = super().notify(message, level)
        icon, style = self.STYLES[NotificationLevel(level)]
        self.console.print(f"{icon} {message}", style=style)
        return notification
