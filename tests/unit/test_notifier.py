"""
Unit tests for user notifications
"""

import io
from datetime import datetime, timedelta

import pytest
from freezegun import freeze_time
from rich.console import Console

# Import project modules
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '../..'))

from schedule_board.integrations.notifier import ConsoleNotifier, LoggingNotifier, NotificationLevel


class TestNotifiers:
    """Test notification history and output"""

    @freeze_time("2026-01-14 10:00:00")
    def test_notification_timestamp(self):
        notifier = LoggingNotifier()

        notification = notifier.notify("保存しました", NotificationLevel.SUCCESS)

        assert notification.created_at == datetime(2026, 1, 14, 10, 0, 0)
        assert notifier.last() is notification

    def test_timestamps_follow_clock(self):
        notifier = LoggingNotifier()

        with freeze_time("2026-01-14 10:00:00") as frozen:
            first = notifier.notify("first")
            frozen.tick(delta=timedelta(seconds=30))
            second = notifier.notify("second")

        assert second.created_at - first.created_at == timedelta(seconds=30)

    def test_history_order(self):
        notifier = LoggingNotifier()
        assert notifier.last() is None

        notifier.notify("first")
        notifier.notify("second", NotificationLevel.WARNING)

        assert [n.message for n in notifier.history] == ["first", "second"]
        assert notifier.history[0].level == NotificationLevel.INFO

    def test_error_is_logged(self, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level("ERROR"):
            notifier.notify("修正に失敗しました", NotificationLevel.ERROR)

        assert "修正に失敗しました" in caplog.text

    def test_console_output(self):
        output = io.StringIO()
        notifier = ConsoleNotifier(Console(file=output, force_terminal=False, width=120))

        notifier.notify("削除に失敗しました", NotificationLevel.ERROR)

        assert "削除に失敗しました" in output.getvalue()
        assert len(notifier.history) == 1
