"""
External Integrations
"""

from .sheet_fetcher import SheetFetcher, ScheduleDataset, build_dataset, parse_csv, MOCK_ROWS
from .sheet_sync import SheetSyncClient, SyncAction, build_sync_body
from .notifier import Notifier, LoggingNotifier, ConsoleNotifier, Notification, NotificationLevel

__all__ = [
    "SheetFetcher",
    "ScheduleDataset",
    "build_dataset",
    "parse_csv",
    "MOCK_ROWS",
    "SheetSyncClient",
    "SyncAction",
    "build_sync_body",
    "Notifier",
    "LoggingNotifier",
    "ConsoleNotifier",
    "Notification",
    "NotificationLevel"
]
