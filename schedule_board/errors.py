"""
スケジュールボード例外定義
"""


class ScheduleBoardError(Exception):
    """スケジュールボードエラー基底クラス"""
    pass


class ScheduleSourceError(ScheduleBoardError):
    """スケジュールデータ取得エラー"""
    pass


class ScheduleSyncError(ScheduleBoardError):
    """リモート同期（保存・更新・削除）エラー"""
    pass


class InvalidScheduleError(ScheduleBoardError):
    """スケジュールデータ不正エラー"""
    pass
