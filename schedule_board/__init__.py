"""
Time-Grid Scheduling Board

人（列）× 時刻（行）のグリッド上で予定ブロックを作成・移動・伸縮・削除する
スケジュールボード:
- ポインタ／タッチ入力をスケジュール操作に変換するインタラクションエンジン
- 重なった予定を横方向のレーンに割り当てるレイアウト解決
- 楽観的更新とスプレッドシートへの同期を行うボードコントローラー
"""

__version__ = "0.1.0"
