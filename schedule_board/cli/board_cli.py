"""
Schedule Board CLI - タイムグリッド スケジュールボード操作用CLI
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from ..board.controller import BoardController
from ..board.view import BoardSnapshot
from ..config import BoardSettings
from ..integrations.notifier import ConsoleNotifier
from ..integrations.sheet_fetcher import SheetFetcher
from ..integrations.sheet_sync import SheetSyncClient
from ..models.input import HitTarget, InputDevice, PointerSample, SampleType, TargetKind
from ..models.operations import CreateOperation, CreateSource, OperationKind
from ..models.schedule import MINUTES_PER_DAY, ScheduleEvent, format_minutes, parse_hhmm
from .creation_form import PromptCreationForm

console = Console()
app = typer.Typer(help="Schedule Board CLI - タイムグリッド スケジュールボード")

# ログ設定
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_controller(settings: Optional[BoardSettings] = None) -> BoardController:
    """環境変数の設定からコントローラーを構築"""
    settings = settings or BoardSettings.from_env()
    return BoardController(
        data_source=SheetFetcher(settings.sheet_url, timeout_seconds=settings.request_timeout_seconds),
        sync_client=SheetSyncClient(settings.sync_url, timeout_seconds=settings.request_timeout_seconds),
        creation_form=PromptCreationForm(console),
        notifier=ConsoleNotifier(console),
        settings=settings
    )


# ----------------------------------------------------------------------
# リプレイスクリプト
# ----------------------------------------------------------------------

def resolve_target(target_def: Optional[Dict[str, Any]], events: List[ScheduleEvent]) -> HitTarget:
    """
    スクリプトのターゲット指定を HitTarget に変換

    予定ブロックは {kind: event_body, person: 名前, start: "HH:MM"} のように
    列と開始時刻で指定します。
    """
    if not target_def:
        return HitTarget.background()

    kind = TargetKind(target_def.get("kind", TargetKind.BACKGROUND.value))
    person = target_def.get("person")

    if kind == TargetKind.BACKGROUND:
        return HitTarget.background()
    if kind == TargetKind.EMPTY_CELL:
        return HitTarget.empty_cell(person)

    start = target_def.get("start")
    start_minutes = parse_hhmm(start) if start else None
    for event in events:
        if event.name == person and (start_minutes is None or event.start_minutes == start_minutes):
            return HitTarget(kind=kind, person=person, event=event)

    raise typer.BadParameter(f"ターゲットの予定が見つかりません: {person} {start}")


def load_script(path: Path) -> Dict[str, Any]:
    """YAMLのジェスチャースクリプトを読み込む"""
    with open(path, 'r', encoding='utf-8') as f:
        script = yaml.safe_load(f) or {}

    if not isinstance(script.get("samples"), list):
        raise typer.BadParameter("スクリプトには samples のリストが必要です")
    return script


async def replay_script(
    controller: BoardController,
    script: Dict[str, Any],
    apply: bool = False
) -> List[Dict[str, Any]]:
    """スクリプトの入力列をステートマシンに流し、確定した操作を返す"""
    if script.get("date"):
        controller.set_date(str(script["date"]))

    machine = controller.machine()
    default_device = InputDevice(script.get("device", InputDevice.TOUCH.value))
    results = []

    for index, step in enumerate(script["samples"]):
        step_type = step.get("type")
        timestamp = float(step.get("t", 0))

        if step_type == "tick":
            result = machine.tick(timestamp)
        else:
            sample = PointerSample(
                sample_type=SampleType(step_type),
                device=InputDevice(step.get("device", default_device.value)),
                x=float(step.get("x", 0)),
                y=float(step.get("y", 0)),
                timestamp_ms=timestamp,
                target=resolve_target(step.get("target"), controller.events_for_date())
            )
            result = machine.handle(sample)

        if result.operation is None:
            continue

        results.append({
            "step": index,
            "t": timestamp,
            "phase": machine.phase.value,
            "operation": result.operation
        })

        if apply:
            await controller.apply(result.operation)

    return results


# ----------------------------------------------------------------------
# 表示
# ----------------------------------------------------------------------

def _display_board(snapshot: BoardSnapshot, settings: BoardSettings):
    """1時間ごとの行でボードを表示"""
    table = Table(title=f"📅 {snapshot.date}")
    table.add_column("Time", style="cyan", no_wrap=True)
    for person in snapshot.people:
        style = "bold magenta" if person == settings.official_name else None
        table.add_column(person, style=style)

    for hour_index, label in enumerate(snapshot.hour_labels):
        hour_start = (settings.start_hour + hour_index) * 60
        row = [label]
        for column in snapshot.columns:
            cells = []
            for view in column.events:
                if hour_start <= view.event.start_minutes < hour_start + 60:
                    lane = f" [{view.column_index + 1}/{view.column_count}]" if view.column_count > 1 else ""
                    cells.append(f"{view.event.start}-{view.event.end} {view.event.reason}{lane}")
            row.append("\n".join(cells))
        table.add_row(*row)

    console.print(table)


def _describe_operation(operation) -> str:
    """操作の要約"""
    kind = operation.kind
    if kind == OperationKind.CREATE:
        return f"{operation.person} {operation.start_time}-{operation.end_time} ({operation.source.value})"
    if kind == OperationKind.MOVE:
        return (
            f"{operation.event.name} {operation.event.start}-{operation.event.end} → "
            f"{operation.new_person} {operation.new_start}-{operation.new_end}"
        )
    if kind == OperationKind.RESIZE:
        updated = operation.updated_event()
        return f"{operation.event.start}-{operation.event.end} → {updated.start}-{updated.end} ({operation.edge.value})"
    if kind == OperationKind.SELECTION_TOGGLE:
        return f"{operation.event_id} selected={operation.selected}"
    return f"{operation.event.name} {operation.event.start}-{operation.event.end}"


# ----------------------------------------------------------------------
# コマンド
# ----------------------------------------------------------------------

@app.command()
def show(
    date: Optional[str] = typer.Option(None, help="表示する日付キー (例: 1.14)")
):
    """日付ごとのボード表示"""

    async def _show():
        controller = build_controller()
        await controller.load()
        if date:
            controller.set_date(date)
        _display_board(controller.snapshot(), controller.settings)

    asyncio.run(_show())


@app.command()
def people(
    date: Optional[str] = typer.Option(None, help="日付キー")
):
    """列（人）一覧"""

    async def _people():
        controller = build_controller()
        await controller.load()
        if date:
            controller.set_date(date)

        table = Table(title=f"People ({controller.current_date})")
        table.add_column("#", style="cyan")
        table.add_column("Name")
        table.add_column("Events", justify="right")

        day_events = controller.events_for_date()
        for index, name in enumerate(controller.people(), start=1):
            count = sum(1 for e in day_events if e.name == name)
            table.add_row(str(index), name, str(count))

        console.print(table)

    asyncio.run(_people())


@app.command()
def dates():
    """切替可能な日付一覧"""

    async def _dates():
        controller = build_controller()
        await controller.load()

        table = Table(title="Dates")
        table.add_column("Date", style="cyan")
        table.add_column("Events", justify="right")
        table.add_column("Default")

        for d in controller.available_dates():
            default = "✅" if d == controller.settings.default_date else ""
            table.add_row(d, str(len(controller.events_for_date(d))), default)

        console.print(table)
        if controller.settings.sheet_edit_url:
            console.print(f"📝 スプレッドシート: {controller.settings.sheet_edit_url}")

    asyncio.run(_dates())


@app.command()
def replay(
    script_file: Path = typer.Argument(..., help="ジェスチャースクリプト (YAML)"),
    apply: bool = typer.Option(False, "--apply", help="確定した操作をコントローラーで反映")
):
    """ジェスチャースクリプトの再生"""

    async def _replay():
        script = load_script(script_file)
        controller = build_controller()
        await controller.load()

        results = await replay_script(controller, script, apply=apply)
        await controller.wait_idle()

        table = Table(title=f"Operations ({script_file.name})")
        table.add_column("Step", style="cyan", justify="right")
        table.add_column("t (ms)", justify="right")
        table.add_column("Kind", style="green")
        table.add_column("Details")

        for item in results:
            operation = item["operation"]
            table.add_row(
                str(item["step"]),
                f"{item['t']:.0f}",
                operation.kind.value,
                _describe_operation(operation)
            )

        console.print(table)
        console.print(f"🧪 確定した操作: {len(results)}件", style="green")

        if apply:
            _display_board(controller.snapshot(), controller.settings)

    asyncio.run(_replay())


@app.command()
def add(
    name: str = typer.Option(..., help="名前（列）"),
    start: str = typer.Option(..., help="開始時刻 HH:MM"),
    end: Optional[str] = typer.Option(None, help="終了時刻 HH:MM（省略時は1時間）"),
    date: Optional[str] = typer.Option(None, help="日付キー")
):
    """予定の追加（入力フォームを開く）"""

    async def _add():
        controller = build_controller()
        await controller.load()
        if date:
            controller.set_date(date)

        start_minutes = parse_hhmm(start)
        end_time = end or format_minutes(min(start_minutes + 60, MINUTES_PER_DAY))

        operation = CreateOperation(
            person=name,
            date=controller.current_date,
            start_time=format_minutes(start_minutes),
            end_time=end_time,
            source=CreateSource.DOUBLE_CLICK
        )
        if await controller.apply(operation):
            _display_board(controller.snapshot(), controller.settings)

    asyncio.run(_add())


if __name__ == "__main__":
    app()
