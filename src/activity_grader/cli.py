"""Console script for activity_grader."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from .config import ConfigLoader, PortalConfig
from .dashboard import compute_stats
from .filtering import ALL, FilterCriteria, SortKey, StatusFilter, select_and_order
from .grading import AnthropicScorer, BulkGrader, BulkProgress, GradingWorkflow, ScorerError
from .lookup import find_result, watch_for_review
from .output import NoMatchingRecordsError, build_class_report, render_class_report_pdf, report_filename, write_csv
from .portal import PortalAPI, PortalAPIError, PortalAuthError, create_api_client
from .rubrics import DIMENSIONS, InvalidScoreError
from .state import AppState, login_succeeded
from .store import SubmissionStore
from .upload import SubmissionValidationError, prepare_upload
from .utils.logging import setup_logging

app = typer.Typer(help="Grade classroom activity videos.")
console = Console()


@dataclass
class Context:
    config: PortalConfig
    api: PortalAPI
    store: SubmissionStore


_context: Context | None = None


@app.callback()
def main(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
):
    """Load configuration and connect to the portal backend."""
    global _context
    setup_logging(logging.DEBUG if verbose else logging.WARNING, log_file=log_file)
    config = ConfigLoader().load(config_file)
    try:
        api = create_api_client(
            config.backend.url,
            timeout=config.backend.timeout,
            verify_ssl=config.backend.verify_ssl,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    _context = Context(config=config, api=api, store=SubmissionStore(api))


def _ctx() -> Context:
    if _context is None:
        raise RuntimeError("main callback did not run")
    return _context


def _load(ctx: Context):
    try:
        return ctx.store.refresh()
    except PortalAPIError as e:
        console.print(f"[red]Could not load submissions:[/red] {e}")
        raise typer.Exit(1)


def _teacher_state(ctx: Context, username: str, pin: str) -> AppState:
    try:
        result = ctx.api.login(username, pin)
    except PortalAuthError as e:
        console.print(f"[red]Login refused:[/red] {e}")
        raise typer.Exit(1)
    except PortalAPIError as e:
        console.print(f"[red]Login failed:[/red] {e}")
        raise typer.Exit(1)
    return login_succeeded(AppState(), result.teacher_name)


def _criteria(text, grade, room, activity, status) -> FilterCriteria:
    return FilterCriteria(text=text, grade=grade, room=room, activity_type=activity, status=StatusFilter(status))


def _submission_table(submissions) -> Table:
    table = Table(show_lines=False)
    table.add_column("Row", justify="right")
    table.add_column("No.", justify="right")
    table.add_column("Name")
    table.add_column("Class")
    table.add_column("Activity")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    for s in submissions:
        score = f"{s.review.total_score}/20" if s.review is not None else "-"
        status = "[green]Graded[/green]" if s.is_graded else "[yellow]Pending[/yellow]"
        table.add_row(
            str(s.row_id or ""), s.student_number, s.name,
            f"{s.grade_label} {s.room_label}", s.activity_label, score, status,
        )
    return table


UsernameOption = typer.Option(..., "--username", "-u", prompt=True, help="Teacher username")
PinOption = typer.Option(..., "--pin", prompt=True, hide_input=True, help="Teacher PIN")


@app.command("login")
def login_command(username: str = UsernameOption, pin: str = PinOption):
    """Check teacher credentials with the backend."""
    state = _teacher_state(_ctx(), username, pin)
    console.print(f"[green]Welcome, {state.teacher_name}[/green]")


@app.command("list")
def list_command(
    text: str = typer.Option("", "--search", "-s", help="Name or student number"),
    grade: str = typer.Option(ALL, help="Prathom 5, Prathom 6 or All"),
    room: str = typer.Option(ALL, help="Room 1..Room 4 or All"),
    activity: str = typer.Option(ALL, help="Sports Day, Children Day or All"),
    status: str = typer.Option(StatusFilter.ALL.value, help="All, Pending or Graded"),
    sort: SortKey = typer.Option(SortKey.LATEST, help="Sort order"),
):
    """List submissions with filters and ordering."""
    ctx = _ctx()
    submissions = select_and_order(_load(ctx), _criteria(text, grade, room, activity, status), sort)
    console.print(_submission_table(submissions))
    console.print(f"{len(submissions)} submissions")


@app.command("grade")
def grade_command(
    row_id: int = typer.Argument(..., help="Row id of the submission"),
    ai: bool = typer.Option(False, "--ai", help="Start from an AI suggestion"),
    content_accuracy: Optional[int] = typer.Option(None, min=0, max=5),
    participation: Optional[int] = typer.Option(None, min=0, max=5),
    presentation: Optional[int] = typer.Option(None, min=0, max=5),
    discipline: Optional[int] = typer.Option(None, min=0, max=5),
    comment: Optional[str] = typer.Option(None, help="Teacher comment"),
    username: str = UsernameOption,
    pin: str = PinOption,
):
    """Grade one submission, optionally starting from an AI suggestion."""
    ctx = _ctx()
    state = _teacher_state(ctx, username, pin)
    _load(ctx)
    submission = ctx.store.get(row_id)
    if submission is None:
        console.print(f"[red]No submission with row id {row_id}[/red]")
        raise typer.Exit(1)

    workflow = GradingWorkflow(ctx.api, AnthropicScorer(ctx.config.scorer), ctx.store, state)
    workflow.open(submission)

    overrides = {
        "content_accuracy": content_accuracy,
        "participation": participation,
        "presentation": presentation,
        "discipline": discipline,
    }
    manual_input = comment is not None or any(v is not None for v in overrides.values())

    if ai:
        try:
            workflow.auto_grade_once()
        except ScorerError as e:
            if not manual_input:
                # nothing to save but the seed rubric
                workflow.cancel()
                console.print(f"[red]AI suggestion failed, grade not saved:[/red] {e}")
                raise typer.Exit(1)
            console.print(f"[yellow]AI suggestion failed, continuing manually:[/yellow] {e}")

    try:
        for key, value in overrides.items():
            if value is not None:
                workflow.set_score(key, value)
    except InvalidScoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    if comment is not None:
        workflow.set_comment(comment)

    rubric = workflow.state.editing.rubric
    for dim in DIMENSIONS:
        console.print(f"  {dim.label}: {getattr(rubric, dim.key)}/5")
    console.print(f"  รวม: {rubric.total_score}/20 ({rubric.percentage}%)")

    try:
        workflow.save()
    except PortalAPIError as e:
        console.print(f"[red]Saving failed:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Saved grade for {submission.name}[/green]")


@app.command("grade-all")
def grade_all_command(
    text: str = typer.Option("", "--search", "-s"),
    grade: str = typer.Option(ALL),
    room: str = typer.Option(ALL),
    activity: str = typer.Option(ALL),
    username: str = UsernameOption,
    pin: str = PinOption,
):
    """AI-grade every pending submission matching the filters."""
    ctx = _ctx()
    _teacher_state(ctx, username, pin)
    visible = select_and_order(_load(ctx), _criteria(text, grade, room, activity, StatusFilter.ALL.value))

    grader = BulkGrader(ctx.api, AnthropicScorer(ctx.config.scorer), ctx.store)
    with Progress(
        TextColumn("{task.description}"), BarColumn(), MofNCompleteColumn(), console=console,
    ) as progress:
        task = progress.add_task("AI grading", total=None)

        def on_progress(p: BulkProgress) -> None:
            progress.update(task, total=p.total, completed=p.current - 1, description=f"AI grading {p.name}")

        result = grader.run(visible, on_progress=on_progress)
        progress.update(task, completed=result.total)

    console.print(f"[green]{result.succeeded}/{result.total} graded[/green]")
    for failure in result.failed:
        console.print(f"[red]  failed[/red] {failure.name}: {failure.error}")
    for row_id in result.skipped:
        console.print(f"[yellow]  skipped[/yellow] row {row_id} (graded elsewhere)")


@app.command("export-csv")
def export_csv_command(
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o"),
    username: str = UsernameOption,
    pin: str = PinOption,
):
    """Export all grades as a spreadsheet-ready CSV."""
    ctx = _ctx()
    _teacher_state(ctx, username, pin)
    path = write_csv(_load(ctx), output_dir or ctx.config.report.output_dir)
    console.print(f"Exported: {path}")


@app.command("report")
def report_command(
    grade: str = typer.Option(..., help="Prathom 5 or Prathom 6"),
    room: str = typer.Option(..., help="Room 1..Room 4"),
    activity: str = typer.Option(..., help="Sports Day or Children Day"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o"),
    username: str = UsernameOption,
    pin: str = PinOption,
):
    """Print a class report PDF for one grade, room and activity."""
    ctx = _ctx()
    state = _teacher_state(ctx, username, pin)
    teacher_name = ctx.config.report.teacher_name or state.teacher_name
    try:
        report = build_class_report(_load(ctx), grade, room, activity, teacher_name)
    except NoMatchingRecordsError as e:
        console.print(f"[yellow]No matching records:[/yellow] {e}")
        raise typer.Exit(1)

    out_dir = output_dir or ctx.config.report.output_dir
    path = render_class_report_pdf(
        report, out_dir / report_filename(grade, room, activity), ctx.config.report.font_path,
    )
    console.print(f"Report: {path}")


@app.command("stats")
def stats_command(activity: str = typer.Option(ALL, help="Sports Day, Children Day or All")):
    """Show grading progress and score statistics."""
    stats = compute_stats(_load(_ctx()), activity)
    console.print(f"Submissions: {stats.total}  Graded: {stats.graded_count}  Pending: {stats.pending_count}")
    console.print(f"Average: {stats.average_score}/20")

    rooms = Table(title="Average by room")
    rooms.add_column("Room")
    rooms.add_column("Average", justify="right")
    for r in stats.room_averages:
        rooms.add_row(r.room.label, f"{r.average:.1f}")
    console.print(rooms)

    bands = Table(title="Distribution")
    bands.add_column("Band")
    bands.add_column("Students", justify="right")
    for b in stats.distribution:
        bands.add_row(b.label, str(b.count))
    console.print(bands)


@app.command("check-result")
def check_result_command(
    name: str = typer.Argument(..., help="Student name"),
    grade: str = typer.Option(..., help="Prathom 5 or Prathom 6"),
    room: str = typer.Option(..., help="Room 1..Room 4"),
    activity: str = typer.Option(..., help="Sports Day or Children Day"),
    watch: bool = typer.Option(False, "--watch", help="Keep polling until graded"),
):
    """Look up a student's score."""
    ctx = _ctx()
    result = find_result(_load(ctx), name, grade, room, activity)
    if result is None:
        console.print(f"ไม่พบข้อมูลชื่อ \"{name}\"")
        raise typer.Exit(1)

    if result.review is None and watch:
        console.print("กำลังรอคุณครูตรวจอยู่...")
        with watch_for_review(ctx.store, result, ctx.config.polling.interval_seconds) as task:
            try:
                task.wait()
            except KeyboardInterrupt:
                console.print("Stopped waiting")
        result = ctx.store.get(result.row_id) or result

    if result.review is None:
        console.print("กำลังรอคุณครูตรวจอยู่นะ")
        return

    review = result.review
    console.print(f"[bold]{result.name}[/bold]: {review.total_score}/20 ({review.percentage}%)")
    if review.comment:
        console.print(f"\"{review.comment}\"")


@app.command("upload")
def upload_command(
    name: str = typer.Option(..., help="Student name"),
    student_number: str = typer.Option(..., "--number", help="Student number"),
    video: Path = typer.Option(..., exists=False, help="Video file"),
    grade: str = typer.Option("Prathom 5"),
    room: str = typer.Option("Room 1"),
    activity: str = typer.Option("Sports Day"),
):
    """Upload a student activity video."""
    ctx = _ctx()
    try:
        request = prepare_upload(name, student_number, video, grade, room, activity)
    except SubmissionValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    try:
        ctx.api.upload_submission(request)
    except PortalAPIError as e:
        console.print(f"[red]Upload failed:[/red] {e}")
        raise typer.Exit(1)
    console.print("[green]Uploaded[/green]")


if __name__ == "__main__":
    app()
