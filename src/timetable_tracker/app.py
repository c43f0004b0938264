"""Interactive CLI application."""
import logging
import os
import sqlite3
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from timetable_tracker.db import init_db, DEFAULT_DB_PATH
from timetable_tracker.errors import TrackerError
from timetable_tracker.importer import parse_file
from timetable_tracker.ingest import ingest
from timetable_tracker.ledger import daily_status, mark_attendance
from timetable_tracker.models import AppState, MarkStatus, ProjectionStatus, Weekday
from timetable_tracker.override import parse_count, set_attendance_counters
from timetable_tracker.projection import subject_summary
from timetable_tracker.schedule import (
    find_entry, normalize_time, preview_rows, time_slots, todays_classes, update_entry,
)
from timetable_tracker.settings import get_threshold, set_threshold
from timetable_tracker.storage import load_state, save_state

logger = logging.getLogger(__name__)

console = Console()

STATUS_COLORS = {
    ProjectionStatus.GOOD: "green",
    ProjectionStatus.WARNING: "yellow",
    ProjectionStatus.DANGER: "red",
    ProjectionStatus.UNKNOWN: "dim",
}
MARK_LABELS = {
    MarkStatus.NONE: "[dim]Mark[/dim]",
    MarkStatus.PRESENT: "[green]Present[/green]",
    MarkStatus.ABSENT: "[red]Absent[/red]",
}


def setup_logging() -> None:
    level = os.environ.get("TIMETABLE_TRACKER_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Timetable & Attendance[/bold]\n[dim]Track your classes and stay above the threshold[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's classes"),
        ("mark", "Mark attendance for a class today"),
        ("timetable", "Weekly timetable"),
        ("edit", "Edit a timetable slot"),
        ("stats", "Attendance overview"),
        ("subjects", "Subject details"),
        ("override", "Set a subject's totals by hand"),
        ("upload", "Load a timetable file"),
        ("threshold", "Change the attendance threshold"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def commit(db_path: str, state: AppState) -> AppState:
    """Persist a new state; the in-memory copy stays authoritative either way."""
    if not save_state(db_path, state):
        console.print("[yellow]Could not save your data. Changes are kept for this session.[/yellow]")
    return state


def next_mark(status: MarkStatus) -> bool:
    """First tap marks present, the next one absent, then present again."""
    return status != MarkStatus.PRESENT


def cmd_today(db_path: str, state: AppState) -> AppState:
    classes = todays_classes(state)
    if not classes:
        if not state.schedule:
            console.print("[yellow]Upload your timetable to see today's schedule.[/yellow]")
        else:
            today = Weekday.today()
            console.print(f"[yellow]No classes scheduled for {today.value if today else 'the weekend'}.[/yellow]")
        return state
    day = classes[0].day.value
    table = Table(title=f"Today's Classes - {day}")
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Subject", style="cyan")
    table.add_column("Room")
    table.add_column("Attendance")
    for i, entry in enumerate(classes, 1):
        status = daily_status(state.daily_marks, entry.id, subject=entry.subject)
        table.add_row(str(i), entry.time, entry.subject, entry.room or "[dim]-[/dim]", MARK_LABELS[status])
    console.print(table)
    return state


def cmd_mark(db_path: str, state: AppState) -> AppState:
    classes = todays_classes(state)
    if not classes:
        return cmd_today(db_path, state)
    cmd_today(db_path, state)
    choice = Prompt.ask("Class number", choices=[str(i) for i in range(1, len(classes) + 1)])
    entry = classes[int(choice) - 1]
    status = daily_status(state.daily_marks, entry.id, subject=entry.subject)
    is_present = next_mark(status)
    state = commit(db_path, mark_attendance(state, entry.id, entry.subject, is_present))
    label = "Present" if is_present else "Absent"
    console.print(f"[green]Attendance marked:[/green] {entry.subject} - {label}")
    return state


def cmd_timetable(db_path: str, state: AppState) -> AppState:
    if not state.schedule:
        console.print("[yellow]No timetable yet. Use 'upload' to load one.[/yellow]")
        return state
    table = Table(title="Weekly Timetable")
    table.add_column("Time", style="bold")
    for day in Weekday:
        table.add_column(day.value)
    for time in time_slots(state):
        cells = []
        for day in Weekday:
            entry = find_entry(state, day, time)
            if entry is None:
                cells.append("")
            elif entry.room:
                cells.append(f"[cyan]{entry.subject}[/cyan]\n[dim]{entry.room}[/dim]")
            else:
                cells.append(f"[cyan]{entry.subject}[/cyan]")
        table.add_row(time, *cells)
    console.print(table)
    return state


def cmd_edit(db_path: str, state: AppState) -> AppState:
    day = Weekday.parse(Prompt.ask("Day", choices=[d.value for d in Weekday]))
    time = normalize_time(Prompt.ask("Time (HH:MM)"))
    entry = find_entry(state, day, time)
    subject = Prompt.ask("Subject", default=entry.subject if entry else "").strip()
    if not subject:
        console.print("[yellow]No subject entered, nothing changed.[/yellow]")
        return state
    room = Prompt.ask("Room (optional)", default=entry.room if entry else "")
    # today's mark on this slot belongs to the old subject's counters
    locked = (
        entry is not None and entry.subject != subject
        and daily_status(state.daily_marks, entry.id) != MarkStatus.NONE
    )
    state = update_entry(state, day, time, subject, room)
    choice = Prompt.ask("Mark attendance", choices=["present", "absent", "skip"], default="skip")
    if choice != "skip" and locked:
        console.print(
            f"[yellow]This slot was already marked today for {entry.subject}; "
            f"attendance for {subject} starts next time.[/yellow]"
        )
    elif choice != "skip":
        entry = find_entry(state, day, time)
        state = mark_attendance(state, entry.id, entry.subject, choice == "present")
        console.print(f"[green]Attendance marked:[/green] {subject} - {choice.title()}")
    return commit(db_path, state)


def _advice(row: dict, threshold) -> str:
    projection = row["projection"]
    if projection.status == ProjectionStatus.UNKNOWN:
        return "[dim]No classes recorded[/dim]"
    if projection.percentage >= threshold:
        return f"[green]Can miss {projection.can_miss} more[/green]"
    return f"[red]Need {projection.need_to_attend} more[/red]"


def cmd_stats(db_path: str, state: AppState) -> AppState:
    threshold = get_threshold(db_path)
    rows = [r for r in subject_summary(state, threshold) if r["subject"] in state.attendance]
    if not rows:
        console.print("[yellow]Start marking attendance to see your stats.[/yellow]")
        return state
    table = Table(title=f"Attendance Overview (threshold {threshold}%)")
    table.add_column("Subject", style="cyan")
    table.add_column("Attended", justify="right")
    table.add_column("Percent", justify="right")
    table.add_column("Status")
    for row in rows:
        projection = row["projection"]
        color = STATUS_COLORS[projection.status]
        table.add_row(
            row["subject"],
            f"{row['present']}/{row['total']}",
            f"[{color}]{projection.percentage}%[/{color}]",
            _advice(row, threshold),
        )
    console.print(table)
    return state


def cmd_subjects(db_path: str, state: AppState) -> AppState:
    threshold = get_threshold(db_path)
    rows = subject_summary(state, threshold)
    if not rows:
        console.print("[yellow]Upload your timetable to see subject statistics.[/yellow]")
        return state
    table = Table(title=f"Subjects (threshold {threshold}%)")
    table.add_column("Subject", style="cyan")
    table.add_column("Att", justify="right")
    table.add_column("Miss", justify="right")
    table.add_column("Tot", justify="right")
    table.add_column("Percent", justify="right")
    table.add_column("Status")
    for row in rows:
        projection = row["projection"]
        color = STATUS_COLORS[projection.status]
        table.add_row(
            row["subject"], str(row["present"]), str(row["missed"]), str(row["total"]),
            f"[{color}]{projection.percentage}%[/{color}]", _advice(row, threshold),
        )
    console.print(table)
    for row in rows:
        projection = row["projection"]
        if row["total"] and projection.percentage < threshold:
            console.print(
                f"  [yellow]{row['subject']}: attend the next {projection.need_to_attend} "
                f"classes to reach the minimum threshold.[/yellow]"
            )
    return state


def cmd_override(db_path: str, state: AppState) -> AppState:
    rows = subject_summary(state)
    names = [r["subject"] for r in rows]
    if names:
        console.print("Subjects: " + ", ".join(f"[cyan]{n}[/cyan]" for n in names))
    subject = Prompt.ask("Subject").strip()
    if not subject:
        return state
    current = state.counters(subject)
    total = parse_count(Prompt.ask("Total classes", default=str(current.total)))
    present = parse_count(Prompt.ask("Classes attended", default=str(current.present)))
    state = commit(db_path, set_attendance_counters(state, subject, total, present))
    saved = state.counters(subject)
    console.print(f"[green]{subject}: {saved.present}/{saved.total} saved.[/green]")
    return state


def show_preview(entries) -> None:
    rows = preview_rows(entries)
    table = Table(title=f"Preview - {len(entries)} classes")
    for header in rows[0]:
        table.add_column(header)
    for row in rows[1:]:
        table.add_row(*row)
    console.print(table)


def cmd_upload(db_path: str, state: AppState) -> AppState:
    console.print(
        "[dim]First row: days (Monday..Friday). First column: times (09:00, 10:00, ...). "
        "Cells: 'Subject (Room)' or 'Subject'.[/dim]"
    )
    file_path = Prompt.ask("File path").strip()
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return state
    if state.schedule and not Confirm.ask(
        "Replace the existing timetable? All attendance data will be reset", default=False,
    ):
        return state
    # ParseError propagates to the menu loop, leaving the current state in place
    new_state = ingest(parse_file(file_path))
    show_preview(new_state.schedule)
    if not Confirm.ask("Confirm & save", default=True):
        return state
    console.print(f"[green]Timetable uploaded: {len(new_state.schedule)} classes loaded.[/green]")
    return commit(db_path, new_state)


def cmd_threshold(db_path: str, state: AppState) -> AppState:
    current = get_threshold(db_path)
    value = Prompt.ask("Attendance threshold (%)", default=str(current))
    try:
        threshold = float(value)
    except ValueError:
        raise TrackerError(f"Not a number: {value}") from None
    set_threshold(db_path, int(threshold) if threshold.is_integer() else threshold)
    console.print(f"[green]Threshold set to {get_threshold(db_path)}%.[/green]")
    return state


COMMANDS = {
    "today": cmd_today,
    "mark": cmd_mark,
    "timetable": cmd_timetable,
    "edit": cmd_edit,
    "stats": cmd_stats,
    "subjects": cmd_subjects,
    "override": cmd_override,
    "upload": cmd_upload,
    "threshold": cmd_threshold,
}


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    try:
        init_db(db_path)
    except (sqlite3.Error, OSError) as e:
        logger.warning("Could not open the data store at %s: %s", db_path, e)
        console.print("[yellow]Your data could not be opened. Changes may not be saved.[/yellow]")
    state = load_state(db_path)

    show_welcome()
    default = "today"
    if not state.schedule:
        console.print("[dim]No timetable yet. Start with 'upload'.[/dim]")
        default = "upload"

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default=default).strip().lower()
        default = "today"
        if choice in ("quit", "exit", "q"):
            console.print("[dim]See you in class![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            state = command(db_path, state)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except (TrackerError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
        except sqlite3.Error as e:
            logger.exception("Data store error during %r", choice)
            console.print(f"[red]Could not access your data: {e}[/red]")


if __name__ == "__main__":
    main()
