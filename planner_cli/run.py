# -*- coding: utf-8 -*-
"""Command-line front end for the planner service."""
import typing as t
from datetime import datetime, timedelta

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mcp_wrappers.planner import mcp_service
from planner_core.demo import DEMO_ASSIGNMENTS
from planner_core.models import ExpandedScheduleItem, ScheduleReport

console = Console()
err_console = Console(stderr=True)


def truncate_title(title: str, max_length: int = 45) -> str:
    """Truncate title to max_length characters, adding ellipsis if needed."""
    if len(title) <= max_length:
        return title
    return title[:max_length-3] + "..."


def create_schedule_table(items: list[ExpandedScheduleItem], title: str = "📅 Schedule") -> Table:
    """Create a table of schedule blocks."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=4)
    table.add_column("Time", style="yellow")
    table.add_column("Task", style="white")
    table.add_column("Assignment", style="cyan")
    table.add_column("", width=3)

    for expanded in items:
        item = expanded.item
        table.add_row(
            str(item.id),
            f"{item.start_time:%m/%d %H:%M} → {item.end_time:%H:%M}",
            truncate_title(expanded.task.description) if expanded.task else "[dim](deleted task)[/dim]",
            truncate_title(expanded.assignment.title, 30) if expanded.assignment else "—",
            "✅" if item.completed else "",
        )
    return table


def create_report_panel(report: ScheduleReport) -> Panel:
    """Summarize a generation report."""
    stats_text = Text()
    stats_text.append("Scheduled blocks: ", style="white")
    stats_text.append(f"{len(report.schedule_items)}", style="bold green")
    stats_text.append("\nTotal task time: ", style="white")
    stats_text.append(f"{report.total_tasks_time} min", style="bold")
    stats_text.append("\nDue today or overdue: ", style="white")
    stats_text.append(f"{report.todays_due_tasks_time} min", style="bold")
    if report.available_minutes is not None:
        stats_text.append("\nExtra tasks added: ", style="white")
        stats_text.append(f"{report.extra_tasks_added}", style="bold green")
    if report.over_budget_minutes:
        stats_text.append("\nOver budget by: ", style="white")
        stats_text.append(f"{report.over_budget_minutes} min", style="bold yellow")
    if report.not_scheduled:
        stats_text.append("\nNot scheduled: ", style="white")
        stats_text.append(f"{len(report.not_scheduled)}", style="bold red")
    return Panel(stats_text, title="📊 Statistics", border_style="green")


def _fail(message: str) -> t.NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """Plan study tasks into a daily schedule."""


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8004, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the planner REST service."""
    import uvicorn
    uvicorn.run("services.planner_service.app:app", host=host, port=port)


@main.command()
def seed() -> None:
    """Create the demo assignments on the running service."""
    now = datetime.now()
    try:
        for title, course, description, days, priority, tasks in DEMO_ASSIGNMENTS:
            assignment = mcp_service._create_assignment(
                title=title,
                course=course,
                due_date=(now + timedelta(days=days)).isoformat(),
                priority=priority,
                description=description,
            )
            for order, (task_description, minutes, completed, spent) in enumerate(tasks):
                mcp_service._add_task(
                    assignment.id,
                    task_description,
                    minutes,
                    order=order,
                    completed=completed,
                    time_spent=spent,
                )
            console.print(f"   ✓ {assignment.title} (#{assignment.id}, {len(tasks)} tasks)")
    except RuntimeError as e:
        _fail(str(e))
    console.print("\n[bold green]✅ Demo data created![/bold green]")


@main.command()
@click.argument("assignment_ids", nargs=-1, type=int, required=True)
@click.option("--date", "start_date", default="", help="Start date (ISO); defaults to now.")
@click.option("--minutes", "available_minutes", type=click.IntRange(min=0), default=None,
              help="Minutes available for tasks not due today.")
@click.option("--start-time", default="", help="Start of the first block, HH:MM.")
@click.option("--no-prioritize", is_flag=True, help="Put due-today tasks under the time budget too.")
def generate(
    assignment_ids: tuple[int, ...],
    start_date: str,
    available_minutes: t.Optional[int],
    start_time: str,
    no_prioritize: bool,
) -> None:
    """Generate a schedule for ASSIGNMENT_IDS."""
    try:
        report = mcp_service._generate_schedule(
            list(assignment_ids),
            start_date=start_date,
            available_minutes=available_minutes,
            prioritize_todays_due=not no_prioritize,
            start_time=start_time,
        )
        # Fetch the expanded view of the first scheduled day for display
        day = report.schedule_items[0].start_time.date().isoformat() if report.schedule_items else start_date
        items = mcp_service._get_day_schedule(day)
    except RuntimeError as e:
        _fail(str(e))

    console.print(create_report_panel(report))
    if items:
        console.print("\n", create_schedule_table(items))
    if report.unscheduled_task_details:
        console.print("\n[bold yellow]⚠ Not enough time for:[/bold yellow]")
        for detail in report.unscheduled_task_details:
            console.print(
                f"   • {detail.description} ({detail.assignment_title}, {detail.time_allocation} min)"
            )


@main.command()
@click.option("--date", default="", help="Day to show (ISO); defaults to today.")
def day(date: str) -> None:
    """Show the schedule for one day."""
    try:
        items = mcp_service._get_day_schedule(date)
    except RuntimeError as e:
        _fail(str(e))

    if not items:
        console.print("📅 Nothing scheduled.")
        return
    console.print(create_schedule_table(items, title=f"📅 Schedule {date or 'today'}"))


@main.command()
@click.argument("item_id", type=int)
@click.option("--undo", is_flag=True, help="Mark the block as not done.")
def complete(item_id: int, undo: bool) -> None:
    """Mark schedule block ITEM_ID as done."""
    try:
        item = mcp_service._update_schedule_item(item_id, completed=not undo)
    except RuntimeError as e:
        _fail(str(e))
    state = "done" if item.completed else "not done"
    console.print(f"[bold green]✓[/bold green] Block #{item.id} marked {state}")


if __name__ == "__main__":
    main()
