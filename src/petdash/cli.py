"""petdash Command Line Interface."""

import asyncio
from datetime import datetime, timedelta, timezone

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from petdash.models import Reminder, Status, Tip

app = typer.Typer(
    name="petdash",
    help="petdash - AI content for the pet care home dashboard",
    no_args_is_help=True,
)
console = Console()


class ConsoleSink:
    """Prints dashboard updates as they arrive."""

    def __init__(self) -> None:
        self._shown: list[Tip] = []

    def on_tips_updated(self, tips: list[Tip]) -> None:
        for tip in tips:
            if tip not in self._shown:
                self._shown.append(tip)
                console.print(f"{tip.emoji} [bold]{tip.title}[/bold]: {tip.detail}")

    def on_status_updated(self, pet_id: str, status: Status) -> None:
        pills = ", ".join(p.text for p in status.pills)
        console.print(f"[cyan]{pet_id}[/cyan] {status.status} ({pills}) {status.summary}")

    def on_reminders_updated(self, reminders: list[Reminder]) -> None:
        console.print(f"[dim]{len(reminders)} reminders[/dim]")

    def on_loading_changed(self, is_loading: bool) -> None:
        if is_loading:
            console.print("[yellow]Loading AI insights...[/yellow]")

    def on_error_changed(self, error: str | None) -> None:
        if error:
            console.print(f"[red]{error}[/red]")


def _print_reminders(reminders: tuple[Reminder, ...] | list[Reminder]) -> None:
    if not reminders:
        console.print("[yellow]No reminders[/yellow]")
        return

    table = Table(title="Reminders")
    table.add_column("Due", style="cyan")
    table.add_column("Reminder", style="white")
    table.add_column("Detail", style="green")

    for reminder in reminders:
        table.add_row(
            reminder.due.strftime("%b %d • %I:%M %p"),
            reminder.title[:40],
            reminder.detail[:60],
        )

    console.print(table)


@app.command()
def refresh():
    """Run one interactive dashboard refresh."""
    from petdash.log import configure_logging

    configure_logging()
    console.print(Panel("Dashboard Refresh", style="blue"))

    async def do_refresh():
        from petdash.adapters import AIServiceAdapter, CalendarFileAdapter
        from petdash.adapters.pets import load_pets
        from petdash.aggregators.dashboard import DashboardAggregator

        pets = load_pets()
        if not pets:
            console.print("[yellow]No pets found[/yellow]")
            return

        aggregator = DashboardAggregator(AIServiceAdapter(), CalendarFileAdapter(), ConsoleSink())
        async with aggregator:
            snapshot = await aggregator.run(pets)

        if snapshot is None:
            return
        console.print()
        _print_reminders(snapshot.reminders)

    asyncio.run(do_refresh())


@app.command()
def watch(
    interval: int = typer.Option(0, help="Refresh interval in seconds (0 = configured)"),
):
    """Refresh the dashboard in the background until interrupted."""
    from petdash.log import configure_logging

    configure_logging()
    console.print(Panel("Background Refresh", style="blue"))

    async def run_forever():
        from petdash.adapters import AIServiceAdapter, CalendarFileAdapter
        from petdash.adapters.pets import load_pets
        from petdash.aggregators.dashboard import DashboardAggregator
        from petdash.autonomous.scheduler import RefreshScheduler

        generator = AIServiceAdapter()
        aggregator = DashboardAggregator(generator, CalendarFileAdapter(), ConsoleSink())
        async with aggregator:
            pets = load_pets()
            await aggregator.run(pets)

            scheduler = RefreshScheduler(
                aggregator,
                pets=load_pets,
                is_active=lambda: generator.has_session,
                interval_seconds=interval or None,
            )
            scheduler.start()
            try:
                await asyncio.Event().wait()
            finally:
                scheduler.stop()

    try:
        asyncio.run(run_forever())
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


@app.command()
def calendar(
    pet_id: str = typer.Argument(..., help="Pet identifier"),
    days: int = typer.Option(30, help="Number of days to show"),
):
    """Show a pet's upcoming calendar events."""
    console.print(Panel(f"Calendar for {pet_id}", style="blue"))

    async def show_calendar():
        from petdash.adapters.base import CalendarAccessError
        from petdash.adapters.calendar import CalendarFileAdapter

        now = datetime.now(timezone.utc)
        async with CalendarFileAdapter() as adapter:
            try:
                events = list(adapter.load_events(pet_id, now, now + timedelta(days=days)))
            except CalendarAccessError as e:
                console.print(f"[red]{e.message}[/red]")
                return

        if not events:
            console.print("[yellow]No events found[/yellow]")
            return

        table = Table(title=f"Events (next {days} days)")
        table.add_column("Date", style="cyan")
        table.add_column("Event", style="white")
        table.add_column("Type", style="green")

        for event in sorted(events, key=lambda e: e.date):
            table.add_row(
                event.date.strftime("%Y-%m-%d %H:%M"),
                event.title[:40],
                event.type.display_name + (" (recurring)" if event.is_recurring else ""),
            )

        console.print(table)

    asyncio.run(show_calendar())


@app.command()
def version():
    """Show petdash version."""
    from petdash import __version__

    console.print(f"petdash v{__version__}")


if __name__ == "__main__":
    app()
