"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import NoReturn, Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..adapters.yaml_source import YamlShopDataSource
from ..config import ShopConfig, get_default_config_path
from ..domain.exceptions import SlotResolverError
from ..domain.models import DAY_LABELS, day_name
from ..services.availability import AvailabilityService, date_range

app = typer.Typer(
    name="slotresolver",
    help="Check barbershop availability and list bookable time slots",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to shop file. Defaults to ./shop.yaml"),
]
StaffOption = Annotated[
    Optional[str],
    typer.Option("--staff", "-s", help="Staff id whose personal schedule applies"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(config_file: Optional[Path]) -> tuple[ShopConfig, AvailabilityService]:
    config_path = config_file or get_default_config_path()
    config = ShopConfig.load_from_yaml(config_path)
    service = AvailabilityService(data_source=YamlShopDataSource(config))
    return config, service


def _parse_date(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Error parsing date '{escape(value)}': {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    staff: StaffOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    config_file: ConfigOption = None,
):
    """
    List the free start times on a date.

    Examples:

        slotresolver slots 2024-11-25
        slotresolver slots 2024-11-25 --staff joao --duration 45
    """
    try:
        config, service = _load(config_file)
        day = _parse_date(date, config.timezone)
        minutes = duration if duration is not None else config.defaults.service_duration_minutes

        validation = asyncio.run(service.validate(day=day, staff_id=staff))
        if not validation.is_valid:
            console.print(f"[yellow]⚠ {validation.message}[/yellow]")
            return

        free = asyncio.run(
            service.find_slots(day=day, service_duration_minutes=minutes, staff_id=staff)
        )
    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        _fail(e)

    label = DAY_LABELS[day_name(day)]
    console.print(
        f"\n[bold cyan]{config.shop_name}[/bold cyan] - {label}, {day.isoformat()} "
        f"({validation.schedule.format_hours()})"
    )

    if not free:
        console.print("[yellow]⚠ No free slots for this date.[/yellow]\n")
        return

    console.print(f"[bold green]✓ {len(free)} free slot(s) for {minutes} min:[/bold green]")
    console.print("  " + "  ".join(free) + "\n")


@app.command()
def check(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[Optional[str], typer.Argument(help="Start time (HH:MM)")] = None,
    staff: StaffOption = None,
    config_file: ConfigOption = None,
):
    """
    Check whether a date, or a time on it, can be booked.
    """
    try:
        config, service = _load(config_file)
        day = _parse_date(date, config.timezone)
        result = asyncio.run(service.validate(day=day, time=time, staff_id=staff))
    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        _fail(e)

    if result.is_valid:
        console.print(f"[green]✓ {result.message}[/green]")
        return

    console.print(f"[red]✗ {result.message}[/red]")
    raise typer.Exit(1)


@app.command()
def days(
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD). Defaults to today")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    staff: StaffOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    config_file: ConfigOption = None,
):
    """
    List the dates that still have at least one free slot.
    """
    try:
        config, service = _load(config_file)
        tz = config.timezone
        first = _parse_date(start, tz) if start else pendulum.now(tz).date()
        if end:
            last = _parse_date(end, tz)
        else:
            first, last = date_range(first, config.defaults.search_days)
        minutes = duration if duration is not None else config.defaults.service_duration_minutes

        available = asyncio.run(
            service.find_available_days(
                start_date=first,
                end_date=last,
                service_duration_minutes=minutes,
                staff_id=staff,
            )
        )
    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        _fail(e)

    if not available:
        console.print(
            "[yellow]⚠ No available dates found.[/yellow]\n"
            "Try a longer period or a shorter service."
        )
        return

    table = Table(
        title=f"Available dates {first.isoformat()} - {last.isoformat()}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold yellow")
    table.add_column("Weekday", style="dim")

    for day in available:
        table.add_row(day.isoformat(), DAY_LABELS[day_name(day)])

    console.print()
    console.print(table)
    console.print()


@app.command()
def conflicts(
    staff_id: Annotated[str, typer.Argument(help="Staff id to check")],
    config_file: ConfigOption = None,
):
    """
    Compare a staff member's schedule with the business hours.
    """
    try:
        _, service = _load(config_file)
        report = asyncio.run(service.check_staff_schedule(staff_id=staff_id))
    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        _fail(e)

    if not report.has_conflicts:
        console.print("[green]✓ Schedule fits within business hours.[/green]")
        return

    table = Table(
        title=f"Schedule conflicts for {staff_id}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Type")
    table.add_column("Severity")
    table.add_column("Message", style="dim")

    for conflict in report.conflicts:
        table.add_row(
            DAY_LABELS[conflict.day],
            conflict.conflict_type.value,
            conflict.severity.value,
            conflict.message,
        )

    console.print()
    console.print(table)
    console.print()

    if not report.can_save:
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotresolver[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
