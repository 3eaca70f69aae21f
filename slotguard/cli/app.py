"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.record_store import InMemoryRecordStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SlotGuardError, SlotValidationError
from ..domain.models import CandidateSlot, DisclosureLevel
from ..services.availability_query import AvailabilityQueryService
from ..services.booking_validator import BookingValidator

app = typer.Typer(
    name="slotguard",
    help="Check appointment slot availability against blackouts and existing appointments",
    add_completion=False
)

console = Console()


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the config file, falling back to defaults when none exists."""
    config_path = config_file or get_default_config_path()
    if config_file is None and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _load_store(config: AppConfig, data_file: Optional[Path]) -> InMemoryRecordStore:
    data_path = data_file or config.data_file
    if data_path is None:
        console.print("[red]Error: no data file given (use --data or data_file in the config).[/red]")
        raise typer.Exit(1)
    return InMemoryRecordStore.load_from_file(data_path)


@app.command()
def check(
    professional_id: Annotated[int, typer.Argument(help="Professional ID")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM or HH:MM:SS)")],
    end: Annotated[str, typer.Argument(help="End time (HH:MM or HH:MM:SS)")],
    data_file: Annotated[Optional[Path], typer.Option("--data", "-d", help="JSON/YAML file with blackouts and appointments")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    exclude_appointment: Annotated[Optional[int], typer.Option("--exclude-appointment", help="Appointment being rescheduled")] = None,
    allow_outside_hours: Annotated[bool, typer.Option("--allow-outside-hours", help="Accept slots outside the daily working window")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """
    Validate a single slot the way a booking would.

    Examples:

        slotguard check 1 2025-10-25 09:00 10:00 --data records.json
        slotguard check 1 2025-10-25 09:00 10:00 --exclude-appointment 42
        slotguard check 1 2025-10-25 18:00 19:00 --allow-outside-hours
    """
    _setup_logging(verbose)

    try:
        config = _load_config(config_file)
        store = _load_store(config, data_file)
        validator = BookingValidator(
            record_source=store,
            working_hours=config.build_working_hours(),
        )

        slot = CandidateSlot.build(professional_id, date, start, end)
        asyncio.run(
            validator.validate_slot(
                slot,
                exclude_appointment_id=exclude_appointment,
                allow_outside_hours=allow_outside_hours,
            )
        )

    except SlotValidationError as e:
        console.print(f"[bold red]✗ Not available ({e.status_code}):[/bold red] {e.message}")
        detail = getattr(e, "detail", None)
        if detail and detail != e.message:
            console.print(f"  {detail}")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, SlotGuardError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(
        f"[bold green]✓ Available:[/bold green] professional {slot.professional_id}, "
        f"{slot.date} {slot.time_range}"
    )


@app.command()
def availability(
    professional_ids: Annotated[List[int], typer.Argument(help="Professional IDs to look up")],
    data_file: Annotated[Optional[Path], typer.Option("--data", "-d", help="JSON/YAML file with blackouts and appointments")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="First day (YYYY-MM-DD). Defaults to today")] = None,
    days: Annotated[Optional[int], typer.Option("--days", help="Number of days to look up")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", help="Appointment duration in minutes")] = None,
    interval: Annotated[Optional[int], typer.Option("--interval", help="Minutes between slot starts")] = None,
    at: Annotated[Optional[str], typer.Option("--at", help="Only the slot starting at this time (HH:MM)")] = None,
    level: Annotated[Optional[DisclosureLevel], typer.Option("--level", help="Detail of unavailability reasons")] = None,
    show_all: Annotated[bool, typer.Option("--all", help="Include unavailable slots")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """
    List available slots for one or more professionals.

    Examples:

        slotguard availability 1 2 --start 2025-10-25 --days 3
        slotguard availability 1 --all --level admin
    """
    _setup_logging(verbose)

    try:
        config = _load_config(config_file)
        store = _load_store(config, data_file)
        service = AvailabilityQueryService(
            record_source=store,
            working_hours=config.build_working_hours(),
        )

        start_date = start or pendulum.now(config.timezone).to_date_string()
        results = asyncio.run(
            service.find_availability(
                professional_ids=professional_ids,
                start_date=start_date,
                range_days=config.defaults.range_days if days is None else days,
                duration_minutes=config.defaults.duration_minutes if duration is None else duration,
                interval_minutes=config.defaults.interval_minutes if interval is None else interval,
                specific_time=at,
                only_available=not show_all,
                level=level or config.defaults.disclosure_level,
            )
        )

    except (FileNotFoundError, ValueError, SlotGuardError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    for day in results:
        table = Table(
            title=f"{day.weekday.capitalize()} {day.date} ({day.total_available} available)",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Professional", style="bold yellow")
        table.add_column("Slot")
        table.add_column("Status")

        for professional in day.professionals:
            for result in professional.slots:
                status = (
                    "[green]available[/green]"
                    if result.available
                    else f"[red]{result.reason}[/red]"
                )
                table.add_row(
                    str(professional.professional_id),
                    str(result.slot.time_range),
                    status,
                )

        if not day.professionals:
            console.print(f"[yellow]⚠ {day.date}: no slots.[/yellow]")
        else:
            console.print(table)
        console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotguard[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
