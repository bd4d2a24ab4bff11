"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import InitSuccess, initialize
from ..domain.calendar_encoder import parse_clock_time, parse_date, to_ical_datetime
from ..domain.exceptions import LaserDoseError
from ..domain.i18n import resolve_localized
from ..domain.models import DosingProtocol, IntervalRule, LaserPrescriptionInput
from ..domain.schedule_builder import ScheduleBuilder
from ..services.schedule_service import ScheduleService

app = typer.Typer(
    name="laserdose",
    help="Generate laser-therapy dosing schedules and export them to a calendar",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]
ProtocolOption = Annotated[Optional[str], typer.Option("--protocol", "-p", help="Named protocol of the clinic (see 'laserdose clinics')")]
DosesOption = Annotated[Optional[int], typer.Option("--doses", "-n", help="Number of doses (default 1)")]
IntervalOption = Annotated[Optional[str], typer.Option("--interval", "-i", help="Spacing, e.g. '+2 days', '+1 week' or 'mon,thu' (default '+7 days')")]

DEFAULT_INTERVAL = "+7 days"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _initialize(config_file: Optional[Path], verbose: bool) -> InitSuccess:
    """Load configuration or exit with a readable error."""
    result = initialize(config_file)
    if not result.ok:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(result.error)}")
        raise typer.Exit(1)

    _configure_logging("DEBUG" if verbose else result.config.log_level)
    return result


def _build_prescription(
    service: ScheduleService,
    start_date: str,
    protocol_key: Optional[str],
    doses: Optional[int],
    interval: Optional[str],
    clinic: Optional[str],
    dose_time: Optional[str],
) -> LaserPrescriptionInput:
    if protocol_key is not None:
        if doses is not None or interval is not None:
            raise typer.BadParameter("Use either --protocol or --doses/--interval, not both.")
        protocol = service.protocol_for(clinic, protocol_key)
    else:
        protocol = DosingProtocol(
            dose_count=1 if doses is None else doses,
            interval=IntervalRule.parse(interval or DEFAULT_INTERVAL),
        )

    return LaserPrescriptionInput(
        clinic_slug=clinic,
        start_date=parse_date(start_date),
        protocol=protocol,
        preferred_time=parse_clock_time(dose_time) if dose_time else None,
    )


def _service_for(init: InitSuccess) -> ScheduleService:
    return ScheduleService(
        clinic_repository=init.registry,
        schedule_builder=ScheduleBuilder(search_bound_days=init.config.search_bound_days),
    )


@app.command()
def schedule(
    start_date: Annotated[str, typer.Argument(help="Treatment start date (YYYY-MM-DD)")],
    protocol: ProtocolOption = None,
    doses: DosesOption = None,
    interval: IntervalOption = None,
    clinic: Annotated[Optional[str], typer.Option("--clinic", help="Clinic slug. Unknown slugs use the default clinic.")] = None,
    dose_time: Annotated[Optional[str], typer.Option("--time", "-t", help="Preferred time of day (HH:MM)")] = None,
    locale: Annotated[Optional[str], typer.Option("--locale", "-l", help="Label language (he or en)")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the dosing schedule for a prescription.

    Examples:

        laserdose schedule 2025-01-05 --doses 6 --interval "+2 weeks"

        laserdose schedule 2025-01-05 -n 8 -i mon,thu --clinic ein-tal --time 10:30

        laserdose schedule 2025-01-05 --clinic ein-tal --protocol intensive
    """
    init = _initialize(config_file, verbose)
    locale = locale or init.config.default_locale

    service = _service_for(init)
    try:
        prescription = _build_prescription(service, start_date, protocol, doses, interval, clinic, dose_time)
        result = service.generate(prescription, locale=locale)
    except LaserDoseError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    clinic_config = result.clinic
    hero_title = resolve_localized(clinic_config.branding.hero_title, locale)
    title = f"{hero_title} ({clinic_config.name})" if hero_title else clinic_config.name

    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Dose", style="bold yellow")
    table.add_column("Date")
    table.add_column("Time")

    for slot in result.slots:
        table.add_row(
            str(slot.index),
            slot.label or "",
            f"{slot.date.format('dddd')}, {slot.date.format('DD.MM.YYYY')}",
            slot.time.strftime("%H:%M"),
        )

    console.print()
    console.print(table)
    console.print(f"   Opening hours: {clinic_config.operating_hours}")
    console.print()


@app.command()
def export(
    start_date: Annotated[str, typer.Argument(help="Treatment start date (YYYY-MM-DD)")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Target .ics file")] = Path("schedule.ics"),
    protocol: ProtocolOption = None,
    doses: DosesOption = None,
    interval: IntervalOption = None,
    clinic: Annotated[Optional[str], typer.Option("--clinic", help="Clinic slug. Unknown slugs use the default clinic.")] = None,
    dose_time: Annotated[Optional[str], typer.Option("--time", "-t", help="Preferred time of day (HH:MM)")] = None,
    locale: Annotated[Optional[str], typer.Option("--locale", "-l", help="Label language (he or en)")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Write the dosing schedule to an iCalendar (.ics) file.
    """
    init = _initialize(config_file, verbose)
    locale = locale or init.config.default_locale

    service = _service_for(init)
    try:
        prescription = _build_prescription(service, start_date, protocol, doses, interval, clinic, dose_time)
        calendar_text = service.export_calendar(prescription, locale=locale)
    except LaserDoseError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    try:
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(calendar_text)
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] Could not write {output}: {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Calendar written to {output}[/green]")


@app.command()
def encode(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Time of day (HH:MM)")],
):
    """
    Print the floating calendar timestamp for a date and time.
    """
    try:
        console.print(to_ical_datetime(date, time))
    except LaserDoseError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def clinics(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List all configured clinics.
    """
    init = _initialize(config_file, verbose)
    registry = init.registry

    table = Table(
        title="Configured clinics",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Slug", style="bold yellow", no_wrap=True)
    table.add_column("Name")
    table.add_column("Hours")
    table.add_column("Dose time")
    table.add_column("Closed", style="dim")
    table.add_column("Protocols")

    for slug in sorted(registry):
        clinic_config = registry[slug]
        closed: List[str] = [
            ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"][day]
            for day in sorted(clinic_config.closed_weekdays)
        ]
        closed.extend(day.isoformat() for day in sorted(clinic_config.closed_dates))
        name = clinic_config.name
        if clinic_config is registry.default:
            name += " (default)"
        table.add_row(
            clinic_config.slug,
            name,
            str(clinic_config.operating_hours),
            clinic_config.default_dose_time.strftime("%H:%M"),
            ", ".join(closed) or "-",
            ", ".join(clinic_config.protocols) or "-",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def protocols(
    clinic: Annotated[Optional[str], typer.Option("--clinic", help="Clinic slug. Unknown slugs use the default clinic.")] = None,
    locale: Annotated[Optional[str], typer.Option("--locale", "-l", help="Label language (he or en)")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the named protocols a clinic offers.
    """
    init = _initialize(config_file, verbose)
    locale = locale or init.config.default_locale
    clinic_config = init.registry.resolve(clinic)

    if not clinic_config.protocols:
        console.print(f"[yellow]{escape(clinic_config.name)} defines no named protocols.[/yellow]")
        return

    table = Table(
        title=f"Protocols of {clinic_config.name}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Key", style="bold yellow", no_wrap=True)
    table.add_column("Name")
    table.add_column("Doses", justify="right")
    table.add_column("Interval")
    table.add_column("Description", style="dim")

    for key, definition in clinic_config.protocols.items():
        table.add_row(
            key,
            resolve_localized(definition.label, locale),
            str(definition.protocol.dose_count),
            str(definition.protocol.interval),
            resolve_localized(definition.description, locale),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]laserdose[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
