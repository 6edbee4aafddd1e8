"""Command Line Interface for CareBook.

This module provides a CLI using Typer: an interactive session that runs
commands against the address book and renders the displayed list after each
one, a one-shot ``exec`` command for scripting, and ``info``.
"""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from carebook.domain.commands import CommandResult
from carebook.domain.enums import RecordKind
from carebook.domain.model_manager import ModelManager
from carebook.domain.ports import StoragePort
from carebook.infrastructure.logging_config import setup_logging
from carebook.infrastructure.settings import APP_VERSION, settings
from carebook.main import LogicManager, create_storage_adapter, load_model

# Initialize Typer app and Rich console
app = typer.Typer(
    name="carebook",
    help="CareBook: patient and specialist contact manager",
    add_completion=False
)
console = Console()

COLUMNS = {
    RecordKind.PATIENT: ("Name", "Phone", "Email", "Tags", "Age", "Medical history"),
    RecordKind.SPECIALIST: ("Name", "Phone", "Email", "Tags", "Location", "Specialty"),
}


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else settings.log_level
    setup_logging(use_json=settings.log_json, log_level=level, log_file=settings.get_log_file())


def _open_logic(data_file: Optional[Path]) -> LogicManager:
    """Load the address book, or exit with code 1 if the data file is unusable."""
    try:
        storage: StoragePort = create_storage_adapter(data_file)
        model_result = load_model(storage)
    except (OSError, ValueError, PydanticValidationError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=1)

    if model_result.is_failure():
        console.print(
            f"[red]✗[/red] Failed to load data ({model_result.error_type}): {escape(str(model_result.error))}"
        )
        details = model_result.error_details or {}
        if details:
            detail_table = Table(show_header=False, box=None, padding=(0, 2))
            for key, value in details.items():
                if key == "errors":
                    for error in value:
                        loc = ".".join(str(part) for part in error["loc"])
                        detail_table.add_row(f"{loc}:", escape(error["msg"]))
                else:
                    detail_table.add_row(f"{key}:", escape(str(value)))
            console.print(detail_table)
        raise typer.Exit(code=1)

    return LogicManager(model_result.value, storage)


def render_records(model: ModelManager) -> None:
    """Print the displayed list as a table."""
    kind = getattr(model.predicate, "kind", None)
    records = model.list_records()
    if kind is None:
        kind = records[0].record_kind if records else RecordKind.PATIENT

    table = Table(title=kind.label, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    for column in COLUMNS[kind]:
        table.add_column(column, style="cyan" if column == "Name" else None)

    for number, record in enumerate(records, start=1):
        table.add_row(str(number), *(escape(value) for _, value in record.display_fields()))

    console.print(table)


def print_result(result: CommandResult) -> None:
    feedback = escape(result.feedback)
    if not result.success:
        console.print(f"[red]✗[/red] {feedback}")
    elif result.show_help:
        console.print(feedback)
    else:
        console.print(f"[green]✓[/green] {feedback}")


@app.command()
def run(
    data_file: Optional[Path] = typer.Option(None, "--data-file", "-f", help="JSON data file to use"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Start an interactive session.

    Type commands at the prompt; ``help`` lists them and ``exit`` saves and
    quits.

    Examples:
        carebook run
        carebook run --data-file clinic.json --verbose
    """
    _configure_logging(verbose)
    logic = _open_logic(data_file)

    console.print(f"\n[bold blue]{settings.app_name}[/bold blue] v{APP_VERSION}")
    console.print("[dim]Type 'help' for the list of commands.[/dim]\n")
    render_records(logic.model)

    while True:
        try:
            command_text = console.input("[bold]carebook> [/bold]")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if not command_text.strip():
            continue

        result = logic.execute(command_text)
        print_result(result)
        if result.exit:
            break
        render_records(logic.model)


@app.command("exec")
def exec_command(
    command_text: str = typer.Argument(..., help="Command to run, quoted"),
    data_file: Optional[Path] = typer.Option(None, "--data-file", "-f", help="JSON data file to use"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Run a single command and exit.

    Examples:
        carebook exec "list -sp"
        carebook exec "add -pa n/Amy Tan p/91234567 e/amy@example.com m/Asthma"
    """
    _configure_logging(verbose)
    logic = _open_logic(data_file)

    result = logic.execute(command_text)
    print_result(result)
    if not result.success:
        raise typer.Exit(code=1)
    render_records(logic.model)


@app.command()
def info() -> None:
    """Display configuration."""
    console.print("[bold blue]System Information[/bold blue]\n")

    try:
        storage = create_storage_adapter()
        data_file = settings.get_data_file()
    except (OSError, ValueError, PydanticValidationError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=1)
    storage_info = storage.get_storage_info() or {}

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Version:", APP_VERSION)
    info_table.add_row("Data File:", data_file)
    info_table.add_row("Data File Exists:", "Yes" if storage_info.get("exists") else "No")
    if "size" in storage_info:
        info_table.add_row("Data File Size:", f"{storage_info['size']:,} bytes")
    info_table.add_row("Default View:", settings.default_view)
    info_table.add_row("Log Level:", settings.log_level)
    info_table.add_row("JSON Logs:", "Enabled" if settings.log_json else "Disabled")
    info_table.add_row("Log File:", settings.log_file or "-")

    console.print(info_table)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"CareBook v{APP_VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", help="Show version information", callback=_version_callback, is_eager=True
    )
) -> None:
    """CareBook: patient and specialist contact manager."""


if __name__ == "__main__":
    app()
