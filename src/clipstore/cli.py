"""
Command line interface for the clipboard history store.

Every command builds the shared services from the environment / YAML settings,
runs one command-layer operation and prints the outcome with rich.
Typed store errors are printed and turned into a non-zero exit code.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from clipstore.app import ClipStoreServices, build_services
from clipstore.config import AppSettings, get_settings
from clipstore.errors import ClipStoreError
from clipstore.logger import configure_logging
from clipstore.models.record import Record, UpsertResult

console = Console(
    record=True,
    width=120,
    color_system="auto",
)

app = typer.Typer(name="clipstore", help="Clipboard history record store.")


def _services() -> ClipStoreServices:
    logger = configure_logging(get_settings(AppSettings))
    return build_services(logger=logger)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(code=1)


def _preview(record: Record, width: int = 60) -> str:
    text = record.value.replace("\n", "\\n")
    return text if len(text) <= width else text[: width - 3] + "..."


def _print_result(result: Optional[UpsertResult]) -> None:
    if result is None:
        console.print("[yellow]Ignored blank value.[/yellow]")
        return
    console.print(f"[bold green]{result.applied.value}[/bold green] record {result.record.id}")
    for record in result.evicted:
        console.print(f"[dim]evicted record {record.id}[/dim]")


@app.command(name="add-text", help="Store a text value.")
def add_text(text: str = typer.Argument(..., help="Text to store.")):
    services = _services()
    try:
        _print_result(services.ingestion.ingest_text(text))
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()


@app.command(name="add-image", help="Store an image file.")
def add_image(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file."),
):
    services = _services()
    try:
        _print_result(services.ingestion.ingest_image(path.read_bytes()))
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()


@app.command(name="list", help="List records, pinned first, newest first.")
def list_records(
    keyword: str = typer.Argument("", help="Case-insensitive substring filter."),
):
    services = _services()
    try:
        records = services.commands.filter_records(keyword)
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()

    table = Table(title=f"{len(records)} record(s)")
    table.add_column("id", justify="right")
    table.add_column("kind")
    table.add_column("pinned")
    table.add_column("updated_at")
    table.add_column("value")
    for record in records:
        table.add_row(
            str(record.id),
            record.kind.value,
            "*" if record.pinned else "",
            record.updated_at.isoformat(timespec="seconds"),
            _preview(record),
        )
    console.print(table)


@app.command(name="show", help="Print one record as JSON.")
def show(record_id: int = typer.Argument(..., help="Record id.")):
    services = _services()
    try:
        console.print_json(services.commands.get_record(record_id).model_dump_json())
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()


@app.command(name="pin", help="Pin a record so it is never evicted.")
def pin(record_id: int = typer.Argument(..., help="Record id.")):
    services = _services()
    try:
        services.commands.pin_record(record_id)
        console.print(f"[bold green]Pinned record {record_id}.[/bold green]")
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()


@app.command(name="unpin", help="Unpin a record.")
def unpin(record_id: int = typer.Argument(..., help="Record id.")):
    services = _services()
    try:
        services.commands.unpin_record(record_id)
        console.print(f"[bold green]Unpinned record {record_id}.[/bold green]")
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()


@app.command(name="delete", help="Delete a record and its image blob.")
def delete(record_id: int = typer.Argument(..., help="Record id.")):
    services = _services()
    try:
        services.commands.delete_record(record_id)
        console.print(f"[bold green]Deleted record {record_id}.[/bold green]")
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()


@app.command(name="copy", help="Print the value to paste for a record.")
def copy(record_id: int = typer.Argument(..., help="Record id.")):
    services = _services()
    try:
        payload = services.commands.copy_record(record_id)
    except (ClipStoreError, FileNotFoundError) as e:
        _fail(e)
    finally:
        services.close()
    console.print(
        payload.text if payload.text is not None else str(payload.image_path),
        soft_wrap=True,
        markup=False,
    )


@app.command(name="gc", help="Remove image blobs no record references.")
def gc():
    services = _services()
    try:
        report = services.collector.collect()
    except ClipStoreError as e:
        _fail(e)
    finally:
        services.close()
    console.print(
        f"[bold blue]Scanned {report.scanned} blob(s), removed {len(report.removed)}.[/bold blue]"
    )
    for name in report.removed:
        console.print(f"[dim]removed {name}[/dim]", soft_wrap=True)


@app.command(name="max-records", help="Show or change the retention bound.")
def max_records(
    value: Optional[int] = typer.Argument(None, help="New bound (positive integer)."),
):
    services = _services()
    try:
        if value is None:
            preferences = services.commands.get_config()
        else:
            preferences = services.commands.update_max_records(value)
    except (ClipStoreError, ValueError) as e:
        _fail(e)
    finally:
        services.close()
    console.print(f"[bold cyan]max_records:[/bold cyan] {preferences.max_records}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
