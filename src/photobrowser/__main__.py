from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from photobrowser import errors, models
from photobrowser.configuration import Config, configure_logging, make_config
from photobrowser.service import PhotoBrowser

console = Console()

app = typer.Typer(help="Browse photos in a folder or in the local Photos library")

# Exit codes per error kind, so scripts can tell "no library" apart from "library is broken"
EXIT_NOT_FOUND = 1
EXIT_CONNECTION = 2
EXIT_QUERY = 3
EXIT_VALIDATION = 4
EXIT_STATE = 5
EXIT_READ = 6
EXIT_ERROR = 7


def fail(error: errors.PhotoBrowserError):
    """
    Report an error with a message specific to its kind and exit
    """
    if isinstance(error, errors.NotFoundError):
        message, code = f"Not found: {error}", EXIT_NOT_FOUND
    elif isinstance(error, errors.CatalogConnectionError):
        message, code = f"Could not open the Photos library: {error}", EXIT_CONNECTION
    elif isinstance(error, errors.QueryError):
        message, code = f"Could not read the Photos library: {error}", EXIT_QUERY
    elif isinstance(error, errors.ValidationError):
        message, code = f"Invalid input: {error}", EXIT_VALIDATION
    elif isinstance(error, errors.PhotoReadError):
        message, code = f"Could not read: {error}", EXIT_READ
    elif isinstance(error, errors.StateError):
        message, code = f"Internal error: {error}", EXIT_STATE
    else:
        message, code = f"Error: {error}", EXIT_ERROR

    typer.echo(message, err=True)
    raise typer.Exit(code=code)


def _format_date(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value is not None else "-"


def print_catalog_photos(photos: list[models.ResolvedPhoto], total: int):
    table = Table(title="Photos library")
    table.add_column("Id", justify="right")
    table.add_column("Name")
    table.add_column("Created")
    table.add_column("Size (px)", justify="right")
    table.add_column("Path")

    for photo in photos:
        dimensions = f"{photo.width}x{photo.height}" if photo.width and photo.height else "-"
        table.add_row(str(photo.id), photo.name, _format_date(photo.date_created), dimensions, str(photo.path))

    console.print(table)
    console.print(f"[bold]{len(photos)}[/bold] photos shown ({total} in library)")


def print_directory_photos(directory: Path, photos: list[models.PhotoDescriptor]):
    table = Table(title=str(directory))
    table.add_column("Name")
    table.add_column("Size (bytes)", justify="right")
    table.add_column("Modified")
    table.add_column("Taken")

    for photo in photos:
        table.add_row(photo.name, str(photo.size), _format_date(photo.modified), _format_date(photo.time_taken))

    console.print(table)
    console.print(f"[bold]{len(photos)}[/bold] photos")


@app.callback()
def main(
    ctx: typer.Context,
    library: Annotated[Path | None, typer.Option(help="Path of the Photos library bundle to use")] = None,
    page_size: Annotated[int | None, typer.Option(help="Default number of catalog photos per page")] = None,
    log_level: Annotated[str | None, typer.Option(help="Set the logging level")] = None,
):
    """
    Browse photos in a folder or in the local Photos library.

    Configuration can be provided via command line options or config files.
    Config files are loaded from: photobrowser.conf and photobrowser.my.conf
    Command line options override config file values.
    """
    try:
        config = make_config(photos_library_location=library, page_size=page_size, log_level=log_level)

    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=EXIT_VALIDATION)

    configure_logging(config.log_level)
    ctx.obj = config


@app.command()
def available(ctx: typer.Context):
    """
    Report whether a Photos library can be used on this machine
    """
    config: Config = ctx.obj
    browser = PhotoBrowser(config)

    try:
        if browser.is_photo_catalog_available():
            console.print("[green]Photos library is available[/green]")
        else:
            console.print("[yellow]Photos library is not available[/yellow]")
            raise typer.Exit(code=EXIT_NOT_FOUND)
    finally:
        browser.shutdown()


@app.command()
def catalog(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option(help="Number of photos per page")] = None,
    offset: Annotated[int, typer.Option(help="Number of catalog rows to skip")] = 0,
    all_pages: Annotated[bool, typer.Option("--all", help="Walk every page of the library, starting at --offset")] = False,
):
    """
    List photos from the Photos library (most recent first)
    """
    config: Config = ctx.obj
    browser = PhotoBrowser(config)

    try:
        if all_pages:
            photos, total = [], 0
            for page in browser.iter_catalog_pages(page_size=limit, offset=offset):
                photos.extend(page.photos)
                total = page.total
        else:
            page = browser.list_catalog_photos(limit=limit, offset=offset)
            photos, total = page.photos, page.total

        print_catalog_photos(photos, total)

    except errors.PhotoBrowserError as e:
        fail(e)

    finally:
        browser.shutdown()


@app.command()
def folder(
    ctx: typer.Context,
    directory: Annotated[Path, typer.Argument(help="Directory to list")],
    metadata: Annotated[bool, typer.Option(help="Read the date taken from each image")] = False,
):
    """
    List the photos in a directory
    """
    config: Config = ctx.obj
    browser = PhotoBrowser(config)

    try:
        photos = browser.list_directory_photos(directory, include_metadata=metadata)
        print_directory_photos(directory, photos)

    except errors.PhotoBrowserError as e:
        fail(e)

    finally:
        browser.shutdown()


@app.command()
def read(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Photo file to read")],
    length_only: Annotated[bool, typer.Option(help="Only print the length of the data URI")] = False,
):
    """
    Print a photo as a data URI
    """
    config: Config = ctx.obj
    browser = PhotoBrowser(config)

    try:
        data_uri = browser.read_photo_as_data_uri(path)

        if length_only:
            console.print(len(data_uri))
        else:
            typer.echo(data_uri)

    except errors.PhotoBrowserError as e:
        fail(e)

    finally:
        browser.shutdown()


if __name__ == "__main__":
    app()
