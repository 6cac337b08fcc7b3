"""
Command-line interface for PDF Manager.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from pdfmanager import __version__
from pdfmanager.config import load_settings
from pdfmanager.enums import PagePosition
from pdfmanager.exceptions import PdfManagerError
from pdfmanager.manager import PdfManager
from pdfmanager.stamps import PageNumbers, PdfStamp, TextStamp
from pdfmanager.storage import LocalStorage
from pdfmanager.utils import get_logger
from pdfmanager.views import ViewRenderer

console = Console()

POSITIONS = [position.value for position in PagePosition]


def _parse_data(pairs, data_json):
    data = {}
    if data_json:
        with open(data_json, encoding="utf-8") as handle:
            loaded = json.load(handle)
        if not isinstance(loaded, dict):
            raise click.BadParameter("JSON data must be an object", param_hint="--data-json")
        data.update(loaded)
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--data")
        key, value = pair.split("=", 1)
        data[key.strip()] = value
    return data


def _manager(ctx, storage_root=None, rename_fields=None):
    settings = ctx.obj["settings"]
    storage = LocalStorage(storage_root or settings.storage_root)
    return PdfManager(
        storage,
        renderer=ViewRenderer(ctx.obj["views"]),
        settings=settings,
        rename_fields=rename_fields or None,
    )


def _fail(error):
    console.print(f"\n[bold red]✗ Error:[/bold red] {error}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--log-level', default=None, help='Logging level (DEBUG, INFO, WARNING, ERROR)')
@click.option('--views', type=click.Path(file_okay=False), default=None, help='Directory holding view templates')
@click.pass_context
def cli(ctx, log_level, views):
    """
    PDF Manager CLI - Merge, fill, stamp and store PDF documents.
    """
    settings = load_settings()
    get_logger("pdfmanager", log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["views"] = views or str(settings.views_path)


@cli.command(name="build")
@click.argument('inputs', nargs=-1, required=True)
@click.option('--output', '-o', 'file_name', required=True, help='Output file name (stored under the output root)')
@click.option('--storage-root', type=click.Path(file_okay=False), default=None, help='Root directory of the storage disk')
@click.option('--data', 'pairs', multiple=True, help='Form value as KEY=VALUE (repeatable)')
@click.option('--data-json', type=click.Path(exists=True, dir_okay=False), default=None, help='JSON object of form values')
@click.option('--flatten', multiple=True, help='Field to flatten (repeatable)')
@click.option('--delete', multiple=True, help='Field to delete (repeatable)')
@click.option('--read-only', multiple=True, help='Field to mark read-only (repeatable)')
@click.option('--required', multiple=True, help='Field to mark required (repeatable)')
@click.option('--page-numbers', is_flag=True, help='Stamp "Page n of m" labels')
@click.option('--page-start', default=0, type=int, help='Pages to skip (and not count) at the start')
@click.option('--page-end', default=0, type=int, help='Pages to skip (and not count) at the end')
@click.option('--stamp-text', default=None, help='Text to stamp on every page')
@click.option('--stamp-position', type=click.Choice(POSITIONS, case_sensitive=False), default='CT', help='Anchor for --stamp-text')
@click.option('--overlay', type=click.Path(exists=True, dir_okay=False), default=None, help='PDF whose first page is stamped on every page')
@click.option('--ignore-missing-fields', is_flag=True, help='Skip fields that are not in the document')
@click.option('--rename-fields', is_flag=True, help='Rename same-named fields when merging')
@click.pass_context
def build(ctx, inputs, file_name, storage_root, pairs, data_json, flatten, delete, read_only, required,
          page_numbers, page_start, page_end, stamp_text, stamp_position, overlay,
          ignore_missing_fields, rename_fields):
    """
    Build INPUTS (paths relative to the storage root) into one PDF.

    Examples:

        pdf-manager build cover.pdf form.pdf -o contract

        pdf-manager build form.pdf -o filled --data name=Acme --flatten name

        pdf-manager build report.pdf -o numbered --page-numbers --page-start 1
    """
    try:
        manager = _manager(ctx, storage_root, rename_fields)
        manager.add_files(inputs)

        data = _parse_data(pairs, data_json)
        if data:
            manager.set_data(data)
        if flatten:
            manager.set_flatten_fields(flatten)
        if delete:
            manager.set_delete_fields(delete)
        if read_only:
            manager.set_read_only_fields(read_only)
        if required:
            manager.set_required_fields(required)
        if stamp_text:
            manager.set_stamp(TextStamp(stamp_text, position=stamp_position))
        if overlay:
            manager.set_stamp(PdfStamp(overlay))
        if page_numbers:
            manager.set_page_numbers(PageNumbers(start_offset=page_start, end_offset=page_end))

        console.print(f"\n[bold cyan]Building {len(inputs)} file(s)...[/bold cyan]")
        output_path = manager.build(file_name, ignore_missing_fields=ignore_missing_fields)

        console.print(f"[bold green]✓ Built[/bold green] {output_path}")
        console.print(f"[dim]{manager.storage.path(output_path)}[/dim]\n")
    except click.BadParameter:
        raise
    except PdfManagerError as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


@cli.command(name="fields")
@click.argument('input_pdf')
@click.option('--storage-root', type=click.Path(file_okay=False), default=None, help='Root directory of the storage disk')
@click.pass_context
def show_fields(ctx, input_pdf, storage_root):
    """
    List the form fields of a PDF.

    Example:

        pdf-manager fields form.pdf
    """
    try:
        manager = _manager(ctx, storage_root)
        document = manager.load_file(input_pdf)
        try:
            fields = manager.get_fields(document)
            table = Table(title=f"Form fields: {input_pdf}")
            table.add_column("Name", style="cyan")
            table.add_column("Type", style="magenta")
            table.add_column("Value", style="green")
            table.add_column("Flags", style="yellow")
            for name, field in fields.items():
                flags = [label for label, enabled in (("read-only", field.read_only), ("required", field.required)) if enabled]
                table.add_row(name, field.field_type, field.value or "", ", ".join(flags))
        finally:
            manager.release(document)

        if not len(fields):
            console.print(f"[yellow]No form fields found in {input_pdf}[/yellow]")
        else:
            console.print(table)
    except PdfManagerError as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


@cli.command(name="view")
@click.argument('template')
@click.option('--name', 'file_name', default=None, help='Output file name (generated when omitted)')
@click.option('--data-json', type=click.Path(exists=True, dir_okay=False), default=None, help='JSON object passed to the template')
@click.option('--storage-root', type=click.Path(file_okay=False), default=None, help='Root directory of the storage disk')
@click.pass_context
def render_view(ctx, template, file_name, data_json, storage_root):
    """
    Render a view template to a PDF in storage.

    Example:

        pdf-manager --views templates view invoice.summary --data-json invoice.json
    """
    try:
        manager = _manager(ctx, storage_root)
        output_path = manager.build_view(template, _parse_data((), data_json), file_name)
        console.print(f"[bold green]✓ Rendered[/bold green] {output_path}")
        console.print(f"[dim]{Path(manager.storage.path(output_path))}[/dim]")
    except click.BadParameter:
        raise
    except PdfManagerError as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


if __name__ == '__main__':
    cli()
