"""Typer-based CLI for the MetaDB documentation generator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import Settings, load_settings
from .diagram import generate_inheritance_diagram, mermaid_block
from .errors import MetaDBError
from .parser import SchemaParser, has_marker
from .pipeline import Schema, generate, read_schema
from .type_linker import describe_fields, strip_markup

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="📚 MetaDB CLI: generate class documentation from a meta class database.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

InputOption = typer.Option(None, "--in", "-i", help="Schema file (default: db/database.py).")
ConfigOption = typer.Option(None, "--config", "-c", help="Path to a metadb.toml config file.")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"MetaDB CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging."),
):
    """MetaDB CLI: content-addressed JSON and MDX pages for meta classes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]✖ error:[/red] {escape(message)}", highlight=False)
    raise typer.Exit(code=1)


def _settings(config_file: Optional[Path], **overrides) -> Settings:
    try:
        return load_settings(config_file, **overrides)
    except MetaDBError as exc:
        _fail(str(exc))


def _load_schema(settings: Settings) -> Schema:
    try:
        return Schema.load(settings)
    except MetaDBError as exc:
        _fail(str(exc))


@app.command("generate")
def generate_cmd(
    input_path: Optional[Path] = InputOption,
    out_dir: Optional[Path] = typer.Option(None, "--out", "-o", help="Output directory for JSON (default: site/public/db)."),
    pages_dir: Optional[Path] = typer.Option(
        None, "--mdx", "--pages", help="Directory for MDX pages (default: site/src/content/docs/classes)."
    ),
    pretty: Optional[bool] = typer.Option(None, "--pretty/--compact", help="Pretty-print JSON output."),
    prune_json: Optional[bool] = typer.Option(
        None, "--prune-json/--keep-json", help="Delete class records no longer referenced."
    ),
    config_file: Optional[Path] = ConfigOption,
):
    """Parse the schema and write class JSON, index files and MDX pages."""
    settings = _settings(
        config_file,
        input=input_path,
        out_dir=out_dir,
        pages_dir=pages_dir,
        pretty=pretty,
        prune_json=prune_json,
    )
    try:
        report = generate(settings)
    except (MetaDBError, OSError) as exc:
        _fail(str(exc))

    for line in report.summary_lines():
        typer.echo(line)


@app.command("check")
def check(
    input_path: Optional[Path] = InputOption,
    config_file: Optional[Path] = ConfigOption,
):
    """Parse the schema in diagnostics mode and list skipped lines."""
    settings = _settings(config_file, input=input_path)
    try:
        text = read_schema(settings.input)
    except MetaDBError as exc:
        _fail(str(exc))

    parser = SchemaParser(diagnostics=True)
    classes = parser.parse(text)
    fields = sum(len(c.fields) for c in classes)

    if not has_marker(text):
        console.print("[yellow]⚠ Missing '#!python' marker line.[/yellow]")
    console.print(f"Classes: [bold]{len(classes)}[/bold] | Fields: [bold]{fields}[/bold]")

    if not parser.skipped:
        console.print("[green]✅ No skipped lines.[/green]")
        return

    table = Table(title=f"Skipped lines ({len(parser.skipped)})")
    table.add_column("Line", justify="right", style="cyan")
    table.add_column("Reason", style="yellow")
    table.add_column("Text", overflow="fold")
    for skipped in parser.skipped:
        table.add_row(str(skipped.line_no), skipped.reason, escape(skipped.text))
    console.print(table)


@app.command("show")
def show(
    name: str = typer.Argument(..., help="Class name (resolved or 0x hash)."),
    input_path: Optional[Path] = InputOption,
    config_file: Optional[Path] = ConfigOption,
):
    """Show a class's inheritance and fields."""
    settings = _settings(config_file, input=input_path)
    schema = _load_schema(settings)
    decl = schema.get(name)
    if decl is None:
        _fail(f"Class '{name}' not found.")

    view = schema.graph.view(name)
    console.print(f"[bold]{escape(name)}[/bold]  ({len(decl.fields)} fields)")
    for label, names in (
        ("Bases", decl.bases),
        ("Ancestors", view.ancestors),
        ("Children", view.direct_children),
        ("Descendants", view.descendants),
    ):
        console.print(f"  {label}: {escape(', '.join(names)) if names else '-'}", highlight=False)

    if not decl.fields:
        return

    table = Table(title="Fields")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Reference", style="magenta")
    for row in describe_fields(decl, schema.name_index):
        table.add_row(escape(row.name), escape(row.plain_type), escape(strip_markup(row.reference)))
    console.print(table)


@app.command("diagram")
def diagram(
    name: str = typer.Argument(..., help="Class name to diagram."),
    fenced: bool = typer.Option(False, "--fenced", help="Wrap output in a ```mermaid block."),
    input_path: Optional[Path] = InputOption,
    config_file: Optional[Path] = ConfigOption,
):
    """Print the Mermaid inheritance diagram for a class."""
    settings = _settings(config_file, input=input_path)
    schema = _load_schema(settings)
    decl = schema.get(name)
    if decl is None:
        _fail(f"Class '{name}' not found.")

    code = generate_inheritance_diagram(
        decl.name,
        decl.bases,
        schema.graph.direct_children(decl.name),
        schema.name_index,
    )
    if not code:
        typer.echo(f"'{name}' has no bases or children; nothing to diagram.")
        return
    typer.echo(mermaid_block(code) if fenced else code)


if __name__ == "__main__":
    app()
