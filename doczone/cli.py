"""
Command-line interface for DocZone.

Provides commands for:
- Writing feature-vector streams for an external sequence labeler
- Rebuilding markup from a label stream
- Running the full segmentation pipeline on saved label streams
- Listing zone taxonomies
- System diagnostics

Usage:
    doczone features catalogue.pdf --mode line -o catalogue.features
    doczone reconstruct catalogue.pdf --labels catalogue.labels --mode line
    doczone features catalogue.pdf --mode token --zone body --labels catalogue.labels
    doczone segment catalogue.pdf --segmenter-labels catalogue.labels
    doczone taxonomy monograph
    doczone info
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from doczone import __version__
from doczone.config import APP_NAME
from doczone.diagnostics import collect_diagnostics, summarize_checks
from doczone.errors import DocZoneError
from doczone.features.encoder import encode_tokens
from doczone.features.lines import encode_lines, selected_blocks
from doczone.ingest import load_document
from doczone.labeling.base import FileLabeler
from doczone.models import Document
from doczone.pipeline import PipelineConfig, SegmentationPipeline
from doczone.reconstruct import MarkupReconstructor
from doczone.segmentation import assign_zones
from doczone.taxonomy import TAXONOMIES, get_taxonomy, normalize_label

app = typer.Typer(
    name="doczone",
    help="DocZone: layout-aware zone segmentation of documents",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

MODES = ("line", "token")


def version_callback(value: bool):
    if value:
        console.print(f"{APP_NAME} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log pipeline stages and warnings",
    ),
):
    """DocZone: feature extraction and markup reconstruction for zone labeling."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/] {escape(message)}", style="bold")
    raise typer.Exit(code=1)


def _load(input_file: Path) -> Document:
    try:
        return load_document(input_file)
    except DocZoneError as e:
        _fail(str(e))


def _check_mode(mode: str) -> str:
    mode = mode.lower()
    if mode not in MODES:
        _fail(f"Unknown mode {mode!r}: expected one of {', '.join(MODES)}")
    return mode


def _write(text: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        err_console.print(f"[green]Saved to:[/] {output}")
    else:
        typer.echo(text, nl=not text.endswith("\n"))


def _zone_pieces(doc: Document, zone: str, labels_file: Optional[Path], flag: str = "--labels"):
    """Assign zones from a segmenter label stream and return one zone's pieces."""
    if labels_file is None:
        _fail(f"--zone needs {flag} with the segmenter label stream")
    encoded = encode_lines(doc, PipelineConfig.from_env().encoder_config())
    if encoded is None:
        _fail("The document has no encodable lines")
    assignment = assign_zones(
        doc, labels_file.read_text(encoding="utf-8"), encoded.units, get_taxonomy("segmenter")
    )
    for warning in assignment.warnings:
        err_console.print(f"[yellow]Warning:[/] {escape(warning)}")
    pieces = doc.get_document_part(normalize_label(zone))
    if pieces is None:
        _fail(f"Zone {normalize_label(zone)} not found in the document")
    return pieces


def _whole(doc: Document) -> list:
    piece = doc.full_piece()
    return [piece] if piece is not None else []


@app.command()
def features(
    input_file: Path = typer.Argument(..., help="Input document (PDF, JSON or TXT)"),
    mode: str = typer.Option("line", "--mode", "-m", help="Unit granularity: line or token"),
    zone: Optional[str] = typer.Option(
        None, "--zone", "-z",
        help="Restrict to one zone (e.g. body); needs --labels",
    ),
    labels_file: Optional[Path] = typer.Option(
        None, "--labels", "-l",
        help="Segmenter label stream used to locate --zone",
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
):
    """Write the feature-vector stream of a document."""
    mode = _check_mode(mode)
    doc = _load(input_file)
    config = PipelineConfig.from_env().encoder_config()

    try:
        pieces = _zone_pieces(doc, zone, labels_file) if zone else None
        if mode == "line":
            encoded = encode_lines(doc, config, pieces)
        else:
            encoded = encode_tokens(doc, pieces or _whole(doc), config)
    except DocZoneError as e:
        _fail(str(e))

    if encoded is None or encoded.is_empty:
        err_console.print("[yellow]No content to encode.[/]")
        raise typer.Exit(code=0)
    _write(encoded.features, output)


@app.command()
def reconstruct(
    input_file: Path = typer.Argument(..., help="Input document the labels were computed on"),
    labels_file: Path = typer.Option(..., "--labels", "-l", help="Label stream to rebuild"),
    mode: str = typer.Option("line", "--mode", "-m", help="Unit granularity: line or token"),
    taxonomy: Optional[str] = typer.Option(
        None, "--taxonomy", "-t",
        help="Taxonomy name (default: segmenter for lines, body for tokens)",
    ),
    zone: Optional[str] = typer.Option(
        None, "--zone", "-z",
        help="Zone the labels were computed on; needs --segmentation",
    ),
    segmentation_file: Optional[Path] = typer.Option(
        None, "--segmentation", "-s",
        help="Segmenter label stream used to locate --zone",
    ),
    indent: int = typer.Option(0, "--indent", help="Tabs written before each element"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
):
    """Rebuild markup from a label stream."""
    mode = _check_mode(mode)
    try:
        tax = get_taxonomy(taxonomy or ("segmenter" if mode == "line" else "body"))
    except KeyError as e:
        _fail(e.args[0])
    doc = _load(input_file)
    labelled = labels_file.read_text(encoding="utf-8")
    reconstructor = MarkupReconstructor(tax, indent=indent)

    try:
        pieces = _zone_pieces(doc, zone, segmentation_file, "--segmentation") if zone else None
        if mode == "line":
            blocks = doc.blocks
            if pieces is not None:
                blocks = [doc.blocks[i] for i in sorted(selected_blocks(pieces))]
            rebuilt = reconstructor.reconstruct_lines(labelled, blocks)
        else:
            pieces = pieces or _whole(doc)
            encoded = encode_tokens(doc, pieces, PipelineConfig.from_env().encoder_config())
            rebuilt = reconstructor.reconstruct_tokens(
                labelled, encoded.tokens if encoded is not None else []
            )
    except DocZoneError as e:
        _fail(str(e))

    for warning in rebuilt.warnings:
        err_console.print(f"[yellow]Warning:[/] {escape(warning)}")
    _write(rebuilt.markup + "\n", output)


@app.command()
def segment(
    input_file: Path = typer.Argument(..., help="Input document (PDF, JSON or TXT)"),
    segmenter_labels: Path = typer.Option(
        ..., "--segmenter-labels", "-s",
        help="Label stream of the segmenter model",
    ),
    body_labels: Optional[Path] = typer.Option(
        None, "--body-labels", "-b",
        help="Label stream of the body model (default: every token is an entry)",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write the result as JSON",
    ),
):
    """Run segmentation and body labeling from saved label streams."""
    doc = _load(input_file)
    pipeline = SegmentationPipeline(
        config=PipelineConfig.from_env(),
        segmenter=FileLabeler(segmenter_labels),
        body_labeler=FileLabeler(body_labels) if body_labels else None,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=err_console,
    ) as progress:
        task = progress.add_task("Segmenting...", total=100)

        def update_progress(msg: str, pct: float):
            progress.update(task, description=msg, completed=int(pct * 100))

        pipeline.progress_callback = update_progress
        try:
            result = pipeline.process(doc)
        except DocZoneError as e:
            progress.stop()
            _fail(str(e))

    table = Table(title="Segmentation Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.stats.items():
        table.add_row(key, str(value))
    err_console.print(table)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/] {escape(warning)}")
    for error in result.errors:
        err_console.print(f"[red]Error:[/] {escape(error)}")

    if output:
        payload = {
            "document": doc.doc_id,
            "segmentation": result.segmentation.markup,
            "body": result.body.markup if result.body and result.body.found else None,
            "stats": result.stats,
            "errors": result.errors,
            "warnings": result.warnings,
        }
        _write(json.dumps(payload, indent=2, ensure_ascii=False), output)
    else:
        console.print(result.segmentation.markup, markup=False, highlight=False)
        if result.body is not None and result.body.found:
            console.print()
            console.print(result.body.markup, markup=False, highlight=False)

    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def taxonomy(
    name: Optional[str] = typer.Argument(None, help="Taxonomy name (default: all)"),
):
    """List zone labels and the elements they render to."""
    if name:
        try:
            taxonomies = [get_taxonomy(name)]
        except KeyError as e:
            _fail(e.args[0])
    else:
        taxonomies = [TAXONOMIES[key] for key in sorted(TAXONOMIES)]

    for tax in taxonomies:
        table = Table(title=f"Taxonomy: {tax.name} ({len(tax)} labels)")
        table.add_column("Label", style="cyan")
        table.add_column("Open")
        table.add_column("Close")
        table.add_column("Description", style="dim")
        for label in tax:
            table.add_row(
                label.name,
                label.open or "(none)",
                label.close or "(none)",
                label.description,
            )
        console.print(table)


@app.command()
def info():
    """Show system information and environment diagnostics."""
    console.print(f"[bold]{APP_NAME} v{__version__}[/]\n")

    checks = collect_diagnostics()
    table = Table(title="Environment health", show_lines=True)
    table.add_column("Status", justify="center")
    table.add_column("Item")
    table.add_column("Detail")

    icons = {"ok": "✅", "warn": "⚠️", "error": "❌"}
    for c in checks:
        table.add_row(icons.get(c.status, "•"), c.name, c.detail)
    console.print(table)

    summary = summarize_checks(checks)
    console.print(
        f"[bold]{summary['ok']} OK[/bold], "
        f"[yellow]{summary['warn']} warning(s)[/yellow], "
        f"[red]{summary['error']} error(s)[/red]."
    )


if __name__ == "__main__":
    app()
