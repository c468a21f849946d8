#!/usr/bin/env python3
"""
CLI interface for the Apple Card statement converter.
"""
import typer
from enum import Enum
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .core.runner import StatementConverter
from .core.detectors import detect_template
from .core.loader import read_lines
from .core.writer import write_csv, write_json
from .core.errors import StatementError

app = typer.Typer(help="Apple Card Statement Converter")
console = Console()


class OutputFormat(str, Enum):
    csv = "csv"
    json = "json"


@app.command()
def convert(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output file path"),
    output_format: OutputFormat = typer.Option(OutputFormat.csv, "--format", "-f", help="Output format"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Template ID to use"),
    strict: bool = typer.Option(False, "--strict", help="Fail on lines that do not fit the statement layout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Convert an Apple Card statement PDF into CSV or JSON."""

    if not pdf_path.exists():
        console.print(f"[red]Error: PDF file not found: {pdf_path}[/red]")
        raise typer.Exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("Reading PDF...", total=None)
            converter = StatementConverter(template, strict=strict, verbose=verbose)
            lines = converter.read_lines(pdf_path)

            progress.update(task, description="Parsing transactions...")
            statement = converter.parse_lines(lines, source=pdf_path.name)

            progress.update(task, description="Writing output...")
            if output_format is OutputFormat.json:
                rendered = write_json(statement)
            else:
                rendered = write_csv(statement.transactions)

    except (StatementError, ValueError) as e:
        console.print(f"[red]Error converting PDF: {e}[/red]")
        raise typer.Exit(1)

    for warning in statement.warnings:
        console.print(f"[yellow]Warning: line {warning.line_number}: {warning.message}[/yellow]")

    if output:
        try:
            output.write_text(rendered, encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Error writing output: {e}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓ {len(statement.transactions)} transactions written to: {output}[/green]")
    else:
        typer.echo(rendered, nl=False)


@app.command()
def lines(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file"),
    numbered: bool = typer.Option(False, "--numbered", "-n", help="Prefix each line with its number")
):
    """Print the text lines extracted from a PDF, as the parser sees them."""
    try:
        extracted = read_lines(pdf_path)
    except StatementError as e:
        console.print(f"[red]Error reading PDF: {e}[/red]")
        raise typer.Exit(1)

    for i, line in enumerate(extracted, 1):
        typer.echo(f"{i:5d}  {line}" if numbered else line)


@app.command()
def detect(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file")
):
    """Detect which template matches a PDF file."""
    template = detect_template(pdf_path)
    if template:
        console.print(f"[green]Detected template: {template}[/green]")
    else:
        console.print("[red]No matching template found[/red]")
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
