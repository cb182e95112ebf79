#!/usr/bin/env python3
"""
PDF Production CLI

Typesets YAML documents (or ready-made .tex files) to PDF with a TeX engine.

Commands:
    build   - Produce a PDF from a YAML document or a .tex file
    excerpt - Show the first error of an existing TeX log

Examples:\n

    make_pdf.py build report.yaml                          # report.pdf next to the source

    make_pdf.py build report.yaml -o out/report.pdf -e xelatex

    make_pdf.py build paper.tex --timeout 120 --verbose

    make_pdf.py excerpt input.log
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from texforge.contexts.document import Document, WriterOptions, load_document, write_latex
from texforge.contexts.document.loader import InvalidDocumentError
from texforge.contexts.rendering import extract_message, make_pdf
from texforge.contexts.rendering.diagnostics import decode_log
from texforge.contexts.rendering.logger import setup_rendering_logger

load_dotenv()
LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Typeset documents to PDF with a TeX engine",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("build")
def build_command(
    source: Annotated[
        Path,
        typer.Argument(help="YAML document or .tex file", exists=True, dir_okay=False),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="PDF path (default: source with .pdf suffix)"),
    ] = None,
    engine: Annotated[
        str,
        typer.Option("--engine", "-e", help="TeX engine (pdflatex, lualatex, xelatex)"),
    ] = LATEX_COMPILER,
    source_dir: Annotated[
        Optional[str],
        typer.Option(
            "--source-dir",
            "-s",
            help="Directory or base URL for relative images (default: the source's directory)",
        ),
    ] = None,
    toc: Annotated[
        bool,
        typer.Option("--toc/--no-toc", help="Include a table of contents"),
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", "-t", help="Kill a pass running longer than this (seconds)", min=1),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show warnings and the raw TeX output"),
    ] = False,
    log_dir: Annotated[
        Optional[Path],
        typer.Option("--log-dir", help="Directory for render.log (default: LOGS_PATH/render_<timestamp>)"),
    ] = None,
):
    """
    Produce a PDF from a YAML document or a .tex file.

    YAML documents have their images fetched and are rendered to LaTeX first;
    .tex files are passed to the engine as they are.

    Examples:\n

        $ make_pdf.py build report.yaml                  # Build report.pdf

        $ make_pdf.py build report.yaml --toc            # With a table of contents

        $ make_pdf.py build paper.tex -e lualatex        # Raw LaTeX with LuaLaTeX
    """
    if log_dir is None:
        log_dir = LOGS_PATH / f"render_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    setup_rendering_logger(log_dir, engine=engine, console_level="DEBUG" if verbose else "INFO")

    options = WriterOptions(
        source_directory=source_dir or str(source.resolve().parent),
        table_of_contents=toc,
    )

    if source.suffix == ".tex":
        tex_source = source.read_text(encoding="utf-8")
        document = Document()

        def writer(_options, _document):
            return tex_source

    else:
        try:
            document = load_document(source)
        except InvalidDocumentError as e:
            typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        writer = write_latex

    typer.secho(f"\nTypesetting: {source}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Engine: {engine}")
    typer.echo("")

    result = make_pdf(
        engine,
        writer,
        options,
        document,
        timeout=timeout,
        verbose=verbose,
    )

    typer.echo("")
    if result.success:
        output = output or source.with_suffix(".pdf")
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(result.pdf)

        typer.secho("✓ PDF produced", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  Passes: {result.num_passes}")
        if result.page_count is not None:
            typer.echo(f"  Pages: {result.page_count}")
        typer.echo(f"  {engine} warnings: {len(result.warnings)}")
        typer.echo(f"  PDF: {output}")
    else:
        typer.secho("✗ PDF production failed", fg=typer.colors.RED, bold=True)
        typer.secho(decode_log(result.message), fg=typer.colors.RED)

    typer.echo(f"  Log: {log_dir / 'render.log'}")
    typer.echo("")

    raise typer.Exit(code=0 if result.success else 1)


@app.command("excerpt")
def excerpt_command(
    log_file: Annotated[
        Path,
        typer.Argument(help="TeX log or captured engine output", exists=True, dir_okay=False),
    ],
):
    """
    Show the first error of a TeX log, up to its line-number context.

    Prints the whole log when it contains no error line.

    Examples:\n

        $ make_pdf.py excerpt build/input.log
    """
    excerpt = extract_message(log_file.read_bytes())
    typer.echo(decode_log(excerpt), nl=False)


if __name__ == "__main__":
    app()
