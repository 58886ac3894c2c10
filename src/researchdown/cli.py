"""researchdown CLI entrypoint."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from researchdown.parser.response import process_research_response
from researchdown.renderer.markdown_renderer import MarkdownRenderer, minimal_document, suggest_filename
from researchdown.renderer.table_series import extract_table_charts


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Convert model-generated research markup into portable Markdown."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--title", "-t", type=str, default=None, help="Document title (defaults to the file name)")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None, help="Output Markdown path")
@click.option(
    "--charts-json",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write the chart descriptors found in the response as JSON",
)
def export(input_path: Path, title: str | None, output: Path | None, charts_json: Path | None) -> None:
    """Export a raw research response as a Markdown document."""
    raw = _read_input(input_path)
    title = title or input_path.stem

    result = process_research_response(raw)
    conversion = MarkdownRenderer().render(title, result.content, result.citations)
    if not conversion.ok:
        click.echo(f"Warning: conversion failed ({conversion.error}); writing a minimal document", err=True)

    markdown = conversion.unwrap_or(minimal_document(title))
    output = output or Path(suggest_filename(title))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    click.echo(f"Rendered: {output}")

    if charts_json is not None:
        charts = [chart.to_dict() for chart in result.charts + conversion.charts]
        charts_json.parent.mkdir(parents=True, exist_ok=True)
        charts_json.write_text(json.dumps(charts, indent=2), encoding="utf-8")
        click.echo(f"Charts: {charts_json} ({len(charts)})")


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--tables/--no-tables", default=True, show_default=True, help="Include charts inferred from tables")
def charts(input_path: Path, tables: bool) -> None:
    """Print the chart descriptors found in a raw research response as JSON."""
    raw = _read_input(input_path)
    result = process_research_response(raw)
    found = list(result.charts)
    if tables:
        found.extend(extract_table_charts(result.content))
    click.echo(json.dumps([chart.to_dict() for chart in found], indent=2))


def _read_input(input_path: Path) -> str:
    try:
        return input_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise click.ClickException(f"Cannot read {input_path.name}: {exc}") from exc


if __name__ == "__main__":  # pragma: no cover
    main()
