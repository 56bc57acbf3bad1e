"""CLI for outline-tools: dates, tag arguments and name-tree reconciliation."""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from outline_tools.config import Settings, settings_from_pairs
from outline_tools.core.dates.interpreter import date_range, interpret, today_at_noon
from outline_tools.core.tags import string_to_tag_args_text
from outline_tools.core.tree.name_tree import find_name_chains, reconcile_name_tree
from outline_tools.core.write.client import schedule_node
from outline_tools.core.write.moves import describe_node
from outline_tools.document import OutlineDocument, load_document, save_document
from outline_tools.logging_config import configure_logging
from outline_tools.models.node import DateError, NameTreeAnalysisResult

app = typer.Typer(help="Relative dates, tag arguments and name trees for outline documents.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _reference(value: str | None) -> datetime:
    if value is None:
        return today_at_noon()
    try:
        return today_at_noon(datetime.combine(date.fromisoformat(value), datetime.min.time()))
    except ValueError:
        logger.error("Reference date must be YYYY-MM-DD, got {!r}", value)
        raise typer.Exit(2) from None


def _settings(pairs: list[str] | None) -> Settings:
    raw: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            logger.error("Settings are key=value, got {!r}", pair)
            raise typer.Exit(2)
        raw[key.strip()] = value
    try:
        return settings_from_pairs(raw)
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(2) from None


def _open_document(path: Path) -> OutlineDocument:
    if not path.exists():
        logger.error("Document not found: {}", path)
        raise typer.Exit(1)
    try:
        return load_document(path)
    except (ValueError, KeyError, json.JSONDecodeError) as e:
        logger.error("Cannot read document {}: {}", path, e)
        raise typer.Exit(1) from None


ReferenceOption = Annotated[
    str | None,
    typer.Option("--reference", "-r", help="Reference date (YYYY-MM-DD), default today"),
]
SettingOption = Annotated[
    list[str] | None,
    typer.Option("--set", "-s", help="Setting as key=value (repeatable)"),
]


@app.command(name="date")
def date_cmd(
    expression: str = typer.Argument(..., help="Date expression, e.g. 'tue week' or '3 mar'"),
    reference: ReferenceOption = None,
    settings_pairs: SettingOption = None,
) -> None:
    """Interpret a relative date expression."""
    settings = _settings(settings_pairs)
    result = interpret(expression, _reference(reference), end_of_time=settings.end_of_time)
    if isinstance(result, DateError):
        typer.echo(f"Error ({result.kind.value}): {result.message}")
        raise typer.Exit(1)
    typer.echo(f"{result.entry.iso}  {result.entry.label}  ({result.description})")


@app.command(name="range")
def range_cmd(
    expression: str = typer.Argument(..., help="Range such as '3d-2w', 'mon-' or '-epoch'"),
    reference: ReferenceOption = None,
    settings_pairs: SettingOption = None,
) -> None:
    """Turn a date range into a search clause."""
    settings = _settings(settings_pairs)
    result = date_range(expression, _reference(reference), end_of_time=settings.end_of_time)
    if isinstance(result, DateError):
        typer.echo(f"Error ({result.kind.value}): {result.message}")
        raise typer.Exit(1)
    typer.echo(result.clause)


@app.command(name="tag-args")
def tag_args_cmd(
    tag: str = typer.Argument(..., help="Tag, e.g. '#foo'"),
    text: str = typer.Argument(..., help="Text containing e.g. '#foo(bar, baz)'"),
) -> None:
    """Print the arguments passed to a tag."""
    try:
        args = string_to_tag_args_text(tag, text)
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(2) from None
    if args is None:
        typer.echo(f"No call of {tag} found.")
        raise typer.Exit(1)
    typer.echo(args)


@app.command()
def chains(
    path: Path = typer.Argument(..., help="Document (.c.json)"),
    settings_pairs: SettingOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List the name chains declared in a document."""
    document = _open_document(path)
    found = find_name_chains(document.root, settings=_settings(settings_pairs))
    if output_json:
        typer.echo(json.dumps({c: [n.id for n in nodes] for c, nodes in found.items()}, indent=2))
        return
    if not found:
        typer.echo("No name chains found.")
        return
    for chain, nodes in found.items():
        typer.echo(f"{chain}  {', '.join(n.id for n in nodes)}")


def _print_analysis(analysis: NameTreeAnalysisResult) -> None:
    typer.echo(
        f"{len(analysis.roots)} root(s), {len(analysis.single_parent)} with one parent, "
        f"{len(analysis.no_parent)} without parent, {len(analysis.many_parent)} ambiguous"
    )
    for chain, nodes in analysis.duplicates.items():
        typer.echo(f"Duplicate name {chain!r}: {', '.join(n.id for n in nodes)}")
    for move in analysis.moves:
        typer.echo(f"Move {describe_node(move.node)} under {describe_node(move.target)}")
    for problem in analysis.impossible_moves:
        typer.echo(f"Cannot fix: {problem}")


@app.command()
def reconcile(
    path: Path = typer.Argument(..., help="Document (.c.json)"),
    root: Annotated[
        str | None,
        typer.Option("--root", help="Only look below this node id"),
    ] = None,
    apply: bool = typer.Option(False, "--apply", help="Perform the moves"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before moving"),
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Where to write the result (default: in place)"),
    ] = None,
    settings_pairs: SettingOption = None,
) -> None:
    """Move nodes under the parents their names declare."""
    document = _open_document(path)
    search_root = document.root
    if root is not None:
        found = document.get_node(root)
        if found is None:
            logger.error("Node {!r} not found", root)
            raise typer.Exit(1)
        search_root = found

    def confirm(analysis: NameTreeAnalysisResult) -> bool:
        _print_analysis(analysis)
        return yes or typer.confirm(f"Move {len(analysis.moves)} node(s)?")

    report = reconcile_name_tree(
        document,
        search_root,
        settings=_settings(settings_pairs),
        confirm=confirm,
        dry_run=not apply,
    )
    if report.result is None:
        if not apply or not report.analysis.moves:
            _print_analysis(report.analysis)
        return

    if report.result.moves_applied:
        save_document(document, output or path)
    if not report.result.success:
        typer.echo(f"Error: {report.result.error}")
        raise typer.Exit(1)
    typer.echo(f"Moved {report.result.moves_applied} node(s).")


@app.command()
def schedule(
    path: Path = typer.Argument(..., help="Document (.c.json)"),
    node_id: str = typer.Argument(..., help="Node to date"),
    expression: str = typer.Argument(..., help="Date expression"),
    reference: ReferenceOption = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Where to write the result (default: in place)"),
    ] = None,
    settings_pairs: SettingOption = None,
) -> None:
    """Set the date of a node from an expression."""
    document = _open_document(path)
    node = document.get_node(node_id)
    if node is None:
        logger.error("Node {!r} not found", node_id)
        raise typer.Exit(1)

    settings = _settings(settings_pairs)
    result = schedule_node(
        document, node, expression, _reference(reference), end_of_time=settings.end_of_time
    )
    if not result["success"]:
        typer.echo(f"Error: {result['error']}")
        raise typer.Exit(1)
    save_document(document, output or path)
    typer.echo(f"{node_id}: {result['date']} ({result['description']})")
