"""lofi-sync CLI main entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from lofi_sync.cli._helpers import (
    fail,
    get_config,
    load_card,
    load_json_file,
    output_json,
    run_async,
    setup_logging,
)
from lofi_sync.core.card import CardId, MutableCardField, coerce_field_name
from lofi_sync.schema import (
    CardValidationError,
    board_from_payload,
    card_from_payload,
    card_to_payload,
)
from lofi_sync.storage.base import CardStorageError
from lofi_sync.storage.json_store import JsonFileCardStorage
from lofi_sync.sync.merge import FieldResolution, MergeReport, merge_cards_with_report
from lofi_sync.sync.sync_engine import SyncAction, SyncEngine, SyncSummary
from lofi_sync.sync.tracking import apply_local_edit

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="lofi-sync",
    help="lofi-sync - offline-first field-level card merging",
    no_args_is_help=True,
)

_RESOLUTION_STYLES: dict[FieldResolution, str] = {
    FieldResolution.UNCHANGED: "dim",
    FieldResolution.ADOPTED_REMOTE: "cyan",
    FieldResolution.PENDING_PUSH: "green",
    FieldResolution.CONFLICT: "bold red",
    FieldResolution.REMOTE_PASSTHROUGH: "dim",
}

_SEQUENCE_FIELDS = (MutableCardField.LABELS, MutableCardField.ASSIGNEES)


@app.callback()
def _main(
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
) -> None:
    setup_logging(debug, get_config())


def _show(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, tuple | list):
        return ", ".join(str(v) for v in value) or "[]"
    return str(value)


def _render_report(report: MergeReport) -> None:
    table = Table(title=f"Merge of card {report.card_id}")
    table.add_column("Field")
    table.add_column("Local")
    table.add_column("Remote")
    table.add_column("Snapshot")
    table.add_column("Resolution")
    for decision in report.decisions:
        style = _RESOLUTION_STYLES[decision.resolution]
        table.add_row(
            decision.field.value,
            _show(decision.local_value),
            _show(decision.remote_value),
            _show(decision.snapshot_value),
            f"[{style}]{decision.resolution.value}[/{style}]",
        )
    console.print(table)


def _render_summary(summary: SyncSummary) -> None:
    table = Table(title="Sync")
    table.add_column("Card")
    table.add_column("Action")
    table.add_column("Details")
    for outcome in summary.outcomes:
        details = outcome.message
        if outcome.conflicted_fields:
            details = "conflict: " + ", ".join(f.value for f in outcome.conflicted_fields)
        elif outcome.adopted_fields:
            details = "from remote: " + ", ".join(f.value for f in outcome.adopted_fields)
        table.add_row(outcome.card_id, outcome.action.value, details)
    console.print(table)


@app.command()
def merge(
    local: Annotated[Path, typer.Argument(help="Local card JSON file")],
    remote: Annotated[Path, typer.Argument(help="Remote card JSON file")],
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the merged card here")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    fail_on_conflict: Annotated[
        Optional[bool],
        typer.Option(
            "--fail-on-conflict/--no-fail-on-conflict",
            help="Exit non-zero when the merge ends in conflict",
        ),
    ] = None,
) -> None:
    """Merge a local card with its remote copy.

    Examples:
        lofi-sync merge local.json remote.json
        lofi-sync merge local.json remote.json --json -o merged.json
    """
    config = get_config()
    try:
        local_card = load_card(local)
        remote_card = load_card(remote)
    except ValueError as e:
        raise fail(str(e)) from e

    merged, report = merge_cards_with_report(local_card, remote_card)
    payload = card_to_payload(merged)

    if output is not None:
        output.write_text(json.dumps(payload, indent=config.json_indent) + "\n", encoding="utf-8")

    if json_output:
        output_json(
            {
                "card": payload,
                "conflict": report.has_conflict,
                "fastPath": report.fast_path,
                "fields": {d.field.value: d.resolution.value for d in report.decisions},
            },
            indent=config.json_indent,
        )
    else:
        _render_report(report)
        typer.echo(report.summary())

    should_fail = config.fail_on_conflict if fail_on_conflict is None else fail_on_conflict
    if report.has_conflict and should_fail:
        raise typer.Exit(config.conflict_exit_code)


@app.command()
def validate(
    path: Annotated[Path, typer.Argument(help="Card or board JSON file")],
) -> None:
    """Validate a card or board JSON file."""
    try:
        data = load_json_file(path)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object")
        if "columns" in data or "cards" in data:
            board = board_from_payload(data)
            conflicted = len(board.conflicted_cards())
            typer.secho(
                f"Valid board {board.id} ({len(board.cards)} cards, {conflicted} in conflict)",
                fg=typer.colors.GREEN,
            )
        else:
            card = card_from_payload(data)
            typer.secho(f"Valid card {card.id}", fg=typer.colors.GREEN)
    except CardValidationError as e:
        for error in e.errors:
            location = ".".join(str(p) for p in error.get("loc", ())) or "<root>"
            typer.secho(f"  {location}: {error.get('msg')}", fg=typer.colors.YELLOW, err=True)
        raise fail(f"{path} is not valid") from e
    except ValueError as e:
        raise fail(str(e)) from e


def _parse_assignment(raw: str) -> tuple[MutableCardField, Any]:
    name, sep, value = raw.partition("=")
    field_name = coerce_field_name(name.strip())
    if not sep or field_name is None:
        raise ValueError(f"Expected FIELD=VALUE with a mutable field, got {raw!r}")
    if field_name in _SEQUENCE_FIELDS:
        return field_name, [v.strip() for v in value.split(",") if v.strip()]
    if field_name == MutableCardField.POSITION:
        try:
            return field_name, float(value)
        except ValueError as e:
            raise ValueError(f"position must be a number, got {value!r}") from e
    if field_name == MutableCardField.DESCRIPTION and value == "":
        return field_name, None
    return field_name, value


@app.command()
def edit(
    card_id: Annotated[str, typer.Argument(help="Card to edit")],
    assignments: Annotated[
        list[str], typer.Argument(help="FIELD=VALUE pairs (labels/assignees comma-separated)")
    ],
    store: Annotated[
        Optional[Path], typer.Option("--store", "-s", help="Local card store file")
    ] = None,
) -> None:
    """Edit a card in the local store and mark the changed fields dirty.

    Examples:
        lofi-sync edit c1 title="New title" labels=bug,ui
    """
    config = get_config()
    store_path = store or config.local_store

    async def _edit() -> list[str]:
        storage = await JsonFileCardStorage.load(store_path, indent=config.json_indent)
        card = await storage.get_card(CardId(card_id))
        if card is None:
            raise ValueError(f"Card {card_id} not found in {store_path}")
        changes = dict(_parse_assignment(a) for a in assignments)
        edited = apply_local_edit(card, changes)
        if edited is card:
            return []
        await storage.update_card(edited)
        return sorted(f.value for f in edited.dirty_fields)

    try:
        dirty = run_async(_edit())
    except (ValueError, CardStorageError) as e:
        raise fail(str(e)) from e

    if dirty:
        typer.echo(f"Card {card_id} dirty fields: {', '.join(dirty)}")
    else:
        typer.echo(f"Card {card_id} unchanged")


@app.command()
def sync(
    local: Annotated[
        Optional[Path], typer.Option("--local", "-l", help="Local card store file")
    ] = None,
    remote: Annotated[
        Optional[Path], typer.Option("--remote", "-r", help="Remote card store file")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Reconcile every card between a local and a remote store file."""
    config = get_config()
    local_path = local or config.local_store
    remote_path = remote or config.remote_store

    async def _sync() -> SyncSummary:
        local_storage = await JsonFileCardStorage.load(local_path, indent=config.json_indent)
        remote_storage = await JsonFileCardStorage.load(remote_path, indent=config.json_indent)
        return await SyncEngine(local_storage, remote_storage).reconcile_all()

    try:
        summary = run_async(_sync())
    except CardStorageError as e:
        raise fail(str(e)) from e

    if json_output:
        output_json(
            {
                "counts": summary.to_dict(),
                "outcomes": [
                    {
                        "id": o.card_id,
                        "action": o.action.value,
                        "conflictedFields": [f.value for f in o.conflicted_fields],
                        "adoptedFields": [f.value for f in o.adopted_fields],
                    }
                    for o in summary.outcomes
                ],
            },
            indent=config.json_indent,
        )
    else:
        _render_summary(summary)

    if summary.count(SyncAction.ERROR):
        raise typer.Exit(1)
    if summary.conflicts and config.fail_on_conflict:
        raise typer.Exit(config.conflict_exit_code)


@app.command()
def version() -> None:
    """Show version information."""
    from lofi_sync import __version__

    typer.echo(f"lofi-sync v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
