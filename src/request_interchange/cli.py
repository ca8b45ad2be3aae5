"""CLI entry point for request-interchange."""

import json
import logging
import sys
from pathlib import Path

import click

from request_interchange.dispatch import prepare_request
from request_interchange.exporter.bundle import export_collections
from request_interchange.merger import find_conflicts, import_collections
from request_interchange.parser.curl import parse_command
from request_interchange.parser.detect import MalformedInputError, Schema, load_payload
from request_interchange.store import JsonFileStore

DEFAULT_STORE = "collections.json"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s" if verbose else "%(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
    )


def _dump(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _echo_conflicts(conflicts: list[str], overwrite: bool) -> None:
    if not conflicts:
        click.echo("No existing collections conflict.")
        return
    action = "to replace" if overwrite else "to keep alongside a renamed copy (use --overwrite to replace)"
    click.echo(f"Existing collections {action}:")
    for name in conflicts:
        click.echo(f"  {name}")


@click.group()
@click.option(
    "--store",
    "store_path",
    default=DEFAULT_STORE,
    envvar="REQUEST_INTERCHANGE_STORE",
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON file holding the collection workspace.",
)
@click.option("-v", "--verbose", is_flag=True, envvar="REQUEST_INTERCHANGE_VERBOSE", help="Debug logging.")
@click.pass_context
def main(ctx: click.Context, store_path: Path, verbose: bool):
    """Request interchange: parse curl commands, import and export collections."""
    _configure_logging(verbose)
    ctx.obj = {"store_path": store_path}


@main.command()
@click.argument("command")
@click.option("--prepared", is_flag=True, help="Print the wire-ready request (auth and content type applied).")
def parse_curl(command: str, prepared: bool):
    """Parse a curl COMMAND (use - to read it from stdin) into a request."""
    if command == "-":
        command = click.get_text_stream("stdin").read()

    request = parse_command(command)
    if not request.url:
        raise click.ClickException("No request URL found in the command.")

    result = prepare_request(request) if prepared else request
    click.echo(_dump(result.model_dump(mode="json")))


@main.command()
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the export bundle.")
@click.option("-f", "--format", "fmt", default="native", type=click.Choice([s.value for s in Schema]), help="Export schema.")
@click.option("-c", "--collection", "collection_ids", multiple=True, type=int, help="Collection id to export (repeatable; default all).")
@click.pass_obj
def export(obj: dict, output: Path, fmt: str, collection_ids: tuple[int, ...]):
    """Export collections to a native or Postman v2.1 file."""
    store = JsonFileStore(obj["store_path"])
    bundle = export_collections(store, list(collection_ids) or None, Schema(fmt))

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(_dump(bundle), encoding="utf-8")
    click.echo(f"Exported to {output} ({fmt})")


@main.command(name="import")
@click.argument("payload_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--overwrite", is_flag=True, help="Replace collections with the same name instead of renaming.")
@click.option("--dry-run", is_flag=True, help="Only list collections that already exist; import nothing.")
@click.pass_obj
def import_(obj: dict, payload_path: Path, overwrite: bool, dry_run: bool):
    """Import a native or Postman v2.1 collection file."""
    store = JsonFileStore(obj["store_path"])
    try:
        payload = load_payload(payload_path)
        conflicts = find_conflicts(payload, store)
        if dry_run:
            _echo_conflicts(conflicts, overwrite)
            return
        result = import_collections(payload, overwrite, store)
    except MalformedInputError as e:
        raise click.ClickException(str(e)) from e
    store.save()

    if conflicts:
        _echo_conflicts(conflicts, overwrite)

    click.echo(f"Imported {result.collections_imported} collections, {result.requests_imported} requests.")
    for error in result.errors:
        click.echo(f"  {error}", err=True)


@main.command(name="list")
@click.pass_obj
def list_(obj: dict):
    """List collections in the workspace."""
    store = JsonFileStore(obj["store_path"])
    collections = store.list_collections()
    if not collections:
        click.echo("No collections.")
        return
    for collection in collections:
        count = len(store.list_requests(collection.id))
        click.echo(f"{collection.id}\t{collection.name}\t{count} requests")
