"""spcrud command line.

Every command connects to the site (one discovery request), picks the list
by title and runs one bound operation. Errors from the client are printed and
turned into exit codes; they are never swallowed silently.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console

from adapters.json_exporter import export_items_json
from adapters.sharepoint.site import SharePointList, SharePointSite, connect
from cli.doctor import app as doctor_app
from cli.ui_components import build_fields_table, build_items_table, build_lists_table, print_banner
from core.config import AppSettings
from core.errors import MissingArgumentError, SharePointError
from core.logging_setup import configure_logging

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Create, read, update and delete SharePoint list items.")
app.add_typer(doctor_app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@dataclass
class CLIState:
    settings: AppSettings


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        state = CLIState(settings=AppSettings())
        ctx.obj = state
    return state


def _run(coro: Awaitable[T]) -> T:
    """Drive a coroutine and map client errors to exit codes."""

    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except MissingArgumentError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except SharePointError as exc:
        _err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


async def _connect(settings: AppSettings) -> SharePointSite:
    return await connect(settings.site_url, settings=settings)


async def _open_list(settings: AppSettings, title: str) -> SharePointList:
    site = await _connect(settings)
    return site.get_list(title)


def parse_assignments(values: List[str] | None) -> dict[str, Any]:
    """Turn `key=value` pairs into a dict; values are JSON-decoded when possible."""

    out: dict[str, Any] = {}
    for raw in values or []:
        if "=" not in raw:
            raise typer.BadParameter(f"Expected key=value, got {raw!r}", param_hint="--set")
        key, value = raw.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Empty field name in {raw!r}", param_hint="--set")
        try:
            out[key] = json.loads(value)
        except json.JSONDecodeError:
            out[key] = value
    return out


@app.callback()
def main(
    ctx: typer.Context,
    site: Optional[str] = typer.Option(
        None,
        "--site",
        "-s",
        help="SharePoint site URL (defaults to SPCRUD_SITE_URL).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request."),
) -> None:
    settings = AppSettings()
    if site:
        settings = settings.model_copy(update={"site_url": site.strip().rstrip("/")})
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = CLIState(settings=settings)


@app.command("lists")
def lists_cmd(ctx: typer.Context) -> None:
    """Show every list of the site."""

    site = _run(_connect(_state(ctx).settings))
    _console.print(build_lists_table(site))


@app.command("fields")
def fields_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument(..., help="List title."),
    show_hidden: bool = typer.Option(False, "--hidden", help="Include hidden fields."),
) -> None:
    """Show the field definitions of a list."""

    async def _do() -> Any:
        sp_list = await _open_list(_state(ctx).settings, list_title)
        return await sp_list.get_list_fields()

    _console.print(build_fields_table(_run(_do()), show_hidden=show_hidden))


@app.command("items")
def items_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument(..., help="List title."),
    top: Optional[int] = typer.Option(None, "--top", "-n", min=1, help="Maximum number of items."),
    columns: Optional[List[str]] = typer.Option(None, "--column", "-c", help="Column to display (repeatable)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also export the items to this JSON file."),
) -> None:
    """List the items of a list."""

    async def _do() -> Any:
        sp_list = await _open_list(_state(ctx).settings, list_title)
        return await sp_list.read_list_items(top)

    items = _run(_do())
    _console.print(build_items_table(items, columns=columns or ("Title", "Modified")))
    if output is not None:
        path = export_items_json(items=items, output_path=output)
        _console.print(f"[green]Exported {len(items)} items to[/green] {path}")


@app.command("item")
def item_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument(..., help="List title."),
    item_id: int = typer.Argument(..., help="Item id."),
) -> None:
    """Show one item as JSON."""

    async def _do() -> Any:
        sp_list = await _open_list(_state(ctx).settings, list_title)
        return await sp_list.read_list_item(item_id)

    item = _run(_do())
    _console.print_json(data=item.model_dump(mode="json"))


@app.command("create")
def create_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument(..., help="List title."),
    assignments: Optional[List[str]] = typer.Option(None, "--set", help="Field value as key=value (repeatable)."),
) -> None:
    """Create an item."""

    values = parse_assignments(assignments)

    async def _do() -> Any:
        sp_list = await _open_list(_state(ctx).settings, list_title)
        return await sp_list.create_list_item(values)

    item = _run(_do())
    _console.print(f"[green]Created item[/green] {item.item_id}")
    _console.print_json(data=item.model_dump(mode="json"))


@app.command("update")
def update_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument(..., help="List title."),
    item_id: int = typer.Argument(..., help="Item id."),
    assignments: Optional[List[str]] = typer.Option(None, "--set", help="Field value as key=value (repeatable)."),
) -> None:
    """Update an item (read, then write with its current etag)."""

    values = parse_assignments(assignments)

    async def _do() -> None:
        sp_list = await _open_list(_state(ctx).settings, list_title)
        await sp_list.update_list_item(item_id, values)

    _run(_do())
    _console.print(f"[green]Updated item[/green] {item_id}")


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument(..., help="List title."),
    item_id: int = typer.Argument(..., help="Item id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete an item (read, then delete with its current etag)."""

    if not yes:
        typer.confirm(f"Delete item {item_id} from {list_title!r}?", abort=True)

    async def _do() -> None:
        sp_list = await _open_list(_state(ctx).settings, list_title)
        await sp_list.delete_list_item(item_id)

    _run(_do())
    _console.print(f"[green]Deleted item[/green] {item_id}")


async def _demo_step(label: str, action: Callable[[], Awaitable[Any]]) -> Any:
    _console.rule(label)
    try:
        result = await action()
    except SharePointError as exc:
        _err_console.print(f"[red]{label} failed:[/red] {exc}")
        return None
    return result


@app.command("demo")
def demo_cmd(
    ctx: typer.Context,
    list_title: str = typer.Argument("CRUD", help="List title to exercise."),
    item_id: int = typer.Option(1, "--item-id", help="Item to read, update and delete."),
) -> None:
    """Walk through every operation on one list."""

    settings = _state(ctx).settings
    print_banner(_console, site_url=settings.site_url)

    async def _do() -> None:
        site = await _connect(settings)
        _console.print(build_lists_table(site))
        sp_list = site.get_list(list_title)

        fields = await _demo_step("Fields", sp_list.get_list_fields)
        if fields is not None:
            _console.print(build_fields_table(fields))

        created = await _demo_step("Create", lambda: sp_list.create_list_item({"Title": "My new List Item"}))
        if created is not None:
            _console.print_json(data=created.model_dump(mode="json"))

        items = await _demo_step("Read items", sp_list.read_list_items)
        if items is not None:
            _console.print(build_items_table(items))

        item = await _demo_step(f"Read item {item_id}", lambda: sp_list.read_list_item(item_id))
        if item is not None:
            _console.print_json(data=item.model_dump(mode="json"))

        await _demo_step(
            f"Update item {item_id}",
            lambda: sp_list.update_list_item(item_id, {"Title": "My updated List Item"}),
        )
        await _demo_step(f"Delete item {item_id}", lambda: sp_list.delete_list_item(item_id))

    _run(_do())


def run() -> None:
    app()


if __name__ == "__main__":
    run()
