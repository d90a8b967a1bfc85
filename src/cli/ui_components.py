"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from presentation details.
- Lets several commands reuse the same tables and panels.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.sharepoint.site import SharePointSite
from core.domain.models import ListField, ListItem


def print_banner(console: Console, *, site_url: str | None = None) -> None:
    """Print the welcome banner."""

    title = Text("spcrud", style="bold cyan")
    subtitle = Text(site_url or "SharePoint Lists • Create • Read • Update • Delete", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_lists_table(site: SharePointSite) -> Table:
    table = Table(title=f"Lists on {site.site_url}")
    table.add_column("Title", style="cyan", no_wrap=True)
    table.add_column("Id", style="dim")
    table.add_column("Items", style="green", justify="right")
    table.add_column("Entity type", style="magenta")
    for title in sorted(site.titles(), key=str.lower):
        d = site[title].descriptor
        table.add_row(
            d.title,
            d.id,
            "" if d.item_count is None else str(d.item_count),
            d.item_entity_type or "",
        )
    return table


def build_fields_table(fields: Iterable[ListField], *, show_hidden: bool = False) -> Table:
    table = Table(title="Fields")
    table.add_column("Title", style="cyan", no_wrap=True)
    table.add_column("Internal name", style="white")
    table.add_column("Type", style="magenta")
    table.add_column("Required", style="green")
    table.add_column("Read-only", style="yellow")
    for f in fields:
        if f.hidden and not show_hidden:
            continue
        table.add_row(
            f.title,
            f.internal_name or "",
            f.type_as_string or "",
            "yes" if f.required else "",
            "yes" if f.read_only else "",
        )
    return table


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def build_items_table(items: Iterable[ListItem], *, columns: Iterable[str] = ("Title", "Modified")) -> Table:
    """Items as a table: id, etag and a few chosen columns."""

    columns = list(columns)
    table = Table(title="Items")
    table.add_column("Id", style="cyan", justify="right", no_wrap=True)
    for col in columns:
        table.add_column(col, style="white")
    table.add_column("ETag", style="dim")
    for item in items:
        table.add_row(
            _cell(item.item_id),
            *(_cell(item.fields.get(col)) for col in columns),
            _cell(item.etag),
        )
    return table
