"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.sharepoint.rest import get_form_digest
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_site(settings: AppSettings) -> tuple[bool, str]:
    """POST /_api/contextinfo: proves the site answers and accepts our credentials."""

    try:
        digest = await get_form_digest(settings.site_url or "", settings=settings)
    except Exception as exc:
        return False, str(exc)
    if digest.timeout_seconds:
        return True, f"Form digest valid for {digest.timeout_seconds}s"
    return True, "Form digest received"


def _auth_mode(settings: AppSettings) -> str:
    modes = []
    if settings.access_token:
        modes.append("bearer token")
    if settings.auth_cookie:
        modes.append("cookie")
    return " + ".join(modes)


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    state = ctx.find_root().obj
    settings = getattr(state, "settings", None) or AppSettings()

    table = Table(title="spcrud Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if settings.site_url:
        table.add_row("Site URL", "OK", settings.site_url)
    else:
        table.add_row("Site URL", "MISSING", "Set SPCRUD_SITE_URL or pass --site")

    auth = _auth_mode(settings)
    if auth:
        table.add_row("Credentials", "OK", auth)
    else:
        table.add_row("Credentials", "OPTIONAL", "No token or cookie set -> anonymous requests")
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("TLS verification", "OK" if settings.verify_ssl else "OFF", "")

    ok_site = False
    if settings.site_url:
        ok_site, detail = asyncio.run(_check_site(settings))
        table.add_row("contextinfo", "OK" if ok_site else "FAIL", detail)

    _console.print(table)

    if settings.site_url and not ok_site:
        _console.print(
            "\n[yellow]Note:[/yellow] 401/403 usually means the token or cookie is missing or expired. "
            "Run `spcrud doctor setup` to store new credentials."
        )
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    site_url = typer.prompt("SharePoint site URL").strip().rstrip("/")
    if not site_url.lower().startswith(("http://", "https://")):
        raise typer.BadParameter("site URL must start with http:// or https://")

    auth = typer.prompt("Authentication (token/cookie/none)", default="token", show_default=True).strip().lower()
    values: dict[str, str | None] = {"SPCRUD_SITE_URL": site_url}
    if auth == "token":
        values["SPCRUD_ACCESS_TOKEN"] = typer.prompt("Access token", hide_input=True).strip()
    elif auth == "cookie":
        values["SPCRUD_AUTH_COOKIE"] = typer.prompt("Cookie header (FedAuth=...; rtFa=...)", hide_input=True).strip()
    elif auth != "none":
        raise typer.BadParameter("authentication must be one of: token, cookie, none")

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved config to:[/green] {env_path}")
