"""Core configuration.

Settings are read once, at the edge, by pydantic-settings: environment
variables prefixed `SPCRUD_`, the project's `.env`, then the per-user `.env`
written by `spcrud doctor setup`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_TOP = 9999
APP_DIR_NAME = "spcrud"


def get_user_config_dir() -> Path:
    """Per-user configuration directory.

    Windows: `%APPDATA%\\spcrud`; macOS: `~/Library/Application Support/spcrud`;
    elsewhere `$XDG_CONFIG_HOME/spcrud`, falling back to `~/.config/spcrud`.
    """

    home = Path.home()
    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA") or home)
    elif sys.platform == "darwin":
        root = home / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
    return root / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Merge `values` into the per-user .env; `None` values leave a key untouched.

    Keys are written sorted, one `KEY=value` per line.
    """

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    merged: dict[str, str] = {}
    if env_path.exists():
        merged = {k: v for k, v in dotenv_values(env_path).items() if v is not None}
    merged.update({k: v for k, v in values.items() if v is not None})

    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    env_path.write_text(f"# {APP_DIR_NAME} user config (.env)\n{body}", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    One typed contract for the CLI and the adapters, validated at the edge
    (environment variables and .env files).
    """

    model_config = SettingsConfigDict(
        env_prefix="SPCRUD_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    site_url: str | None = Field(
        default=None,
        description="Base URL of the SharePoint site, e.g. https://tenant.sharepoint.com/sites/team.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-request timeout (seconds).",
    )
    user_agent: str = Field(
        default="spcrud/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )
    access_token: str | None = Field(
        default=None,
        description="OAuth bearer token sent as `Authorization: Bearer ...`.",
    )
    auth_cookie: str | None = Field(
        default=None,
        description="Raw Cookie header (e.g. `FedAuth=...; rtFa=...`) for cookie-based sessions.",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates.",
    )
    default_top: int = Field(
        default=MAX_TOP,
        ge=1,
        le=MAX_TOP,
        description="Default number of records returned by item listings.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level for the CLI (DEBUG, INFO, WARNING, ERROR).",
    )

    @field_validator("site_url")
    @classmethod
    def _strip_site_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper() or "WARNING"
