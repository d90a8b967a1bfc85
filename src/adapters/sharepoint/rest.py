"""SharePoint REST endpoints (`/_api`, OData verbose dialect).

These helpers are pure I/O: they know the URLs and headers the API expects,
and nothing about how lists are bound or exposed.
"""

from __future__ import annotations

from typing import Any

import httpx

from adapters.http_client import parse_verbose, send_request
from core.config import MAX_TOP, AppSettings
from core.domain.models import FormDigest
from core.errors import SharePointResponseError

ODATA_VERBOSE = "application/json;odata=verbose"

VERBOSE_HEADERS = {
    "accept": ODATA_VERBOSE,
    "content-Type": ODATA_VERBOSE,
}

__all__ = [
    "MAX_TOP",
    "ODATA_VERBOSE",
    "VERBOSE_HEADERS",
    "get_form_digest",
    "get_lists",
    "item_url",
    "items_url",
    "normalize_site_url",
]


def normalize_site_url(site_url: str) -> str:
    return site_url.strip().rstrip("/")


def items_url(site_url: str, list_id: str) -> str:
    return f"{normalize_site_url(site_url)}/_api/Web/Lists(guid'{list_id}')/items"


def item_url(site_url: str, list_id: str, item_id: int | str) -> str:
    return f"{normalize_site_url(site_url)}/_api/Web/Lists(guid'{list_id}')/GetItemById('{item_id}')"


async def get_lists(
    site_url: str,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Fetch the descriptors of every list on the site (raw response text)."""

    return await send_request(
        method="GET",
        url=f"{normalize_site_url(site_url)}/_api/Web/Lists",
        headers=VERBOSE_HEADERS,
        data={},
        settings=settings,
        transport=transport,
    )


async def get_form_digest(
    site_url: str,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FormDigest:
    """Obtain the request digest that signs later writes.

    Without it the server answers writes with 403 FORBIDDEN.
    """

    text = await send_request(
        method="POST",
        url=f"{normalize_site_url(site_url)}/_api/contextinfo",
        headers={"Accept": "application/json; odata=verbose"},
        data={},
        settings=settings,
        transport=transport,
    )
    data: Any = parse_verbose(text)
    info = data.get("GetContextWebInformation") if isinstance(data, dict) else None
    if not isinstance(info, dict) or not info.get("FormDigestValue"):
        raise SharePointResponseError("contextinfo response carries no FormDigestValue.")
    return FormDigest(
        value=info["FormDigestValue"],
        timeout_seconds=info.get("FormDigestTimeoutSeconds"),
    )
