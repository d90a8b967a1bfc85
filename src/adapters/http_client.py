"""httpx wrapper.

Why a wrapper:
- Standardises timeouts, headers, credentials and logging for every request.
- Makes testing easy: an `httpx.MockTransport` can be injected in place of
  the network.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Sequence
from urllib.parse import urlencode

import httpx

from core.config import AppSettings
from core.errors import SharePointConnectionError, SharePointHTTPError, SharePointResponseError

logger = logging.getLogger(__name__)

HeaderSpec = Mapping[str, str] | Sequence[Mapping[str, str]]


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the configured defaults.

    Credentials:
    - `access_token` becomes `Authorization: Bearer ...`.
    - `auth_cookie` is sent verbatim as the `Cookie` header (browser session
      cookies such as FedAuth/rtFa).
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
    }
    if settings.access_token:
        headers["Authorization"] = f"Bearer {settings.access_token}"
    if settings.auth_cookie:
        headers["Cookie"] = settings.auth_cookie
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=settings.verify_ssl,
        transport=transport,
    )


def encode_params(params: Mapping[str, Any] | None) -> str:
    """Encode query parameters as `?k=v&...` (empty string when there are none).

    `$` stays literal so OData system options (`$top`, `$filter`) read as such.
    """

    if not params:
        return ""
    return "?" + urlencode({str(k): str(v) for k, v in params.items()}, safe="$'(),")


def merge_headers(headers: HeaderSpec | None) -> dict[str, str]:
    """Flatten a header mapping, or a sequence of mappings, into one dict."""

    if not headers:
        return {}
    if isinstance(headers, Mapping):
        return {str(k): str(v) for k, v in headers.items()}
    merged: dict[str, str] = {}
    for block in headers:
        merged.update({str(k): str(v) for k, v in block.items()})
    return merged


def _encode_body(data: Any) -> bytes:
    if data is None:
        return b"{}"
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")
    return json.dumps(data).encode("utf-8")


async def send_request(
    *,
    method: str,
    url: str,
    headers: HeaderSpec | None = None,
    params: Mapping[str, Any] | None = None,
    data: Any = None,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Perform exactly one request/response cycle and return the body text.

    - 2xx -> body text (possibly empty, e.g. 204 after PATCH/DELETE).
    - any other status -> `SharePointHTTPError(code, body)`.
    - no answer at all -> `SharePointConnectionError`.
    """

    full_url = url + encode_params(params)
    method = method.upper()

    try:
        async with build_async_client(settings, transport=transport) as client:
            response = await client.request(
                method,
                full_url,
                headers=merge_headers(headers),
                content=_encode_body(data),
            )
    except httpx.HTTPError as exc:
        logger.warning("%s %s failed: %s", method, full_url, exc)
        raise SharePointConnectionError(f"{method} {full_url}: {exc}") from exc

    logger.debug("%s %s -> %s", method, full_url, response.status_code)
    if 200 <= response.status_code < 300:
        return response.text
    raise SharePointHTTPError(response.status_code, response.text)


def parse_verbose(text: str) -> Any:
    """Decode an OData verbose payload and return its `d` member."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SharePointResponseError(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict) or "d" not in payload:
        raise SharePointResponseError("Response has no 'd' member (expected odata=verbose).")
    return payload["d"]
