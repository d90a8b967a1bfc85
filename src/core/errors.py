"""Errors raised by the SharePoint client.

Everything derives from `SharePointError` so callers (the CLI, scripts) can
catch a single type at the boundary.
"""

from __future__ import annotations


class SharePointError(Exception):
    """Base error for every failure talking to a SharePoint site."""


class SharePointHTTPError(SharePointError):
    """The server answered with a non-2xx status."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"HTTP {code}: {message}" if message else f"HTTP {code}")
        self.code = code
        self.message = message


class SharePointConnectionError(SharePointError):
    """The request never got an answer (DNS, refused connection, timeout)."""


class SharePointResponseError(SharePointError):
    """The server answered 2xx but the payload is not what the API promises."""


class MissingArgumentError(SharePointError, ValueError):
    """A required argument was empty."""


class ListNotFoundError(SharePointError, KeyError):
    """No list with the requested title exists on the connected site."""

    def __init__(self, title: str) -> None:
        super().__init__(title)
        self.title = title

    def __str__(self) -> str:
        return f"List not found: {self.title!r}"
