"""Shared fixtures: an in-memory SharePoint site served through httpx.MockTransport."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from core.config import AppSettings

SITE = "https://contoso.sharepoint.com/sites/team"
LIST_ID = "6f0c8f5e-1d2b-4a9b-9c1d-1234567890ab"
OTHER_LIST_ID = "0a1b2c3d-4e5f-6789-abcd-ef0123456789"
DIGEST = "0x1234ABCD,16 Jun 2019 10:00:00 -0000"
ENTITY_TYPE = "SP.Data.CRUDListItem"

_ITEM_RE = re.compile(r"/_api/Web/Lists\(guid'(?P<list>[^']+)'\)/GetItemById\('(?P<item>[^']+)'\)$")
_ITEMS_RE = re.compile(r"/_api/Web/Lists\(guid'(?P<list>[^']+)'\)/items$")
_FIELDS_RE = re.compile(r"/_api/Web/Lists\(guid'(?P<list>[^']+)'\)/Fields$")


def list_payload(list_id: str, title: str, *, item_count: int = 0) -> dict[str, Any]:
    return {
        "__metadata": {
            "id": f"{SITE}/_api/Web/Lists(guid'{list_id}')",
            "uri": f"{SITE}/_api/Web/Lists(guid'{list_id}')",
            "etag": '"5"',
            "type": "SP.List",
        },
        "Fields": {"__deferred": {"uri": f"{SITE}/_api/Web/Lists(guid'{list_id}')/Fields"}},
        "Items": {"__deferred": {"uri": f"{SITE}/_api/Web/Lists(guid'{list_id}')/Items"}},
        "Id": list_id,
        "Title": title,
        "Description": "",
        "ItemCount": item_count,
        "ListItemEntityTypeFullName": f"SP.Data.{title}ListItem",
    }


def item_payload(item_id: int, title: str, *, etag: str | None = '"1"') -> dict[str, Any]:
    meta: dict[str, Any] = {
        "id": f"Web/Lists(guid'{LIST_ID}')/Items({item_id})",
        "uri": f"{SITE}/_api/Web/Lists(guid'{LIST_ID}')/Items({item_id})",
        "type": ENTITY_TYPE,
    }
    if etag is not None:
        meta["etag"] = etag
    return {
        "__metadata": meta,
        "FirstUniqueAncestorSecurableObject": {"__deferred": {"uri": f"{meta['uri']}/FirstUniqueAncestorSecurableObject"}},
        "Id": item_id,
        "ID": item_id,
        "Title": title,
        "Modified": "2019-06-16T10:00:00Z",
    }


FIELDS = [
    {"Id": "fa564e0f-0c70-4ab9-b863-0177e6ddd247", "Title": "Title", "InternalName": "Title",
     "TypeAsString": "Text", "Required": True, "ReadOnlyField": False, "Hidden": False},
    {"Id": "28cf69c5-fa48-462a-b5cd-27b6f9d2bd5f", "Title": "Modified", "InternalName": "Modified",
     "TypeAsString": "DateTime", "Required": False, "ReadOnlyField": True, "Hidden": False},
    {"Id": "03e45e84-1992-4d42-9116-26f756012634", "Title": "Content Type ID", "InternalName": "ContentTypeId",
     "TypeAsString": "ContentTypeId", "Required": False, "ReadOnlyField": True, "Hidden": True},
]


def _json(status: int, body: Any) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(body).encode("utf-8"))


@dataclass
class FakeSharePoint:
    """Minimal SharePoint REST server.

    `overrides` maps `(METHOD, path-suffix)` to a canned response, checked
    before the normal routes, to simulate failures.
    """

    items: dict[int, dict[str, Any]] = field(default_factory=dict)
    lists: list[dict[str, Any]] = field(default_factory=list)
    overrides: dict[tuple[str, str], httpx.Response] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)
    next_id: int = 100

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for (method, suffix), response in self.overrides.items():
            if request.method == method and path.endswith(suffix):
                return httpx.Response(response.status_code, headers=response.headers, content=response.content)

        if request.method == "GET" and path.endswith("/_api/Web/Lists"):
            return _json(200, {"d": {"results": self.lists}})
        if request.method == "POST" and path.endswith("/_api/contextinfo"):
            return _json(200, {"d": {"GetContextWebInformation": {
                "__metadata": {"type": "SP.ContextWebInformation"},
                "FormDigestTimeoutSeconds": 1800,
                "FormDigestValue": DIGEST,
                "WebFullUrl": SITE,
            }}})

        m = _FIELDS_RE.search(path)
        if m and request.method == "GET":
            return _json(200, {"d": {"results": FIELDS}})

        m = _ITEMS_RE.search(path)
        if m:
            if request.method == "GET":
                top = int(request.url.params.get("$top", "100"))
                results = [self.items[k] for k in sorted(self.items)][:top]
                return _json(200, {"d": {"results": results}})
            if request.method == "POST":
                body = json.loads(request.content)
                new_id = self.next_id
                self.next_id += 1
                created = item_payload(new_id, body.get("Title", ""))
                created.update({k: v for k, v in body.items() if k != "__metadata"})
                self.items[new_id] = created
                return _json(201, {"d": created})

        m = _ITEM_RE.search(path)
        if m:
            item_id = int(m.group("item"))
            item = self.items.get(item_id)
            if item is None:
                return _json(404, {"error": {"code": "-2147024809, System.ArgumentException",
                                             "message": {"lang": "en-US", "value": "Item does not exist."}}})
            if request.method == "GET":
                return _json(200, {"d": item})
            if request.method == "PATCH":
                body = json.loads(request.content)
                item.update({k: v for k, v in body.items() if k != "__metadata"})
                return httpx.Response(204)
            if request.method == "DELETE":
                del self.items[item_id]
                return httpx.Response(200)

        return _json(404, {"error": {"message": {"value": f"no route for {request.method} {path}"}}})


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, site_url=SITE, access_token="test-token")


@pytest.fixture
def fake_sp() -> FakeSharePoint:
    return FakeSharePoint(
        items={
            1: item_payload(1, "First item", etag='"3"'),
            2: item_payload(2, "Second item", etag='"1"'),
        },
        lists=[
            list_payload(LIST_ID, "CRUD", item_count=2),
            list_payload(OTHER_LIST_ID, "Documents", item_count=0),
        ],
    )
