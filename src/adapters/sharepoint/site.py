"""Site connection and per-list CRUD operations.

Flow:
- `connect` issues one discovery request (`/_api/Web/Lists`) and wraps every
  list descriptor in a `SharePointList` bound to that list.
- Writes are signed with a fresh form digest. Update and delete read the item
  right before writing so `If-Match` carries the etag most recently read.
  That is best-effort, not transactional: the server rejects a stale etag
  with 412.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from adapters.http_client import parse_verbose, send_request
from adapters.sharepoint.rest import (
    MAX_TOP,
    ODATA_VERBOSE,
    VERBOSE_HEADERS,
    get_form_digest,
    get_lists,
    item_url,
    items_url,
    normalize_site_url,
)
from core.config import AppSettings
from core.domain.models import METADATA_KEY, ListDescriptor, ListField, ListItem
from core.errors import ListNotFoundError, MissingArgumentError, SharePointResponseError

logger = logging.getLogger(__name__)


def _results(data: Any) -> list[dict[str, Any]]:
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise SharePointResponseError("Response has no 'd.results' collection.")
    return [r for r in results if isinstance(r, dict)]


_M = TypeVar("_M", bound=BaseModel)


def _validate(model: type[_M], payload: Any) -> _M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise SharePointResponseError(f"Malformed {model.__name__} payload: {exc}") from exc


def _parse_item(data: Any) -> ListItem:
    if not isinstance(data, dict):
        raise SharePointResponseError("Response has no item object in 'd'.")
    try:
        return ListItem.from_payload(data)
    except ValidationError as exc:
        raise SharePointResponseError(f"Malformed ListItem payload: {exc}") from exc


class SharePointList:
    """A discovered list with its CRUD operations bound to it."""

    def __init__(
        self,
        descriptor: ListDescriptor,
        *,
        settings: AppSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not descriptor.site_url:
            raise MissingArgumentError("SharePointList: descriptor has no site_url.")
        self.descriptor = descriptor
        self._settings = settings or AppSettings()
        self._transport = transport

    def __repr__(self) -> str:
        return f"SharePointList(title={self.title!r}, id={self.id!r})"

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def title(self) -> str:
        return self.descriptor.title

    @property
    def site_url(self) -> str:
        return self.descriptor.site_url or ""

    async def _send(self, **kwargs: Any) -> str:
        return await send_request(settings=self._settings, transport=self._transport, **kwargs)

    async def _digest(self) -> str:
        digest = await get_form_digest(self.site_url, settings=self._settings, transport=self._transport)
        return digest.value

    async def create_list_item(self, new_item: Mapping[str, Any]) -> ListItem:
        if not new_item:
            raise MissingArgumentError("createListItem: Please provide a new item.")
        body = dict(new_item)
        if not body.get(METADATA_KEY):
            body[METADATA_KEY] = {"type": self.descriptor.item_entity_type}

        logger.info("Creating item in list %r", self.title)
        digest = await self._digest()
        text = await self._send(
            method="POST",
            url=items_url(self.site_url, self.id),
            headers={
                "accept": ODATA_VERBOSE,
                "X-RequestDigest": digest,
                "content-Type": ODATA_VERBOSE,
            },
            data=body,
        )
        return _parse_item(parse_verbose(text))

    async def read_list_items(self, number_of_records: int | str | None = None) -> list[ListItem]:
        top = int(number_of_records or 0) or self._settings.default_top
        if top < 1:
            raise ValueError(f"readListItems: number of records must be positive, got {top}.")
        top = min(top, MAX_TOP)

        logger.info("Reading up to %d items from list %r", top, self.title)
        text = await self._send(
            method="GET",
            url=items_url(self.site_url, self.id),
            headers=VERBOSE_HEADERS,
            params={"$top": top},
            data={},
        )
        return [_parse_item(r) for r in _results(parse_verbose(text))]

    async def read_list_item(self, item_id: int | str) -> ListItem:
        if not item_id:
            raise MissingArgumentError("readListItem: Please provide an item id.")

        logger.info("Reading item %s from list %r", item_id, self.title)
        text = await self._send(
            method="GET",
            url=item_url(self.site_url, self.id, item_id),
            headers=VERBOSE_HEADERS,
            data={},
        )
        return _parse_item(parse_verbose(text))

    async def update_list_item(self, item_id: int | str, update_properties: Mapping[str, Any]) -> None:
        if not item_id:
            raise MissingArgumentError("updateListItem: Please provide an item id.")
        if not update_properties:
            raise MissingArgumentError("updateListItem: Please provide update properties.")

        old_item = await self.read_list_item(item_id)
        body = dict(update_properties)
        body[METADATA_KEY] = old_item.metadata_payload()
        digest = await self._digest()

        logger.info("Updating item %s in list %r (etag %s)", item_id, self.title, old_item.etag or "*")
        await self._send(
            method="PATCH",
            url=item_url(self.site_url, self.id, item_id),
            headers={
                "Accept": ODATA_VERBOSE,
                "Content-Type": ODATA_VERBOSE,
                "X-RequestDigest": digest,
                "X-Http-Method": "PATCH",
                "If-Match": old_item.etag or "*",
            },
            data=body,
        )

    async def delete_list_item(self, item_id: int | str) -> None:
        if not item_id:
            raise MissingArgumentError("deleteListItem: Please provide an item id.")

        old_item = await self.read_list_item(item_id)
        digest = await self._digest()

        logger.info("Deleting item %s from list %r (etag %s)", item_id, self.title, old_item.etag or "*")
        await self._send(
            method="DELETE",
            url=item_url(self.site_url, self.id, item_id),
            headers={
                "Accept": ODATA_VERBOSE,
                "Content-Type": ODATA_VERBOSE,
                "X-RequestDigest": digest,
                "X-Http-Method": "DELETE",
                "If-Match": old_item.etag or "*",
            },
            data={},
        )

    async def get_list_fields(self) -> list[ListField]:
        if not self.descriptor.fields_uri:
            raise SharePointResponseError(f"List {self.title!r} has no deferred Fields uri.")

        logger.info("Reading fields of list %r", self.title)
        text = await self._send(
            method="GET",
            url=self.descriptor.fields_uri,
            headers=VERBOSE_HEADERS,
            data={},
        )
        return [_validate(ListField, r) for r in _results(parse_verbose(text))]


class SharePointSite(Mapping[str, SharePointList]):
    """The lists of a connected site, keyed by title."""

    def __init__(self, site_url: str, lists: Mapping[str, SharePointList] | None = None) -> None:
        self.site_url = site_url
        self._lists: dict[str, SharePointList] = dict(lists or {})

    def __getitem__(self, title: str) -> SharePointList:
        return self.get_list(title)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lists)

    def __len__(self) -> int:
        return len(self._lists)

    def __repr__(self) -> str:
        return f"SharePointSite(site_url={self.site_url!r}, lists={self.titles()!r})"

    def titles(self) -> list[str]:
        return list(self._lists)

    def get_list(self, title: str) -> SharePointList:
        try:
            return self._lists[title]
        except KeyError:
            raise ListNotFoundError(title) from None


async def connect(
    site_url: str | None,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SharePointSite:
    """Discover the lists of `site_url` and bind the CRUD operations to each."""

    if not site_url or not site_url.strip():
        raise MissingArgumentError("connect: Please provide a valid Sharepoint Site URL.")
    site_url = normalize_site_url(site_url)
    settings = settings or AppSettings()

    logger.info("Connecting to %s", site_url)
    text = await get_lists(site_url, settings=settings, transport=transport)

    lists: dict[str, SharePointList] = {}
    for payload in _results(parse_verbose(text)):
        descriptor = _validate(ListDescriptor, payload).model_copy(update={"site_url": site_url})
        lists[descriptor.title] = SharePointList(descriptor, settings=settings, transport=transport)

    logger.info("Discovered %d lists on %s", len(lists), site_url)
    return SharePointSite(site_url, lists)
