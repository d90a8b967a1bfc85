"""Tests for parsing OData verbose payloads into domain models."""

from __future__ import annotations

from core.domain.models import ListDescriptor, ListItem
from tests.conftest import LIST_ID, item_payload, list_payload


def test_list_descriptor_from_payload():
    descriptor = ListDescriptor.model_validate(list_payload(LIST_ID, "CRUD", item_count=4))
    assert descriptor.id == LIST_ID
    assert descriptor.title == "CRUD"
    assert descriptor.item_count == 4
    assert descriptor.fields_uri.endswith("/Fields")
    assert descriptor.site_url is None
    assert "Items" in descriptor.raw


def test_list_item_drops_metadata_and_deferred():
    item = ListItem.from_payload(item_payload(3, "Hello", etag='"7"'))
    assert item.item_id == 3
    assert item.etag == '"7"'
    assert item.fields == {"Id": 3, "ID": 3, "Title": "Hello", "Modified": "2019-06-16T10:00:00Z"}
    assert item.metadata_payload()["etag"] == '"7"'


def test_list_item_keeps_unknown_metadata_keys():
    payload = item_payload(3, "Hello")
    payload["__metadata"]["extra"] = "kept"
    item = ListItem.from_payload(payload)
    assert item.metadata_payload()["extra"] == "kept"


def test_list_item_without_metadata():
    item = ListItem.from_payload({"Title": "bare"})
    assert item.item_id is None
    assert item.etag is None
    assert item.metadata_payload() == {}
