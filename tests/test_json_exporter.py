from __future__ import annotations

import json

from adapters.json_exporter import export_items_json
from core.domain.models import ListItem
from tests.conftest import item_payload


def test_export_items_json(tmp_path):
    items = [ListItem.from_payload(item_payload(1, "Ä item")), ListItem.from_payload(item_payload(2, "b"))]
    out = export_items_json(items=items, output_path=tmp_path / "nested" / "items.json")

    text = out.read_text(encoding="utf-8")
    assert "Ä item" in text
    data = json.loads(text)
    assert [d["item_id"] for d in data] == [1, 2]
    assert data[0]["metadata"]["etag"] == '"1"'
