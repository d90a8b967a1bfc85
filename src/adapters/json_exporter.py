"""JSON export of list items.

Why JSON:
- Interoperability with other tools and pipelines.
- Keeps a snapshot of what was read without touching the site again.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from core.domain.models import ListItem


def export_items_json(*, items: Iterable[ListItem], output_path: Path) -> Path:
    """Export items to UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [item.model_dump(mode="json") for item in items]
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
