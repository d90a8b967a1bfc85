"""Contract for the operations bound to a SharePoint list.

Why a Protocol:
- A structural contract (duck typing) without rigid inheritance.
- Lets callers (the CLI, scripts) accept any object exposing the operations,
  so they can be exercised against fakes without a SharePoint site.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from core.domain.models import ListField, ListItem


@runtime_checkable
class ListOperations(Protocol):
    """CRUD operations on a single list.

    Design rules:
    - Every operation is asynchronous because it performs HTTP I/O.
    - Writes are signed with a fresh form digest; update and delete read the
      item first so the write carries its current etag.
    """

    async def create_list_item(self, new_item: Mapping[str, Any]) -> ListItem:
        ...

    async def read_list_items(self, number_of_records: int | str | None = None) -> list[ListItem]:
        ...

    async def read_list_item(self, item_id: int | str) -> ListItem:
        ...

    async def update_list_item(self, item_id: int | str, update_properties: Mapping[str, Any]) -> None:
        ...

    async def delete_list_item(self, item_id: int | str) -> None:
        ...

    async def get_list_fields(self) -> list[ListField]:
        ...
