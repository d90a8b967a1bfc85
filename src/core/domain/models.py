"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation of the OData verbose payloads at the edge, with the
  field documentation kept next to the data.
- The models describe *what* a list or an item is, not *how* it is fetched.

Notes:
- SharePoint's verbose dialect wraps every entity in a `__metadata` object and
  represents navigation properties as `{"__deferred": {"uri": ...}}`.
- Field names follow SharePoint's PascalCase through aliases.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

METADATA_KEY = "__metadata"


def _is_deferred(value: object) -> bool:
    return isinstance(value, dict) and "__deferred" in value


class ItemMetadata(BaseModel):
    """The `__metadata` block of an entity; carries the concurrency token."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(
        default=None,
        description="Server-side entity identifier (usually the entity URI).",
    )
    uri: str | None = Field(
        default=None,
        description="Canonical REST URI of the entity.",
    )
    etag: str | None = Field(
        default=None,
        description="Opaque version tag; sent back as If-Match on writes.",
    )
    type: str | None = Field(
        default=None,
        description="Entity type name, e.g. 'SP.Data.CRUDListItem'.",
    )


class ListDescriptor(BaseModel):
    """A list discovered on a site.

    Created during `connect`, held in memory for the session, never persisted.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(
        ...,
        alias="Id",
        min_length=1,
        description="List GUID.",
    )
    title: str = Field(
        ...,
        alias="Title",
        min_length=1,
        description="Display title; the key lists are looked up by.",
    )
    item_entity_type: str | None = Field(
        default=None,
        alias="ListItemEntityTypeFullName",
        description="Entity type new items must declare in `__metadata.type`.",
    )
    fields_uri: str | None = Field(
        default=None,
        description="URI of the list's field collection (`Fields.__deferred.uri`).",
    )
    item_count: int | None = Field(
        default=None,
        alias="ItemCount",
        description="Number of items reported by the server at discovery time.",
    )
    description: str | None = Field(
        default=None,
        alias="Description",
    )
    site_url: str | None = Field(
        default=None,
        description="Owning site URL, set by `connect`.",
    )
    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="The untouched discovery payload for this list.",
    )

    @model_validator(mode="before")
    @classmethod
    def _extract_deferred(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "raw" in data:
            return data
        out = dict(data)
        fields = data.get("Fields")
        if _is_deferred(fields):
            out["fields_uri"] = fields["__deferred"].get("uri")
        out["raw"] = dict(data)
        return out


class ListItem(BaseModel):
    """A transient client-side copy of a list item.

    The item itself lives on the server; this copy is only valid for the
    operation that fetched it.
    """

    model_config = ConfigDict(populate_by_name=True)

    item_id: int | None = Field(
        default=None,
        description="Server-assigned numeric id (`Id`/`ID`).",
    )
    metadata: ItemMetadata = Field(
        default_factory=ItemMetadata,
        description="The `__metadata` block (etag, entity type, uri).",
    )
    fields: dict[str, Any] = Field(
        default_factory=dict,
        description="Every plain column value; deferred navigation properties are dropped.",
    )

    @property
    def etag(self) -> str | None:
        return self.metadata.etag

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ListItem":
        item_id = payload.get("Id", payload.get("ID"))
        fields = {
            key: value
            for key, value in payload.items()
            if key != METADATA_KEY and not _is_deferred(value)
        }
        return cls(
            item_id=item_id if isinstance(item_id, int) else None,
            metadata=ItemMetadata.model_validate(payload.get(METADATA_KEY) or {}),
            fields=fields,
        )

    def metadata_payload(self) -> dict[str, Any]:
        """The `__metadata` block as the server sent it."""

        return self.metadata.model_dump(exclude_none=True)


class ListField(BaseModel):
    """A column definition of a list."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = Field(default=None, alias="Id")
    title: str = Field(..., alias="Title")
    internal_name: str | None = Field(default=None, alias="InternalName")
    type_as_string: str | None = Field(default=None, alias="TypeAsString")
    required: bool = Field(default=False, alias="Required")
    read_only: bool = Field(default=False, alias="ReadOnlyField")
    hidden: bool = Field(default=False, alias="Hidden")


class FormDigest(BaseModel):
    """Request digest from `/_api/contextinfo`; signs every write."""

    value: str = Field(
        ...,
        min_length=1,
        description="Value for the `X-RequestDigest` header.",
    )
    timeout_seconds: int | None = Field(
        default=None,
        description="Validity window announced by the server.",
    )
