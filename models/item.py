"""
Item schemas: raw Data Dragon records and stored items.

RiotItemRecord mirrors Data Dragon's camelCase JSON through aliases;
everything past it (stored rows, API responses) is snake_case. The
aliases are the only place the two naming schemes meet.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin


class AbilityType(str, Enum):
    """Kind of item ability."""
    PASSIVE = "passive"
    ACTIVE = "active"


class ItemAbility(BaseSchema):
    """Named passive or active effect pulled from a description."""

    type: AbilityType
    name: str
    description: str = ""


# ===================
# DATA DRAGON RECORDS
# ===================

class RiotGold(BaseModel):
    """Price block of a Data Dragon item."""

    model_config = ConfigDict(extra="allow")

    base: int = 0
    total: int = 0
    sell: int = 0
    purchasable: bool = True


class RiotItemRecord(BaseModel):
    """
    One item as published by Data Dragon for a patch.

    Missing or null fields fall back to empty values so a malformed
    record never blocks a sync. Unknown fields are kept for the raw
    data view.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = ""
    name: str = ""
    description: str = ""
    plaintext: str = ""
    gold: RiotGold = Field(default_factory=RiotGold)
    tags: list[str] = Field(default_factory=list)
    maps: dict[str, bool] = Field(default_factory=dict)
    stats: dict[str, float] = Field(default_factory=dict)
    depth: Optional[int] = None
    in_store: Optional[bool] = Field(None, alias="inStore")
    required_champion: Optional[str] = Field(None, alias="requiredChampion")
    special_recipe: Optional[int] = Field(None, alias="specialRecipe")
    build_from: list[str] = Field(default_factory=list, alias="from")
    build_into: list[str] = Field(default_factory=list, alias="into")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat explicit nulls like missing fields."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @classmethod
    def from_riot(cls, riot_id: str, data: dict) -> "RiotItemRecord":
        """Build a record from one entry of item.json's data mapping."""
        return cls.model_validate({**data, "id": riot_id})

    @property
    def is_purchasable(self) -> bool:
        """Data Dragon omits inStore for store items; only explicit False counts."""
        return self.in_store is not False and self.gold.purchasable is not False

    @property
    def map_ids(self) -> list[int]:
        """Ids of maps the item is enabled on, ascending."""
        ids = []
        for key, enabled in self.maps.items():
            if not enabled:
                continue
            try:
                ids.append(int(key))
            except (TypeError, ValueError):
                continue
        return sorted(ids)

    def to_raw(self) -> dict:
        """Record in Data Dragon's own shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ===================
# STORED ITEMS
# ===================

class ItemUpsert(BaseSchema):
    """
    Row written to the items table.

    Keyed by riot_id; re-upserting the same record leaves one row.
    """

    riot_id: str = Field(..., min_length=1, description="Data Dragon item id")
    name_ja: str = Field(..., description="Display name")
    is_available: bool = True
    abilities: list[ItemAbility] = Field(default_factory=list)
    plaintext_ja: str = ""
    price_total: int = 0
    price_sell: int = 0
    image_path: str = ""
    patch_status: Optional[str] = None
    search_tags: list[str] = Field(default_factory=list)
    role_categories: Optional[list[str]] = None
    popular_champions: Optional[list[str]] = None
    stats: dict[str, str] = Field(default_factory=dict)
    build_from: list[str] = Field(default_factory=list)
    build_into: list[str] = Field(default_factory=list)
    maps: list[int] = Field(default_factory=list)

    def to_row(self) -> dict:
        """
        Row payload for upsert.

        patch_status and popular_champions are curated by hand; they are
        left out when unset so a sync never clears them.
        """
        row = self.model_dump(mode="json")
        for key in ("patch_status", "popular_champions"):
            if row.get(key) is None:
                row.pop(key, None)
        return row


class ItemResponse(BaseSchema, TimestampMixin):
    """Stored item as read back from the database."""

    id: Optional[str] = None
    riot_id: str
    name_ja: str
    is_available: bool = True
    abilities: list[ItemAbility] = Field(default_factory=list)
    plaintext_ja: str = ""
    price_total: int = 0
    price_sell: int = 0
    image_path: str = ""
    patch_status: Optional[str] = None
    search_tags: list[str] = Field(default_factory=list)
    role_categories: Optional[list[str]] = None
    popular_champions: Optional[list[str]] = None
    stats: dict[str, Any] = Field(default_factory=dict)
    build_from: list[str] = Field(default_factory=list)
    build_into: list[str] = Field(default_factory=list)
    maps: list[int] = Field(default_factory=list)
    image_url: Optional[str] = None


class ItemListResponse(BaseSchema):
    """List of stored items."""

    data: list[ItemResponse]
    total: int
