"""
Transform a Data Dragon record into an items table row.

Pure: the caller loads additional tags and roles and passes them in,
so the same record and metadata always produce the same row.
"""

from typing import Iterable, Optional
import structlog

from models.item import RiotItemRecord, ItemUpsert
from parsers import (
    extract_abilities,
    extract_stats_from_description,
    translate_and_enhance_tags,
)

logger = structlog.get_logger(__name__)


def image_path_for(riot_id: str) -> str:
    """Storage key of an item icon."""
    return f"{riot_id}.webp"


def transform_riot_item(
    riot_id: str,
    record: RiotItemRecord,
    additional_tags: Iterable[str] = (),
    roles: Optional[Iterable[str]] = None
) -> ItemUpsert:
    """
    Build the stored row for one item.

    Args:
        riot_id: Data Dragon item id
        record: Raw record for the patch
        additional_tags: Hand-registered search tags for the item
        roles: Roles the item is classified under

    Returns:
        ItemUpsert ready for upsert keyed by riot_id
    """
    abilities = extract_abilities(record.description)
    stats = extract_stats_from_description(record.description)

    search_tags = translate_and_enhance_tags(
        record.tags,
        riot_id,
        abilities,
        stats,
        additional_tags=additional_tags,
        description=record.description,
    )

    role_categories = list(dict.fromkeys(roles or []))

    # Store items and anything in a build path can be obtained
    is_available = (
        record.is_purchasable
        or bool(record.build_from)
        or bool(record.build_into)
    )

    item = ItemUpsert(
        riot_id=riot_id,
        name_ja=record.name,
        is_available=is_available,
        abilities=abilities,
        plaintext_ja=record.plaintext or "",
        price_total=record.gold.total,
        price_sell=record.gold.sell,
        image_path=image_path_for(riot_id),
        search_tags=search_tags,
        role_categories=role_categories or None,
        stats=stats,
        build_from=list(record.build_from),
        build_into=list(record.build_into),
        maps=record.map_ids,
    )

    logger.debug(
        "item_transformed",
        riot_id=riot_id,
        abilities=len(abilities),
        stats=len(stats),
        tags=len(search_tags)
    )

    return item
