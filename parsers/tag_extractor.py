"""
Search tag extraction for Data Dragon items.

Tags come from three places: the record's own tag tokens (translated
to Japanese), tag words that appear in the description, and the
abilities/stats already extracted from it.
"""

from typing import Iterable, Union
import structlog

from config.riot import (
    TAGS_TRANSLATE,
    PASSIVE_TEXT_TAGS,
    ACTIVE_TAG,
    HEAL_SHIELD_STAT,
)
from models.item import AbilityType, ItemAbility, RiotItemRecord

logger = structlog.get_logger(__name__)


def _append_unique(tags: list[str], tag: str) -> None:
    if tag and tag not in tags:
        tags.append(tag)


def _tags_in_text(text: str) -> list[str]:
    """Known tag words that occur in text, in table order."""
    if not text:
        return []
    return [tag for tag in TAGS_TRANSLATE.values() if tag in text]


def translate_tags(tokens: Iterable[str], riot_id: str = "", name: str = "") -> list[str]:
    """
    Translate Data Dragon tag tokens.

    Tokens without a translation are logged and skipped, never passed
    through under their English name.
    """
    translated: list[str] = []
    for token in tokens:
        tag = TAGS_TRANSLATE.get(token)
        if tag is None:
            logger.debug("unmapped_tag", tag=token, riot_id=riot_id, name=name)
            continue
        _append_unique(translated, tag)
    return translated


def extract_tags_from_raw_data(record: Union[RiotItemRecord, dict]) -> list[str]:
    """
    Derive search tags from a raw record.

    1. Translate the record's tag tokens.
    2. Add every known tag word found in the description, since the
       description sometimes names a category the tag list leaves out.

    Args:
        record: Data Dragon record (model or raw dict)

    Returns:
        Unique tags in insertion order
    """
    if isinstance(record, dict):
        record = RiotItemRecord.model_validate(record)

    tags = translate_tags(record.tags, riot_id=record.id, name=record.name)

    for tag in _tags_in_text(record.description):
        _append_unique(tags, tag)

    if tags:
        logger.debug("tags_extracted", riot_id=record.id, count=len(tags))

    return tags


def translate_and_enhance_tags(
    tags: Iterable[str],
    riot_id: str,
    abilities: list[ItemAbility],
    stats: dict[str, str],
    additional_tags: Iterable[str] = (),
    description: str = ""
) -> list[str]:
    """
    Build the stored search tags of an item.

    Translated tag tokens, then tags implied by passive text, the
    active-effect tag when the item has an active, the heal/shield
    tag when that stat is present, then tags registered by hand for
    this item.

    Args:
        tags: Data Dragon tag tokens
        riot_id: Item id (for logging)
        abilities: Abilities extracted from the description
        stats: Stats extracted from the description
        additional_tags: Hand-registered tags for the item
        description: Raw description; known tag words in it are added

    Returns:
        Unique tags in insertion order
    """
    result = translate_tags(tags, riot_id=riot_id)

    for tag in _tags_in_text(description):
        _append_unique(result, tag)

    passive_text = " ".join(
        ability.description for ability in abilities
        if ability.type is AbilityType.PASSIVE
    )
    for fragment, tag in PASSIVE_TEXT_TAGS:
        if fragment in passive_text:
            _append_unique(result, tag)

    if any(ability.type is AbilityType.ACTIVE for ability in abilities):
        _append_unique(result, ACTIVE_TAG)

    if HEAL_SHIELD_STAT in stats:
        _append_unique(result, HEAL_SHIELD_STAT)

    for tag in additional_tags:
        _append_unique(result, tag)

    return result
