"""
Item description parser.

Data Dragon item descriptions are a small markup language:

    <mainText><stats>体力<attention>300</attention><br>...</stats><br>
    <passive>名前</passive>効果の説明...<active>名前</active>...</mainText>

The description is split into tag and text tokens once, and the
extractors below walk the token stream. Nothing here raises on bad
input; a missing marker just means the field is absent.
"""

import re
from dataclasses import dataclass
from typing import Optional
import structlog

from config.riot import (
    STATS_KEYWORD,
    STAT_COMPOUND_QUALIFIERS,
    STAT_LABEL_RENAMES,
    GENERIC_ACTIVE_LABEL,
    QUOTED_NAME_PREFIX,
    ABILITY_STRIP_TAGS,
)
from models.item import AbilityType, ItemAbility

logger = structlog.get_logger(__name__)

_TAG_RE = re.compile(r"<\s*(/)?\s*([A-Za-z][\w-]*)[^<>]*?(/)?\s*>")

# Tags that never have a closing pair
VOID_TAGS = frozenset({"br", "hr"})


# ===================
# TOKENS
# ===================

@dataclass(frozen=True)
class Token:
    """
    One piece of a description.

    kind is "text", "open", "close" or "void". name is the lowercased
    tag name (empty for text); raw is the exact source text.
    """
    kind: str
    raw: str
    name: str = ""

    @property
    def is_text(self) -> bool:
        return self.kind == "text"

    def is_open(self, name: str) -> bool:
        return self.kind == "open" and self.name == name

    def is_close(self, name: str) -> bool:
        return self.kind == "close" and self.name == name


def tokenize(description: Optional[str]) -> list[Token]:
    """Split a description into text and tag tokens."""
    if not description:
        return []

    tokens: list[Token] = []
    position = 0

    for match in _TAG_RE.finditer(description):
        if match.start() > position:
            tokens.append(Token("text", description[position:match.start()]))

        closing, name, self_closing = match.group(1), match.group(2).lower(), match.group(3)
        if name in VOID_TAGS or self_closing:
            kind = "void"
        elif closing:
            kind = "close"
        else:
            kind = "open"
        tokens.append(Token(kind, match.group(0), name))
        position = match.end()

    if position < len(description):
        tokens.append(Token("text", description[position:]))

    return tokens


# ===================
# ABILITIES
# ===================

def _is_quoted_passive(tokens: list[Token], index: int) -> bool:
    """
    A passive whose name opens with a quote narrates another item's
    passive inside prose ("<passive>「...」</passive>"); it is not an
    ability of this item.
    """
    following = tokens[index + 1] if index + 1 < len(tokens) else None
    return bool(following and following.is_text and following.raw.startswith(QUOTED_NAME_PREFIX))


def _is_segment_boundary(tokens: list[Token], index: int) -> bool:
    """Where an ability segment stops: next real passive, next active, or end of main text."""
    token = tokens[index]
    if token.is_open("passive"):
        return not _is_quoted_passive(tokens, index)
    return token.is_open("active") or token.is_close("maintext")


def _segment_name(segment: list[Token], kind: str) -> str:
    """Text between the opening tag and its closing tag."""
    parts = []
    for token in segment[1:]:
        if token.is_close(kind):
            return "".join(parts).strip()
        if token.is_text:
            parts.append(token.raw)
    # No closing tag: not a well-formed ability
    return ""


def _render_segment(segment: list[Token]) -> str:
    """Segment text with ability markers removed and <br> as newlines."""
    parts = []
    for token in segment:
        if token.is_text:
            parts.append(token.raw)
        elif token.name == "br":
            parts.append("\n")
        elif token.name in ABILITY_STRIP_TAGS:
            continue
        else:
            parts.append(token.raw)
    return "".join(parts).strip()


def _iter_segments(tokens: list[Token], kind: str):
    """Yield (name, token slice) for every segment opened by <kind>."""
    for start, token in enumerate(tokens):
        if not token.is_open(kind):
            continue
        if kind == "passive" and _is_quoted_passive(tokens, start):
            continue

        end = start + 1
        while end < len(tokens) and not _is_segment_boundary(tokens, end):
            end += 1

        segment = tokens[start:end]
        yield _segment_name(segment, kind), segment


def extract_abilities(description: Optional[str]) -> list[ItemAbility]:
    """
    Extract passive and active abilities from a description.

    Rules:
        - passives whose name starts with a quote are prose, skipped
        - actives named exactly like the generic label are skipped
        - segments with an empty name are dropped

    Args:
        description: Raw Data Dragon description markup

    Returns:
        Passives in source order, then actives in source order
    """
    tokens = tokenize(description)
    abilities: list[ItemAbility] = []

    for kind, ability_type in (("passive", AbilityType.PASSIVE), ("active", AbilityType.ACTIVE)):
        for name, segment in _iter_segments(tokens, kind):
            if not name:
                continue
            if ability_type is AbilityType.ACTIVE and name == GENERIC_ACTIVE_LABEL:
                continue
            abilities.append(
                ItemAbility(
                    type=ability_type,
                    name=name,
                    description=_render_segment(segment),
                )
            )

    return abilities


# ===================
# STATS
# ===================

def _attention_value(tokens: list[Token], index: int) -> Optional[str]:
    """Value of an <attention>VALUE</attention> starting at index, if any."""
    if index >= len(tokens) or not tokens[index].is_open("attention"):
        return None

    parts = []
    for token in tokens[index + 1:]:
        if token.is_close("attention"):
            value = "".join(parts).strip()
            return value or None
        if token.is_text:
            parts.append(token.raw)
    return None


def _find_stat(tokens: list[Token], keyword: str) -> Optional[str]:
    """First value that directly follows keyword in the description."""
    qualifier = STAT_COMPOUND_QUALIFIERS.get(keyword)

    for index, token in enumerate(tokens):
        if not token.is_text:
            continue

        text = token.raw
        start = text.find(keyword)
        while start != -1:
            rest = text[start + len(keyword):]
            # "マナ自動回復" and "物理防御貫通" are different stats
            if qualifier and rest.startswith(qualifier):
                start = text.find(keyword, start + 1)
                continue
            if not rest.strip():
                value = _attention_value(tokens, index + 1)
                if value is not None:
                    return value
            start = text.find(keyword, start + 1)

    return None


def extract_stats_from_description(description: Optional[str]) -> dict[str, str]:
    """
    Extract stat values from a description.

    For each known stat keyword the value is the <attention> block right
    after it. Keywords that are only part of a longer stat name
    (マナ in マナ自動回復, 物理防御 in 物理防御貫通) do not match.

    Args:
        description: Raw Data Dragon description markup

    Returns:
        Mapping of stat label to value text, in keyword order

    Example:
        >>> extract_stats_from_description("<stats>魔力<attention>80</attention></stats>")
        {'魔力': '80'}
    """
    tokens = tokenize(description)
    stats: dict[str, str] = {}

    for keyword in STATS_KEYWORD:
        value = _find_stat(tokens, keyword)
        if value is None:
            continue
        stats[STAT_LABEL_RENAMES.get(keyword, keyword)] = value

    if stats:
        logger.debug("stats_extracted", count=len(stats))

    return stats

