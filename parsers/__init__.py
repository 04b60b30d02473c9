"""
Description and tag parsers for Data Dragon item records.
"""

from parsers.description_parser import (
    tokenize,
    extract_abilities,
    extract_stats_from_description,
)
from parsers.tag_extractor import (
    translate_tags,
    extract_tags_from_raw_data,
    translate_and_enhance_tags,
)

__all__ = [
    "tokenize",
    "extract_abilities",
    "extract_stats_from_description",
    "translate_tags",
    "extract_tags_from_raw_data",
    "translate_and_enhance_tags",
]
