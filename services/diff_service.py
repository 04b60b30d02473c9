"""
Diff between the items a sync would store and the stored items.
"""

from typing import Any, Iterable, Mapping, Sequence
import structlog

from models.sync import DiffStatus, DiffEntry, DIFF_STATUS_ORDER

logger = structlog.get_logger(__name__)

DEFAULT_COMPARE_FIELDS = ("name_ja", "price_total")


def _as_dict(row: Any) -> dict:
    if isinstance(row, Mapping):
        return dict(row)
    return row.model_dump(mode="json")


def _by_riot_id(rows: Iterable[Any]) -> dict[str, dict]:
    keyed: dict[str, dict] = {}
    for row in rows:
        row = _as_dict(row)
        keyed[row["riot_id"]] = row
    return keyed


def compute_diff(
    fresh_items: Iterable[Any],
    previous_items: Iterable[Any],
    compare_fields: Sequence[str] = DEFAULT_COMPARE_FIELDS
) -> list[DiffEntry]:
    """
    Compare fresh rows against previously stored rows by riot_id.

    Each fresh row is new (no stored row), updated (a compared field
    differs) or unchanged. Stored rows with no fresh counterpart are
    deleted. Every riot_id of either side appears exactly once.

    Args:
        fresh_items: Rows a sync would store (dicts or models)
        previous_items: Rows currently stored
        compare_fields: Fields that decide updated vs unchanged

    Returns:
        Entries ordered new, updated, deleted, unchanged; input order
        is kept within a status
    """
    # A repeated riot_id keeps its first position and its last row
    fresh = _by_riot_id(fresh_items)
    previous = _by_riot_id(previous_items)

    entries: list[DiffEntry] = []

    for riot_id, row in fresh.items():
        stored = previous.pop(riot_id, None)

        if stored is None:
            entries.append(DiffEntry(riot_id=riot_id, status=DiffStatus.NEW, item=row))
            continue

        changed = [field for field in compare_fields if row.get(field) != stored.get(field)]
        entries.append(
            DiffEntry(
                riot_id=riot_id,
                status=DiffStatus.UPDATED if changed else DiffStatus.UNCHANGED,
                item=row,
                previous=stored,
                changed_fields=changed,
            )
        )

    for riot_id, stored in previous.items():
        entries.append(
            DiffEntry(riot_id=riot_id, status=DiffStatus.DELETED, item=stored, previous=stored)
        )

    # sorted() is stable, so input order survives within a status
    entries = sorted(entries, key=lambda entry: DIFF_STATUS_ORDER[entry.status])

    logger.debug("diff_computed", **summarize_diff(entries))

    return entries


def summarize_diff(entries: Iterable[DiffEntry]) -> dict[str, int]:
    """Number of entries per status."""
    counts = {status.value: 0 for status in DiffStatus}
    for entry in entries:
        counts[entry.status.value] += 1
    return counts
