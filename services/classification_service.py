"""
Item classification.

Every item fetched for a patch lands in exactly one category:

    available       no manual setting, the exclusion rules accept it
    manualSettings  an admin setting exists (it always wins)
    autoExcluded    no manual setting, an exclusion rule rejects it

ClassificationBoard holds the result in memory so an admin can move
items between categories before committing.
"""

from typing import Iterable, Mapping, Optional, Union
import structlog

from config.riot import (
    RECOGNIZED_MAP_IDS,
    REASON_NO_MAP,
    REASON_CHAMPION_EXCLUSIVE,
    REASON_NOT_OBTAINABLE,
    DEFAULT_MANUAL_EXCLUSION_REASON,
)
from models.item import RiotItemRecord
from models.manual_setting import ManualSetting
from models.classification import (
    ItemCategory,
    AvailableState,
    ManualSettingState,
    AutoExcludedState,
    ItemState,
    ClassifiedItem,
)
from exceptions import ItemNotFoundError, InvalidCategoryTransitionError
from services.transform_service import image_path_for

logger = structlog.get_logger(__name__)


# ===================
# EXCLUSION RULES
# ===================

def _is_on_recognized_map(record: RiotItemRecord) -> bool:
    return any(record.maps.get(str(map_id)) is True for map_id in RECOGNIZED_MAP_IDS)


def evaluate_exclusion_rule(record: RiotItemRecord) -> Optional[str]:
    """
    Apply the automatic exclusion rules in order; first match wins.

    1. Not enabled on Summoner's Rift or ARAM
    2. Restricted to one champion
    3. Not sold in the store and not craftable (no special recipe,
       no component items)

    Returns:
        Reason of the matching rule, None when the item is eligible
    """
    if not _is_on_recognized_map(record):
        return REASON_NO_MAP

    if record.required_champion:
        return REASON_CHAMPION_EXCLUSIVE

    if not record.is_purchasable and not record.special_recipe and not record.build_from:
        return REASON_NOT_OBTAINABLE

    return None


def _setting_fields(setting: Union[ManualSetting, Mapping]) -> tuple[bool, Optional[str]]:
    if isinstance(setting, Mapping):
        return bool(setting["is_available"]), setting.get("reason")
    return setting.is_available, setting.reason


# ===================
# BOARD
# ===================

class ClassificationBoard:
    """
    Classified items of one patch, keyed by riot_id.

    Transitions replace the item's state; they never touch storage.
    """

    def __init__(self, version: str, items: Iterable[ClassifiedItem] = ()):
        self.version = version
        self._items: dict[str, ClassifiedItem] = {item.riot_id: item for item in items}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, riot_id: str) -> bool:
        return riot_id in self._items

    def __iter__(self):
        return iter(self._items.values())

    def get(self, riot_id: str) -> ClassifiedItem:
        """
        Raises:
            ItemNotFoundError: If the item is not part of this patch
        """
        try:
            return self._items[riot_id]
        except KeyError:
            raise ItemNotFoundError(riot_id)

    def _set_state(self, riot_id: str, state: ItemState) -> ClassifiedItem:
        item = self._items[riot_id].with_state(state)
        self._items[riot_id] = item
        logger.debug(
            "item_category_changed",
            riot_id=riot_id,
            category=item.category.value,
            reason=item.reason
        )
        return item

    # ===================
    # TRANSITIONS
    # ===================

    def exclude_item(self, riot_id: str, reason: Optional[str] = None) -> ClassifiedItem:
        """Available -> manual setting disabled."""
        item = self.get(riot_id)
        if item.category is not ItemCategory.AVAILABLE:
            raise InvalidCategoryTransitionError(riot_id, item.category.value, "exclude")

        return self._set_state(
            riot_id,
            ManualSettingState(is_enabled=False, reason=reason or DEFAULT_MANUAL_EXCLUSION_REASON)
        )

    def enable_item(self, riot_id: str) -> ClassifiedItem:
        """Auto-excluded -> manual setting enabled."""
        item = self.get(riot_id)
        if item.category is not ItemCategory.AUTO_EXCLUDED:
            raise InvalidCategoryTransitionError(riot_id, item.category.value, "enable")

        return self._set_state(riot_id, ManualSettingState(is_enabled=True, reason=None))

    def _restore_automatic(self, riot_id: str) -> ClassifiedItem:
        rule_reason = evaluate_exclusion_rule(self._items[riot_id].raw)
        if rule_reason:
            return self._set_state(riot_id, AutoExcludedState(reason=rule_reason))
        return self._set_state(riot_id, AvailableState())

    def remove_setting(self, riot_id: str) -> ClassifiedItem:
        """
        Manual setting -> back to the automatic result.

        The rules are evaluated again: a matching rule sends the item to
        autoExcluded with that rule's reason, otherwise it is available.
        """
        item = self.get(riot_id)
        if item.category is not ItemCategory.MANUAL_SETTINGS:
            raise InvalidCategoryTransitionError(riot_id, item.category.value, "remove setting of")

        return self._restore_automatic(riot_id)

    def change_reason(self, riot_id: str, reason: Optional[str]) -> ClassifiedItem:
        """Edit the reason text without changing category."""
        item = self.get(riot_id)
        state = item.state

        if isinstance(state, ManualSettingState):
            return self._set_state(riot_id, ManualSettingState(is_enabled=state.is_enabled, reason=reason))
        if isinstance(state, AutoExcludedState):
            return self._set_state(riot_id, AutoExcludedState(reason=reason))

        # Available items carry no reason; the edit is a no-op
        return item

    def replace_manual_settings(self, settings: Iterable[Union[ManualSetting, Mapping]]) -> None:
        """
        Re-derive every item's state from a complete list of manual
        settings, as if the board had been classified with it.
        """
        by_id = {}
        for setting in settings:
            riot_id = setting["riot_id"] if isinstance(setting, Mapping) else setting.riot_id
            by_id[riot_id] = _setting_fields(setting)

        for item in list(self._items.values()):
            if item.riot_id in by_id:
                is_enabled, reason = by_id[item.riot_id]
                self._set_state(item.riot_id, ManualSettingState(is_enabled=is_enabled, reason=reason))
                continue

            self._restore_automatic(item.riot_id)

        unknown = set(by_id) - set(self._items)
        if unknown:
            logger.warning("manual_settings_for_unknown_items", riot_ids=sorted(unknown))

    # ===================
    # ACCESSORS
    # ===================

    def _in_category(self, category: ItemCategory) -> list[ClassifiedItem]:
        return [item for item in self._items.values() if item.category is category]

    def available_items(self) -> list[ClassifiedItem]:
        return self._in_category(ItemCategory.AVAILABLE)

    def manual_setting_items(self) -> list[ClassifiedItem]:
        return self._in_category(ItemCategory.MANUAL_SETTINGS)

    def auto_excluded_items(self) -> list[ClassifiedItem]:
        """Auto-excluded items, new ones first."""
        return sorted(self._in_category(ItemCategory.AUTO_EXCLUDED), key=lambda item: not item.is_new)

    def storage_ids(self) -> set[str]:
        """Items that belong in the items table: available or manually enabled."""
        return {item.riot_id for item in self._items.values() if item.is_stored}

    def items_for_storage(self) -> list[ClassifiedItem]:
        return [item for item in self._items.values() if item.is_stored]

    def manual_settings_payload(self) -> list[dict]:
        """Rows for item_manual_settings, one per manually set item."""
        return [
            {
                "riot_id": item.riot_id,
                "is_available": item.is_manually_available,
                "reason": item.reason,
            }
            for item in self.manual_setting_items()
        ]

    def counts(self) -> dict[str, int]:
        counts = {category.value: 0 for category in ItemCategory}
        for item in self._items.values():
            counts[item.category.value] += 1
        return counts


# ===================
# CLASSIFY
# ===================

def classify_items(
    records: Mapping[str, RiotItemRecord],
    manual_settings: Mapping[str, Union[ManualSetting, Mapping]],
    stored_ids: Iterable[str],
    version: str = ""
) -> ClassificationBoard:
    """
    Classify every fetched item.

    Args:
        records: Fetched records keyed by riot_id
        manual_settings: Manual settings keyed by riot_id
        stored_ids: riot_ids currently in the items table
        version: Patch the records belong to

    Returns:
        ClassificationBoard with one entry per record
    """
    stored = set(stored_ids)
    items = []

    for riot_id, record in records.items():
        setting = manual_settings.get(riot_id)

        if setting is not None:
            is_enabled, reason = _setting_fields(setting)
            state: ItemState = ManualSettingState(is_enabled=is_enabled, reason=reason)
        else:
            rule_reason = evaluate_exclusion_rule(record)
            state = AutoExcludedState(reason=rule_reason) if rule_reason else AvailableState()

        items.append(
            ClassifiedItem(
                riot_id=riot_id,
                name=record.name,
                image_path=image_path_for(riot_id),
                is_new=setting is None and riot_id not in stored,
                is_non_purchasable=not record.is_purchasable,
                maps=tuple(record.map_ids),
                raw=record,
                state=state,
            )
        )

    board = ClassificationBoard(version, items)

    logger.info("items_classified", version=version, **board.counts())

    return board
