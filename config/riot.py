"""
Riot item data vocabularies.

Fixed tables used to turn Data Dragon item records (ja_JP locale)
into search tags, stats, and exclusion decisions.
"""

# =============================================================================
# MAPS
# =============================================================================

SUMMONERS_RIFT_MAP_ID = 11
ARAM_MAP_ID = 12

# Only these maps decide availability; other map flags are ignored
RECOGNIZED_MAP_IDS = (SUMMONERS_RIFT_MAP_ID, ARAM_MAP_ID)


# =============================================================================
# EXCLUSION RULES
# =============================================================================

REASON_NO_MAP = "not available on any map"
REASON_CHAMPION_EXCLUSIVE = "champion-exclusive item"
REASON_NOT_OBTAINABLE = "cannot be bought or built"

# Reason stored when an admin excludes an item without typing one
DEFAULT_MANUAL_EXCLUSION_REASON = "手動除外"


# =============================================================================
# TAGS
# =============================================================================

# Data Dragon tag token -> Japanese search tag
TAGS_TRANSLATE = {
    "AbilityHaste": "スキルヘイスト",
    "Active": "発動効果あり",
    "Armor": "物理防御",
    "ArmorPenetration": "物理防御貫通",
    "AttackSpeed": "攻撃速度",
    "Aura": "周囲効果",
    "Boots": "移動速度",
    "Consumable": "消費アイテム",
    "CooldownReduction": "スキルヘイスト",
    "CriticalStrike": "クリティカル",
    "Damage": "攻撃力",
    "GoldPer": "獲得ゴールド",
    "Health": "体力",
    "HealthRegen": "体力回復効果",
    "Jungle": "ジャングル用アイテム",
    "Lane": "初期購入アイテム",
    "LifeSteal": "ライフスティール",
    "MagicPenetration": "魔法防御貫通",
    "MagicResist": "魔法防御",
    "Mana": "マナ",
    "ManaRegen": "マナ回復効果",
    "NonbootsMovement": "移動速度",
    "OnHit": "通常攻撃時効果",
    "Slow": "スロウ効果",
    "SpellBlock": "魔法防御",
    "SpellDamage": "魔力",
    "SpellVamp": "オムニヴァンプ",
    "Stealth": "ステルス",
    "Tenacity": "行動妨害耐性",
    "Trinket": "トリンケット",
    "Vision": "視界",
}

# Passive text fragment -> tag added when the fragment appears
PASSIVE_TEXT_TAGS = (
    ("負傷", "負傷"),
    ("シールド", "シールド"),
    ("アルティメット", "アルティメットスキル"),
    ("通常攻撃時効果", "通常攻撃時効果"),
)

ACTIVE_TAG = "発動効果あり"


# =============================================================================
# STATS
# =============================================================================

STATS_KEYWORD = (
    "体力",
    "マナ",
    "攻撃力",
    "魔力",
    "物理防御",
    "魔法防御",
    "移動速度",
    "攻撃速度",
    "スキルヘイスト",
    "クリティカル率",
    "クリティカルダメージ",
    "脅威",
    "物理防御貫通",
    "魔法防御貫通",
    "ライフ スティール",
    "基本体力自動回復",
    "基本マナ自動回復",
    "回復効果およびシールド量",
    "行動妨害耐性",
    "オムニヴァンプ",
)

# Keyword -> qualifier that means the keyword is part of a longer stat name
STAT_COMPOUND_QUALIFIERS = {
    "体力": "自動回復",
    "マナ": "自動回復",
    "物理防御": "貫通",
    "魔法防御": "貫通",
}

HEAL_SHIELD_STAT = "回復効果&シールド量"

STAT_LABEL_RENAMES = {
    "回復効果およびシールド量": HEAL_SHIELD_STAT,
}


# =============================================================================
# DESCRIPTION MARKUP
# =============================================================================

# Active name used by Riot as a generic label rather than a real ability name
GENERIC_ACTIVE_LABEL = "発動効果"

# A passive name opening with this quote narrates another item's passive
QUOTED_NAME_PREFIX = "「"

# Markers removed from ability text
ABILITY_STRIP_TAGS = ("passive", "active", "maintext", "attention", "stats")
