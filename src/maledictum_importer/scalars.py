"""
Field-level parsers for pasted item tables.

Every parser here is total: unrecognised input falls back to a documented
default instead of raising, so a messy paste still imports something plausible.

Keyword-driven parsers are expressed as ordered rule tables of
``(keywords, result)`` pairs evaluated top to bottom by ``match_keywords``;
the first rule with any keyword contained in the lowercased text wins.
"""

from __future__ import annotations

import re

from .models import (
    ALL_HIT_LOCATIONS,
    Availability,
    Characteristic,
    DamageSpec,
    LocationSpec,
    MagazineSpec,
)

KeywordRule = tuple[tuple[str, ...], str]


def match_keywords(text: str | None, rules: list[KeywordRule], default: str) -> str:
    """Return the result of the first rule whose keyword occurs in ``text``.

    Matching is a case-insensitive substring test.

    Args:
        text: Field text to classify.
        rules: Ordered ``(keywords, result)`` rules.
        default: Returned when the text is empty or no rule matches.
    """
    if not text:
        return default
    lower = text.lower().strip()
    for keywords, result in rules:
        if any(keyword in lower for keyword in keywords):
            return result
    return default


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

_INTEGER_PREFIX_RE = re.compile(r"^[+-]?\d+")


def parse_integer(text: str | None) -> int:
    """Read a leading integer, ignoring thousands separators and whitespace.

    A unicode minus sign is accepted. Anything without a leading integer is 0.
    """
    if not text:
        return 0
    cleaned = re.sub(r"[,\s]", "", str(text)).replace("\u2212", "-")
    match = _INTEGER_PREFIX_RE.match(cleaned)
    return int(match.group(0)) if match else 0


def parse_magazine(text: str | None) -> MagazineSpec:
    """Magazine capacity from the digits in ``text``; the weapon starts fully loaded."""
    digits = re.sub(r"[^0-9]", "", text or "")
    if not digits:
        return MagazineSpec(value=0, current=0)
    capacity = int(digits)
    return MagazineSpec(value=capacity, current=capacity)


# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

AVAILABILITY_RULES: list[KeywordRule] = [
    ((tier.value,), tier.value) for tier in Availability
]

MELEE_SPEC_KEYWORDS = ("one-handed", "two-handed", "brawling")

WEAPON_SPEC_RULES: list[KeywordRule] = [
    (("one-handed", "one handed"), "oneHanded"),
    (("two-handed", "two handed"), "twoHanded"),
    (("brawling",), "brawling"),
    (("pistol",), "pistol"),
    (("long gun", "longgun"), "longGun"),
    (("ordnance",), "ordnance"),
    (("engineering",), "engineering"),
    (("thrown",), "thrown"),
]

RANGE_BANDS = ("short", "medium", "long", "extreme")

RANGE_RULES: list[KeywordRule] = [((band,), band) for band in RANGE_BANDS]

ARMOUR_CATEGORY_RULES: list[KeywordRule] = [
    (("flak",), "flak"),
    (("mesh",), "mesh"),
    (("carapace",), "carapace"),
    (("power",), "power"),
    (("shield",), "shield"),
]


def parse_availability(text: str | None) -> Availability:
    """Availability tier by keyword; anything unrecognised is ``common``."""
    return Availability(match_keywords(text, AVAILABILITY_RULES, Availability.COMMON.value))


def parse_weapon_spec(text: str | None, is_melee: bool) -> str:
    """Weapon specialisation key; defaults to ``oneHanded`` (melee) or ``pistol`` (ranged)."""
    default = "oneHanded" if is_melee else "pistol"
    return match_keywords(text, WEAPON_SPEC_RULES, default)


def parse_range(text: str | None) -> str:
    """Range band key, or an empty string when no band is named."""
    return match_keywords(text, RANGE_RULES, "")


def parse_armour_category(text: str | None) -> str:
    return match_keywords(text, ARMOUR_CATEGORY_RULES, "mundane")


# ---------------------------------------------------------------------------
# Damage
# ---------------------------------------------------------------------------

_CHARACTERISTIC_ABBREVIATIONS: list[tuple[Characteristic, str]] = [
    (Characteristic.STRENGTH, r"str(?:ength)?"),
    (Characteristic.AGILITY, r"ag(?:ility|i)?"),
    (Characteristic.INTELLECT, r"int(?:ellect)?"),
    (Characteristic.WILLPOWER, r"wil(?:lpower|l)?"),
    (Characteristic.FELLOWSHIP, r"fel(?:lowship)?"),
    (Characteristic.PERCEPTION, r"per(?:ception)?"),
    (Characteristic.TOUGHNESS, r"t(?:oughness|gh)?"),
]

# "3+str" forms are tried before "str+3" forms; within each, characteristic order above.
DAMAGE_PATTERNS: list[tuple[re.Pattern[str], Characteristic]] = [
    (re.compile(rf"(\d+)\+{abbr}"), characteristic)
    for characteristic, abbr in _CHARACTERISTIC_ABBREVIATIONS
] + [
    (re.compile(rf"(?<![a-z]){abbr}\+(\d+)"), characteristic)
    for characteristic, abbr in _CHARACTERISTIC_ABBREVIATIONS
]

_FLAT_DAMAGE_RE = re.compile(r"^(\d+)")


def parse_damage(text: str | None) -> DamageSpec:
    """Parse a damage cell such as ``7``, ``3+STR`` or ``Str + 2``.

    Characteristic formulas are tried first, then a leading bare integer.
    Unparsable input gives base 0 with no characteristic.
    """
    cleaned = re.sub(r"\s+", "", text or "").lower()
    if not cleaned:
        return DamageSpec()

    for pattern, characteristic in DAMAGE_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            return DamageSpec(base=int(match.group(1)), characteristic=characteristic)

    flat = _FLAT_DAMAGE_RE.match(cleaned)
    if flat:
        return DamageSpec(base=int(flat.group(1)))
    return DamageSpec()


# ---------------------------------------------------------------------------
# Hit locations
# ---------------------------------------------------------------------------

LOCATION_RULES: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (("head",), ("head",)),
    (("body", "torso"), ("body",)),
    (("arm",), ("leftArm", "rightArm")),
    (("leg",), ("leftLeg", "rightLeg")),
]


def parse_locations(text: str | None) -> LocationSpec:
    """Hit locations covered by a piece of armour.

    ``arm`` and ``leg`` cover both sides. ``all``, empty text or no recognised
    location give the full six-location set.
    """
    if not text:
        return LocationSpec.everywhere()

    lower = text.lower()
    if "all" in lower:
        return LocationSpec.everywhere()

    covered: list[str] = []
    for keywords, locations in LOCATION_RULES:
        if any(keyword in lower for keyword in keywords):
            covered.extend(locations)

    return LocationSpec(label=text, hit_locations=covered or list(ALL_HIT_LOCATIONS))
