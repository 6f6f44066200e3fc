"""
Per-category grammars that turn tokenized fields into ItemRecords.

Column layouts (``[traits...]`` is every remaining field, joined by spaces):

- Melee:           Name | Spec | Damage | Enc | Cost | Avail | [traits...]
- Ranged:          Name | Spec | Damage | Range | Mag | Enc | Cost | Avail | [traits...]
- Grenade (table): Name | Thrown | Damage | Range | - | Enc | Cost | Avail | [traits...]
- Grenade (short): Name | Thrown | Damage | Enc | Cost | Avail | [traits...]
- Armour:          Name | Category | Armour | Enc | Cost | Avail | [Locations] | [traits...]
- Shield:          Name | Special | - | Enc | Cost | Avail | [traits...]
- Force field:     Name | Protection | Overload | Enc | Cost | Avail

Weapon lines are first classified into a ``WeaponShape`` by ``classify_weapon_line``
and then handed to the grammar registered for that shape.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable

from .models import (
    AttackType,
    DocumentType,
    ForceFieldAttributes,
    ItemIcons,
    ItemNotes,
    ItemRecord,
    ItemType,
    LocationSpec,
    MagazineSpec,
    OverloadSpec,
    ProtectionAttributes,
    Trait,
    WeaponAttributes,
)
from .scalars import (
    MELEE_SPEC_KEYWORDS,
    KeywordRule,
    match_keywords,
    parse_armour_category,
    parse_availability,
    parse_damage,
    parse_integer,
    parse_locations,
    parse_magazine,
    parse_range,
    parse_weapon_spec,
)
from .text import tokenize_line
from .traits import CustomTraitDictionary, parse_traits_with_custom

logger = logging.getLogger("maledictum-importer")

MIN_SHORT_FIELDS = 6
MIN_RANGED_FIELDS = 8

DEFAULT_WEAPON_CATEGORY = "mundane"
EXPLOSIVE_CATEGORY = "explosive"

_RANGE_BAND_RE = re.compile(r"^(Short|Medium|Long|Extreme)$", re.IGNORECASE)

GRENADE_SPEC_RULES: list[KeywordRule] = [
    (("engineering",), "engineering"),
    (("ordnance",), "ordnance"),
]


class WeaponShape(str, Enum):
    """Layout of a weapon line, decided before any field is parsed."""
    MELEE = "melee"
    GRENADE_TABLE = "grenade_table"
    RANGED = "ranged"
    GRENADE_SIMPLE = "grenade_simple"


def classify_weapon_line(fields: list[str]) -> WeaponShape:
    """Pick the weapon grammar for a tokenized line.

    Priority: melee keyword in the spec column, then the 8-column range-table layout
    with ``thrown`` (grenade), the range-table layout without it (ranged),
    ``thrown`` without the table layout (short grenade), and melee otherwise.
    """
    spec = fields[1].lower() if len(fields) > 1 else ""
    is_melee = any(keyword in spec for keyword in MELEE_SPEC_KEYWORDS)
    is_thrown = "thrown" in spec
    has_range_table = len(fields) >= MIN_RANGED_FIELDS and bool(_RANGE_BAND_RE.match(fields[3].strip()))

    if is_melee:
        return WeaponShape.MELEE
    if has_range_table and is_thrown:
        return WeaponShape.GRENADE_TABLE
    if has_range_table:
        return WeaponShape.RANGED
    if is_thrown:
        return WeaponShape.GRENADE_SIMPLE
    return WeaponShape.MELEE


def _trait_text(fields: list[str], start: int) -> str:
    return " ".join(fields[start:])


# ---------------------------------------------------------------------------
# Weapons
# ---------------------------------------------------------------------------

def parse_melee(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    if len(fields) < MIN_SHORT_FIELDS:
        return None

    extracted = parse_traits_with_custom(_trait_text(fields, 6), custom_traits)
    return ItemRecord(
        name=fields[0],
        type=DocumentType.WEAPON,
        img=icons.melee,
        attributes=WeaponAttributes(
            attack_type=AttackType.MELEE,
            spec=parse_weapon_spec(fields[1], is_melee=True),
            category=category or DEFAULT_WEAPON_CATEGORY,
            damage=parse_damage(fields[2]),
            encumbrance=parse_integer(fields[3]),
            cost=parse_integer(fields[4]),
            availability=parse_availability(fields[5]),
        ),
        traits=extracted.traits,
        notes=ItemNotes(player=extracted.notes),
    )


def parse_ranged(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    if len(fields) < MIN_RANGED_FIELDS:
        return None

    extracted = parse_traits_with_custom(_trait_text(fields, 8), custom_traits)
    return ItemRecord(
        name=fields[0],
        type=DocumentType.WEAPON,
        img=icons.ranged,
        attributes=WeaponAttributes(
            attack_type=AttackType.RANGED,
            spec=parse_weapon_spec(fields[1], is_melee=False),
            category=category or DEFAULT_WEAPON_CATEGORY,
            damage=parse_damage(fields[2]),
            range=parse_range(fields[3]),
            magazine=parse_magazine(fields[4]),
            encumbrance=parse_integer(fields[5]),
            cost=parse_integer(fields[6]),
            availability=parse_availability(fields[7]),
        ),
        traits=extracted.traits,
        notes=ItemNotes(player=extracted.notes),
    )


def _grenade_record(
    name: str,
    spec: str,
    damage_text: str,
    enc_text: str,
    cost_text: str,
    avail_text: str,
    traits: list[Trait],
    notes: str,
    icons: ItemIcons,
) -> ItemRecord:
    damage = parse_damage(damage_text).model_copy(update={"sl": False})
    return ItemRecord(
        name=name,
        type=DocumentType.WEAPON,
        img=icons.grenade,
        attributes=WeaponAttributes(
            attack_type=AttackType.RANGED,
            spec=spec,
            category=EXPLOSIVE_CATEGORY,
            damage=damage,
            magazine=MagazineSpec(value=1, current=1),
            encumbrance=parse_integer(enc_text),
            cost=parse_integer(cost_text),
            availability=parse_availability(avail_text),
        ),
        traits=traits,
        notes=ItemNotes(player=notes),
    )


def parse_grenade_table(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    """Grenade in the ranged-table layout; the range cell becomes the Thrown trait value."""
    if len(fields) < MIN_RANGED_FIELDS:
        return None

    extracted = parse_traits_with_custom(_trait_text(fields, 8), custom_traits)
    traits = list(extracted.traits)
    if not any(t.key == "thrown" for t in traits):
        traits.append(Trait(key="thrown", value=fields[3].strip()))

    return _grenade_record(
        name=fields[0],
        spec=match_keywords(fields[1], GRENADE_SPEC_RULES, "thrown"),
        damage_text=fields[2],
        enc_text=fields[5],
        cost_text=fields[6],
        avail_text=fields[7],
        traits=traits,
        notes=extracted.notes,
        icons=icons,
    )


def parse_grenade_simple(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    if len(fields) < MIN_SHORT_FIELDS:
        return None

    extracted = parse_traits_with_custom(_trait_text(fields, 6), custom_traits)
    return _grenade_record(
        name=fields[0],
        spec="thrown",
        damage_text=fields[2],
        enc_text=fields[3],
        cost_text=fields[4],
        avail_text=fields[5],
        traits=extracted.traits,
        notes=extracted.notes,
        icons=icons,
    )


ItemGrammar = Callable[
    [list[str], str | None, CustomTraitDictionary | None, ItemIcons],
    ItemRecord | None,
]

WEAPON_GRAMMARS: dict[WeaponShape, ItemGrammar] = {
    WeaponShape.MELEE: parse_melee,
    WeaponShape.GRENADE_TABLE: parse_grenade_table,
    WeaponShape.RANGED: parse_ranged,
    WeaponShape.GRENADE_SIMPLE: parse_grenade_simple,
}


def parse_weapon(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    shape = classify_weapon_line(fields)
    logger.debug(f"Weapon line '{fields[0]}' classified as {shape.value}")
    return WEAPON_GRAMMARS[shape](fields, category, custom_traits, icons)


# ---------------------------------------------------------------------------
# Protection
# ---------------------------------------------------------------------------

def parse_armour(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    if len(fields) < MIN_SHORT_FIELDS:
        return None

    locations = parse_locations(fields[6]) if len(fields) > 6 and fields[6] else LocationSpec.everywhere()
    extracted = parse_traits_with_custom(_trait_text(fields, 7), custom_traits)
    return ItemRecord(
        name=fields[0],
        type=DocumentType.PROTECTION,
        img=icons.armour,
        attributes=ProtectionAttributes(
            category=parse_armour_category(fields[1]),
            armour=parse_integer(fields[2]),
            encumbrance=parse_integer(fields[3]),
            cost=parse_integer(fields[4]),
            availability=parse_availability(fields[5]),
            locations=locations,
        ),
        traits=extracted.traits,
        notes=ItemNotes(player=extracted.notes),
    )


def parse_shield(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    # Columns 1 and 2 (special rules text and a placeholder) carry nothing we store.
    if len(fields) < MIN_SHORT_FIELDS:
        return None

    extracted = parse_traits_with_custom(_trait_text(fields, 6), custom_traits)
    return ItemRecord(
        name=fields[0],
        type=DocumentType.PROTECTION,
        img=icons.shield,
        attributes=ProtectionAttributes(
            category="shield",
            armour=0,
            encumbrance=parse_integer(fields[3]),
            cost=parse_integer(fields[4]),
            availability=parse_availability(fields[5]),
            locations=LocationSpec(label="", hit_locations=[]),
        ),
        traits=extracted.traits,
        notes=ItemNotes(player=extracted.notes),
    )


def parse_force_field(
    fields: list[str],
    category: str | None,
    custom_traits: CustomTraitDictionary | None,
    icons: ItemIcons,
) -> ItemRecord | None:
    """Force fields have no trait or location columns; the protection formula is kept as text."""
    if len(fields) < MIN_SHORT_FIELDS:
        return None

    return ItemRecord(
        name=fields[0],
        type=DocumentType.FORCE_FIELD,
        img=icons.force_field,
        attributes=ForceFieldAttributes(
            protection=fields[1].strip() or "0",
            overload=OverloadSpec(value=parse_integer(fields[2]), collapsed=False),
            encumbrance=parse_integer(fields[3]),
            cost=parse_integer(fields[4]),
            availability=parse_availability(fields[5]),
        ),
    )


ITEM_GRAMMARS: dict[ItemType, ItemGrammar] = {
    ItemType.WEAPON: parse_weapon,
    ItemType.PROTECTION: parse_armour,
    ItemType.SHIELD: parse_shield,
    ItemType.FORCE_FIELD: parse_force_field,
}


def parse_line(
    line: str,
    item_type: ItemType | str,
    weapon_category: str | None = None,
    custom_traits: CustomTraitDictionary | None = None,
    icons: ItemIcons | None = None,
) -> ItemRecord | None:
    """Parse one pasted line into an ItemRecord.

    Args:
        line: A single pipe-delimited line.
        item_type: Item family chosen by the user.
        weapon_category: Category stamped on melee/ranged weapons (default ``mundane``).
        custom_traits: Snapshot of the custom trait dictionary.
        icons: Snapshot of the default icons; built-in defaults when omitted.

    Returns:
        The parsed record, or None when the line cannot be parsed.
    """
    fields = tokenize_line(line)
    if fields is None:
        return None

    try:
        kind = ItemType(item_type)
    except ValueError:
        logger.debug(f"Unknown item type '{item_type}'")
        return None

    grammar = ITEM_GRAMMARS[kind]
    return grammar(fields, weapon_category, custom_traits, icons or ItemIcons())
