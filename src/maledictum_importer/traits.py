"""
Trait extraction from free-text trait cells.

System traits are recognised by an ordered catalog of regular expressions;
each canonical key is kept at most once, from the first rule and occurrence
that matches. Traits outside the system vocabulary can be described in a
user-maintained custom trait dictionary, in which case they are rendered into
the item's player notes rather than the structured trait list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from .models import CustomTraitDefinition, Trait

CustomTraitDictionary = Mapping[str, CustomTraitDefinition]


@dataclass(frozen=True)
class TraitRule:
    """One catalog entry: a pattern, the canonical key it yields, and whether
    group 1 of the pattern carries the trait's value."""

    pattern: re.Pattern[str]
    key: str
    has_value: bool = False


def _rule(pattern: str, key: str, has_value: bool = False) -> TraitRule:
    return TraitRule(re.compile(pattern, re.IGNORECASE), key, has_value)


# Rated variants precede their bare forms so "Shield (2)" keeps its rating.
TRAIT_RULES: tuple[TraitRule, ...] = (
    _rule(r"\bBlast\s*\((\d+)\)", "blast", True),
    _rule(r"\bBurst\s*\((\d+)\)", "burst", True),
    _rule(r"\bClose\b", "close"),
    _rule(r"\bDefensive\b", "defensive"),
    _rule(r"\bFlamer\b", "flamer"),
    _rule(r"\bHeavy\s*\((\d+)\)", "heavy", True),
    _rule(r"\bIneffective\b", "ineffective"),
    _rule(r"\bInflict\s*\(([^)]+)\)", "inflict", True),
    _rule(r"\bLoud\b", "loud"),
    _rule(r"\bPenetrating\s*\((\d+)\)", "penetrating", True),
    _rule(r"\bRapid\s*Fire\s*\((\d+)\)", "rapidfire", True),
    _rule(r"\bReach\s*\(([^)]+)\)", "reach", True),
    _rule(r"\bReliable\b", "reliable"),
    _rule(r"\bRend\s*\((\d+)\)", "rend", True),
    _rule(r"\bShield\s*\((\d+)\)", "shield", True),
    _rule(r"\bShield\b", "shield"),
    _rule(r"\bSpread\b", "spread"),
    _rule(r"\bSubtle\b", "subtle"),
    _rule(r"\bSupercharge\b", "supercharge"),
    _rule(r"\bThrown\s*\(([^)]+)\)", "thrown", True),
    _rule(r"\bThrown\b", "thrown"),
    _rule(r"\bTwo-?Handed\b", "twohanded"),
    _rule(r"\bUnstable\b", "unstable"),
    _rule(r"\bBulky\b", "bulky"),
    _rule(r"\bShoddy\b", "shoddy"),
    _rule(r"\bUgly\b", "ugly"),
    _rule(r"\bUnreliable\b", "unreliable"),
    _rule(r"\bLightweight\b", "lightweight"),
    _rule(r"\bMaster-?crafted\b", "mastercrafted"),
    _rule(r"\bOrnamental\b", "ornamental"),
    _rule(r"\bDurable\b", "durable"),
    _rule(r"\bHaywire\b", "haywire"),
)

SYSTEM_TRAIT_KEYS: frozenset[str] = frozenset(rule.key for rule in TRAIT_RULES)

_TRAILING_PARENTHETICAL_RE = re.compile(r"\s*\([^)]*\)\s*$")
_SEGMENT_SPLIT_RE = re.compile(r",\s*")


@dataclass(frozen=True)
class TraitParseResult:
    traits: list[Trait]
    notes: str = ""


def trait_base_name(name: str) -> str:
    """Lowercased trait name without a trailing parenthetical, e.g. ``"Toxic (3)"`` -> ``"toxic"``."""
    return _TRAILING_PARENTHETICAL_RE.sub("", name).strip().lower()


def build_custom_trait_dictionary(
    entries: Iterable[Mapping[str, object]],
) -> dict[str, CustomTraitDefinition]:
    """Build the match dictionary from ``{name, description}`` entries.

    Entries missing a non-empty string name or description are skipped. When two
    entries share a base name the later one wins.
    """
    definitions: dict[str, CustomTraitDefinition] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        description = entry.get("description")
        if not isinstance(name, str) or not isinstance(description, str):
            continue
        if not name.strip() or not description.strip():
            continue
        match_name = trait_base_name(name)
        definitions[match_name] = CustomTraitDefinition(
            match_name=match_name,
            display_name=name,
            description=description,
        )
    return definitions


def parse_traits(text: str | None) -> list[Trait]:
    """Extract system traits from a trait cell.

    Rules are applied in catalog order and a key found once is never added
    again, so ``"Rend (2), Rend (4)"`` yields a single ``rend`` trait valued
    ``"2"``. Values are captured verbatim. Unknown words are ignored.
    """
    if not text or not text.strip():
        return []

    traits: list[Trait] = []
    found: set[str] = set()

    for rule in TRAIT_RULES:
        if rule.key in found:
            continue
        match = rule.pattern.search(text)
        if match is None:
            continue
        found.add(rule.key)
        value = match.group(1) if rule.has_value else None
        traits.append(Trait(key=rule.key, value=value or None))

    return traits


def format_custom_trait_note(segment: str, definition: CustomTraitDefinition) -> str:
    return f"<p><strong>{segment}:</strong> {definition.description}</p>"


def parse_traits_with_custom(
    text: str | None,
    custom_traits: CustomTraitDictionary | None = None,
) -> TraitParseResult:
    """Extract system traits and render notes for known custom traits.

    The trait cell is split on commas; each segment whose base name is not a
    system trait but is in ``custom_traits`` contributes one note paragraph.

    Args:
        text: Free-text trait cell, e.g. ``"Rend (2), Toxic (3)"``.
        custom_traits: Custom trait dictionary keyed by base name.

    Returns:
        TraitParseResult with the structured traits and newline-joined notes.
    """
    traits = parse_traits(text)
    if not text or not text.strip() or not custom_traits:
        return TraitParseResult(traits=traits)

    notes: list[str] = []
    for part in _SEGMENT_SPLIT_RE.split(text):
        segment = part.strip()
        if not segment:
            continue
        base_name = trait_base_name(segment)
        if re.sub(r"\s+", "", base_name) in SYSTEM_TRAIT_KEYS:
            continue
        definition = custom_traits.get(base_name)
        if definition is not None:
            notes.append(format_custom_trait_note(segment, definition))

    return TraitParseResult(traits=traits, notes="\n".join(notes))
