"""
Tests for field-level parsers (integers, keywords, damage, locations).
"""

import pytest

from maledictum_importer.models import ALL_HIT_LOCATIONS, Availability, Characteristic
from maledictum_importer.scalars import (
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


class TestMatchKeywords:
    """Test ordered rule evaluation."""

    def test_first_matching_rule_wins(self):
        rules = [(("a",), "first"), (("ab",), "second")]
        assert match_keywords("AB", rules, "none") == "first"

    def test_default_when_nothing_matches(self):
        assert match_keywords("xyz", [(("a",), "first")], "none") == "none"

    def test_default_for_empty_text(self):
        assert match_keywords("", [(("",), "first")], "none") == "none"
        assert match_keywords(None, [(("a",), "first")], "none") == "none"


class TestParseInteger:
    @pytest.mark.parametrize("text,expected", [
        ("50", 50),
        (" 12 ", 12),
        ("1,000", 1000),
        ("1 250", 1250),
        ("+4", 4),
        ("-2", -2),
        ("\u22123", -3),
        ("5kg", 5),
    ])
    def test_leading_integer(self, text, expected):
        assert parse_integer(text) == expected

    @pytest.mark.parametrize("text", ["", "-", "abc", None])
    def test_no_integer_is_zero(self, text):
        assert parse_integer(text) == 0


class TestParseMagazine:
    def test_capacity_fills_magazine(self):
        mag = parse_magazine("30")
        assert mag.value == 30
        assert mag.current == 30

    def test_non_digits_ignored(self):
        assert parse_magazine("6 shots").value == 6

    def test_no_digits_is_empty(self):
        mag = parse_magazine("-")
        assert (mag.value, mag.current) == (0, 0)


class TestKeywordParsers:
    """Test availability, spec, range and armour category tables."""

    @pytest.mark.parametrize("text,expected", [
        ("Common", Availability.COMMON),
        ("Scarce", Availability.SCARCE),
        ("RARE", Availability.RARE),
        ("Very Rare", Availability.RARE),
        ("Exotic", Availability.EXOTIC),
        ("Ubiquitous", Availability.UBIQUITOUS),
        ("", Availability.COMMON),
        ("Special", Availability.COMMON),
    ])
    def test_availability(self, text, expected):
        assert parse_availability(text) == expected

    @pytest.mark.parametrize("text,is_melee,expected", [
        ("One-Handed", True, "oneHanded"),
        ("two handed", True, "twoHanded"),
        ("Brawling", True, "brawling"),
        ("Pistol", False, "pistol"),
        ("Long Gun", False, "longGun"),
        ("Ordnance", False, "ordnance"),
        ("Engineering", False, "engineering"),
        ("Thrown", False, "thrown"),
        ("", True, "oneHanded"),
        ("", False, "pistol"),
        ("Exotic", False, "pistol"),
    ])
    def test_weapon_spec(self, text, is_melee, expected):
        assert parse_weapon_spec(text, is_melee=is_melee) == expected

    @pytest.mark.parametrize("text,expected", [
        ("Short", "short"),
        ("Medium", "medium"),
        ("Long", "long"),
        ("Extreme", "extreme"),
        ("-", ""),
    ])
    def test_range(self, text, expected):
        assert parse_range(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("Flak", "flak"),
        ("Mesh", "mesh"),
        ("Carapace", "carapace"),
        ("Power Armour", "power"),
        ("Leathers", "mundane"),
        ("", "mundane"),
    ])
    def test_armour_category(self, text, expected):
        assert parse_armour_category(text) == expected


class TestParseDamage:
    """Test flat damage and characteristic formulas."""

    def test_flat(self):
        damage = parse_damage("7")
        assert damage.base == 7
        assert damage.characteristic is None
        assert damage.sl is True

    def test_number_then_characteristic(self):
        damage = parse_damage("3+STR")
        assert damage.base == 3
        assert damage.characteristic == Characteristic.STRENGTH

    def test_characteristic_then_number_with_spaces(self):
        damage = parse_damage("Str + 2")
        assert damage.base == 2
        assert damage.characteristic == Characteristic.STRENGTH

    @pytest.mark.parametrize("text,expected", [
        ("4+Ag", Characteristic.AGILITY),
        ("4+Int", Characteristic.INTELLECT),
        ("4+Wil", Characteristic.WILLPOWER),
        ("4+Fel", Characteristic.FELLOWSHIP),
        ("4+Per", Characteristic.PERCEPTION),
        ("4+T", Characteristic.TOUGHNESS),
        ("4+Toughness", Characteristic.TOUGHNESS),
        ("4+Strength", Characteristic.STRENGTH),
    ])
    def test_characteristics(self, text, expected):
        damage = parse_damage(text)
        assert damage.base == 4
        assert damage.characteristic == expected

    def test_intellect_not_read_as_toughness(self):
        damage = parse_damage("Int+3")
        assert damage.base == 3
        assert damage.characteristic == Characteristic.INTELLECT

    @pytest.mark.parametrize("text", ["", "-", "Special", None])
    def test_unparsable_is_zero(self, text):
        damage = parse_damage(text)
        assert damage.base == 0
        assert damage.characteristic is None


class TestParseLocations:
    def test_all(self):
        spec = parse_locations("All")
        assert spec.label == "All"
        assert spec.hit_locations == list(ALL_HIT_LOCATIONS)

    def test_empty_is_everywhere(self):
        assert parse_locations("").hit_locations == list(ALL_HIT_LOCATIONS)

    def test_arms_cover_both_sides(self):
        spec = parse_locations("Body, Arms")
        assert spec.label == "Body, Arms"
        assert spec.hit_locations == ["body", "leftArm", "rightArm"]

    def test_torso_is_body(self):
        assert parse_locations("Torso").hit_locations == ["body"]

    def test_legs_and_head(self):
        assert parse_locations("Head, Legs").hit_locations == ["head", "leftLeg", "rightLeg"]

    def test_unrecognised_keeps_label(self):
        spec = parse_locations("Wings")
        assert spec.label == "Wings"
        assert spec.hit_locations == list(ALL_HIT_LOCATIONS)
