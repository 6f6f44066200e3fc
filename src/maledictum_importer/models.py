"""
Data models for the Maledictum item importer.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

FLAG_SCOPE = "maledictum-importer"

ALL_HIT_LOCATIONS: tuple[str, ...] = (
    "head", "body", "leftArm", "rightArm", "leftLeg", "rightLeg",
)


class ItemType(str, Enum):
    """Item family selected by the user before parsing."""
    WEAPON = "weapon"
    PROTECTION = "protection"
    SHIELD = "shield"
    FORCE_FIELD = "forceField"


class DocumentType(str, Enum):
    """Document type understood by the host item catalog."""
    WEAPON = "weapon"
    PROTECTION = "protection"
    FORCE_FIELD = "forceField"


class AttackType(str, Enum):
    MELEE = "melee"
    RANGED = "ranged"


class Availability(str, Enum):
    """Availability tiers, most to least available."""
    UBIQUITOUS = "ubiquitous"
    ABUNDANT = "abundant"
    PLENTIFUL = "plentiful"
    COMMON = "common"
    SCARCE = "scarce"
    RARE = "rare"
    EXOTIC = "exotic"


class Characteristic(str, Enum):
    """Characteristic abbreviations used in damage formulas."""
    STRENGTH = "str"
    AGILITY = "ag"
    INTELLECT = "int"
    WILLPOWER = "wil"
    FELLOWSHIP = "fel"
    PERCEPTION = "per"
    TOUGHNESS = "tgh"


class Trait(BaseModel):
    """A system trait attached to an item, e.g. ``Rend (2)`` or ``Subtle``."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Canonical system trait key")
    value: str | None = Field(default=None, description="Captured rating or range, kept as text")


class CustomTraitDefinition(BaseModel):
    """A user-defined trait that is rendered into item notes instead of the trait list."""
    model_config = ConfigDict(frozen=True)

    match_name: str = Field(description="Lowercased name without trailing parenthetical")
    display_name: str = Field(description="Name as the user entered it")
    description: str = Field(description="Rules text written into item notes")


class DamageSpec(BaseModel):
    """Flat damage or ``<n>+<characteristic>`` formula."""
    base: int = 0
    characteristic: Characteristic | None = None
    sl: bool = Field(default=True, description="Whether success levels add to damage")


class MagazineSpec(BaseModel):
    value: int = 0
    current: int = 0


class LocationSpec(BaseModel):
    label: str = ""
    hit_locations: list[str] = Field(default_factory=list)

    @classmethod
    def everywhere(cls) -> "LocationSpec":
        return cls(label="All", hit_locations=list(ALL_HIT_LOCATIONS))


class OverloadSpec(BaseModel):
    value: int = 0
    collapsed: bool = False


class ItemNotes(BaseModel):
    player: str = ""
    gm: str = ""


class WeaponAttributes(BaseModel):
    """Fields specific to melee, ranged and thrown weapons."""
    attack_type: AttackType
    spec: str
    category: str = "mundane"
    damage: DamageSpec = Field(default_factory=DamageSpec)
    range: str = ""
    magazine: MagazineSpec = Field(default_factory=MagazineSpec)
    encumbrance: int = 0
    cost: int = 0
    availability: Availability = Availability.COMMON

    def to_system(self) -> dict[str, Any]:
        return {
            "attackType": self.attack_type.value,
            "spec": self.spec,
            "category": self.category,
            "damage": {
                "base": self.damage.base,
                "characteristic": self.damage.characteristic.value if self.damage.characteristic else "",
                "SL": self.damage.sl,
            },
            "range": self.range,
            "mag": {"value": self.magazine.value, "current": self.magazine.current},
            "encumbrance": {"value": self.encumbrance},
            "cost": self.cost,
            "availability": self.availability.value,
        }


class ProtectionAttributes(BaseModel):
    """Fields shared by armour and shields."""
    category: str = "mundane"
    armour: int = 0
    encumbrance: int = 0
    cost: int = 0
    availability: Availability = Availability.COMMON
    locations: LocationSpec = Field(default_factory=LocationSpec.everywhere)

    def to_system(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "armour": self.armour,
            "encumbrance": {"value": self.encumbrance},
            "cost": self.cost,
            "availability": self.availability.value,
            "locations": {"label": self.locations.label, "list": list(self.locations.hit_locations)},
        }


class ForceFieldAttributes(BaseModel):
    protection: str = Field(default="0", description="Protection dice formula, e.g. '2d10'")
    overload: OverloadSpec = Field(default_factory=OverloadSpec)
    encumbrance: int = 0
    cost: int = 0
    availability: Availability = Availability.COMMON

    def to_system(self) -> dict[str, Any]:
        return {
            "protection": self.protection,
            "overload": {"value": self.overload.value, "collapsed": self.overload.collapsed},
            "encumbrance": {"value": self.encumbrance},
            "cost": self.cost,
            "availability": self.availability.value,
        }


class ItemIcons(BaseModel):
    """Default icon per item sub-category, snapshotted from settings for one operation."""
    model_config = ConfigDict(frozen=True)

    melee: str = "modules/impmal-core/assets/icons/weapons/melee-weapon.webp"
    ranged: str = "modules/impmal-core/assets/icons/weapons/ranged-weapon.webp"
    grenade: str = "modules/impmal-core/assets/icons/weapons/frag-missile.webp"
    armour: str = "modules/impmal-core/assets/icons/protection/armour.webp"
    shield: str = "modules/impmal-core/assets/icons/protection/shield.webp"
    force_field: str = "modules/impmal-core/assets/icons/protection/field.webp"


class ItemRecord(BaseModel):
    """A fully parsed item, ready to hand to the catalog.

    Records are immutable; use :meth:`with_folder` to target a destination folder.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    type: DocumentType
    img: str = ""
    attributes: WeaponAttributes | ProtectionAttributes | ForceFieldAttributes
    traits: list[Trait] = Field(default_factory=list)
    notes: ItemNotes = Field(default_factory=ItemNotes)
    folder: str | None = None
    imported_at: datetime = Field(default_factory=datetime.now)

    @property
    def category(self) -> str:
        if isinstance(self.attributes, ForceFieldAttributes):
            return DocumentType.FORCE_FIELD.value
        return self.attributes.category

    def trait_keys(self) -> list[str]:
        return [t.key for t in self.traits]

    def with_folder(self, folder_id: str | None) -> "ItemRecord":
        if not folder_id:
            return self
        return self.model_copy(update={"folder": folder_id})

    def to_document(self) -> dict[str, Any]:
        """Render the record in the host catalog's document layout."""
        system = self.attributes.to_system()
        system["traits"] = {"list": [t.model_dump(exclude_none=True) for t in self.traits]}
        system["notes"] = {"player": self.notes.player, "gm": self.notes.gm}

        document: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "img": self.img,
            "system": system,
            "flags": {FLAG_SCOPE: {"importedAt": int(self.imported_at.timestamp() * 1000)}},
        }
        if self.folder:
            document["folder"] = self.folder
        return document
