"""
Importer configuration on top of a key-value settings store.

The host application owns persistence; this module only needs ``get`` and
``set`` of string values. Two kinds of settings are kept:

- ``customTraits``: JSON array of ``{"name": ..., "description": ...}`` objects.
- One default icon path per item sub-category (``meleeIcon``, ``rangedIcon``, ...).

Readers never raise on bad persisted data: malformed custom-trait JSON reads
as an empty configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import BaseModel, Field

from .models import CustomTraitDefinition, ItemIcons
from .traits import build_custom_trait_dictionary, trait_base_name

logger = logging.getLogger("maledictum-importer")

CUSTOM_TRAITS_KEY = "customTraits"

# Setting key -> ItemIcons field
ICON_SETTING_KEYS: dict[str, str] = {
    "meleeIcon": "melee",
    "rangedIcon": "ranged",
    "grenadeIcon": "grenade",
    "armourIcon": "armour",
    "shieldIcon": "shield",
    "forceFieldIcon": "force_field",
}


class SettingsError(Exception):
    """Raised when a custom trait file cannot be read or understood."""


class SettingsStore(Protocol):
    """Durable string key-value store provided by the host."""

    def get(self, key: str, default: str | None = None) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemorySettingsStore:
    """Dict-backed settings store."""

    def __init__(self, values: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(values or {})

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonSettingsStore:
    """Settings persisted as one JSON object on disk.

    A missing file reads as empty. A corrupt file is logged and also reads as
    empty; the next ``set`` rewrites it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Could not read settings file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Settings file {self.path} is not a JSON object, ignoring it")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._load().get(key, default)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug(f"💾 Saved setting '{key}' to {self.path}")


class CustomTraitEntry(BaseModel):
    """A custom trait as the user configures it."""

    name: str = Field(description="Trait name, optionally with a rating, e.g. 'Toxic (3)'")
    description: str = Field(description="Rules text added to item notes")


# ---------------------------------------------------------------------------
# Custom traits
# ---------------------------------------------------------------------------

def parse_custom_trait_entries(raw: str | None) -> list[CustomTraitEntry]:
    """Decode the persisted custom-trait JSON into entries.

    Invalid JSON, a non-list payload, and entries without a non-empty name and
    description are all dropped silently (the first two with a warning).
    """
    try:
        data = json.loads(raw or "[]")
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"⚠️ Failed to parse custom traits: {e}")
        return []

    if not isinstance(data, list):
        logger.warning("⚠️ Custom traits setting is not a JSON array, ignoring it")
        return []

    return _coerce_entries(data)


def _coerce_entries(items: list[Any]) -> list[CustomTraitEntry]:
    entries: list[CustomTraitEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        description = item.get("description")
        if isinstance(name, str) and isinstance(description, str) and name.strip() and description.strip():
            entries.append(CustomTraitEntry(name=name, description=description))
    return entries


def load_custom_traits(store: SettingsStore) -> list[CustomTraitEntry]:
    return parse_custom_trait_entries(store.get(CUSTOM_TRAITS_KEY, "[]"))


def get_custom_trait_definitions(store: SettingsStore) -> dict[str, CustomTraitDefinition]:
    """Snapshot of the custom trait dictionary, keyed by base name.

    The returned dict is a fresh value; later settings changes do not affect it.
    """
    entries = load_custom_traits(store)
    return build_custom_trait_dictionary(entry.model_dump() for entry in entries)


def save_custom_traits(store: SettingsStore, entries: list[CustomTraitEntry | dict[str, Any]]) -> int:
    """Persist custom traits, dropping rows with a blank name or description.

    Returns:
        Number of traits saved.
    """
    kept: list[dict[str, str]] = []
    for entry in entries:
        data = entry.model_dump() if isinstance(entry, CustomTraitEntry) else dict(entry)
        name = str(data.get("name") or "")
        description = str(data.get("description") or "")
        if name.strip() and description.strip():
            kept.append({"name": name, "description": description})

    store.set(CUSTOM_TRAITS_KEY, json.dumps(kept, ensure_ascii=False))
    logger.info(f"Saved {len(kept)} custom trait(s)")
    return len(kept)


def add_custom_trait(store: SettingsStore, name: str, description: str) -> int:
    """Add a custom trait, replacing any existing trait with the same base name."""
    base = trait_base_name(name)
    entries = [e for e in load_custom_traits(store) if trait_base_name(e.name) != base]
    entries.append(CustomTraitEntry(name=name, description=description))
    return save_custom_traits(store, entries)


def remove_custom_trait(store: SettingsStore, name: str) -> bool:
    """Remove the custom trait whose base name matches ``name``.

    Returns:
        True if a trait was removed.
    """
    base = trait_base_name(name)
    entries = load_custom_traits(store)
    remaining = [e for e in entries if trait_base_name(e.name) != base]
    if len(remaining) == len(entries):
        return False
    save_custom_traits(store, remaining)
    return True


def read_custom_traits_file(path: str | Path) -> list[CustomTraitEntry]:
    """Read custom traits from a ``.json``, ``.yaml`` or ``.yml`` file.

    The file holds either a list of ``{name, description}`` objects or a
    mapping with that list under ``traits``.

    Raises:
        SettingsError: If the file is missing, unsupported, unparsable or has
            the wrong top-level shape.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix not in {".json", ".yaml", ".yml"}:
        raise SettingsError(f"Unsupported file format: {suffix or '(none)'}. Supported: .json, .yaml, .yml")

    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SettingsError(f"Failed to read file: {e}") from e

    try:
        data = json.loads(raw) if suffix == ".json" else yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SettingsError(f"Failed to parse {suffix} file: {e}") from e

    if isinstance(data, dict):
        data = data.get("traits")
    if not isinstance(data, list):
        raise SettingsError("Custom trait file must contain a list of traits")

    return _coerce_entries(data)


# ---------------------------------------------------------------------------
# Icons
# ---------------------------------------------------------------------------

def get_item_icons(store: SettingsStore) -> ItemIcons:
    """Snapshot of the default icons, with built-in paths for unset keys."""
    defaults = ItemIcons()
    overrides: dict[str, str] = {}
    for key, field_name in ICON_SETTING_KEYS.items():
        value = store.get(key)
        if value:
            overrides[field_name] = value
    return defaults.model_copy(update=overrides)


def set_item_icon(store: SettingsStore, key: str, path: str) -> None:
    """Set one default icon.

    Raises:
        KeyError: If ``key`` is not one of ``ICON_SETTING_KEYS``.
    """
    if key not in ICON_SETTING_KEYS:
        raise KeyError(key)
    store.set(key, path)
