"""
Tests for the MCP tools exposed by main.py.

Tools are called through their underlying functions (``m.<tool>.fn``) with the
module-level stores swapped for temporary ones.
"""

import json
from pathlib import Path

import pytest

# Import main module once -- tools are accessed via m.<tool>.fn()
from maledictum_importer import main as m
from maledictum_importer.catalog import JsonItemCatalog
from maledictum_importer.settings import JsonSettingsStore

KNIFE = "Combat Knife | One-Handed | 3+STR | 1 | 50 | Common | Subtle"
AUTOGUN = "Autogun | Long Gun | 7 | Medium | 30 | 3 | 250 | Common | RapidFire(3)"


@pytest.fixture(autouse=True)
def isolated_stores(tmp_path: Path, monkeypatch):
    """Point the server at a temporary data directory."""
    store = JsonSettingsStore(tmp_path / "settings.json")
    catalog = JsonItemCatalog(tmp_path / "catalog")
    monkeypatch.setattr(m, "settings_store", store)
    monkeypatch.setattr(m, "catalog", catalog)
    return store, catalog


class TestParsingTools:
    def test_format_pasted_text(self):
        result = m.format_pasted_text.fn(raw_text="Name\tSpec\nCombat Knife\tOne-Handed")
        assert result == "Combat Knife | One-Handed"

    def test_format_nothing(self):
        assert m.format_pasted_text.fn(raw_text="Name\tSpec") == "⚠️ Nothing to format."

    def test_preview_items(self):
        result = m.preview_items.fn(raw_text=f"{KNIFE}\n{AUTOGUN}", item_type="weapon")
        assert "Preview - 2 of 2 line(s) parsed" in result
        assert "✓ Autogun (weapon)" in result

    def test_preview_shield(self):
        line = "Boarding Shield | Shield (2) | - | 2 | 80 | Scarce | Defensive"
        result = m.preview_items.fn(raw_text=line, item_type="shield")
        assert "✓ Boarding Shield (protection)" in result

    @pytest.mark.asyncio
    async def test_import_items(self, isolated_stores):
        _, catalog = isolated_stores

        result = await m.import_items.fn(raw_text=f"{KNIFE}\n{AUTOGUN}", item_type="weapon")

        assert "Successfully imported 2 item(s)." in result
        assert sorted(item["name"] for item in catalog.list_items()) == ["Autogun", "Combat Knife"]

    @pytest.mark.asyncio
    async def test_import_into_missing_folder(self, isolated_stores):
        _, catalog = isolated_stores

        result = await m.import_items.fn(raw_text=KNIFE, item_type="weapon", folder_id="nope")

        assert "Status: FAILED" in result
        assert "Failed (1):" in result
        assert catalog.list_items() == []


class TestFolderTools:
    def test_list_empty(self):
        assert "No item folders" in m.list_folders.fn()

    def test_create_and_list(self):
        created = m.create_folder.fn(name="Armoury")
        assert "Created folder 'Armoury'" in created
        assert "Armoury" in m.list_folders.fn()

    @pytest.mark.asyncio
    async def test_import_into_folder(self, isolated_stores):
        _, catalog = isolated_stores
        folder = catalog.add_folder("Armoury")

        await m.import_items.fn(raw_text=KNIFE, item_type="weapon", folder_id=folder.id)

        assert catalog.list_items()[0]["folder"] == folder.id


class TestCustomTraitTools:
    def test_add_list_remove(self):
        assert m.add_custom_trait.fn(name="Toxic (3)", description="Poison.") == "✅ Saved 1 custom trait(s)."
        assert "**Toxic (3)**: Poison." in m.list_custom_traits.fn()

        assert m.remove_custom_trait.fn(name="Toxic") == "🗑️ Removed custom trait 'Toxic'."
        assert m.list_custom_traits.fn() == "No custom traits defined."

    def test_add_requires_description(self):
        assert m.add_custom_trait.fn(name="Toxic", description=" ").startswith("❌")

    def test_remove_unknown(self):
        assert m.remove_custom_trait.fn(name="Shock").startswith("❌")

    def test_import_file_merges(self, tmp_path: Path):
        m.add_custom_trait.fn(name="Toxic (3)", description="Old.")
        m.add_custom_trait.fn(name="Shock", description="Stuns.")
        path = tmp_path / "traits.json"
        path.write_text(json.dumps([{"name": "Toxic (5)", "description": "New."}]))

        result = m.import_custom_traits.fn(path=str(path))

        assert result.startswith("✅ Loaded 1 trait(s)")
        assert "2 custom trait(s) saved" in result
        listing = m.list_custom_traits.fn()
        assert "**Toxic (5)**: New." in listing
        assert "Old." not in listing

    def test_import_file_replace(self, tmp_path: Path):
        m.add_custom_trait.fn(name="Shock", description="Stuns.")
        path = tmp_path / "traits.yaml"
        path.write_text("- name: Gas\n  description: Fills the area.\n")

        m.import_custom_traits.fn(path=str(path), replace=True)

        listing = m.list_custom_traits.fn()
        assert "Gas" in listing
        assert "Shock" not in listing

    def test_import_bad_file(self, tmp_path: Path):
        result = m.import_custom_traits.fn(path=str(tmp_path / "traits.csv"))
        assert result.startswith("❌ Unsupported file format")

    def test_custom_trait_appears_in_import(self, isolated_stores):
        m.add_custom_trait.fn(name="Toxic (3)", description="Poison.")
        line = "Needle Pistol | Pistol | 2 | Short | 6 | 1 | 500 | Rare | Toxic (3)"
        assert "✓ Needle Pistol (weapon)" in m.preview_items.fn(raw_text=line, item_type="weapon")


class TestIconTools:
    def test_defaults_listed(self):
        result = m.get_default_icons.fn()
        assert "meleeIcon: modules/impmal-core/assets/icons/weapons/melee-weapon.webp" in result

    def test_set_icon(self, isolated_stores):
        store, _ = isolated_stores

        assert m.set_default_icon.fn(key="rangedIcon", path="icons/gun.webp") == "✅ rangedIcon set to icons/gun.webp"
        assert store.get("rangedIcon") == "icons/gun.webp"
        assert "rangedIcon: icons/gun.webp" in m.get_default_icons.fn()
