"""
Tests for the file-backed item catalog.
"""

import json
from pathlib import Path

import pytest

from maledictum_importer.catalog import ItemCreationError, JsonItemCatalog


@pytest.fixture
def catalog(tmp_path: Path) -> JsonItemCatalog:
    return JsonItemCatalog(tmp_path / "catalog")


class TestFolders:
    def test_empty(self, catalog):
        assert catalog.list_folders() == []

    def test_add_and_list(self, catalog):
        folder = catalog.add_folder("Armoury")

        folders = catalog.list_folders()
        assert [f.name for f in folders] == ["Armoury"]
        assert folders[0].id == folder.id
        assert len(folder.id) == 16

    def test_only_item_folders_listed(self, catalog):
        catalog.add_folder("Armoury")
        catalog.add_folder("Crew", folder_type="Actor")
        assert [f.name for f in catalog.list_folders()] == ["Armoury"]

    def test_corrupt_index_reads_as_empty(self, catalog):
        catalog.root.mkdir(parents=True)
        catalog.folders_file.write_text("[broken")
        assert catalog.list_folders() == []


class TestCreate:
    """Test creating item documents."""

    @pytest.mark.asyncio
    async def test_create_writes_document(self, catalog):
        item_id = await catalog.create({"name": "Combat Knife", "type": "weapon", "system": {}})

        stored = json.loads((catalog.items_dir / f"{item_id}.json").read_text())
        assert stored["_id"] == item_id
        assert stored["name"] == "Combat Knife"
        assert catalog.list_items() == [stored]

    @pytest.mark.asyncio
    async def test_create_into_folder(self, catalog):
        folder = catalog.add_folder("Armoury")
        item_id = await catalog.create({"name": "Autogun", "folder": folder.id})

        stored = json.loads((catalog.items_dir / f"{item_id}.json").read_text())
        assert stored["folder"] == folder.id

    @pytest.mark.asyncio
    async def test_unknown_folder_rejected(self, catalog):
        with pytest.raises(ItemCreationError, match="does not exist"):
            await catalog.create({"name": "Autogun", "folder": "missing"})

    @pytest.mark.asyncio
    async def test_nameless_document_rejected(self, catalog):
        with pytest.raises(ItemCreationError, match="no name"):
            await catalog.create({"name": "  "})

    def test_list_items_empty(self, catalog):
        assert catalog.list_items() == []
