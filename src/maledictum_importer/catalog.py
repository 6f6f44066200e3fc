"""
Item catalog collaborators used by the importer.

The importer depends only on the two narrow protocols below. ``JsonItemCatalog``
is a small file-backed implementation used by the MCP server: one JSON file per
created item plus a ``folders.json`` index.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field
from shortuuid import random as shortuuid_random

logger = logging.getLogger("maledictum-importer")

ITEM_FOLDER_TYPE = "Item"


class ItemCreationError(Exception):
    """Raised by a catalog when a single item document cannot be created."""


class Folder(BaseModel):
    id: str = Field(default_factory=lambda: shortuuid_random(length=16))
    name: str
    type: str = ITEM_FOLDER_TYPE


class ItemCreator(Protocol):
    async def create(self, document: dict[str, Any]) -> str:
        """Create an item from a document and return its id."""
        ...


class FolderSource(Protocol):
    def list_folders(self) -> list[Folder]:
        """Folders that can hold items."""
        ...


class JsonItemCatalog:
    """Stores created item documents under ``root/items`` and folders in ``root/folders.json``."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    @property
    def items_dir(self) -> Path:
        return self.root / "items"

    @property
    def folders_file(self) -> Path:
        return self.root / "folders.json"

    # ------------------------------------------------------------------ #
    # Folders
    # ------------------------------------------------------------------ #

    def _load_folders(self) -> list[Folder]:
        if not self.folders_file.exists():
            return []
        try:
            data = json.loads(self.folders_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Could not read folder index {self.folders_file}: {e}")
            return []
        return [Folder(**entry) for entry in data if isinstance(entry, dict) and entry.get("name")]

    def list_folders(self) -> list[Folder]:
        return [f for f in self._load_folders() if f.type == ITEM_FOLDER_TYPE]

    def add_folder(self, name: str, folder_type: str = ITEM_FOLDER_TYPE) -> Folder:
        folders = self._load_folders()
        folder = Folder(name=name, type=folder_type)
        folders.append(folder)
        self.root.mkdir(parents=True, exist_ok=True)
        self.folders_file.write_text(
            json.dumps([f.model_dump() for f in folders], indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.debug(f"📁 Created folder '{name}' ({folder.id})")
        return folder

    # ------------------------------------------------------------------ #
    # Items
    # ------------------------------------------------------------------ #

    async def create(self, document: dict[str, Any]) -> str:
        """Write one item document and return its new id.

        Raises:
            ItemCreationError: If the document has no name or targets an unknown folder.
        """
        name = str(document.get("name") or "").strip()
        if not name:
            raise ItemCreationError("Item document has no name")

        folder_id = document.get("folder")
        if folder_id and folder_id not in {f.id for f in self.list_folders()}:
            raise ItemCreationError(f"Folder '{folder_id}' does not exist")

        item_id = shortuuid_random(length=16)
        stored = dict(document, _id=item_id)
        self.items_dir.mkdir(parents=True, exist_ok=True)
        try:
            (self.items_dir / f"{item_id}.json").write_text(
                json.dumps(stored, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise ItemCreationError(f"Could not write item: {e}") from e
        return item_id

    def list_items(self) -> list[dict[str, Any]]:
        if not self.items_dir.exists():
            return []
        items = []
        for path in sorted(self.items_dir.glob("*.json")):
            items.append(json.loads(path.read_text(encoding="utf-8")))
        return items
