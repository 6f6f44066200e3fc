"""
Maledictum Item Importer MCP Server
Exposes the pasted-table importer as FastMCP tools.
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Literal

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

from .catalog import JsonItemCatalog
from .importer import ImportOrchestrator
from .models import ItemType
from .settings import (
    ICON_SETTING_KEYS,
    JsonSettingsStore,
    SettingsError,
    get_item_icons,
    load_custom_traits,
    read_custom_traits_file,
    save_custom_traits,
    set_item_icon,
)
from .settings import add_custom_trait as add_custom_trait_setting
from .settings import remove_custom_trait as remove_custom_trait_setting
from .text import format_pasted_text as reformat_pasted_text
from .traits import trait_base_name

logger = logging.getLogger("maledictum-importer")

logging.basicConfig(
    level=logging.DEBUG,
    )

if not load_dotenv():
    logger.debug("No .env file found, using environment and defaults.")

data_path = Path(os.getenv("MALEDICTUM_DATA_DIR", "maledictum_data")).resolve()
logger.debug(f"📂 Data path: {data_path}")

settings_store = JsonSettingsStore(data_path / "settings.json")
catalog = JsonItemCatalog(data_path / "catalog")

mcp = FastMCP(
    name="maledictum-importer"
)

logger.debug("✅ Stores initialized, registering tools")

ItemTypeName = Literal["weapon", "protection", "shield", "forceField"]
IconKey = Literal["meleeIcon", "rangedIcon", "grenadeIcon", "armourIcon", "shieldIcon", "forceFieldIcon"]


def _orchestrator() -> ImportOrchestrator:
    return ImportOrchestrator(settings=settings_store, creator=catalog)


# ----------------------------------------------------------------------
# Parsing tools
# ----------------------------------------------------------------------

@mcp.tool
def format_pasted_text(
    raw_text: Annotated[str, Field(description="Table text pasted from a PDF or spreadsheet (tabs or aligned columns)")],
) -> str:
    """Convert a tab- or space-aligned paste into pipe-delimited lines, dropping header rows."""
    formatted = reformat_pasted_text(raw_text)
    if not formatted:
        return "⚠️ Nothing to format."
    return formatted


@mcp.tool
def preview_items(
    raw_text: Annotated[str, Field(description="Pipe-delimited item lines, one item per line")],
    item_type: Annotated[ItemTypeName, Field(description="Item family: weapon, protection (armour), shield or forceField")],
    weapon_category: Annotated[str | None, Field(description="Weapon category stamped on melee/ranged weapons, e.g. 'mundane'")] = None,
) -> str:
    """Show which lines would import, without creating anything."""
    report = _orchestrator().preview(raw_text, ItemType(item_type), weapon_category)
    return report.format()


@mcp.tool
async def import_items(
    raw_text: Annotated[str, Field(description="Pipe-delimited item lines, one item per line")],
    item_type: Annotated[ItemTypeName, Field(description="Item family: weapon, protection (armour), shield or forceField")],
    weapon_category: Annotated[str | None, Field(description="Weapon category stamped on melee/ranged weapons, e.g. 'mundane'")] = None,
    folder_id: Annotated[str | None, Field(description="Destination folder id (see list_folders)")] = None,
) -> str:
    """Parse the lines and create one catalog item per parsed line."""
    report = await _orchestrator().import_items(raw_text, ItemType(item_type), weapon_category, folder_id)
    return report.format()


# ----------------------------------------------------------------------
# Folder tools
# ----------------------------------------------------------------------

@mcp.tool
def list_folders() -> str:
    """List item folders that can receive imported items."""
    folders = catalog.list_folders()
    if not folders:
        return "No item folders. Items will be imported at the top level."
    return "**Item Folders:**\n" + "\n".join(f"• {f.name} (`{f.id}`)" for f in folders)


@mcp.tool
def create_folder(
    name: Annotated[str, Field(description="Folder name")],
) -> str:
    """Create an item folder."""
    folder = catalog.add_folder(name)
    return f"📁 Created folder '{folder.name}' (`{folder.id}`)"


# ----------------------------------------------------------------------
# Custom trait tools
# ----------------------------------------------------------------------

@mcp.tool
def list_custom_traits() -> str:
    """List custom (non-system) traits that are written into item notes on import."""
    traits = load_custom_traits(settings_store)
    if not traits:
        return "No custom traits defined."
    return "**Custom Traits:**\n" + "\n".join(f"• **{t.name}**: {t.description}" for t in traits)


@mcp.tool
def add_custom_trait(
    name: Annotated[str, Field(description="Trait name as it appears in trait text, e.g. 'Toxic (3)'")],
    description: Annotated[str, Field(description="Rules text to add to item notes")],
) -> str:
    """Add or replace a custom trait definition."""
    if not name.strip() or not description.strip():
        return "❌ Custom traits need both a name and a description."
    count = add_custom_trait_setting(settings_store, name, description)
    return f"✅ Saved {count} custom trait(s)."


@mcp.tool
def remove_custom_trait(
    name: Annotated[str, Field(description="Trait name to remove (rating suffix is ignored)")],
) -> str:
    """Remove a custom trait definition."""
    if remove_custom_trait_setting(settings_store, name):
        return f"🗑️ Removed custom trait '{name}'."
    return f"❌ No custom trait named '{name}'."


@mcp.tool
def import_custom_traits(
    path: Annotated[str, Field(description="Path to a .json/.yaml file with a list of {name, description} traits")],
    replace: Annotated[bool, Field(description="Replace existing custom traits instead of merging")] = False,
) -> str:
    """Load custom trait definitions from a file."""
    try:
        loaded = read_custom_traits_file(path)
    except SettingsError as e:
        return f"❌ {e}"

    entries = [] if replace else load_custom_traits(settings_store)
    loaded_names = {trait_base_name(entry.name) for entry in loaded}
    entries = [e for e in entries if trait_base_name(e.name) not in loaded_names] + loaded
    count = save_custom_traits(settings_store, entries)
    return f"✅ Loaded {len(loaded)} trait(s) from {path}; {count} custom trait(s) saved."


# ----------------------------------------------------------------------
# Icon tools
# ----------------------------------------------------------------------

@mcp.tool
def get_default_icons() -> str:
    """Show the default icon used for each item sub-category."""
    icons = get_item_icons(settings_store)
    return "**Default Icons:**\n" + "\n".join(
        f"• {key}: {getattr(icons, field_name)}" for key, field_name in ICON_SETTING_KEYS.items()
    )


@mcp.tool
def set_default_icon(
    key: Annotated[IconKey, Field(description="Icon setting to change")],
    path: Annotated[str, Field(description="Image path used for newly imported items")],
) -> str:
    """Change the default icon for one item sub-category."""
    set_item_icon(settings_store, key, path)
    return f"✅ {key} set to {path}"


logger.debug("✅ All tools successfully registered. Maledictum importer ready.")

def main() -> None:
    """Main entry point for the Maledictum Item Importer MCP Server."""
    mcp.run()

if __name__ == "__main__":
    main()
