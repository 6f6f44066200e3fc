"""
Maledictum Item Importer - turns pasted Imperium Maledictum equipment tables into item documents.
"""

from .grammars import parse_line
from .importer import ImportContext, ImportOrchestrator, ImportReport
from .models import ItemRecord, ItemType
from .settings import JsonSettingsStore, MemorySettingsStore
from .text import format_pasted_text, normalize_text

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("maledictum-importer")
except Exception:
    __version__ = "0.2.0"  # Fallback if metadata unavailable
__all__ = [
    "parse_line",
    "format_pasted_text",
    "normalize_text",
    "ImportContext",
    "ImportOrchestrator",
    "ImportReport",
    "ItemRecord",
    "ItemType",
    "JsonSettingsStore",
    "MemorySettingsStore",
]
