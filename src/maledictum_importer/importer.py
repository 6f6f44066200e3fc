"""
Batch preview and import of pasted item tables.

``ImportOrchestrator`` parses every non-blank line independently, keeps the
successes and failures apart, and in import mode hands each record to the
catalog one at a time so that one failed creation never blocks the rest.

Custom traits and default icons are read from settings once per operation
and passed down as an immutable ``ImportContext``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, Field

from .catalog import ItemCreator
from .grammars import parse_line
from .models import CustomTraitDefinition, ItemIcons, ItemRecord, ItemType
from .settings import SettingsStore, get_custom_trait_definitions, get_item_icons
from .text import split_input_lines

logger = logging.getLogger("maledictum-importer")

DISPLAY_TRUNCATE = 50

EMPTY_INPUT_WARNING = "Please enter item data to {action}."
NOTHING_PARSED_WARNING = "No valid items could be parsed."


@dataclass(frozen=True)
class ImportContext:
    """Read-only configuration snapshot for one preview or import."""

    custom_traits: Mapping[str, CustomTraitDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )
    icons: ItemIcons = field(default_factory=ItemIcons)

    @classmethod
    def from_settings(cls, store: SettingsStore) -> "ImportContext":
        return cls(
            custom_traits=MappingProxyType(get_custom_trait_definitions(store)),
            icons=get_item_icons(store),
        )


class LineParseResult(BaseModel):
    """Outcome of parsing one input line; ``record`` is None on failure."""

    line_number: int = Field(description="1-based position among the non-blank input lines")
    line: str = Field(description="Original line text")
    record: ItemRecord | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def display_line(self) -> str:
        return f"{self.line[:DISPLAY_TRUNCATE]}..."

    def describe(self) -> str:
        if self.record is not None:
            return f"✓ {self.record.name} ({self.record.type.value})"
        return f"✗ Could not parse: {self.display_line}"


class ParseBatch(BaseModel):
    results: list[LineParseResult] = Field(default_factory=list)

    @property
    def records(self) -> list[ItemRecord]:
        return [r.record for r in self.results if r.record is not None]

    @property
    def failures(self) -> list[LineParseResult]:
        return [r for r in self.results if r.record is None]


class CreatedItem(BaseModel):
    name: str
    item_id: str


class CreationFailure(BaseModel):
    name: str = Field(description="Name of the record that could not be created")
    reason: str = Field(description="Error reported by the catalog")

    def message(self) -> str:
        return f'Failed to create "{self.name}": {self.reason}'


class ImportReport(BaseModel):
    """Result of a preview or an import run."""

    preview: bool = False
    item_type: str = ""
    lines: list[LineParseResult] = Field(default_factory=list)
    created: list[CreatedItem] = Field(default_factory=list)
    creation_failures: list[CreationFailure] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def parsed(self) -> list[ItemRecord]:
        return [r.record for r in self.lines if r.record is not None]

    @property
    def unparsed(self) -> list[LineParseResult]:
        return [r for r in self.lines if r.record is None]

    @property
    def status(self) -> str:
        """``success``, ``success_with_warnings`` or ``failed``."""
        succeeded = len(self.parsed) if self.preview else len(self.created)
        if not succeeded:
            return "failed"
        if self.unparsed or self.creation_failures or self.warnings:
            return "success_with_warnings"
        return "success"

    def format(self) -> str:
        """Format the report as a readable text block."""
        lines: list[str] = []

        if self.preview:
            lines.append(f"Preview - {len(self.parsed)} of {len(self.lines)} line(s) parsed")
            lines.extend(result.describe() for result in self.lines)
            lines.append("")
        else:
            lines.append(f"Import Report - {self.item_type}")
            lines.append(f"Status: {self.status.upper().replace('_', ' ')}")
            lines.append("")
            if self.created:
                lines.append(f"Successfully imported {len(self.created)} item(s).")
                for item in self.created:
                    lines.append(f"  - {item.name}")
                lines.append("")
            if self.creation_failures:
                lines.append(f"Failed ({len(self.creation_failures)}):")
                for failure in self.creation_failures:
                    lines.append(f"  - {failure.message()}")
                lines.append("")
            if self.unparsed:
                lines.append(f"Could not parse ({len(self.unparsed)}):")
                for result in self.unparsed:
                    lines.append(f"  - {result.display_line}")
                lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")
            lines.append("")

        return "\n".join(lines).rstrip()


class ImportOrchestrator:
    """Runs previews and imports of pasted item tables.

    Args:
        settings: Store holding custom traits and default icons.
        creator: Catalog that creates items; only needed for imports.
    """

    def __init__(self, settings: SettingsStore, creator: ItemCreator | None = None):
        self.settings = settings
        self.creator = creator

    def snapshot(self) -> ImportContext:
        return ImportContext.from_settings(self.settings)

    @staticmethod
    def parse(
        raw_text: str,
        item_type: ItemType | str,
        weapon_category: str | None = None,
        context: ImportContext | None = None,
    ) -> ParseBatch:
        """Parse every non-blank line of ``raw_text`` independently."""
        context = context or ImportContext()
        batch = ParseBatch()

        for number, line in enumerate(split_input_lines(raw_text), start=1):
            record = parse_line(
                line,
                item_type,
                weapon_category,
                custom_traits=context.custom_traits,
                icons=context.icons,
            )
            if record is None:
                logger.debug(f"Line {number} could not be parsed: {line[:DISPLAY_TRUNCATE]}")
            else:
                logger.debug(f"Line {number} parsed as {record.type.value} '{record.name}'")
            batch.results.append(LineParseResult(line_number=number, line=line, record=record))

        return batch

    def preview(
        self,
        raw_text: str,
        item_type: ItemType | str,
        weapon_category: str | None = None,
    ) -> ImportReport:
        """Parse without creating anything."""
        report = ImportReport(preview=True, item_type=str(getattr(item_type, "value", item_type)))
        if not raw_text or not raw_text.strip():
            report.warnings.append(EMPTY_INPUT_WARNING.format(action="preview"))
            return report

        batch = self.parse(raw_text, item_type, weapon_category, self.snapshot())
        report.lines = batch.results
        if not batch.records:
            report.warnings.append(NOTHING_PARSED_WARNING)
        return report

    async def import_items(
        self,
        raw_text: str,
        item_type: ItemType | str,
        weapon_category: str | None = None,
        folder_id: str | None = None,
    ) -> ImportReport:
        """Parse ``raw_text`` and create every parsed record, one at a time.

        A failed creation is recorded in the report and the remaining records
        are still created. Records created before a failure are kept.

        Raises:
            ValueError: If the orchestrator was built without a creator.
        """
        if self.creator is None:
            raise ValueError("ImportOrchestrator needs an item creator to import")

        report = ImportReport(preview=False, item_type=str(getattr(item_type, "value", item_type)))
        if not raw_text or not raw_text.strip():
            report.warnings.append(EMPTY_INPUT_WARNING.format(action="import"))
            return report

        batch = self.parse(raw_text, item_type, weapon_category, self.snapshot())
        report.lines = batch.results
        for failure in batch.failures:
            logger.warning(f"⚠️ Skipping unparsable line {failure.line_number}: {failure.display_line}")

        records = batch.records
        if not records:
            report.warnings.append(NOTHING_PARSED_WARNING)
            return report

        for record in records:
            target = record.with_folder(folder_id)
            try:
                item_id = await self.creator.create(target.to_document())
            except Exception as e:
                logger.error(f"❌ Failed to create '{record.name}': {e}")
                report.creation_failures.append(CreationFailure(name=record.name, reason=str(e)))
                continue
            report.created.append(CreatedItem(name=record.name, item_id=item_id))

        logger.info(f"Imported {len(report.created)} of {len(records)} parsed item(s)")
        return report
