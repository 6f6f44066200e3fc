"""
Text clean-up for pasted item tables.

Covers the three line-level steps that run before any grammar sees the data:

- ``normalize_text``: canonical line endings, straight quotes, plain spaces.
- ``format_pasted_text``: best-effort conversion of tab/space aligned tables
  into the pipe-delimited layout the grammars expect.
- ``tokenize_line``: split one normalized line into trimmed fields.
"""

from __future__ import annotations

import re

FIELD_DELIMITER = "|"

# Rows that start with one of these words are column headers copied with the table.
HEADER_PATTERN = re.compile(r"^(Name|Weapon|Armour|Protection|Force Field)", re.IGNORECASE)

_QUOTE_TABLE = str.maketrans({
    "\u201c": '"',
    "\u201d": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u00a0": " ",
})

_TRAILING_SPACE_RE = re.compile(r"[ \t]+\n")
_TAB_RUN_RE = re.compile(r"\t+")
_SPACE_RUN_RE = re.compile(r"\s{2,}")
_PIPE_RUN_RE = re.compile(r"\|(?:\s*\|)+")
_EDGE_PIPE_RE = re.compile(r"^\||\|$")


def normalize_text(text: str | None) -> str:
    """Canonicalize pasted text.

    Collapses ``\\r\\n`` and ``\\r`` to ``\\n``, replaces curly quotes and
    non-breaking spaces, drops whitespace before newlines and trims the result.
    Never raises.
    """
    value = "" if text is None else str(text)
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = value.translate(_QUOTE_TABLE)
    value = _TRAILING_SPACE_RE.sub("\n", value)
    return value.strip()


def format_pasted_text(text: str) -> str:
    """Reformat a raw paste into pipe-delimited lines.

    Header rows and blank lines are dropped, tab runs and runs of two or more
    whitespace characters become `` | ``, and doubled or edge pipes are removed.
    Already pipe-delimited input comes back unchanged.

    Args:
        text: Raw multi-line paste from a PDF or spreadsheet.

    Returns:
        The reformatted text, one item per line.
    """
    formatted: list[str] = []

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if HEADER_PATTERN.match(line):
            continue

        line = _TAB_RUN_RE.sub(" | ", line)
        line = _SPACE_RUN_RE.sub(" | ", line)
        line = _PIPE_RUN_RE.sub("|", line).strip()
        line = _EDGE_PIPE_RE.sub("", line).strip()

        if line:
            formatted.append(line)

    return "\n".join(formatted)


def tokenize_line(line: str) -> list[str] | None:
    """Split a line on ``|`` into trimmed fields.

    Returns None when the line has fewer than two fields. Extra fields are kept;
    grammars treat everything past their fixed columns as trait text.
    """
    normalized = normalize_text(line)
    fields = [part.strip() for part in normalized.split(FIELD_DELIMITER)]
    if len(fields) < 2:
        return None
    return fields


def split_input_lines(raw_text: str | None) -> list[str]:
    """Return the non-blank lines of a multi-line paste, in order."""
    if not raw_text:
        return []
    return [line for line in raw_text.strip().splitlines() if line.strip()]
