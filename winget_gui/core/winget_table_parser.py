import re
from dataclasses import dataclass
from typing import Final, Mapping

from logly import logger
from wcwidth import wcwidth

from .winget_types import ColumnSpec, PackageRecord, SourceSummary

# Localized header labels per field. Matching is case-insensitive; adding a
# locale only means adding words here.
PACKAGE_COLUMN_ALIASES: Final[Mapping[str, frozenset[str]]] = {
    "name": frozenset({"name", "nom", "nombre", "nome", "naam"}),
    "id": frozenset({"id", "id."}),
    "version": frozenset({"version", "versión", "versão", "versione", "versie"}),
    "source": frozenset({"source", "quelle", "origen", "fonte", "origine", "bron"}),
    "available": frozenset(
        {"available", "verfügbar", "disponible", "disponível", "disponibile", "beschikbaar"}
    ),
}

SOURCE_COLUMN_ALIASES: Final[Mapping[str, frozenset[str]]] = {
    "name": PACKAGE_COLUMN_ALIASES["name"],
    "argument": frozenset({"argument", "argumento", "argomento", "url"}),
    "type": frozenset({"type", "typ", "tipo"}),
}

_SEPARATOR_MIN_LENGTH: Final[int] = 10

# "2 upgrades available.", "2 Pakete verfügen über Upgrades." but not
# "7-Zip 25.01 (x64)" or "2026.01.29".
_FOOTER_RE = re.compile(r"[0-9]+ ")


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Resolved column index per package field (None when absent)."""

    name: int | None = None
    id: int | None = None
    version: int | None = None
    source: int | None = None
    available: int | None = None


def char_width(ch: str) -> int:
    """Monospace display width of a single character (control chars count 0)."""
    return max(wcwidth(ch), 0)


def is_separator_line(line: str) -> bool:
    trimmed = line.strip()
    return (
        len(trimmed) > _SEPARATOR_MIN_LENGTH
        and "-" in trimmed
        and all(ch in "- " for ch in trimmed)
    )


def find_separator(lines: list[str]) -> int | None:
    """Returns the index of the table separator line, or None.

    The first line is never a separator since a header must precede it.
    """
    for index, line in enumerate(lines):
        if index > 0 and is_separator_line(line):
            return index
    return None


def detect_columns(header: str) -> list[ColumnSpec]:
    """Splits a header line into column names with display-width offsets.

    Args:
        header: The line right above the separator.

    Returns:
        Columns in left-to-right order. Offsets are measured in terminal columns
        so that rows containing wide or multi-byte glyphs still line up.
    """
    columns: list[ColumnSpec] = []
    width = 0
    i = 0
    while i < len(header):
        while i < len(header) and header[i] == " ":
            width += 1
            i += 1
        if i >= len(header):
            break

        start_width = width
        start = i
        while i < len(header) and header[i] != " ":
            width += char_width(header[i])
            i += 1
        columns.append(ColumnSpec(name=header[start:i], start=start_width))
    return columns


def is_footer_line(line: str) -> bool:
    """Whether a line is an informational count message rather than a row.

    This is a best-effort heuristic: a package whose display name is a bare
    number followed by a word would be misclassified.
    """
    return _FOOTER_RE.match(line.lstrip()) is not None


def is_plausible_identifier(package_id: str) -> bool:
    return bool(package_id) and ("." in package_id or "\\" in package_id)


def extract_field(line: str, columns: list[ColumnSpec], index: int | None) -> str:
    """Extracts the text of one column from a fixed-width row.

    A character belongs to the column if the display cells it occupies overlap
    `[start, end)`, where `end` is the next column's start (unbounded for the
    last column). A zero-width character belongs to the column it sits in.
    """
    if index is None or index >= len(columns):
        return ""

    col_start = columns[index].start
    col_end = columns[index + 1].start if index + 1 < len(columns) else None

    chars: list[str] = []
    width = 0
    for ch in line:
        cw = char_width(ch)
        overlaps = width + cw > col_start or (cw == 0 and width >= col_start)
        if overlaps and (col_end is None or width < col_end):
            chars.append(ch)
        width += cw
        if col_end is not None and width >= col_end:
            break
    return "".join(chars).strip()


def _find_column(columns: list[ColumnSpec], aliases: frozenset[str]) -> int | None:
    for index, column in enumerate(columns):
        if column.name.casefold() in aliases:
            return index
    return None


def resolve_package_columns(columns: list[ColumnSpec]) -> ColumnMapping:
    """Maps package fields to column indices.

    Header names are looked up in `PACKAGE_COLUMN_ALIASES`. When the id column
    cannot be found (an unknown locale), tables with at least four columns fall
    back to winget's fixed column order.
    """
    found = {
        field: _find_column(columns, aliases)
        for field, aliases in PACKAGE_COLUMN_ALIASES.items()
    }
    if found["id"] is not None or len(columns) < 4:
        return ColumnMapping(**found)

    if len(columns) >= 5:
        return ColumnMapping(name=0, id=1, version=2, available=3, source=4)
    return ColumnMapping(name=0, id=1, version=2, source=3)


def parse_table_row(
    line: str,
    columns: list[ColumnSpec],
    mapping: ColumnMapping | None = None,
) -> PackageRecord | None:
    """Parses one data line into a record, or None if the row is implausible."""
    if mapping is None:
        mapping = resolve_package_columns(columns)

    package_id = extract_field(line, columns, mapping.id)
    if not is_plausible_identifier(package_id):
        logger.debug(f"Skipping row with implausible id {package_id!r}: {line!r}")
        return None

    return PackageRecord(
        id=package_id,
        name=extract_field(line, columns, mapping.name),
        version=extract_field(line, columns, mapping.version),
        source=extract_field(line, columns, mapping.source),
        available_version=extract_field(line, columns, mapping.available),
    )


def _split_table(text: str) -> tuple[list[ColumnSpec], list[str]]:
    """Returns the header layout and the candidate data lines below it."""
    lines = text.splitlines()
    sep_index = find_separator(lines)
    if sep_index is None:
        return [], []

    columns = detect_columns(lines[sep_index - 1])
    rows = [
        line
        for line in lines[sep_index + 1 :]
        if line.strip() and not is_footer_line(line)
    ]
    return columns, rows


def parse_packages_from_table(text: str) -> list[PackageRecord]:
    """Parses `winget search`/`list`/`upgrade` output into records.

    Args:
        text: Normalized stdout text.

    Returns:
        Parsed records. An output without a table yields an empty list.
    """
    columns, rows = _split_table(text)
    if not columns:
        return []

    mapping = resolve_package_columns(columns)
    packages: list[PackageRecord] = []
    for line in rows:
        record = parse_table_row(line, columns, mapping)
        if record is not None:
            packages.append(record)
    return packages


def parse_sources_from_table(text: str) -> list[SourceSummary]:
    """Parses `winget source list` output into source summaries."""
    columns, rows = _split_table(text)
    if not columns:
        return []

    name_idx = _find_column(columns, SOURCE_COLUMN_ALIASES["name"])
    arg_idx = _find_column(columns, SOURCE_COLUMN_ALIASES["argument"])
    type_idx = _find_column(columns, SOURCE_COLUMN_ALIASES["type"])
    if name_idx is None and len(columns) >= 2:
        name_idx, arg_idx = 0, 1
        type_idx = 2 if len(columns) >= 3 else None

    sources: list[SourceSummary] = []
    for line in rows:
        name = extract_field(line, columns, name_idx)
        if not name:
            continue
        sources.append(
            SourceSummary(
                name=name,
                argument=extract_field(line, columns, arg_idx),
                type=extract_field(line, columns, type_idx),
            )
        )
    return sources
