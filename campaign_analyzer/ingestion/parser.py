"""Minimal CSV parser for platform report exports.

Splits on bare commas with no quote handling: a field containing a literal
comma is split into two cells.
"""

import io
import re

import polars as pl

from .registry import load_registry

LINE_SPLIT = re.compile(r"\r\n|\n|\r")
BOM = "\ufeff"


def _surviving_lines(text: str, footer_markers: list[str]) -> list[str]:
    """Drop blank lines and report footer lines."""
    lines: list[str] = []
    for line in LINE_SPLIT.split(text.lstrip(BOM)):
        stripped = line.strip()
        if not stripped:
            continue
        if any(stripped.startswith(marker) for marker in footer_markers):
            continue
        lines.append(line)
    return lines


def _unique_headers(headers: list[str]) -> list[str]:
    """Suffix repeated names: Clicks, Clicks -> Clicks, Clicks_1."""
    seen: set[str] = set()
    unique: list[str] = []
    for header in headers:
        name, n = header, 0
        while name in seen:
            n += 1
            name = f"{header}_{n}"
        seen.add(name)
        unique.append(name)
    return unique


def parse_headers(text: str, footer_markers: list[str] | None = None) -> list[str]:
    """Return the header row only, repeated names suffixed."""
    if footer_markers is None:
        footer_markers = load_registry().footer_markers
    lines = _surviving_lines(text, footer_markers)
    if not lines:
        return []
    return _unique_headers([h.strip() for h in lines[0].split(",")])


def read_frame(text: str, footer_markers: list[str] | None = None) -> pl.DataFrame:
    """Read CSV text into an all-string DataFrame.

    Args:
        text: Raw file contents
        footer_markers: Line prefixes to discard (default: registry markers,
            "Totals" and "Report Description")

    Returns:
        One row per data line in file order, one Utf8 column per header.
        Cells are whitespace-stripped, missing trailing cells are "", extra
        cells are ignored. Empty input returns an empty frame.
    """
    if footer_markers is None:
        footer_markers = load_registry().footer_markers

    lines = _surviving_lines(text, footer_markers)
    if not lines:
        return pl.DataFrame()

    headers = _unique_headers([h.strip() for h in lines[0].split(",")])
    schema = {name: pl.Utf8 for name in headers}
    if len(lines) == 1:
        return pl.DataFrame(schema=schema)

    df = pl.read_csv(
        io.StringIO("\n".join(lines[1:])),
        has_header=False,
        schema=schema,
        quote_char=None,
        truncate_ragged_lines=True,
        missing_utf8_is_empty_string=True,
    )
    return df.with_columns(pl.all().fill_null("").str.strip_chars())


def parse_csv(text: str, footer_markers: list[str] | None = None) -> list[dict[str, str]]:
    """Parse CSV text into header-keyed records (see read_frame)."""
    return read_frame(text, footer_markers).to_dicts()
