"""Project the mapping snapshot into table rows and rich renderables."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence, Union

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from arrmeta.models import Mapping, Stats

EMPTY_CELL = "-"
NO_RESULTS_MESSAGE = "No mappings found."

_FRACTION_RE = re.compile(r"\.(\d+)")


@dataclass(frozen=True)
class MappingRow:
    infohash: str | None
    infohash_text: str
    name_text: str
    arr_text: str
    updated_text: str


@dataclass(frozen=True)
class PlaceholderRow:
    message: str = NO_RESULTS_MESSAGE


TableRow = Union[MappingRow, PlaceholderRow]


def format_date(value: str | None) -> str:
    """Local-time display for a server timestamp; raw text if unparseable."""
    if not value:
        return EMPTY_CELL
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    # Go trims trailing zeros and emits up to nanoseconds; fromisoformat on
    # 3.10 only takes exactly 3 or 6 fractional digits.
    normalized = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return value
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _matches(mapping: Mapping, query: str) -> bool:
    return (
        query in (mapping.infohash or "").casefold()
        or query in (mapping.torrent_name or "").casefold()
        or query in (mapping.arr_name or "").casefold()
    )


def filter_mappings(mappings: Sequence[Mapping], search_text: str | None) -> list[Mapping]:
    query = (search_text or "").strip().casefold()
    if not query:
        return list(mappings)
    return [mapping for mapping in mappings if _matches(mapping, query)]


def to_row(mapping: Mapping) -> MappingRow:
    return MappingRow(
        infohash=mapping.infohash,
        infohash_text=mapping.infohash or EMPTY_CELL,
        name_text=mapping.torrent_name or EMPTY_CELL,
        arr_text=mapping.arr_name or EMPTY_CELL,
        updated_text=format_date(mapping.updated_at),
    )


def render_rows(mappings: Sequence[Mapping], search_text: str | None) -> list[TableRow]:
    """Rows for the current snapshot; a single placeholder when none match."""
    filtered = filter_mappings(mappings, search_text)
    if not filtered:
        return [PlaceholderRow()]
    return [to_row(mapping) for mapping in filtered]


@dataclass(frozen=True)
class StatsSummary:
    total_text: str
    arr_count_text: str
    arr_list_text: str


def summarize_stats(stats: Stats | None) -> StatsSummary:
    if stats is None:
        return StatsSummary(EMPTY_CELL, "0", EMPTY_CELL)
    names = stats.arr_names
    return StatsSummary(
        total_text=str(stats.total) if stats.total is not None else EMPTY_CELL,
        arr_count_text=str(len(names)),
        arr_list_text=", ".join(names) if names else EMPTY_CELL,
    )


def render_stats(console: Console, stats: Stats | None) -> None:
    summary = summarize_stats(stats)
    table = Table(title="Metadata Mappings", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    table.add_row("Total", summary.total_text)
    table.add_row("Arrs", summary.arr_count_text)
    table.add_row("Arr names", escape(summary.arr_list_text))
    console.print(table)


def render_table(console: Console, rows: Iterable[TableRow], limit: int = 0) -> None:
    table = Table(title="Mappings")
    table.add_column("#", style="grey50", justify="right")
    table.add_column("Infohash", style="cyan", overflow="fold")
    table.add_column("Torrent")
    table.add_column("Arr", style="yellow")
    table.add_column("Updated", style="green", no_wrap=True)
    shown = 0
    hidden = 0
    for row in rows:
        if isinstance(row, PlaceholderRow):
            table.add_row("", row.message, "", "", "")
            continue
        if limit and shown >= limit:
            hidden += 1
            continue
        shown += 1
        table.add_row(
            str(shown),
            escape(row.infohash_text),
            escape(row.name_text),
            escape(row.arr_text),
            row.updated_text,
        )
    console.print(table)
    if hidden:
        console.print(f"... {hidden:,} more row(s); refine the search to narrow the list")
