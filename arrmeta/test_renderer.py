from __future__ import annotations

from datetime import datetime, timezone

import pytest
from rich.console import Console

from arrmeta.models import Mapping, Stats
from arrmeta.renderer import (
    EMPTY_CELL,
    NO_RESULTS_MESSAGE,
    MappingRow,
    PlaceholderRow,
    filter_mappings,
    format_date,
    render_rows,
    render_stats,
    render_table,
    summarize_stats,
)

SNAPSHOT = [
    Mapping(infohash="abc", torrent_name="Foo", arr_name="Sonarr"),
    Mapping(infohash="DEF123", torrent_name="Bar Movie", arr_name="radarr"),
    Mapping(infohash="fff", torrent_name=None, arr_name="Sonarr-4K"),
    Mapping(infohash="0a0", torrent_name="Something Else", arr_name=None),
]


def test_search_matches_single_row() -> None:
    rows = render_rows([Mapping(infohash="abc", torrent_name="Foo", arr_name="Sonarr")], "foo")
    assert len(rows) == 1
    assert isinstance(rows[0], MappingRow)
    assert rows[0].infohash == "abc"


def test_search_without_match_renders_placeholder() -> None:
    rows = render_rows([Mapping(infohash="abc", torrent_name="Foo", arr_name="Sonarr")], "zzz")
    assert rows == [PlaceholderRow()]
    assert rows[0].message == NO_RESULTS_MESSAGE


def test_empty_snapshot_renders_placeholder() -> None:
    assert render_rows([], "") == [PlaceholderRow()]


@pytest.mark.parametrize("query", ["", "   ", "a", "SONARR", "def", "movie", "4k", "else", "zz", " Foo "])
def test_filter_matches_any_searchable_field_case_insensitively(query: str) -> None:
    needle = query.strip().lower()
    expected = [
        m
        for m in SNAPSHOT
        if not needle
        or needle in (m.infohash or "").lower()
        or needle in (m.torrent_name or "").lower()
        or needle in (m.arr_name or "").lower()
    ]
    assert filter_mappings(SNAPSHOT, query) == expected


def test_filter_preserves_snapshot_order() -> None:
    result = filter_mappings(SNAPSHOT, "sonarr")
    assert [m.infohash for m in result] == ["abc", "fff"]


def test_filter_always_starts_from_full_snapshot() -> None:
    narrowed = filter_mappings(SNAPSHOT, "foo")
    assert len(narrowed) == 1
    assert filter_mappings(SNAPSHOT, "") == SNAPSHOT


def test_rows_show_dash_for_missing_fields() -> None:
    rows = render_rows([Mapping(infohash=None)], "")
    row = rows[0]
    assert isinstance(row, MappingRow)
    assert row.infohash_text == EMPTY_CELL
    assert row.name_text == EMPTY_CELL
    assert row.arr_text == EMPTY_CELL
    assert row.updated_text == EMPTY_CELL


def test_format_date_converts_to_local_time() -> None:
    expected = datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    assert format_date("2024-05-01T10:20:30Z") == expected
    assert format_date("2024-05-01T10:20:30.123456789Z") == expected


@pytest.mark.parametrize("value", ["2024-05-01T10:20:30.5Z", "2024-05-01T10:20:30.12Z", "2024-05-01T10:20:30.1234Z"])
def test_format_date_accepts_trimmed_fractional_seconds(value: str) -> None:
    expected = datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    assert format_date(value) == expected


def test_format_date_passes_unparseable_values_through() -> None:
    assert format_date("yesterday") == "yesterday"
    assert format_date(None) == EMPTY_CELL
    assert format_date("") == EMPTY_CELL


def test_summarize_stats_sorts_arr_names() -> None:
    summary = summarize_stats(Stats(total=5, by_arr={"sonarr": 3, "lidarr": 1, "radarr": 1}))
    assert summary.total_text == "5"
    assert summary.arr_count_text == "3"
    assert summary.arr_list_text == "lidarr, radarr, sonarr"


def test_summarize_stats_without_data() -> None:
    assert summarize_stats(None).total_text == EMPTY_CELL
    empty = summarize_stats(Stats(total=None, by_arr={}))
    assert empty.total_text == EMPTY_CELL
    assert empty.arr_list_text == EMPTY_CELL


def test_render_table_outputs_rows_and_literal_brackets() -> None:
    console = Console(record=True, width=200)
    rows = render_rows([Mapping(infohash="abc", torrent_name="[group] Foo", arr_name="sonarr")], "")
    render_table(console, rows)
    output = console.export_text()
    assert "Mappings" in output
    assert "[group] Foo" in output
    assert "sonarr" in output


def test_render_table_limits_rows() -> None:
    console = Console(record=True, width=200)
    render_table(console, render_rows(SNAPSHOT, ""), limit=2)
    output = console.export_text()
    assert "2 more row(s)" in output


def test_render_table_shows_placeholder_message() -> None:
    console = Console(record=True, width=200)
    render_table(console, [PlaceholderRow()])
    assert NO_RESULTS_MESSAGE in console.export_text()


def test_render_stats_outputs_summary() -> None:
    console = Console(record=True, width=200)
    render_stats(console, Stats(total=2, by_arr={"sonarr": 2}))
    output = console.export_text()
    assert "Total" in output
    assert "sonarr" in output
