"""Shared data structures and payload decoding for metadata mappings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping as MappingABC


class MetadataError(Exception):
    """Base error for user-facing metadata failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchError(MetadataError):
    """Raised when stats or the mapping list cannot be loaded."""


class MutationError(MetadataError):
    """Raised when an upsert or delete is rejected by the server."""


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def expect_dict(value: object, context: str) -> dict:
    if isinstance(value, dict):
        return value
    value_type = type(value).__name__
    raise ValueError(f"{context} has unexpected type '{value_type}'")


@dataclass(frozen=True)
class Mapping:
    """One infohash -> arr label record as served by api/metadata/list."""

    infohash: str | None
    torrent_id: Any = None
    torrent_name: str | None = None
    arr_name: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_payload(cls, payload: MappingABC[str, Any]) -> "Mapping":
        return cls(
            infohash=_optional_str(payload.get("infohash")),
            torrent_id=payload.get("torrent_id"),
            torrent_name=_optional_str(payload.get("torrent_name")),
            arr_name=_optional_str(payload.get("arr_name")),
            updated_at=_optional_str(payload.get("updated_at")),
        )

    @property
    def title(self) -> str:
        return self.torrent_name or self.infohash or ""

    def to_upsert_payload(self, arr_name: str) -> dict[str, Any]:
        return {
            "infohash": self.infohash,
            "torrent_id": self.torrent_id,
            "torrent_name": self.torrent_name,
            "arr_name": arr_name,
        }


@dataclass(frozen=True)
class Stats:
    """Aggregate mapping counts."""

    total: int | None
    by_arr: dict[str, int] = field(default_factory=dict)

    @property
    def arr_names(self) -> list[str]:
        return sorted(self.by_arr)


def decode_stats(payload: object) -> Stats:
    root = expect_dict(payload, "stats payload")
    by_arr_raw = root.get("by_arr") or {}
    by_arr = expect_dict(by_arr_raw, "stats payload.by_arr")
    total = root.get("total")
    return Stats(
        total=int(total) if total is not None else None,
        by_arr={str(name): int(count) for name, count in by_arr.items()},
    )


def decode_mappings(payload: object) -> list[Mapping]:
    # The server encodes an empty table as null.
    if payload is None:
        return []
    if not isinstance(payload, list):
        value_type = type(payload).__name__
        raise ValueError(f"mappings payload has unexpected type '{value_type}'")
    return [
        Mapping.from_payload(expect_dict(entry, f"mappings payload[{idx}]"))
        for idx, entry in enumerate(payload)
    ]
