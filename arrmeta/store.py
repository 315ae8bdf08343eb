"""In-memory snapshot of mapping stats and rows, refreshed from the server."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable

from arrmeta import logger
from arrmeta.models import FetchError, Mapping, Stats, decode_mappings, decode_stats
from arrmeta.transport import MappingApi

STATS_FAILED_MESSAGE = "Failed to load stats"
MAPPINGS_FAILED_MESSAGE = "Failed to load mappings"

MappingsListener = Callable[[list[Mapping]], None]


class MappingStore:
    """Holds the latest stats and mapping list snapshots.

    Each resource is committed as soon as its own fetch succeeds, so a
    refresh that fails on one resource still leaves the other one fresh.
    Overlapping refreshes are not serialized: the last commit per resource
    wins.
    """

    def __init__(self, api: MappingApi) -> None:
        self.api = api
        self.stats: Stats | None = None
        self.mappings: list[Mapping] = []
        self.stats_fetched_at: datetime | None = None
        self.mappings_fetched_at: datetime | None = None
        self._listeners: list[MappingsListener] = []

    def subscribe(self, listener: MappingsListener) -> None:
        self._listeners.append(listener)

    def find(self, infohash: str | None) -> Mapping | None:
        for mapping in self.mappings:
            if mapping.infohash == infohash:
                return mapping
        return None

    async def load_stats(self) -> Stats:
        response = await self.api.stats()
        if not response.ok:
            raise FetchError(STATS_FAILED_MESSAGE)
        stats = decode_stats(response.json())
        self.stats = stats
        self.stats_fetched_at = datetime.now()
        logger.debug(f"Committed stats snapshot: total={stats.total}, arrs={len(stats.by_arr)}")
        return stats

    async def load_mappings(self) -> list[Mapping]:
        response = await self.api.list_mappings()
        if not response.ok:
            raise FetchError(MAPPINGS_FAILED_MESSAGE)
        mappings = decode_mappings(response.json())
        self.mappings = mappings
        self.mappings_fetched_at = datetime.now()
        logger.debug(f"Committed mapping snapshot: {len(mappings)} row(s)")
        for listener in list(self._listeners):
            listener(list(mappings))
        return mappings

    async def refresh_all(self) -> None:
        """Fetch stats and mappings concurrently; raise the first failure."""
        await asyncio.gather(self.load_stats(), self.load_mappings())
