"""aiohttp transport for the metadata mapping endpoints."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Protocol
from urllib.parse import quote

import aiohttp

from arrmeta import logger
from arrmeta.__version__ import __version__
from arrmeta.config import ServerConfig

DEFAULT_USER_AGENT = f"Arrmeta/{__version__}"

STATS_PATH = "api/metadata/stats"
LIST_PATH = "api/metadata/list"
SET_PATH = "api/metadata/set"
DELETE_PATH_TEMPLATE = "api/metadata/{infohash}"


@dataclass(frozen=True)
class TransportResponse:
    """Status and raw body of a completed request."""

    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body

    def json(self) -> Any:
        return json.loads(self.body)


class MappingTransport(Protocol):
    """Network primitive used by the store and workflows."""

    async def request(
        self,
        path: str,
        method: str = "GET",
        json_body: Any = None,
    ) -> TransportResponse:
        ...


class HttpTransport:
    """Issue requests against the configured server with a shared session."""

    def __init__(self, server: ServerConfig):
        self.server = server
        self.timeout = server.timeout
        self.base_url = server.url.rstrip("/")
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        path: str,
        method: str = "GET",
        json_body: Any = None,
    ) -> TransportResponse:
        url = self.url_for(path)
        logger.get_logger().api_request(method, url, json_body)
        request_start = time.time()
        session = await self._ensure_session()
        kwargs: Dict[str, Any] = {}
        if json_body is not None:
            kwargs["json"] = json_body
        async with session.request(method, url, **kwargs) as response:
            body = await response.text()
            elapsed_ms = (time.time() - request_start) * 1000
        logger.get_logger().api_response(response.status, body, elapsed_ms)
        return TransportResponse(status=response.status, body=body)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(
                    headers=self._get_headers(),
                    timeout=timeout,
                )
            return self._session

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": DEFAULT_USER_AGENT,
        }

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()


class MappingApi:
    """The four metadata endpoints, returning raw transport responses."""

    def __init__(self, transport: MappingTransport) -> None:
        self.transport = transport

    async def stats(self) -> TransportResponse:
        return await self.transport.request(STATS_PATH)

    async def list_mappings(self) -> TransportResponse:
        return await self.transport.request(LIST_PATH)

    async def upsert(self, payload: Dict[str, Any]) -> TransportResponse:
        return await self.transport.request(SET_PATH, method="POST", json_body=payload)

    async def delete(self, infohash: str) -> TransportResponse:
        path = DELETE_PATH_TEMPLATE.format(infohash=quote(infohash, safe=""))
        return await self.transport.request(path, method="DELETE")
