"""Command dispatch for the metadata mapping page."""

from __future__ import annotations

from arrmeta import logger
from arrmeta.models import Mapping, MetadataError
from arrmeta.notifications import Confirmer, Notifier
from arrmeta.renderer import TableRow, render_rows
from arrmeta.store import MappingStore
from arrmeta.transport import MappingApi, MappingTransport
from arrmeta.view_state import ViewState
from arrmeta.workflows import DeleteWorkflow, EditWorkflow

LOAD_FAILED_MESSAGE = "Failed to load metadata"
ACTION_FAILED_MESSAGE = "Action failed"
SAVE_FAILED_MESSAGE = "Failed to save"


def _error_message(exc: Exception, default: str) -> str:
    if isinstance(exc, MetadataError):
        return exc.message or default
    return str(exc) or default


class MetadataPage:
    """One independent mapping page: store, view state, rows and dialogs."""

    def __init__(
        self,
        transport: MappingTransport,
        notifier: Notifier,
        confirmer: Confirmer,
    ) -> None:
        self.api = MappingApi(transport)
        self.notifier = notifier
        self.store = MappingStore(self.api)
        self.view = ViewState()
        self.search_text = ""
        self.rows: list[TableRow] = render_rows([], "")
        self.editor = EditWorkflow(self.api, notifier, self.refresh)
        self.deleter = DeleteWorkflow(self.api, notifier, confirmer, self.refresh)
        self.store.subscribe(self._on_mappings_committed)

    @property
    def mappings(self) -> list[Mapping]:
        return self.store.mappings

    def _on_mappings_committed(self, mappings: list[Mapping]) -> None:
        self.rows = render_rows(mappings, self.search_text)

    async def refresh(self) -> None:
        self.view.begin_refresh()
        try:
            await self.store.refresh_all()
        except Exception as exc:
            message = _error_message(exc, LOAD_FAILED_MESSAGE)
            logger.error(f"Metadata refresh failed: {message}")
            self.view.refresh_failed(message)
            return
        self.view.refresh_succeeded()

    async def start(self) -> None:
        await self.refresh()

    async def retry(self) -> None:
        await self.refresh()

    def on_search_changed(self, text: str) -> list[TableRow]:
        self.search_text = text
        self.rows = render_rows(self.store.mappings, text)
        return self.rows

    def on_edit_requested(self, infohash: str | None) -> bool:
        mapping = self.store.find(infohash) if infohash else None
        if mapping is None:
            return False
        self.editor.open(mapping)
        return True

    async def on_delete_requested(self, infohash: str | None) -> bool:
        mapping = self.store.find(infohash) if infohash else None
        target = f"{mapping.title} ({infohash})" if mapping and mapping.torrent_name else infohash
        return await self.deleter.delete(infohash, target=target)

    async def dispatch(self, action: str, infohash: str | None) -> bool:
        """Run a row action; failures become an error notification."""
        try:
            if action == "edit":
                return self.on_edit_requested(infohash)
            if action == "delete":
                return await self.on_delete_requested(infohash)
            logger.debug(f"Ignoring unknown row action '{action}'")
            return False
        except Exception as exc:
            message = _error_message(exc, ACTION_FAILED_MESSAGE)
            logger.error(f"Row action '{action}' failed: {message}")
            self.notifier.notify(message, "error")
            return False

    async def on_save_requested(self, label: str) -> bool:
        self.editor.label = label
        try:
            return await self.editor.save()
        except Exception as exc:
            message = _error_message(exc, SAVE_FAILED_MESSAGE)
            logger.error(f"Saving mapping failed: {message}")
            self.notifier.notify(message, "error")
            return False

    def on_cancel_requested(self) -> None:
        self.editor.close()
