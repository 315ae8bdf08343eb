"""Edit and delete workflows acting on the remote mapping service."""

from __future__ import annotations

from typing import Awaitable, Callable

from arrmeta import logger
from arrmeta.models import Mapping, MutationError
from arrmeta.notifications import Confirmer, Notifier
from arrmeta.transport import MappingApi, TransportResponse

ARR_REQUIRED_MESSAGE = "Arr name is required."
UPDATED_MESSAGE = "Mapping updated."
DELETED_MESSAGE = "Mapping deleted."
UPDATE_FAILED_MESSAGE = "Failed to update mapping"
DELETE_FAILED_MESSAGE = "Failed to delete mapping"
DELETE_CONFIRM_PROMPT = "Delete mapping {target}?"

RefreshCallback = Callable[[], Awaitable[None]]


def _raise_for_mutation(response: TransportResponse, default_message: str) -> None:
    if response.ok:
        return
    text = response.text().strip()
    raise MutationError(text or default_message)


class EditWorkflow:
    """Single edit dialog: open, validate, submit, close.

    At most one mapping is active at a time. A failed submit leaves the
    dialog open with the label as typed.
    """

    def __init__(
        self,
        api: MappingApi,
        notifier: Notifier,
        refresh: RefreshCallback,
    ) -> None:
        self.api = api
        self.notifier = notifier
        self._refresh = refresh
        self.active_mapping: Mapping | None = None
        self.label = ""
        self.title = ""
        self.is_open = False

    def open(self, mapping: Mapping) -> None:
        self.active_mapping = mapping
        self.title = mapping.title
        self.label = mapping.arr_name or ""
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self.active_mapping = None

    async def save(self) -> bool:
        """Submit the label field; True once the dialog closed on success."""
        mapping = self.active_mapping
        if mapping is None:
            return False
        arr_name = self.label.strip()
        if not arr_name:
            self.notifier.notify(ARR_REQUIRED_MESSAGE, "warning")
            return False

        response = await self.api.upsert(mapping.to_upsert_payload(arr_name))
        _raise_for_mutation(response, UPDATE_FAILED_MESSAGE)

        logger.debug(f"Updated mapping {mapping.infohash} -> {arr_name}")
        self.notifier.notify(UPDATED_MESSAGE, "success")
        self.close()
        await self._refresh()
        return True


class DeleteWorkflow:
    """Confirmation-gated delete by infohash."""

    def __init__(
        self,
        api: MappingApi,
        notifier: Notifier,
        confirmer: Confirmer,
        refresh: RefreshCallback,
    ) -> None:
        self.api = api
        self.notifier = notifier
        self.confirmer = confirmer
        self._refresh = refresh

    async def delete(self, infohash: str | None, target: str | None = None) -> bool:
        """Delete by infohash; `target` names the mapping in the prompt."""
        if not infohash:
            return False
        prompt = DELETE_CONFIRM_PROMPT.format(target=target or infohash)
        if not await self.confirmer.confirm(prompt):
            logger.debug(f"Delete of {infohash} declined")
            return False

        response = await self.api.delete(infohash)
        _raise_for_mutation(response, DELETE_FAILED_MESSAGE)

        logger.debug(f"Deleted mapping {infohash}")
        self.notifier.notify(DELETED_MESSAGE, "success")
        await self._refresh()
        return True
