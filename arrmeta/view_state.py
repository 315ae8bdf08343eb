"""Loading / Content / Error state for the mapping page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ViewPhase = Literal["loading", "content", "error"]


@dataclass
class ViewState:
    phase: ViewPhase = "loading"
    error_message: str | None = None

    def begin_refresh(self) -> None:
        self.phase = "loading"
        self.error_message = None

    def refresh_succeeded(self) -> None:
        self.phase = "content"
        self.error_message = None

    def refresh_failed(self, message: str) -> None:
        self.phase = "error"
        self.error_message = message

    @property
    def is_loading(self) -> bool:
        return self.phase == "loading"

    @property
    def is_content(self) -> bool:
        return self.phase == "content"

    @property
    def is_error(self) -> bool:
        return self.phase == "error"
