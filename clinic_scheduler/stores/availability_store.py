"""
In-memory availability windows, keyed by window id.

In production this is the ``availability`` document collection queried
by therapist id.
"""

import logging
from typing import Any, Optional

from clinic_scheduler.schemas.therapist_schema import AvailabilityWindow

logger = logging.getLogger(__name__)


class InMemoryAvailabilityStore:
    def __init__(self) -> None:
        self._windows: dict[str, AvailabilityWindow] = {}

    async def list_windows(self, therapist_id: str) -> list[AvailabilityWindow]:
        return [w.model_copy() for w in self._windows.values() if w.therapist_id == therapist_id]

    async def list_all_windows(self) -> list[AvailabilityWindow]:
        return [w.model_copy() for w in self._windows.values()]

    async def create_window(self, window: AvailabilityWindow) -> AvailabilityWindow:
        self._windows[window.id] = window.model_copy()
        return window.model_copy()

    async def update_window(
        self, window_id: str, patch: dict[str, Any]
    ) -> Optional[AvailabilityWindow]:
        current = self._windows.get(window_id)
        if current is None:
            return None
        updated = AvailabilityWindow.model_validate(
            {**current.model_dump(), **patch, "id": window_id}
        )
        self._windows[window_id] = updated
        return updated.model_copy()

    async def delete_window(self, window_id: str) -> bool:
        return self._windows.pop(window_id, None) is not None

    async def delete_all_windows_for(self, therapist_id: str) -> int:
        """Batch-delete every window owned by a therapist; returns the count."""
        doomed = [wid for wid, w in self._windows.items() if w.therapist_id == therapist_id]
        for wid in doomed:
            del self._windows[wid]
        logger.debug("Deleted %d windows for therapist %s", len(doomed), therapist_id)
        return len(doomed)
