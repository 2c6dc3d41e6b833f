"""
In-memory therapist roster.

In production this is a document-database collection; the async surface
matches a remote client so callers await every operation.
"""

import logging
from typing import Any, Optional

from clinic_scheduler.schemas.therapist_schema import Therapist

logger = logging.getLogger(__name__)


class InMemoryTherapistStore:
    def __init__(self) -> None:
        self._therapists: dict[str, Therapist] = {}

    async def list_all(self) -> list[Therapist]:
        """All therapists ordered by name."""
        return [t.model_copy() for t in sorted(self._therapists.values(), key=lambda t: t.name)]

    async def get(self, therapist_id: str) -> Optional[Therapist]:
        therapist = self._therapists.get(therapist_id)
        return therapist.model_copy() if therapist else None

    async def create(self, therapist: Therapist) -> Therapist:
        self._therapists[therapist.id] = therapist.model_copy()
        logger.debug("Therapist stored: %s (%s)", therapist.name, therapist.id)
        return therapist.model_copy()

    async def update(self, therapist_id: str, patch: dict[str, Any]) -> Optional[Therapist]:
        current = self._therapists.get(therapist_id)
        if current is None:
            return None
        updated = Therapist.model_validate({**current.model_dump(), **patch, "id": therapist_id})
        self._therapists[therapist_id] = updated
        return updated.model_copy()

    async def delete(self, therapist_id: str) -> bool:
        return self._therapists.pop(therapist_id, None) is not None
