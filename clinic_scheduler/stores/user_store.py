"""In-memory user-role records keyed by identity-provider uid."""

from typing import Optional

from clinic_scheduler.schemas.patient_schema import AppUser


class InMemoryUserStore:
    def __init__(self) -> None:
        self._users: dict[str, AppUser] = {}

    async def get(self, uid: str) -> Optional[AppUser]:
        user = self._users.get(uid)
        return user.model_copy() if user else None

    async def put(self, user: AppUser) -> AppUser:
        self._users[user.uid] = user.model_copy()
        return user.model_copy()

    async def link_patient(self, uid: str, patient_id: str) -> Optional[AppUser]:
        current = self._users.get(uid)
        if current is None:
            return None
        updated = current.model_copy(update={"patient_id": patient_id})
        self._users[uid] = updated
        return updated.model_copy()
