"""
Key-value storage for small UI flags (e.g. a dismissed widget).

Callers receive a storage object instead of reaching for browser storage,
so the decision logic can run and be tested anywhere.
"""
from typing import Dict, Optional, Protocol
from sqlalchemy.orm import Session
from pulse_onboarding.crud.user_setting import user_setting as user_setting_crud


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class UserSettingStorage:
    """Storage scoped to one user, persisted in the user_setting table."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def get(self, key: str) -> Optional[str]:
        return user_setting_crud.get_value(self.db, self.user_id, key)

    def set(self, key: str, value: str) -> None:
        user_setting_crud.set_value(self.db, self.user_id, key, value)
