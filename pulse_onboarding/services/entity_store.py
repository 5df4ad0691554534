"""
Entity store used by the onboarding services.

The onboarding logic only needs `entities.<Type>.filter/create/update`, a way
to resolve the signed-in user, and a per-user upsert. Two stores provide that:
SqlEntityStore over the local database and PlatformEntityStore over the
hosted platform API.
"""

import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional
from jose import JWTError
from sqlalchemy.orm import Session
from pulse_onboarding import crud
from pulse_onboarding.crud.base import CRUDBase
from pulse_onboarding.core.logging_config import logger
from pulse_onboarding.core.security import verify_token
from pulse_onboarding.services.platform_client import PlatformClient
from pulse_onboarding.utils.kv_storage import KeyValueStorage, InMemoryStorage, UserSettingStorage

# Columns never handed out of the store
_PRIVATE_FIELDS = {"hashed_password"}


class AuthenticationError(Exception):
    """The bearer token does not identify an active user."""


@dataclass
class OnboardingContext:
    """The three records every onboarding decision is made from."""
    user: Optional[Dict[str, Any]]
    onboarding: Optional[Dict[str, Any]]
    subscription: Optional[Dict[str, Any]]


_locks_guard = threading.Lock()
# user_id -> [lock, holders]; an entry is dropped once nobody holds or waits on it
_user_locks: Dict[str, list] = {}
# Process-local UI flags for users whose records live on the platform
_platform_flags: "OrderedDict[str, InMemoryStorage]" = OrderedDict()
_PLATFORM_FLAGS_MAX_USERS = 10_000


@contextmanager
def user_write_lock(user_id: str) -> Iterator[None]:
    """
    Serialize read-modify-write sequences for one user within this process.

    Filter-then-create is not atomic against the platform API, so every
    onboarding write for a user goes through this lock.
    """
    with _locks_guard:
        entry = _user_locks.get(user_id)
        if entry is None:
            # Reentrant: save_step_data creates the progress record under the same lock
            entry = _user_locks[user_id] = [threading.RLock(), 0]
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _user_locks[user_id]


def record_to_dict(db_obj) -> Dict[str, Any]:
    return {
        column.name: getattr(db_obj, column.name)
        for column in db_obj.__table__.columns
        if column.name not in _PRIVATE_FIELDS
    }


class SqlEntityCollection:
    """Entity collection backed by a CRUD object and a database session."""

    def __init__(self, db: Session, crud_obj: CRUDBase):
        self.db = db
        self.crud = crud_obj

    def filter(self, criteria: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [record_to_dict(obj) for obj in self.crud.filter(self.db, **criteria)]

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return record_to_dict(self.crud.create(self.db, obj_in=record))

    def update(self, id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        db_obj = self.crud.get(self.db, id)
        if db_obj is None:
            raise LookupError(f"{self.crud.model.__name__} {id} not found")
        return record_to_dict(self.crud.update(self.db, db_obj=db_obj, obj_in=patch))

    def upsert_by_user_id(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return record_to_dict(self.crud.upsert_by_user_id(self.db, user_id=user_id, values=values))


class PlatformEntityCollection:
    """Entity collection forwarding to the platform API."""

    def __init__(self, resource):
        self.resource = resource

    def filter(self, criteria: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.resource.filter(criteria)

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return self.resource.create(record)

    def update(self, id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        return self.resource.update(id, patch)

    def upsert_by_user_id(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        # Callers hold user_write_lock, which keeps this to one writer per user
        existing = self.resource.filter({"user_id": user_id})
        if existing:
            return self.resource.update(existing[0]["id"], values)
        return self.resource.create({"user_id": user_id, **values})


class Entities:
    """Attribute access by entity type name, e.g. `entities.UserOnboarding`."""

    def __init__(self, collections: Dict[str, Any]):
        self._collections = collections

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._collections[name]
        except KeyError:
            raise AttributeError(f"Unknown entity type: {name}") from None


class EntityStore:
    """Operations shared by both stores."""

    entities: Entities

    def current_user(self, token: str) -> Dict[str, Any]:
        raise NotImplementedError

    def storage_for(self, user_id: str) -> KeyValueStorage:
        raise NotImplementedError

    def write_lock(self, user_id: str):
        return user_write_lock(user_id)

    def first(self, entity: str, user_id: str) -> Optional[Dict[str, Any]]:
        records = getattr(self.entities, entity).filter({"user_id": user_id})
        return records[0] if records else None

    def load_context(self, user: Optional[Dict[str, Any]]) -> OnboardingContext:
        """Fetch the onboarding progress and agent subscription for a user."""
        if not user:
            return OnboardingContext(user=None, onboarding=None, subscription=None)
        return OnboardingContext(
            user=user,
            onboarding=self.first("UserOnboarding", user["id"]),
            subscription=self.first("UserAgentSubscription", user["id"]),
        )

    def ensure_onboarding(self, user_id: str) -> Dict[str, Any]:
        """Return the user's progress record, creating an empty one on first use."""
        with self.write_lock(user_id):
            existing = self.first("UserOnboarding", user_id)
            if existing:
                return existing
            logger.info(f"Creating onboarding record for user={user_id}")
            return self.entities.UserOnboarding.create({"user_id": user_id, "completed_steps": []})


class SqlEntityStore(EntityStore):
    def __init__(self, db: Session):
        self.db = db
        self.entities = Entities({
            "User": SqlEntityCollection(db, crud.user),
            "UserOnboarding": SqlEntityCollection(db, crud.onboarding),
            "UserAgentSubscription": SqlEntityCollection(db, crud.agent_subscription),
            "UserMarketConfig": SqlEntityCollection(db, crud.market_config),
            "AgentIntelligenceProfile": SqlEntityCollection(db, crud.agent_profile),
            "UserPreferences": SqlEntityCollection(db, crud.preferences),
        })

    def current_user(self, token: str) -> Dict[str, Any]:
        try:
            payload = verify_token(token)
        except JWTError as e:
            raise AuthenticationError("Could not validate credentials") from e

        user_id = payload.get("id")
        if user_id is None:
            raise AuthenticationError("Could not validate credentials")

        db_user = crud.user.get(self.db, str(user_id))
        if db_user is None:
            raise AuthenticationError("Could not validate credentials")
        return record_to_dict(db_user)

    def ensure_onboarding(self, user_id: str) -> Dict[str, Any]:
        # The database can do this atomically
        return record_to_dict(crud.onboarding.get_or_create(self.db, user_id))

    def storage_for(self, user_id: str) -> KeyValueStorage:
        return UserSettingStorage(self.db, user_id)


class PlatformEntityStore(EntityStore):
    def __init__(self, client: PlatformClient):
        self.client = client
        self.entities = Entities({
            name: PlatformEntityCollection(getattr(client.entities, name))
            for name in (
                "User",
                "UserOnboarding",
                "UserAgentSubscription",
                "UserMarketConfig",
                "AgentIntelligenceProfile",
                "UserPreferences",
            )
        })

    def current_user(self, token: str) -> Dict[str, Any]:
        user = self.client.auth.me(token)
        if not user or not user.get("id"):
            raise AuthenticationError("Could not validate credentials")
        return user

    def storage_for(self, user_id: str) -> KeyValueStorage:
        with _locks_guard:
            storage = _platform_flags.pop(user_id, None) or InMemoryStorage()
            _platform_flags[user_id] = storage
            while len(_platform_flags) > _PLATFORM_FLAGS_MAX_USERS:
                _platform_flags.popitem(last=False)
            return storage
