from functools import lru_cache
from typing import Any, Dict
from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from pulse_onboarding.database import get_db
from pulse_onboarding.core.config import settings
from pulse_onboarding.services.entity_store import (
    AuthenticationError,
    EntityStore,
    PlatformEntityStore,
    SqlEntityStore,
)
from pulse_onboarding.services.onboarding_state import OnboardingStateManager
from pulse_onboarding.services.platform_client import PlatformClient, PlatformError


@lru_cache
def get_platform_client() -> PlatformClient:
    """One shared HTTP client (and connection pool) per process."""
    return PlatformClient()


def get_entity_store(db: Session = Depends(get_db)) -> EntityStore:
    """
    Entity store selected by ENTITY_BACKEND.

    "database" keeps every record in the local database, "platform"
    forwards to the hosted platform API.
    """
    if settings.ENTITY_BACKEND == "platform":
        return PlatformEntityStore(get_platform_client())
    return SqlEntityStore(db)


def get_state_manager(store: EntityStore = Depends(get_entity_store)) -> OnboardingStateManager:
    return OnboardingStateManager(store)


def get_current_user(
    request: Request,
    store: EntityStore = Depends(get_entity_store)
) -> Dict[str, Any]:
    """
    Resolve the bearer token in the Authorization header to a user record.

    Args:
        request: FastAPI Request to extract Authorization header
        store: Entity store that knows how to validate the token

    Returns:
        User record (id, email, subscription_tier, ...)

    Raises:
        HTTPException: If token is invalid or user is inactive
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise credentials_exception

    token = authorization.replace("Bearer ", "")

    try:
        user = store.current_user(token)
    except (AuthenticationError, PlatformError):
        raise credentials_exception

    if user.get("is_active") is False:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user
