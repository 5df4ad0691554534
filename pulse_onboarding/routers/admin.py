from fastapi import APIRouter, Depends, HTTPException, status, Header
from sqlalchemy.orm import Session
from pulse_onboarding.database import get_db
from pulse_onboarding.core.config import settings
from pulse_onboarding.core.logging_config import logger
from pulse_onboarding import crud
from pulse_onboarding.schemas.user import (
    SubscriptionResponse,
    SubscriptionUpdate,
    UserCreate,
    UserResponse,
)

router = APIRouter()


def verify_admin_key(x_admin_key: str = Header(...)):
    """Verify the admin API key from the x-admin-key header."""
    if not settings.ADMIN_API_KEY or x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin API key"
        )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    request: UserCreate,
    db: Session = Depends(get_db),
    _: None = Depends(verify_admin_key)
):
    """
    Create a user that can sign in with email and password.

    Protected by x-admin-key header.

    Raises:
        HTTPException: If email already exists
    """
    existing_user = crud.user.get_by_email(db, email=request.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists"
        )

    try:
        db_user = crud.user.create_with_password(
            db,
            email=request.email,
            password=request.password,
            full_name=request.full_name,
            subscription_tier=request.subscription_tier,
            is_active=request.is_active if request.is_active is not None else True,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"Created user {db_user.id} ({db_user.subscription_tier})")
    return db_user


@router.put("/users/{user_id}/subscription", response_model=SubscriptionResponse)
def set_subscription(
    user_id: str,
    request: SubscriptionUpdate,
    db: Session = Depends(get_db),
    _: None = Depends(verify_admin_key)
):
    """
    Create or replace the agent subscription of a user.

    Protected by x-admin-key header.
    """
    if crud.user.get(db, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    subscription = crud.agent_subscription.upsert_by_user_id(
        db, user_id=user_id, values=request.model_dump()
    )
    logger.info(f"Subscription for user {user_id} set to {request.status} ({request.plan_type})")
    return subscription
