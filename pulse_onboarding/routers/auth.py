from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr
from pulse_onboarding.database import get_db
from pulse_onboarding.core.security import verify_password, create_access_token
from pulse_onboarding.crud.user import user as user_crud

router = APIRouter()


class VerifyCredentialsRequest(BaseModel):
    email: EmailStr
    password: str


class VerifyCredentialsResponse(BaseModel):
    user: dict
    access_token: str


@router.post("/verify-credentials", response_model=VerifyCredentialsResponse)
def verify_credentials(credentials: VerifyCredentialsRequest, db: Session = Depends(get_db)):
    """
    Exchange email and password for a bearer token.

    Only used with the "database" entity backend; with the "platform"
    backend users sign in on the platform and bring its token.

    Raises:
        HTTPException: If credentials are invalid or the user is inactive
    """
    user = user_crud.get_by_email(db, email=credentials.email)

    # Platform-provisioned users have no local password
    if not user or not user.hashed_password or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    claims = {
        "id": user.id,
        "email": user.email,
        "subscription_tier": user.subscription_tier,
    }
    access_token = create_access_token(data=claims)

    return VerifyCredentialsResponse(user=claims, access_token=access_token)
