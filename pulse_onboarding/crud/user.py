from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from pulse_onboarding.crud.base import CRUDBase
from pulse_onboarding.models.user import User
from pulse_onboarding.core.security import get_password_hash


class CRUDUser(CRUDBase[User]):
    """
    CRUD operations for User model.

    Users are not keyed by user_id, so only get/update from CRUDBase apply;
    creation hashes the password first.
    """

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        Args:
            db: Database session
            email: User email

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(User.email == email)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create_with_password(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        subscription_tier: str = "Free",
        is_active: bool = True
    ) -> User:
        """
        Create a new user with hashed password.

        Raises:
            ValueError: If a user with this email already exists
        """
        db_user = User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
            subscription_tier=subscription_tier,
            is_active=is_active
        )
        db.add(db_user)

        try:
            db.commit()
            db.refresh(db_user)
        except IntegrityError as e:
            db.rollback()
            if "unique" in str(e).lower():
                raise ValueError(f"User with email {email} already exists")
            raise e

        return db_user


# Create singleton instance
user = CRUDUser(User)
