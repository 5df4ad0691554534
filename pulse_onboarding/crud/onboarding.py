from sqlalchemy.orm import Session
from sqlalchemy import select, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from pulse_onboarding.crud.base import CRUDBase
from pulse_onboarding.models.onboarding import UserOnboarding


class CRUDOnboarding(CRUDBase[UserOnboarding]):
    """CRUD operations for UserOnboarding model."""

    def get_or_create(self, db: Session, user_id: str) -> UserOnboarding:
        """
        Get the onboarding record for a user, creating an empty one if it doesn't exist.
        Uses INSERT...ON CONFLICT DO NOTHING where the dialect supports it so two
        concurrent first reads still end up with a single row.
        """
        dialect = db.get_bind().dialect.name
        values = dict(user_id=user_id, completed_steps=[])

        if dialect == "postgresql":
            db.execute(pg_insert(UserOnboarding).values(**values).on_conflict_do_nothing(index_elements=["user_id"]))
        elif dialect == "sqlite":
            db.execute(sqlite_insert(UserOnboarding).values(**values).on_conflict_do_nothing(index_elements=["user_id"]))
        elif self.get_by_user_id(db, user_id) is None:
            try:
                db.execute(insert(UserOnboarding).values(**values))
            except IntegrityError:
                db.rollback()
        db.commit()

        result = db.execute(
            select(UserOnboarding).where(UserOnboarding.user_id == user_id)
        )
        return result.scalar_one()


# Create singleton instance
onboarding = CRUDOnboarding(UserOnboarding)
