from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from pulse_onboarding.database import Base, TimestampMixin
from pulse_onboarding.models.user import generate_id


class UserOnboarding(Base, TimestampMixin):
    """
    Tracks onboarding progress for each user.
    One row per user; phase flags only ever go from False to True.
    """
    __tablename__ = "user_onboarding"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)

    core_completed = Column(Boolean, default=False, nullable=False)
    profile_completed = Column(Boolean, default=False, nullable=False)
    market_setup_completed = Column(Boolean, default=False, nullable=False)
    preferences_completed = Column(Boolean, default=False, nullable=False)
    goals_setup_completed = Column(Boolean, default=False, nullable=False)
    agent_intelligence_completed = Column(Boolean, default=False, nullable=False)
    agent_onboarding_completed = Column(Boolean, default=False, nullable=False)
    call_center_onboarding_completed = Column(Boolean, default=False, nullable=False)

    completed_steps = Column(JSON, default=list, nullable=False)  # ordered, no duplicates
    completion_date = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="onboarding")
