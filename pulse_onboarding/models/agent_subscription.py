from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from pulse_onboarding.database import Base, TimestampMixin
from pulse_onboarding.models.user import generate_id


class UserAgentSubscription(Base, TimestampMixin):
    __tablename__ = "user_agent_subscription"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    status = Column(String, nullable=False, default="inactive")  # active, inactive, cancelled
    plan_type = Column(String, nullable=True)

    user = relationship("User", back_populates="agent_subscription")
