from uuid import uuid4
from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from pulse_onboarding.database import Base, TimestampMixin


def generate_id() -> str:
    return uuid4().hex


class User(Base, TimestampMixin):
    __tablename__ = "user"

    id = Column(String(32), primary_key=True, default=generate_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    license_number = Column(String, nullable=True)
    license_state = Column(String, nullable=True)
    brokerage = Column(String, nullable=True)
    years_experience = Column(Integer, nullable=True)
    subscription_tier = Column(String, nullable=False, default="Free")  # Free, Subscriber, Admin
    is_active = Column(Boolean, default=True)

    onboarding = relationship("UserOnboarding", back_populates="user", uselist=False)
    agent_subscription = relationship("UserAgentSubscription", back_populates="user", uselist=False)
