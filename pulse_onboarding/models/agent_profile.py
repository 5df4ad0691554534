from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, JSON
from pulse_onboarding.database import Base, TimestampMixin
from pulse_onboarding.models.user import generate_id


class AgentIntelligenceProfile(Base, TimestampMixin):
    """Answers to the agent intelligence survey."""
    __tablename__ = "agent_intelligence_profile"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    experience_level = Column(String, nullable=True)
    work_commitment = Column(String, nullable=True)
    business_structure = Column(String, nullable=True)
    work_schedule = Column(String, nullable=True)
    database_size = Column(String, nullable=True)
    sphere_warmth = Column(String, nullable=True)
    previous_year_transactions = Column(Integer, default=0, nullable=False)
    previous_year_volume = Column(Float, default=0, nullable=False)
    average_price_point = Column(Float, default=0, nullable=False)
    business_consistency = Column(String, nullable=True)
    biggest_challenges = Column(JSON, default=list, nullable=False)
    growth_timeline = Column(String, nullable=True)
    learning_preference = Column(String, nullable=True)
    agent_tier = Column(String, nullable=True)
    network_strength_score = Column(Float, default=1, nullable=False)
    capacity_multiplier = Column(Float, default=1, nullable=False)
    complexity_preference = Column(Integer, default=2, nullable=False)
    survey_completed_at = Column(DateTime(timezone=True), nullable=True)
