from sqlalchemy import Column, String, Integer, Float, ForeignKey, JSON
from pulse_onboarding.database import Base, TimestampMixin
from pulse_onboarding.models.user import generate_id


class UserMarketConfig(Base, TimestampMixin):
    __tablename__ = "user_market_config"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    primary_territory = Column(String, nullable=True)
    state = Column(String, nullable=True)
    city = Column(String, nullable=True)
    zip_codes = Column(JSON, default=list, nullable=False)
    price_range_min = Column(Float, default=0, nullable=False)
    price_range_max = Column(Float, default=0, nullable=False)
    property_types = Column(JSON, default=list, nullable=False)
    client_types = Column(JSON, default=list, nullable=False)
    experience_level = Column(String, default="mid", nullable=False)
    years_experience = Column(Integer, default=0, nullable=False)
    specializations = Column(JSON, default=list, nullable=False)
    average_closings_per_year = Column(Integer, default=0, nullable=False)
    average_commission = Column(Float, default=0, nullable=False)
    market_areas = Column(JSON, default=list, nullable=False)
    team_role = Column(String, default="individual", nullable=False)
