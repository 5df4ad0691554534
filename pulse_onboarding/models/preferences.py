from sqlalchemy import Column, String, Boolean, ForeignKey
from pulse_onboarding.database import Base, TimestampMixin
from pulse_onboarding.models.user import generate_id


class UserPreferences(Base, TimestampMixin):
    __tablename__ = "user_preferences"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    coaching_style = Column(String, default="balanced", nullable=False)
    activity_mode = Column(String, default="get_moving", nullable=False)
    daily_reminders = Column(Boolean, default=True, nullable=False)
    weekly_reports = Column(Boolean, default=True, nullable=False)
    market_updates = Column(Boolean, default=True, nullable=False)
    email_notifications = Column(Boolean, default=True, nullable=False)
    timezone = Column(String, default="America/New_York", nullable=False)
    selected_palette_id = Column(String, nullable=True)
