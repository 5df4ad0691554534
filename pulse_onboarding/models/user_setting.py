from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from pulse_onboarding.database import Base, TimestampMixin


class UserSetting(Base, TimestampMixin):
    """Small per-user key/value flags, e.g. dismissed widgets."""
    __tablename__ = "user_setting"
    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_user_setting_user_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    key = Column(String, nullable=False)
    value = Column(Text, nullable=True)
