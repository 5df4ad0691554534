from typing import Optional
from sqlalchemy.orm import Session
from pulse_onboarding.crud.base import CRUDBase
from pulse_onboarding.models.user_setting import UserSetting


class CRUDUserSetting(CRUDBase[UserSetting]):
    """Per-user key/value flags."""

    def get_value(self, db: Session, user_id: str, key: str) -> Optional[str]:
        records = self.filter(db, user_id=user_id, key=key)
        return records[0].value if records else None

    def set_value(self, db: Session, user_id: str, key: str, value: str) -> UserSetting:
        return self.upsert(db, match={"user_id": user_id, "key": key}, values={"value": value})


user_setting = CRUDUserSetting(UserSetting)
