from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional

class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    subscription_tier: str = "Free"
    is_active: Optional[bool] = True

class UserCreate(UserBase):
    password: str

class UserResponse(UserBase):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    brokerage: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class SubscriptionUpdate(BaseModel):
    status: str
    plan_type: Optional[str] = None

class SubscriptionResponse(SubscriptionUpdate):
    id: str
    user_id: str

    model_config = ConfigDict(from_attributes=True)
