"""
Payloads submitted by the onboarding steps.

Fields left out by the client fall back to the defaults below. Both
snake_case and camelCase keys are accepted since the web client sends
camelCase.
"""
from typing import Any, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

_TEXT_TYPES = (str, Optional[str])


class StepData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        """
        Treat null, and "" for fields with a non-empty default or a non-text
        type, like an omitted field. An explicit False is kept.
        """
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value

        default = field.get_default(call_default_factory=True)
        if value is None:
            return default
        if isinstance(value, str) and value == "":
            if default is not None or field.annotation not in _TEXT_TYPES:
                return default
        return value


class MarketConfigData(StepData):
    primary_territory: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("primary_territory", "primaryTerritory", "territory"),
    )
    state: Optional[str] = None
    city: Optional[str] = None
    zip_codes: List[str] = []
    price_range_min: float = 0
    price_range_max: float = 0
    property_types: List[str] = []
    client_types: List[str] = []
    experience_level: str = "mid"
    years_experience: int = 0
    specializations: List[str] = []
    average_closings_per_year: int = 0
    average_commission: float = 0
    market_areas: List[str] = []
    team_role: str = "individual"


class AgentProfileData(StepData):
    experience_level: Optional[str] = None
    work_commitment: Optional[str] = None
    business_structure: Optional[str] = None
    work_schedule: Optional[str] = None
    database_size: Optional[str] = None
    sphere_warmth: Optional[str] = None
    previous_year_transactions: int = 0
    previous_year_volume: float = 0
    average_price_point: float = 0
    business_consistency: Optional[str] = None
    biggest_challenges: List[str] = []
    growth_timeline: Optional[str] = None
    learning_preference: Optional[str] = None
    agent_tier: Optional[str] = None
    network_strength_score: float = 1
    capacity_multiplier: float = 1
    complexity_preference: int = 2


class PreferencesData(StepData):
    coaching_style: str = "balanced"
    activity_mode: str = "get_moving"
    daily_reminders: bool = True
    weekly_reports: bool = True
    market_updates: bool = True
    email_notifications: bool = True
    timezone: str = "America/New_York"
    selected_palette_id: Optional[str] = None


class ProfileData(StepData):
    first_name: str
    last_name: str
    phone: Optional[str] = None
    license_number: Optional[str] = None
    license_state: Optional[str] = None
    brokerage: Optional[str] = None
    years_experience: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}"
