from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    ENVIRONMENT: str = "development"  # "development" or "production"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    ADMIN_API_KEY: str

    # Where entity records live: the local database or the hosted platform
    ENTITY_BACKEND: Literal["database", "platform"] = "database"
    PLATFORM_API_URL: str = "https://app.base44.com/api"
    PLATFORM_APP_ID: Optional[str] = None
    PLATFORM_SERVICE_TOKEN: Optional[str] = None
    PLATFORM_TIMEOUT_SECONDS: float = 30.0

    # "any": one step of a phase completes it, "all": every step group is needed
    PHASE_COMPLETION_POLICY: Literal["any", "all"] = "any"
    ONBOARDING_INTERACTION_DELAY_SECONDS: float = 3.0
    MAIN_APP_PATH: str = "/Dashboard"

    @property
    def is_production(self):
        return self.ENVIRONMENT == "production"

    @property
    def platform_app_url(self):
        return f"{self.PLATFORM_API_URL.rstrip('/')}/apps/{self.PLATFORM_APP_ID}"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
