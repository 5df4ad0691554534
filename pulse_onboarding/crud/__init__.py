from pulse_onboarding.crud.base import CRUDBase
from pulse_onboarding.crud.onboarding import onboarding
from pulse_onboarding.crud.user import user
from .user_setting import user_setting
from pulse_onboarding.models.agent_profile import AgentIntelligenceProfile
from pulse_onboarding.models.agent_subscription import UserAgentSubscription
from pulse_onboarding.models.market_config import UserMarketConfig
from pulse_onboarding.models.preferences import UserPreferences

# Step-data entities need nothing beyond the generic per-user operations
market_config = CRUDBase(UserMarketConfig)
agent_profile = CRUDBase(AgentIntelligenceProfile)
preferences = CRUDBase(UserPreferences)
agent_subscription = CRUDBase(UserAgentSubscription)

__all__ = [
    "CRUDBase",
    "onboarding",
    "user",
    "user_setting",
    "market_config",
    "agent_profile",
    "preferences",
    "agent_subscription",
]
