from .agent_profile import AgentIntelligenceProfile
from .agent_subscription import UserAgentSubscription
from .market_config import UserMarketConfig
from .onboarding import UserOnboarding
from .preferences import UserPreferences
from .user import User
from .user_setting import UserSetting
