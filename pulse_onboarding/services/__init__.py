from pulse_onboarding.services.entity_store import EntityStore, SqlEntityStore, PlatformEntityStore
from pulse_onboarding.services.onboarding_state import OnboardingStateManager
from .onboarding_flow import PhaseOrchestrator

__all__ = ["EntityStore", "SqlEntityStore", "PlatformEntityStore", "OnboardingStateManager", "PhaseOrchestrator"]
