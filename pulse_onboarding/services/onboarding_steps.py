"""
Step catalogue for the onboarding phases.

Step names are the identifiers stored in UserOnboarding.completed_steps.
Several screens were renamed over time, so a group lists every name that
counts for the same step.
"""
from typing import Dict, List, Tuple
from pulse_onboarding.schemas.onboarding import Phase, StepDefinition

# Screens shown by the onboarding flow, in order
PHASE_STEPS: Dict[Phase, List[StepDefinition]] = {
    Phase.CORE: [
        StepDefinition(id="welcome", title="Welcome"),
        StepDefinition(id="market_business_setup", title="Market & Business"),
        StepDefinition(id="brand_preferences_setup", title="Brand Preferences"),
        StepDefinition(id="core_confirmation", title="Confirmation"),
    ],
    Phase.AGENTS: [
        StepDefinition(id="agent_intro", title="Meet Your AI Team"),
        StepDefinition(id="integrations_setup", title="Connect Your Tools"),
        StepDefinition(id="agent_customization", title="Customize Your Agents"),
        StepDefinition(id="agent_test_mode", title="Test & Launch"),
    ],
    Phase.CALLCENTER: [
        StepDefinition(id="phone_number_setup", title="Get Your Number"),
        StepDefinition(id="voice_selection", title="Choose Your Voice"),
        StepDefinition(id="caller_identity", title="Set Your Identity"),
        StepDefinition(id="google_workspace", title="Connect Calendar"),
        StepDefinition(id="call_center_confirmation", title="You are All Set!"),
    ],
}

# Step groups counted towards each phase's completion
PHASE_STEP_GROUPS: Dict[Phase, List[Tuple[str, ...]]] = {
    Phase.CORE: [
        ("welcome",),
        ("market_setup", "market_business_setup"),
        ("agent_intelligence", "agent_intelligence_setup"),
        ("preferences", "brand_preferences_setup"),
    ],
    Phase.AGENTS: [
        ("agent_intro",),
        ("integrations_setup",),
        ("agent_customization",),
        ("agent_disclosure", "agent_test_mode"),
    ],
    Phase.CALLCENTER: [
        ("phone_number_setup",),
        ("voice_selection",),
        ("caller_identity",),
        ("google_workspace",),
        ("call_center_confirmation",),
    ],
}

PHASE_MEMBERSHIP: Dict[Phase, Tuple[str, ...]] = {
    phase: tuple(step for group in groups for step in group)
    for phase, groups in PHASE_STEP_GROUPS.items()
}

# Per-item flags set when one of their steps is recorded
STEP_ITEM_FLAGS: Dict[str, str] = {
    "profile": "profile_completed",
    "profile_setup": "profile_completed",
    "market_setup": "market_setup_completed",
    "market_business_setup": "market_setup_completed",
    "preferences": "preferences_completed",
    "brand_preferences_setup": "preferences_completed",
    "goals_setup": "goals_setup_completed",
    "goals_planning": "goals_setup_completed",
    "agent_intelligence": "agent_intelligence_completed",
    "agent_intelligence_setup": "agent_intelligence_completed",
}


def steps_for(phase) -> List[StepDefinition]:
    if phase is None:
        return []
    return PHASE_STEPS.get(Phase(phase), [])
