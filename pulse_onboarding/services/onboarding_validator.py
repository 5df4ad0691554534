"""
Onboarding completion rules.

Pure functions over the user, the onboarding progress record and the agent
subscription. Nothing here touches storage.
"""
from typing import Any, Dict, Optional
from pulse_onboarding.core.logging_config import logger
from pulse_onboarding.schemas.onboarding import (
    ConsistencyReport,
    Phase,
    PhaseStatus,
    ValidationResult,
)
from pulse_onboarding.services.onboarding_steps import PHASE_MEMBERSHIP

Record = Optional[Dict[str, Any]]

# Tiers for which the AI agents phase is required
AGENT_TIERS = ("Subscriber", "Admin")

PHASE_FLAGS = {
    Phase.CORE: "core_completed",
    Phase.AGENTS: "agent_onboarding_completed",
    Phase.CALLCENTER: "call_center_onboarding_completed",
}

_PHASE_STATUS_ORDER = [PhaseStatus.NOT_STARTED, PhaseStatus.IN_PROGRESS, PhaseStatus.COMPLETE]

_UNSET = object()


def is_subscriber(user: Record) -> bool:
    return bool(user) and user.get("subscription_tier") in AGENT_TIERS


def has_active_subscription(subscription: Record) -> bool:
    return bool(subscription) and subscription.get("status") == "active"


def validate_onboarding_completion(user: Record, onboarding: Record, subscription: Record = None) -> ValidationResult:
    """
    Work out which phases are required and whether each one is done.

    A missing user or onboarding record yields an all-false result with
    missing_data set, so callers hold off on redirect decisions instead of
    treating absent data as complete.
    """
    if not user or not onboarding:
        logger.warning(
            f"[onboarding_validator] Missing required data: has_user={bool(user)}, has_onboarding={bool(onboarding)}"
        )
        return ValidationResult(missing_data=True)

    core_complete = onboarding.get("core_completed") or False
    agent_complete = onboarding.get("agent_onboarding_completed") or False
    call_center_complete = onboarding.get("call_center_onboarding_completed") or False

    agent_required = is_subscriber(user)
    call_center_required = bool(subscription and subscription.get("plan_type")) and has_active_subscription(subscription)

    is_fully_complete = (
        core_complete
        and (not agent_required or agent_complete)
        and (not call_center_required or call_center_complete)
    )

    return ValidationResult(
        core_complete=core_complete,
        agent_complete=agent_complete if agent_required else True,
        call_center_complete=call_center_complete if call_center_required else True,
        is_subscriber=agent_required,
        has_call_center=call_center_required,
        agent_required=agent_required,
        call_center_required=call_center_required,
        is_fully_complete=is_fully_complete,
        missing_data=False,
    )


def determine_required_phase(user: Record, onboarding: Record, subscription: Record = None) -> Optional[Phase]:
    """First incomplete required phase in order core, agents, callcenter; None if none."""
    validation = validate_onboarding_completion(user, onboarding, subscription)

    if validation.missing_data:
        return None
    if not validation.core_complete:
        return Phase.CORE
    if validation.agent_required and not validation.agent_complete:
        return Phase.AGENTS
    if validation.call_center_required and not validation.call_center_complete:
        return Phase.CALLCENTER
    return None


def should_show_onboarding_button(user: Record, onboarding: Record, subscription: Record = None) -> bool:
    """Whether the header should offer a way back into onboarding."""
    if not user or not onboarding:
        return False

    if not onboarding.get("core_completed"):
        return True
    if is_subscriber(user) and not onboarding.get("agent_onboarding_completed"):
        return True
    if has_active_subscription(subscription) and not onboarding.get("call_center_onboarding_completed"):
        return True
    return False


def validate_consistency(user: Record, onboarding: Record, subscription: Any = _UNSET) -> ConsistencyReport:
    """
    List problems with the inputs themselves.

    `subscription` should be passed explicitly, as None when the user has
    none; leaving it out is reported.
    """
    issues = []

    if not user:
        issues.append("User data missing")
    if not onboarding:
        issues.append("Onboarding data missing")
    else:
        for field in PHASE_FLAGS.values():
            if onboarding.get(field) is None:
                issues.append(f"Onboarding field {field} is undefined")
    if subscription is _UNSET:
        issues.append("Agent subscription is undefined (should be None or a record)")

    if issues:
        logger.warning(f"[onboarding_validator] Data consistency issues: {issues}")

    return ConsistencyReport(is_valid=not issues, issues=issues)


def get_phase_status(onboarding: Record, phase: Phase) -> PhaseStatus:
    """
    Status of one phase.

    Complete when the phase flag is set, in progress when at least one of
    the phase's steps has been recorded, otherwise not started.
    """
    if not onboarding:
        return PhaseStatus.NOT_STARTED
    if onboarding.get(PHASE_FLAGS[phase]):
        return PhaseStatus.COMPLETE

    completed_steps = set(onboarding.get("completed_steps") or [])
    if completed_steps & set(PHASE_MEMBERSHIP[phase]):
        return PhaseStatus.IN_PROGRESS
    return PhaseStatus.NOT_STARTED


def advance_phase_status(current: PhaseStatus, target: PhaseStatus) -> PhaseStatus:
    """Move towards `target` but never backwards."""
    if _PHASE_STATUS_ORDER.index(target) > _PHASE_STATUS_ORDER.index(current):
        return target
    return current
