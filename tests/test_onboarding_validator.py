import pytest
from pulse_onboarding.schemas.onboarding import Phase, PhaseStatus
from pulse_onboarding.services.onboarding_validator import (
    advance_phase_status,
    determine_required_phase,
    get_phase_status,
    should_show_onboarding_button,
    validate_consistency,
    validate_onboarding_completion,
)

FREE_USER = {"id": "u1", "subscription_tier": "Free"}
SUBSCRIBER = {"id": "u2", "subscription_tier": "Subscriber"}
ADMIN = {"id": "u3", "subscription_tier": "Admin"}
ACTIVE_PLAN = {"status": "active", "plan_type": "call_center_pro"}


def progress(**flags):
    record = {
        "core_completed": False,
        "agent_onboarding_completed": False,
        "call_center_onboarding_completed": False,
        "completed_steps": [],
    }
    record.update(flags)
    return record


@pytest.mark.parametrize("user,onboarding", [
    (None, progress()),
    (FREE_USER, None),
    (None, None),
])
def test_missing_data_is_never_complete(user, onboarding):
    result = validate_onboarding_completion(user, onboarding, None)

    assert result.missing_data is True
    assert result.is_fully_complete is False
    assert result.core_complete is False
    assert result.agent_complete is False
    assert result.call_center_complete is False
    assert determine_required_phase(user, onboarding, None) is None


def test_free_user_with_core_done_is_fully_complete():
    result = validate_onboarding_completion(FREE_USER, progress(core_completed=True), None)

    assert result.missing_data is False
    assert result.is_fully_complete is True
    assert result.agent_required is False
    assert result.call_center_required is False


def test_inactive_subscription_does_not_require_call_center():
    subscription = {"status": "inactive", "plan_type": "call_center_pro"}
    result = validate_onboarding_completion(FREE_USER, progress(core_completed=True), subscription)

    assert result.call_center_required is False
    assert result.is_fully_complete is True


def test_active_subscription_without_plan_does_not_require_call_center():
    result = validate_onboarding_completion(FREE_USER, progress(core_completed=True), {"status": "active"})

    assert result.call_center_required is False


def test_core_missing_requires_core():
    assert determine_required_phase(FREE_USER, {"core_completed": False}, None) == Phase.CORE


def test_subscriber_needs_agents_after_core():
    onboarding = {"core_completed": True, "agent_onboarding_completed": False}

    assert determine_required_phase(SUBSCRIBER, onboarding, None) == Phase.AGENTS
    assert determine_required_phase(ADMIN, onboarding, None) == Phase.AGENTS


def test_call_center_required_last():
    onboarding = progress(core_completed=True, agent_onboarding_completed=True)
    result = validate_onboarding_completion(SUBSCRIBER, onboarding, ACTIVE_PLAN)

    assert result.call_center_required is True
    assert result.is_fully_complete is False
    assert determine_required_phase(SUBSCRIBER, onboarding, ACTIVE_PLAN) == Phase.CALLCENTER


def test_everything_done_requires_nothing():
    onboarding = progress(
        core_completed=True,
        agent_onboarding_completed=True,
        call_center_onboarding_completed=True,
    )

    assert validate_onboarding_completion(SUBSCRIBER, onboarding, ACTIVE_PLAN).is_fully_complete is True
    assert determine_required_phase(SUBSCRIBER, onboarding, ACTIVE_PLAN) is None


def test_onboarding_button():
    assert should_show_onboarding_button(None, progress(), None) is False
    assert should_show_onboarding_button(FREE_USER, progress(), None) is True
    assert should_show_onboarding_button(FREE_USER, progress(core_completed=True), None) is False
    assert should_show_onboarding_button(SUBSCRIBER, progress(core_completed=True), None) is True
    assert should_show_onboarding_button(FREE_USER, progress(core_completed=True), ACTIVE_PLAN) is True


def test_consistency_report():
    assert validate_consistency(FREE_USER, progress(), None).is_valid is True

    report = validate_consistency(None, {"completed_steps": []})
    assert report.is_valid is False
    assert "User data missing" in report.issues
    assert "Onboarding field core_completed is undefined" in report.issues
    assert any("subscription" in issue.lower() for issue in report.issues)


def test_phase_status_from_progress():
    onboarding = progress(core_completed=True, completed_steps=["welcome", "agent_intro"])

    assert get_phase_status(onboarding, Phase.CORE) == PhaseStatus.COMPLETE
    assert get_phase_status(onboarding, Phase.AGENTS) == PhaseStatus.IN_PROGRESS
    assert get_phase_status(onboarding, Phase.CALLCENTER) == PhaseStatus.NOT_STARTED
    assert get_phase_status(None, Phase.CORE) == PhaseStatus.NOT_STARTED


def test_phase_status_never_moves_backwards():
    assert advance_phase_status(PhaseStatus.NOT_STARTED, PhaseStatus.IN_PROGRESS) == PhaseStatus.IN_PROGRESS
    assert advance_phase_status(PhaseStatus.COMPLETE, PhaseStatus.IN_PROGRESS) == PhaseStatus.COMPLETE
    assert advance_phase_status(PhaseStatus.IN_PROGRESS, PhaseStatus.NOT_STARTED) == PhaseStatus.IN_PROGRESS
