from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query
from pulse_onboarding.dependencies import get_current_user, get_entity_store, get_state_manager
from pulse_onboarding.schemas.onboarding import (
    FlowDecision,
    FlowState,
    GettingStartedSummary,
    InteractionRequest,
    NotificationsResponse,
    OnboardingResponse,
    Phase,
    StepSaveResult,
    ValidationResponse,
)
from pulse_onboarding.services.entity_store import EntityStore
from pulse_onboarding.services.onboarding_flow import PhaseOrchestrator
from pulse_onboarding.services.onboarding_state import OnboardingStateManager
from pulse_onboarding.services import onboarding_validator as validator
from pulse_onboarding.services import setup_notifications
from pulse_onboarding.core.logging_config import logger

router = APIRouter()


def _orchestrator(
    user: Dict[str, Any],
    store: EntityStore,
    state_manager: OnboardingStateManager,
    state: Optional[FlowState] = None
) -> PhaseOrchestrator:
    return PhaseOrchestrator(
        state_manager=state_manager,
        load_context=lambda: store.load_context(user),
        user_id=user["id"],
        state=state,
    )


@router.get("", response_model=OnboardingResponse)
def get_onboarding_status(
    current_user: Dict[str, Any] = Depends(get_current_user),
    state_manager: OnboardingStateManager = Depends(get_state_manager)
):
    """
    Get onboarding progress for the current user.
    Creates an empty progress record if one doesn't exist.
    """
    return state_manager.ensure_progress(current_user["id"])


@router.get("/validation", response_model=ValidationResponse)
def get_validation(
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store)
):
    """
    Completion flags, the phase the user still needs and whether the header
    should show the onboarding button.
    """
    context = store.load_context(current_user)
    args = (context.user, context.onboarding, context.subscription)
    return ValidationResponse(
        validation=validator.validate_onboarding_completion(*args),
        required_phase=validator.determine_required_phase(*args),
        show_onboarding_button=validator.should_show_onboarding_button(*args),
        consistency=validator.validate_consistency(*args),
        phase_status={phase: validator.get_phase_status(context.onboarding, phase) for phase in Phase},
    )


@router.get("/notifications", response_model=NotificationsResponse)
def get_notifications(
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store)
):
    """Pending setup items, highest priority first."""
    context = store.load_context(current_user)
    notifications = setup_notifications.get_setup_notifications(
        context.user, context.onboarding, context.subscription
    )
    return NotificationsResponse(
        notifications=notifications,
        total_count=setup_notifications.get_total_notification_count(notifications),
        high_priority_count=setup_notifications.get_high_priority_count(notifications),
    )


@router.get("/getting-started", response_model=GettingStartedSummary)
def get_getting_started(
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store)
):
    context = store.load_context(current_user)
    return setup_notifications.build_getting_started(
        context.user, context.onboarding, context.subscription,
        store.storage_for(current_user["id"])
    )


@router.post("/getting-started/dismiss", response_model=GettingStartedSummary)
def dismiss_getting_started(
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store)
):
    logger.info(f"Dismissing getting started widget for user {current_user['id']}")
    storage = store.storage_for(current_user["id"])
    setup_notifications.dismiss_getting_started(storage)
    context = store.load_context(current_user)
    return setup_notifications.build_getting_started(
        context.user, context.onboarding, context.subscription, storage
    )


@router.post("/steps/{step_name}", response_model=StepSaveResult)
def save_step(
    step_name: str,
    data: Dict[str, Any] = Body(default={}),
    current_user: Dict[str, Any] = Depends(get_current_user),
    state_manager: OnboardingStateManager = Depends(get_state_manager)
):
    """
    Save the data of one onboarding step and record the step as completed.

    Failures come back as success=false with the error message; the step
    can simply be submitted again.
    """
    logger.info(f"Saving onboarding step {step_name} for user {current_user['id']}")
    return state_manager.save_step_data(step_name, data, current_user["id"])


@router.get("/flow", response_model=FlowDecision)
def start_flow(
    phase: Optional[str] = Query(None),
    force_dashboard: Optional[str] = Query(None, alias="force-dashboard"),
    skip_onboarding: Optional[str] = Query(None, alias="skip-onboarding"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store),
    state_manager: OnboardingStateManager = Depends(get_state_manager)
):
    """
    Start the onboarding flow.

    Args:
        phase: Optional phase to open (core, agents or callcenter)
        force_dashboard: Emergency override, any value skips onboarding
        skip_onboarding: Emergency override, any value skips onboarding
    """
    orchestrator = _orchestrator(current_user, store, state_manager)
    return orchestrator.initialize(
        phase_override=phase,
        force_dashboard=bool(force_dashboard),
        skip_onboarding=bool(skip_onboarding),
    )


@router.post("/flow/next", response_model=FlowDecision)
def next_step(
    state: FlowState,
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store),
    state_manager: OnboardingStateManager = Depends(get_state_manager)
):
    return _orchestrator(current_user, store, state_manager, state).advance()


@router.post("/flow/back", response_model=FlowDecision)
def previous_step(
    state: FlowState,
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store),
    state_manager: OnboardingStateManager = Depends(get_state_manager)
):
    return _orchestrator(current_user, store, state_manager, state).back()


@router.post("/flow/interaction", response_model=FlowDecision)
def record_interaction(
    request: InteractionRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: EntityStore = Depends(get_entity_store),
    state_manager: OnboardingStateManager = Depends(get_state_manager)
):
    orchestrator = _orchestrator(current_user, store, state_manager, request.state)
    return orchestrator.record_interaction(request.kind)
