"""
Decision logic of the tier-aware onboarding flow.

The orchestrator moves a user through the screens of the current phase,
records a finished phase through the state manager and decides when to send
the user on to the main application. Its state is a FlowState, which the
web client keeps between requests.
"""
import time
from typing import Callable, Optional
from pulse_onboarding.core.config import settings
from pulse_onboarding.core.logging_config import logger
from pulse_onboarding.schemas.onboarding import (
    FlowDecision,
    FlowState,
    InteractionKind,
    Phase,
)
from pulse_onboarding.services.entity_store import OnboardingContext
from pulse_onboarding.services.onboarding_state import OnboardingStateManager
from pulse_onboarding.services.onboarding_steps import steps_for
from pulse_onboarding.services.onboarding_validator import (
    determine_required_phase,
    validate_onboarding_completion,
)
from pulse_onboarding.utils.latch import OneShotLatch


class InteractionTracker:
    """
    Flips to "interacted" on the first click, keydown or touch, or once the
    delay has passed since the flow started, whichever comes first.
    """

    def __init__(
        self,
        started_at: float,
        delay_seconds: float,
        clock: Callable[[], float] = time.time,
        interacted: bool = False
    ):
        self.started_at = started_at
        self.delay_seconds = delay_seconds
        self.clock = clock
        self.latch = OneShotLatch(fired=interacted)

    @property
    def has_interacted(self) -> bool:
        return self.latch.fired

    def poll(self) -> bool:
        """Fire the latch if the delay has elapsed. Returns True if this call fired it."""
        if self.clock() - self.started_at >= self.delay_seconds:
            if self.latch.try_fire():
                logger.info("[onboarding_flow] User considered interacted after delay")
                return True
        return False

    def record(self, kind: InteractionKind) -> bool:
        """Register a user interaction. Returns True if this call fired the latch."""
        if self.latch.try_fire():
            logger.info(f"[onboarding_flow] User interaction detected: {InteractionKind(kind).value}")
            return True
        return False


class PhaseOrchestrator:
    def __init__(
        self,
        state_manager: OnboardingStateManager,
        load_context: Callable[[], OnboardingContext],
        user_id: str,
        state: Optional[FlowState] = None,
        clock: Callable[[], float] = time.time,
        interaction_delay: Optional[float] = None,
        redirect_path: Optional[str] = None
    ):
        """
        Args:
            state_manager: Used to record a finished phase
            load_context: Returns fresh user/onboarding/subscription records
            user_id: User going through onboarding
            state: State from a previous request, None to start over
            clock: Wall clock in seconds
            interaction_delay: Seconds after which the user counts as interacted
            redirect_path: Where to send users who are done
        """
        self.state_manager = state_manager
        self.load_context = load_context
        self.user_id = user_id
        self.clock = clock
        self.redirect_path = redirect_path or settings.MAIN_APP_PATH

        state = state.model_copy() if state else FlowState()
        if state.started_at is None:
            state.started_at = clock()
        self.state = state

        delay = settings.ONBOARDING_INTERACTION_DELAY_SECONDS if interaction_delay is None else interaction_delay
        self.interaction = InteractionTracker(state.started_at, delay, clock, interacted=state.has_interacted)
        self.redirect_latch = OneShotLatch(fired=state.redirect_attempted)

    def initialize(
        self,
        phase_override: Optional[str] = None,
        force_dashboard: bool = False,
        skip_onboarding: bool = False
    ) -> FlowDecision:
        """
        Pick the starting phase.

        An explicit, valid phase wins; otherwise the first incomplete
        required phase is used. The emergency overrides skip onboarding
        entirely.
        """
        if force_dashboard or skip_onboarding:
            logger.warning(f"[onboarding_flow] Emergency override for user={self.user_id}, forcing main app")
            self.state.initializing = False
            return self._decision(redirect=self.redirect_latch.try_fire())

        context = self.load_context()
        validation = validate_onboarding_completion(context.user, context.onboarding, context.subscription)
        if validation.missing_data:
            logger.info(f"[onboarding_flow] Waiting for onboarding data for user={self.user_id}")
            self.state.initializing = True
            return self._decision()

        if phase_override in {p.value for p in Phase}:
            phase = Phase(phase_override)
        else:
            phase = determine_required_phase(context.user, context.onboarding, context.subscription)

        logger.info(f"[onboarding_flow] Initial phase for user={self.user_id}: {phase.value if phase else None}")
        self.state.phase = phase
        self.state.initial_phase = phase
        self.state.step_index = 0
        self.state.initializing = False
        return self.check_redirect(context)

    def advance(self) -> FlowDecision:
        """Go to the next screen, finishing the phase after its last one."""
        self.interaction.poll()
        steps = steps_for(self.state.phase)

        if not steps:
            return self.check_redirect()

        if self.state.step_index < len(steps) - 1:
            self.state.step_index += 1
            return self._decision()

        phase = self.state.phase
        logger.info(f"[onboarding_flow] Completing phase {phase.value} for user={self.user_id}")
        try:
            self.state_manager.mark_phase_completed(phase, self.user_id)
        except Exception as e:
            logger.error(f"[onboarding_flow] Error completing phase {phase.value}: {type(e).__name__}: {str(e)}")
            return self._decision()

        context = self.load_context()
        validation = validate_onboarding_completion(context.user, context.onboarding, context.subscription)

        if validation.is_fully_complete:
            logger.info(f"[onboarding_flow] All phases complete for user={self.user_id}")
            self.state.phase = None
            self.state.step_index = 0
            return self._decision(redirect=self.redirect_latch.try_fire())

        self.state.phase = determine_required_phase(context.user, context.onboarding, context.subscription)
        self.state.step_index = 0
        return self._decision()

    def back(self) -> FlowDecision:
        if self.state.step_index > 0:
            self.state.step_index -= 1
        return self._decision()

    def record_interaction(self, kind: InteractionKind) -> FlowDecision:
        self.interaction.record(kind)
        return self.check_redirect()

    def check_redirect(self, context: Optional[OnboardingContext] = None) -> FlowDecision:
        """
        Decide whether to leave onboarding for the main application.

        Only fires once per flow, and never while data is missing.
        """
        self.interaction.poll()
        if self.state.initializing or self.redirect_latch.fired:
            return self._decision()

        context = context or self.load_context()
        validation = validate_onboarding_completion(context.user, context.onboarding, context.subscription)
        if validation.missing_data:
            return self._decision()

        if validation.is_fully_complete and (self.interaction.has_interacted or self.state.initial_phase is None):
            if self.redirect_latch.try_fire():
                logger.info(f"[onboarding_flow] Onboarding complete, redirecting user={self.user_id}")
                return self._decision(redirect=True)

        if self.state.phase is None and determine_required_phase(context.user, context.onboarding, context.subscription) is None:
            if self.redirect_latch.try_fire():
                logger.info(f"[onboarding_flow] No phase left, redirecting user={self.user_id}")
                return self._decision(redirect=True)

        return self._decision()

    def _decision(self, redirect: bool = False) -> FlowDecision:
        self.state.has_interacted = self.interaction.has_interacted
        self.state.redirect_attempted = self.redirect_latch.fired

        steps = steps_for(self.state.phase)
        current = steps[self.state.step_index] if self.state.step_index < len(steps) else None
        return FlowDecision(
            state=self.state.model_copy(),
            steps=steps,
            current_step=current,
            is_first_step=self.state.step_index == 0,
            is_last_step=bool(steps) and self.state.step_index == len(steps) - 1,
            redirect=redirect,
            redirect_to=self.redirect_path if redirect else None,
        )
