from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from pulse_onboarding.core.config import settings
from pulse_onboarding.core.logging_config import logger
from pulse_onboarding.schemas.onboarding import Phase, StepSaveResult
from pulse_onboarding.schemas.step_data import (
    AgentProfileData,
    MarketConfigData,
    PreferencesData,
    ProfileData,
)
from pulse_onboarding.services.entity_store import EntityStore
from pulse_onboarding.services.onboarding_steps import PHASE_STEP_GROUPS, STEP_ITEM_FLAGS
from pulse_onboarding.services.onboarding_validator import PHASE_FLAGS


class OnboardingRecordNotFound(LookupError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_phase_completion(
    completed_steps: List[str],
    onboarding: Dict[str, Any],
    policy: Optional[str] = None,
    now: Callable[[], datetime] = _now
) -> Dict[str, Any]:
    """
    Work out which phase flags should flip to True.

    With the "any" policy one recorded step of a phase completes it; with
    "all" every step group of the phase must have been recorded. Flags that
    are already True are left out, so nothing is ever reset.

    Args:
        completed_steps: Steps recorded so far, including the new one
        onboarding: Current UserOnboarding record
        policy: "any" or "all" (defaults to PHASE_COMPLETION_POLICY)
        now: Clock used for the core completion date

    Returns:
        Updates to apply to the UserOnboarding record
    """
    policy = policy or settings.PHASE_COMPLETION_POLICY
    done = set(completed_steps)
    updates = {}

    for phase, groups in PHASE_STEP_GROUPS.items():
        flag = PHASE_FLAGS[phase]
        if onboarding.get(flag):
            continue

        hits = [bool(done.intersection(group)) for group in groups]
        reached = all(hits) if policy == "all" else any(hits)
        if reached:
            updates[flag] = True
            if phase == Phase.CORE:
                updates["completion_date"] = now()

    return updates


class OnboardingStateManager:
    """
    Persists step data and tracks completion across the onboarding phases.

    Every write for a user happens under the store's per-user lock.
    """

    def __init__(self, store: EntityStore, now: Callable[[], datetime] = _now):
        self.store = store
        self.now = now

    def save_step_data(self, step_name: str, data: Optional[Dict[str, Any]], user_id: str) -> StepSaveResult:
        """
        Save the data submitted by one onboarding step and record the step.

        The progress record is created if the user has none yet. Errors are
        logged and returned, never raised, so the caller can retry the same
        step; upserts make a retry safe.

        Args:
            step_name: Step identifier (e.g. 'market_setup')
            data: Data submitted by the step
            user_id: User ID

        Returns:
            StepSaveResult with success flag and error message
        """
        data = data or {}
        try:
            with self.store.write_lock(user_id):
                # The first completed step creates the progress record
                self.store.ensure_onboarding(user_id)

                if step_name in ("market_setup", "market_business_setup"):
                    self.save_market_config(data, user_id)
                elif step_name in ("agent_intelligence", "agent_intelligence_setup"):
                    self.save_agent_profile(data, user_id)
                elif step_name in ("preferences", "brand_preferences_setup"):
                    self.save_preferences(data, user_id)
                elif step_name in ("profile", "profile_setup"):
                    self.save_profile(data, user_id)
                elif step_name in ("goals_setup", "goals_planning"):
                    # Goals are stored by the goal planner, nothing to save here
                    pass
                else:
                    logger.warning(f"[onboarding_state] Unknown step: {step_name}, skipping entity save")

                self._mark_step_completed(step_name, user_id)

            return StepSaveResult(success=True)
        except Exception as e:
            logger.error(f"[onboarding_state] Failed to save {step_name} for user={user_id}: {type(e).__name__}: {str(e)}")
            return StepSaveResult(success=False, error=str(e))

    def save_market_config(self, data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        values = MarketConfigData.model_validate(data).model_dump()
        return self.store.entities.UserMarketConfig.upsert_by_user_id(user_id, values)

    def save_agent_profile(self, data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        values = AgentProfileData.model_validate(data).model_dump()
        values["survey_completed_at"] = self.now()
        return self.store.entities.AgentIntelligenceProfile.upsert_by_user_id(user_id, values)

    def save_preferences(self, data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        values = PreferencesData.model_validate(data).model_dump()
        return self.store.entities.UserPreferences.upsert_by_user_id(user_id, values)

    def save_profile(self, data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        profile = ProfileData.model_validate(data)
        patch = profile.model_dump(exclude_none=True)
        patch["first_name"] = profile.first_name.strip()
        patch["last_name"] = profile.last_name.strip()
        patch["full_name"] = profile.full_name
        return self.store.entities.User.update(user_id, patch)

    def mark_step_completed(self, step_name: str, user_id: str) -> Dict[str, Any]:
        """
        Record a step as completed and update the derived flags.

        Recording the same step twice leaves a single entry.

        Raises:
            OnboardingRecordNotFound: If the user has no onboarding record
        """
        with self.store.write_lock(user_id):
            return self._mark_step_completed(step_name, user_id)

    def _mark_step_completed(self, step_name: str, user_id: str) -> Dict[str, Any]:
        current = self._load_onboarding(user_id)

        existing_steps = list(current.get("completed_steps") or [])
        completed_steps = existing_steps if step_name in existing_steps else existing_steps + [step_name]

        updates: Dict[str, Any] = {"completed_steps": completed_steps}

        item_flag = STEP_ITEM_FLAGS.get(step_name)
        if item_flag and not current.get(item_flag):
            updates[item_flag] = True

        updates.update(calculate_phase_completion(completed_steps, current, now=self.now))

        logger.info(f"[onboarding_state] Step {step_name} recorded for user={user_id}: {sorted(k for k in updates if k != 'completed_steps')}")
        return self.store.entities.UserOnboarding.update(current["id"], updates)

    def mark_phase_completed(self, phase: Phase, user_id: str) -> Dict[str, Any]:
        """
        Set a phase flag once the user finished its last screen.

        Raises:
            OnboardingRecordNotFound: If the user has no onboarding record
        """
        phase = Phase(phase)
        with self.store.write_lock(user_id):
            current = self._load_onboarding(user_id)
            flag = PHASE_FLAGS[phase]
            if current.get(flag):
                return current

            updates: Dict[str, Any] = {flag: True}
            if phase == Phase.CORE:
                updates["completion_date"] = self.now()

            logger.info(f"[onboarding_state] Phase {phase.value} completed for user={user_id}")
            return self.store.entities.UserOnboarding.update(current["id"], updates)

    def ensure_progress(self, user_id: str) -> Dict[str, Any]:
        return self.store.ensure_onboarding(user_id)

    def _load_onboarding(self, user_id: str) -> Dict[str, Any]:
        current = self.store.first("UserOnboarding", user_id)
        if current is None:
            logger.warning(f"[onboarding_state] No onboarding record found for user {user_id}")
            raise OnboardingRecordNotFound(f"No onboarding record found for user {user_id}")
        return current
