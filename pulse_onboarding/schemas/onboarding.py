from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Phase(str, Enum):
    CORE = "core"
    AGENTS = "agents"
    CALLCENTER = "callcenter"


class PhaseStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InteractionKind(str, Enum):
    CLICK = "click"
    KEYDOWN = "keydown"
    TOUCHSTART = "touchstart"


class OnboardingResponse(BaseModel):
    """Response schema for onboarding progress"""
    id: str
    user_id: str
    core_completed: bool = False
    profile_completed: bool = False
    market_setup_completed: bool = False
    preferences_completed: bool = False
    goals_setup_completed: bool = False
    agent_intelligence_completed: bool = False
    agent_onboarding_completed: bool = False
    call_center_onboarding_completed: bool = False
    completed_steps: List[str] = []
    completion_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ValidationResult(BaseModel):
    core_complete: bool = False
    agent_complete: bool = False
    call_center_complete: bool = False
    is_subscriber: bool = False
    has_call_center: bool = False
    agent_required: bool = False
    call_center_required: bool = False
    is_fully_complete: bool = False
    missing_data: bool = False


class ConsistencyReport(BaseModel):
    is_valid: bool
    issues: List[str] = []


class ValidationResponse(BaseModel):
    validation: ValidationResult
    required_phase: Optional[Phase] = None
    show_onboarding_button: bool
    consistency: ConsistencyReport
    phase_status: Dict[Phase, PhaseStatus]


class SetupNotification(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    priority: Priority
    action_url: str
    action_label: str
    category: str
    dismissible: bool = False


class NotificationsResponse(BaseModel):
    notifications: List[SetupNotification]
    total_count: int
    high_priority_count: int


class GettingStartedSummary(BaseModel):
    visible: bool
    dismissed: bool
    progress_percentage: int
    pending_count: int
    top_priority: List[SetupNotification]


class StepSaveResult(BaseModel):
    success: bool
    error: Optional[str] = None


class StepDefinition(BaseModel):
    id: str
    title: str


class FlowState(BaseModel):
    """
    Position of a user inside the onboarding flow.

    The client keeps this between requests and sends it back with every
    transition, so the server holds no per-session state.
    """
    phase: Optional[Phase] = None
    step_index: int = Field(0, ge=0)
    initial_phase: Optional[Phase] = None
    initializing: bool = True
    has_interacted: bool = False
    redirect_attempted: bool = False
    started_at: Optional[float] = None


class FlowDecision(BaseModel):
    state: FlowState
    steps: List[StepDefinition] = []
    current_step: Optional[StepDefinition] = None
    is_first_step: bool = True
    is_last_step: bool = False
    redirect: bool = False
    redirect_to: Optional[str] = None


class InteractionRequest(BaseModel):
    state: FlowState
    kind: InteractionKind
